"""
cli.py
Terminal front end for the fair dice game: parses die specs from the command line, prompts the user at every
suspend point of the engine and prints what the engine reports. Also offers a `verify` command to check a
revealed key and number against a commitment.

Usage:
    fair-dice 2,2,4,4,9,9 6,8,1,1,8,6 7,5,3,7,5,3
    fair-dice verify --hmac <HMAC> --key <KEY> --number <N>
"""

import argparse
import datetime
import hashlib
import logging
import os
import sys
from typing import Callable, List, Optional, Sequence

from tabulate import tabulate

from fair_dice.core.config import GameConfig, ConfigurationError
from fair_dice.core.die import Die
from fair_dice.core.actions import Action, ChooseNumber, Cancel, Help
from fair_dice.core.engine import GameEngine, IllegalMoveError, FIRST_MOVE_ROUND, COMPUTER_ROLL_ROUND
from fair_dice.core.commitment import verify_commitment
from fair_dice.core.secure_random import EntropyFailure, RandomSource
from fair_dice.core.state import InputRequest, GUESS, SELECT_DIE, COMPUTER, USER
from fair_dice.agents import AGENT_MAP
from fair_dice.transcript.events import GameEvent
from fair_dice.transcript.recorder import InMemoryRecorder, record_engine_events
from fair_dice.transcript import serializer

logger = logging.getLogger(__name__)

EXAMPLE = "2,2,4,4,9,9 6,8,1,1,8,6 7,5,3,7,5,3"


def parse_dice(args: Sequence[str], min_dice: int = 3) -> List[Die]:
    """
    Turn command-line die specs like "2,2,4,4,9,9" into Die objects.
    Args:
        args (sequence[str]): One comma-separated face list per die.
        min_dice (int): Fewest dice accepted.
    Returns:
        list[Die]: Parsed dice in order.
    Raises:
        ConfigurationError: If there are too few specs or one is not a list of integers.
    """
    if len(args) < min_dice:
        raise ConfigurationError(f"You need at least {min_dice} dice. Example: fair-dice {EXAMPLE}")
    dice = []
    for arg in args:
        try:
            faces = [int(part) for part in arg.split(",")]
        except ValueError:
            raise ConfigurationError(f"Bad die format: '{arg}'. Use numbers like 2,2,4,4,9,9") from None
        dice.append(Die(faces))
    return dice


def parse_choice(text: str, config: GameConfig) -> Optional[Action]:
    """
    Map one line of user input to an Action.
    Returns:
        Action|None: Cancel, Help, ChooseNumber, or None when the text means nothing.
    """
    text = text.strip().upper()
    if text == config.cancel_token.upper():
        return Cancel()
    if text == config.help_token.upper():
        return Help()
    try:
        return ChooseNumber(int(text))
    except ValueError:
        return None


def format_probability_table(matrix) -> str:
    """
    Render a probability matrix as a grid of percentages; rows are the die being rolled, '-' on the diagonal.
    """
    labels = [f"Die {i}" for i in range(len(matrix))]
    table_data = []
    for label, row in zip(labels, matrix):
        table_data.append([label] + ["-" if p is None else f"{float(p) * 100:.2f}%" for p in row])
    return "Win Chances\n" + tabulate(table_data, headers=["Row beats >"] + labels, tablefmt="grid")


def describe_event(event: GameEvent) -> List[str]:
    """
    Lines to print for one engine event.
    """
    p = event.payload
    t = event.event_type
    if t == "CommitmentDisclosed":
        if p["round"] == FIRST_MOVE_ROUND:
            intro = "Let's decide who picks first."
        elif p["round"] == COMPUTER_ROLL_ROUND:
            intro = "My turn to roll."
        else:
            intro = "Your turn to roll."
        return [intro, f"I picked a number between 0 and {p['max_value']}. HMAC: {p['hmac']}"]
    if t == "NumberRevealed":
        if p["round"] == FIRST_MOVE_ROUND:
            return [f"My number was: {p['computer_number']} (Key: {p['key']})"]
        return [
            f"My number: {p['computer_number']} (Key: {p['key']})",
            f"Result: {p['computer_number']} + {p['user_number']} = {p['result']} (mod {p['modulus']})",
        ]
    if t == "FirstMoveDecided":
        return ["I pick first!" if p["first_mover"] == COMPUTER else "You pick first!"]
    if t == "DieSelected":
        faces = ",".join(str(f) for f in p["faces"])
        return [f"I pick die: [{faces}]" if event.player_type == COMPUTER else f"You picked: [{faces}]"]
    if t == "RollResolved":
        return [f"My roll: {p['face']}" if event.player_type == COMPUTER else f"Your roll: {p['face']}"]
    if t == "HelpRequested":
        return [format_probability_table(p["matrix"])]
    if t == "GameEnded":
        c, u = p["computer_roll"], p["user_roll"]
        if p["winner"] == USER:
            return [f"You win! ({u} > {c})"]
        if p["winner"] == COMPUTER:
            return [f"I win! ({c} > {u})"]
        return [f"It's a tie! ({u} = {c})"]
    if t == "GameCancelled":
        return ["Game cancelled."]
    if t == "GameAborted":
        return [f"Game aborted: {p['reason']}"]
    return []


def describe_request(request: InputRequest, dice: Sequence[Die], config: GameConfig) -> List[str]:
    """
    Prompt text and the list of options for a pending request.
    """
    if request.kind == GUESS:
        lines = ["Guess my number:"] + [f"{i} - {i}" for i in range(request.low, request.high + 1)]
    elif request.kind == SELECT_DIE:
        lines = ["Pick your die:"] + [f"{i} - {die}" for i, die in enumerate(dice)]
    else:
        lines = [f"Add your number (mod {request.high + 1}):"]
        lines += [f"{i} - {i}" for i in range(request.low, request.high + 1)]
    lines.append(f"{config.cancel_token} - exit")
    lines.append(f"{config.help_token} - help")
    return lines


def play(dice: Sequence[Die], config: Optional[GameConfig] = None,
         input_fn: Callable[[str], str] = input, output_fn: Callable[[str], None] = print,
         source: Optional[RandomSource] = None, recorder: Optional[InMemoryRecorder] = None) -> GameEngine:
    """
    Play one game in the terminal.
    Args:
        dice (sequence[Die]): Dice to play with.
        config (GameConfig|None): Game configuration.
        input_fn (callable): Reads one line for a prompt; EOF cancels the game.
        output_fn (callable): Prints one chunk of text.
        source (RandomSource|None): Secure byte source, mainly for tests.
        recorder (InMemoryRecorder|None): Receives every event of the game.
    Returns:
        GameEngine: The finished engine, for inspection.
    Raises:
        ConfigurationError, EntropyFailure: Propagated to the caller.
    """
    config = config or GameConfig()
    engine = GameEngine(dice, config, source=source)
    recorder = recorder if recorder is not None else InMemoryRecorder()
    timestamp = datetime.datetime.now(datetime.timezone.utc).isoformat()
    game_id = hashlib.sha256(f"cli_{timestamp}_{os.getpid()}".encode()).hexdigest()[:16]

    def drain():
        for event in record_engine_events(engine, recorder, game_id):
            for line in describe_event(event):
                output_fn(line)

    logger.debug("game %s started", game_id)
    request = engine.start()
    shown = None
    while request is not None:
        drain()
        if request is not shown:
            for line in describe_request(request, engine.session.dice, config):
                output_fn(line)
            shown = request
        try:
            text = input_fn("Your choice: ")
        except EOFError:
            text = config.cancel_token
        action = parse_choice(text, config)
        if action is None:
            output_fn(f"Pick a number between {request.low} and {request.high}, "
                      f"{config.cancel_token} to exit, or {config.help_token} for help.")
            continue
        try:
            request = engine.submit(action)
        except IllegalMoveError as e:
            output_fn(f"{e}, {config.cancel_token} to exit, or {config.help_token} for help.")
    drain()
    return engine


def build_play_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fair-dice", description="Provably fair non-transitive dice game")
    parser.add_argument("dice", nargs="*", help=f"Die faces, comma separated. Example: {EXAMPLE}")
    parser.add_argument("--agent", type=str, default="random", help=f"Computer die choice: {', '.join(sorted(AGENT_MAP))}")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the computer's die choice only")
    parser.add_argument("--digest", type=str, default="sha3_256", help="Hash algorithm for the HMAC commitments")
    parser.add_argument("--transcript", action="store_true", help="Print the game's events as JSON at the end")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Logging level")
    return parser


def build_verify_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fair-dice verify", description="Check a revealed key and number against an HMAC")
    parser.add_argument("--hmac", required=True, help="HMAC shown before you answered")
    parser.add_argument("--key", required=True, help="Key revealed after the round")
    parser.add_argument("--number", type=int, required=True, help="Number revealed after the round")
    parser.add_argument("--digest", type=str, default="sha3_256", help="Hash algorithm of the HMAC")
    return parser


def main(argv: Optional[Sequence[str]] = None, input_fn=input, output_fn=print) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    if argv and argv[0] == "verify":
        args = build_verify_parser().parse_args(argv[1:])
        try:
            ok = verify_commitment(args.hmac, args.key, args.number, args.digest)
        except ValueError as e:
            output_fn(f"Error: {e}")
            return 1
        output_fn("Commitment verified." if ok else "Commitment does NOT match!")
        return 0 if ok else 1

    args = build_play_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    recorder = InMemoryRecorder()
    try:
        config = GameConfig(rng_seed=args.seed, agent=args.agent, hmac_digest=args.digest)
        dice = parse_dice(args.dice, config.min_dice)
        play(dice, config, input_fn=input_fn, output_fn=output_fn, recorder=recorder)
    except (ConfigurationError, EntropyFailure) as e:
        output_fn(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        output_fn("\nGame cancelled.")
        return 0
    if args.transcript:
        output_fn(serializer.dumps(recorder.events()))
    return 0


if __name__ == "__main__":
    sys.exit(main())
