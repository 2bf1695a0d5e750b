
"""
engine.py
Implements the GameEngine class, the turn sequencing state machine of the fair dice game.
The engine runs the commit/reveal protocol three times per game (first move, computer roll, user roll),
lets both players pick a die, decides the winner and emits events for the output side.
Every place that needs the user is an explicit suspend point: the engine returns an InputRequest and resumes
when submit() is called with the user's Action.
Related modules:
- config.py: GameConfig is used to configure and validate the game.
- state.py: GameSession, InputRequest and the phase names.
- commitment.py: FairRandomGenerator, one per protocol round.
- probability.py: Win probability matrix shown on help requests.
- rules.py: First mover and winner decisions.
- agents: The computer's die-selection strategy.
"""

import logging
import random
from typing import Dict, Iterable, Optional, Tuple

from .config import GameConfig
from .die import Die
from .actions import Action, ChooseNumber, Cancel, Help
from .commitment import FairRandomGenerator
from .secure_random import EntropyFailure, RandomSource, SystemRandomSource
from .probability import probability_matrix
from .rules import first_mover, determine_winner
from .state import (
    GameSession, InputRequest,
    NOT_STARTED, DECIDING_FIRST_MOVE, COMPUTER_PICKS_FIRST, USER_PICKS_FIRST, USER_SELECTING_DIE,
    DICE_SELECTED, COMPUTER_ROLLING, USER_ROLLING, RESOLVED, CANCELLED, ABORTED, TERMINAL_PHASES,
    GUESS, SELECT_DIE, ADD_NUMBER, COMPUTER, USER,
)
from ..agents import create_agent
from ..agents.base import Agent

logger = logging.getLogger(__name__)

FIRST_MOVE_ROUND = "first_move"
COMPUTER_ROLL_ROUND = "computer_roll"
USER_ROLL_ROUND = "user_roll"


class IllegalMoveError(Exception):
    """
    Raised when an input is not acceptable right now (out of range, nothing pending, game over).
    The engine state is left unchanged so the caller can ask again.
    """
    pass


class GameEngine:
    """
    Main state machine for one fair dice game. Drive it with start() and submit() until submit() returns None.
    """
    def __init__(self, dice: Iterable[Die], config: Optional[GameConfig] = None,
                 source: Optional[RandomSource] = None, agent: Optional[Agent] = None):
        """
        Initialize a new game.
        Args:
            dice (iterable[Die]): Dice both players choose from.
            config (GameConfig|None): Game configuration; defaults to GameConfig().
            source (RandomSource|None): Secure byte source for the protocol; defaults to the OS CSPRNG.
            agent (Agent|None): Computer die-selection strategy; defaults to config.agent.
        Raises:
            ConfigurationError: If the configuration or the dice are unusable.
        """
        self.config = config or GameConfig()
        self.config.validate()
        dice = list(dice)
        self.config.validate_dice(dice)
        self.source = source or SystemRandomSource()
        # die selection is not adversarial, an ordinary PRNG is enough
        self.rng = random.Random(self.config.rng_seed)
        self.agent = agent or create_agent(self.config.agent)
        self.session = GameSession(dice=dice)
        self._generator: Optional[FairRandomGenerator] = None
        self._round: Optional[str] = None
        self._request: Optional[InputRequest] = None
        self._events = []
        # turn_log will contain per-step snapshots of the session
        self.turn_log = []

    # Events are simple dicts for now
    def _emit(self, event: Dict):
        """
        Internal: Record an event (dict) for later retrieval.
        """
        self._events.append(event)

    def pop_events(self):
        """
        Return and clear all emitted events since last call.
        Returns:
            list[dict]: List of event dicts.
        """
        ev = list(self._events)
        self._events.clear()
        return ev

    def get_events(self):
        """
        Return all events emitted so far (does not clear).
        Returns:
            list[dict]: List of event dicts.
        """
        return list(self._events)

    def _snapshot(self, action: Optional[Dict] = None):
        """
        Internal: Record the session as it stands after an input (or at the start).
        """
        s = self.session
        snap = {
            "action": action,
            "phase": s.phase,
            "first_mover": s.first_mover,
            "computer_die": None if s.computer_die is None else list(s.computer_die.faces),
            "user_die": None if s.user_die is None else list(s.user_die.faces),
            "computer_roll": s.computer_roll,
            "user_roll": s.user_roll,
            "winner": s.winner,
        }
        self.turn_log.append(snap)
        return snap

    @property
    def pending_request(self) -> Optional[InputRequest]:
        """The request the engine is currently suspended on, if any."""
        return self._request

    def is_terminal(self) -> bool:
        """
        Returns True once the game was resolved, cancelled or aborted.
        """
        return self.session.phase in TERMINAL_PHASES

    def start(self) -> InputRequest:
        """
        Begin the game by committing to the first-move number.
        Returns:
            InputRequest: The user's guess in [0, 1].
        Raises:
            IllegalMoveError: If the game was already started.
            EntropyFailure: If no secure randomness is available.
        """
        if self.session.phase != NOT_STARTED:
            raise IllegalMoveError("Game already started")
        logger.info("starting game with %d dice", len(self.session.dice))
        self._snapshot()
        self.session.phase = DECIDING_FIRST_MOVE
        return self._open_round(FIRST_MOVE_ROUND, 1, GUESS)

    def submit(self, action: Action) -> Optional[InputRequest]:
        """
        Resume the game with the user's answer to the pending request.
        Args:
            action (Action): ChooseNumber, Cancel or Help.
        Returns:
            InputRequest|None: The next request, or None when the game is over.
        Raises:
            IllegalMoveError: If nothing is pending or the number is out of range.
            EntropyFailure: If the next protocol round cannot get secure randomness.
        """
        request = self._request
        if request is None or self.is_terminal():
            raise IllegalMoveError("No input is pending")

        if isinstance(action, Cancel):
            return self._cancel()
        if isinstance(action, Help):
            # does not touch the open round
            self.session.help_requests += 1
            self._emit({"type": "HelpRequested", "matrix": probability_matrix(self.session.dice)})
            return request
        if not isinstance(action, ChooseNumber):
            raise IllegalMoveError("Unknown action")
        if not request.accepts(action.value):
            raise IllegalMoveError(f"Pick a number between {request.low} and {request.high}")

        phase = self.session.phase
        if phase == DECIDING_FIRST_MOVE:
            nxt = self._on_first_move(action.value)
        elif phase == USER_SELECTING_DIE:
            nxt = self._on_user_die(action.value)
        elif phase == COMPUTER_ROLLING:
            nxt = self._on_computer_roll(action.value)
        elif phase == USER_ROLLING:
            nxt = self._on_user_roll(action.value)
        else:
            raise IllegalMoveError(f"Unexpected phase {phase}")
        self._snapshot(action={"phase": phase, "value": action.value})
        return nxt

    # protocol rounds

    def _open_round(self, label: str, max_value: int, kind: str) -> InputRequest:
        """
        Internal: Create a fresh generator, disclose its commitment and suspend for the user's number.
        """
        try:
            generator = FairRandomGenerator(max_value, self.source,
                                            digest=self.config.hmac_digest, key_bytes=self.config.key_bytes)
        except EntropyFailure as e:
            self._abort(str(e))
            raise
        self._generator = generator
        self._round = label
        self._emit({"type": "CommitmentDisclosed", "round": label, "max_value": max_value, "hmac": generator.get_hmac()})
        return self._suspend(InputRequest(phase=self.session.phase, kind=kind, low=0, high=max_value,
                                          commitment=generator.get_hmac()))

    def _close_round(self, user_number: int) -> Tuple[int, int]:
        """
        Internal: Combine the user's number with the committed secret and reveal key and secret.
        Returns:
            tuple[int, int]: (result, computer_number).
        """
        generator = self._generator
        result = generator.compute_result(user_number)
        computer_number = generator.get_computer_number()
        self._emit({
            "type": "NumberRevealed",
            "round": self._round,
            "computer_number": computer_number,
            "key": generator.get_key(),
            "user_number": user_number,
            "result": result,
            "modulus": generator.modulus,
        })
        # spent, never reused
        self._generator = None
        self._round = None
        return result, computer_number

    def _suspend(self, request: InputRequest) -> InputRequest:
        self._request = request
        return request

    # transitions

    def _on_first_move(self, guess: int) -> InputRequest:
        result, computer_number = self._close_round(guess)
        mover = first_mover(result, computer_number)
        self.session.first_mover = mover
        self._emit({"type": "FirstMoveDecided", "first_mover": mover})
        logger.debug("first mover: %s", mover)
        if mover == COMPUTER:
            self.session.phase = COMPUTER_PICKS_FIRST
            self._computer_picks()
        else:
            self.session.phase = USER_PICKS_FIRST
        return self._request_user_die()

    def _request_user_die(self) -> InputRequest:
        self.session.phase = USER_SELECTING_DIE
        return self._suspend(InputRequest(phase=USER_SELECTING_DIE, kind=SELECT_DIE,
                                          low=0, high=len(self.session.dice) - 1))

    def _computer_picks(self, opponent_die: Optional[Die] = None) -> None:
        index = self.agent.choose_die(self.session.dice, self.rng, opponent_die)
        die = self.session.dice[index]
        self.session.computer_die = die
        self._emit({"type": "DieSelected", "player": COMPUTER, "index": index, "faces": list(die.faces)})

    def _on_user_die(self, index: int) -> InputRequest:
        # the pool is shared: the user may take the computer's die too
        die = self.session.dice[index]
        self.session.user_die = die
        self._emit({"type": "DieSelected", "player": USER, "index": index, "faces": list(die.faces)})
        if self.session.computer_die is None:
            self._computer_picks(opponent_die=die)
        self.session.phase = DICE_SELECTED
        self._snapshot()
        self.session.phase = COMPUTER_ROLLING
        return self._open_round(COMPUTER_ROLL_ROUND, self.session.computer_die.num_faces - 1, ADD_NUMBER)

    def _on_computer_roll(self, number: int) -> InputRequest:
        result, _ = self._close_round(number)
        roll = self.session.computer_die.face_at(result)
        self.session.computer_roll = roll
        self._emit({"type": "RollResolved", "player": COMPUTER, "result": result, "face": roll})
        self.session.phase = USER_ROLLING
        return self._open_round(USER_ROLL_ROUND, self.session.user_die.num_faces - 1, ADD_NUMBER)

    def _on_user_roll(self, number: int) -> None:
        result, _ = self._close_round(number)
        roll = self.session.user_die.face_at(result)
        self.session.user_roll = roll
        self._emit({"type": "RollResolved", "player": USER, "result": result, "face": roll})
        winner = determine_winner(self.session.computer_roll, roll)
        self.session.winner = winner
        self.session.phase = RESOLVED
        self._request = None
        self._emit({
            "type": "GameEnded",
            "winner": winner,
            "computer_roll": self.session.computer_roll,
            "user_roll": roll,
        })
        logger.info("game resolved, winner: %s", winner or "tie")
        return None

    def _cancel(self) -> None:
        phase = self.session.phase
        # the open round is dropped without revealing anything
        self._generator = None
        self._round = None
        self._request = None
        self.session.phase = CANCELLED
        self._emit({"type": "GameCancelled", "phase": phase})
        self._snapshot(action={"phase": phase, "value": "cancel"})
        logger.info("game cancelled during %s", phase)
        return None

    def _abort(self, reason: str) -> None:
        self._generator = None
        self._round = None
        self._request = None
        self.session.phase = ABORTED
        self._emit({"type": "GameAborted", "reason": reason})
        logger.error("game aborted: %s", reason)
