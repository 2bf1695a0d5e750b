
"""
state.py
Defines the game phases, the GameSession dataclass and the InputRequest returned at every suspend point.
Related modules:
- engine.py: Mutates GameSession and produces InputRequests.
- die.py: Dice held by the session.
"""

from dataclasses import dataclass
from typing import List, Optional

from .die import Die


NOT_STARTED = "NOT_STARTED"
DECIDING_FIRST_MOVE = "DECIDING_FIRST_MOVE"
COMPUTER_PICKS_FIRST = "COMPUTER_PICKS_FIRST"
USER_PICKS_FIRST = "USER_PICKS_FIRST"
USER_SELECTING_DIE = "USER_SELECTING_DIE"
DICE_SELECTED = "DICE_SELECTED"
COMPUTER_ROLLING = "COMPUTER_ROLLING"
USER_ROLLING = "USER_ROLLING"
RESOLVED = "RESOLVED"
CANCELLED = "CANCELLED"
ABORTED = "ABORTED"

TERMINAL_PHASES = (RESOLVED, CANCELLED, ABORTED)

# prompt kinds
GUESS = "guess"
SELECT_DIE = "select_die"
ADD_NUMBER = "add_number"

COMPUTER = "computer"
USER = "user"


@dataclass(frozen=True)
class InputRequest:
    """
    What the engine needs next. The game is suspended until GameEngine.submit is called.
    Cancel and Help are accepted at every request.
    Fields:
        phase (str): Phase waiting for input.
        kind (str): GUESS, SELECT_DIE or ADD_NUMBER.
        low (int): Smallest acceptable number.
        high (int): Largest acceptable number.
        commitment (str|None): HMAC the answer is made against, if a protocol round is open.
    """
    phase: str
    kind: str
    low: int
    high: int
    commitment: Optional[str] = None

    def accepts(self, value: int) -> bool:
        return self.low <= value <= self.high


@dataclass
class GameSession:
    """
    Everything known about the game in progress. Discarded when the game ends.
    Fields:
        dice (list[Die]): Dice available to both players.
        phase (str): Current phase.
        first_mover (str|None): COMPUTER or USER once decided.
        computer_die (Die|None): Die picked by the computer.
        user_die (Die|None): Die picked by the user.
        computer_roll (int|None): Face rolled for the computer.
        user_roll (int|None): Face rolled for the user.
        winner (str|None): COMPUTER, USER or None (tie or no result).
        help_requests (int): How many times the probability table was asked for.
    """
    dice: List[Die]
    phase: str = NOT_STARTED
    first_mover: Optional[str] = None
    computer_die: Optional[Die] = None
    user_die: Optional[Die] = None
    computer_roll: Optional[int] = None
    user_roll: Optional[int] = None
    winner: Optional[str] = None
    help_requests: int = 0
