
"""
rules.py
Helpers for deciding who moves first and who won the game.
Related modules:
- engine.py: Uses these after each protocol round.
"""

from typing import Optional

from .state import COMPUTER, USER


def first_mover(result: int, computer_number: int) -> str:
    """
    The computer moves first when the joint result equals its own secret number.
    Returns:
        str: COMPUTER or USER.
    """
    return COMPUTER if result == computer_number else USER


def determine_winner(computer_roll: int, user_roll: int) -> Optional[str]:
    """
    Compare the rolled faces.
    Returns:
        str|None: COMPUTER or USER for the higher face, None for a tie.
    """
    if computer_roll > user_roll:
        return COMPUTER
    if user_roll > computer_roll:
        return USER
    return None
