
"""
probability.py
Pairwise win probabilities between dice, shown to the user on request.
Related modules:
- engine.py: Emits the probability matrix when the user asks for help.
- agents/counter_agent.py: Uses best_counter to answer the user's choice.
"""

from fractions import Fraction
from typing import List, Optional, Sequence

from .die import Die


def win_probability(die_a: Die, die_b: Die) -> Fraction:
    """
    Probability that die_a rolls strictly higher than die_b. Ties are not wins.
    Args:
        die_a (Die): First die.
        die_b (Die): Second die.
    Returns:
        Fraction: wins / (num_faces_a * num_faces_b).
    """
    wins = sum(1 for a in die_a.faces for b in die_b.faces if a > b)
    return Fraction(wins, die_a.num_faces * die_b.num_faces)


def probability_matrix(dice: Sequence[Die]) -> List[List[Optional[Fraction]]]:
    """
    Win probability of every die against every other die.
    Args:
        dice (sequence[Die]): Dice in display order.
    Returns:
        list[list[Fraction|None]]: Row i, column j holds P(dice[i] beats dice[j]); the diagonal is None.
    """
    return [
        [None if i == j else win_probability(a, b) for j, b in enumerate(dice)]
        for i, a in enumerate(dice)
    ]


def best_counter(dice: Sequence[Die], target: Die) -> int:
    """
    Index of the die most likely to beat target. The lowest index wins ties.
    """
    best_index = 0
    best = Fraction(-1)
    for i, die in enumerate(dice):
        p = win_probability(die, target)
        if p > best:
            best_index, best = i, p
    return best_index
