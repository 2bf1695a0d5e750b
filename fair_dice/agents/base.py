import random
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from ..core.die import Die


class Agent(ABC):
    """
    Abstract base class for the computer's die-selection strategies.
    Die selection is not part of the fair protocol, so agents use an ordinary random.Random supplied by the engine.
    """

    @abstractmethod
    def choose_die(self, dice: Sequence[Die], rng: random.Random, opponent_die: Optional[Die] = None) -> int:
        """
        Pick the computer's die.
        Args:
            dice (sequence[Die]): All dice in the game.
            rng (random.Random): Non-cryptographic RNG owned by the engine.
            opponent_die (Die|None): The user's die if the user already chose.
        Returns:
            int: Index into dice.
        """
        raise NotImplementedError

    def uniform_choice(self, dice: Sequence[Die], rng: random.Random) -> int:
        """Index of a die chosen uniformly at random."""
        return rng.randrange(len(dice))
