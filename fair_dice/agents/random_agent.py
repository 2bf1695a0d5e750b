from .base import Agent
from . import register_agent


@register_agent("random")
class RandomDieAgent(Agent):
    """
    Picks any die with equal probability, regardless of what the user chose. The default computer player.
    """

    def choose_die(self, dice, rng, opponent_die=None):
        return self.uniform_choice(dice, rng)
