from .base import Agent
from ..core.probability import best_counter
from . import register_agent


@register_agent("counter")
class CounterDieAgent(Agent):
    """
    When the user picked first, answers with the die most likely to beat theirs.
    With non-transitive dice there is always such a die. Falls back to a uniform pick when choosing first.
    """

    def choose_die(self, dice, rng, opponent_die=None):
        if opponent_die is None:
            return self.uniform_choice(dice, rng)
        return best_counter(dice, opponent_die)
