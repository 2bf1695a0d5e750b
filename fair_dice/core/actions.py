
"""
actions.py
Defines the base Action type and the concrete inputs the user can give the engine at a suspend point:
a number, a cancellation or a help request.
Related modules:
- engine.py: Consumes Action objects through GameEngine.submit.
- cli.py: Turns typed text into Action objects.
"""

from dataclasses import dataclass



class Action:
    """
    Base class for all user inputs. Subclassed by ChooseNumber, Cancel and Help.
    """
    pass



@dataclass(frozen=True)
class ChooseNumber(Action):
    """
    A number in the range named by the pending InputRequest: a guess, a die index or an addend.
    Args:
        value (int): The chosen number.
    """
    value: int



@dataclass(frozen=True)
class Cancel(Action):
    """
    Ends the game immediately without a winner.
    """
    pass



@dataclass(frozen=True)
class Help(Action):
    """
    Asks for the win probability table; the pending request stays open.
    """
    pass
