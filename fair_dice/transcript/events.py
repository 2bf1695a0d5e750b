
"""
events.py
GameEvent: one line of a game transcript, such as an HMAC being shown, a key being revealed or a die being picked.
recorder.py builds these from the engine's raw dicts so a finished game can be printed or re-checked.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class GameEvent:
    """
    A recorded engine event, stamped with the game it came from.
    Fields:
        game_id (str): Which game produced it.
        event_type (str): Engine event name, e.g. 'NumberRevealed'.
        payload (dict): The engine's fields for that event, minus the name.
        player_type (str|None): 'computer' or 'user' for per-player events like DieSelected.
    """
    game_id: str
    event_type: str
    payload: Dict[str, Any]
    player_type: Optional[str] = None
