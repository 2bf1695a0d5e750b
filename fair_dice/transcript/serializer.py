
"""
serializer.py
Serializes game events to JSON so a transcript can be printed and checked outside the game.
Bytes become hex and fractions become "n/d" strings.
"""

import json
from fractions import Fraction
from typing import Any


def _default(o: Any):
    if isinstance(o, (bytes, bytearray)):
        return o.hex().upper()
    if isinstance(o, Fraction):
        return str(o)
    return getattr(o, '__dict__', str(o))


def dumps(obj: Any) -> str:
    """
    Turn a transcript (a list of GameEvent, or any payload) into one JSON line.
    Dataclasses are written as their fields.
    """
    return json.dumps(obj, default=_default)


def loads(s: str):
    """
    Read a transcript back. Events come back as plain dicts, not GameEvent.
    """
    return json.loads(s)
