
"""
die.py
Defines the Die value type: an ordered list of integer faces with cyclic indexing.
Related modules:
- engine.py: Maps protocol results to faces with Die.face_at.
- probability.py: Compares dice face by face.
"""

from dataclasses import dataclass
from typing import Tuple

from .config import ConfigurationError


@dataclass(frozen=True)
class Die:
    """
    An immutable die. Duplicate faces are allowed.
    Args:
        faces (tuple[int]): Face values in order; at least one.
    """
    faces: Tuple[int, ...]

    def __post_init__(self):
        # accept any iterable but store a tuple so the die stays hashable
        object.__setattr__(self, "faces", tuple(self.faces))
        if not self.faces:
            raise ConfigurationError("Each die needs at least one face!")
        for face in self.faces:
            # bool is an int subclass but not a face value
            if isinstance(face, bool) or not isinstance(face, int):
                raise ConfigurationError(f"Die faces must be integers, got {face!r}")

    @property
    def num_faces(self) -> int:
        return len(self.faces)

    def face_at(self, index: int) -> int:
        """
        Return the face at a non-negative index, wrapping around the die.
        Args:
            index (int): Any non-negative integer.
        Returns:
            int: faces[index mod num_faces].
        """
        return self.faces[index % self.num_faces]

    def __str__(self) -> str:
        return "[" + ",".join(str(f) for f in self.faces) + "]"
