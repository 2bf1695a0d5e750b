
"""
commitment.py
Implements the FairRandomGenerator: the computer commits to a secret number with an HMAC before the user
answers, the two numbers are added modulo the range, and the key and secret are revealed afterwards
so the user can check the commitment.
Related modules:
- secure_random.py: Supplies the key and the unbiased secret number.
- engine.py: Creates one generator per protocol round.
"""

import hashlib
import hmac
import logging
from typing import Optional

from .config import check_digest
from .secure_random import RandomSource, SystemRandomSource, generate_key, sample

logger = logging.getLogger(__name__)


class ProtocolMisuseError(Exception):
    """
    Raised when a generator is used out of order (result computed twice, reveal before result).
    """
    pass


def compute_hmac(key: bytes, number: int, digest: str = "sha3_256") -> str:
    """
    Keyed hash of the decimal representation of number.
    Returns:
        str: Upper-case hex digest.
    """
    return hmac.new(key, str(number).encode("ascii"), digest).hexdigest().upper()


def verify_commitment(commitment: str, key_hex: str, number: int, digest: str = "sha3_256") -> bool:
    """
    Recompute a commitment from the revealed key and number and compare it with the one shown earlier.
    Args:
        commitment (str): HMAC disclosed before the user answered.
        key_hex (str): Revealed key in hex.
        number (int): Revealed secret number.
        digest (str): Hash algorithm used for the commitment.
    Returns:
        bool: True if the revealed values reproduce the commitment.
    """
    try:
        key = bytes.fromhex(key_hex)
    except ValueError:
        return False
    expected = compute_hmac(key, number, digest)
    return hmac.compare_digest(expected, commitment.strip().upper())


class FairRandomGenerator:
    """
    One round of the commit/reveal protocol over the range [0, max_value].
    The key and the computer's number are fixed, and the HMAC computed, at construction time.
    """
    def __init__(self, max_value: int, source: Optional[RandomSource] = None,
                 digest: str = "sha3_256", key_bytes: int = 32):
        if max_value < 0:
            raise ValueError("max_value must be non-negative")
        check_digest(digest)
        self.max_value = max_value
        self.digest = digest
        source = source or SystemRandomSource()
        # key first, then the secret, then the commitment
        self._key = generate_key(source, key_bytes)
        self._computer_number = sample(max_value, source)
        self._hmac = compute_hmac(self._key, self._computer_number, digest)
        self._result: Optional[int] = None
        logger.debug("committed to a number in [0, %d]", max_value)

    @property
    def modulus(self) -> int:
        return self.max_value + 1

    @property
    def spent(self) -> bool:
        return self._result is not None

    def get_hmac(self) -> str:
        """Commitment to show the user before asking for their number."""
        return self._hmac

    def compute_result(self, user_number: int) -> int:
        """
        Combine the user's number with the committed secret.
        Args:
            user_number (int): The user's number in [0, max_value].
        Returns:
            int: (computer_number + user_number) mod (max_value + 1).
        Raises:
            ValueError: If user_number is out of range.
            ProtocolMisuseError: If the result was already computed.
        """
        if self.spent:
            raise ProtocolMisuseError("result already computed for this round")
        if not (0 <= user_number <= self.max_value):
            raise ValueError(f"number must be between 0 and {self.max_value}")
        self._result = (self._computer_number + user_number) % self.modulus
        return self._result

    def get_key(self) -> str:
        """Revealed key, upper-case hex. Only after compute_result."""
        self._require_spent()
        return self._key.hex().upper()

    def get_computer_number(self) -> int:
        """Revealed secret number. Only after compute_result."""
        self._require_spent()
        return self._computer_number

    def _require_spent(self) -> None:
        if not self.spent:
            raise ProtocolMisuseError("cannot reveal before the result is computed")
