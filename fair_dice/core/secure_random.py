
"""
secure_random.py
Cryptographically secure randomness for the fair protocol: the RandomSource capability,
key generation and the unbiased rejection sampler.
Related modules:
- commitment.py: Draws the secret key and the computer's number from here.
"""

import secrets
from typing import Protocol


class EntropyFailure(Exception):
    """
    Raised when the secure random source cannot produce the requested bytes.
    """
    pass


class RandomSource(Protocol):
    """
    Anything that can hand out random bytes. Injected so tests can substitute scripted bytes.
    """

    def random_bytes(self, n: int) -> bytes:
        ...


class SystemRandomSource:
    """
    RandomSource backed by the operating system CSPRNG.
    """

    def random_bytes(self, n: int) -> bytes:
        try:
            data = secrets.token_bytes(n)
        except (OSError, NotImplementedError) as e:
            raise EntropyFailure(f"secure random source failed: {e}") from e
        return data


def _draw(source: RandomSource, n: int) -> bytes:
    data = source.random_bytes(n)
    if len(data) != n:
        raise EntropyFailure(f"random source returned {len(data)} bytes, expected {n}")
    return data


def generate_key(source: RandomSource, size: int = 32) -> bytes:
    """
    Generate a fresh secret key.
    Args:
        source (RandomSource): Secure byte source.
        size (int): Key length in bytes.
    Returns:
        bytes: The key.
    """
    return _draw(source, size)


def sample(max_value: int, source: RandomSource) -> int:
    """
    Return an integer uniformly distributed over [0, max_value].
    Draws just enough big-endian bytes to cover max_value and rejects draws at or above the largest
    multiple of (max_value + 1) that fits, so the final modulo carries no bias.
    Args:
        max_value (int): Inclusive upper bound, non-negative.
        source (RandomSource): Secure byte source.
    Returns:
        int: The sampled value.
    Raises:
        ValueError: If max_value is negative.
        EntropyFailure: If the source fails.
    """
    if max_value < 0:
        raise ValueError("max_value must be non-negative")
    # ceil(log2(max_value + 1) / 8) without floating point
    bytes_needed = (max_value.bit_length() + 7) // 8
    if bytes_needed == 0:
        return 0
    modulus = max_value + 1
    space = 1 << (8 * bytes_needed)
    limit = space - (space % modulus)
    while True:
        value = int.from_bytes(_draw(source, bytes_needed), "big")
        if value < limit:
            return value % modulus
