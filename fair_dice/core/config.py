
"""
config.py
Defines the GameConfig dataclass, which centralizes the options and numeric constraints of a fair dice game,
and the ConfigurationError raised when a game cannot be set up.
Related modules:
- engine.py: Uses GameConfig to validate the dice and initialize the game.
- commitment.py: Uses hmac_digest and key_bytes to build commitments.
"""

import hashlib
from dataclasses import dataclass
from typing import Optional, Sequence


class ConfigurationError(Exception):
    """
    Raised when a game cannot be constructed: too few dice, a die without faces or an unusable hash.
    """
    pass


# Commitments must not be weaker than a 256-bit digest.
MIN_DIGEST_SIZE = 32


@dataclass(frozen=True)
class GameConfig:
    """
    Centralizes all options for a fair dice game.
    Fields:
        min_dice (int): Minimum number of dice a game needs.
        key_bytes (int): Size of the secret HMAC key generated for every round.
        hmac_digest (str): hashlib name of the digest used for commitments.
        rng_seed (int|None): Seed for the computer's die choice (not used by the fair protocol).
        agent (str): Name of the computer's die-selection strategy.
        cancel_token (str): Input that cancels the game.
        help_token (str): Input that shows the probability table.
    """
    min_dice: int = 3
    key_bytes: int = 32
    hmac_digest: str = "sha3_256"
    # None -> die selection differs from run to run
    rng_seed: Optional[int] = None
    agent: str = "random"
    cancel_token: str = "X"
    help_token: str = "?"

    def validate(self) -> None:
        """
        Checks the configuration itself.
        Raises:
            ConfigurationError: If a value would weaken the protocol or make a game impossible.
        """
        if self.min_dice < 1:
            raise ConfigurationError("min_dice must be at least 1")
        if self.key_bytes < MIN_DIGEST_SIZE:
            raise ConfigurationError(f"key_bytes must be at least {MIN_DIGEST_SIZE}")
        check_digest(self.hmac_digest)

    def validate_dice(self, dice: Sequence) -> None:
        """
        Checks that enough dice were supplied. Each Die checks its own faces when it is built.
        Args:
            dice (sequence[Die]): Dice available in the game.
        Raises:
            ConfigurationError: If fewer than min_dice dice are given.
        """
        if len(dice) < self.min_dice:
            raise ConfigurationError(f"You need at least {self.min_dice} dice, got {len(dice)}")


def check_digest(name: str) -> None:
    """
    Makes sure hashlib knows the digest and that it is at least 256 bits wide.
    Raises:
        ConfigurationError: If the digest is unknown or too short.
    """
    try:
        digest_size = hashlib.new(name).digest_size
    except ValueError:
        raise ConfigurationError(f"Unknown hash algorithm: {name}") from None
    if digest_size < MIN_DIGEST_SIZE:
        raise ConfigurationError(f"{name} has a {digest_size * 8}-bit digest, at least {MIN_DIGEST_SIZE * 8} bits are required")
