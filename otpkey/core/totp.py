"""
TOTP (Time-based One-Time Password) implementation following RFC 6238.

Produces codes identical to Google Authenticator.
"""

import time
from dataclasses import dataclass, field
from typing import List, Optional

from otpkey.core.key import Key, KeyType
from otpkey.core.otp import Algorithm, generate_otp
from otpkey.core.utils import decode_secret, validate_digits, validate_period

DEFAULT_DIGITS = 6
DEFAULT_PERIOD = 30


def time_counter(
    timestamp: Optional[float] = None,
    period: int = DEFAULT_PERIOD,
    t0: int = 0,
) -> int:
    """
    Number of whole ``period`` steps elapsed since ``t0``.

    Division truncates toward zero, so timestamps before ``t0`` round up
    rather than down.
    """
    t = timestamp if timestamp is not None else time.time()
    elapsed = int(t) - t0
    steps = abs(elapsed) // period
    return steps if elapsed >= 0 else -steps


def generate_totp(
    secret_bytes: bytes,
    digits: int = DEFAULT_DIGITS,
    period: int = DEFAULT_PERIOD,
    algorithm: Algorithm = Algorithm.SHA1,
    timestamp: Optional[float] = None,
    t0: int = 0,
) -> str:
    """
    Generate a TOTP code.

    Args:
        secret_bytes: Raw (already base32-decoded) secret bytes.
        digits:       Number of digits in the OTP (default 6).
        period:       Time step in seconds (default 30).
        algorithm:    HMAC algorithm (default SHA1 for GA compatibility).
        timestamp:    Override Unix timestamp (uses time.time() if None).
        t0:           Unix time the step count starts from.

    Returns:
        OTP string, zero-padded to ``digits`` characters.
    """
    counter = time_counter(timestamp, period, t0)
    return generate_otp(secret_bytes, counter, digits, algorithm)


def remaining_seconds(
    period: int = DEFAULT_PERIOD,
    timestamp: Optional[float] = None,
    t0: int = 0,
) -> int:
    """Return seconds until the current TOTP window expires."""
    t = timestamp if timestamp is not None else time.time()
    return period - ((int(t) - t0) % period)


@dataclass
class TOTPKey(Key):
    """Time based credential; holds no mutable state."""

    name: str
    secret: str                     # base32, as supplied by the issuer
    digits: int = DEFAULT_DIGITS
    time_step: int = DEFAULT_PERIOD
    t0: int = 0
    recovery_codes: List[str] = field(default_factory=list)
    algorithm: Algorithm = Algorithm.SHA1
    issuer: Optional[str] = None

    def __post_init__(self) -> None:
        validate_digits(self.digits)
        validate_period(self.time_step)

    @property
    def key_type(self) -> KeyType:
        return KeyType.TOTP

    @property
    def secret_bytes(self) -> bytes:
        return decode_secret(self.secret)

    def generate_code(self, timestamp: Optional[float] = None) -> str:
        return generate_totp(
            self.secret_bytes,
            digits=self.digits,
            period=self.time_step,
            algorithm=self.algorithm,
            timestamp=timestamp,
            t0=self.t0,
        )

    def remaining_seconds(self, timestamp: Optional[float] = None) -> int:
        return remaining_seconds(self.time_step, timestamp, self.t0)
