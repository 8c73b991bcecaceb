"""
HOTP (HMAC-based One-Time Password) implementation following RFC 4226.
"""

import threading
from dataclasses import dataclass, field
from typing import List, Optional

from otpkey.core.key import Key, KeyType
from otpkey.core.otp import Algorithm, generate_otp
from otpkey.core.utils import decode_secret, validate_digits

DEFAULT_DIGITS = 6
DEFAULT_COUNTER = 0


def generate_hotp(
    secret_bytes: bytes,
    counter: int,
    digits: int = DEFAULT_DIGITS,
    algorithm: Algorithm = Algorithm.SHA1,
) -> str:
    """
    Generate an HOTP code.

    Args:
        secret_bytes: Raw decoded secret bytes.
        counter:      Synchronisation counter value.
        digits:       Number of OTP digits.
        algorithm:    HMAC algorithm.

    Returns:
        Zero-padded OTP string.
    """
    return generate_otp(secret_bytes, counter, digits, algorithm)


@dataclass
class HOTPKey(Key):
    """
    Counter based credential.

    ``counter`` is persistent state: every :meth:`generate_code` call adds
    one *before* hashing, so a fresh key with ``counter=0`` produces the
    code for counter 1.
    """

    name: str
    secret: str                     # base32, as supplied by the issuer
    digits: int = DEFAULT_DIGITS
    counter: int = DEFAULT_COUNTER
    recovery_codes: List[str] = field(default_factory=list)
    algorithm: Algorithm = Algorithm.SHA1
    issuer: Optional[str] = None

    def __post_init__(self) -> None:
        validate_digits(self.digits)
        if self.counter < 0:
            raise ValueError("'counter' must be non-negative.")
        # Not a dataclass field, so asdict() and equality ignore it.
        self._lock = threading.Lock()

    # ── Copy / pickle ────────────────────────────────────────────────────

    def __getstate__(self) -> dict:
        state = self.__dict__.copy()
        state.pop("_lock", None)
        return state

    def __setstate__(self, state: dict) -> None:
        self.__dict__.update(state)
        self._lock = threading.Lock()

    @property
    def key_type(self) -> KeyType:
        return KeyType.HOTP

    @property
    def secret_bytes(self) -> bytes:
        return decode_secret(self.secret)

    def generate_code(self) -> str:
        raw = self.secret_bytes
        with self._lock:
            self.counter += 1
            counter = self.counter
        return generate_hotp(raw, counter, self.digits, self.algorithm)

    def peek_code(self) -> str:
        """Code the next :meth:`generate_code` call will return, without advancing."""
        return generate_hotp(self.secret_bytes, self.counter + 1, self.digits, self.algorithm)
