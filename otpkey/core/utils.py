"""
Utility helpers for otpkey.
"""

import base64
import binascii
import re

from otpkey.core.errors import InvalidDigitsError, InvalidKeyError, OTPError

# ── Constants ────────────────────────────────────────────────────────────────

SUPPORTED_DIGITS = (6, 7, 8)


# ── Base32 ────────────────────────────────────────────────────────────────────

def normalize_secret(secret: str) -> str:
    """
    Normalise a base32 secret: strip spaces, uppercase, add padding.

    Args:
        secret: Raw user-supplied secret string.

    Returns:
        Uppercase base32 string with correct padding.

    Raises:
        InvalidKeyError: If the string is empty or contains invalid base32
            characters.
    """
    secret = secret.strip().upper().replace(" ", "").replace("-", "")
    # Base32 alphabet: A-Z and 2-7
    if not re.fullmatch(r"[A-Z2-7]+=*", secret):
        raise InvalidKeyError("Secret contains invalid base32 characters.")
    # Pad to multiple of 8
    pad = (8 - len(secret) % 8) % 8
    secret = secret + "=" * pad
    return secret


def decode_secret(secret: str) -> bytes:
    """
    Decode a base32-encoded secret string to raw bytes.

    Args:
        secret: Base32 secret (spaces and dashes are stripped).

    Returns:
        Raw bytes.

    Raises:
        InvalidKeyError: On invalid base32 input.
    """
    try:
        return base64.b32decode(normalize_secret(secret), casefold=True)
    except binascii.Error as exc:
        raise InvalidKeyError(f"Invalid base32 secret: {exc}") from exc


def encode_secret(raw: bytes, padding: bool = True) -> str:
    """Encode raw bytes as RFC 4648 base32; ``padding=False`` strips the ``=``."""
    encoded = base64.b32encode(raw).decode("ascii")
    return encoded if padding else encoded.rstrip("=")


# ── Base64 (Steam shared secret) ──────────────────────────────────────────────

def decode_shared_secret(secret: str) -> bytes:
    """
    Decode a standard base64 shared secret.

    Raises:
        InvalidKeyError: If the text is empty or not valid base64.
    """
    if not secret.strip():
        raise InvalidKeyError("Shared secret is empty.")
    try:
        return base64.b64decode(secret.strip(), validate=True)
    except binascii.Error as exc:
        raise InvalidKeyError(f"Invalid base64 shared secret: {exc}") from exc


def encode_shared_secret(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


# ── Display ───────────────────────────────────────────────────────────────────

def format_otp(code: str, group: int = 3) -> str:
    """
    Format an OTP code with spaces for readability.

    Example::

        >>> format_otp("123456")
        "123 456"

    Args:
        code:  Code string.
        group: Character grouping size.

    Returns:
        Spaced OTP string.
    """
    return " ".join(code[i : i + group] for i in range(0, len(code), group))


# ── Validation ────────────────────────────────────────────────────────────────

def validate_digits(digits: int) -> None:
    if digits not in SUPPORTED_DIGITS:
        raise InvalidDigitsError(f"Digits must be 6, 7 or 8, got {digits}.")


def validate_period(period: int) -> None:
    if period < 1:
        raise OTPError(f"Period must be a positive number of seconds, got {period}.")
