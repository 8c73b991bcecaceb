"""
Exception hierarchy for otpkey.

Every error subclasses :class:`ValueError` so callers that already guard
user input with ``except ValueError`` keep working.
"""


class OTPError(ValueError):
    """Base class for all otpkey failures."""


class InvalidKeyError(OTPError):
    """Secret is not valid base32/base64, is empty, or has the wrong length."""


class InvalidDigitsError(OTPError):
    """Digit count is outside the variant's supported set."""


class InvalidURIError(OTPError):
    """Provisioning URI is malformed (strict parsing only)."""


class InvalidPathError(OTPError):
    """File or image could not be read or written."""
