"""
Keyed-hash primitive and RFC 4226 dynamic truncation.

Shared by HOTP, TOTP and (in modified form) Steam Guard.
"""

import hmac
import struct
from enum import Enum

# ── Constants ────────────────────────────────────────────────────────────────

COUNTER_SIZE = 8                 # bytes, big-endian unsigned
_U64_MASK = 0xFFFFFFFFFFFFFFFF


class Algorithm(str, Enum):
    """Supported HMAC algorithms."""

    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA512 = "SHA512"

    @property
    def digest_name(self) -> str:
        """``hashlib`` name of the underlying digest."""
        return _ALG_MAP[self]

    @property
    def digest_size(self) -> int:
        return _DIGEST_SIZES[self]

    @classmethod
    def parse(cls, text: str) -> "Algorithm":
        """
        Case-insensitive lookup, falling back to SHA1 for unknown names.

        Provisioning links from some vendors spell the algorithm in lower
        case or use names we do not support; both degrade to the default.
        """
        try:
            return cls(text.strip().upper())
        except ValueError:
            return cls.SHA1


_ALG_MAP: dict[str, str] = {
    Algorithm.SHA1: "sha1",
    Algorithm.SHA256: "sha256",
    Algorithm.SHA512: "sha512",
}

_DIGEST_SIZES: dict[str, int] = {
    Algorithm.SHA1: 20,
    Algorithm.SHA256: 32,
    Algorithm.SHA512: 64,
}


# ── HMAC ──────────────────────────────────────────────────────────────────────

def hmac_digest(algorithm: Algorithm, secret: bytes, message: bytes) -> bytes:
    """
    Compute HMAC-``algorithm`` of ``message`` keyed with ``secret``.

    HMAC accepts keys of any length, so this never fails for bytes input.
    """
    return hmac.new(secret, message, algorithm.digest_name).digest()


def counter_bytes(counter: int) -> bytes:
    """Encode ``counter`` as the 8-byte big-endian HOTP moving factor."""
    return struct.pack(">Q", counter & _U64_MASK)


# ── Dynamic truncation ────────────────────────────────────────────────────────

def dynamic_value(digest: bytes) -> int:
    """
    RFC 4226 §5.3 dynamic truncation to a 31-bit integer.

    Raises:
        RuntimeError: If the digest is too short for the selected offset.
    """
    offset = digest[-1] & 0x0F
    if offset + 4 > len(digest):
        raise RuntimeError(
            f"Digest of {len(digest)} bytes too short for truncation at offset {offset}"
        )
    return (
        (digest[offset] & 0x7F) << 24
        | (digest[offset + 1] & 0xFF) << 16
        | (digest[offset + 2] & 0xFF) << 8
        | (digest[offset + 3] & 0xFF)
    )


def truncate(digest: bytes, digits: int) -> str:
    """
    Reduce an HMAC digest to a zero-padded decimal code of ``digits`` chars.

    Args:
        digest: HMAC output (20, 32 or 64 bytes).
        digits: Code length.

    Returns:
        Decimal string of exactly ``digits`` characters.
    """
    otp = dynamic_value(digest) % (10**digits)
    return str(otp).zfill(digits)


def generate_otp(
    secret_bytes: bytes,
    counter: int,
    digits: int = 6,
    algorithm: Algorithm = Algorithm.SHA1,
) -> str:
    """HMAC the counter with ``secret_bytes`` and truncate to ``digits``."""
    digest = hmac_digest(algorithm, secret_bytes, counter_bytes(counter))
    return truncate(digest, digits)
