"""
Steam Guard mobile authenticator codes.

Steam uses a TOTP variant with a fixed 30-second step, HMAC-SHA1 and a
five character code over a 26-symbol alphabet instead of decimal digits.
"""

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

from otpkey.core.errors import InvalidKeyError
from otpkey.core.key import Key, KeyType
from otpkey.core.otp import Algorithm, counter_bytes, dynamic_value, hmac_digest
from otpkey.core.utils import (
    decode_secret,
    decode_shared_secret,
    encode_secret,
    encode_shared_secret,
)

if TYPE_CHECKING:
    from otpkey.storage.mafile import MaFile

# ── Constants ────────────────────────────────────────────────────────────────

STEAM_ALPHABET = "23456789BCDFGHJKMNPQRTVWXY"
STEAM_DIGITS = 5
STEAM_PERIOD = 30
STEAM_SECRET_SIZE = 20
STEAM_ISSUER = "Steam"


def generate_steam_code(secret_bytes: bytes, timestamp: Optional[float] = None) -> str:
    """
    Generate a Steam Guard code.

    Args:
        secret_bytes: 20-byte shared secret.
        timestamp:    Override Unix timestamp (uses time.time() if None).

    Returns:
        Five characters drawn from :data:`STEAM_ALPHABET`.
    """
    t = timestamp if timestamp is not None else time.time()
    digest = hmac_digest(Algorithm.SHA1, secret_bytes, counter_bytes(int(t) // STEAM_PERIOD))
    value = dynamic_value(digest)

    chars = []
    for _ in range(STEAM_DIGITS):
        value, index = divmod(value, len(STEAM_ALPHABET))
        chars.append(STEAM_ALPHABET[index])
    return "".join(chars)


def _check_secret(raw: bytes) -> bytes:
    if len(raw) != STEAM_SECRET_SIZE:
        raise InvalidKeyError(
            f"Steam secret must be {STEAM_SECRET_SIZE} bytes, got {len(raw)}."
        )
    return raw


@dataclass
class SteamGuardKey(Key):
    """
    Steam Guard credential.

    The secret is checked once at construction; code generation has no
    failure path afterwards.
    """

    name: str
    secret: bytes
    revocation_code: str = ""
    # Source record, so device_id, token_gid and the rest survive a load.
    mafile: Optional["MaFile"] = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.secret = _check_secret(bytes(self.secret))

    # ── Constructors ─────────────────────────────────────────────────────

    @classmethod
    def from_shared_secret(
        cls, shared_secret: str, name: str = "", revocation_code: str = ""
    ) -> "SteamGuardKey":
        """Build from the base64 ``shared_secret`` of a maFile."""
        return cls(name, decode_shared_secret(shared_secret), revocation_code)

    @classmethod
    def from_base32(
        cls, secret: str, name: str = "", revocation_code: str = ""
    ) -> "SteamGuardKey":
        """Build from the base32 form used in ``otpauth://`` URIs."""
        return cls(name, decode_secret(secret), revocation_code)

    @classmethod
    def from_mafile(cls, mafile: "MaFile") -> "SteamGuardKey":
        """Build from a maFile record and keep the record on the key."""
        key = cls.from_shared_secret(
            mafile.shared_secret,
            name=mafile.account_name,
            revocation_code=mafile.revocation_code,
        )
        key.mafile = mafile
        return key

    # ── Encodings ────────────────────────────────────────────────────────

    def to_shared_secret(self) -> str:
        return encode_shared_secret(self.secret)

    def to_base32(self) -> str:
        return encode_secret(self.secret)

    # ── Key interface ────────────────────────────────────────────────────

    @property
    def key_type(self) -> KeyType:
        return KeyType.STEAM

    @property
    def issuer(self) -> Optional[str]:
        return STEAM_ISSUER

    @property
    def recovery_codes(self) -> List[str]:
        return [self.revocation_code]

    def set_recovery_codes(self, codes: List[str]) -> None:
        """Keep the first code as the revocation code; ignore an empty list."""
        if codes:
            self.revocation_code = codes[0]

    def generate_code(self, timestamp: Optional[float] = None) -> str:
        return generate_steam_code(self.secret, timestamp)
