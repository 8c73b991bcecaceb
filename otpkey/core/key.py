"""
Credential abstraction shared by the HOTP, TOTP and Steam Guard keys.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional


class KeyType(str, Enum):
    """Credential variant; also the path segment of an ``otpauth://`` URI."""

    HOTP = "hotp"
    TOTP = "totp"
    STEAM = "steam"

    @classmethod
    def parse(cls, tag: str) -> "KeyType":
        """Case-insensitive lookup, falling back to TOTP for unknown tags."""
        try:
            return cls(tag.strip().lower())
        except ValueError:
            return cls.TOTP


class Key(ABC):
    """
    A single credential able to produce one-time codes.

    The set of implementations is closed: :class:`~otpkey.core.hotp.HOTPKey`,
    :class:`~otpkey.core.totp.TOTPKey` and
    :class:`~otpkey.core.steam.SteamGuardKey`. Each exposes ``name``,
    ``issuer`` and ``recovery_codes`` as plain attributes.
    """

    name: str
    issuer: Optional[str]
    recovery_codes: List[str]

    @property
    @abstractmethod
    def key_type(self) -> KeyType:
        ...

    @abstractmethod
    def generate_code(self) -> str:
        """
        Return the current code.

        HOTP keys advance their counter on every call.

        Raises:
            InvalidKeyError: If the stored secret cannot be decoded.
        """

    def set_name(self, name: str) -> None:
        self.name = name

    def set_recovery_codes(self, codes: List[str]) -> None:
        self.recovery_codes = list(codes)
