"""
Parse and build otpauth:// URIs as defined by the Google Authenticator Key
URI Format.

Reference: https://github.com/google/google-authenticator/wiki/Key-Uri-Format

Parsing is lenient by default: provisioning links from different vendors
disagree on field order, casing and optional fields, so unknown keys are
ignored and unparsable numeric values keep their defaults instead of failing
the whole parse. Pass ``strict=True`` to reject such links.
"""

import logging
import re
import urllib.parse
from dataclasses import dataclass
from typing import Optional

from otpkey.core.errors import InvalidURIError
from otpkey.core.hotp import DEFAULT_COUNTER, HOTPKey
from otpkey.core.key import Key, KeyType
from otpkey.core.otp import Algorithm
from otpkey.core.steam import STEAM_DIGITS, STEAM_ISSUER, STEAM_PERIOD, SteamGuardKey
from otpkey.core.totp import DEFAULT_DIGITS, DEFAULT_PERIOD, TOTPKey

logger = logging.getLogger(__name__)

SCHEME = "otpauth://"

_PARAM_RE = re.compile(
    r"(?:^|[?&])(secret|algorithm|digits|period|counter|issuer)=([^\s&#]*)"
)


@dataclass
class OTPAuthURI:
    """Variant-agnostic parameters carried by an otpauth:// URI."""

    label: str = ""
    otp_type: KeyType = KeyType.TOTP
    secret: str = ""
    algorithm: Algorithm = Algorithm.SHA1
    digits: int = DEFAULT_DIGITS
    counter: Optional[int] = None     # HOTP only
    period: Optional[int] = None      # TOTP / Steam only
    issuer: Optional[str] = None

    @property
    def account_name(self) -> str:
        """Label text after an ``Issuer:`` prefix, or the whole label."""
        return self.label.split(":", 1)[1] if ":" in self.label else self.label

    def __str__(self) -> str:
        return build_otpauth_uri(self)

    def to_key(self) -> Key:
        return key_from_uri(self)

    @classmethod
    def from_key(cls, key: Key) -> "OTPAuthURI":
        return uri_from_key(key)


# ── Encoding ──────────────────────────────────────────────────────────────────

def build_otpauth_uri(uri: OTPAuthURI) -> str:
    """
    Serialise ``uri`` with a fixed field order:
    secret, algorithm, digits, counter, period, issuer.

    Label and issuer are form-encoded (space becomes ``+``).
    """
    params = [
        f"secret={uri.secret}",
        f"algorithm={uri.algorithm.value}",
        f"digits={uri.digits}",
    ]
    if uri.counter is not None:
        params.append(f"counter={uri.counter}")
    if uri.period is not None:
        params.append(f"period={uri.period}")
    if uri.issuer is not None:
        params.append(f"issuer={urllib.parse.quote_plus(uri.issuer)}")

    label = urllib.parse.quote_plus(uri.label)
    return f"{SCHEME}{uri.otp_type.value}/{label}?{'&'.join(params)}"


# ── Decoding ──────────────────────────────────────────────────────────────────

def _parse_uint(key: str, value: str, strict: bool) -> Optional[int]:
    # ASCII only: str.isdigit() also accepts superscripts that int() rejects
    if value.isascii() and value.isdigit():
        return int(value)
    if strict:
        raise InvalidURIError(f"'{key}' must be a non-negative integer, got '{value}'.")
    logger.debug("Ignoring unparsable %s=%r in otpauth URI", key, value)
    return None


def parse_otpauth_uri(text: str, strict: bool = False) -> OTPAuthURI:
    """
    Parse an ``otpauth://`` URI.

    Args:
        text:   Full otpauth URI string (typed, pasted or decoded from a QR
                code).
        strict: Raise instead of silently falling back to defaults.

    Returns:
        Populated :class:`OTPAuthURI`. In lenient mode a string that is not
        recognisable as a URI yields a default instance.

    Raises:
        InvalidURIError: In strict mode only, for a wrong scheme, an unknown
            type, a missing secret, an unsupported algorithm or non-integer
            numeric fields.
    """
    text = text.strip()
    uri = OTPAuthURI()

    if strict and not text.lower().startswith(SCHEME):
        raise InvalidURIError(f"Expected '{SCHEME}' scheme.")

    rest = text[len(SCHEME):] if text.lower().startswith(SCHEME) else text
    path, _, query = rest.partition("?")
    if "/" not in path:
        if strict:
            raise InvalidURIError("Missing OTP type or label in otpauth URI.")
        return uri

    tag, _, raw_label = path.partition("/")
    if strict and tag.lower() not in {t.value for t in KeyType}:
        raise InvalidURIError(f"Unknown OTP type '{tag}'. Expected totp, hotp or steam.")
    uri.otp_type = KeyType.parse(tag)
    uri.label = urllib.parse.unquote_plus(raw_label)

    for key, value in _PARAM_RE.findall("?" + query):
        if key == "secret":
            uri.secret = value
        elif key == "algorithm":
            if strict and value.upper() not in {a.value for a in Algorithm}:
                raise InvalidURIError(
                    f"Unsupported algorithm '{value}'. Supported: SHA1, SHA256, SHA512."
                )
            uri.algorithm = Algorithm.parse(value)
        elif key == "digits":
            digits = _parse_uint(key, value, strict)
            if digits is not None:
                uri.digits = digits
        elif key == "period":
            period = _parse_uint(key, value, strict)
            if period is not None:
                uri.period = period
        elif key == "counter":
            counter = _parse_uint(key, value, strict)
            if counter is not None:
                uri.counter = counter
        elif key == "issuer":
            uri.issuer = urllib.parse.unquote_plus(value)

    if strict and not uri.secret:
        raise InvalidURIError("Missing 'secret' parameter in otpauth URI.")
    return uri


# ── Key conversion ────────────────────────────────────────────────────────────

def key_from_uri(uri: OTPAuthURI) -> Key:
    """
    Build a concrete key from parsed URI parameters.

    A missing HOTP counter starts at 0 and a missing TOTP period is 30
    seconds.

    Raises:
        InvalidKeyError:    Steam secret does not decode to 20 bytes.
        InvalidDigitsError: ``digits`` is not 6, 7 or 8 (HOTP/TOTP).
    """
    if uri.otp_type == KeyType.HOTP:
        return HOTPKey(
            name=uri.label,
            secret=uri.secret,
            digits=uri.digits,
            counter=uri.counter if uri.counter is not None else DEFAULT_COUNTER,
            algorithm=uri.algorithm,
            issuer=uri.issuer,
        )
    if uri.otp_type == KeyType.TOTP:
        return TOTPKey(
            name=uri.label,
            secret=uri.secret,
            digits=uri.digits,
            time_step=uri.period if uri.period is not None else DEFAULT_PERIOD,
            algorithm=uri.algorithm,
            issuer=uri.issuer,
        )
    if uri.otp_type == KeyType.STEAM:
        return SteamGuardKey.from_base32(uri.secret, name=uri.label)
    raise AssertionError(f"Unhandled key type {uri.otp_type!r}")


def uri_from_key(key: Key) -> OTPAuthURI:
    """Project ``key`` into URI parameters; inverse of :func:`key_from_uri`."""
    if isinstance(key, HOTPKey):
        return OTPAuthURI(
            label=key.name,
            otp_type=KeyType.HOTP,
            secret=key.secret,
            algorithm=key.algorithm,
            digits=key.digits,
            counter=key.counter,
            issuer=key.issuer,
        )
    if isinstance(key, TOTPKey):
        return OTPAuthURI(
            label=key.name,
            otp_type=KeyType.TOTP,
            secret=key.secret,
            algorithm=key.algorithm,
            digits=key.digits,
            period=key.time_step,
            issuer=key.issuer,
        )
    if isinstance(key, SteamGuardKey):
        return OTPAuthURI(
            label=key.name,
            otp_type=KeyType.STEAM,
            secret=key.to_base32(),
            algorithm=Algorithm.SHA1,
            digits=STEAM_DIGITS,
            period=STEAM_PERIOD,
            issuer=STEAM_ISSUER,
        )
    raise TypeError(f"Unsupported key type {type(key).__name__}")


def otpauth_from_uri(text: str) -> Key:
    """Parse ``text`` and build the key it describes."""
    return key_from_uri(parse_otpauth_uri(text))
