"""Tests for otpkey.qr.parser."""

import pytest

from otpkey.core.errors import InvalidDigitsError, InvalidKeyError, InvalidURIError
from otpkey.core.hotp import HOTPKey
from otpkey.core.key import KeyType
from otpkey.core.otp import Algorithm
from otpkey.core.steam import SteamGuardKey
from otpkey.core.totp import TOTPKey
from otpkey.qr.parser import (
    OTPAuthURI,
    build_otpauth_uri,
    key_from_uri,
    otpauth_from_uri,
    parse_otpauth_uri,
    uri_from_key,
)

ACME_TOTP = (
    "otpauth://totp/ACME%20Co:john.doe@email.com?secret=HXDMVJECJJWSRB3HWIZR4IFUGFTMXBOZ"
    "&issuer=ACME%20Co&algorithm=SHA256&digits=7&period=60"
)
ACME_HOTP = (
    "otpauth://hotp/ACME%20Co:john.doe@email.com?secret=HXDMVJECJJWSRB3HWIZR4IFUGFTMXBOZ"
    "&issuer=ACME%20Co&algorithm=SHA256&digits=7&counter=7"
)


# ── Valid TOTP URIs ───────────────────────────────────────────────────────────

def test_parse_acme_totp() -> None:
    result = parse_otpauth_uri(ACME_TOTP)
    assert result.otp_type is KeyType.TOTP
    assert result.label == "ACME Co:john.doe@email.com"
    assert result.account_name == "john.doe@email.com"
    assert result.issuer == "ACME Co"
    assert result.secret == "HXDMVJECJJWSRB3HWIZR4IFUGFTMXBOZ"
    assert result.algorithm is Algorithm.SHA256
    assert result.digits == 7
    assert result.period == 60
    assert result.counter is None


def test_acme_totp_builds_seven_digit_key() -> None:
    key = otpauth_from_uri(ACME_TOTP)
    assert isinstance(key, TOTPKey)
    assert key.name == "ACME Co:john.doe@email.com"
    assert key.issuer == "ACME Co"
    assert key.time_step == 60

    code = key.generate_code()
    assert len(code) == 7 and code.isdigit()

    expected = TOTPKey(
        name="ACME Co:john.doe@email.com",
        secret="HXDMVJECJJWSRB3HWIZR4IFUGFTMXBOZ",
        digits=7,
        time_step=60,
        algorithm=Algorithm.SHA256,
        issuer="ACME Co",
    )
    assert key == expected
    assert key.generate_code(timestamp=1_700_000_000) == expected.generate_code(
        timestamp=1_700_000_000
    )


def test_parse_defaults_when_fields_missing() -> None:
    result = parse_otpauth_uri("otpauth://totp/myaccount?secret=JBSWY3DPEHPK3PXP")
    assert result.label == "myaccount"
    assert result.algorithm is Algorithm.SHA1
    assert result.digits == 6
    assert result.period is None
    assert result.issuer is None

    key = key_from_uri(result)
    assert isinstance(key, TOTPKey)
    assert key.time_step == 30
    assert key.digits == 6


def test_parse_any_field_order_and_unknown_keys() -> None:
    result = parse_otpauth_uri(
        "otpauth://totp/Example:alice?image=https%3A%2F%2Fx&period=45"
        "&foo=bar&secret=JBSWY3DPEHPK3PXP&algorithm=sha512"
    )
    assert result.period == 45
    assert result.secret == "JBSWY3DPEHPK3PXP"
    assert result.algorithm is Algorithm.SHA512


def test_parse_plus_in_label_is_space() -> None:
    result = parse_otpauth_uri("otpauth://totp/ACME+Co%3Abob?secret=JBSWY3DPEHPK3PXP")
    assert result.label == "ACME Co:bob"


# ── Valid HOTP URIs ───────────────────────────────────────────────────────────

def test_parse_acme_hotp() -> None:
    result = parse_otpauth_uri(ACME_HOTP)
    assert result.otp_type is KeyType.HOTP
    assert result.counter == 7
    assert result.period is None

    key = key_from_uri(result)
    assert isinstance(key, HOTPKey)
    assert key.counter == 7
    assert key.digits == 7
    assert key.algorithm is Algorithm.SHA256


def test_hotp_missing_counter_starts_at_zero() -> None:
    key = otpauth_from_uri("otpauth://hotp/eve?secret=GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ")
    assert isinstance(key, HOTPKey)
    assert key.counter == 0
    assert key.generate_code() == "287082"


# ── Leniency ──────────────────────────────────────────────────────────────────

def test_unparsable_numbers_keep_defaults() -> None:
    result = parse_otpauth_uri(
        "otpauth://hotp/acc?secret=JBSWY3DPEHPK3PXP&digits=six&counter=-3&period=x"
    )
    assert result.digits == 6
    assert result.counter is None
    assert result.period is None


def test_non_ascii_digits_keep_defaults() -> None:
    result = parse_otpauth_uri(
        "otpauth://totp/acc?secret=JBSWY3DPEHPK3PXP&digits=²&period=¹&counter=+4"
    )
    assert result.digits == 6
    assert result.period is None
    assert result.counter is None
    assert result.secret == "JBSWY3DPEHPK3PXP"


def test_non_ascii_digits_rejected_when_strict() -> None:
    with pytest.raises(InvalidURIError, match="digits"):
        parse_otpauth_uri("otpauth://totp/acc?secret=JBSWY3DPEHPK3PXP&digits=²", strict=True)


@pytest.mark.parametrize("text", ["", "garbage", "otpauth://", "otpauth://totp"])
def test_unrecognised_string_yields_default_bag(text: str) -> None:
    assert parse_otpauth_uri(text) == OTPAuthURI()


def test_missing_label_is_empty() -> None:
    result = parse_otpauth_uri("otpauth://totp/?secret=JBSWY3DPEHPK3PXP")
    assert result.label == ""
    assert result.secret == "JBSWY3DPEHPK3PXP"


def test_label_keeps_remaining_path_segments() -> None:
    result = parse_otpauth_uri("otpauth://totp/ACME/ops:alice?secret=JBSWY3DPEHPK3PXP")
    assert result.label == "ACME/ops:alice"
    assert parse_otpauth_uri(build_otpauth_uri(result)) == result


def test_unknown_type_defaults_to_totp() -> None:
    assert parse_otpauth_uri("otpauth://motp/acc?secret=AAAA").otp_type is KeyType.TOTP


# ── Strict mode ───────────────────────────────────────────────────────────────

@pytest.mark.parametrize("text,match", [
    ("http://totp/acc?secret=ABC", "scheme"),
    ("otpauth://motp/acc?secret=JBSWY3DPEHPK3PXP", "OTP type"),
    ("otpauth://totp/acc", "secret"),
    ("otpauth://totp/acc?secret=JBSWY3DPEHPK3PXP&algorithm=MD5", "algorithm"),
    ("otpauth://totp/acc?secret=JBSWY3DPEHPK3PXP&digits=x", "digits"),
    ("otpauth://hotp/acc?secret=JBSWY3DPEHPK3PXP&counter=-1", "counter"),
])
def test_strict_parse_rejects(text: str, match: str) -> None:
    with pytest.raises(InvalidURIError, match=match):
        parse_otpauth_uri(text, strict=True)


def test_strict_parse_accepts_valid() -> None:
    assert parse_otpauth_uri(ACME_TOTP, strict=True) == parse_otpauth_uri(ACME_TOTP)


# ── Reconstruction errors ─────────────────────────────────────────────────────

def test_bad_digits_rejected_on_reconstruction() -> None:
    with pytest.raises(InvalidDigitsError):
        otpauth_from_uri("otpauth://totp/acc?secret=JBSWY3DPEHPK3PXP&digits=5")


def test_bad_secret_fails_on_code_generation() -> None:
    key = otpauth_from_uri("otpauth://totp/acc?secret=1111")
    with pytest.raises(InvalidKeyError):
        key.generate_code()


# ── Builder ───────────────────────────────────────────────────────────────────

def test_build_field_order() -> None:
    uri = parse_otpauth_uri(ACME_HOTP)
    assert build_otpauth_uri(uri) == (
        "otpauth://hotp/ACME+Co%3Ajohn.doe%40email.com"
        "?secret=HXDMVJECJJWSRB3HWIZR4IFUGFTMXBOZ&algorithm=SHA256&digits=7"
        "&counter=7&issuer=ACME+Co"
    )
    assert str(uri) == build_otpauth_uri(uri)


@pytest.mark.parametrize("uri", [
    OTPAuthURI(
        label="Example:alice@example.com", otp_type=KeyType.TOTP,
        secret="JBSWY3DPEHPK3PXP", algorithm=Algorithm.SHA512, digits=8,
        period=45, issuer="Example & Sons",
    ),
    OTPAuthURI(
        label="bob", otp_type=KeyType.HOTP, secret="JBSWY3DPEHPK3PXP",
        algorithm=Algorithm.SHA1, digits=6, counter=10, issuer="Bob's",
    ),
])
def test_build_parse_roundtrip(uri: OTPAuthURI) -> None:
    assert parse_otpauth_uri(build_otpauth_uri(uri)) == uri


def test_key_uri_roundtrip_keeps_counter() -> None:
    key = HOTPKey(name="bob", secret="JBSWY3DPEHPK3PXP", counter=3, issuer="B")
    key.generate_code()
    restored = otpauth_from_uri(str(uri_from_key(key)))
    assert restored == key
    assert restored.counter == 4


def test_totp_key_uri_roundtrip() -> None:
    key = TOTPKey(name="alice", secret="JBSWY3DPEHPK3PXP", digits=8, time_step=60)
    assert OTPAuthURI.from_key(key).to_key() == key


def test_steam_key_uri_roundtrip() -> None:
    key = SteamGuardKey("gaben", b"12345678901234567890")
    uri = uri_from_key(key)
    assert uri.otp_type is KeyType.STEAM
    assert uri.issuer == "Steam"
    assert str(uri).startswith("otpauth://steam/gaben?secret=GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ")

    restored = otpauth_from_uri(str(uri))
    assert isinstance(restored, SteamGuardKey)
    assert restored.secret == key.secret
    assert restored.generate_code(timestamp=0) == "GG5F5"
