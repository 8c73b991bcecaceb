"""
Steam Desktop Authenticator ``.maFile`` records.

A maFile is a flat JSON object::

    account_name, device_id, identity_secret, revocation_code, secret_1,
    serial_number, server_time, shared_secret, status, token_gid, uri

Only ``shared_secret``, ``account_name`` and ``revocation_code`` feed a
:class:`~otpkey.core.steam.SteamGuardKey`; the other fields are carried
through unchanged. Steam writes some 64-bit integers as strings, so integer
fields accept either form.
"""

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Union

from otpkey.core.errors import InvalidPathError, OTPError
from otpkey.core.steam import SteamGuardKey

logger = logging.getLogger(__name__)

_INT_FIELDS = ("serial_number", "server_time", "status")


@dataclass
class MaFile:
    """A Steam Guard authenticator record."""

    account_name: str = ""
    device_id: str = ""
    identity_secret: str = ""
    revocation_code: str = ""
    secret_1: str = ""
    serial_number: int = 0
    server_time: int = 0
    shared_secret: str = ""     # base64, 20 bytes decoded
    status: int = 0
    token_gid: str = ""
    uri: str = ""

    # ── Construction ─────────────────────────────────────────────────────

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MaFile":
        """Build from a decoded JSON object; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                continue
            if key in _INT_FIELDS:
                try:
                    value = int(value)
                except (TypeError, ValueError) as exc:
                    raise OTPError(f"maFile field '{key}' is not an integer: {value!r}") from exc
            values[key] = value
        return cls(**values)

    @classmethod
    def from_json(cls, text: str) -> "MaFile":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise OTPError(f"Invalid maFile JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise OTPError("maFile must contain a JSON object.")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "MaFile":
        path = Path(path)
        if not path.is_file():
            raise InvalidPathError(f"maFile not found: {path}")
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.error("Could not read maFile %s: %s", path, exc)
            raise InvalidPathError(f"Could not read file: {path}") from exc
        logger.debug("Loaded maFile %s", path)
        return cls.from_json(text)

    # ── Export ───────────────────────────────────────────────────────────

    def to_json(self) -> str:
        return json.dumps(asdict(self), indent=2)

    def save(self, path: Union[str, Path]) -> None:
        path = Path(path)
        if path.is_dir():
            raise InvalidPathError(f"Target path is not a file: {path}")
        try:
            path.write_text(self.to_json(), encoding="utf-8")
        except OSError as exc:
            logger.error("Could not write maFile %s: %s", path, exc)
            raise InvalidPathError(f"Could not save file: {path}") from exc

    def to_key(self) -> SteamGuardKey:
        """Build the Steam Guard key described by this record."""
        return SteamGuardKey.from_mafile(self)
