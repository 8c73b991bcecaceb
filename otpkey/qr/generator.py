"""
Render otpauth:// URIs as QR code images with ``qrcode``.
"""

import logging
from pathlib import Path
from typing import Union

from otpkey.core.errors import InvalidPathError
from otpkey.qr.parser import OTPAuthURI, build_otpauth_uri

logger = logging.getLogger(__name__)

BOX_SIZE = 16
BORDER = 4


def make_qr_image(uri: Union[OTPAuthURI, str]):
    """
    Build a black-on-white QR image for ``uri``.

    Uses high error correction so codes survive being photographed from a
    screen.

    Returns:
        A ``qrcode`` PIL image wrapper (has a ``save`` method).
    """
    try:
        import qrcode
    except ImportError as exc:
        raise RuntimeError(f"QR generation requires qrcode[pil]: {exc}") from exc

    data = build_otpauth_uri(uri) if isinstance(uri, OTPAuthURI) else uri
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=BOX_SIZE,
        border=BORDER,
    )
    qr.add_data(data)
    qr.make(fit=True)
    return qr.make_image(fill_color="black", back_color="white")


def write_qr_code(uri: Union[OTPAuthURI, str], path: Union[str, Path]) -> None:
    """
    Save ``uri`` as a QR code PNG at ``path``, overwriting an existing file.

    Raises:
        InvalidPathError: If ``path`` is a directory or its parent directory
            does not exist, or the image cannot be written.
    """
    path = Path(path)
    if path.is_dir():
        raise InvalidPathError(f"Target path is not a file: {path}")
    if not path.parent.exists():
        raise InvalidPathError(f"Target directory does not exist: {path.parent}")

    img = make_qr_image(uri)
    try:
        img.save(str(path))
    except OSError as exc:
        logger.error("Could not save QR code to %s: %s", path, exc)
        raise InvalidPathError(f"Could not save file: {path}") from exc
    logger.info("Wrote QR code to %s", path)
