"""
Read otpauth:// URIs from QR code images.

Uses OpenCV for image loading and pyzbar for decoding. pyzbar needs the
system zbar library, so both are imported lazily and reported as a
RuntimeError when missing.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from otpkey.core.errors import InvalidPathError
from otpkey.core.key import Key
from otpkey.qr.parser import OTPAuthURI, key_from_uri, parse_otpauth_uri

logger = logging.getLogger(__name__)


def _check_deps() -> tuple[bool, str]:
    """Return (available, message) for optional scanning deps."""
    try:
        import cv2  # noqa: F401
        from pyzbar import pyzbar  # noqa: F401
        return True, ""
    except ImportError as exc:
        return False, str(exc)


def _check_file(path: Path) -> None:
    if not path.exists():
        raise InvalidPathError(f"Target path does not exist: {path}")
    if path.is_dir():
        raise InvalidPathError(f"Target path is not a file: {path}")


def scan_image_file(path: Union[str, Path]) -> Optional[str]:
    """
    Decode the first QR code from an image file.

    Args:
        path: Path to the image file.

    Returns:
        Decoded string, or None if no QR code found.

    Raises:
        InvalidPathError: If the path is missing, is a directory, or is not a
            readable image.
        RuntimeError: If dependencies are unavailable.
    """
    path = Path(path)
    _check_file(path)

    available, msg = _check_deps()
    if not available:
        raise RuntimeError(
            f"QR scanning requires opencv-python and pyzbar: {msg}"
        )

    import cv2
    from pyzbar import pyzbar

    img = cv2.imread(str(path))
    if img is None:
        logger.error("Could not read image %s", path)
        raise InvalidPathError(f"Could not read image: {path}")

    codes = pyzbar.decode(img)
    for code in codes:
        if code.type == "QRCODE":
            return code.data.decode("utf-8", errors="ignore")
    return None


def uri_from_qr_code(path: Union[str, Path]) -> OTPAuthURI:
    """
    Decode the QR code in ``path`` and parse it as an otpauth URI.

    Raises:
        InvalidPathError: If no QR code is present, or the file cannot be read.
    """
    data = scan_image_file(path)
    if data is None:
        raise InvalidPathError(f"Could not detect QR code in {path}")
    logger.debug("Decoded QR code from %s", path)
    return parse_otpauth_uri(data)


def otpauth_from_qr_code(path: Union[str, Path]) -> Key:
    """Build the key described by the QR code in ``path``."""
    return key_from_uri(uri_from_qr_code(path))
