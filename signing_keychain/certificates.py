"""Materialize base64 certificate inputs as temporary .p12 files."""

import base64
import binascii
import os
from pathlib import Path
from typing import Union


CERTIFICATE_FILENAME = "certificate.p12"


class CertificateError(ValueError):
    """Certificate input could not be decoded."""
    pass


def decode_certificate(blob: str) -> bytes:
    """
    Decode a base64-encoded PKCS#12 blob.

    Whitespace (including line breaks from wrapped encoders) is ignored.

    Args:
        blob: Base64 text

    Returns:
        Raw certificate bytes

    Raises:
        CertificateError: If the text is not valid base64 or decodes to nothing
    """
    compact = "".join(blob.split())
    try:
        data = base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CertificateError(f"Certificate is not valid base64: {e}") from e

    if not data:
        raise CertificateError("Certificate is empty")

    return data


def certificate_path(temp_dir: Union[str, Path]) -> Path:
    """Path the current certificate is written to."""
    return Path(temp_dir) / CERTIFICATE_FILENAME


def write_certificate(blob: str, path: Union[str, Path]) -> Path:
    """
    Decode a certificate and write it to path, readable by the owner only.

    Args:
        blob: Base64 text
        path: Destination file (overwritten if present)

    Returns:
        Path of the written file
    """
    data = decode_certificate(blob)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "wb") as f:
        f.write(data)

    return path


def remove_certificate(path: Union[str, Path]) -> None:
    """Delete a certificate file if it exists."""
    Path(path).unlink(missing_ok=True)
