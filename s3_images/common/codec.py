"""
Base64 payload handling: data-URI headers, strict decoding, encoding.
"""

import base64
import binascii
import mimetypes
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from s3_images.errors import DecodeError

# "data:image/png;base64," with optional extra parameters before ";base64"
DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[^;,]*)(?P<params>(?:;[^;,]*)*?);base64,", re.IGNORECASE)
SUBTYPE_PATTERN = re.compile(r"^[a-z0-9][a-z0-9.-]*$")
GENERIC_SUBTYPES = ("octet-stream",)

MAGIC_NUMBERS = (
    (b"\x89PNG\r\n\x1a\n", "png"),
    (b"\xff\xd8\xff", "jpeg"),
    (b"GIF87a", "gif"),
    (b"GIF89a", "gif"),
    (b"BM", "bmp"),
)


@dataclass(frozen=True)
class DecodedImage:
    """Raw bytes of a payload and the mime type its header declared."""

    data: bytes
    mime_type: Optional[str] = None

    @property
    def extension(self) -> Optional[str]:
        """Extension from the declared mime type, else from the content."""
        return extension_from_mime(self.mime_type) or sniff_extension(self.data)


def parse_payload(payload: str) -> Tuple[Optional[str], str]:
    """Split an optional data-URI header from the base64 body.

    Returns:
        Tuple of (mime type or None, base64 body)
    """
    match = DATA_URI_PATTERN.match(payload)
    if not match:
        return None, payload
    mime_type = match.group("mime").strip().lower() or None
    return mime_type, payload[match.end():]


def decode_base64(payload: str) -> DecodedImage:
    """Decode a base64 payload, with or without a data-URI header.

    Whitespace inside the body is ignored (wrapped base64 is common), any
    other character outside the standard alphabet is rejected.

    Raises:
        DecodeError: If the payload is not valid base64
    """
    if not isinstance(payload, str):
        raise DecodeError(f"Expected a base64 string, got {type(payload).__name__}")

    mime_type, body = parse_payload(payload)
    body = "".join(body.split())
    try:
        data = base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Payload is not valid base64: {e}") from e
    return DecodedImage(data=data, mime_type=mime_type)


def encode_base64(data: bytes, mime_type: Optional[str] = None) -> str:
    """Encode bytes as base64, as a data URI when a mime type is given."""
    encoded = base64.b64encode(data).decode("ascii")
    if mime_type:
        return f"data:{mime_type};base64,{encoded}"
    return encoded


def encode_file_to_base64(path) -> str:
    """Read a local file and return it as a base64 data URI."""
    path = Path(path)
    mime_type, _ = mimetypes.guess_type(path.name)
    return encode_base64(path.read_bytes(), mime_type or "application/octet-stream")


def extension_from_mime(mime_type: Optional[str]) -> Optional[str]:
    """Extract "png" from "image/png" (and "svg" from "image/svg+xml")."""
    if not mime_type or "/" not in mime_type:
        return None
    subtype = mime_type.split("/", 1)[1].split("+", 1)[0].strip().lower()
    if not SUBTYPE_PATTERN.match(subtype) or subtype in GENERIC_SUBTYPES:
        return None
    return subtype


def sniff_extension(data: bytes) -> Optional[str]:
    """Guess an image extension from the leading bytes."""
    for magic, extension in MAGIC_NUMBERS:
        if data.startswith(magic):
            return extension
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "webp"
    return None
