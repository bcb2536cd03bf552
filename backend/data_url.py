"""Helpers for ``data:<mime>;base64,<payload>`` strings."""
import base64
import re
from io import BytesIO
from typing import NamedTuple, Optional

from PIL import Image, UnidentifiedImageError

DEFAULT_MIME = "image/png"

_DATA_URL_RE = re.compile(r"^data:([^;]+);base64,(.+)$", re.DOTALL)
_HEAD_MIME_RE = re.compile(r":(.*?);")


class DataUrlParts(NamedTuple):
    mime_type: str
    payload: str


def decode(data_url: str) -> DataUrlParts:
    """Split a data URL into its MIME type and base64 payload.

    Inputs that don't match the strict grammar are split on the first comma
    instead. Never raises.
    """
    text = data_url if isinstance(data_url, str) else str(data_url)
    match = _DATA_URL_RE.match(text)
    if match:
        return DataUrlParts(match.group(1), match.group(2))

    head, sep, payload = text.partition(",")
    mime = _HEAD_MIME_RE.search(head)
    mime_type = mime.group(1) if mime and mime.group(1) else DEFAULT_MIME
    return DataUrlParts(mime_type, payload if sep else "")


def encode(mime_type: str, payload: str) -> str:
    return f"data:{mime_type};base64,{payload}"


def encode_bytes(mime_type: str, raw: bytes) -> str:
    return encode(mime_type, base64.b64encode(raw).decode("utf-8"))


def sniff_image_mime(raw: bytes, declared: Optional[str] = None) -> str:
    # Browsers sometimes send application/octet-stream for HEIC/WebP picks
    if declared and declared.startswith("image/"):
        return declared
    try:
        with Image.open(BytesIO(raw)) as img:
            fmt = img.format
    except (UnidentifiedImageError, OSError, ValueError):
        return DEFAULT_MIME
    return Image.MIME.get(fmt or "", DEFAULT_MIME)
