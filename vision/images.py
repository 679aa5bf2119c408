"""Frame descriptors and base64 encoding for outbound vision requests."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union
from urllib.parse import unquote, urlparse

from core.logging import logger


@dataclass(frozen=True)
class Frame:
    """Camera frame handle as delivered by the capture collaborator.

    ``base64`` is used as-is when the capture layer already encoded the JPEG;
    otherwise ``uri`` points at a file on disk.
    """

    uri: str | None = None
    base64: str | None = None


FrameLike = Union[Frame, bytes, bytearray, str, Path, dict, None]


def _path_from_uri(uri: str) -> Path:
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(uri)


def encode_bytes(image_bytes: bytes) -> str:
    return base64.b64encode(image_bytes).decode("utf-8")


def frame_to_base64(frame: FrameLike) -> str | None:
    """Return the frame as base64 JPEG data, or ``None`` when unreadable."""

    if frame is None:
        logger.debug("[Vision] frame is missing")
        return None

    if isinstance(frame, (bytes, bytearray)):
        return encode_bytes(bytes(frame)) if frame else None

    uri: Any
    if isinstance(frame, Frame):
        if frame.base64:
            return frame.base64
        uri = frame.uri
    elif isinstance(frame, dict):
        if frame.get("base64"):
            return str(frame["base64"])
        uri = frame.get("uri")
    else:
        uri = frame

    if not uri:
        logger.debug("[Vision] frame has no uri or inline data")
        return None

    path = uri if isinstance(uri, Path) else _path_from_uri(str(uri))
    try:
        data = path.read_bytes()
    except OSError as exc:
        logger.warning("[Vision] could not read frame %s: %s", path, exc)
        return None
    return encode_bytes(data) if data else None
