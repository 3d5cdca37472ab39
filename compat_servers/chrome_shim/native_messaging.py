"""Chrome Native Messaging transport for the shim host.

Frames are a 4-byte little-endian length followed by UTF-8 JSON.
- Inbound:  {"name": "<channel>", "message": "<JSON text>"}
- Outbound: {"name": "<reply channel>", "message": "<envelope JSON text>"}

Native messaging owns stdout. Never write logs there.
"""

from __future__ import annotations

import json
import logging
import struct
from typing import Any, BinaryIO

from .dispatcher import Dispatcher, HostEvent

logger = logging.getLogger("chrome_shim.native_messaging")

MAX_FRAME_BYTES = 8_000_000


class FrameError(Exception):
    pass


class MalformedFrame(FrameError):
    """Frame body is unusable but the stream is still in sync."""


def _read_exact(stream: BinaryIO, n: int) -> bytes | None:
    buf = bytearray()
    while len(buf) < n:
        chunk = stream.read(n - len(buf))
        if not chunk:
            return None
        buf.extend(chunk)
    return bytes(buf)


def read_frame(stream: BinaryIO) -> dict[str, Any] | None:
    """Read one length-prefixed JSON frame. Returns None on EOF."""
    header = _read_exact(stream, 4)
    if header is None:
        return None
    (length,) = struct.unpack("<I", header)
    if length <= 0 or length > MAX_FRAME_BYTES:
        raise FrameError(f"invalid native frame length: {length}")
    raw = _read_exact(stream, int(length))
    if raw is None:
        return None
    try:
        obj = json.loads(raw.decode("utf-8"))
    except ValueError as exc:
        # UnicodeDecodeError and JSONDecodeError are both ValueErrors.
        raise MalformedFrame(f"undecodable native frame: {exc}") from exc
    if not isinstance(obj, dict):
        raise MalformedFrame("native frame is not a JSON object")
    return obj


def write_frame(stream: BinaryIO, msg: dict[str, Any]) -> None:
    raw = json.dumps(msg, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    if len(raw) > MAX_FRAME_BYTES:
        raise FrameError(f"native frame too large: {len(raw)} bytes")
    stream.write(struct.pack("<I", len(raw)))
    stream.write(raw)
    stream.flush()


class NativeResponder:
    """Responder handle that answers over the native messaging stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def dispatch_message(self, channel: str, payload: str) -> None:
        write_frame(self._stream, {"name": channel, "message": payload})


def _event_from_frame(frame: dict[str, Any], responder: NativeResponder) -> HostEvent:
    message = frame.get("message")
    if not isinstance(message, str):
        # Extensions may post the object itself instead of its JSON text.
        message = json.dumps(message if message is not None else {}, ensure_ascii=False)
    return HostEvent(name=str(frame.get("name") or ""), message=message, target=responder)


def serve(dispatcher: Dispatcher, stdin: BinaryIO, stdout: BinaryIO) -> int:
    """Handle frames until EOF. Returns the number of events answered."""
    responder = NativeResponder(stdout)
    handled = 0
    while True:
        try:
            frame = read_frame(stdin)
        except MalformedFrame as exc:
            logger.error("skipped frame: %s", exc)
            continue
        if frame is None:
            return handled
        event = _event_from_frame(frame, responder)
        try:
            envelope = dispatcher.handle(event)
        except json.JSONDecodeError as exc:
            logger.error("malformed message on channel=%s: %s", event.name, exc)
            continue
        if envelope is not None:
            handled += 1


__all__ = ["MAX_FRAME_BYTES", "FrameError", "MalformedFrame", "NativeResponder", "read_frame", "serve", "write_frame"]
