# src/testrun/protocol/stream.py

"""
Blocking frame reader/writer over a pair of binary streams.
"""

from typing import BinaryIO

import structlog

from testrun.exceptions import FramingError
from testrun.protocol.messages import HEADER, U32, MessageHeader

log = structlog.get_logger("testrun.protocol.stream")


class MessageStream:
    """Reads frames from `inbound` and writes frames to `outbound`."""

    def __init__(self, inbound: BinaryIO, outbound: BinaryIO):
        self._in = inbound
        self._out = outbound

    def _read_exact(self, size: int, what: str) -> bytes:
        chunks = []
        remaining = size
        while remaining:
            chunk = self._in.read(remaining)
            if not chunk:
                raise FramingError(
                    f"unexpected end of stream while reading {what} ({size - remaining}/{size} bytes)"
                )
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def receive_header(self) -> MessageHeader:
        return MessageHeader.unpack(self._read_exact(HEADER.size, "message header"))

    def receive_body(self, header: MessageHeader) -> bytes:
        return self._read_exact(header.bytes_len, "message body")

    def receive_body_u32(self, header: MessageHeader) -> int:
        if header.bytes_len != U32.size:
            raise FramingError(f"expected a 4 byte body for tag {header.tag}, got {header.bytes_len} bytes")
        return U32.unpack(self._read_exact(U32.size, "u32 body"))[0]

    def send(self, tag: int, body: bytes = b"") -> None:
        self._out.write(MessageHeader(tag=int(tag), bytes_len=len(body)).pack())
        if body:
            self._out.write(body)
        self._out.flush()
        log.debug("Sent message", tag=int(tag), bytes_len=len(body))

# 🔼⚙️
