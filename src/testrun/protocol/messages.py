# src/testrun/protocol/messages.py

"""
Wire format of the coordinator protocol.

Every frame is a little-endian header `tag: u32, bytes_len: u32` followed
by `bytes_len` body bytes.
"""

import struct
from collections.abc import Sequence
from enum import IntEnum

from attrs import define, field

HEADER = struct.Struct("<II")
U32 = struct.Struct("<I")
TEST_METADATA_HEADER = struct.Struct("<II")
TEST_RESULTS = struct.Struct("<II")

# fail, skip and leak take the low three bits of the flags word.
LOG_ERR_COUNT_SHIFT = 3
LOG_ERR_COUNT_MAX = (1 << (32 - LOG_ERR_COUNT_SHIFT)) - 1


class InTag(IntEnum):
    """Messages sent by the coordinator."""

    EXIT = 0
    UPDATE = 1
    RUN = 2
    HOT_UPDATE = 3
    QUERY_TEST_METADATA = 4
    RUN_TEST = 5


class OutTag(IntEnum):
    """Messages sent by the harness."""

    HARNESS_VERSION = 0
    ERROR_BUNDLE = 1
    PROGRESS = 2
    EMIT_BIN_PATH = 3
    TEST_METADATA = 4
    TEST_RESULTS = 5


@define(frozen=True, slots=True)
class MessageHeader:
    tag: int
    bytes_len: int

    def pack(self) -> bytes:
        return HEADER.pack(self.tag, self.bytes_len)

    @classmethod
    def unpack(cls, data: bytes) -> "MessageHeader":
        tag, bytes_len = HEADER.unpack(data)
        return cls(tag=tag, bytes_len=bytes_len)


@define(frozen=True, slots=True)
class StringTable:
    """
    All test names in one buffer: a reserved NUL at offset 0, then each name
    NUL-terminated in registry order. `offsets[i]` is where name i starts.
    """

    string_bytes: bytes
    offsets: tuple[int, ...] = field(converter=tuple)

    @classmethod
    def build(cls, names: Sequence[str]) -> "StringTable":
        buf = bytearray(b"\0")
        offsets = []
        for name in names:
            offsets.append(len(buf))
            buf += name.encode("utf-8")
            buf.append(0)
        return cls(string_bytes=bytes(buf), offsets=offsets)

    def name_at(self, offset: int) -> str:
        end = self.string_bytes.index(b"\0", offset)
        return self.string_bytes[offset:end].decode("utf-8")


@define(frozen=True, slots=True)
class TestMetadata:
    __test__ = False

    names: tuple[int, ...] = field(converter=tuple)
    expected_panic_msgs: tuple[int, ...] = field(converter=tuple)
    string_bytes: bytes = field()

    def encode(self) -> bytes:
        if len(self.names) != len(self.expected_panic_msgs):
            raise ValueError("names and expected_panic_msgs must have the same length")
        count = len(self.names)
        return b"".join(
            (
                TEST_METADATA_HEADER.pack(count, len(self.string_bytes)),
                struct.pack(f"<{count}I", *self.names),
                struct.pack(f"<{count}I", *self.expected_panic_msgs),
                self.string_bytes,
            )
        )

    @classmethod
    def decode(cls, body: bytes) -> "TestMetadata":
        count, string_len = TEST_METADATA_HEADER.unpack_from(body, 0)
        offset = TEST_METADATA_HEADER.size
        names = struct.unpack_from(f"<{count}I", body, offset)
        offset += 4 * count
        panics = struct.unpack_from(f"<{count}I", body, offset)
        offset += 4 * count
        return cls(names=names, expected_panic_msgs=panics, string_bytes=body[offset : offset + string_len])


@define(frozen=True, slots=True)
class TestResults:
    __test__ = False

    index: int
    fail: bool = False
    skip: bool = False
    leak: bool = False
    log_err_count: int = 0

    @property
    def flags(self) -> int:
        count = min(max(self.log_err_count, 0), LOG_ERR_COUNT_MAX)
        return (
            int(self.fail)
            | int(self.skip) << 1
            | int(self.leak) << 2
            | count << LOG_ERR_COUNT_SHIFT
        )

    def encode(self) -> bytes:
        return TEST_RESULTS.pack(self.index, self.flags)

    @classmethod
    def decode(cls, body: bytes) -> "TestResults":
        index, flags = TEST_RESULTS.unpack(body)
        return cls(
            index=index,
            fail=bool(flags & 1),
            skip=bool(flags & 2),
            leak=bool(flags & 4),
            log_err_count=flags >> LOG_ERR_COUNT_SHIFT,
        )

# 🔼⚙️
