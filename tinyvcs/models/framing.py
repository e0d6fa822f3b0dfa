"""Fixed-width integers and length-prefixed records."""

import struct
from typing import BinaryIO, Iterator

from tinyvcs.errors import CorruptTree

__all__ = ["U64", "pack_u64", "unpack_u64", "read_exact", "read_u64", "frame", "iter_frames"]

U64 = struct.Struct("<Q")


def pack_u64(value: int) -> bytes:
    return U64.pack(value)


def unpack_u64(data: bytes, offset: int = 0) -> int:
    (value,) = U64.unpack_from(data, offset)
    return value


def read_exact(stream: BinaryIO, size: int, *, what: str = "record") -> bytes:
    """Read exactly ``size`` bytes or raise :class:`CorruptTree`."""
    chunks = []
    remaining = size
    while remaining:
        chunk = stream.read(remaining)
        if not chunk:
            raise CorruptTree(f"Truncated {what}: expected {size} bytes, got {size - remaining}")
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def read_u64(stream: BinaryIO, *, what: str = "length") -> int:
    return unpack_u64(read_exact(stream, U64.size, what=what))


def frame(payload: bytes) -> bytes:
    return pack_u64(len(payload)) + payload


def iter_frames(stream: BinaryIO, count: int) -> Iterator[bytes]:
    for index in range(count):
        length = read_u64(stream, what=f"length of record {index}")
        yield read_exact(stream, length, what=f"record {index}")
