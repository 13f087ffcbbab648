"""
Little-endian scalar extraction that is safe on any host byte order.

Every multi-byte value in a BMP file is stored little-endian. The bytes are
reinterpreted in native order, so on a big-endian host the slice is reversed
first. This is the only module that deals with byte order.
"""

import struct
from functools import lru_cache

from bmp_errors import BMPReadError

# Native-order struct codes ('=' means native order, standard sizes)
_SCALAR_FORMATS = {
    "u16": "=H",
    "u32": "=I",
    "u64": "=Q",
    "i16": "=h",
    "i32": "=i",
    "i64": "=q",
}


@lru_cache(maxsize=None)
def host_is_little_endian():
    # The least significant byte of 1 sits at the lowest address on LE hosts
    probe = struct.pack("=I", 1)
    return probe[0] == 1


def reverse_bytes(data):
    return bytes(data[::-1])


def read_le(buffer, offset, kind, little_endian=None):
    """
    Extract a scalar stored little-endian at buffer[offset].

    Args:
        buffer: bytes-like object.
        offset: Start of the value within buffer.
        kind: One of u16, u32, u64, i16, i32, i64.
        little_endian: Host byte order override; detected when None.

    Raises:
        BMPReadError: If fewer than sizeof(kind) bytes are available.
    """
    fmt = _SCALAR_FORMATS[kind]
    size = struct.calcsize(fmt)
    if offset < 0 or offset + size > len(buffer):
        raise BMPReadError(offset, size, f"Buffer too short for {kind} at offset {offset}")

    chunk = bytes(buffer[offset:offset + size])
    if little_endian is None:
        little_endian = host_is_little_endian()
    if not little_endian:
        chunk = reverse_bytes(chunk)
    return struct.unpack(fmt, chunk)[0]


def read_u16(buffer, offset):
    return read_le(buffer, offset, "u16")


def read_u32(buffer, offset):
    return read_le(buffer, offset, "u32")


def read_u64(buffer, offset):
    return read_le(buffer, offset, "u64")


def read_i16(buffer, offset):
    return read_le(buffer, offset, "i16")


def read_i32(buffer, offset):
    return read_le(buffer, offset, "i32")


def read_i64(buffer, offset):
    return read_le(buffer, offset, "i64")


def unpack_le(buffer, offset, size):
    # Arbitrary width (e.g. 24-bit pixels): first byte is the lowest-order one
    value = 0
    for i in range(size):
        value |= buffer[offset + i] << (8 * i)
    return value
