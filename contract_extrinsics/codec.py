"""Minimal SCALE codec primitives used by the contract extrinsics."""

from __future__ import annotations

from typing import Callable, TypeVar

T = TypeVar("T")

_MAX_BIG_INT_BYTES = 67


class ScaleDecodeError(ValueError):
    """Raised when SCALE encoded data cannot be decoded."""


class Reader:
    """A cursor over SCALE encoded bytes."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def read(self, size: int) -> bytes:
        """Consume exactly ``size`` bytes."""
        if size < 0:
            raise ValueError("size must not be negative")
        end = self._pos + size
        if end > len(self._data):
            raise ScaleDecodeError(
                f"Not enough data to fill buffer: needed {size} bytes, "
                f"{self.remaining()} left"
            )
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def _read_uint(self, size: int) -> int:
        return int.from_bytes(self.read(size), "little")

    def read_u8(self) -> int:
        return self._read_uint(1)

    def read_u32(self) -> int:
        return self._read_uint(4)

    def read_u64(self) -> int:
        return self._read_uint(8)

    def read_u128(self) -> int:
        return self._read_uint(16)

    def read_compact(self) -> int:
        """Decode a compact-encoded unsigned integer, rejecting non-canonical forms."""
        first = self.read_u8()
        mode = first & 0b11
        if mode == 0:
            return first >> 2
        if mode == 1:
            value = int.from_bytes(bytes([first]) + self.read(1), "little") >> 2
            if value < 1 << 6:
                raise ScaleDecodeError("Out of range compact integer")
            return value
        if mode == 2:
            value = int.from_bytes(bytes([first]) + self.read(3), "little") >> 2
            if value < 1 << 14:
                raise ScaleDecodeError("Out of range compact integer")
            return value
        length = (first >> 2) + 4
        raw = self.read(length)
        value = int.from_bytes(raw, "little")
        if value < 1 << 30 or raw[-1] == 0:
            raise ScaleDecodeError("Out of range compact integer")
        return value

    def read_bytes(self) -> bytes:
        """Decode a length-prefixed byte vector."""
        return self.read(self.read_compact())

    def remaining(self) -> int:
        return len(self._data) - self._pos


def encode_u32(value: int) -> bytes:
    return value.to_bytes(4, "little")


def encode_u64(value: int) -> bytes:
    return value.to_bytes(8, "little")


def encode_u128(value: int) -> bytes:
    return value.to_bytes(16, "little")


def encode_compact(value: int) -> bytes:
    """Encode an unsigned integer in SCALE compact form."""
    if value < 0:
        raise ValueError("compact integers must not be negative")
    if value < 1 << 6:
        return bytes([value << 2])
    if value < 1 << 14:
        return ((value << 2) | 0b01).to_bytes(2, "little")
    if value < 1 << 30:
        return ((value << 2) | 0b10).to_bytes(4, "little")
    length = max(4, (value.bit_length() + 7) // 8)
    if length > _MAX_BIG_INT_BYTES:
        raise ValueError("integer too large for compact encoding")
    return bytes([((length - 4) << 2) | 0b11]) + value.to_bytes(length, "little")


def encode_bytes(data: bytes) -> bytes:
    """Encode a byte vector with its compact length prefix."""
    data = bytes(data)
    return encode_compact(len(data)) + data


def encode_option(value: T | None, encoder: Callable[[T], bytes]) -> bytes:
    """Encode an optional value: a zero byte for None, else one and the value."""
    if value is None:
        return b"\x00"
    return b"\x01" + encoder(value)