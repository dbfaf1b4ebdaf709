"""Storage layout of a contract and the root keys that its cells live under."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Union

from .codec import Reader, encode_u32

# A contract storage key is blake2_128 of the raw key, the root key as a
# little-endian u32 and, for mappings, the SCALE-encoded mapping key.
_HASH_PREFIX_LEN = 16
_ROOT_KEY_END = _HASH_PREFIX_LEN + 4


@dataclass(frozen=True)
class LeafLayout:
    """A value stored in its parent's cell."""

    key: int
    type_id: int


@dataclass(frozen=True)
class ArrayLayout:
    """A fixed-length array of values laid out from an offset."""

    offset: int
    length: int
    layout: "Layout"


@dataclass(frozen=True)
class HashLayout:
    """Values at hashed offsets; contracts do not produce this layout."""

    offset: int
    layout: "Layout"


@dataclass(frozen=True)
class FieldLayout:
    """A named field of a struct layout."""

    name: str
    layout: "Layout"


@dataclass(frozen=True)
class StructLayout:
    """A struct and the layouts of its fields."""

    name: str
    fields: tuple[FieldLayout, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))


@dataclass(frozen=True)
class EnumLayout:
    """An enum: each variant is a discriminant with its struct layout."""

    name: str
    dispatch_key: int
    variants: tuple[tuple[int, StructLayout], ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "variants", tuple(tuple(v) for v in self.variants))


@dataclass(frozen=True)
class RootLayout:
    """A layout stored in its own cell under a root key."""

    root_key: int
    type_id: int
    layout: "Layout"


Layout = Union[LeafLayout, ArrayLayout, HashLayout, StructLayout, EnumLayout, RootLayout]


@dataclass(frozen=True)
class RootKeyEntry:
    """A root key with the path that leads to it and the type stored there."""

    root_key: int
    path: tuple[str, ...]
    type_id: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", tuple(self.path))

    def to_dict(self) -> dict:
        return {
            "root_key": "0x" + encode_u32(self.root_key).hex(),
            "path": list(self.path),
            "type_id": self.type_id,
        }


def _struct_entries(
    layout: StructLayout, path: tuple[str, ...]
) -> Iterator[RootKeyEntry]:
    struct_path = path + (layout.name,)
    for field_layout in layout.fields:
        yield from _entries(field_layout.layout, struct_path + (field_layout.name,))


def _entries(layout: Layout, path: tuple[str, ...]) -> Iterator[RootKeyEntry]:
    if isinstance(layout, RootLayout):
        yield RootKeyEntry(layout.root_key, path, layout.type_id)
        yield from _entries(layout.layout, path)
    elif isinstance(layout, StructLayout):
        yield from _struct_entries(layout, path)
    elif isinstance(layout, EnumLayout):
        enum_path = path + (layout.name,)
        for discriminant, struct_layout in sorted(layout.variants, key=lambda v: v[0]):
            yield from _struct_entries(struct_layout, enum_path + (str(discriminant),))
    elif isinstance(layout, HashLayout):
        raise ValueError("Hash layouts are never constructed for contract storage")
    elif isinstance(layout, (ArrayLayout, LeafLayout)):
        return
    else:
        raise TypeError(f"Unknown layout: {layout!r}")


def collect_root_key_entries(layout: Layout) -> list[RootKeyEntry]:
    """All root keys in a layout, with paths starting at ``root``."""
    return list(_entries(layout, ("root",)))


def key_parts(key: bytes) -> tuple[int, bytes | None]:
    """Split a storage key into its root key and optional mapping key."""
    key = bytes(key)
    if len(key) < _ROOT_KEY_END:
        raise ValueError("key must be at least 20 bytes")
    root_key = Reader(key[_HASH_PREFIX_LEN:_ROOT_KEY_END]).read_u32()
    mapping_key = key[_ROOT_KEY_END:] if len(key) > _ROOT_KEY_END else None
    return root_key, mapping_key