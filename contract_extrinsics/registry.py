"""A portable type registry describing SCALE types by numeric id."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Union


class Primitive(Enum):
    """The primitive types of the SCALE type system."""

    BOOL = "bool"
    CHAR = "char"
    STR = "str"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    U128 = "u128"
    U256 = "u256"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    I128 = "i128"
    I256 = "i256"


@dataclass(frozen=True)
class TypeDefPrimitive:
    """A primitive type."""

    primitive: Primitive


@dataclass(frozen=True)
class Field:
    """A field of a composite type or of an enum variant."""

    type_id: int
    name: str | None = None
    type_name: str | None = None


@dataclass(frozen=True)
class TypeDefComposite:
    """A struct or tuple struct."""

    fields: tuple[Field, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))


@dataclass(frozen=True)
class TypeDefArray:
    """A fixed-length array of one element type."""

    length: int
    type_param: int


@dataclass(frozen=True)
class TypeDefSequence:
    """A variable-length sequence of one element type."""

    type_param: int


@dataclass(frozen=True)
class TypeDefVariant:
    """An enum: each variant is a name with its fields."""

    variants: tuple[tuple[str, tuple[Field, ...]], ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "variants",
            tuple((name, tuple(fields)) for name, fields in self.variants),
        )


TypeDef = Union[
    TypeDefPrimitive, TypeDefComposite, TypeDefArray, TypeDefSequence, TypeDefVariant
]


@dataclass(frozen=True)
class TypeParameter:
    """A generic parameter; ``type_id`` is None when no concrete type is bound."""

    name: str
    type_id: int | None = None


@dataclass(frozen=True)
class PortableType:
    """A type with its path, generic parameters and definition."""

    type_def: TypeDef
    path: tuple[str, ...] = ()
    type_params: tuple[TypeParameter, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", tuple(self.path))
        object.__setattr__(self, "type_params", tuple(self.type_params))


@dataclass(frozen=True)
class PortableRegistry:
    """Types indexed by their position: the id of a type is its index."""

    types: tuple[PortableType, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "types", tuple(self.types))

    def __len__(self) -> int:
        return len(self.types)

    def __iter__(self) -> Iterator[PortableType]:
        return iter(self.types)

    def resolve(self, type_id: int) -> PortableType | None:
        """The type with the given id, or None when there is none."""
        if 0 <= type_id < len(self.types):
            return self.types[type_id]
        return None

    def path_string(self, type_id: int) -> str:
        """The ``::``-joined path of a type; raises LookupError for unknown ids."""
        ty = self.resolve(type_id)
        if ty is None:
            raise LookupError(f"Type {type_id} not found in the registry")
        return "::".join(ty.path)