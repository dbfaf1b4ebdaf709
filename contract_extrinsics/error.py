"""Errors reported by contract extrinsics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from .primitives import DispatchError


def _debug_str(text: str) -> str:
    escaped = (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


@dataclass(frozen=True)
class ModuleError:
    """An error raised by a runtime pallet."""

    pallet: str
    error: str
    docs: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"pallet": self.pallet, "error": self.error, "docs": list(self.docs)}


@dataclass(frozen=True)
class GenericError:
    """Any other error, carried as a message."""

    error: str

    def to_dict(self) -> dict:
        return {"error": self.error}


class ErrorVariant(Exception):
    """An error from a pallet module or a generic error message."""

    def __init__(self, detail: ModuleError | GenericError) -> None:
        super().__init__(detail)
        self.detail = detail

    @classmethod
    def generic(cls, message: str) -> ErrorVariant:
        return cls(GenericError(message))

    @property
    def is_module(self) -> bool:
        return isinstance(self.detail, ModuleError)

    def to_dict(self) -> dict:
        key = "module_error" if self.is_module else "generic_error"
        return {key: self.detail.to_dict()}

    def __str__(self) -> str:
        if isinstance(self.detail, ModuleError):
            docs = ", ".join(_debug_str(d) for d in self.detail.docs)
            return f"ModuleError: {self.detail.pallet}::{self.detail.error}: [{docs}]"
        return self.detail.error

    def __repr__(self) -> str:
        return str(self)


@dataclass(frozen=True)
class ErrorInfo:
    """Metadata of one error variant of a pallet."""

    name: str
    docs: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PalletMetadata:
    """The parts of a pallet's metadata needed to describe its errors."""

    name: str
    index: int
    errors: Mapping[int, ErrorInfo] = field(default_factory=dict)


def error_from_dispatch(
    error: DispatchError, pallets: Iterable[PalletMetadata]
) -> ErrorVariant:
    """Describe a dispatch error using the chain's pallet metadata."""
    if error.variant != "Module":
        return ErrorVariant.generic(f"DispatchError: {error}")
    pallet = next((p for p in pallets if p.index == error.module_index), None)
    if pallet is None:
        raise LookupError(f"Pallet with index {error.module_index} not found")
    variant_index = error.module_error[0]
    info = pallet.errors.get(variant_index)
    if info is None:
        raise LookupError(f"Error variant {variant_index} not found")
    return ErrorVariant(ModuleError(pallet.name, info.name, list(info.docs)))