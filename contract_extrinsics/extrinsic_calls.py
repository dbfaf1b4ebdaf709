"""Calls into the contracts pallet and the runtime API requests that simulate them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from .codec import encode_bytes, encode_compact, encode_option, encode_u128
from .primitives import ACCOUNT_ID_LEN, HASH_LEN, Code, Weight
from .urls import WasmCode

PALLET = "Contracts"


class Determinism(IntEnum):
    """Whether code may use indeterministic instructions."""

    ENFORCED = 0
    RELAXED = 1

    def encode(self) -> bytes:
        return bytes([self.value])


@dataclass(frozen=True)
class Payload:
    """A call ready to be signed and submitted: pallet, call name and encoded arguments."""

    pallet: str
    call: str
    call_data: bytes


def _fixed(name: str, value: bytes, size: int) -> bytes:
    data = bytes(value)
    if len(data) != size:
        raise ValueError(f"{name} must be {size} bytes, got {len(data)}")
    return data


def _code_bytes(code: WasmCode | bytes) -> bytes:
    return code.code if isinstance(code, WasmCode) else bytes(code)


def _compact_option(value: int | None) -> bytes:
    return encode_option(value, encode_compact)


def _u128_option(value: int | None) -> bytes:
    return encode_option(value, encode_u128)


@dataclass(frozen=True)
class RemoveCode:
    """A call to ``remove_code``."""

    code_hash: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "code_hash", _fixed("code_hash", self.code_hash, HASH_LEN))

    def encode(self) -> bytes:
        return self.code_hash

    def build(self) -> Payload:
        return Payload(PALLET, "remove_code", self.encode())


@dataclass(frozen=True)
class UploadCode:
    """A call to ``upload_code``."""

    code: bytes
    storage_deposit_limit: int | None = None
    determinism: Determinism = Determinism.ENFORCED

    def __post_init__(self) -> None:
        object.__setattr__(self, "code", _code_bytes(self.code))
        object.__setattr__(self, "determinism", Determinism(self.determinism))

    def encode(self) -> bytes:
        return (
            encode_bytes(self.code)
            + _compact_option(self.storage_deposit_limit)
            + self.determinism.encode()
        )

    def build(self) -> Payload:
        return Payload(PALLET, "upload_code", self.encode())


@dataclass(frozen=True)
class InstantiateWithCode:
    """A call to ``instantiate_with_code``."""

    value: int
    gas_limit: Weight
    storage_deposit_limit: int | None
    code: bytes
    data: bytes = b""
    salt: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "code", _code_bytes(self.code))

    def encode(self) -> bytes:
        return (
            encode_compact(self.value)
            + self.gas_limit.encode()
            + _compact_option(self.storage_deposit_limit)
            + encode_bytes(self.code)
            + encode_bytes(self.data)
            + encode_bytes(self.salt)
        )

    def build(self) -> Payload:
        return Payload(PALLET, "instantiate_with_code", self.encode())


@dataclass(frozen=True)
class Instantiate:
    """A call to ``instantiate`` with the hash of code already on chain."""

    value: int
    gas_limit: Weight
    storage_deposit_limit: int | None
    code_hash: bytes
    data: bytes = b""
    salt: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "code_hash", _fixed("code_hash", self.code_hash, HASH_LEN))

    def encode(self) -> bytes:
        return (
            encode_compact(self.value)
            + self.gas_limit.encode()
            + _compact_option(self.storage_deposit_limit)
            + self.code_hash
            + encode_bytes(self.data)
            + encode_bytes(self.salt)
        )

    def build(self) -> Payload:
        return Payload(PALLET, "instantiate", self.encode())


@dataclass(frozen=True)
class Call:
    """A call to ``call`` on an existing contract."""

    dest: bytes
    value: int
    gas_limit: Weight
    storage_deposit_limit: int | None
    data: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "dest", _fixed("dest", self.dest, ACCOUNT_ID_LEN))

    def encode(self) -> bytes:
        # The destination is a MultiAddress; the account id form is variant 0.
        return (
            b"\x00"
            + self.dest
            + encode_compact(self.value)
            + self.gas_limit.encode()
            + _compact_option(self.storage_deposit_limit)
            + encode_bytes(self.data)
        )

    def build(self) -> Payload:
        return Payload(PALLET, "call", self.encode())


@dataclass(frozen=True)
class CodeUploadRequest:
    """Arguments of the ``ContractsApi_upload_code`` runtime API call."""

    origin: bytes
    code: bytes
    storage_deposit_limit: int | None = None
    determinism: Determinism = Determinism.ENFORCED

    def __post_init__(self) -> None:
        object.__setattr__(self, "origin", _fixed("origin", self.origin, ACCOUNT_ID_LEN))
        object.__setattr__(self, "code", _code_bytes(self.code))
        object.__setattr__(self, "determinism", Determinism(self.determinism))

    def encode(self) -> bytes:
        return (
            self.origin
            + encode_bytes(self.code)
            + _u128_option(self.storage_deposit_limit)
            + self.determinism.encode()
        )


@dataclass(frozen=True)
class InstantiateRequest:
    """Arguments of the ``ContractsApi_instantiate`` runtime API call."""

    origin: bytes
    value: int
    gas_limit: Weight | None
    storage_deposit_limit: int | None
    code: Code
    data: bytes = b""
    salt: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "origin", _fixed("origin", self.origin, ACCOUNT_ID_LEN))

    def encode(self) -> bytes:
        return (
            self.origin
            + encode_u128(self.value)
            + encode_option(self.gas_limit, Weight.encode)
            + _u128_option(self.storage_deposit_limit)
            + self.code.encode()
            + encode_bytes(self.data)
            + encode_bytes(self.salt)
        )