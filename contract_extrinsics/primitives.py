"""Primitive types of the contracts pallet needed for runtime API calls."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum, IntFlag
from typing import Callable, TypeVar

from .codec import Reader, ScaleDecodeError, encode_bytes, encode_compact

T = TypeVar("T")

ACCOUNT_ID_LEN = 32
HASH_LEN = 32


@dataclass(frozen=True)
class Weight:
    """Computational time and proof size of an operation."""

    ref_time: int = 0
    proof_size: int = 0

    def encode(self) -> bytes:
        return encode_compact(self.ref_time) + encode_compact(self.proof_size)

    @classmethod
    def from_reader(cls, reader: Reader) -> Weight:
        return cls(reader.read_compact(), reader.read_compact())

    def __str__(self) -> str:
        return f"Weight(ref_time: {self.ref_time}, proof_size: {self.proof_size})"


class ReturnFlags(IntFlag):
    """Flags passed along by ``seal_return``."""

    EMPTY = 0
    REVERT = 1


@dataclass(frozen=True)
class ExecReturnValue:
    """Output of a contract call or instantiation which ran to completion."""

    flags: ReturnFlags
    data: bytes

    def did_revert(self) -> bool:
        """The contract did revert all storage changes."""
        return ReturnFlags.REVERT in self.flags


@dataclass(frozen=True)
class InstantiateReturnValue:
    """The result of a successful contract instantiation."""

    result: ExecReturnValue
    account_id: bytes


@dataclass(frozen=True)
class CodeUploadReturnValue:
    """The result of successfully uploading a contract."""

    code_hash: bytes
    deposit: int


@dataclass(frozen=True, order=True)
class StorageDeposit:
    """Balance charged or refunded to pay for storage; refunds order first."""

    is_charge: bool
    amount: int

    @classmethod
    def refund(cls, amount: int) -> StorageDeposit:
        return cls(False, amount)

    @classmethod
    def charge(cls, amount: int) -> StorageDeposit:
        return cls(True, amount)

    def to_dict(self) -> dict[str, int]:
        return {"Charge" if self.is_charge else "Refund": self.amount}


class ContractAccessError(IntEnum):
    """The possible errors that can happen querying the storage of a contract."""

    DOESNT_EXIST = 0
    KEY_DECODING_FAILED = 1
    MIGRATION_IN_PROGRESS = 2


_DISPATCH_VARIANTS = (
    "Other",
    "CannotLookup",
    "BadOrigin",
    "Module",
    "ConsumerRemaining",
    "NoProviders",
    "TooManyConsumers",
    "Token",
    "Arithmetic",
    "Transactional",
    "Exhausted",
    "Corruption",
    "Unavailable",
    "RootNotAllowed",
)

_DISPATCH_DETAILS = {
    "Token": (
        "FundsUnavailable",
        "OnlyProvider",
        "BelowMinimum",
        "CannotCreate",
        "UnknownAsset",
        "Frozen",
        "Unsupported",
        "CannotCreateHold",
        "NotExpendable",
        "Blocked",
    ),
    "Arithmetic": ("Underflow", "Overflow", "DivisionByZero"),
    "Transactional": ("LimitReached", "NoLayer"),
}


@dataclass(frozen=True)
class DispatchError:
    """A runtime dispatch error."""

    variant: str
    detail: str | None = None
    module_index: int | None = None
    module_error: bytes | None = None

    def __str__(self) -> str:
        if self.variant == "Module":
            error = ", ".join(str(b) for b in self.module_error or b"")
            return (
                f"Module(ModuleError {{ index: {self.module_index}, "
                f"error: [{error}], message: None }})"
            )
        if self.variant == "Other":
            return 'Other("")'
        if self.detail is not None:
            return f"{self.variant}({self.detail})"
        return self.variant


@dataclass(frozen=True)
class ContractResult:
    """Result of a contract call or instantiation with auxiliary information."""

    gas_consumed: Weight
    gas_required: Weight
    storage_deposit: StorageDeposit
    debug_message: bytes
    result: object
    events: list | None = field(default=None)


@dataclass(frozen=True)
class Code:
    """Either new Wasm code to upload or the hash of code already on chain."""

    upload: bytes | None = None
    existing: bytes | None = None

    def __post_init__(self) -> None:
        if (self.upload is None) == (self.existing is None):
            raise ValueError("exactly one of upload or existing must be given")

    def encode(self) -> bytes:
        if self.upload is not None:
            return b"\x00" + encode_bytes(self.upload)
        return b"\x01" + bytes(self.existing)


def decode_dispatch_error(reader: Reader) -> DispatchError:
    """Decode a ``DispatchError`` from the reader."""
    index = reader.read_u8()
    if index >= len(_DISPATCH_VARIANTS):
        raise ScaleDecodeError(
            "Could not decode `DispatchError`, variant doesn't exist"
        )
    variant = _DISPATCH_VARIANTS[index]
    if variant == "Module":
        return DispatchError(
            variant, module_index=reader.read_u8(), module_error=reader.read(4)
        )
    details = _DISPATCH_DETAILS.get(variant)
    if details is None:
        return DispatchError(variant)
    detail_index = reader.read_u8()
    if detail_index >= len(details):
        raise ScaleDecodeError(f"Could not decode `{variant}Error`, variant doesn't exist")
    return DispatchError(variant, detail=details[detail_index])


def _decode_result(reader: Reader, decode_ok: Callable[[Reader], T]) -> T | DispatchError:
    tag = reader.read_u8()
    if tag == 0:
        return decode_ok(reader)
    if tag == 1:
        return decode_dispatch_error(reader)
    raise ScaleDecodeError("Could not decode `Result`, variant doesn't exist")


def _decode_storage_deposit(reader: Reader) -> StorageDeposit:
    tag = reader.read_u8()
    if tag not in (0, 1):
        raise ScaleDecodeError("Could not decode `StorageDeposit`, variant doesn't exist")
    return StorageDeposit(tag == 1, reader.read_u128())


def _decode_exec_return_value(reader: Reader) -> ExecReturnValue:
    return ExecReturnValue(ReturnFlags(reader.read_u32()), reader.read_bytes())


def _decode_instantiate_return_value(reader: Reader) -> InstantiateReturnValue:
    result = _decode_exec_return_value(reader)
    return InstantiateReturnValue(result, reader.read(ACCOUNT_ID_LEN))


def _decode_contract_result(data: bytes, decode_ok: Callable[[Reader], object]) -> ContractResult:
    # Trailing data (the events field of newer runtimes) is ignored on purpose.
    reader = Reader(data)
    return ContractResult(
        gas_consumed=Weight.from_reader(reader),
        gas_required=Weight.from_reader(reader),
        storage_deposit=_decode_storage_deposit(reader),
        debug_message=reader.read_bytes(),
        result=_decode_result(reader, decode_ok),
    )


def decode_contract_exec_result(data: bytes) -> ContractResult:
    """Decode the result of ``ContractsApi::call``."""
    return _decode_contract_result(data, _decode_exec_return_value)


def decode_contract_instantiate_result(data: bytes) -> ContractResult:
    """Decode the result of ``ContractsApi::instantiate``."""
    return _decode_contract_result(data, _decode_instantiate_return_value)


def decode_code_upload_result(data: bytes) -> CodeUploadReturnValue | DispatchError:
    """Decode the result of ``ContractsApi::upload_code``."""
    reader = Reader(data)
    return _decode_result(
        reader,
        lambda r: CodeUploadReturnValue(r.read(HASH_LEN), r.read_u128()),
    )