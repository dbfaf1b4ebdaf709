"""Arguments, dry-run results and gas estimation for instantiating a contract."""

from __future__ import annotations

import inspect
import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Mapping, Union

from .error import ErrorVariant, PalletMetadata, error_from_dispatch
from .primitives import Code, DispatchError, StorageDeposit, Weight


@dataclass(frozen=True, kw_only=True)
class InstantiateArgs:
    """The prepared arguments of a contract instantiation."""

    code: Code
    constructor: str = "new"
    raw_args: tuple[str, ...] = ()
    value: int = 0
    gas_limit: int | None = None
    proof_size: int | None = None
    storage_deposit_limit: int | None = None
    data: bytes = b""
    salt: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw_args", tuple(str(a) for a in self.raw_args))
        object.__setattr__(self, "data", bytes(self.data))
        object.__setattr__(self, "salt", bytes(self.salt))


def _weight_dict(weight: Weight) -> dict:
    return {"ref_time": weight.ref_time, "proof_size": weight.proof_size}


def _json_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "0x" + bytes(value).hex()
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Mapping):
        return {str(k): _json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_value(v) for v in value]
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return str(value)


@dataclass(frozen=True)
class InstantiateDryRunResult:
    """The outcome of a simulated instantiation."""

    result: Any
    contract: str
    reverted: bool
    gas_consumed: Weight
    gas_required: Weight
    storage_deposit: StorageDeposit

    def to_dict(self) -> dict:
        return {
            "result": _json_value(self.result),
            "contract": self.contract,
            "reverted": self.reverted,
            "gas_consumed": _weight_dict(self.gas_consumed),
            "gas_required": _weight_dict(self.gas_required),
            "storage_deposit": self.storage_deposit.to_dict(),
        }

    def to_json(self) -> str:
        """The result as pretty-printed JSON."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)


DryRun = Callable[[], Union[Any, Awaitable[Any]]]


async def estimate_gas(
    gas_limit: int | None,
    proof_size: int | None,
    dry_run: DryRun,
    pallets: Iterable[PalletMetadata] = (),
) -> Weight:
    """The gas limit for an instantiation.

    Values given by the user are used as they are; missing ones are taken
    from the weight a dry run requires. ``dry_run`` is called only when a
    value is missing.
    """
    if gas_limit is not None and proof_size is not None:
        return Weight(ref_time=gas_limit, proof_size=proof_size)
    outcome = dry_run()
    if inspect.isawaitable(outcome):
        outcome = await outcome
    if isinstance(outcome.result, DispatchError):
        error = error_from_dispatch(outcome.result, pallets)
        raise ErrorVariant.generic(f"Pre-submission dry-run failed. Error: {error}")
    required = outcome.gas_required
    return Weight(
        ref_time=required.ref_time if gas_limit is None else gas_limit,
        proof_size=required.proof_size if proof_size is None else proof_size,
    )