"""Contract information read from the contracts pallet's storage."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping

from .primitives import ACCOUNT_ID_LEN, HASH_LEN

# The storage key of a contract is the map's root key followed by
# Twox64Concat(AccountId): an 8-byte hash, then the account id itself.
_TWOX64_LEN = 8
_U32_MAX = (1 << 32) - 1


def _to_bytes(value: Any, what: str) -> bytes:
    """Interpret a decoded storage value as raw bytes."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        if not value.startswith("0x"):
            raise ValueError(f"{what} must be a 0x-prefixed hex string")
        return bytes.fromhex(value[2:])
    if isinstance(value, (list, tuple)):
        # A newtype wrapper decodes as a one-element sequence of its inner value.
        if len(value) == 1 and not isinstance(value[0], int):
            return _to_bytes(value[0], what)
        if all(isinstance(b, int) and 0 <= b <= 255 for b in value):
            return bytes(value)
    raise ValueError(f"{what} cannot be read as bytes: {value!r}")


def _fixed_bytes(value: Any, what: str, size: int) -> bytes:
    data = _to_bytes(value, what)
    if len(data) != size:
        raise ValueError(f"{what} must be {size} bytes, got {len(data)}")
    return data


def _unsigned(value: Any, what: str, maximum: int | None = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{what} must be a non-negative integer, got {value!r}")
    if maximum is not None and value > maximum:
        raise ValueError(f"{what} is out of range: {value}")
    return value


def _field(value: Mapping[str, Any], name: str) -> Any:
    try:
        return value[name]
    except KeyError:
        raise ValueError(f"Missing field `{name}` in contract info") from None


@dataclass(frozen=True)
class TrieId:
    """A contract's child trie id."""

    raw: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw", bytes(self.raw))

    def to_hex(self) -> str:
        """Encode the trie id as a 0x-prefixed hex string."""
        return "0x" + self.raw.hex()

    def __bytes__(self) -> bytes:
        return self.raw

    def __str__(self) -> str:
        return self.to_hex()


@dataclass(frozen=True)
class AccountData:
    """Free and reserved balance of an account."""

    free: int
    reserved: int


@dataclass(frozen=True)
class ContractInfo:
    """Information about a deployed contract."""

    trie_id: TrieId
    code_hash: bytes
    storage_items: int
    storage_items_deposit: int
    storage_total_deposit: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "trie_id": self.trie_id.to_hex(),
            "code_hash": "0x" + bytes(self.code_hash).hex(),
            "storage_items": self.storage_items,
            "storage_items_deposit": self.storage_items_deposit,
            "storage_total_deposit": self.storage_total_deposit,
        }

    def to_json(self) -> str:
        """The contract info as pretty-printed JSON."""
        return json.dumps(self.to_dict(), indent=2)


@dataclass(frozen=True)
class ContractInfoRaw:
    """Contract info as stored, with the account holding the storage deposit.

    Pallet versions from 10 up to but excluding 15 keep the deposit as free
    balance of a separate deposit account named in the contract info; other
    versions keep it as reserved balance of the contract's own account.
    """

    deposit_account: bytes
    trie_id: bytes
    code_hash: bytes
    storage_items: int
    storage_item_deposit: int
    deposit_on_main_account: bool

    @classmethod
    def from_decoded(
        cls, contract_account: bytes, value: Mapping[str, Any]
    ) -> ContractInfoRaw:
        """Build from a decoded ``ContractInfoOf`` storage value."""
        if not isinstance(value, Mapping):
            raise ValueError("Contract info must be a composite value")
        trie_id = _to_bytes(_field(value, "trie_id"), "trie_id")
        code_hash = _fixed_bytes(_field(value, "code_hash"), "code_hash", HASH_LEN)
        storage_items = _unsigned(
            _field(value, "storage_items"), "storage_items", _U32_MAX
        )
        storage_item_deposit = _unsigned(
            _field(value, "storage_item_deposit"), "storage_item_deposit"
        )
        deposit_account = None
        if "deposit_account" in value:
            try:
                deposit_account = _fixed_bytes(
                    value["deposit_account"], "deposit_account", ACCOUNT_ID_LEN
                )
            except ValueError:
                deposit_account = None
        if deposit_account is None:
            return cls(
                deposit_account=bytes(contract_account),
                trie_id=trie_id,
                code_hash=code_hash,
                storage_items=storage_items,
                storage_item_deposit=storage_item_deposit,
                deposit_on_main_account=True,
            )
        return cls(
            deposit_account=deposit_account,
            trie_id=trie_id,
            code_hash=code_hash,
            storage_items=storage_items,
            storage_item_deposit=storage_item_deposit,
            deposit_on_main_account=False,
        )

    def into_contract_info(self, deposit: AccountData) -> ContractInfo:
        """Combine with the deposit account's balance into a ContractInfo."""
        total = deposit.reserved if self.deposit_on_main_account else deposit.free
        return ContractInfo(
            trie_id=TrieId(self.trie_id),
            code_hash=self.code_hash,
            storage_items=self.storage_items,
            storage_items_deposit=self.storage_item_deposit,
            storage_total_deposit=total,
        )


def parse_contract_account_address(storage_key: bytes, root_key_len: int) -> bytes:
    """Extract the contract account id from a ``ContractInfoOf`` storage key."""
    key = bytes(storage_key)
    start = root_key_len + _TWOX64_LEN
    if start > len(key):
        raise ValueError("Unexpected storage key size")
    account = key[start:start + ACCOUNT_ID_LEN]
    if len(account) < ACCOUNT_ID_LEN:
        raise ValueError(
            "AccountId deserialization error: Not enough data to fill buffer"
        )
    return account


def parse_pristine_code(value: Any) -> bytes:
    """Read the Wasm code from a decoded ``PristineCode`` storage value."""
    try:
        return _to_bytes(value, "pristine code")
    except ValueError as exc:
        raise ValueError(f"Contract wasm code could not be parsed: {exc}") from exc