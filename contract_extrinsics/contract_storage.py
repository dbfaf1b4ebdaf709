"""Reading a contract's storage and decoding it with the contract's layout."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Iterator, Mapping as MappingABC, Protocol

from .codec import Reader, encode_u32
from .contract_info import ContractInfo, TrieId
from .registry import PortableRegistry, PortableType
from .rpc import JsonRpcClient
from .storage_layout import Layout, RootKeyEntry, collect_root_key_entries, key_parts
from .urls import url_to_string

_CHILD_STORAGE_PREFIX = b":child_storage:default:"
_MAPPING_PATH = "ink_storage::lazy::mapping::Mapping"
_STORAGE_VEC_PATH = "ink_storage::lazy::vec::StorageVec"
_LAZY_PATH = "ink_storage::lazy::Lazy"


class _Decoder(Protocol):
    layout: Layout
    registry: PortableRegistry

    def decode(self, type_id: int, data: bytes) -> Any: ...


def _json_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "0x" + bytes(value).hex()
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, MappingABC):
        return {str(k): _json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_value(v) for v in value]
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return str(value)


@dataclass(frozen=True)
class ContractStorageCell:
    """A decoded storage cell of a contract."""

    root: RootKeyEntry

    def path(self) -> str:
        """The path of the cell's root key, joined with ``::``."""
        return "::".join(self.root.path)

    def parent(self) -> str:
        """The last element of the path, or an empty string."""
        return self.root.path[-1] if self.root.path else ""

    def root_key(self) -> str:
        """The root key as hex of its SCALE encoding."""
        return encode_u32(self.root.root_key).hex()

    def _fields(self) -> dict:
        return {}

    def to_dict(self) -> dict:
        return {type(self).__name__: {**self.root.to_dict(), **self._fields()}}


@dataclass(frozen=True)
class Mapping(ContractStorageCell):
    """Key-value pairs stored under one root key."""

    entries: tuple[tuple[Any, Any], ...] = ()

    def __iter__(self) -> Iterator[tuple[Any, Any]]:
        return iter(self.entries)

    def _fields(self) -> dict:
        return {"map": [[_json_value(k), _json_value(v)] for k, v in self.entries]}

    def __str__(self) -> str:
        return "\n".join(f"Mapping {{ {k} => {v} }}" for k, v in self.entries)


@dataclass(frozen=True)
class Lazy(ContractStorageCell):
    """A single value stored in its own cell."""

    value: Any = None

    def _fields(self) -> dict:
        return {"value": _json_value(self.value)}

    def __str__(self) -> str:
        return f"Lazy {{ {self.value} }}"


@dataclass(frozen=True)
class StorageVec(ContractStorageCell):
    """A vector whose length and elements are stored under one root key."""

    length: int = 0
    values: tuple[Any, ...] = ()

    def __len__(self) -> int:
        return self.length

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)

    def _fields(self) -> dict:
        return {"len": self.length, "vec": [_json_value(v) for v in self.values]}

    def __str__(self) -> str:
        parts = []
        for i, value in enumerate(self.values):
            parts.append(f"StorageVec [{self.length}] {{ [{i}] => {value} }}")
            if i + 1 < self.length:
                parts.append("\n")
        return "".join(parts)


@dataclass(frozen=True)
class Packed(ContractStorageCell):
    """A value packed into its parent's cell."""

    value: Any = None

    def _fields(self) -> dict:
        return {"value": _json_value(self.value)}

    def __str__(self) -> str:
        return str(self.value)


class ContractStorageData:
    """The raw key/value storage of a contract, ordered by key."""

    def __init__(self, data: MappingABC[bytes, bytes]) -> None:
        self._data = {
            bytes(k): bytes(v)
            for k, v in sorted(data.items(), key=lambda kv: bytes(kv[0]))
        }

    def items(self):
        return self._data.items()

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self._data)

    def __getitem__(self, key: bytes) -> bytes:
        return self._data[bytes(key)]

    def to_dict(self) -> dict[str, str]:
        return {"0x" + k.hex(): "0x" + v.hex() for k, v in self._data.items()}


def _param_type_id(ty: PortableType, name: str) -> int:
    type_id = next((p.type_id for p in ty.type_params if p.name == name), None)
    if type_id is None:
        raise ValueError(f"Param `{name}` not found in type registry")
    return type_id


def _mapping_key_order(item: tuple[bytes | None, bytes]) -> tuple[bool, bytes]:
    key = item[0]
    return (key is not None, key or b"")


class ContractStorageLayout:
    """Storage cells of a contract, decoded with its metadata and sorted by path."""

    def __init__(self, data: ContractStorageData, decoder: _Decoder) -> None:
        entries = collect_root_key_entries(decoder.layout)
        groups: dict[int, list[tuple[bytes | None, bytes]]] = {}
        for key, value in data.items():
            root_key, mapping_key = key_parts(key)
            groups.setdefault(root_key, []).append((mapping_key, value))
        cells = [
            self._cell(root_key, items, entries, decoder)
            for root_key, items in groups.items()
        ]
        cells.sort(key=lambda c: c.path())
        self.cells: tuple[ContractStorageCell, ...] = tuple(cells)

    @staticmethod
    def _cell(
        root_key: int,
        items: list[tuple[bytes | None, bytes]],
        entries: list[RootKeyEntry],
        decoder: _Decoder,
    ) -> ContractStorageCell:
        entry = next((e for e in entries if e.root_key == root_key), None)
        if entry is None:
            raise ValueError(f"Root key {root_key} not found for the RootLayout")
        ty = decoder.registry.resolve(entry.type_id)
        if ty is None:
            raise ValueError(f"Type {entry.type_id} not found in the registry")
        root = RootKeyEntry(root_key, entry.path, entry.type_id)
        type_path = "::".join(ty.path)

        if type_path == _MAPPING_PATH:
            key_type = _param_type_id(ty, "K")
            value_type = _param_type_id(ty, "V")
            pairs = []
            for mapping_key, value in items:
                if mapping_key is None:
                    raise ValueError("The Mapping key is missing in the map")
                pairs.append(
                    (
                        decoder.decode(key_type, mapping_key),
                        decoder.decode(value_type, value),
                    )
                )
            return Mapping(root, tuple(pairs))

        if type_path == _STORAGE_VEC_PATH:
            ordered = sorted(items, key=_mapping_key_order)
            if not ordered:
                raise ValueError("Length of the StorageVec not found")
            length = Reader(ordered[0][1]).read_u32()
            value_type = _param_type_id(ty, "V")
            values = tuple(decoder.decode(value_type, v) for _, v in ordered[1:])
            return StorageVec(root, length, values)

        if not items:
            raise ValueError("Empty storage cell")
        raw_value = items[0][1]
        if type_path == _LAZY_PATH:
            value_type = _param_type_id(ty, "V")
            return Lazy(root, decoder.decode(value_type, raw_value))
        return Packed(root, decoder.decode(root.type_id, raw_value))

    def __iter__(self) -> Iterator[ContractStorageCell]:
        return iter(self.cells)

    def __len__(self) -> int:
        return len(self.cells)

    def to_dict(self) -> dict:
        return {"cells": [cell.to_dict() for cell in self.cells]}


def child_storage_key(trie_id: TrieId | bytes) -> bytes:
    """The prefixed storage key of a contract's default child trie."""
    return _CHILD_STORAGE_PREFIX + bytes(trie_id)


def _hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def _opt_hex(data: bytes | None) -> str | None:
    return None if data is None else _hex(data)


def _from_hex(text: str | None) -> bytes | None:
    if text is None:
        return None
    if not isinstance(text, str) or not text.startswith("0x"):
        raise ValueError(f"Expected a 0x-prefixed hex string, got {text!r}")
    return bytes.fromhex(text[2:])


class ContractStorageRpc:
    """Queries of a contract's child trie over JSON-RPC."""

    def __init__(self, client) -> None:
        self._client = client

    @classmethod
    def connect(cls, url: str) -> ContractStorageRpc:
        return cls(JsonRpcClient(url_to_string(url)))

    async def fetch_contract_storage(
        self, trie_id: TrieId | bytes, key: bytes, block_hash: bytes | None = None
    ) -> bytes | None:
        """The storage value at a key, or None when nothing is stored there."""
        params = [_hex(child_storage_key(trie_id)), _hex(key), _opt_hex(block_hash)]
        return _from_hex(await self._client.request("childstate_getStorage", params))

    async def fetch_storage_keys_paged(
        self,
        trie_id: TrieId | bytes,
        prefix: bytes | None,
        count: int,
        start_key: bytes | None,
        block_hash: bytes | None = None,
    ) -> list[bytes]:
        """Up to ``count`` storage keys after ``start_key``."""
        params = [
            _hex(child_storage_key(trie_id)),
            _opt_hex(prefix),
            count,
            _opt_hex(start_key),
            _opt_hex(block_hash),
        ]
        result = await self._client.request("childstate_getKeysPaged", params)
        return [_from_hex(k) for k in result or []]

    async def fetch_storage_entries(
        self,
        trie_id: TrieId | bytes,
        keys: Iterable[bytes],
        block_hash: bytes | None = None,
    ) -> list[bytes | None]:
        """The storage values for the given keys, None where a key is empty."""
        params = [
            _hex(child_storage_key(trie_id)),
            [_hex(k) for k in keys],
            _opt_hex(block_hash),
        ]
        result = await self._client.request("childstate_getStorageEntries", params)
        return [_from_hex(v) for v in result or []]


class ContractStorage:
    """Loads the storage of contracts, using a callable to fetch their info."""

    KEYS_COUNT = 1000

    def __init__(
        self,
        rpc: ContractStorageRpc,
        fetch_contract_info: Callable[[bytes], Awaitable[ContractInfo]],
    ) -> None:
        self._rpc = rpc
        self._fetch_contract_info = fetch_contract_info

    async def load_contract_storage_data(self, contract_account: bytes) -> ContractStorageData:
        """Load the raw key/value storage of a contract."""
        info = await self._fetch_contract_info(contract_account)
        trie_id = info.trie_id
        storage: dict[bytes, bytes] = {}
        last_key: bytes | None = None
        while True:
            keys = await self._rpc.fetch_storage_keys_paged(
                trie_id, None, self.KEYS_COUNT, last_key, None
            )
            values = await self._rpc.fetch_storage_entries(trie_id, keys, None)
            if len(keys) != len(values):
                raise ValueError("storage keys and values must be the same length")
            for key, value in zip(keys, values):
                if value is not None:
                    storage[key] = value
            if keys:
                last_key = keys[-1]
            if len(keys) < self.KEYS_COUNT:
                break
        return ContractStorageData(storage)

    async def load_contract_storage_with_layout(
        self, contract_account: bytes, decoder: _Decoder
    ) -> ContractStorageLayout:
        """Load a contract's storage and decode it into cells."""
        data = await self.load_contract_storage_data(contract_account)
        return ContractStorageLayout(data, decoder)