# contract-extrinsics

A library for working with `pallet-contracts` on Substrate-based chains:
encoding contract calls and runtime API requests, decoding runtime API
results, decoding contract storage with a contract's layout, rendering
events, checking environment types, and making raw JSON-RPC calls to a node.

## Installation

```
pip install contract-extrinsics
```

To run the test suite:

```
pip install "contract-extrinsics[test]"
pytest
```

## Modules

- `contract_extrinsics.codec`: SCALE primitives. `Reader` reads fixed-width
  integers, compact integers and length-prefixed bytes; `encode_u32`,
  `encode_u64`, `encode_u128`, `encode_compact`, `encode_bytes` and
  `encode_option` encode them. Malformed input raises `ScaleDecodeError`.
- `contract_extrinsics.primitives`: `Weight`, `ReturnFlags`, `ExecReturnValue`,
  `InstantiateReturnValue`, `CodeUploadReturnValue`, `StorageDeposit`,
  `ContractAccessError`, `DispatchError`, `ContractResult` and `Code`, with the
  decoders `decode_dispatch_error`, `decode_contract_exec_result`,
  `decode_contract_instantiate_result` and `decode_code_upload_result`.
- `contract_extrinsics.urls`: `url_to_string`, which renders a URL with its
  port even when it is the scheme's default, and `WasmCode`, whose
  `code_hash()` is the BLAKE2b-256 hash of the code.
- `contract_extrinsics.error`: `ErrorVariant`, an exception carrying either a
  `ModuleError` or a `GenericError`, and `error_from_dispatch`, which names a
  `DispatchError` using `PalletMetadata` and `ErrorInfo`.
- `contract_extrinsics.extrinsic_calls`: the calls `RemoveCode`, `UploadCode`,
  `InstantiateWithCode`, `Instantiate` and `Call`, each with `encode()` and
  `build()` returning a `Payload`; and the runtime API requests
  `CodeUploadRequest` and `InstantiateRequest`. `Determinism` selects
  `ENFORCED` or `RELAXED`.
- `contract_extrinsics.rpc`: `parse_value` and `RawParams` turn values written
  as text (numbers, strings, booleans, tuples, named composites, variants, hex
  and SS58 addresses) into JSON-RPC parameters; `ss58_decode` decodes an
  address into its 32-byte account id; `JsonRpcClient` speaks JSON-RPC 2.0
  over a websocket; `RpcRequest` lists a node's single-shot methods and calls
  one of them by name.
- `contract_extrinsics.registry`: a portable type registry (`PortableRegistry`,
  `PortableType`, `TypeDefPrimitive`, `TypeDefComposite`, `TypeDefArray`,
  `TypeDefSequence`, `TypeDefVariant`, `Field`, `TypeParameter`, `Primitive`).
- `contract_extrinsics.env_check`: `resolve_type_definition` and
  `compare_node_env_with_contract`, which compares a chain's `Environment`
  types with a `ContractEnvironment` and raises `EnvCheckError` on a mismatch.
- `contract_extrinsics.extrinsic_opts`: `ExtrinsicOpts` and its
  `ExtrinsicOptsBuilder` (file, manifest path, URL, storage deposit limit,
  verbosity).
- `contract_extrinsics.contract_info`: `ContractInfo`, `TrieId`, `AccountData`
  and `ContractInfoRaw`, which works out which account holds the storage
  deposit; `parse_contract_account_address` and `parse_pristine_code` read
  storage keys and values that have already been fetched.
- `contract_extrinsics.storage_layout`: storage layout types (`RootLayout`,
  `StructLayout`, `EnumLayout`, `FieldLayout`, `LeafLayout`, `ArrayLayout`,
  `HashLayout`), `collect_root_key_entries` and `key_parts`.
- `contract_extrinsics.contract_storage`: `ContractStorageLayout` groups raw
  storage (`ContractStorageData`) into `Mapping`, `Lazy`, `StorageVec` and
  `Packed` cells using a decoder; `ContractStorageRpc` queries a contract's
  child trie and `ContractStorage` loads all of a contract's storage page by
  page.
- `contract_extrinsics.events`: the event types `ContractEmitted`,
  `ContractInstantiated`, `CodeStored` and `CodeRemoved`, and `DisplayEvents`
  for human-readable or JSON output of `Event` records.
- `contract_extrinsics.instantiate`: `InstantiateArgs`,
  `InstantiateDryRunResult` and `estimate_gas`, which fills in missing gas
  values from a dry run.

## Example

```python
from contract_extrinsics.urls import url_to_string
from contract_extrinsics.rpc import RawParams

print(url_to_string("wss://test.io/test/1"))   # wss://test.io:443/test/1

params = RawParams(["(1, 0x1234, true)"])
print(params.to_json())                         # [[1,"0x1234",true]]
```

Errors are raised as exceptions: a failed dispatch becomes an `ErrorVariant`
that can be serialised with `to_dict()`.

## What this package does not do

- It does not sign or submit extrinsics; `build()` returns a `Payload` for
  another tool to sign and send.
- It does not fetch contract info, account balances or Wasm code from chain
  storage itself; `ContractStorage` takes a callable that supplies the
  `ContractInfo`.
- It does not load contract artifacts or metadata files and has no SCALE
  transcoder for contract messages; decoders are passed in by the caller.
- It has no command-line tool.