"""Encode and decode pallet-contracts calls, results, storage and events."""

__version__ = "0.1.0"

__all__ = [
    "codec",
    "primitives",
    "urls",
    "error",
    "extrinsic_calls",
    "rpc",
    "registry",
    "env_check",
    "extrinsic_opts",
    "contract_info",
    "storage_layout",
    "contract_storage",
    "events",
    "instantiate",
]