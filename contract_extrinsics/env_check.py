"""Checks that a contract's environment types match those of the target chain."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum

from termcolor import colored

from .registry import (
    Field,
    PortableRegistry,
    TypeDef,
    TypeDefArray,
    TypeDefComposite,
)

_ENV_PATH_SUFFIX = ("pallet_contracts", "Environment")


class Verbosity(Enum):
    """How much a command reports."""

    DEFAULT = "default"
    QUIET = "quiet"
    VERBOSE = "verbose"


class EnvCheckError(Exception):
    """Raised when environment types cannot be resolved or do not match."""


@dataclass(frozen=True)
class ContractEnvironment:
    """A contract's type registry and the type ids of its environment types."""

    registry: PortableRegistry
    account_id: int
    balance: int
    hash: int
    timestamp: int
    block_number: int


def _node_env_fields(
    registry: PortableRegistry, verbosity: Verbosity
) -> tuple[Field, ...] | None:
    env_type = next(
        (t for t in registry if tuple(t.path[-2:]) == _ENV_PATH_SUFFIX), None
    )
    if env_type is None:
        if verbosity is not Verbosity.QUIET:
            print(
                colored("Warning:", "yellow", attrs=["bold"]),
                colored(
                    "This chain does not yet support checking for compatibility "
                    "of your contract types.",
                    "yellow",
                ),
                file=sys.stderr,
            )
        return None
    if not isinstance(env_type.type_def, TypeDefComposite):
        raise EnvCheckError("`Environment` type definition is in the wrong format")
    return env_type.type_def.fields


def resolve_type_definition(registry: PortableRegistry, type_id: int) -> TypeDef:
    """Follow wrapper types and generic parameters down to the underlying definition."""
    ty = registry.resolve(type_id)
    if ty is None:
        raise EnvCheckError("Type is not present in registry")
    if ty.type_params:
        param_id = ty.type_params[0].type_id
        if param_id is None:
            raise EnvCheckError("concrete type is not present")
        return resolve_type_definition(registry, param_id)
    if isinstance(ty.type_def, TypeDefComposite):
        if len(ty.type_def.fields) != 1:
            raise EnvCheckError("Composite field has incorrect composite type format")
        return resolve_type_definition(registry, ty.type_def.fields[0].type_id)
    return ty.type_def


def _compare_type(
    type_name: str,
    type_def: TypeDef,
    contract_env: ContractEnvironment,
    node_registry: PortableRegistry,
) -> bool:
    contract_ids = {
        "account_id": contract_env.account_id,
        "balance": contract_env.balance,
        "hash": contract_env.hash,
        "timestamp": contract_env.timestamp,
        "block_number": contract_env.block_number,
    }
    if type_name not in contract_ids:
        raise EnvCheckError("Trying to resolve unknown environment type")
    contract_registry = contract_env.registry
    contract_def = resolve_type_definition(contract_registry, contract_ids[type_name])
    if isinstance(type_def, TypeDefArray):
        node_elem = resolve_type_definition(node_registry, type_def.type_param)
        if isinstance(contract_def, TypeDefArray):
            if type_def.length != contract_def.length:
                raise EnvCheckError("Mismatch in array lengths")
            contract_elem = resolve_type_definition(
                contract_registry, contract_def.type_param
            )
            return contract_elem == node_elem
    return type_def == contract_def


def compare_node_env_with_contract(
    node_registry: PortableRegistry,
    contract_env: ContractEnvironment,
    verbosity: Verbosity = Verbosity.DEFAULT,
) -> bool:
    """Compare the chain's ``Environment`` types with the contract's.

    Returns True when the types were checked and match, False when the chain
    does not describe its environment; raises EnvCheckError on a mismatch.
    """
    fields = _node_env_fields(node_registry, verbosity)
    if fields is None:
        return False
    for env_field in fields:
        if env_field.name is None:
            raise EnvCheckError("Field does not have a name")
        if env_field.name == "hasher":
            continue
        field_def = resolve_type_definition(node_registry, env_field.type_id)
        if not _compare_type(env_field.name, field_def, contract_env, node_registry):
            raise EnvCheckError(f"Failed to validate the field: {env_field.name}")
    return True