"""Events emitted by the contracts pallet and their display."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Iterable, Iterator, Mapping

from termcolor import colored

from .env_check import Verbosity

logger = logging.getLogger(__name__)

DEFAULT_KEY_COL_WIDTH = 12
BALANCE_TYPE_NAMES = ("T::Balance", "BalanceOf<T>")


@dataclass(frozen=True)
class ContractEmitted:
    """A custom event emitted by a contract."""

    PALLET: ClassVar[str] = "Contracts"
    EVENT: ClassVar[str] = "ContractEmitted"

    contract: bytes
    data: bytes


@dataclass(frozen=True)
class ContractInstantiated:
    """A contract was successfully instantiated."""

    PALLET: ClassVar[str] = "Contracts"
    EVENT: ClassVar[str] = "Instantiated"

    deployer: bytes
    contract: bytes


@dataclass(frozen=True)
class CodeStored:
    """Code was stored by ``instantiate_with_code`` or ``upload_code``."""

    PALLET: ClassVar[str] = "Contracts"
    EVENT: ClassVar[str] = "CodeStored"

    code_hash: bytes


@dataclass(frozen=True)
class CodeRemoved:
    """Code was removed by ``remove_code``."""

    PALLET: ClassVar[str] = "Contracts"
    EVENT: ClassVar[str] = "CodeRemoved"

    code_hash: bytes
    deposit_released: int
    remover: bytes


def is_event(event_type: type, pallet: str, name: str) -> bool:
    """Whether a pallet and event name identify the given event type."""
    return event_type.PALLET == pallet and event_type.EVENT == name


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


def _display_value(value: Any) -> str:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "0x" + bytes(value).hex()
    return str(value)


@dataclass(frozen=True)
class Field:
    """A named field of an event; the type name is kept for display only."""

    name: str
    value: Any
    type_name: str | None = None

    def to_dict(self) -> dict:
        return {"name": self.name, "value": _json_value(self.value)}


@dataclass(frozen=True)
class Event:
    """An event produced by a contract extrinsic."""

    pallet: str
    name: str
    fields: tuple[Field, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))

    def to_dict(self) -> dict:
        return {
            "pallet": self.pallet,
            "name": self.name,
            "fields": [f.to_dict() for f in self.fields],
        }


class DisplayEvents:
    """Events of an extrinsic, ready to be shown or serialised."""

    def __init__(self, events: Iterable[Event] = ()) -> None:
        self.events: tuple[Event, ...] = tuple(events)

    def __iter__(self) -> Iterator[Event]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)

    def display_events(
        self,
        verbosity: Verbosity = Verbosity.DEFAULT,
        balance_formatter: Callable[[int], str] | None = None,
    ) -> str:
        """Render the events in a human readable form.

        Fields are listed only when verbose; balances are rendered with
        ``balance_formatter`` when one is given.
        """
        width = DEFAULT_KEY_COL_WIDTH
        indent = " " * (width - 3)
        lines = [colored("Events".rjust(width), "light_magenta", attrs=["bold"])]
        for event in self.events:
            lines.append(
                f"{colored('Event'.rjust(width), 'light_green', attrs=['bold'])} "
                f"{colored(event.pallet, 'white')} ➜ "
                f"{colored(event.name, 'white', attrs=['bold'])}"
            )
            if verbosity is not Verbosity.VERBOSE:
                continue
            for ev_field in event.fields:
                value = _display_value(ev_field.value)
                if (
                    balance_formatter is not None
                    and ev_field.type_name in BALANCE_TYPE_NAMES
                    and isinstance(ev_field.value, int)
                    and not isinstance(ev_field.value, bool)
                ):
                    value = balance_formatter(ev_field.value)
                lines.append(f"{indent}{colored(ev_field.name, 'white')}: {value}")
        return "\n".join(lines) + "\n"

    def to_json(self) -> str:
        """The events as pretty-printed JSON."""
        return json.dumps(
            [event.to_dict() for event in self.events], indent=2, ensure_ascii=False
        )


def contract_event_data_field(
    transcoder: Any,
    type_name: str | None,
    event_sig_topic: bytes | None,
    event_data: bytes,
) -> Field:
    """The ``data`` field of a contract event, decoded when the transcoder can."""
    raw_hex = "0x" + bytes(event_data).hex()
    value: Any = raw_hex
    if transcoder is not None:
        if event_sig_topic is not None:
            try:
                value = transcoder.decode_contract_event(event_sig_topic, event_data)
            except Exception as exc:  # any decoding failure falls back to hex
                logger.warning(
                    "Decoding contract event failed: %r. "
                    "It might have come from another contract.",
                    exc,
                )
                value = raw_hex
        else:
            logger.info("Anonymous event not decoded. Data displayed as raw hex.")
    return Field("data", value, type_name)