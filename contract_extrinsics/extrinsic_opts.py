"""Options for creating and sending an extrinsic to a node."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Any

from .env_check import Verbosity
from .urls import url_to_string

DEFAULT_URL = "ws://localhost:9944"


@dataclass(frozen=True)
class ExtrinsicOpts:
    """Arguments required for creating and sending an extrinsic."""

    signer: Any
    file: Path | None = None
    manifest_path: Path | None = None
    url: str = DEFAULT_URL
    storage_deposit_limit: int | None = None
    verbosity: Verbosity = Verbosity.DEFAULT

    def url_string(self) -> str:
        """The node URL, always with its port."""
        return url_to_string(self.url)


def _as_path(value: str | PathLike | None) -> Path | None:
    return None if value is None else Path(value)


class ExtrinsicOptsBuilder:
    """Builds ExtrinsicOpts step by step; each setter returns the builder."""

    def __init__(self, signer: Any) -> None:
        self._opts = ExtrinsicOpts(signer=signer)

    def _set(self, **changes: Any) -> ExtrinsicOptsBuilder:
        self._opts = dataclasses.replace(self._opts, **changes)
        return self

    def file(self, file: str | PathLike | None) -> ExtrinsicOptsBuilder:
        """Set the path to the contract build artifact file."""
        return self._set(file=_as_path(file))

    def manifest_path(self, manifest_path: str | PathLike | None) -> ExtrinsicOptsBuilder:
        """Set the path to the contract's manifest."""
        return self._set(manifest_path=_as_path(manifest_path))

    def url(self, url: str) -> ExtrinsicOptsBuilder:
        """Set the websocket URL of the node."""
        return self._set(url=str(url))

    def storage_deposit_limit(self, storage_deposit_limit: int | None) -> ExtrinsicOptsBuilder:
        """Set the most balance the caller may be charged for storage."""
        return self._set(storage_deposit_limit=storage_deposit_limit)

    def verbosity(self, verbosity: Verbosity) -> ExtrinsicOptsBuilder:
        """Set the verbosity level."""
        return self._set(verbosity=Verbosity(verbosity))

    def done(self) -> ExtrinsicOpts:
        return self._opts