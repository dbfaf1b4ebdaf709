"""Contract code and node URL helpers."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from urllib.parse import urlsplit

_DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443, "ftp": 21}
_SPECIAL_SCHEMES = set(_DEFAULT_PORTS) | {"file"}


@dataclass(frozen=True)
class WasmCode:
    """The Wasm code of a contract."""

    code: bytes

    def code_hash(self) -> bytes:
        """The BLAKE2b-256 hash that identifies the code on chain."""
        return hashlib.blake2b(self.code, digest_size=32).digest()


def url_to_string(url: str) -> str:
    """Render a URL as a string, always including the port, even a default one."""
    parts = urlsplit(url.strip())
    scheme = parts.scheme.lower()
    if not scheme:
        raise ValueError(f"relative URL without a base: {url!r}")
    port = parts.port
    host = (parts.hostname or "").lower()
    if scheme in _DEFAULT_PORTS and not host:
        raise ValueError(f"empty host in URL: {url!r}")

    path = parts.path
    if scheme in _SPECIAL_SCHEMES and not path:
        path = "/"

    if parts.netloc or scheme in _SPECIAL_SCHEMES:
        if ":" in host:
            host = f"[{host}]"
        userinfo = parts.netloc.rpartition("@")[0]
        if port is None:
            port = _DEFAULT_PORTS.get(scheme)
        authority = f"{userinfo}@" if userinfo else ""
        authority += host
        if port is not None:
            authority += f":{port}"
        result = f"{scheme}://{authority}{path}"
    else:
        result = f"{scheme}:{path}"

    if parts.query:
        result += f"?{parts.query}"
    if parts.fragment:
        result += f"#{parts.fragment}"
    return result