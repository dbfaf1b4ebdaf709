"""Raw JSON-RPC calls to a node, with parameters written in a compact value syntax."""

from __future__ import annotations

import asyncio
import hashlib
import json
import string
from typing import Any, Iterable

import websockets

from .urls import url_to_string

_UNSUPPORTED_PATTERNS = ("watch", "unstable", "subscribe")
_BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_BASE58_INDEX = {ch: i for i, ch in enumerate(_BASE58_ALPHABET)}
_SS58_PREFIX = b"SS58PRE"
_CHECKSUM_LEN = 2
_ACCOUNT_LEN = 32

_IDENT_START = frozenset(string.ascii_letters + "_")
_IDENT_CHARS = _IDENT_START | frozenset(string.digits)
_DIGITS = frozenset(string.digits)
_ESCAPES = {'"': '"', "\\": "\\", "'": "'", "n": "\n", "r": "\r", "t": "\t", "0": "\0"}


class ParamsParseError(ValueError):
    """Raised when a method parameter cannot be parsed."""


class RpcError(RuntimeError):
    """Raised when a JSON-RPC call fails."""


def _b58decode(text: str) -> bytes:
    number = 0
    for ch in text:
        digit = _BASE58_INDEX.get(ch)
        if digit is None:
            raise ValueError(f"invalid base58 character {ch!r}")
        number = number * 58 + digit
    body = number.to_bytes((number.bit_length() + 7) // 8, "big")
    leading = len(text) - len(text.lstrip("1"))
    return b"\x00" * leading + body


def ss58_decode(address: str) -> bytes:
    """Decode an SS58 address into its 32-byte account id."""
    data = _b58decode(address)
    if len(data) < 2:
        raise ValueError("bad SS58 length")
    if data[0] < 64:
        prefix_len = 1
    elif data[0] < 128:
        prefix_len = 2
    else:
        raise ValueError("invalid SS58 prefix")
    if len(data) != prefix_len + _ACCOUNT_LEN + _CHECKSUM_LEN:
        raise ValueError("bad SS58 length")
    body_end = prefix_len + _ACCOUNT_LEN
    digest = hashlib.blake2b(_SS58_PREFIX + data[:body_end], digest_size=64).digest()
    if data[body_end:] != digest[:_CHECKSUM_LEN]:
        raise ValueError("invalid SS58 checksum")
    return data[prefix_len:body_end]


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def error(self, message: str) -> ParamsParseError:
        return ParamsParseError(f"{message} (at character {self.pos})")

    def peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def skip_ws(self) -> None:
        while self.peek().isspace():
            self.pos += 1

    def _alnum_end(self) -> int:
        end = self.pos
        while end < len(self.text) and self.text[end].isascii() and self.text[end].isalnum():
            end += 1
        return end

    def _hex(self) -> str | None:
        if not self.text.startswith("0x", self.pos):
            return None
        end = self._alnum_end()
        value = self.text[self.pos:end]
        self.pos = end
        return value

    def _ss58(self) -> str | None:
        end = self._alnum_end()
        try:
            account = ss58_decode(self.text[self.pos:end])
        except ValueError:
            return None
        self.pos = end
        return "0x" + account.hex()

    def value(self) -> Any:
        self.skip_ws()
        for custom in (self._hex, self._ss58):
            result = custom()
            if result is not None:
                return result
        ch = self.peek()
        if ch == "":
            raise self.error("Expected a value, got end of input")
        if ch == "(":
            return self._sequence(")", self.value)
        if ch == "{":
            return dict(self._sequence("}", self._named_field))
        if ch == '"':
            return self._string()
        if ch == "'":
            return self._char()
        if ch == "<":
            return self._bits()
        if ch == "-" or ch in _DIGITS:
            return self._number()
        if ch in _IDENT_START:
            return self._ident_value()
        raise self.error(f"Unexpected character {ch!r}")

    def _sequence(self, close: str, item) -> list:
        self.pos += 1
        items: list = []
        self.skip_ws()
        if self.peek() == close:
            self.pos += 1
            return items
        while True:
            items.append(item())
            self.skip_ws()
            ch = self.peek()
            if ch == ",":
                self.pos += 1
                self.skip_ws()
                if self.peek() == close:
                    self.pos += 1
                    return items
                continue
            if ch == close:
                self.pos += 1
                return items
            raise self.error(f"Expected ',' or '{close}'")

    def _identifier(self) -> str:
        start = self.pos
        if self.peek() not in _IDENT_START or self.peek() == "":
            raise self.error("Expected an identifier")
        while self.peek() != "" and self.peek() in _IDENT_CHARS:
            self.pos += 1
        return self.text[start:self.pos]

    def _named_field(self) -> tuple[str, Any]:
        self.skip_ws()
        key = self._string() if self.peek() == '"' else self._identifier()
        self.skip_ws()
        if self.peek() != ":":
            raise self.error("Expected ':' after field name")
        self.pos += 1
        return key, self.value()

    def _ident_value(self) -> Any:
        name = self._identifier()
        after_name = self.pos
        self.skip_ws()
        ch = self.peek()
        if ch == "(":
            return {"name": name, "values": self._sequence(")", self.value)}
        if ch == "{":
            return {"name": name, "values": dict(self._sequence("}", self._named_field))}
        self.pos = after_name
        if name == "true":
            return True
        if name == "false":
            return False
        raise self.error(f"Expected a value, got identifier {name!r}")

    def _escaped(self) -> str:
        if self.pos >= len(self.text):
            raise self.error("Unexpected end of input in escape")
        esc = self.text[self.pos]
        self.pos += 1
        if esc not in _ESCAPES:
            raise self.error(f"Invalid escape '\\{esc}'")
        return _ESCAPES[esc]

    def _string(self) -> str:
        self.pos += 1
        out = []
        while True:
            if self.pos >= len(self.text):
                raise self.error("Unclosed string")
            ch = self.text[self.pos]
            self.pos += 1
            if ch == '"':
                return "".join(out)
            out.append(self._escaped() if ch == "\\" else ch)

    def _char(self) -> str:
        self.pos += 1
        if self.pos >= len(self.text):
            raise self.error("Unclosed char")
        ch = self.text[self.pos]
        self.pos += 1
        if ch == "\\":
            ch = self._escaped()
        if self.peek() != "'":
            raise self.error("Expected closing ' for char")
        self.pos += 1
        return ch

    def _bits(self) -> list[bool]:
        self.pos += 1
        bits = []
        while True:
            ch = self.peek()
            if ch == ">":
                self.pos += 1
                return bits
            if ch not in ("0", "1"):
                raise self.error("Expected '0', '1' or '>' in bit sequence")
            bits.append(ch == "1")
            self.pos += 1

    def _number(self) -> int:
        start = self.pos
        negative = self.peek() == "-"
        if negative:
            self.pos += 1
        if self.peek() == "" or self.peek() not in _DIGITS:
            raise self.error("Expected a digit")
        while self.peek() != "" and (self.peek() in _DIGITS or self.peek() == "_"):
            self.pos += 1
        value = int(self.text[start:self.pos].replace("_", ""))
        if (negative and value < -(1 << 127)) or (not negative and value >= 1 << 128):
            raise self.error("Number out of range")
        return value


def parse_value(text: str) -> Any:
    """Parse one parameter into a JSON-ready value; trailing text is ignored.

    Hex strings and SS58 addresses become ``0x``-prefixed hex strings, tuples
    become lists, named composites become dicts and variants become
    ``{"name": ..., "values": ...}``.
    """
    return _Parser(text).value()


class RawParams:
    """Method parameters parsed from their textual form."""

    def __init__(self, params: Iterable[str] = ()) -> None:
        try:
            values = [parse_value(p) for p in params]
        except ParamsParseError as exc:
            raise ParamsParseError(f"Method parameters parsing failed: {exc}") from exc
        self.values: list | None = values or None

    def to_json(self) -> str | None:
        """The parameters as a compact JSON array, or None when there are none."""
        if self.values is None:
            return None
        return json.dumps(self.values, separators=(",", ":"), ensure_ascii=False)


def filter_supported_methods(methods: Iterable[Any]) -> list[str]:
    """Keep the method names that can be called once, dropping subscriptions."""
    return [
        m
        for m in methods
        if isinstance(m, str)
        and not any(pattern in m.lower() for pattern in _UNSUPPORTED_PATTERNS)
    ]


def _describe_error(error: Any) -> str:
    if isinstance(error, dict):
        return f"{error.get('code')}: {error.get('message')}"
    return str(error)


class JsonRpcClient:
    """A JSON-RPC 2.0 client over a websocket connection."""

    def __init__(self, url: str) -> None:
        self.url = url
        self._ws = None
        self._next_id = 0
        self._lock = asyncio.Lock()

    async def _connection(self):
        if self._ws is None:
            self._ws = await websockets.connect(self.url, max_size=None)
        return self._ws

    async def request(self, method: str, params: list | None = None) -> Any:
        """Send one request and return its result."""
        async with self._lock:
            ws = await self._connection()
            self._next_id += 1
            request_id = self._next_id
            message: dict[str, Any] = {"jsonrpc": "2.0", "id": request_id, "method": method}
            if params is not None:
                message["params"] = list(params)
            await ws.send(json.dumps(message))
            while True:
                reply = json.loads(await ws.recv())
                if not isinstance(reply, dict) or reply.get("id") != request_id:
                    continue
                if "error" in reply:
                    raise RpcError(_describe_error(reply["error"]))
                return reply.get("result")

    async def close(self) -> None:
        if self._ws is not None:
            ws, self._ws = self._ws, None
            await ws.close()

    async def __aenter__(self) -> JsonRpcClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


class RpcRequest:
    """Raw calls of any single-shot method a node supports."""

    def __init__(self, client) -> None:
        self._client = client

    @classmethod
    def connect(cls, url: str) -> RpcRequest:
        return cls(JsonRpcClient(url_to_string(url)))

    async def supported_methods(self) -> list[str]:
        """The methods the node offers, without subscriptions and unstable ones."""
        try:
            result = await self._client.request("rpc_methods", None)
        except Exception as exc:
            raise RpcError(f"Rpc call 'rpc_methods' failed: {exc}") from exc
        methods = result.get("methods") if isinstance(result, dict) else None
        if not isinstance(methods, list):
            raise RpcError("Methods field parsing failed!")
        return filter_supported_methods(methods)

    async def raw_call(self, method: str, params: RawParams) -> Any:
        """Call a supported method and return its decoded JSON result."""
        methods = await self.supported_methods()
        if method not in methods:
            raise RpcError(f"Method not found, supported methods: {', '.join(methods)}")
        try:
            return await self._client.request(method, params.values)
        except Exception as exc:
            raise RpcError(f"Raw RPC call failed: {exc}") from exc