import pytest

from contract_extrinsics.urls import WasmCode, url_to_string


@pytest.mark.parametrize(
    "url, expected",
    [
        ("ws://127.0.0.1:9944", "ws://127.0.0.1:9944/"),
        ("wss://127.0.0.1:443", "wss://127.0.0.1:443/"),
        ("wss://127.0.0.1:443/test/1", "wss://127.0.0.1:443/test/1"),
        ("wss://test.io:443", "wss://test.io:443/"),
        ("wss://test.io/test/1", "wss://test.io:443/test/1"),
    ],
)
def test_url_to_string_works(url, expected):
    assert url_to_string(url) == expected


def test_url_to_string_adds_default_ws_port():
    assert url_to_string("ws://localhost") == "ws://localhost:80/"


def test_url_to_string_rejects_relative():
    with pytest.raises(ValueError):
        url_to_string("localhost:9944/path")


def test_code_hash_of_empty_code():
    assert WasmCode(b"").code_hash().hex() == (
        "0e5751c026e543b2e8ab2eb06099daa1d1e5df47778f7787faab45cdf12fe3a8"
    )


def test_code_hash_is_deterministic_and_distinct():
    first = WasmCode(b"\x00asm").code_hash()
    assert first == WasmCode(b"\x00asm").code_hash()
    assert len(first) == 32
    assert first != WasmCode(b"\x00asm\x01").code_hash()