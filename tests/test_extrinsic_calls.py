import pytest

from contract_extrinsics.codec import Reader
from contract_extrinsics.extrinsic_calls import (
    Call,
    CodeUploadRequest,
    Determinism,
    Instantiate,
    InstantiateRequest,
    InstantiateWithCode,
    RemoveCode,
    UploadCode,
)
from contract_extrinsics.primitives import Code, Weight
from contract_extrinsics.urls import WasmCode

HASH = bytes(range(32))
ACCOUNT = bytes([7]) * 32
WASM = b"\x00asm\x01\x00\x00\x00"


def read_option(reader, read):
    return read(reader) if reader.read_u8() else None


def test_remove_code_payload():
    payload = RemoveCode(HASH).build()
    assert payload.pallet == "Contracts"
    assert payload.call == "remove_code"
    assert payload.call_data == HASH


def test_remove_code_rejects_short_hash():
    with pytest.raises(ValueError):
        RemoveCode(HASH[:31])


def test_upload_code_round_trip():
    call = UploadCode(WasmCode(WASM), 5000, Determinism.RELAXED)
    reader = Reader(call.encode())
    assert reader.read_bytes() == WASM
    assert read_option(reader, Reader.read_compact) == 5000
    assert reader.read(reader.remaining()) == Determinism.RELAXED.encode()
    assert call.build().call == "upload_code"


def test_upload_code_without_limit():
    reader = Reader(UploadCode(WASM).encode())
    assert reader.read_bytes() == WASM
    assert read_option(reader, Reader.read_compact) is None
    assert reader.read(reader.remaining()) == Determinism.ENFORCED.encode()


def test_instantiate_with_code_round_trip():
    weight = Weight(123456789, 4096)
    call = InstantiateWithCode(10**12, weight, None, WASM, b"\x9b\xae", b"salt")
    reader = Reader(call.encode())
    assert reader.read_compact() == 10**12
    assert Weight.from_reader(reader) == weight
    assert read_option(reader, Reader.read_compact) is None
    assert reader.read_bytes() == WASM
    assert reader.read_bytes() == b"\x9b\xae"
    assert reader.read_bytes() == b"salt"
    assert reader.remaining() == 0
    assert call.build().call == "instantiate_with_code"


def test_instantiate_with_hash_round_trip():
    weight = Weight(1, 2)
    call = Instantiate(0, weight, 77, HASH, b"data", b"")
    reader = Reader(call.encode())
    assert reader.read_compact() == 0
    assert Weight.from_reader(reader) == weight
    assert read_option(reader, Reader.read_compact) == 77
    assert reader.read(32) == HASH
    assert reader.read_bytes() == b"data"
    assert reader.read_bytes() == b""
    assert reader.remaining() == 0
    assert call.build().call == "instantiate"


def test_instantiate_rejects_bad_hash():
    with pytest.raises(ValueError):
        Instantiate(0, Weight(), None, b"\x01", b"", b"")


def test_call_round_trip():
    weight = Weight(500, 600)
    call = Call(ACCOUNT, 42, weight, 9, b"\x01\x02")
    reader = Reader(call.encode())
    assert reader.read_u8() == 0
    assert reader.read(32) == ACCOUNT
    assert reader.read_compact() == 42
    assert Weight.from_reader(reader) == weight
    assert read_option(reader, Reader.read_compact) == 9
    assert reader.read_bytes() == b"\x01\x02"
    assert reader.remaining() == 0
    assert call.build().call == "call"


def test_negative_value_is_rejected():
    with pytest.raises(ValueError):
        Call(ACCOUNT, -1, Weight(), None, b"").encode()


def test_code_upload_request_round_trip():
    request = CodeUploadRequest(ACCOUNT, WASM, 10**20)
    reader = Reader(request.encode())
    assert reader.read(32) == ACCOUNT
    assert reader.read_bytes() == WASM
    assert read_option(reader, Reader.read_u128) == 10**20
    assert reader.read(reader.remaining()) == Determinism.ENFORCED.encode()


@pytest.mark.parametrize("code", [Code(upload=WASM), Code(existing=HASH)])
def test_instantiate_request_round_trip(code):
    weight = Weight(11, 22)
    request = InstantiateRequest(ACCOUNT, 1000, weight, None, code, b"ctor", b"s")
    reader = Reader(request.encode())
    assert reader.read(32) == ACCOUNT
    assert reader.read_u128() == 1000
    assert read_option(reader, Weight.from_reader) == weight
    assert read_option(reader, Reader.read_u128) is None
    encoded_code = code.encode()
    assert reader.read(len(encoded_code)) == encoded_code
    assert reader.read_bytes() == b"ctor"
    assert reader.read_bytes() == b"s"
    assert reader.remaining() == 0


def test_instantiate_request_without_gas_limit():
    request = InstantiateRequest(ACCOUNT, 0, None, 3, Code(existing=HASH))
    reader = Reader(request.encode())
    reader.read(32)
    reader.read_u128()
    assert read_option(reader, Weight.from_reader) is None
    assert read_option(reader, Reader.read_u128) == 3


def test_instantiate_request_rejects_bad_origin():
    with pytest.raises(ValueError):
        InstantiateRequest(b"\x00" * 5, 0, None, None, Code(upload=WASM))