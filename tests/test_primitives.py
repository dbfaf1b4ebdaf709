import pytest

from contract_extrinsics.codec import (
    Reader,
    ScaleDecodeError,
    encode_bytes,
    encode_u32,
    encode_u128,
)
from contract_extrinsics.primitives import (
    Code,
    CodeUploadReturnValue,
    DispatchError,
    ExecReturnValue,
    InstantiateReturnValue,
    ReturnFlags,
    StorageDeposit,
    Weight,
    decode_code_upload_result,
    decode_contract_exec_result,
    decode_contract_instantiate_result,
    decode_dispatch_error,
)


def _header():
    return (
        Weight(1000, 20).encode()
        + Weight(3000, 40).encode()
        + b"\x01"
        + encode_u128(100)
        + encode_bytes(b"dbg")
    )


def test_weight_round_trip():
    weight = Weight(123456789, 65536)
    assert Weight.from_reader(Reader(weight.encode())) == weight


def test_weight_display():
    assert str(Weight(5, 6)) == "Weight(ref_time: 5, proof_size: 6)"


def test_did_revert():
    assert ExecReturnValue(ReturnFlags.REVERT, b"").did_revert() is True
    assert ExecReturnValue(ReturnFlags.EMPTY, b"").did_revert() is False


def test_storage_deposit_order_and_dict():
    assert StorageDeposit.refund(10) < StorageDeposit.charge(1)
    assert StorageDeposit.charge(1) < StorageDeposit.charge(2)
    assert StorageDeposit.charge(5).to_dict() == {"Charge": 5}
    assert StorageDeposit.refund(5).to_dict() == {"Refund": 5}


def test_decode_exec_result_ok_ignores_trailing_data():
    data = _header() + b"\x00" + encode_u32(1) + encode_bytes(b"\x2a") + b"\xff\xff"
    result = decode_contract_exec_result(data)
    assert result.gas_consumed == Weight(1000, 20)
    assert result.gas_required == Weight(3000, 40)
    assert result.storage_deposit == StorageDeposit.charge(100)
    assert result.debug_message == b"dbg"
    assert result.result == ExecReturnValue(ReturnFlags.REVERT, b"\x2a")


def test_decode_exec_result_module_error():
    data = _header() + b"\x01" + bytes([3, 7]) + b"\x05\x00\x00\x00"
    result = decode_contract_exec_result(data)
    assert result.result == DispatchError(
        "Module", module_index=7, module_error=b"\x05\x00\x00\x00"
    )


def test_decode_instantiate_result():
    account = bytes(range(32))
    data = _header() + b"\x00" + encode_u32(0) + encode_bytes(b"") + account
    result = decode_contract_instantiate_result(data)
    assert result.result == InstantiateReturnValue(
        ExecReturnValue(ReturnFlags.EMPTY, b""), account
    )


def test_decode_code_upload_result():
    code_hash = b"\x11" * 32
    result = decode_code_upload_result(b"\x00" + code_hash + encode_u128(42))
    assert result == CodeUploadReturnValue(code_hash, 42)


def test_dispatch_error_display():
    assert str(decode_dispatch_error(Reader(bytes([2])))) == "BadOrigin"
    assert str(decode_dispatch_error(Reader(bytes([7, 0])))) == "Token(FundsUnavailable)"
    module = DispatchError("Module", module_index=7, module_error=b"\x05\x00\x00\x00")
    assert str(module) == (
        "Module(ModuleError { index: 7, error: [5, 0, 0, 0], message: None })"
    )


def test_unknown_dispatch_variant_raises():
    with pytest.raises(ScaleDecodeError):
        decode_dispatch_error(Reader(bytes([200])))


def test_code_encoding():
    assert Code(upload=b"abc").encode() == b"\x00" + encode_bytes(b"abc")
    code_hash = b"\x22" * 32
    assert Code(existing=code_hash).encode() == b"\x01" + code_hash


def test_code_requires_exactly_one():
    with pytest.raises(ValueError):
        Code()
    with pytest.raises(ValueError):
        Code(upload=b"a", existing=b"b")