import json

import pytest
import websockets

from contract_extrinsics.rpc import (
    JsonRpcClient,
    ParamsParseError,
    RawParams,
    RpcError,
    RpcRequest,
    filter_supported_methods,
    parse_value,
    ss58_decode,
)

ALICE = "5GrwvaEF5zXb26Fz9rcQpDWS57CtERHpNehXCPcNoHGKutQY"
ALICE_HEX = "d43593c715fdd31c61141abd04a99fd6822c8558854ccde39a5684e7a56da27d"


def assert_raw_params_value(params, expected):
    expected = "".join(ch for ch in expected if not ch.isspace())
    assert RawParams(params).to_json() == expected


def test_parse_ss58_works():
    assert_raw_params_value([ALICE, '"sr25"'], f'["0x{ALICE_HEX}","sr25"]')


def test_parse_seq_works():
    assert_raw_params_value(["(1, 0x1234, true)"], '[[1,"0x1234",true]]')


def test_parse_map_works():
    expected = f"""[{{
        "hello": true,
        "a": 4,
        "b": "0x{ALICE_HEX}",
        "c": "test"
    }}]"""
    assert_raw_params_value([f'{{hello: true, a: 4, b: {ALICE}, c: "test"}}'], expected)


def test_empty_params_give_none():
    params = RawParams([])
    assert params.values is None
    assert params.to_json() is None


def test_ss58_decode_alice():
    assert ss58_decode(ALICE) == bytes.fromhex(ALICE_HEX)


@pytest.mark.parametrize("address", [ALICE[:-1] + "Z", "true", "1", "0OIl"])
def test_ss58_decode_rejects_invalid(address):
    with pytest.raises(ValueError):
        ss58_decode(address)


def test_parse_variant_and_nested():
    assert parse_value('Foo(1, "x")') == {"name": "Foo", "values": [1, "x"]}
    assert parse_value("Bar { a: -5, b: () }") == {"name": "Bar", "values": {"a": -5, "b": []}}


def test_parse_string_escapes_and_char():
    assert parse_value('"a\\"b\\n"') == 'a"b\n'
    assert parse_value("'c'") == "c"
    assert parse_value("<101>") == [True, False, True]


def test_parse_error_is_reported():
    with pytest.raises(ParamsParseError, match="Method parameters parsing failed"):
        RawParams(["(1, 2"])


def test_parse_unknown_identifier_fails():
    with pytest.raises(ParamsParseError):
        parse_value("hello")


def test_number_out_of_range_fails():
    with pytest.raises(ParamsParseError):
        parse_value(str(1 << 128))


def test_filter_supported_methods():
    methods = [
        "author_submitAndWatchExtrinsic",
        "chain_getBlock",
        "state_subscribeStorage",
        "rpc_methods",
        "foo_UNSTABLE",
        42,
    ]
    assert filter_supported_methods(methods) == ["chain_getBlock", "rpc_methods"]


class FakeClient:
    def __init__(self, methods_result, call_result=None, failure=None):
        self.methods_result = methods_result
        self.call_result = call_result
        self.failure = failure
        self.calls = []

    async def request(self, method, params=None):
        self.calls.append((method, params))
        if method == "rpc_methods":
            return self.methods_result
        if self.failure is not None:
            raise self.failure
        return self.call_result


@pytest.mark.asyncio
async def test_raw_call_sends_params():
    client = FakeClient({"methods": ["author_hasKey", "chain_subscribeNewHeads"]}, True)
    request = RpcRequest(client)
    result = await request.raw_call("author_hasKey", RawParams([ALICE, '"sr25"']))
    assert result is True
    assert client.calls[-1] == ("author_hasKey", ["0x" + ALICE_HEX, "sr25"])


@pytest.mark.asyncio
async def test_raw_call_unknown_method():
    client = FakeClient({"methods": ["a_one", "b_two", "c_watchThing"]})
    with pytest.raises(RpcError) as info:
        await RpcRequest(client).raw_call("missing", RawParams())
    assert str(info.value) == "Method not found, supported methods: a_one, b_two"


@pytest.mark.asyncio
async def test_supported_methods_missing_field():
    with pytest.raises(RpcError, match="Methods field parsing failed!"):
        await RpcRequest(FakeClient({"version": 1})).supported_methods()


@pytest.mark.asyncio
async def test_raw_call_failure_is_wrapped():
    client = FakeClient({"methods": ["x_y"]}, failure=RpcError("boom"))
    with pytest.raises(RpcError, match="Raw RPC call failed: boom"):
        await RpcRequest(client).raw_call("x_y", RawParams())


@pytest.mark.asyncio
async def test_json_rpc_client_round_trip():
    received = []

    async def handler(ws, *args):
        async for raw in ws:
            message = json.loads(raw)
            received.append(message)
            await ws.send(json.dumps({"jsonrpc": "2.0", "method": "note", "params": {}}))
            if message["method"] == "fail":
                reply = {"jsonrpc": "2.0", "id": message["id"],
                         "error": {"code": -32601, "message": "Method not found"}}
            else:
                reply = {"jsonrpc": "2.0", "id": message["id"], "result": message.get("params")}
            await ws.send(json.dumps(reply))

    async with websockets.serve(handler, "127.0.0.1", 0) as server:
        port = next(iter(server.sockets)).getsockname()[1]
        client = JsonRpcClient(f"ws://127.0.0.1:{port}")
        try:
            assert await client.request("echo", [1, "a"]) == [1, "a"]
            with pytest.raises(RpcError, match="Method not found"):
                await client.request("fail", None)
        finally:
            await client.close()

    assert received[0]["method"] == "echo"
    assert "params" not in received[1]
    assert received[1]["id"] != received[0]["id"]