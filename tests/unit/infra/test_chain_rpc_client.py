"""Tests for ChainRpcClient: JSON-RPC over httpx with retries."""

import json

import httpx
import pytest

from walletcore.domain.enums import RpcCallStatus
from walletcore.exceptions import RpcError, RpcTransportError
from walletcore.infra.rpc.client import ChainRpcClient, is_method_not_allowed


class Recorder:
    """MockTransport handler that replays queued responses and records requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        return item

    @property
    def payloads(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]


def _ok(result) -> httpx.Response:
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": result, "error": None})


def _err(code: int, message: str, status: int = 500) -> httpx.Response:
    return httpx.Response(status, json={"result": None, "error": {"code": code, "message": message}})


def _client(handler) -> ChainRpcClient:
    return ChainRpcClient(
        rpc_url="http://node.test/rpc",
        username="user",
        password="pass",
        retry_delay=0,
        transport=httpx.MockTransport(handler),
    )


class TestCall:
    async def test_returns_result(self):
        handler = Recorder(_ok(812345))
        async with _client(handler) as rpc:
            assert await rpc.get_block_count() == 812345

        payload = handler.payloads[0]
        assert payload["jsonrpc"] == "2.0"
        assert payload["method"] == "getblockcount"
        assert payload["params"] == []

    async def test_sends_basic_auth(self):
        handler = Recorder(_ok("00ab"))
        async with _client(handler) as rpc:
            await rpc.get_block_hash(10)

        assert handler.requests[0].headers["authorization"].startswith("Basic ")
        assert handler.payloads[0]["params"] == [10]

    async def test_request_ids_increase(self):
        handler = Recorder(_ok(1))
        async with _client(handler) as rpc:
            await rpc.call("getblockcount")
            await rpc.call("getblockcount")

        assert handler.payloads[0]["id"] < handler.payloads[1]["id"]

    async def test_rpc_error_fields(self):
        handler = Recorder(_err(-5, "No such mempool or blockchain transaction"))
        async with _client(handler) as rpc:
            with pytest.raises(RpcError) as exc_info:
                await rpc.call("getrawtransaction", ["ff", True])

        err = exc_info.value
        assert err.code == -5
        assert err.http_status == 500
        assert err.method == "getrawtransaction"
        assert "No such mempool" in str(err)

    async def test_http_error_without_body(self):
        handler = Recorder(httpx.Response(502, content=b""))
        async with _client(handler) as rpc:
            with pytest.raises(RpcError) as exc_info:
                await rpc.call("getblockcount")
        assert exc_info.value.http_status == 502

    async def test_empty_body(self):
        handler = Recorder(httpx.Response(200, content=b""))
        async with _client(handler) as rpc:
            with pytest.raises(RpcError, match="Empty"):
                await rpc.call("getblockcount")

    async def test_transport_error(self):
        handler = Recorder(httpx.ConnectError("refused"))
        async with _client(handler) as rpc:
            with pytest.raises(RpcTransportError):
                await rpc.call("getblockcount")


class TestRetries:
    async def test_no_retries_by_default(self):
        handler = Recorder(_err(-1, "boom"))
        async with _client(handler) as rpc:
            with pytest.raises(RpcError):
                await rpc.call("sendrawtransaction", ["00"])
        assert len(handler.requests) == 1

    async def test_retries_then_raises_last_error(self):
        handler = Recorder(_err(-1, "boom"))
        async with _client(handler) as rpc:
            with pytest.raises(RpcError, match="boom"):
                await rpc.call("getblockcount", retries=2)
        assert len(handler.requests) == 3

    async def test_recovers_after_transient_failure(self):
        handler = Recorder(httpx.ConnectError("reset"), _ok(7))
        async with _client(handler) as rpc:
            assert await rpc.call("getblockcount", retries=2) == 7
        assert len(handler.requests) == 2

    async def test_block_count_uses_light_profile_retries(self):
        handler = Recorder(httpx.ReadTimeout("slow"))
        async with _client(handler) as rpc:
            with pytest.raises(RpcTransportError):
                await rpc.get_block_count()
        assert len(handler.requests) == 3


class TestTryCall:
    async def test_ok(self):
        handler = Recorder(_ok({"tx": []}))
        async with _client(handler) as rpc:
            outcome = await rpc.try_call("getblock", ["00", 2])
        assert outcome.ok
        assert outcome.result == {"tx": []}

    async def test_method_not_found_is_unsupported(self):
        handler = Recorder(_err(-32601, "Method not found", status=404))
        async with _client(handler) as rpc:
            outcome = await rpc.try_call("getblock", ["00", 2])
        assert outcome.status == RpcCallStatus.UNSUPPORTED
        assert isinstance(outcome.error, RpcError)

    async def test_other_error(self):
        handler = Recorder(_err(-8, "Block height out of range"))
        async with _client(handler) as rpc:
            outcome = await rpc.try_call("getblock", ["00", 2])
        assert outcome.status == RpcCallStatus.ERROR
        assert not outcome.ok


class TestIsMethodNotAllowed:
    def test_code(self):
        assert is_method_not_allowed(RpcError("x", code=-32601))

    def test_message(self):
        assert is_method_not_allowed(RpcError("Method not allowed"))
        assert is_method_not_allowed(RpcError("missing required parameter"))

    def test_other(self):
        assert not is_method_not_allowed(RpcError("Block not found", code=-5))
