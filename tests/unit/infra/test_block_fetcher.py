"""Tests for BlockFetcher: verbose getblock with per-tx fallback."""

from unittest.mock import AsyncMock, MagicMock

from walletcore.domain.enums import RpcCallStatus
from walletcore.exceptions import RpcError
from walletcore.infra.rpc.block_fetcher import BlockFetcher
from walletcore.infra.rpc.client import RpcOutcome


def _rpc(outcome: RpcOutcome) -> MagicMock:
    rpc = MagicMock()
    rpc.try_call = AsyncMock(return_value=outcome)
    rpc.get_block = AsyncMock(return_value={"hash": "bh", "height": 5, "time": 1700000000, "tx": ["t1", "t2", "t3"]})
    rpc.get_raw_transaction = AsyncMock(side_effect=lambda txid, retries=0: {"txid": txid, "vin": [], "vout": []})
    return rpc


class TestFetchBlock:
    async def test_verbose_block_returned_directly(self):
        block = {"hash": "bh", "tx": [{"txid": "t1"}]}
        rpc = _rpc(RpcOutcome(status=RpcCallStatus.OK, result=block))

        result = await BlockFetcher(rpc).fetch_block("bh")

        assert result == block
        rpc.try_call.assert_awaited_once()
        assert rpc.try_call.call_args.args == ("getblock", ["bh", 2])
        rpc.get_block.assert_not_called()

    async def test_unsupported_falls_back_to_per_tx(self):
        rpc = _rpc(RpcOutcome(status=RpcCallStatus.UNSUPPORTED, error=RpcError("Method not found", code=-32601)))

        result = await BlockFetcher(rpc).fetch_block("bh")

        rpc.get_block.assert_awaited_once_with("bh", verbosity=1)
        assert [tx["txid"] for tx in result["tx"]] == ["t1", "t2", "t3"]
        assert result["time"] == 1700000000
        assert result["height"] == 5

    async def test_fallback_uses_single_retry_per_tx(self):
        rpc = _rpc(RpcOutcome(status=RpcCallStatus.ERROR, error=RpcError("timeout")))

        await BlockFetcher(rpc).fetch_block("bh")

        assert rpc.get_raw_transaction.await_count == 3
        for call in rpc.get_raw_transaction.call_args_list:
            assert call.kwargs["retries"] == 1

    async def test_failed_txs_are_skipped(self):
        rpc = _rpc(RpcOutcome(status=RpcCallStatus.UNSUPPORTED))

        async def raw_tx(txid, retries=0):
            if txid == "t2":
                raise RpcError("No such transaction", code=-5)
            return {"txid": txid}

        rpc.get_raw_transaction = AsyncMock(side_effect=raw_tx)

        result = await BlockFetcher(rpc).fetch_block("bh")

        assert [tx["txid"] for tx in result["tx"]] == ["t1", "t3"]

    async def test_block_without_tx_list(self):
        rpc = _rpc(RpcOutcome(status=RpcCallStatus.UNSUPPORTED))
        rpc.get_block = AsyncMock(return_value={"hash": "bh"})

        result = await BlockFetcher(rpc).fetch_block("bh")

        assert result["tx"] == []
        rpc.get_raw_transaction.assert_not_called()
