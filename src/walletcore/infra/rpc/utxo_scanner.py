"""Serialized UTXO-set snapshots via ``scantxoutset``.

The node allows a single ``scantxoutset`` at a time, so every request in the
process goes through one queue drained by one worker task.
"""

import asyncio
import logging
from typing import Any

from walletcore.domain.addresses import utxo_descriptor
from walletcore.domain.amounts import coin_to_sat
from walletcore.domain.models.ledger import UtxoView
from walletcore.infra.rpc.client import ChainRpcClient

logger = logging.getLogger(__name__)


class UtxoSnapshotScanner:
    def __init__(self, rpc: ChainRpcClient) -> None:
        self._rpc = rpc
        self._queue: asyncio.Queue[tuple[str, asyncio.Future]] | None = None
        self._worker: asyncio.Task | None = None

    def start(self) -> None:
        if self._worker is not None and not self._worker.done():
            return
        self._queue = asyncio.Queue()
        self._worker = asyncio.create_task(self._run(self._queue), name="utxo-scanner")

    async def stop(self) -> None:
        if self._worker is None:
            return
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None

        # Fail queued requests
        while self._queue is not None and not self._queue.empty():
            _, future = self._queue.get_nowait()
            if not future.done():
                future.set_exception(RuntimeError("UTXO scanner stopped"))
        self._queue = None

    async def scan(self, address: str) -> list[dict]:
        """Return the raw ``unspents`` for an address, waiting for earlier scans to finish."""
        self.start()
        assert self._queue is not None
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        await self._queue.put((utxo_descriptor(address), future))
        return await future

    async def _run(self, queue: asyncio.Queue) -> None:
        while True:
            descriptor, future = await queue.get()
            try:
                if not future.done():
                    await self._scan_one(descriptor, future)
            finally:
                queue.task_done()

    async def _scan_one(self, descriptor: str, future: asyncio.Future) -> None:
        try:
            result = await self._rpc.scan_tx_out_set(descriptor)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            logger.warning("scantxoutset failed for %s: %s", descriptor, e)
            if not future.done():
                future.set_exception(e)
            return

        unspents = result.get("unspents") if isinstance(result, dict) else None
        if not future.done():
            future.set_result(unspents if isinstance(unspents, list) else [])


def aggregate_balance(unspents: list[dict[str, Any]]) -> int:
    """Sum unspent amounts in satoshis."""
    return sum(coin_to_sat(u.get("amount")) for u in unspents)


def to_utxo_views(address: str, unspents: list[dict[str, Any]]) -> list[UtxoView]:
    return [
        UtxoView(
            txid=u["txid"],
            vout=u["vout"],
            value=str(coin_to_sat(u.get("amount"))),
            script_pubkey=u.get("scriptPubKey") or "",
            address=address,
            height=u.get("height"),
        )
        for u in unspents
    ]
