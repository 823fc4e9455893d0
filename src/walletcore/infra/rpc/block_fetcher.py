"""Fetch blocks with fully materialized transaction objects."""

import logging

from walletcore.domain.enums import RpcCallStatus
from walletcore.exceptions import RpcError
from walletcore.infra.rpc.client import BLOCK_CALL, BLOCK_TX_CALL, ChainRpcClient

logger = logging.getLogger(__name__)


class BlockFetcher:
    def __init__(self, rpc: ChainRpcClient) -> None:
        self._rpc = rpc

    async def fetch_block(self, block_hash: str) -> dict:
        """Return the block with ``tx`` as a list of decoded transactions.

        Tries ``getblock`` verbosity 2 first. If the node refuses it, falls back to
        verbosity 1 plus one ``getrawtransaction`` per txid. Transactions that fail
        to load are skipped, so the fallback may return a partial block.
        """
        timeout, retries = BLOCK_CALL
        outcome = await self._rpc.try_call("getblock", [block_hash, 2], timeout=timeout, retries=retries)
        if outcome.ok:
            return outcome.result

        if outcome.status == RpcCallStatus.UNSUPPORTED:
            logger.info("Verbose getblock unsupported, fetching transactions one by one for %s", block_hash)
        else:
            logger.warning("Verbose getblock failed for %s: %s; falling back", block_hash, outcome.error)

        block = await self._rpc.get_block(block_hash, verbosity=1)
        txids = block.get("tx") if isinstance(block, dict) else None
        if not isinstance(txids, list):
            txids = []

        txs: list[dict] = []
        for txid in txids:
            try:
                tx = await self._rpc.get_raw_transaction(txid, retries=BLOCK_TX_CALL[1])
            except RpcError as e:
                logger.warning("Skipping tx %s in block %s: %s", txid, block_hash, e)
                continue
            if tx:
                txs.append(tx)

        return {**(block or {}), "tx": txs}
