"""Bounded cache of previous transactions referenced by inputs during a scan."""

import logging
from collections import OrderedDict
from typing import Optional

from walletcore.exceptions import ResolutionError, RpcError
from walletcore.infra.rpc.client import ChainRpcClient

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 2000


class PrevTxCache:
    """Insertion-ordered map of txid -> raw transaction.

    A hit moves the entry to the back, so eviction of the oldest entry
    approximates LRU. One instance covers one wallet scan pass.
    """

    def __init__(self, rpc: ChainRpcClient, capacity: int = DEFAULT_CAPACITY) -> None:
        self._rpc = rpc
        self._capacity = capacity
        self._data: OrderedDict[str, dict] = OrderedDict()

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, txid: object) -> bool:
        return txid in self._data

    def get(self, txid: str) -> Optional[dict]:
        tx = self._data.get(txid)
        if tx is not None:
            self._data.move_to_end(txid)
        return tx

    def put(self, txid: str, tx: dict) -> None:
        self._data[txid] = tx
        self._data.move_to_end(txid)
        while len(self._data) > self._capacity:
            self._data.popitem(last=False)

    def clear(self) -> None:
        self._data.clear()

    async def get_prev_tx(self, txid: str) -> Optional[dict]:
        """Return the referenced transaction, fetching it on a miss.

        Raises ResolutionError when the node cannot return it.
        """
        if not txid:
            return None

        cached = self.get(txid)
        if cached is not None:
            return cached

        try:
            tx = await self._rpc.get_raw_transaction(txid)
        except RpcError as e:
            raise ResolutionError(txid) from e
        if not tx:
            raise ResolutionError(txid)

        self.put(txid, tx)
        return tx
