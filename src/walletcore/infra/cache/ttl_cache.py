import time
from collections import OrderedDict
from typing import Generic, Hashable, Optional, TypeVar

V = TypeVar("V")


class TTLCache(Generic[V]):
    """In-memory cache with per-entry expiry and a size bound.

    Pure performance cache: last write wins, oldest insertion evicted first.
    """

    def __init__(self, ttl: float = 5.0, max_size: int = 1000) -> None:
        self._ttl = ttl
        self._max_size = max_size
        self._data: OrderedDict[Hashable, tuple[float, V]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._data)

    def get(self, key: Hashable) -> Optional[V]:
        item = self._data.get(key)
        if item is None:
            return None
        expires_at, value = item
        if time.monotonic() > expires_at:
            del self._data[key]
            return None
        return value

    def set(self, key: Hashable, value: V) -> None:
        self._data.pop(key, None)
        self._data[key] = (time.monotonic() + self._ttl, value)
        while len(self._data) > self._max_size:
            self._data.popitem(last=False)

    def delete(self, key: Hashable) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()


class QueryCaches:
    """Read-side caches used by the query API."""

    def __init__(self, balance: TTLCache, utxo: TTLCache, tx: TTLCache, tip: TTLCache) -> None:
        self.balance = balance
        self.utxo = utxo
        self.tx = tx
        self.tip = tip
