from contextlib import asynccontextmanager
from typing import AsyncIterator


class WalletScanLocks:
    """Process-local set of wallets with a scan in progress.

    Check-and-add happens without an await in between, which makes it atomic
    under asyncio's cooperative scheduling.
    """

    def __init__(self) -> None:
        self._active: set[str] = set()

    def try_acquire(self, wallet_address: str) -> bool:
        if wallet_address in self._active:
            return False
        self._active.add(wallet_address)
        return True

    def release(self, wallet_address: str) -> None:
        self._active.discard(wallet_address)

    def is_locked(self, wallet_address: str) -> bool:
        return wallet_address in self._active

    @asynccontextmanager
    async def hold(self, wallet_address: str) -> AsyncIterator[bool]:
        """Yield True if the lock was taken (and release it on exit), False if already held."""
        acquired = self.try_acquire(wallet_address)
        try:
            yield acquired
        finally:
            if acquired:
                self.release(wallet_address)
