from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from walletcore.db.models.scan_state import ScanState
from walletcore.domain.addresses import normalize_address


class ScanStateRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_scan_height(self, wallet_address: str) -> Optional[int]:
        address = normalize_address(wallet_address)
        if not address:
            return None

        result = await self._session.execute(
            select(ScanState.last_height).where(ScanState.wallet_address == address)
        )
        return result.scalar_one_or_none()

    async def update_scan_height(self, wallet_address: str, height: int) -> None:
        """Upsert the checkpoint. A lower height never replaces a higher one."""
        address = normalize_address(wallet_address)
        if not address:
            return

        state = await self._session.get(ScanState, address)
        if state is None:
            self._session.add(ScanState(wallet_address=address, last_height=height))
        elif height > state.last_height:
            state.last_height = height
        await self._session.flush()
