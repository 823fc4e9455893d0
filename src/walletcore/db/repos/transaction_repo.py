from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from walletcore.db.models.ledger_entry import LedgerEntry
from walletcore.domain.addresses import normalize_address, normalize_peer
from walletcore.domain.models.ledger import LedgerEntryDraft


class TransactionRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save_transaction(self, draft: LedgerEntryDraft) -> LedgerEntry:
        """Upsert by (wallet_address, tx_hash), overwriting every field on conflict."""
        wallet_address = normalize_address(draft.wallet_address)
        if not wallet_address:
            raise ValueError("wallet_address is required")

        values = {
            "from_addr": normalize_peer(draft.from_addr),
            "to_addr": normalize_peer(draft.to_addr),
            "direction": draft.direction.value,
            "amount_sat": draft.amount_sat,
            "fee_sat": draft.fee_sat,
            "platform_fee_sat": draft.platform_fee_sat,
            "platform_fee_address": (
                normalize_address(draft.platform_fee_address) if draft.platform_fee_address is not None else None
            ),
            "status": draft.status.value,
            "confirmations": draft.confirmations,
            "block_height": draft.block_height,
            "timestamp": draft.timestamp,
        }

        entry = await self.get_by_hash(wallet_address, draft.tx_hash)
        if entry is None:
            entry = LedgerEntry(tx_hash=draft.tx_hash, wallet_address=wallet_address, **values)
            self._session.add(entry)
        else:
            for key, value in values.items():
                setattr(entry, key, value)

        await self._session.flush()
        return entry

    async def get_by_hash(self, wallet_address: str, tx_hash: str) -> Optional[LedgerEntry]:
        result = await self._session.execute(
            select(LedgerEntry).where(
                LedgerEntry.wallet_address == normalize_address(wallet_address),
                LedgerEntry.tx_hash == tx_hash,
            )
        )
        return result.scalar_one_or_none()

    async def get_transactions(self, wallet_address: str) -> list[LedgerEntry]:
        """All entries for a wallet, newest first."""
        address = normalize_address(wallet_address)
        if not address:
            return []

        result = await self._session.execute(
            select(LedgerEntry)
            .where(LedgerEntry.wallet_address == address)
            .order_by(LedgerEntry.timestamp.desc(), LedgerEntry.id.desc())
        )
        return list(result.scalars().all())
