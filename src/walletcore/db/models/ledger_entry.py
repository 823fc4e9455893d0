from typing import Optional

import sqlalchemy as sa
from sqlalchemy import BigInteger, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from walletcore.db.session import Base, TimestampMixin
from walletcore.domain.enums import LedgerStatus

# Satoshi amounts are exact integers; 21M coins fit comfortably in BIGINT
SatAmount = BigInteger


class LedgerEntry(TimestampMixin, Base):
    """Classified transaction for one wallet. One row per (wallet_address, tx_hash)."""

    __tablename__ = "transactions"
    __table_args__ = (
        UniqueConstraint("wallet_address", "tx_hash", name="uq_transactions_wallet_tx_hash"),
        Index("ix_transactions_wallet_timestamp", "wallet_address", "timestamp"),
    )

    id: Mapped[int] = mapped_column(BigInteger().with_variant(sa.Integer, "sqlite"), primary_key=True, autoincrement=True)
    tx_hash: Mapped[str] = mapped_column(String(64), index=True)
    wallet_address: Mapped[str] = mapped_column(String(128))
    from_addr: Mapped[str] = mapped_column(String(128))
    to_addr: Mapped[str] = mapped_column(String(128))
    direction: Mapped[str] = mapped_column(String(10))
    amount_sat: Mapped[int] = mapped_column(SatAmount)
    fee_sat: Mapped[Optional[int]] = mapped_column(SatAmount, default=None)
    platform_fee_sat: Mapped[Optional[int]] = mapped_column(SatAmount, default=None)
    platform_fee_address: Mapped[Optional[str]] = mapped_column(String(128), default=None)
    status: Mapped[str] = mapped_column(String(16), default=LedgerStatus.CONFIRMED.value, index=True)
    confirmations: Mapped[int] = mapped_column(Integer, default=0)
    block_height: Mapped[int] = mapped_column(Integer, default=0)
    timestamp: Mapped[int] = mapped_column(BigInteger)  # milliseconds
