from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from walletcore.db.session import Base, TimestampMixin


class ScanState(TimestampMixin, Base):
    """Per-wallet scan checkpoint: highest block height fully processed."""

    __tablename__ = "scan_state"

    wallet_address: Mapped[str] = mapped_column(String(128), primary_key=True)
    last_height: Mapped[int] = mapped_column(Integer)
