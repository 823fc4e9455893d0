"""wallet core tables: transactions ledger and scan_state checkpoints

Revision ID: v1_001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "v1_001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "transactions",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("tx_hash", sa.String(length=64), nullable=False),
        sa.Column("wallet_address", sa.String(length=128), nullable=False),
        sa.Column("from_addr", sa.String(length=128), nullable=False),
        sa.Column("to_addr", sa.String(length=128), nullable=False),
        sa.Column("direction", sa.String(length=10), nullable=False),
        sa.Column("amount_sat", sa.BigInteger(), nullable=False),
        sa.Column("fee_sat", sa.BigInteger(), nullable=True),
        sa.Column("platform_fee_sat", sa.BigInteger(), nullable=True),
        sa.Column("platform_fee_address", sa.String(length=128), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("confirmations", sa.Integer(), nullable=False),
        sa.Column("block_height", sa.Integer(), nullable=False),
        sa.Column("timestamp", sa.BigInteger(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_transactions")),
        sa.UniqueConstraint("wallet_address", "tx_hash", name="uq_transactions_wallet_tx_hash"),
    )
    op.create_index("ix_transactions_tx_hash", "transactions", ["tx_hash"])
    op.create_index("ix_transactions_status", "transactions", ["status"])
    op.create_index("ix_transactions_wallet_timestamp", "transactions", ["wallet_address", "timestamp"])

    op.create_table(
        "scan_state",
        sa.Column("wallet_address", sa.String(length=128), nullable=False),
        sa.Column("last_height", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("wallet_address", name=op.f("pk_scan_state")),
    )


def downgrade() -> None:
    op.drop_table("scan_state")
    op.drop_index("ix_transactions_wallet_timestamp", table_name="transactions")
    op.drop_index("ix_transactions_status", table_name="transactions")
    op.drop_index("ix_transactions_tx_hash", table_name="transactions")
    op.drop_table("transactions")
