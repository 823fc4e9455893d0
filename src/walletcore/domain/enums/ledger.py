from enum import Enum


class TxDirection(str, Enum):
    """Direction of a ledger entry relative to its wallet."""

    SENT = "sent"
    RECEIVED = "received"


class LedgerStatus(str, Enum):
    """Confirmation state of a ledger entry."""

    PENDING = "pending"  # broadcast by us, not yet seen in a block
    CONFIRMED = "confirmed"


class PeerSentinel(str, Enum):
    """Placeholder counterparties used when an address cannot be resolved."""

    OTHER = "Other"
    UNKNOWN = "Unknown"
