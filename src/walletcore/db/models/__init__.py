from walletcore.db.models.ledger_entry import LedgerEntry
from walletcore.db.models.scan_state import ScanState

__all__ = ["LedgerEntry", "ScanState"]
