from walletcore.db.repos.scan_state_repo import ScanStateRepo
from walletcore.db.repos.transaction_repo import TransactionRepo

__all__ = ["ScanStateRepo", "TransactionRepo"]
