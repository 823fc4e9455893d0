from walletcore.domain.enums.ledger import LedgerStatus, PeerSentinel, TxDirection
from walletcore.domain.enums.rpc import RpcCallStatus
from walletcore.domain.enums.scan import ScanStatus

__all__ = [
    "LedgerStatus",
    "PeerSentinel",
    "RpcCallStatus",
    "ScanStatus",
    "TxDirection",
]
