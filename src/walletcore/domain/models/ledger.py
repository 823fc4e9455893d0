"""Domain types passed between the classifier, persistence and the query API."""

from typing import Optional

from pydantic import BaseModel

from walletcore.domain.enums import LedgerStatus, ScanStatus, TxDirection


class LedgerEntryDraft(BaseModel):
    """A classified transaction, scoped to one wallet, ready to be upserted."""

    tx_hash: str
    wallet_address: str
    from_addr: str
    to_addr: str
    direction: TxDirection
    amount_sat: int  # excludes platform fee when split
    fee_sat: Optional[int] = None  # miner fee, sent entries only
    platform_fee_sat: Optional[int] = None
    platform_fee_address: Optional[str] = None
    status: LedgerStatus = LedgerStatus.CONFIRMED
    block_height: int = 0
    confirmations: int = 0
    timestamp: int  # milliseconds


class ScanResult(BaseModel):
    """Summary of one scan_confirmed_transactions pass."""

    wallet_address: str
    status: ScanStatus
    start_height: Optional[int] = None
    end_height: Optional[int] = None  # chain tip observed at scan start
    last_committed_height: Optional[int] = None
    entries_saved: int = 0


class UtxoView(BaseModel):
    """One unspent output as reported by scantxoutset, value in satoshis."""

    txid: str
    vout: int
    value: str  # integer satoshis as a decimal string
    script_pubkey: str = ""
    address: str
    height: Optional[int] = None
