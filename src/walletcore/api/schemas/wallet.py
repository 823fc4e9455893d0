from typing import Optional

from pydantic import BaseModel

from walletcore.domain.models.ledger import UtxoView


class BalanceResponse(BaseModel):
    address: str
    balance_sat: str  # integer satoshis as a decimal string
    balance_str: str  # coin amount, trimmed
    balance: float  # display only


class UtxoList(BaseModel):
    value: list[UtxoView]
    count: int


class TransactionResponse(BaseModel):
    tx_hash: str
    wallet_address: str
    from_addr: str
    to_addr: str
    direction: str
    amount_sat: str
    fee_sat: Optional[str] = None
    platform_fee_sat: Optional[str] = None
    platform_fee_address: Optional[str] = None
    status: str
    block_height: int
    confirmations: int
    timestamp: int


class TransactionList(BaseModel):
    transactions: list[TransactionResponse]


class SendRequest(BaseModel):
    tx_hex: str = ""
    wallet_address: str = ""
    to: str = ""
    amount_sat: Optional[str | int] = None
    fee_sat: Optional[str | int] = None


class SendResponse(BaseModel):
    txid: str
