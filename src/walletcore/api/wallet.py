import logging
import time
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from walletcore.api.deps import get_caches, get_db, get_rpc, get_scan_service, get_utxo_scanner, require_address
from walletcore.api.schemas.wallet import (
    BalanceResponse,
    SendRequest,
    SendResponse,
    TransactionList,
    TransactionResponse,
    UtxoList,
)
from walletcore.db.models.ledger_entry import LedgerEntry
from walletcore.db.repos.transaction_repo import TransactionRepo
from walletcore.domain.addresses import normalize_address
from walletcore.domain.amounts import parse_sat, sat_to_coin_string
from walletcore.domain.enums import LedgerStatus, TxDirection
from walletcore.domain.models.ledger import LedgerEntryDraft
from walletcore.exceptions import RpcError
from walletcore.infra.cache.ttl_cache import QueryCaches
from walletcore.infra.rpc.client import ChainRpcClient
from walletcore.infra.rpc.utxo_scanner import UtxoSnapshotScanner, aggregate_balance, to_utxo_views
from walletcore.scanner.service import ScanService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["wallet"])

DbDep = Annotated[AsyncSession, Depends(get_db)]
RpcDep = Annotated[ChainRpcClient, Depends(get_rpc)]
CachesDep = Annotated[QueryCaches, Depends(get_caches)]
UtxoDep = Annotated[UtxoSnapshotScanner, Depends(get_utxo_scanner)]
ScanDep = Annotated[ScanService, Depends(get_scan_service)]
AddressDep = Annotated[str, Depends(require_address)]

TIP_KEY = "tip"


def _sat_or_none(value: int | None) -> str | None:
    return str(value) if value is not None else None


def _to_response(entry: LedgerEntry, best_height: int) -> TransactionResponse:
    confirmations = best_height - entry.block_height + 1 if entry.block_height > 0 else 0
    return TransactionResponse(
        tx_hash=entry.tx_hash,
        wallet_address=entry.wallet_address,
        from_addr=entry.from_addr,
        to_addr=entry.to_addr,
        direction=entry.direction,
        amount_sat=str(entry.amount_sat),
        fee_sat=_sat_or_none(entry.fee_sat),
        platform_fee_sat=_sat_or_none(entry.platform_fee_sat),
        platform_fee_address=entry.platform_fee_address,
        status=entry.status,
        block_height=entry.block_height,
        confirmations=max(0, confirmations),
        timestamp=entry.timestamp,
    )


async def _best_height(rpc: ChainRpcClient, caches: QueryCaches) -> int:
    height = caches.tip.get(TIP_KEY)
    if height is None:
        height = await rpc.get_block_count()
        caches.tip.set(TIP_KEY, height)
    return height


@router.get("/balance", response_model=BalanceResponse)
async def get_balance(address: AddressDep, caches: CachesDep, utxo_scanner: UtxoDep) -> BalanceResponse:
    cached = caches.balance.get(address)
    if cached is not None:
        return cached

    try:
        unspents = await utxo_scanner.scan(address)
    except Exception:
        logger.exception("GET /balance failed for %s", address)
        raise HTTPException(status_code=500, detail="balance failed")

    total = aggregate_balance(unspents)
    balance_str = sat_to_coin_string(total)
    payload = BalanceResponse(
        address=address,
        balance_sat=str(total),
        balance_str=balance_str,
        balance=float(balance_str),
    )
    caches.balance.set(address, payload)
    return payload


@router.get("/utxos", response_model=UtxoList)
async def get_utxos(address: AddressDep, caches: CachesDep, utxo_scanner: UtxoDep) -> UtxoList:
    cached = caches.utxo.get(address)
    if cached is not None:
        return cached

    try:
        unspents = await utxo_scanner.scan(address)
    except Exception:
        logger.exception("GET /utxos failed for %s", address)
        raise HTTPException(status_code=500, detail="utxos failed")

    views = to_utxo_views(address, unspents)
    payload = UtxoList(value=views, count=len(views))
    caches.utxo.set(address, payload)
    return payload


@router.get("/transactions", response_model=TransactionList)
async def get_transactions(
    address: AddressDep,
    db: DbDep,
    rpc: RpcDep,
    caches: CachesDep,
    scan_service: ScanDep,
    refresh: bool = Query(False, description="Scan new blocks before reading"),
) -> TransactionList:
    try:
        best_height = await _best_height(rpc, caches)

        rows = caches.tx.get(address)
        if rows is None or refresh:
            await scan_service.scan_confirmed_transactions(address)
            rows = await TransactionRepo(db).get_transactions(address)
            caches.tx.set(address, rows)

        return TransactionList(transactions=[_to_response(r, best_height) for r in rows])
    except Exception:
        logger.exception("GET /transactions failed for %s", address)
        raise HTTPException(status_code=500, detail="transactions failed")


@router.post("/send", response_model=SendResponse)
async def send_transaction(body: SendRequest, db: DbDep, rpc: RpcDep, caches: CachesDep) -> SendResponse:
    """Broadcast a signed transaction and record it as a pending sent entry."""
    tx_hex = body.tx_hex.strip()
    if not tx_hex:
        raise HTTPException(status_code=400, detail="tx_hex required")
    wallet_address = normalize_address(body.wallet_address)
    if not wallet_address:
        raise HTTPException(status_code=400, detail="wallet_address required")
    try:
        amount_sat = parse_sat(body.amount_sat, "amount_sat")
        fee_sat = parse_sat(body.fee_sat, "fee_sat") if body.fee_sat not in (None, "") else None
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        txid = await rpc.send_raw_transaction(tx_hex)
    except RpcError as e:
        logger.warning("POST /send broadcast rejected for %s: %s", wallet_address, e)
        raise HTTPException(status_code=500, detail=str(e))
    except Exception:
        logger.exception("POST /send broadcast failed for %s", wallet_address)
        raise HTTPException(status_code=500, detail="send failed")

    draft = LedgerEntryDraft(
        tx_hash=txid,
        wallet_address=wallet_address,
        from_addr=wallet_address,
        to_addr=normalize_address(body.to),
        direction=TxDirection.SENT,
        amount_sat=amount_sat,
        fee_sat=fee_sat,
        status=LedgerStatus.PENDING,
        block_height=0,
        confirmations=0,
        timestamp=int(time.time() * 1000),
    )
    try:
        await TransactionRepo(db).save_transaction(draft)
        await db.commit()
        caches.tx.delete(wallet_address)
    except Exception:
        # The broadcast already succeeded; the scanner will record it once confirmed
        logger.exception("Failed to record pending tx %s for %s", txid, wallet_address)
        await db.rollback()

    return SendResponse(txid=txid)
