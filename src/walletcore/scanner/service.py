"""Incremental per-wallet block scan with a resumable height checkpoint."""

import logging
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from walletcore.db.repos.scan_state_repo import ScanStateRepo
from walletcore.db.repos.transaction_repo import TransactionRepo
from walletcore.domain.addresses import normalize_address
from walletcore.domain.enums import ScanStatus
from walletcore.domain.models.ledger import LedgerEntryDraft, ScanResult
from walletcore.exceptions import PersistenceError, ResolutionError, WalletCoreError
from walletcore.infra.rpc.block_fetcher import BlockFetcher
from walletcore.infra.rpc.client import ChainRpcClient
from walletcore.scanner.classifier import TransactionClassifier, is_coinbase
from walletcore.scanner.locks import WalletScanLocks
from walletcore.scanner.prev_tx_cache import DEFAULT_CAPACITY, PrevTxCache

logger = logging.getLogger(__name__)


def compute_start_height(
    current_height: int,
    last_height: int | None,
    initial_backfill: int = 1000,
    max_catchup: int = 5000,
) -> int | None:
    """First height to scan, or None when the wallet is already at the tip.

    A wallet never scanned before starts ``initial_backfill`` blocks below the tip.
    A wallet further than ``max_catchup`` blocks behind skips ahead to
    ``current_height - max_catchup``, leaving a gap.
    """
    if last_height is None:
        return max(0, current_height - initial_backfill)
    if last_height >= current_height:
        return None

    start = last_height + 1
    if current_height - start > max_catchup:
        start = current_height - max_catchup
    return start


class ScanService:
    """Walks blocks for one wallet at a time and persists classified entries.

    States per wallet: idle -> locked -> scanning -> (committing)* -> unlocked.
    The checkpoint is committed every ``commit_every`` heights and on the final
    height; on failure the last fully processed height is committed and the pass
    stops. scan_confirmed_transactions() never raises.
    """

    def __init__(
        self,
        rpc: ChainRpcClient,
        block_fetcher: BlockFetcher,
        session_factory: async_sessionmaker[AsyncSession],
        locks: WalletScanLocks,
        platform_fee_addresses: Iterable[str] = (),
        split_platform_fee: bool = True,
        initial_backfill: int = 1000,
        max_catchup: int = 5000,
        commit_every: int = 10,
        prev_tx_cache_size: int = DEFAULT_CAPACITY,
    ) -> None:
        self._rpc = rpc
        self._block_fetcher = block_fetcher
        self._session_factory = session_factory
        self._locks = locks
        self._platform_fee_addresses = list(platform_fee_addresses)
        self._split_platform_fee = split_platform_fee
        self._initial_backfill = initial_backfill
        self._max_catchup = max_catchup
        self._commit_every = commit_every
        self._prev_tx_cache_size = prev_tx_cache_size

    async def scan_confirmed_transactions(self, address: str) -> ScanResult:
        wallet = normalize_address(address)
        if not wallet:
            return ScanResult(wallet_address=wallet, status=ScanStatus.SKIPPED)

        if not self._locks.try_acquire(wallet):
            logger.debug("Scan already running for %s", wallet)
            return ScanResult(wallet_address=wallet, status=ScanStatus.SKIPPED)

        cache = PrevTxCache(self._rpc, capacity=self._prev_tx_cache_size)
        try:
            return await self._scan(wallet, cache)
        except Exception:
            logger.exception("Scan of %s failed", wallet)
            return ScanResult(wallet_address=wallet, status=ScanStatus.ERROR)
        finally:
            cache.clear()
            self._locks.release(wallet)

    async def _scan(self, wallet: str, cache: PrevTxCache) -> ScanResult:
        current_height = await self._rpc.get_block_count()
        async with self._session_factory() as session:
            last_height = await ScanStateRepo(session).get_scan_height(wallet)

        start_height = compute_start_height(current_height, last_height, self._initial_backfill, self._max_catchup)
        if start_height is None or start_height > current_height:
            return ScanResult(
                wallet_address=wallet,
                status=ScanStatus.UP_TO_DATE,
                end_height=current_height,
                last_committed_height=last_height,
            )

        logger.info("Scanning %s from %d to %d (checkpoint %s)", wallet, start_height, current_height, last_height)

        classifier = TransactionClassifier(cache, self._platform_fee_addresses, self._split_platform_fee)
        result = ScanResult(
            wallet_address=wallet,
            status=ScanStatus.COMPLETED,
            start_height=start_height,
            end_height=current_height,
            last_committed_height=last_height,
        )
        last_ok_height = start_height - 1

        for height in range(start_height, current_height + 1):
            saved = await self._process_block(height, wallet, current_height, classifier)
            if saved is None:
                if last_ok_height >= start_height:
                    await self._commit_checkpoint(wallet, last_ok_height)
                    result.last_committed_height = last_ok_height
                result.status = ScanStatus.PARTIAL
                logger.warning("Scan of %s stopped at height %d, checkpoint %s", wallet, height, result.last_committed_height)
                return result

            result.entries_saved += saved
            last_ok_height = height

            if (height - start_height + 1) % self._commit_every == 0 or height == current_height:
                await self._commit_checkpoint(wallet, last_ok_height)
                result.last_committed_height = last_ok_height

        logger.info("Scan of %s done at %d, %d entries saved", wallet, current_height, result.entries_saved)
        return result

    async def _process_block(
        self,
        height: int,
        wallet: str,
        current_height: int,
        classifier: TransactionClassifier,
    ) -> int | None:
        """Classify and persist one block. Returns entries saved, or None on failure."""
        try:
            block_hash = await self._rpc.get_block_hash(height)
            block = await self._block_fetcher.fetch_block(block_hash)
            if not isinstance(block, dict):
                logger.warning("Block %d (%s) missing for %s", height, block_hash, wallet)
                return None

            txs = block.get("tx")
            timestamp_ms = int(block.get("time") or 0) * 1000
            confirmations = max(0, current_height - height + 1)

            drafts: list[LedgerEntryDraft] = []
            unresolved = 0
            for tx in txs if isinstance(txs, list) else []:
                if not isinstance(tx, dict) or is_coinbase(tx):
                    continue
                try:
                    draft = await classifier.classify(
                        tx,
                        wallet,
                        block_height=height,
                        confirmations=confirmations,
                        timestamp_ms=timestamp_ms,
                        strict=True,
                    )
                except ResolutionError as e:
                    logger.info("Skipping %s at height %d for %s: %s", tx.get("txid"), height, wallet, e)
                    unresolved += 1
                    continue
                if draft is not None:
                    drafts.append(draft)

            if drafts:
                await self._save_entries(drafts)

            # Checkpoint stays below this height until every input resolves
            if unresolved:
                logger.warning("Height %d has %d unresolved txs for %s, retrying next scan", height, unresolved, wallet)
                return None
            return len(drafts)
        except WalletCoreError as e:
            logger.error("Block %d failed for %s: %s", height, wallet, e)
            return None
        except Exception:
            logger.exception("Block %d failed for %s", height, wallet)
            return None

    async def _save_entries(self, drafts: list[LedgerEntryDraft]) -> None:
        try:
            async with self._session_factory() as session:
                repo = TransactionRepo(session)
                for draft in drafts:
                    await repo.save_transaction(draft)
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to save {len(drafts)} entries: {e}") from e

    async def _commit_checkpoint(self, wallet: str, height: int) -> None:
        async with self._session_factory() as session:
            await ScanStateRepo(session).update_scan_height(wallet, height)
            await session.commit()
