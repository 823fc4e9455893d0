"""Celery tasks for background wallet refresh."""

import asyncio
import logging

from walletcore.domain.enums import ScanStatus
from walletcore.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="scan_wallet", max_retries=2, default_retry_delay=30)
def scan_wallet_task(self, address: str) -> dict:
    """Scan new blocks for one wallet.

    Bridges to async code via asyncio.run(). Each invocation builds its own
    container (RPC pool, engine, locks), so the per-wallet lock only covers
    this worker process. A scan that ends in ERROR is retried.
    """
    result = asyncio.run(_scan_wallet_async(address))
    if result["status"] == ScanStatus.ERROR.value:
        raise self.retry(exc=RuntimeError(f"Scan of {address} failed"))
    return result


async def _scan_wallet_async(address: str) -> dict:
    from walletcore.container import Container

    container = Container()
    try:
        result = await container.scan_service().scan_confirmed_transactions(address)
        logger.info("Scan task for %s finished: %s", address, result.status.value)
        return result.model_dump(mode="json")
    finally:
        await container.rpc_client().close()
        await container.engine().dispose()
