from typing import AsyncGenerator

from dependency_injector.wiring import Provide, inject
from fastapi import Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from walletcore.container import Container
from walletcore.domain.addresses import normalize_address
from walletcore.infra.cache.ttl_cache import QueryCaches
from walletcore.infra.price.service import PriceService
from walletcore.infra.rpc.client import ChainRpcClient
from walletcore.infra.rpc.utxo_scanner import UtxoSnapshotScanner
from walletcore.scanner.service import ScanService


@inject
async def get_db(
    session_factory: async_sessionmaker[AsyncSession] = Depends(Provide[Container.session_factory]),
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@inject
def get_rpc(rpc: ChainRpcClient = Depends(Provide[Container.rpc_client])) -> ChainRpcClient:
    return rpc


@inject
def get_scan_service(service: ScanService = Depends(Provide[Container.scan_service])) -> ScanService:
    return service


@inject
def get_utxo_scanner(scanner: UtxoSnapshotScanner = Depends(Provide[Container.utxo_scanner])) -> UtxoSnapshotScanner:
    return scanner


@inject
def get_caches(caches: QueryCaches = Depends(Provide[Container.query_caches])) -> QueryCaches:
    return caches


@inject
def get_price_service(service: PriceService = Depends(Provide[Container.price_service])) -> PriceService:
    return service


def require_address(address: str | None = Query(None, description="Wallet address")) -> str:
    """Normalized address query param; 400 when missing or blank."""
    normalized = normalize_address(address)
    if not normalized:
        raise HTTPException(status_code=400, detail="address required")
    return normalized
