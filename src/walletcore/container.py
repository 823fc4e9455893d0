from dependency_injector import containers, providers

from walletcore.config import Settings
from walletcore.db.session import build_engine, build_session_factory
from walletcore.infra.cache.ttl_cache import QueryCaches, TTLCache
from walletcore.infra.http.rate_limited_client import RateLimitedClient
from walletcore.infra.price.coingecko import CoinGeckoProvider
from walletcore.infra.price.service import PriceService
from walletcore.infra.rpc.block_fetcher import BlockFetcher
from walletcore.infra.rpc.client import ChainRpcClient
from walletcore.infra.rpc.utxo_scanner import UtxoSnapshotScanner
from walletcore.scanner.locks import WalletScanLocks
from walletcore.scanner.service import ScanService


class Container(containers.DeclarativeContainer):
    wiring_config = containers.WiringConfiguration(modules=["walletcore.api.deps"])

    settings = providers.Singleton(Settings)

    engine = providers.Singleton(
        build_engine,
        database_url=settings.provided.database_url,
        echo=settings.provided.debug,
    )

    session_factory = providers.Singleton(
        build_session_factory,
        engine=engine,
    )

    rpc_client = providers.Singleton(
        ChainRpcClient,
        rpc_url=settings.provided.rpc_url,
        username=settings.provided.rpc_user,
        password=settings.provided.rpc_password,
        timeout=settings.provided.rpc_timeout,
        retry_delay=settings.provided.rpc_retry_delay,
        max_connections=settings.provided.rpc_max_connections,
    )

    block_fetcher = providers.Singleton(BlockFetcher, rpc=rpc_client)

    scan_locks = providers.Singleton(WalletScanLocks)

    utxo_scanner = providers.Singleton(UtxoSnapshotScanner, rpc=rpc_client)

    scan_service = providers.Factory(
        ScanService,
        rpc=rpc_client,
        block_fetcher=block_fetcher,
        session_factory=session_factory,
        locks=scan_locks,
        platform_fee_addresses=settings.provided.platform_fee_addresses,
        split_platform_fee=settings.provided.split_platform_fee,
        initial_backfill=settings.provided.scan_initial_backfill,
        max_catchup=settings.provided.scan_max_catchup,
        commit_every=settings.provided.scan_commit_every,
        prev_tx_cache_size=settings.provided.prev_tx_cache_size,
    )

    price_http_client = providers.Singleton(RateLimitedClient, rate_per_second=5.0, timeout=10.0)

    coingecko = providers.Singleton(
        CoinGeckoProvider,
        http_client=price_http_client,
        coin_id=settings.provided.coingecko_coin_id,
        api_key=settings.provided.coingecko_api_key,
    )

    price_service = providers.Singleton(
        PriceService,
        provider=coingecko,
        price_ttl=settings.provided.price_cache_ttl,
        history_ttl=settings.provided.history_cache_ttl,
    )

    query_caches = providers.Singleton(
        QueryCaches,
        balance=providers.Singleton(TTLCache, ttl=settings.provided.balance_cache_ttl, max_size=5000),
        utxo=providers.Singleton(TTLCache, ttl=settings.provided.utxo_cache_ttl, max_size=2000),
        tx=providers.Singleton(TTLCache, ttl=settings.provided.tx_cache_ttl, max_size=2000),
        tip=providers.Singleton(TTLCache, ttl=settings.provided.tip_cache_ttl, max_size=1),
    )
