from pydantic_settings import BaseSettings

# Scash platform fee collector
DEFAULT_PLATFORM_FEE_ADDRESSES = ["scash1qcxe8x3gr4rex4dmq05ft0hpjvsrdtxj6fl4mhd"]


class Settings(BaseSettings):
    db_host: str = "localhost"
    db_port: int = 54377
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_name: str = "walletcore"
    redis_url: str = "redis://localhost:6379/0"

    rpc_url: str = "https://explorer.scash.network/api/rpc"
    rpc_user: str = "scash"
    rpc_password: str = "scash"
    rpc_timeout: float = 30.0  # seconds
    rpc_retry_delay: float = 0.5  # seconds, doubled per attempt
    rpc_max_connections: int = 50

    platform_fee_addresses: list[str] = DEFAULT_PLATFORM_FEE_ADDRESSES
    split_platform_fee: bool = True

    scan_initial_backfill: int = 1000  # blocks scanned on first use of a wallet
    scan_max_catchup: int = 5000  # max blocks behind tip before jumping forward
    scan_commit_every: int = 10
    prev_tx_cache_size: int = 2000

    balance_cache_ttl: float = 5.0
    utxo_cache_ttl: float = 5.0
    tx_cache_ttl: float = 5.0
    tip_cache_ttl: float = 2.0

    coingecko_coin_id: str = "satoshi-cash-network"
    coingecko_api_key: str = ""
    price_cache_ttl: float = 60.0
    history_cache_ttl: float = 300.0

    debug: bool = False

    @property
    def database_url(self) -> str:
        return f"postgresql+asyncpg://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    class Config:
        env_file = ".env"


settings = Settings()
