"""Error taxonomy shared by the RPC, scan and API layers."""

from typing import Any


class WalletCoreError(Exception):
    """Base class for all walletcore errors."""


class ExternalServiceError(WalletCoreError):
    """An upstream HTTP service (price feed, chain node) misbehaved."""


class RpcError(ExternalServiceError):
    """JSON-RPC failure: non-2xx status, empty body or an ``error`` object."""

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        data: Any = None,
        http_status: int | None = None,
        method: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.data = data
        self.http_status = http_status
        self.method = method


class RpcTransportError(RpcError):
    """Timeout or connection failure before a response was received."""


class ResolutionError(WalletCoreError):
    """A previous output referenced by a transaction input could not be fetched."""

    def __init__(self, txid: str, vout: int | None = None) -> None:
        where = txid if vout is None else f"{txid}:{vout}"
        super().__init__(f"Cannot resolve previous output {where}")
        self.txid = txid
        self.vout = vout


class PersistenceError(WalletCoreError):
    """Database write failed while persisting scan results."""
