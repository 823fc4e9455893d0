"""Scash node JSON-RPC client with pooled connections and exponential backoff."""

import itertools
import logging
from dataclasses import dataclass
from typing import Any

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from walletcore.domain.enums import RpcCallStatus
from walletcore.exceptions import RpcError, RpcTransportError

logger = logging.getLogger(__name__)

JSONRPC_METHOD_NOT_FOUND = -32601

# (timeout seconds, retries) per call site
LIGHT_CALL = (15.0, 2)
BLOCK_CALL = (180.0, 2)
PREV_TX_CALL = (120.0, 2)
BLOCK_TX_CALL = (120.0, 1)


def is_method_not_allowed(err: BaseException) -> bool:
    """True when the node rejected the method or its parameters rather than failing."""
    if isinstance(err, RpcError) and err.code == JSONRPC_METHOD_NOT_FOUND:
        return True
    message = str(err).lower()
    return "method not allowed" in message or "method not found" in message or "missing" in message


@dataclass
class RpcOutcome:
    status: RpcCallStatus
    result: Any = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.status == RpcCallStatus.OK


class ChainRpcClient:
    """Authenticated JSON-RPC-over-HTTP transport to the chain node.

    One instance owns one ``httpx.AsyncClient`` whose keep-alive pool is shared by
    every call; create it once per process and ``close()`` it at shutdown.
    """

    def __init__(
        self,
        rpc_url: str,
        username: str,
        password: str,
        timeout: float = 30.0,
        retry_delay: float = 0.5,
        max_connections: int = 50,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._rpc_url = rpc_url
        self._timeout = timeout
        self._retry_delay = retry_delay
        self._ids = itertools.count(1)
        self._client = httpx.AsyncClient(
            auth=httpx.BasicAuth(username, password),
            timeout=timeout,
            limits=httpx.Limits(max_connections=max_connections, max_keepalive_connections=max_connections),
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            transport=transport,
        )

    async def call(
        self,
        method: str,
        params: list | None = None,
        *,
        timeout: float | None = None,
        retries: int = 0,
        retry_delay: float | None = None,
    ) -> Any:
        """Execute a JSON-RPC call and return its ``result``.

        Retries ``retries`` additional times, sleeping ``retry_delay * 2**attempt``
        between attempts, then re-raises the last RpcError.
        """
        delay = self._retry_delay if retry_delay is None else retry_delay
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(RpcError),
            stop=stop_after_attempt(retries + 1),
            wait=wait_exponential(multiplier=delay),
            reraise=True,
        ):
            with attempt:
                return await self._post(method, params or [], timeout or self._timeout)

    async def try_call(
        self,
        method: str,
        params: list | None = None,
        *,
        timeout: float | None = None,
        retries: int = 0,
        retry_delay: float | None = None,
    ) -> RpcOutcome:
        """Like call(), but report failure as a typed outcome instead of raising."""
        try:
            result = await self.call(method, params, timeout=timeout, retries=retries, retry_delay=retry_delay)
        except RpcError as e:
            status = RpcCallStatus.UNSUPPORTED if is_method_not_allowed(e) else RpcCallStatus.ERROR
            return RpcOutcome(status=status, error=e)
        return RpcOutcome(status=RpcCallStatus.OK, result=result)

    async def _post(self, method: str, params: list, timeout: float) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            resp = await self._client.post(self._rpc_url, json=payload, timeout=timeout)
        except httpx.TransportError as e:
            logger.warning("RPC %s transport failure: %s", method, e)
            raise RpcTransportError(f"RPC transport error ({method}): {e}", method=method) from e

        body = _decode_body(resp)

        # bitcoind returns JSON-RPC error objects with 4xx/5xx statuses
        error = body.get("error") if isinstance(body, dict) else None
        if error:
            if isinstance(error, dict):
                raise RpcError(
                    error.get("message") or "RPC error",
                    code=error.get("code"),
                    data=error.get("data"),
                    http_status=resp.status_code,
                    method=method,
                )
            raise RpcError(str(error), http_status=resp.status_code, method=method)

        if not resp.is_success:
            raise RpcError(f"HTTP {resp.status_code} from RPC", http_status=resp.status_code, method=method, data=body)
        if not body:
            raise RpcError("Empty RPC response", http_status=resp.status_code, method=method)
        if not isinstance(body, dict):
            raise RpcError("Malformed RPC response", http_status=resp.status_code, method=method, data=body)

        return body.get("result")

    async def get_block_count(self) -> int:
        timeout, retries = LIGHT_CALL
        return int(await self.call("getblockcount", timeout=timeout, retries=retries))

    async def get_block_hash(self, height: int) -> str:
        timeout, retries = LIGHT_CALL
        return await self.call("getblockhash", [height], timeout=timeout, retries=retries)

    async def get_block(self, block_hash: str, verbosity: int = 2) -> dict:
        timeout, retries = BLOCK_CALL
        return await self.call("getblock", [block_hash, verbosity], timeout=timeout, retries=retries)

    async def get_raw_transaction(self, txid: str, retries: int = PREV_TX_CALL[1]) -> dict:
        return await self.call("getrawtransaction", [txid, True], timeout=PREV_TX_CALL[0], retries=retries)

    async def scan_tx_out_set(self, descriptor: str) -> dict:
        return await self.call("scantxoutset", ["start", [descriptor]])

    async def send_raw_transaction(self, tx_hex: str) -> str:
        return await self.call("sendrawtransaction", [tx_hex])

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ChainRpcClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()


def _decode_body(resp: httpx.Response) -> Any:
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return resp.text
