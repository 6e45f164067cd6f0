from typing import Any, Optional

import httpx

from oracle_relay.config.settings import settings
from oracle_relay.utils.errors import BroadcastError

BROADCAST_METHODS = ("broadcast_tx_async", "broadcast_tx_sync")


class RpcClient:

    def __init__(self, rpc_url: Optional[str] = None, method: Optional[str] = None, timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.rpc_url = (rpc_url or settings.rpc_url).rstrip("/")
        self.method = method or settings.BROADCAST_METHOD
        if self.method not in BROADCAST_METHODS:
            raise ValueError(f"Unsupported broadcast method: {self.method}")
        self.broadcast_endpoint = f"{self.rpc_url}/{self.method}"
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    # ---------- Public API ----------

    async def broadcast_tx(self, tx_hex: str) -> Any:
        # the RPC expects the literal 0x prefix in the query value, so build the URL by hand
        url = f"{self.broadcast_endpoint}?tx=0x{tx_hex}"
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise BroadcastError(
                f"bad status {e.response.status_code} from {self.method}",
                status_code=e.response.status_code,
                body=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            raise BroadcastError(f"{self.method} request failed: {e}") from e
        try:
            return response.json()
        except ValueError:
            return response.text

    # ---------- Lifecycle ----------

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
