from __future__ import annotations

import asyncio
import contextlib

import websockets
from websockets.asyncio.client import ClientConnection

from oracle_relay.config.settings import settings
from oracle_relay.core.observability.metrics import CONSENSUS_CONNECTED
from oracle_relay.utils.errors import DeliveryError
from oracle_relay.utils.logger import setup_logger

logger = setup_logger(__name__)


class ConsensusChannel:
    """
    Persistent websocket to the consensus application's message endpoint.
    Sends are fire-and-forget: a frame either leaves the socket or the
    message is lost.
    """

    def __init__(self, url: str | None = None):
        self.url = url or settings.consensus_ws_url
        self._ws: ClientConnection | None = None
        self._task: asyncio.Task | None = None
        self._stop = asyncio.Event()
        self._connected = asyncio.Event()

    # ---------- Public API ----------

    @property
    def connected(self) -> bool:
        return self._ws is not None

    async def start(self) -> None:
        if self._task and not self._task.done():
            return
        self._stop.clear()
        self._task = asyncio.create_task(self._run(), name="consensus-channel")

    async def stop(self) -> None:
        self._stop.set()
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        await self._close_ws()

    async def wait_connected(self, timeout: float | None = None) -> bool:
        try:
            async with asyncio.timeout(timeout):
                await self._connected.wait()
            return True
        except TimeoutError:
            return False

    async def send(self, payload: bytes) -> None:
        ws = self._ws
        if ws is None:
            raise DeliveryError(f"not connected to {self.url}")
        try:
            await ws.send(payload)
        except Exception as e:
            raise DeliveryError(f"send to {self.url} failed: {e}") from e

    # ----- internals -----

    async def _run(self) -> None:
        backoff = 1.0
        while not self._stop.is_set():
            try:
                await self._connect_and_pump()
                backoff = 1.0
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning("Consensus connection error: %s; retrying in %.1fs", e, backoff)
                await asyncio.sleep(backoff)
                backoff = min(backoff * 2, 10.0)

    async def _connect_and_pump(self) -> None:
        async with websockets.connect(self.url, ping_interval=20, ping_timeout=30) as ws:
            self._ws = ws
            self._connected.set()
            CONSENSUS_CONNECTED.set(1)
            logger.info("Consensus application connected at %s", self.url)
            try:
                async for message in ws:
                    logger.info("received: %s", message)
            finally:
                self._ws = None
                self._connected.clear()
                CONSENSUS_CONNECTED.set(0)
        raise ConnectionError("consensus application closed the connection")

    async def _close_ws(self) -> None:
        if self._ws:
            with contextlib.suppress(Exception):
                await self._ws.close()
        self._ws = None
