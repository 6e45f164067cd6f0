from __future__ import annotations

import asyncio
import contextlib
import time
from typing import Any, Awaitable, Callable, Dict, List

import websockets

from oracle_relay.config.settings import settings
from oracle_relay.core.observability.metrics import FEED_CONNECTED
from oracle_relay.utils.logger import setup_logger

logger = setup_logger(__name__)

TickCallback = Callable[[str | bytes], Awaitable[Any]]


def stream_url(base_url: str, symbol: str) -> str:
    return f"{base_url.rstrip('/')}/{symbol.lower()}@aggTrade"


class FeedSubscriber:
    """One aggTrade stream per tracked symbol, all feeding the same callback."""

    def __init__(self, on_tick: TickCallback, symbols: List[str] | None = None, base_url: str | None = None):
        self._on_tick = on_tick
        self.symbols = symbols if symbols is not None else settings.feed_symbols
        self.base_url = base_url or settings.FEED_WS_URL
        self._tasks: Dict[str, asyncio.Task] = {}
        self._stop = asyncio.Event()

    # ---------- Public API ----------

    async def start(self) -> None:
        self._stop.clear()
        for symbol in self.symbols:
            task = self._tasks.get(symbol)
            if task and not task.done():
                continue
            self._tasks[symbol] = asyncio.create_task(self._run(symbol), name=f"feed-{symbol}")

    async def stop(self) -> None:
        self._stop.set()
        for task in self._tasks.values():
            task.cancel()
        for task in self._tasks.values():
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._tasks.clear()

    # ----- internals -----

    async def _run(self, symbol: str) -> None:
        backoff = 1.0
        while not self._stop.is_set():
            try:
                await self._connect_and_pump(symbol)
                backoff = 1.0
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning("Feed %s error: %s; retrying in %.1fs", symbol, e, backoff)
                await asyncio.sleep(backoff)
                backoff = min(backoff * 2, 10.0)
            else:
                logger.info("Feed %s closed by server; reconnecting", symbol)

    async def _connect_and_pump(self, symbol: str) -> None:
        url = stream_url(self.base_url, symbol)
        start_time = time.monotonic()
        async with websockets.connect(url, ping_interval=20, ping_timeout=30, max_queue=1000) as ws:
            FEED_CONNECTED.labels(symbol).set(1)
            logger.info("%s %s connected in %.3f seconds", settings.FEED_SOURCE, symbol.upper(),
                        time.monotonic() - start_time)
            try:
                async for message in ws:
                    await self._on_tick(message)
            finally:
                FEED_CONNECTED.labels(symbol).set(0)
