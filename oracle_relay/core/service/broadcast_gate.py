from __future__ import annotations

import asyncio
import contextlib
from enum import StrEnum
from typing import Optional, Set

from oracle_relay.config.settings import settings
from oracle_relay.core.client.rpc import RpcClient
from oracle_relay.core.observability.metrics import BROADCASTS
from oracle_relay.core.service.message_builder import MessageBuilder
from oracle_relay.dal.datamodel.relay_message import PriceUpdateMessage
from oracle_relay.utils.errors import BroadcastError
from oracle_relay.utils.logger import setup_logger

logger = setup_logger(__name__)


class NodeRole(StrEnum):
    BROADCASTER = "broadcaster"
    OBSERVER = "observer"


def resolve_role(node_identity: str, designated: str, override: Optional[str] = None) -> NodeRole:
    """An explicit role wins; otherwise only the designated node broadcasts."""
    if override:
        return NodeRole(override.lower())
    return NodeRole.BROADCASTER if node_identity == designated else NodeRole.OBSERVER


class BroadcastGate:
    """
    Re-submits locally delivered price updates as network transactions when
    this instance holds the broadcaster role. Each submission runs as its own
    task after a fixed delay so ingestion never waits on it. Pending
    submissions are not cancelled by newer updates; the consensus layer
    rejects stale or duplicate transactions on its own.
    """

    def __init__(
        self,
        rpc: RpcClient,
        builder: MessageBuilder,
        role: NodeRole,
        delay_ms: int = settings.BROADCAST_DELAY_MS,
    ):
        self._rpc = rpc
        self._builder = builder
        self.role = role
        self._delay = delay_ms / 1000
        self._pending: Set[asyncio.Task] = set()

    @property
    def is_broadcaster(self) -> bool:
        return self.role == NodeRole.BROADCASTER

    @property
    def pending(self) -> int:
        return len(self._pending)

    def schedule(self, message: PriceUpdateMessage) -> Optional[asyncio.Task]:
        if not self.is_broadcaster:
            return None
        task = asyncio.create_task(self._submit_later(message), name=f"broadcast-{message.feed_key}")
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def wait_idle(self) -> None:
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def aclose(self) -> None:
        for task in list(self._pending):
            task.cancel()
        for task in list(self._pending):
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self._rpc.aclose()

    # ----- internals -----

    async def _submit_later(self, message: PriceUpdateMessage) -> None:
        await asyncio.sleep(self._delay)
        tx_hex = self._builder.transaction_hex(message)
        logger.info("trying transaction %s (%s at %d)", message.feed_key, message.value, message.timestamp_seconds)
        try:
            result = await self._rpc.broadcast_tx(tx_hex)
        except BroadcastError as e:
            BROADCASTS.labels("error").inc()
            logger.error("Broadcast failed: %s %s", e, e.body or "")
            return
        except Exception as e:
            BROADCASTS.labels("error").inc()
            logger.error("Unexpected broadcast error: %s", e)
            return
        BROADCASTS.labels("ok").inc()
        logger.debug("Broadcast result: %s", result)
