from __future__ import annotations

import json
from typing import Any, Dict, Protocol

from oracle_relay.core.observability.metrics import DELIVERIES, TICKS_RECEIVED, TICK_DECISIONS, DEPOSITS
from oracle_relay.core.service.broadcast_gate import BroadcastGate
from oracle_relay.core.service.change_detector import ChangeDetector
from oracle_relay.core.service.message_builder import MessageBuilder
from oracle_relay.core.service.normalizer import normalize_tick
from oracle_relay.dal.datamodel.deposit import DepositEvent
from oracle_relay.dal.datamodel.relay_message import RelayMessage
from oracle_relay.dal.datamodel.tick import CanonicalTick
from oracle_relay.utils.errors import DeliveryError
from oracle_relay.utils.logger import setup_logger

logger = setup_logger(__name__)


class MessageSink(Protocol):
    async def send(self, payload: bytes) -> None:
        ...


class RelayService:
    """
    Feed tick -> change detector -> message -> local delivery -> (maybe) broadcast.
    Deposits skip the change detector and are never broadcast.
    """

    def __init__(self, detector: ChangeDetector, builder: MessageBuilder, channel: MessageSink, gate: BroadcastGate):
        self._detector = detector
        self._builder = builder
        self._channel = channel
        self._gate = gate

    async def on_raw_tick(self, raw: str | bytes | Dict[str, Any]) -> bool:
        try:
            payload = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
            tick = normalize_tick(payload)
        except Exception as e:
            logger.error("Dropping malformed tick: %s", e)
            return False
        TICKS_RECEIVED.labels(tick.symbol).inc()
        return await self.on_tick(tick)

    async def on_tick(self, tick: CanonicalTick) -> bool:
        """Returns True when the tick was accepted and delivered."""
        try:
            if not self._detector.accept(tick):
                TICK_DECISIONS.labels(tick.symbol, "suppressed").inc()
                return False
            TICK_DECISIONS.labels(tick.symbol, "accepted").inc()
            logger.info("%s is %s at %d", tick.symbol, tick.price, tick.timestamp_seconds)

            message = self._builder.build_price_update(tick)
            if not await self._deliver(message, kind="price"):
                return False
            self._gate.schedule(message)
            return True
        except Exception as e:
            logger.error("Tick handler failed for %s: %s", tick.symbol, e)
            return False

    async def on_deposit(self, event: DepositEvent) -> bool:
        try:
            DEPOSITS.labels(event.source.value).inc()
            message = self._builder.build_deposit(event)
            logger.info("Deposit %s: %d from %s", event.transaction_hash, message.deposit_info.amount, event.address)
            return await self._deliver(message, kind="deposit")
        except Exception as e:
            logger.error("Deposit handler failed for %s: %s", event.transaction_hash, e)
            return False

    # ----- internals -----

    async def _deliver(self, message: RelayMessage, *, kind: str) -> bool:
        try:
            await self._channel.send(self._builder.serialize(message))
        except DeliveryError as e:
            DELIVERIES.labels(kind, "error").inc()
            logger.error("xnode communication error: %s", e)
            return False
        DELIVERIES.labels(kind, "ok").inc()
        return True
