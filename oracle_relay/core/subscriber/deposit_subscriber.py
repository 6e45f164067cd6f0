from __future__ import annotations

import asyncio
import contextlib
from typing import Any, Awaitable, Callable, Dict, Iterable, Mapping, Optional

from web3 import AsyncWeb3, Web3

from oracle_relay.config.settings import settings
from oracle_relay.constants import NULL_ADDRESS, STAKED_EVENT_ABI, TRANSFER_EVENT_ABI
from oracle_relay.dal.datamodel.deposit import DepositEvent, DepositSource
from oracle_relay.utils.errors import MalformedEventError
from oracle_relay.utils.logger import setup_logger

logger = setup_logger(__name__)

DepositCallback = Callable[[DepositEvent], Awaitable[Any]]

STAKED = "staked"
MINT = "mint"


def _tx_hash(entry: Mapping[str, Any]) -> str:
    tx_hash = entry["transactionHash"]
    if isinstance(tx_hash, str):
        return tx_hash if tx_hash.startswith("0x") else f"0x{tx_hash}"
    return Web3.to_hex(tx_hash)


def staked_to_deposit(entry: Mapping[str, Any]) -> DepositEvent:
    try:
        args = entry["args"]
        return DepositEvent(
            transaction_hash=_tx_hash(entry),
            address=Web3.to_checksum_address(args["account"]),
            raw_amount=int(args["amount"]),
            source=DepositSource.STAKED,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedEventError(f"bad Staked log: {e}") from e


def is_mint(entry: Mapping[str, Any]) -> bool:
    return str(entry["args"]["from"]).lower() == NULL_ADDRESS


def mint_to_deposit(entry: Mapping[str, Any], amount: int) -> DepositEvent:
    """A mint is an early-allocation grant; the event's own value is ignored."""
    try:
        args = entry["args"]
        return DepositEvent(
            transaction_hash=_tx_hash(entry),
            address=Web3.to_checksum_address(args["to"]),
            raw_amount=amount,
            source=DepositSource.EARLY_ALLOCATION,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedEventError(f"bad Transfer log: {e}") from e


class DepositWatcher:
    """
    Watches the staking contract's Staked events and the token's mint
    transfers by polling eth_getLogs from a per-stream block cursor, at most
    `max_block_range` blocks per request. The cursor advances after each
    range is read, so a failed poll resumes where it left off.
    """

    def __init__(
        self,
        on_deposit: DepositCallback,
        w3: Optional[AsyncWeb3] = None,
        staking_address: Optional[str] = None,
        token_address: Optional[str] = None,
        early_allocation_amount: int = settings.EARLY_ALLOCATION_AMOUNT,
        poll_interval: float = settings.DEPOSIT_POLL_INTERVAL_SECONDS,
        max_block_range: int = settings.DEPOSIT_MAX_BLOCK_RANGE,
    ):
        self._on_deposit = on_deposit
        self._w3 = w3 or AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(settings.CHAIN_RPC_URL))
        self._staking = self._w3.eth.contract(
            address=Web3.to_checksum_address(staking_address or settings.STAKING_CONTRACT_ADDRESS),
            abi=STAKED_EVENT_ABI,
        )
        self._token = self._w3.eth.contract(
            address=Web3.to_checksum_address(token_address or settings.TOKEN_CONTRACT_ADDRESS),
            abi=TRANSFER_EVENT_ABI,
        )
        self._early_allocation_amount = early_allocation_amount
        self._poll_interval = poll_interval
        self._max_block_range = max(1, max_block_range)
        self._cursors: Dict[str, Optional[int]] = {STAKED: None, MINT: None}
        self._task: Optional[asyncio.Task] = None

    # ---------- Public API ----------

    async def start(self) -> None:
        if self._task and not self._task.done():
            return
        self._task = asyncio.create_task(self._run(), name="deposit-watcher")

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    async def poll_once(self) -> int:
        """Read both streams up to the chain head. Returns the number of deposits forwarded."""
        head = await self._w3.eth.block_number
        forwarded = await self._poll_staked(head)
        forwarded += await self._poll_mints(head)
        return forwarded

    # ----- internals -----

    async def _run(self) -> None:
        backoff = 1.0
        while True:
            try:
                await self.poll_once()
                backoff = 1.0
                await asyncio.sleep(self._poll_interval)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning("deposit watcher error: %s; retrying in %.1fs", e, backoff)
                await asyncio.sleep(backoff)
                backoff = min(backoff * 2, 10.0)

    async def _poll_staked(self, head: int) -> int:
        async def fetch(from_block: int, to_block: int):
            return await self._staking.events.Staked.get_logs(from_block=from_block, to_block=to_block)

        return await self._poll_stream(STAKED, head, fetch, staked_to_deposit)

    async def _poll_mints(self, head: int) -> int:
        async def fetch(from_block: int, to_block: int):
            return await self._token.events.Transfer.get_logs(
                from_block=from_block,
                to_block=to_block,
                argument_filters={"from": NULL_ADDRESS},
            )

        def convert(entry: Mapping[str, Any]) -> Optional[DepositEvent]:
            if not is_mint(entry):
                return None
            return mint_to_deposit(entry, self._early_allocation_amount)

        return await self._poll_stream(MINT, head, fetch, convert)

    async def _poll_stream(
        self,
        stream: str,
        head: int,
        fetch: Callable[[int, int], Awaitable[Iterable[Mapping[str, Any]]]],
        convert: Callable[[Mapping[str, Any]], Optional[DepositEvent]],
    ) -> int:
        cursor = self._cursors[stream]
        if cursor is None:
            # only events mined after start-up
            self._cursors[stream] = head + 1
            return 0

        count = 0
        while cursor <= head:
            to_block = min(cursor + self._max_block_range - 1, head)
            entries = await fetch(cursor, to_block)
            cursor = to_block + 1
            self._cursors[stream] = cursor
            for entry in entries:
                try:
                    deposit = convert(entry)
                except (KeyError, MalformedEventError) as e:
                    logger.error("Skipping %s log: %s", stream, e)
                    continue
                if deposit is None:
                    continue
                await self._on_deposit(deposit)
                count += 1
        return count
