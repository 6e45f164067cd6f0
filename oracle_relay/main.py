import argparse
import asyncio
from typing import List, Optional

from dotenv import load_dotenv
from prometheus_client import start_http_server

from oracle_relay.config.settings import settings
from oracle_relay.core.client.consensus_channel import ConsensusChannel
from oracle_relay.core.client.rpc import RpcClient
from oracle_relay.core.service.broadcast_gate import BroadcastGate, resolve_role
from oracle_relay.core.service.change_detector import ChangeDetector
from oracle_relay.core.service.message_builder import MessageBuilder
from oracle_relay.core.service.relay_service import RelayService
from oracle_relay.core.subscriber.deposit_subscriber import DepositWatcher
from oracle_relay.core.subscriber.feed_subscriber import FeedSubscriber
from oracle_relay.dal.dedup_store import DedupStore
from oracle_relay.utils.logger import setup_logger

load_dotenv()
logger = setup_logger(__name__)


def normalize_rpc_url(host: str, default_port: int) -> str:
    url = host if "://" in host else f"http://{host}"
    netloc = url.split("://", 1)[1].split("/", 1)[0]
    if ":" not in netloc:
        url = url.replace(netloc, f"{netloc}:{default_port}", 1)
    return url.rstrip("/")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="oracle-relay", description=settings.APP_NAME)
    parser.add_argument("consensus_host", nargs="?", help="host of the consensus application (port %d)" % settings.CONSENSUS_PORT)
    parser.add_argument("rpc_host", nargs="?", help="RPC host for broadcasts; derived from consensus_host when omitted")
    return parser.parse_args(argv)


def apply_args(args: argparse.Namespace) -> None:
    if args.consensus_host:
        settings.CONSENSUS_HOST = args.consensus_host
    if args.rpc_host:
        settings.RPC_URL = normalize_rpc_url(args.rpc_host, settings.RPC_PORT)


async def start_components(channel: ConsensusChannel, feeds: FeedSubscriber, watcher: Optional[DepositWatcher] = None,
                           connect_timeout: float = settings.CONSENSUS_CONNECT_TIMEOUT_SECONDS) -> None:
    """Open the consensus socket and wait for it before starting ingestion."""
    await channel.start()
    if not await channel.wait_connected(timeout=connect_timeout):
        logger.warning("Consensus application not reachable at %s after %.1fs; starting feeds anyway",
                       channel.url, connect_timeout)
    await feeds.start()
    if watcher:
        await watcher.start()


async def run() -> None:
    if settings.METRICS_PORT:
        start_http_server(settings.METRICS_PORT)

    # give the consensus node and its application time to come up and connect
    await asyncio.sleep(settings.STARTUP_DELAY_SECONDS)

    builder = MessageBuilder()
    channel = ConsensusChannel()
    role = resolve_role(settings.node_identity, settings.DESIGNATED_BROADCASTER, settings.NODE_ROLE)
    gate = BroadcastGate(RpcClient(), builder, role)
    relay = RelayService(ChangeDetector(DedupStore()), builder, channel, gate)
    feeds = FeedSubscriber(relay.on_raw_tick)

    watcher = None
    if settings.CHAIN_RPC_URL and settings.STAKING_CONTRACT_ADDRESS and settings.TOKEN_CONTRACT_ADDRESS:
        watcher = DepositWatcher(relay.on_deposit)
    else:
        logger.info("Deposit watcher disabled; chain RPC or contract addresses not configured")

    logger.info("Starting %s %s as %s (consensus %s, rpc %s)", settings.APP_NAME, settings.APP_VERSION, role,
                channel.url, settings.rpc_url)
    await start_components(channel, feeds, watcher)

    try:
        await asyncio.Event().wait()
    finally:
        logger.info("Starting shutdown procedures...")
        await feeds.stop()
        if watcher:
            await watcher.stop()
        await gate.aclose()
        await channel.stop()


def main(argv: Optional[List[str]] = None) -> None:
    apply_args(parse_args(argv))
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
