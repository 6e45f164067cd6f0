from typing import Any, Dict

from oracle_relay.dal.datamodel.tick import CanonicalTick, PriceObservation
from oracle_relay.utils.errors import MalformedTickError


def parse_observation(raw: Dict[str, Any]) -> PriceObservation:
    try:
        return PriceObservation(symbol=str(raw["s"]), price=float(raw["p"]), event_time_millis=int(raw["E"]))
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedTickError(f"bad tick payload {raw!r}: {e}") from e


def normalize_tick(raw: Dict[str, Any]) -> CanonicalTick:
    """Turn an aggTrade payload ({s, p, E, ...}) into a CanonicalTick with whole-second timestamps."""
    observation = parse_observation(raw)
    return CanonicalTick(
        symbol=observation.symbol,
        price=observation.price,
        timestamp_seconds=observation.event_time_millis // 1000,
    )
