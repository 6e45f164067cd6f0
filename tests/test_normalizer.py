import pytest

from oracle_relay.core.service.normalizer import normalize_tick, parse_observation
from oracle_relay.utils.errors import MalformedTickError


def test_normalize_floors_timestamp_to_seconds():
    tick = normalize_tick({"e": "aggTrade", "s": "BTCUSDT", "p": "27000.5", "q": "0.1", "E": 1700000000123})
    assert tick.symbol == "BTCUSDT"
    assert tick.price == 27000.5
    assert tick.timestamp_seconds == 1700000000
    assert tick.price_value == 27000


def test_parse_observation_keeps_millis():
    observation = parse_observation({"s": "ETHUSDT", "p": 1850, "E": 999})
    assert observation.event_time_millis == 999
    assert normalize_tick({"s": "ETHUSDT", "p": 1850, "E": 999}).timestamp_seconds == 0


@pytest.mark.parametrize("raw", [
    {"p": "1", "E": 1000},
    {"s": "BTCUSDT", "E": 1000},
    {"s": "BTCUSDT", "p": "abc", "E": 1000},
    {"s": "BTCUSDT", "p": "1", "E": None},
])
def test_malformed_ticks_raise(raw):
    with pytest.raises(MalformedTickError):
        normalize_tick(raw)
