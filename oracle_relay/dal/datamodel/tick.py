from pydantic import BaseModel, ConfigDict

from oracle_relay.utils.codec import to_uint32, to_uint64


class PriceObservation(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str
    price: float
    event_time_millis: int


class CanonicalTick(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str
    price: float
    timestamp_seconds: int

    @property
    def price_value(self) -> int:
        # fractional part is dropped by the 4-byte wire encoding
        return to_uint32(self.price)

    @property
    def timestamp_value(self) -> int:
        return to_uint64(self.timestamp_seconds)
