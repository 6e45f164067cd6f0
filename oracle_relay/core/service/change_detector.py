from oracle_relay.dal.dedup_store import DedupStore
from oracle_relay.dal.datamodel.tick import CanonicalTick


class ChangeDetector:
    """
    Accepts a tick only when both its price and its second differ from the
    last accepted tick of the same symbol. A price move inside an already
    published second is dropped, and so is an unchanged price in a new second.
    """

    def __init__(self, store: DedupStore):
        self._store = store

    def accept(self, tick: CanonicalTick) -> bool:
        price, ts = tick.price_value, tick.timestamp_value
        last = self._store.get(tick.symbol)
        if last is not None and (price == last.price or ts == last.timestamp_seconds):
            return False
        # must happen before any await in the caller
        self._store.put(tick.symbol, price, ts)
        return True
