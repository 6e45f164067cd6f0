from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class LastAccepted:
    price: int
    timestamp_seconds: int


class DedupStore:
    """
    Last accepted (price, timestamp) per symbol. In-memory only and owned by
    the event loop thread, so no locking.
    """

    def __init__(self):
        self._state: Dict[str, LastAccepted] = {}

    def get(self, symbol: str) -> Optional[LastAccepted]:
        return self._state.get(symbol)

    def put(self, symbol: str, price: int, timestamp_seconds: int) -> None:
        self._state[symbol] = LastAccepted(price=price, timestamp_seconds=timestamp_seconds)

    def snapshot(self) -> Dict[str, LastAccepted]:
        return dict(self._state)

    def __len__(self) -> int:
        return len(self._state)
