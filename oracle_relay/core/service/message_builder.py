from oracle_relay.config.settings import settings
from oracle_relay.dal.datamodel.deposit import DepositEvent
from oracle_relay.dal.datamodel.relay_message import (DepositInfo, DepositMessage, PriceUpdateMessage, RelayMessage,
                                                      ValidateDataTransaction)
from oracle_relay.dal.datamodel.tick import CanonicalTick
from oracle_relay.utils.codec import to_hex


def feed_key(source: str, symbol: str) -> str:
    return f"{source}|{symbol}|price"


def scale_amount(raw_amount: int, decimals: int) -> int:
    """
    Divide a raw on-chain amount by 10**decimals and narrow it to a double,
    the precision the consensus application has always received. Results
    above 2**53 lose their low bits (relative error <= 2**-53).
    """
    return int(float(raw_amount // 10 ** decimals))


class MessageBuilder:

    def __init__(self, source: str = settings.FEED_SOURCE, deposit_decimals: int = settings.DEPOSIT_DECIMALS):
        self.source = source
        self.deposit_decimals = deposit_decimals

    # ---------- messages ----------

    def build_price_update(self, tick: CanonicalTick) -> PriceUpdateMessage:
        return PriceUpdateMessage(
            feed_key=feed_key(self.source, tick.symbol),
            value=str(tick.price_value),
            timestamp_seconds=tick.timestamp_value,
        )

    def build_deposit(self, event: DepositEvent) -> DepositMessage:
        return DepositMessage(
            transaction_hash=event.transaction_hash,
            deposit_info=DepositInfo(
                address=event.address,
                amount=scale_amount(event.raw_amount, self.deposit_decimals),
            ),
        )

    @staticmethod
    def serialize(message: RelayMessage | ValidateDataTransaction) -> bytes:
        return message.model_dump_json(by_alias=True).encode("utf-8")

    # ---------- transactions ----------

    @staticmethod
    def build_transaction(message: PriceUpdateMessage) -> ValidateDataTransaction:
        return ValidateDataTransaction(
            feed_key=message.feed_key,
            value=message.value,
            timestamp_seconds=message.timestamp_seconds,
        )

    def transaction_hex(self, message: PriceUpdateMessage) -> str:
        return to_hex(self.serialize(self.build_transaction(message)))
