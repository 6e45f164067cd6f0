import json

from oracle_relay.core.service.message_builder import MessageBuilder, feed_key, scale_amount
from oracle_relay.dal.datamodel.deposit import DepositEvent
from oracle_relay.dal.datamodel.tick import CanonicalTick


def test_feed_key():
    assert feed_key("Binance", "BTCUSDT") == "Binance|BTCUSDT|price"


def test_price_update_wire_format():
    builder = MessageBuilder(source="Binance")
    message = builder.build_price_update(CanonicalTick(symbol="BTCUSDT", price=27000.5, timestamp_seconds=10))
    assert builder.serialize(message) == (
        b'{"MessageType":0,"DataFeed":"Binance|BTCUSDT|price","DataValue":"27000","DataTimestamp":10}'
    )


def test_deposit_wire_format_scales_amount():
    builder = MessageBuilder(deposit_decimals=9)
    event = DepositEvent(transaction_hash="0xab", address="0x" + "11" * 20, raw_amount=12_345_678_901)
    payload = json.loads(builder.serialize(builder.build_deposit(event)))
    assert payload == {
        "MessageType": 1,
        "TransactionHash": "0xab",
        "DepositInfo": {"Address": "0x" + "11" * 20, "Amount": 12},
    }


def test_scale_amount_narrowing_loses_low_bits_above_2_53():
    assert scale_amount(5 * 10 ** 9, 9) == 5
    assert scale_amount(2 ** 53 * 10 ** 9, 9) == 2 ** 53
    # 2**53 + 1 is not representable as a double
    assert scale_amount((2 ** 53 + 1) * 10 ** 9, 9) == 2 ** 53


def test_transaction_hex_is_utf8_json_with_transaction_type():
    builder = MessageBuilder(source="Binance")
    message = builder.build_price_update(CanonicalTick(symbol="ETHUSDT", price=1850.2, timestamp_seconds=11))
    tx_hex = builder.transaction_hex(message)
    assert tx_hex == tx_hex.lower()
    assert bytes.fromhex(tx_hex).decode("utf-8") == (
        '{"TransactionType":0,"DataFeed":"Binance|ETHUSDT|price","DataValue":"1850","DataTimestamp":11}'
    )
