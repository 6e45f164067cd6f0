from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from oracle_relay.constants import MESSAGE_TYPE_DATA, MESSAGE_TYPE_DEPOSIT, TRANSACTION_VALIDATE_DATA


class PriceUpdateMessage(BaseModel):
    """Data message; field names follow the consensus application's JSON schema."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    message_type: Literal[0] = Field(default=MESSAGE_TYPE_DATA, alias="MessageType")
    feed_key: str = Field(alias="DataFeed")
    value: str = Field(alias="DataValue")
    timestamp_seconds: int = Field(alias="DataTimestamp")


class DepositInfo(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    address: str = Field(alias="Address")
    amount: int = Field(alias="Amount")


class DepositMessage(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    message_type: Literal[1] = Field(default=MESSAGE_TYPE_DEPOSIT, alias="MessageType")
    transaction_hash: str = Field(alias="TransactionHash")
    deposit_info: DepositInfo = Field(alias="DepositInfo")


class ValidateDataTransaction(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    transaction_type: Literal[0] = Field(default=TRANSACTION_VALIDATE_DATA, alias="TransactionType")
    feed_key: str = Field(alias="DataFeed")
    value: str = Field(alias="DataValue")
    timestamp_seconds: int = Field(alias="DataTimestamp")


RelayMessage = Union[PriceUpdateMessage, DepositMessage]
