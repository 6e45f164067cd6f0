from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class DepositSource(StrEnum):
    STAKED = "staked"
    EARLY_ALLOCATION = "early_allocation"


class DepositEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    transaction_hash: str
    address: str
    raw_amount: int
    source: DepositSource = DepositSource.STAKED
