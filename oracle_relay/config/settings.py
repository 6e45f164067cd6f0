from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Application
    APP_NAME: str = "Oracle Relay"
    APP_VERSION: str = "0.3.0"
    LOG_LEVEL: str = Field(default="INFO", env="LOG_LEVEL")
    LOG_FILE: str = Field(default="logs/oracle_relay.log", env="LOG_FILE")
    METRICS_PORT: Optional[int] = Field(default=None, env="METRICS_PORT")

    # Consensus application
    CONSENSUS_HOST: str = Field(default="127.0.0.1", env="CONSENSUS_HOST")
    CONSENSUS_PORT: int = Field(default=8088, env="CONSENSUS_PORT")
    STARTUP_DELAY_SECONDS: float = Field(default=2.0, env="STARTUP_DELAY_SECONDS")
    CONSENSUS_CONNECT_TIMEOUT_SECONDS: float = Field(default=10.0, env="CONSENSUS_CONNECT_TIMEOUT_SECONDS")
    RPC_URL: Optional[str] = Field(default=None, env="RPC_URL")
    RPC_PORT: int = Field(default=26657, env="RPC_PORT")

    # Broadcasting
    BROADCAST_METHOD: str = Field(default="broadcast_tx_async", env="BROADCAST_METHOD")
    BROADCAST_DELAY_MS: int = Field(default=2500, env="BROADCAST_DELAY_MS")
    NODE_IDENTITY: Optional[str] = Field(default=None, env="NODE_IDENTITY")
    DESIGNATED_BROADCASTER: str = Field(default="192.167.10.6", env="DESIGNATED_BROADCASTER")
    NODE_ROLE: Optional[str] = Field(default=None, env="NODE_ROLE")

    # Market feeds
    FEED_SOURCE: str = Field(default="Binance", env="FEED_SOURCE")
    FEED_WS_URL: str = Field(default="wss://data-stream.binance.vision/ws", env="FEED_WS_URL")
    FEED_SYMBOLS: str = Field(default="btcusdt,ethusdt", env="FEED_SYMBOLS")

    # Deposits
    CHAIN_RPC_URL: Optional[str] = Field(default=None, env="CHAIN_RPC_URL")
    STAKING_CONTRACT_ADDRESS: Optional[str] = Field(default=None, env="STAKING_CONTRACT_ADDRESS")
    TOKEN_CONTRACT_ADDRESS: Optional[str] = Field(default=None, env="TOKEN_CONTRACT_ADDRESS")
    EARLY_ALLOCATION_AMOUNT: int = Field(default=10_000 * 10 ** 18, env="EARLY_ALLOCATION_AMOUNT")
    DEPOSIT_DECIMALS: int = Field(default=9, env="DEPOSIT_DECIMALS")
    DEPOSIT_POLL_INTERVAL_SECONDS: float = Field(default=2.0, env="DEPOSIT_POLL_INTERVAL_SECONDS")
    DEPOSIT_MAX_BLOCK_RANGE: int = Field(default=2000, env="DEPOSIT_MAX_BLOCK_RANGE")

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def consensus_ws_url(self) -> str:
        return f"ws://{self.CONSENSUS_HOST}:{self.CONSENSUS_PORT}"

    @property
    def rpc_url(self) -> str:
        if self.RPC_URL:
            return self.RPC_URL.rstrip("/")
        return f"http://{self.CONSENSUS_HOST}:{self.RPC_PORT}"

    @property
    def node_identity(self) -> str:
        return self.NODE_IDENTITY or self.CONSENSUS_HOST

    @property
    def feed_symbols(self) -> list[str]:
        return [s.strip().lower() for s in self.FEED_SYMBOLS.split(",") if s.strip()]


settings = Settings()
