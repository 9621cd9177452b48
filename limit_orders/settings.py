from typing import Dict, Optional

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .enums import DEFAULT_API_URL


class Settings(BaseSettings):
    """
    Centralized SDK configuration.

    Reads values from environment variables and optional .env files.
    Every client also accepts explicit arguments, these are only defaults.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )

    # Core configuration
    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Off-chain order book API
    api_url: AnyHttpUrl = Field(default=DEFAULT_API_URL, alias="LIMIT_ORDERS_API_URL")
    request_timeout: float = Field(default=10.0, alias="REQUEST_TIMEOUT")

    # Chain access
    chain_id: int = Field(default=1, alias="CHAIN_ID")
    rpc_url: Optional[str] = Field(default=None, alias="PROVIDER_URL")

    # Signing / sending
    private_key: Optional[str] = Field(default=None, alias="PK")
    sender_address: Optional[str] = Field(default=None, alias="SENDER_ADDRESS")

    # Registry overrides, JSON encoded in the environment
    verifying_contracts: Dict[int, str] = Field(default_factory=dict, alias="VERIFYING_CONTRACTS")
    contract_deployed_blocks: Dict[int, int] = Field(
        default_factory=dict, alias="CONTRACT_DEPLOYED_BLOCKS"
    )

    @property
    def api_base(self) -> str:
        return str(self.api_url).rstrip("/")


__all__ = ["Settings"]
