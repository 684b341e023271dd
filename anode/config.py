from pathlib import Path
from typing import Any, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.userop.constants import ENTRYPOINT_ADDRESSES, SEPOLIA_CHAIN_ID
from .core.userop.models import EntryPointVersion


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")

    # Chain Settings
    chain_id: int = Field(default=SEPOLIA_CHAIN_ID, description="Target chain id (domain separator)")
    entrypoint_version: str = Field(
        default=EntryPointVersion.V06.value,
        description="Default EntryPoint version (0.6 or 0.7)",
    )
    entrypoint_v06_address: str = Field(
        default=ENTRYPOINT_ADDRESSES[EntryPointVersion.V06],
        description="EntryPoint v0.6 contract address",
    )
    entrypoint_v07_address: str = Field(
        default=ENTRYPOINT_ADDRESSES[EntryPointVersion.V07],
        description="EntryPoint v0.7 contract address",
    )

    # Paymaster Settings
    paymaster_address: str = Field(
        default="",
        description="Verifying paymaster contract address embedded in paymasterAndData",
        validation_alias=AliasChoices("paymaster_address", "paymaster_contract_address"),
    )
    paymaster_private_key: str = Field(
        default="",
        description="Paymaster signer key (hex); sponsorship is disabled when empty",
        repr=False,
    )
    paymaster_validity_seconds: int = Field(
        default=0,
        ge=0,
        description="Sponsorship lifetime in seconds (0 = validUntil 0, no expiry)",
    )
    paymaster_max_call_gas_limit: Optional[int] = Field(
        default=10_000_000,
        ge=0,
        description="Largest callGasLimit the paymaster will sponsor (unset = no limit)",
    )
    paymaster_max_fee_per_gas: Optional[int] = Field(
        default=None,
        ge=0,
        description="Largest maxFeePerGas in wei the paymaster will sponsor",
    )
    paymaster_max_cost_per_operation: Optional[int] = Field(
        default=None,
        ge=0,
        description="Largest worst-case gas cost in wei for one sponsored operation",
    )

    def has_paymaster_key(self) -> bool:
        """Check if a paymaster signer is configured"""
        return bool(self.paymaster_private_key and self.paymaster_address)

    def resolved_version(self, version: Optional[Any] = None) -> EntryPointVersion:
        """Resolve an explicit version tag, falling back to the configured default"""
        return EntryPointVersion.parse(version if version is not None else self.entrypoint_version)

    def resolve_entry_point(self, version: Optional[Any] = None) -> str:
        """EntryPoint address configured for a version"""
        if self.resolved_version(version) is EntryPointVersion.V07:
            return self.entrypoint_v07_address
        return self.entrypoint_v06_address


settings = Settings()
