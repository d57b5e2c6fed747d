import os

from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Ensure we pick up legacy environment variable aliases."""

        super().model_post_init(__context)

        if not self.evm_private_key:
            fallback = os.getenv("WALLET_PRIVATE_KEY") or os.getenv("PRIVATE_KEY")
            if fallback:
                object.__setattr__(self, "evm_private_key", fallback)

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")

    # Wallet
    evm_private_key: str = Field(
        default="",
        description="Hex-encoded private key the agent signs with",
        validation_alias=AliasChoices("evm_private_key", "EVM_PRIVATE_KEY"),
    )
    evm_chains: Optional[Dict[str, Dict[str, Any]]] = Field(
        default=None,
        description="Full replacement chain table (JSON mapping of chain key to chain metadata)",
    )
    default_chain: Optional[str] = Field(
        default=None,
        description="Chain the wallet session starts on (defaults to the first configured chain)",
    )
    balance_precheck: bool = Field(
        default=True,
        description="Reject transfers and swaps locally when the known balance is below the amount",
    )

    # RPC
    rpc_timeout_seconds: int = Field(default=30, ge=1, description="JSON-RPC request timeout")
    receipt_timeout_seconds: int = Field(
        default=180,
        ge=1,
        description="Max seconds to wait for an intermediate route transaction receipt",
    )
    receipt_poll_seconds: float = Field(default=2.0, gt=0, description="Receipt polling interval")

    # LI.FI aggregator
    lifi_base_url: str = Field(
        default="",
        description="Override the default LI.FI API base URL",
    )
    lifi_api_key: str = Field(default="", description="Optional LI.FI API key")
    lifi_integrator: str = Field(default="agent-wallet", description="Integrator name reported to LI.FI")
    lifi_timeout_seconds: int = Field(default=30, ge=1, description="LI.FI HTTP timeout")
    bridge_status_timeout_seconds: int = Field(
        default=900,
        ge=1,
        description="Max seconds to wait for a cross-chain step to settle before the next step",
    )
    bridge_status_poll_seconds: float = Field(default=10.0, gt=0, description="Bridge status polling interval")

    # Swap defaults
    default_slippage_bps: int = Field(default=50, ge=1, le=500, description="Default swap slippage in basis points")
    route_selector: str = Field(
        default="recommended",
        description="Route selection strategy: recommended, cheapest_gas or fastest",
    )

    @property
    def has_private_key(self) -> bool:
        return bool(self.evm_private_key)

    @property
    def has_lifi_key(self) -> bool:
        return bool(self.lifi_api_key)


# Global settings instance
settings = Settings()
