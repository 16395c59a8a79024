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

        if not self.wallet_encryption_key:
            fallback = os.getenv("ENCRYPTION_KEY")
            if fallback:
                object.__setattr__(self, "wallet_encryption_key", fallback)

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")

    # Network Settings
    default_network: str = Field(default="MONAD", description="Network key used when none is given")
    monad_rpc_url: str = Field(default="", description="Override the Monad testnet RPC endpoint")
    megaeth_rpc_url: str = Field(default="", description="Override the MegaETH testnet RPC endpoint")
    request_timeout_seconds: int = Field(default=30, description="Per-request RPC timeout")
    rpc_max_retries: int = Field(default=3, ge=1, description="Attempts for read-only RPC calls")

    # Token Indexer (optional)
    blockvision_api_key: str = Field(default="", description="BlockVision API key for token discovery")
    blockvision_base_url: str = Field(
        default="https://api.blockvision.org/v2",
        description="BlockVision API base URL",
    )

    # Wallet Custody
    wallet_encryption_key: str = Field(
        default="",
        description="Secret the wallet encryption key is derived from",
        validation_alias=AliasChoices("wallet_encryption_key", "WALLET_ENCRYPTION_KEY"),
    )

    # Swap Defaults
    default_slippage_bps: int = Field(default=100, ge=10, le=5000, description="Default slippage (1%)")
    deadline_minutes: int = Field(default=20, ge=1, description="Router call expiry window")
    gas_limit_multiplier: float = Field(default=1.2, ge=1.0, description="Safety margin over estimated gas")
    price_impact_warning_pct: float = Field(default=5.0, description="Price impact above which a warning is raised")

    # Confirmation
    confirmation_timeout_seconds: int = Field(default=120, ge=1, description="Max wait for one confirmation")
    receipt_poll_interval_seconds: float = Field(default=2.0, gt=0, description="Receipt polling interval")

    # Token Scanner
    scan_block_window: int = Field(default=2000, ge=1, description="Blocks scanned for Transfer logs")
    scan_min_token_count: int = Field(default=5, ge=0, description="Below this, the log heuristic runs")
    probe_timeout_seconds: float = Field(default=10.0, gt=0, description="Timeout for a single token probe")

    @property
    def has_encryption_key(self) -> bool:
        return bool(self.wallet_encryption_key)

    def rpc_overrides(self) -> Dict[str, str]:
        overrides = {
            "MONAD": self.monad_rpc_url,
            "MEGAETH": self.megaeth_rpc_url,
        }
        return {key: url for key, url in overrides.items() if url}

    def rpc_override_for(self, network_key: str) -> Optional[str]:
        return self.rpc_overrides().get(network_key.upper())


# Global settings instance
settings = Settings()
