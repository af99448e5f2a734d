from pathlib import Path
from typing import Dict

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


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

    # External API Keys
    alchemy_api_key: str = Field(default="", description="Alchemy API key shared by every network")
    alchemy_network_keys: Dict[str, str] = Field(
        default_factory=dict,
        description="Per-network Alchemy keys (JSON object keyed by network name), overriding the shared key",
    )
    coingecko_api_key: str = Field(default="", description="Coingecko API key")
    coingecko_base_url: str = Field(
        default="https://api.coingecko.com/api/v3",
        description="Base URL for the Coingecko REST API",
    )

    # Rate Limiting
    max_concurrent_requests: int = Field(
        default=10,
        ge=1,
        description="Max concurrent token metadata requests per portfolio lookup",
    )
    request_timeout_seconds: int = Field(default=30, description="Request timeout")

    # Provider Toggles
    enable_alchemy: bool = Field(default=True, description="Enable Alchemy provider")
    enable_coingecko: bool = Field(default=True, description="Enable Coingecko provider")

    default_chain: str = Field(
        default="ethereum",
        description="Network used when the requested chain is missing or unknown",
    )

    @field_validator("alchemy_network_keys")
    @classmethod
    def _normalize_network_names(cls, value: Dict[str, str]) -> Dict[str, str]:
        return {name.strip().lower(): key for name, key in value.items()}

    @property
    def has_alchemy_key(self) -> bool:
        return bool(self.alchemy_api_key) or any(self.alchemy_network_keys.values())

    @property
    def has_coingecko_key(self) -> bool:
        return bool(self.coingecko_api_key)

    def alchemy_key_for(self, network: str) -> str:
        """Return the Alchemy key configured for ``network`` (empty when none)."""

        override = self.alchemy_network_keys.get(network.lower())
        if override:
            return override
        return self.alchemy_api_key


# Global settings instance
settings = Settings()
