"""Configuration management for the supplement engine."""
from decimal import Decimal
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

# Get project root directory
PROJECT_ROOT = Path(__file__).parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    api_version: str = "v1"

    # Scope normalization tolerances (currency units)
    acv_tolerance: Decimal = Decimal("0.05")
    rcv_tolerance: Decimal = Decimal("1.00")

    # Measured quantity must exceed the scoped quantity by more than this
    # ratio before an item is reported as underscoped.
    underscope_tolerance_ratio: Decimal = Decimal("0.05")

    # Rendered in place of citation placeholders that have no value
    unresolved_placeholder_token: str = "[____]"

    # Optional JSON catalogue replacing the shipped knowledge base
    knowledge_base_path: Optional[str] = None

    # Prose generation (optional collaborator)
    prose_enabled: bool = False
    prose_max_tokens: int = 4000

    # Azure OpenAI
    azure_openai_endpoint: Optional[str] = None
    azure_openai_api_key: Optional[str] = None
    azure_openai_deployment_name: str = "gpt-4o"
    azure_openai_api_version: str = "2024-12-01-preview"

    # Azure OpenAI reliability
    azure_openai_max_retries: int = 6
    azure_openai_retry_base_seconds: float = 1.0
    azure_openai_retry_max_seconds: float = 30.0

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def prose_configured(self) -> bool:
        """Whether the prose collaborator can be called at all."""
        return self.prose_enabled and bool(self.azure_openai_endpoint)


# Global settings instance
settings = Settings()
