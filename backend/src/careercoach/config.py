"""Application configuration.

Loads settings from a .env file or environment variables with the
CAREERCOACH_ prefix. Secrets are held as SecretStr so they never end up in
reprs or logs.
"""

from typing import Optional

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """careercoach application settings."""

    database_url: str = "sqlite:///./careercoach.db"
    debug: bool = False

    # Identity provider
    clerk_secret_key: SecretStr
    clerk_api_base: str = "https://api.clerk.com"
    clerk_jwks_url: Optional[str] = None
    clerk_issuer: Optional[str] = None
    identity_timeout_seconds: float = 10.0

    # Insight generation
    openai_api_key: Optional[SecretStr] = None
    insight_model: str = "gpt-4o-mini"
    insight_refresh_days: int = 7

    # Budget for insight generation plus the profile write transaction
    transaction_timeout_seconds: float = 10.0

    model_config = {
        "env_file": ".env",
        "env_prefix": "CAREERCOACH_",
    }

    @model_validator(mode="after")
    def validate_timeouts(self) -> "Settings":
        """Reject non-positive timeouts and refresh cadence."""
        if self.identity_timeout_seconds <= 0:
            raise ValueError("identity_timeout_seconds must be positive")
        if self.transaction_timeout_seconds <= 0:
            raise ValueError("transaction_timeout_seconds must be positive")
        if self.insight_refresh_days <= 0:
            raise ValueError("insight_refresh_days must be positive")
        return self

    @property
    def jwks_url(self) -> str:
        """JWKS endpoint used to verify session tokens."""
        if self.clerk_jwks_url:
            return self.clerk_jwks_url
        return f"{self.clerk_api_base.rstrip('/')}/v1/jwks"


def get_settings() -> Settings:
    """Create and return a Settings instance.

    Raises a clear error message if .env is missing or
    CAREERCOACH_CLERK_SECRET_KEY is not set.
    """
    try:
        return Settings()  # type: ignore[call-arg]
    except Exception as e:
        raise RuntimeError(
            f"Failed to load careercoach settings: {e}\n"
            "Ensure a .env file exists with at least CAREERCOACH_CLERK_SECRET_KEY set, "
            "or set the environment variable directly."
        ) from e
