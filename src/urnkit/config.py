"""Configuration from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Service and CLI configuration loaded from environment."""

    # Server settings
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "info"

    # Input limits (the core itself is unbounded; these guard the outer surfaces)
    max_input_length: int = 8192  # Longest URN accepted, in characters
    max_batch_size: int = 1000  # Most URNs per /validate request

    model_config = {"env_prefix": "URNKIT_", "env_file": ".env", "extra": "ignore"}


def get_settings() -> Settings:
    """Get a fresh settings instance."""
    return Settings()
