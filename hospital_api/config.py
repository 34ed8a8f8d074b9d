"""
Application configuration settings loaded from environment variables.
Uses pydantic_settings for validation and type conversion.
"""
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """
    Application settings class with environment variable validation.

    The instance is frozen once built; components receive it (or values
    taken from it) explicitly instead of reading globals.

    Attributes:
        database_url: SQLAlchemy connection string
        db_pool_timeout: Seconds to wait for a pooled connection

        secret_key: Secret key for JWT token signing
        algorithm: Algorithm used for JWT signing (typically HS256)
        access_token_expire_days: Access token lifetime in days
        bcrypt_rounds: bcrypt cost factor for password hashing

        environment: "development" exposes error details in responses
        host: Bind address used when running the module directly
        port: Listening port used when running the module directly
        log_level: Root logging level
        cors_origins: Origins allowed by the CORS middleware
    """
    # Database settings
    database_url: str
    db_pool_timeout: int = 30

    # JWT settings
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_days: int = 7

    # Password hashing
    bcrypt_rounds: int = 10

    # Runtime settings
    environment: str = "production"
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    class Config:
        """Configuration for environment variables loading"""
        env_file = ".env"
        case_sensitive = False
        frozen = True
        extra = "ignore"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """
    Build the settings once per process.

    Returns:
        Settings: The cached, immutable settings instance
    """
    return Settings()
