from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    DATABASE_URL: str
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    # Bounded datastore round-trips (seconds)
    DB_COMMAND_TIMEOUT_SECONDS: float = 10.0
    DB_POOL_TIMEOUT_SECONDS: float = 10.0

    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: str = "*"  # comma-separated
    ADMIN_BOOTSTRAP_EMAIL: Optional[str] = None  # first sign-in with this email gets the admin role
    # When set, POST /jwt only signs tokens for callers presenting this key in X-Issuer-Key
    TOKEN_ISSUER_KEY: Optional[str] = None

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @property
    def cors_origin_list(self) -> list[str]:
        """Get allowed CORS origins from env"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


settings = Settings()
