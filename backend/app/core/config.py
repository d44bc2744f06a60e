from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # --- DB ---
    DATABASE_URL: str = "sqlite:///./gamedraft.sqlite"

    # "sql" o "memory"; se elige una vez al arrancar
    STORAGE_BACKEND: str = "sql"

    # --- JWT ---
    JWT_SECRET: str = "change-me-gamedraft-secret"
    JWT_ALG: str = "HS256"
    JWT_EXPIRE_MIN: int = 1440  # 24h

    # --- Logging ---
    LOG_LEVEL: str = "INFO"

    # --- Auctions ---
    BID_MAX_RETRIES: int = 10
    # 0 = desactivado (las reglas solo mencionan el 5% como texto)
    MIN_BID_INCREMENT_PCT: Decimal = Decimal("0")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
