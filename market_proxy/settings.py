# market_proxy/settings.py
from functools import lru_cache
from pathlib import Path
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ROOT = Path(__file__).resolve().parent.parent
PACKAGE = Path(__file__).resolve().parent

class Settings(BaseSettings):
    # --- Finnhub ---
    FINNHUB_API_KEY: str = Field(
        min_length=1,
        validation_alias=AliasChoices("FINNHUB_API_KEY", "FINHUB_API_KEY"),
    )
    FINNHUB_BASE_URL: str = "https://finnhub.io/api/v1"
    NEWS_API_KEY: str | None = None

    # --- Timeouts (seconds) ---
    REQUEST_TIMEOUT: float = 10
    CANDLE_TIMEOUT: float = 15
    CRYPTO_LIST_TIMEOUT: float = 5

    # --- Server ---
    HOST: str = "0.0.0.0"
    PORT: int = 5001

    model_config = SettingsConfigDict(
        env_file=[str(ROOT / ".env"), str(PACKAGE / ".env")],
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
