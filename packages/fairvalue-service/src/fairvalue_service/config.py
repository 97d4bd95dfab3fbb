"""
Service configuration.

Read from environment variables or a ``.env`` file in the working directory.
Only the service layer reads these; the engine takes everything as arguments.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Valuation
    TARGET_PE: float = Field(25.0, description="Default target P/E for per-year fair values")

    # Server
    PORT: int = Field(5050, description="HTTP port for the API server")
    LOG_LEVEL: str = Field("INFO", description="Root logging level")

    # Storage
    DATA_DIR: Path = Field(Path("out"), description="Directory holding {EXCHANGE}_{TICKER}.json datasets")
    CATALOG_PATH: Path = Field(Path("out/companies.json"), description="Multi-company catalog document")

    # LLM narrative
    OPENAI_API_KEY: str = Field("", description="OpenAI API key; empty disables narratives")
    OPENAI_MODEL: str = Field("gpt-4o-mini", description="Chat model used for narratives")
    OPENAI_BASE_URL: Optional[str] = Field(None, description="Alternative OpenAI-compatible endpoint")
    LLM_TIMEOUT_SECONDS: float = Field(30.0, description="Timeout for LLM calls (seconds)")

    # Market data
    TWELVE_DATA_API_KEY: str = Field("", description="Twelve Data API key for live quotes")
    MARKET_DATA_TIMEOUT_SECONDS: float = Field(10.0, description="HTTP timeout for market data requests")

    @field_validator("OPENAI_API_KEY", "TWELVE_DATA_API_KEY", mode="before")
    @classmethod
    def strip_api_key(cls, v: Any) -> str:
        if isinstance(v, str):
            return v.strip()
        return v or ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
