"""Application configuration using environment variables."""
import os
from functools import lru_cache
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name, "").strip()
    return int(value) if value else None


class Settings:
    """Application settings loaded from environment variables."""

    # Server
    HOST: str = os.getenv("HOST", "127.0.0.1")
    PORT: int = int(os.getenv("PORT", "8000"))
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # CORS - Frontend URL
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")

    # Generation
    MAX_DIFFICULTY: int = int(os.getenv("MAX_DIFFICULTY", "100"))
    DEFAULT_SEED: Optional[int] = _optional_int("DEFAULT_SEED")  # Unset = fresh seed per request


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
