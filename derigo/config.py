"""
Derigo Configuration

Central settings loaded from environment variables.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

_DATA_DIR = Path(__file__).resolve().parent / "data"


@dataclass(frozen=True)
class Settings:
    """Immutable application settings."""

    # --- Versioning ---
    ENGINE_VERSION: str = "1.0.0"
    API_VERSION: str = "1"

    # --- Reference tables ---
    KEYWORDS_PATH: str = os.getenv(
        "DERIGO_KEYWORDS_PATH", str(_DATA_DIR / "keywords.json")
    )
    SOURCES_PATH: str = os.getenv(
        "DERIGO_SOURCES_PATH", str(_DATA_DIR / "sources.json")
    )
    KNOWN_ACTORS_PATH: str = os.getenv(
        "DERIGO_KNOWN_ACTORS_PATH", str(_DATA_DIR / "known_actors.json")
    )

    # --- Analysis ---
    MIN_CONTENT_LENGTH: int = int(os.getenv("DERIGO_MIN_CONTENT_LENGTH", "100"))
    ENHANCED_CONFIDENCE_THRESHOLD: float = float(
        os.getenv("DERIGO_ENHANCED_CONFIDENCE", "0.7")
    )

    # --- LLM Provider (enhanced analysis, opt-in) ---
    LLM_PROVIDER: str = os.getenv("DERIGO_LLM_PROVIDER", "none")
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    LLM_TIMEOUT_SECONDS: float = float(os.getenv("DERIGO_LLM_TIMEOUT", "20"))

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("DERIGO_LOG_LEVEL", "INFO").upper()
    LOG_FORMAT: str = os.getenv("DERIGO_LOG_FORMAT", "json")  # "json" or "text"

    # --- Cache ---
    CACHE_MAX_ENTRIES: int = int(os.getenv("DERIGO_CACHE_MAX_ENTRIES", "2000"))

    # --- Server ---
    HOST: str = os.getenv("DERIGO_HOST", "0.0.0.0")
    PORT: int = int(os.getenv("DERIGO_PORT", "8000"))

    # --- CORS ---
    CORS_ORIGINS: str = os.getenv("DERIGO_CORS_ORIGINS", "*")


settings = Settings()
