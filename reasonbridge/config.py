"""
ReasonBridge Configuration

Central settings loaded from environment variables.
"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Immutable application settings."""

    # --- Versioning ---
    ENGINE_VERSION: str = "1.0.0"
    API_VERSION: str = "1"

    # --- Feedback ---
    # Confidence window inside which two detections count as tied
    TIE_EPSILON: float = float(os.getenv("REASONBRIDGE_TIE_EPSILON", "0.05"))
    MAX_TEXT_LENGTH: int = int(os.getenv("REASONBRIDGE_MAX_TEXT_LENGTH", "25000"))

    # --- Clustering ---
    SIMILARITY_THRESHOLD: float = float(
        os.getenv("REASONBRIDGE_SIMILARITY_THRESHOLD", "0.2")
    )

    # --- Synthesis / Divergence ---
    MIN_PARTICIPATION: int = int(os.getenv("REASONBRIDGE_MIN_PARTICIPATION", "3"))

    # --- Preview Cache ---
    CACHE_TTL: int = int(os.getenv("REASONBRIDGE_CACHE_TTL", "3600"))
    CACHE_MAX_ENTRIES: int = int(os.getenv("REASONBRIDGE_CACHE_MAX_ENTRIES", "500"))

    # --- Server ---
    HOST: str = os.getenv("REASONBRIDGE_HOST", "0.0.0.0")
    PORT: int = int(os.getenv("REASONBRIDGE_PORT", "8000"))

    # --- CORS ---
    CORS_ORIGINS: str = os.getenv("REASONBRIDGE_CORS_ORIGINS", "*")


settings = Settings()
