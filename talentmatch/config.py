"""
Application Configuration
Load settings from environment variables with validation
"""
import logging
import os
from typing import List

logger = logging.getLogger(__name__)


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    """Application configuration from environment variables"""

    # MongoDB Configuration
    MONGODB_URI: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
    MONGODB_DB_NAME: str = os.getenv("MONGODB_DB_NAME", "talentmatch")
    MONGODB_TLS: bool = os.getenv("MONGODB_TLS", "False").lower() == "true"

    # OpenAI Configuration
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_LLM_MODEL: str = os.getenv("OPENAI_LLM_MODEL", "gpt-4o")

    # Application Configuration
    APP_NAME: str = "TalentMatch Staffing Backend"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = os.getenv("DEBUG", "True").lower() == "true"

    # API Configuration
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))

    # Auth Configuration
    ADMIN_API_KEY: str = os.getenv("ADMIN_API_KEY", "")
    API_KEYS: List[str] = _split_csv(os.getenv("API_KEYS", ""))

    # Matching Configuration
    MATCH_DEFAULT_MIN_SCORE: float = float(os.getenv("MATCH_DEFAULT_MIN_SCORE", "0.3"))
    MATCH_DEFAULT_LIMIT: int = int(os.getenv("MATCH_DEFAULT_LIMIT", "20"))
    MATCH_WEIGHT_SKILLS: float = float(os.getenv("MATCH_WEIGHT_SKILLS", "0.35"))
    MATCH_WEIGHT_EXPERIENCE: float = float(os.getenv("MATCH_WEIGHT_EXPERIENCE", "0.20"))
    MATCH_WEIGHT_LOCATION: float = float(os.getenv("MATCH_WEIGHT_LOCATION", "0.15"))
    MATCH_WEIGHT_AVAILABILITY: float = float(os.getenv("MATCH_WEIGHT_AVAILABILITY", "0.20"))
    MATCH_WEIGHT_BUDGET: float = float(os.getenv("MATCH_WEIGHT_BUDGET", "0.10"))

    # AI commentary on match results
    ANALYSIS_MAX_BIO_TOKENS: int = int(os.getenv("ANALYSIS_MAX_BIO_TOKENS", "200"))

    # Logging Configuration
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Pagination
    DEFAULT_PAGE_SIZE: int = int(os.getenv("DEFAULT_PAGE_SIZE", "50"))

# Initialize settings
settings = Settings()

def validate_settings() -> bool:
    """
    Validate that all required settings are configured

    Returns:
        True if all required settings are present

    Raises:
        ValueError: If required settings are missing
    """
    required_keys = {
        "MONGODB_URI": settings.MONGODB_URI,
        "MONGODB_DB_NAME": settings.MONGODB_DB_NAME,
    }

    missing_keys = [key for key, value in required_keys.items() if not value]
    if missing_keys:
        raise ValueError(f"Missing required environment variables: {', '.join(missing_keys)}")

    weights = [
        settings.MATCH_WEIGHT_SKILLS,
        settings.MATCH_WEIGHT_EXPERIENCE,
        settings.MATCH_WEIGHT_LOCATION,
        settings.MATCH_WEIGHT_AVAILABILITY,
        settings.MATCH_WEIGHT_BUDGET,
    ]
    if any(w < 0 for w in weights) or sum(weights) <= 0:
        raise ValueError("Match weights must be non-negative and sum to a positive value")

    if not settings.ADMIN_API_KEY:
        if settings.DEBUG:
            logger.warning("ADMIN_API_KEY is not set; accepting the development admin key 'dev-key' (DEBUG=True)")
        else:
            logger.warning("ADMIN_API_KEY is not set; admin-only routes are disabled")

    return True
