"""
Configuration management for the Product Scout extraction engine.
Handles environment variables and engine tuning knobs.
"""
import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    # Server settings
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json")  # json or console
    LOG_VALUE_LIMIT: int = int(os.getenv("LOG_VALUE_LIMIT", "200"))

    # Request settings
    REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "30"))

    # Document parsing
    HTML_PARSER: str = os.getenv("HTML_PARSER", "lxml")

    # Heuristic bounds
    RECOMMENDATION_DEPTH: int = int(os.getenv("RECOMMENDATION_DEPTH", "4"))
    CONTAINER_HEADING_DEPTH: int = int(os.getenv("CONTAINER_HEADING_DEPTH", "3"))
    LISTING_DENSITY_THRESHOLD: int = int(os.getenv("LISTING_DENSITY_THRESHOLD", "5"))
    PRICE_CONTEXT_WINDOW: int = int(os.getenv("PRICE_CONTEXT_WINDOW", "1000"))

    # Site-parser boundary
    SITE_PARSER_RETRY_DELAY: float = float(os.getenv("SITE_PARSER_RETRY_DELAY", "1.0"))

    @classmethod
    def heuristic_bounds(cls) -> dict:
        """Return the heuristic tuning values for logging."""
        return {
            "recommendation_depth": cls.RECOMMENDATION_DEPTH,
            "container_heading_depth": cls.CONTAINER_HEADING_DEPTH,
            "listing_density_threshold": cls.LISTING_DENSITY_THRESHOLD,
            "price_context_window": cls.PRICE_CONTEXT_WINDOW,
        }


config = Config()
