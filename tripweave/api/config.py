# tripweave/api/config.py
"""Configuration management for the trip planner API."""
import os
from dotenv import load_dotenv

from tripweave.api.errors import ConfigurationError

load_dotenv()

DEFAULT_MAPBOX_GEOCODING_URL = "https://api.mapbox.com/geocoding/v5/mapbox.places"


def get_openai_api_key():
    """Get OpenAI API key from environment."""
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise ConfigurationError("OPENAI_API_KEY")
    return api_key


def get_mapbox_config():
    """Get Mapbox geocoding configuration."""
    return {
        "access_token": os.getenv("MAPBOX_TOKEN", ""),
        "base_url": os.getenv("MAPBOX_GEOCODING_URL", DEFAULT_MAPBOX_GEOCODING_URL).rstrip("/"),
        "timeout": float(os.getenv("GEOCODE_TIMEOUT_SECONDS", "10")),
    }


def get_enrichment_config():
    """Get batch enrichment configuration."""
    return {
        # Upper bound on simultaneous provider requests
        "max_concurrency": max(1, int(os.getenv("GEOCODE_MAX_CONCURRENCY", "4"))),
        "default_language": os.getenv("DEFAULT_LANGUAGE", "ko"),
        # When set, enrichment goes through a remote /api/geo/batch service
        "batch_endpoint_url": os.getenv("BATCH_ENDPOINT_URL", ""),
        "batch_timeout": float(os.getenv("BATCH_TIMEOUT_SECONDS", "60")),
    }


def get_llm_config():
    """Get chat model configuration."""
    return {
        "model": os.getenv("OPENAI_CHAT_MODEL", "gpt-4.1"),
        "temperature": float(os.getenv("OPENAI_TEMPERATURE", "0.6")),
        "max_tokens": int(os.getenv("OPENAI_MAX_TOKENS", "4096")),
    }


def get_port():
    """Get port configuration."""
    return int(os.getenv("PORT", 5000))


def get_cors_origins():
    """Get allowed CORS origins."""
    return [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
