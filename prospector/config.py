"""Configuration settings for the Maps Prospector."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

from .models import Location

load_dotenv()

# Key under which the CRM prospect list is stored
STORAGE_KEY = "maps_prospector_db"

DEFAULT_DATABASE_URL = "sqlite:///./prospector.db"


def gemini_key_from_env() -> str:
    """Gemini API key, accepting the legacy API_KEY name."""
    return os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY", "")


@dataclass
class Settings:
    """Unified settings with YAML override support."""

    # API Keys (from environment)
    gemini_api_key: str = field(default_factory=gemini_key_from_env)
    maps_api_key: str = field(default_factory=lambda: os.environ.get("GOOGLE_MAPS_API_KEY", ""))

    # Models
    search_model: str = "gemini-2.5-flash"
    analysis_model: str = "gemini-2.5-flash"
    enrichment_model: str = "gemini-2.5-flash"

    # Search behaviour
    strategies: list = field(default_factory=lambda: ["low_presence", "popular", "nearby"])
    min_results: int = 5
    exact_name_dedup: bool = False

    # Locality used when the user gives none, and its centre
    default_locality: str = "Paris"
    default_lat: float = 48.8566
    default_lng: float = 2.3522

    # Persistence
    database_url: str = field(
        default_factory=lambda: os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)
    )
    storage_key: str = STORAGE_KEY

    # Provider calls (1 attempt = no retry)
    max_attempts: int = 1
    request_timeout: int = 60

    @property
    def default_location(self) -> Location:
        return Location(lat=self.default_lat, lng=self.default_lng)

    @property
    def map_mode(self) -> str:
        """Live map rendering needs a Maps key, otherwise a placeholder is drawn."""
        return "live" if self.maps_api_key else "placeholder"


def load_config(path: Optional[str] = None) -> Settings:
    """
    Load settings from YAML file with environment overrides.

    Priority: environment > config file > defaults

    Args:
        path: Path to YAML config file (optional)

    Returns:
        Settings instance with merged configuration
    """
    settings = Settings()

    if path:
        config_path = Path(path)
        if config_path.exists():
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}

            # Apply config values
            for key, value in data.items():
                if hasattr(settings, key) and not isinstance(getattr(type(settings), key, None), property):
                    setattr(settings, key, value)

    # Environment overrides (always win)
    if gemini_key_from_env():
        settings.gemini_api_key = gemini_key_from_env()
    if os.environ.get("GOOGLE_MAPS_API_KEY"):
        settings.maps_api_key = os.environ["GOOGLE_MAPS_API_KEY"]
    if os.environ.get("DATABASE_URL"):
        settings.database_url = os.environ["DATABASE_URL"]

    return settings


@dataclass
class ScoringConfig:
    """Weights of the local potential heuristic (0-10 scale)."""

    base_score: int = 5
    no_website_weight: int = 3
    low_rating_weight: int = 2
    no_rating_weight: int = 1
    low_rating_threshold: float = 4.0
    target_threshold: int = 7
    max_score: int = 10


# Email pattern
EMAIL_PATTERN = r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}'

# System addresses that are never a business contact
SPAM_EMAIL_PATTERNS = [
    r'.*@sentry\.io',
    r'.*@bugsnag\.com',
    r'.*noreply@.*',
    r'.*no-reply@.*',
    r'.*donotreply@.*',
    r'.*do-not-reply@.*',
    r'.*mailer-daemon@.*',
    r'.*postmaster@.*',
    r'.*notifications@.*',
    r'[a-f0-9]{20,}@.*',  # Hash-based tracking IDs
]

SPAM_EMAIL_DOMAINS = {
    'sentry.io',
    'wix.com',
    'wixpress.com',
    'squarespace.com',
    'mailchimp.com',
    'sendgrid.net',
    'amazonses.com',
    'example.com',
    'example.fr',
    'domain.com',
    'email.com',
}
