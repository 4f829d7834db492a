# Configuration settings shared across the application

import logging
import os
from dataclasses import dataclass
from typing import Optional

from pitchgen.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Default model
DEFAULT_MODEL = "gemini-2.5-pro"

DEFAULT_TEMPERATURE = 0.7
MAX_OUTPUT_TOKENS = 8192

# Upper bound for a single webhook or Gemini call, in seconds
OUTBOUND_TIMEOUT_SECONDS = 30.0

# Pitch storage
MAX_PITCHES_PER_LISTING = 50
MAX_TITLE_LENGTH = 100

# Webhook response validation
MIN_WEBHOOK_RESPONSE_LENGTH = 10
TEMPLATE_PLACEHOLDER_MARKERS = (
    "{{ $json.content }}",
    "{{ $json.text }}",
)

# Fields searched, in order, for pitch text in a structured webhook response
WEBHOOK_TEXT_FIELDS = ("pitch", "content", "text", "message")


def _env(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


@dataclass
class Settings:
    """Environment-provided settings. Presence or absence of each value
    decides which generation stages and collaborators are available."""
    webhook_url: Optional[str] = None
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_MODEL
    outbound_timeout: float = OUTBOUND_TIMEOUT_SECONDS
    firebase_project_id: Optional[str] = None
    firestore_project: Optional[str] = None
    firestore_database: Optional[str] = None
    environment: str = "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def webhook_configured(self) -> bool:
        return self.webhook_url is not None

    @property
    def gemini_configured(self) -> bool:
        return self.gemini_api_key is not None

    def check_startup(self) -> None:
        """
        Validate settings that must be present before serving requests.
        A missing document-store location is fatal in production only.
        """
        if self.firestore_project is None:
            if self.is_production:
                raise ConfigurationError(
                    "FIRESTORE_PROJECT must be set when APP_ENV=production"
                )
            logger.warning(
                "FIRESTORE_PROJECT is not set; falling back to the ambient Google Cloud project"
            )
        if not self.webhook_configured and not self.gemini_configured:
            logger.warning(
                "Neither N8N_WEBHOOK_URL nor GOOGLE_GEMINI_API_KEY is configured; "
                "pitch generation requests will be rejected"
            )


def load_settings() -> Settings:
    """Read settings from the process environment."""
    timeout = _env("OUTBOUND_TIMEOUT_SECONDS")
    try:
        outbound_timeout = float(timeout) if timeout else OUTBOUND_TIMEOUT_SECONDS
    except ValueError:
        raise ConfigurationError(
            f"OUTBOUND_TIMEOUT_SECONDS must be a number, got {timeout!r}"
        )

    return Settings(
        webhook_url=_env("N8N_WEBHOOK_URL"),
        gemini_api_key=_env("GOOGLE_GEMINI_API_KEY") or _env("GEMINI_API_KEY"),
        gemini_model=_env("GEMINI_MODEL") or DEFAULT_MODEL,
        outbound_timeout=outbound_timeout,
        firebase_project_id=_env("FIREBASE_PROJECT_ID"),
        firestore_project=_env("FIRESTORE_PROJECT"),
        firestore_database=_env("FIRESTORE_DATABASE"),
        environment=(_env("APP_ENV") or "development").lower(),
    )
