import logging
from typing import Any, Optional

from google import genai
from google.genai import types

from pitchgen.config import (
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    MAX_OUTPUT_TOKENS,
    OUTBOUND_TIMEOUT_SECONDS,
)
from pitchgen.errors import ConfigurationError, UpstreamError
from pitchgen.prompts.pitch import build_pitch_prompt

logger = logging.getLogger(__name__)


class GeminiPitchWriter:
    """
    Generates a pitch with a single direct call to the Gemini API.

    The client is created on first use so that an unconfigured writer can
    still be constructed; calling generate() without an API key raises
    ConfigurationError.
    """
    name = "gemini"

    def __init__(self,
                 api_key: Optional[str] = None,
                 model_name: str = DEFAULT_MODEL,
                 temperature: float = DEFAULT_TEMPERATURE,
                 timeout: float = OUTBOUND_TIMEOUT_SECONDS):
        self.api_key = api_key
        self.model_name = model_name
        self.temperature = temperature
        self.timeout = timeout
        self.total_token_count = 0
        self._client = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> genai.Client:
        if not self.is_configured:
            raise ConfigurationError("Google Gemini API key not configured")
        if self._client is None:
            self._client = genai.Client(
                api_key=self.api_key,
                # HttpOptions.timeout is in milliseconds
                http_options=types.HttpOptions(timeout=int(self.timeout * 1000)),
            )
        return self._client

    def _get_generation_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            temperature=self.temperature,
            max_output_tokens=MAX_OUTPUT_TOKENS,
        )

    async def generate(self, problem: str, solution: str,
                       target_audience: Optional[str] = None) -> str:
        """Return the model's text for the pitch prompt, verbatim."""
        client = self._get_client()
        prompt = build_pitch_prompt(problem, solution, target_audience)

        try:
            response = await client.aio.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=self._get_generation_config(),
            )
        except Exception as e:
            raise UpstreamError(f"Gemini request failed: {e}") from e

        self._track_usage(response)

        text = getattr(response, "text", None)
        if not text or not text.strip():
            raise UpstreamError("Gemini returned no text")
        return text

    def _track_usage(self, response: Any) -> None:
        usage = getattr(response, "usage_metadata", None)
        total = getattr(usage, "total_token_count", None) if usage else None
        if isinstance(total, int):
            self.total_token_count += total
            logger.info(f"Gemini tokens used: {total} (running total: {self.total_token_count})")
