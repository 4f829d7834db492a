# Workflow webhook client
# Sends the pitch inputs to an external workflow (n8n) and normalizes
# whatever shape of response comes back into plain pitch text

import json
import logging
from typing import Any, Callable, List, Optional, Tuple

import httpx

from pitchgen.config import (
    MIN_WEBHOOK_RESPONSE_LENGTH,
    OUTBOUND_TIMEOUT_SECONDS,
    TEMPLATE_PLACEHOLDER_MARKERS,
    WEBHOOK_TEXT_FIELDS,
)
from pitchgen.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

_NOT_JSON = object()


def _field_rule(field: str) -> Callable[[Any], Optional[Any]]:
    def rule(payload: Any) -> Optional[Any]:
        if isinstance(payload, dict) and payload.get(field):
            return payload[field]
        return None
    rule.__name__ = f"field:{field}"
    return rule


def _bare_string_rule(payload: Any) -> Optional[Any]:
    return payload if isinstance(payload, str) else None


# Checked in order; the first rule returning a value wins.
# Payloads matching no rule are serialized whole.
EXTRACTION_RULES: List[Callable[[Any], Optional[Any]]] = (
    [_field_rule(field) for field in WEBHOOK_TEXT_FIELDS] + [_bare_string_rule]
)


def _parse_json(body: str) -> Any:
    try:
        return json.loads(body)
    except (json.JSONDecodeError, ValueError, RecursionError):
        return _NOT_JSON


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, indent=2)


def extract_pitch_text(body: str) -> str:
    """
    Pull pitch text out of a webhook response body.

    Plain-text bodies are returned unmodified. JSON bodies are searched for
    `pitch`, `content`, `text` and `message` (in that order), then treated as
    a bare string; anything else is serialized back to JSON text.
    """
    payload = _parse_json(body)
    if payload is _NOT_JSON:
        logger.info("Webhook returned plain text")
        return body

    for rule in EXTRACTION_RULES:
        value = rule(payload)
        if value is not None:
            logger.info(f"Webhook JSON matched {rule.__name__}")
            return _as_text(value)

    logger.info("Webhook JSON had no known text field; returning serialized payload")
    return json.dumps(payload, indent=2)


def validate_webhook_body(body: str) -> None:
    """Raise UpstreamError for bodies that cannot contain a usable pitch."""
    if not body or not body.strip():
        raise UpstreamError("Empty response from workflow webhook")

    if len(body.strip()) < MIN_WEBHOOK_RESPONSE_LENGTH:
        raise UpstreamError("Invalid response from workflow webhook - response too short")

    for marker in TEMPLATE_PLACEHOLDER_MARKERS:
        if marker in body:
            raise UpstreamError(
                "Workflow webhook returned unrendered template variables instead of content"
            )


class WorkflowWebhookClient:
    """Generation stage backed by an external HTTP workflow endpoint."""
    name = "webhook"

    def __init__(self,
                 url: Optional[str] = None,
                 timeout: float = OUTBOUND_TIMEOUT_SECONDS,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.url)

    async def _post(self, payload: dict) -> Tuple[int, str]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(self.url, json=payload)
            return response.status_code, response.text

    async def generate(self, problem: str, solution: str,
                       target_audience: Optional[str] = None) -> str:
        if not self.is_configured:
            raise ConfigurationError("Workflow webhook URL is not configured")

        payload = {
            "problem": problem,
            "solution": solution,
            "targetAudience": target_audience,
        }
        logger.info(f"Calling workflow webhook: {self.url}")

        try:
            status_code, body = await self._post(payload)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Workflow webhook request failed: {e}") from e

        logger.info(f"Webhook response status: {status_code}, length: {len(body)}")

        if not 200 <= status_code < 300:
            logger.warning(f"Webhook error response: {body[:500]}")
            raise UpstreamError(f"Workflow webhook failed with status: {status_code}")

        validate_webhook_body(body)
        return extract_pitch_text(body)
