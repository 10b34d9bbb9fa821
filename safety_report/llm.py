"""Report service client using the Google Gemini API."""

import logging
import os
import time

from google import genai
from google.genai import errors, types

from .config import DEFAULT_MODEL
from .errors import ConfigurationError, ReportServiceError

logger = logging.getLogger(__name__)

PLACEHOLDER_KEYS = ("your-api-key-here", "your_api_key_here")

STATUS_MESSAGES = {
    401: "Invalid API key - check GOOGLE_API_KEY in the environment.",
    403: "Invalid API key - check GOOGLE_API_KEY in the environment.",
    429: "Too many requests to the API - please wait a moment and try again.",
    500: "Report service error - service temporarily unavailable.",
    503: "Report service error - service temporarily unavailable.",
    504: "The report service timed out while processing this request. Try a smaller date range or fewer observations.",
}


def get_api_key() -> str:
    """API key from GOOGLE_API_KEY or GEMINI_API_KEY; empty string when unset."""
    raw = os.environ.get("GOOGLE_API_KEY") or os.environ.get("GEMINI_API_KEY")
    api_key = (raw or "").strip()
    if api_key.lower() in PLACEHOLDER_KEYS:
        return ""
    return api_key


def _is_quota_error(exc: BaseException) -> bool:
    """True if the exception is a 429 / quota exceeded error."""
    if isinstance(exc, errors.APIError) and exc.code == 429:
        return True
    msg = (getattr(exc, "message", "") or str(exc)).lower()
    return (
        "429" in msg
        or "resource_exhausted" in msg
        or "quota" in msg
        or "rate limit" in msg
    )


def _is_timeout(exc: BaseException) -> bool:
    if isinstance(exc, TimeoutError):
        return True
    return "timeout" in type(exc).__name__.lower() or "timed out" in str(exc).lower()


def _service_error(exc: BaseException) -> ReportServiceError:
    """Map a client exception to a ReportServiceError with a user-facing message."""
    if isinstance(exc, errors.APIError):
        status = exc.code
        message = STATUS_MESSAGES.get(status) or exc.message or str(exc)
        return ReportServiceError(message, status=status, details=exc.details)
    if _is_timeout(exc):
        return ReportServiceError(STATUS_MESSAGES[504], status=504)
    return ReportServiceError(str(exc) or "Report service error")


def _response_text(response) -> str:
    try:
        if getattr(response, "text", None):
            return response.text
    except (ValueError, AttributeError):
        pass
    if getattr(response, "candidates", None):
        cand = response.candidates[0]
        if cand.content and cand.content.parts:
            part = cand.content.parts[0]
            if getattr(part, "text", None):
                return part.text
    return ""


def call_llm(
    prompt: str,
    model: str = DEFAULT_MODEL,
    timeout_seconds: float = 60.0,
    max_retries: int = 2,
    retry_delay_seconds: float = 65.0,
    temperature: float = 0.7,
    max_output_tokens: int = 4000,
) -> str:
    """Call Gemini API. Set GOOGLE_API_KEY or GEMINI_API_KEY in environment."""
    api_key = get_api_key()
    if not api_key:
        raise ConfigurationError(
            "API key not configured. Set GOOGLE_API_KEY in .env with a key from https://aistudio.google.com/apikey"
        )

    client = genai.Client(
        api_key=api_key,
        http_options=types.HttpOptions(timeout=int(timeout_seconds * 1000)),
    )

    for attempt in range(max_retries + 1):
        try:
            response = client.models.generate_content(
                model=model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    temperature=temperature,
                    max_output_tokens=max_output_tokens,
                ),
            )
        except Exception as e:
            if _is_quota_error(e) and attempt < max_retries:
                logger.warning("Report service quota hit, retrying in %.0fs (attempt %d)", retry_delay_seconds, attempt + 1)
                time.sleep(retry_delay_seconds)
                continue
            logger.error("Report service call failed: %s", e)
            raise _service_error(e) from e

        text = _response_text(response)
        if not text:
            raise ReportServiceError("No response from report service", status=500)
        return text

    raise ReportServiceError(STATUS_MESSAGES[429], status=429)
