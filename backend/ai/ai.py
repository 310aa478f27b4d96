import logging
import math
import os
import re
import time

from google import genai
from google.genai import errors as genai_errors
from google.genai import types


LOGGER = logging.getLogger(__name__)

DEFAULT_MODEL_NAME = "gemini-2.0-flash"


class AIServiceError(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        status_code: int = 502,
        error_code: str = "AI_SERVICE_ERROR",
        retry_after_seconds: int | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        self.retry_after_seconds = retry_after_seconds

    def to_payload(self) -> dict:
        return {
            "error": str(self),
            "error_code": self.error_code,
            "retry_after_seconds": self.retry_after_seconds,
        }


def _extract_status_code(exc: Exception) -> int:
    for attribute in ("status_code", "code"):
        value = getattr(exc, attribute, None)
        if isinstance(value, int):
            return value

    match = re.search(r"^\s*(\d{3})\b", str(exc))
    if match:
        return int(match.group(1))
    return 502


def _extract_retry_after_seconds(error_text: str) -> int | None:
    patterns = [
        r"retry in\s+([0-9]+(?:\.[0-9]+)?)s",
        r"retryDelay[\"']?\s*[:=]\s*[\"']([0-9]+(?:\.[0-9]+)?)s",
    ]
    for pattern in patterns:
        match = re.search(pattern, error_text, re.IGNORECASE)
        if not match:
            continue
        try:
            return max(1, int(math.ceil(float(match.group(1)))))
        except (TypeError, ValueError):
            continue
    return None


def _map_genai_error(exc: Exception, *, model_name: str) -> AIServiceError:
    status_code = _extract_status_code(exc)
    retry_after_seconds = _extract_retry_after_seconds(str(exc))

    if status_code == 404:
        return AIServiceError(
            f"Configured Gemini model '{model_name}' was not found. Update GEMINI_MODEL_NAME to a supported model.",
            status_code=502,
            error_code="AI_MODEL_NOT_FOUND",
        )
    if status_code == 429:
        return AIServiceError(
            f"Gemini quota or rate limit exceeded for model '{model_name}'. Retry later.",
            status_code=429,
            error_code="AI_RATE_LIMITED",
            retry_after_seconds=retry_after_seconds,
        )
    if status_code == 503:
        return AIServiceError(
            f"Gemini model '{model_name}' is temporarily unavailable. Retry shortly.",
            status_code=503,
            error_code="AI_TEMPORARILY_UNAVAILABLE",
            retry_after_seconds=retry_after_seconds,
        )
    if status_code >= 500:
        return AIServiceError(
            "Gemini service returned an upstream error. Retry shortly.",
            status_code=502,
            error_code="AI_UPSTREAM_ERROR",
            retry_after_seconds=retry_after_seconds,
        )
    return AIServiceError(
        "Gemini request failed. Verify API key, model, and prompt, then retry.",
        status_code=502,
        error_code="AI_REQUEST_FAILED",
        retry_after_seconds=retry_after_seconds,
    )


def _read_int_env(name: str, default: int, *, minimum: int = 0) -> int:
    raw_value = os.environ.get(name)
    if raw_value is None:
        return default
    try:
        return max(minimum, int(raw_value))
    except (TypeError, ValueError):
        return default


def _read_float_env(name: str, default: float, *, minimum: float = 0.0) -> float:
    raw_value = os.environ.get(name)
    if raw_value is None:
        return default
    try:
        return max(minimum, float(raw_value))
    except (TypeError, ValueError):
        return default


def _model_name() -> str:
    return os.environ.get("GEMINI_MODEL_NAME", DEFAULT_MODEL_NAME).strip() or DEFAULT_MODEL_NAME


def _collect_response_text(client, model_name: str, contents, config) -> str:
    """Stream the answer; fall back to a single call if the stream itself breaks."""
    try:
        response_text = ""
        for chunk in client.models.generate_content_stream(model=model_name, contents=contents, config=config):
            if chunk.text:
                response_text += chunk.text
        return response_text
    except genai_errors.APIError:
        raise
    except Exception as exc:
        LOGGER.warning("Gemini stream failed (%s); retrying without streaming.", type(exc).__name__)
        response = client.models.generate_content(model=model_name, contents=contents, config=config)
        return getattr(response, "text", "") or ""


def generate_with_instruction(
    prompt: str,
    system_instruction: str,
    *,
    response_mime_type: str | None = None,
) -> str:
    api_key = os.environ.get("GOOGLE_API_KEY")
    if not api_key:
        raise AIServiceError(
            "GOOGLE_API_KEY is not configured",
            status_code=500,
            error_code="AI_KEY_MISSING",
        )
    model_name = _model_name()
    max_retries = _read_int_env("GEMINI_MAX_RETRIES", 2, minimum=0)
    retry_base_seconds = _read_float_env("GEMINI_RETRY_BASE_SECONDS", 2.0, minimum=1.0)

    client = genai.Client(api_key=api_key)
    contents = [types.Content(role="user", parts=[types.Part.from_text(text=prompt)])]
    config = types.GenerateContentConfig(
        response_mime_type=response_mime_type,
        system_instruction=[types.Part.from_text(text=system_instruction)],
    )

    response_text = ""
    for attempt in range(max_retries + 1):
        try:
            response_text = _collect_response_text(client, model_name, contents, config)
            break
        except genai_errors.APIError as exc:
            mapped_error = _map_genai_error(exc, model_name=model_name)
            retryable = mapped_error.status_code in {429, 503}
            if retryable and attempt < max_retries:
                computed_retry = int(math.ceil(retry_base_seconds * (2**attempt)))
                retry_after = max(1, min(mapped_error.retry_after_seconds or computed_retry, 10))
                LOGGER.warning(
                    "Gemini request failed for model %s (%s). Retrying in %ss (attempt %s/%s).",
                    model_name,
                    mapped_error.error_code,
                    retry_after,
                    attempt + 1,
                    max_retries,
                )
                time.sleep(retry_after)
                continue
            raise mapped_error from exc
        except Exception as exc:
            raise AIServiceError(
                "Unexpected Gemini integration failure.",
                status_code=502,
                error_code="AI_UNEXPECTED_ERROR",
            ) from exc

    if not response_text.strip():
        raise AIServiceError(
            "Gemini returned an empty response.",
            status_code=502,
            error_code="AI_EMPTY_RESPONSE",
        )
    return response_text
