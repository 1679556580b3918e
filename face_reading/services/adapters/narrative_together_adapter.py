# face_reading/services/adapters/narrative_together_adapter.py
from __future__ import annotations

import json
from typing import Any, Dict

import requests

from face_reading.core.config import (
    NARRATIVE_HTTP_TIMEOUT_SECONDS,
    NARRATIVE_MAX_TOKENS,
    NARRATIVE_TEMPERATURE,
    NARRATIVE_TOP_P,
    TOGETHER_MODEL,
    TOGETHER_URL,
)
from face_reading.core.errors import NarrativeGenerationError
from face_reading.schemas.insight_schema import NarrativeResult
from face_reading.services.adapters.narrative_adapter import (
    NarrativeAdapter,
    NarrativeContext,
    parse_narrative_text,
)
from face_reading.services.prompts.face_reading_prompt import SYSTEM_PROMPT, build_user_prompt

ERROR_PREVIEW_LENGTH = 180


def describe_error_response(status_code: int, body: str) -> str:
    """
    Best-effort message for a non-2xx chat completion response:
    JSON `error.message` / `message`, else the status plus a preview of the text body.
    """
    default = f"Together API error ({status_code})"
    try:
        parsed = json.loads(body)
    except ValueError:
        return f"{default}: {body[:ERROR_PREVIEW_LENGTH]}" if body else default

    if isinstance(parsed, dict):
        error = parsed.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str) and error["message"]:
            return error["message"]
        if isinstance(parsed.get("message"), str) and parsed["message"]:
            return parsed["message"]
    return default


# OpenAI-compatible chat completions endpoint (Together AI by default)
class NarrativeTogetherAdapter(NarrativeAdapter):
    def __init__(
        self,
        token: str,
        *,
        url: str = TOGETHER_URL,
        model: str = TOGETHER_MODEL,
        max_tokens: int = NARRATIVE_MAX_TOKENS,
        temperature: float = NARRATIVE_TEMPERATURE,
        top_p: float = NARRATIVE_TOP_P,
        timeout: float = NARRATIVE_HTTP_TIMEOUT_SECONDS,
    ) -> None:
        self.token = token
        self.url = url
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.top_p = top_p
        self.timeout = timeout

    def build_request_body(self, context: NarrativeContext) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": build_user_prompt(context.expression, context.age, context.image_hint),
                },
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "top_p": self.top_p,
        }

    def generate(self, context: NarrativeContext) -> NarrativeResult:
        try:
            r = requests.post(
                self.url,
                json=self.build_request_body(context),
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise NarrativeGenerationError(
                f"Together API request failed: {e}", reason="narrative_transport"
            ) from e

        if not r.ok:
            raise NarrativeGenerationError(
                describe_error_response(r.status_code, r.text or ""), reason="narrative_http_status"
            )

        try:
            payload = r.json()
        except ValueError as e:
            raise NarrativeGenerationError(
                "Together API returned a non-JSON envelope.", reason="narrative_parse"
            ) from e

        return parse_narrative_text(_message_content(payload))


def _message_content(payload: Any) -> str:
    # {"choices": [{"message": {"content": "..."}}]}
    if not isinstance(payload, dict):
        return ""
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    return content.strip() if isinstance(content, str) else ""
