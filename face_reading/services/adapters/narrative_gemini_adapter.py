# face_reading/services/adapters/narrative_gemini_adapter.py
from __future__ import annotations

from google import genai
from google.genai import types

from face_reading.core.config import (
    GEMINI_MODEL,
    NARRATIVE_HTTP_TIMEOUT_SECONDS,
    NARRATIVE_MAX_TOKENS,
    NARRATIVE_TEMPERATURE,
    NARRATIVE_TOP_P,
)
from face_reading.core.errors import NarrativeGenerationError
from face_reading.schemas.insight_schema import NarrativeResult
from face_reading.services.adapters.narrative_adapter import (
    NarrativeAdapter,
    NarrativeContext,
    parse_narrative_text,
)
from face_reading.services.prompts.face_reading_prompt import SYSTEM_PROMPT, build_user_prompt


class NarrativeGeminiAdapter(NarrativeAdapter):
    def __init__(
        self,
        api_key: str,
        *,
        model_name: str = GEMINI_MODEL,
        max_tokens: int = NARRATIVE_MAX_TOKENS,
        temperature: float = NARRATIVE_TEMPERATURE,
        top_p: float = NARRATIVE_TOP_P,
        timeout: float = NARRATIVE_HTTP_TIMEOUT_SECONDS,
    ) -> None:
        if not api_key:
            raise ValueError("GEMINI_API_KEY (or GOOGLE_API_KEY) is not set in environment variables.")

        self.model_name = model_name
        self.client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(timeout * 1000)),
        )
        self._config = types.GenerateContentConfig(
            system_instruction=SYSTEM_PROMPT,
            response_mime_type="application/json",
            max_output_tokens=max_tokens,
            temperature=temperature,
            top_p=top_p,
        )

    def generate(self, context: NarrativeContext) -> NarrativeResult:
        prompt_text = build_user_prompt(context.expression, context.age, context.image_hint)
        try:
            resp = self.client.models.generate_content(
                model=self.model_name,
                contents=[types.Content(role="user", parts=[types.Part.from_text(text=prompt_text)])],
                config=self._config,
            )
        except Exception as e:
            raise NarrativeGenerationError(f"Gemini API error: {e}", reason="narrative_upstream") from e

        return parse_narrative_text(resp.text or "")
