# face_reading/services/adapters/narrative_adapter.py
from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod

from pydantic import BaseModel, ValidationError

from face_reading.core.errors import NarrativeGenerationError
from face_reading.schemas.insight_schema import AgeInsight, ExpressionInsight, NarrativeResult

logger = logging.getLogger(__name__)

_CODE_FENCE_PATTERN = re.compile(r"```(?:json)?", re.IGNORECASE)


class NarrativeContext(BaseModel):
    expression: ExpressionInsight
    age: AgeInsight
    image_hint: str = ""


class NarrativeAdapter(ABC):
    @abstractmethod
    def generate(self, context: NarrativeContext) -> NarrativeResult:
        """Raises NarrativeGenerationError on any failure; never returns partial data."""
        raise NotImplementedError


def strip_code_fences(text: str) -> str:
    return _CODE_FENCE_PATTERN.sub("", text).strip()


def parse_narrative_text(raw_text: str) -> NarrativeResult:
    cleaned = strip_code_fences(raw_text or "")
    if not cleaned:
        raise NarrativeGenerationError("Model tidak mengembalikan hasil.", reason="narrative_empty")

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.debug(f"Unparseable narrative output: {cleaned[:500]}")
        raise NarrativeGenerationError(
            "Gagal memahami hasil AI. Coba ulangi analisis.", reason="narrative_parse"
        ) from e

    if not isinstance(data, dict):
        raise NarrativeGenerationError(
            f"Hasil AI harus berupa objek JSON, bukan {type(data).__name__}.", reason="narrative_schema"
        )

    try:
        return NarrativeResult.model_validate(data)
    except ValidationError as e:
        raise NarrativeGenerationError(
            f"Struktur hasil AI tidak sesuai: {e.error_count()} field bermasalah.", reason="narrative_schema"
        ) from e
