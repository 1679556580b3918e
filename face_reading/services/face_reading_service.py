# face_reading/services/face_reading_service.py
from __future__ import annotations

import base64
import binascii
import hashlib
import logging
import threading
import time
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Tuple

from face_reading.core.config import CLASSIFIER_MODE, NARRATIVE_PROVIDER, Credentials, resolve_credentials
from face_reading.core.errors import InvalidImageError, NarrativeGenerationError, RateLimitExceededError
from face_reading.schemas.face_reading_schema import AnalysisPayload, FaceReadingResponse
from face_reading.schemas.insight_schema import NarrativeResult
from face_reading.services.adapters.classifier_adapter import ClassifierAdapter
from face_reading.services.adapters.classifier_http_adapter import ClassifierHttpAdapter
from face_reading.services.adapters.classifier_mock_adapter import ClassifierMockAdapter
from face_reading.services.adapters.narrative_adapter import NarrativeAdapter, NarrativeContext
from face_reading.services.adapters.narrative_together_adapter import NarrativeTogetherAdapter
from face_reading.services.fallback import build_fallback_analysis
from face_reading.services.normalizer import build_analysis_payload
from face_reading.services.prompts.face_reading_prompt import IMAGE_HINT_LENGTH
from face_reading.services.stores import (
    AnalysisCache,
    InMemoryAnalysisCache,
    InMemoryRateLimitStore,
    RateLimitStore,
)

logger = logging.getLogger(__name__)

ANONYMOUS_CLIENT = "anonymous"


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def client_key_from_headers(headers: Mapping[str, str]) -> str:
    forwarded = (headers.get("x-forwarded-for") or "").split(",")[0].strip()
    return forwarded or (headers.get("x-real-ip") or "").strip() or ANONYMOUS_CLIENT


def decode_image(image: Any) -> Tuple[str, bytes]:
    """
    Splits a data URL ("data:image/png;base64,<payload>") and decodes the payload.
    Returns (base64 payload, raw bytes).
    """
    if not image or not isinstance(image, str):
        raise InvalidImageError("Gambar tidak ditemukan di permintaan.", error_code="IMAGE_MISSING")

    _, separator, payload = image.partition(",")
    payload = payload.strip()
    if not separator or not payload:
        raise InvalidImageError("Format gambar tidak valid.")

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageError("Format gambar tidak valid.") from e
    if not data:
        raise InvalidImageError("Format gambar tidak valid.")
    return payload, data


# Per-request flow:
# config check -> input validation -> rate limit -> cache -> expression -> age -> narrative (or fallback)
# -> normalize -> cache write
# Concurrent requests for the same image can both miss the cache and call upstream twice.
class FaceReadingService:
    def __init__(
        self,
        *,
        rate_limiter: Optional[RateLimitStore] = None,
        cache: Optional[AnalysisCache] = None,
        classifier: Optional[ClassifierAdapter] = None,
        narrative: Optional[NarrativeAdapter] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.rate_limiter = rate_limiter or InMemoryRateLimitStore()
        self.cache = cache or InMemoryAnalysisCache()
        self._classifier = classifier
        self._narrative = narrative
        self._clock = clock

    def _select_classifier(self, credentials: Credentials) -> ClassifierAdapter:
        if self._classifier is not None:
            return self._classifier
        if CLASSIFIER_MODE == "mock":
            return ClassifierMockAdapter()
        return ClassifierHttpAdapter(credentials.classifier_token or "")

    def _select_narrative(self, credentials: Credentials) -> NarrativeAdapter:
        if self._narrative is not None:
            return self._narrative
        if NARRATIVE_PROVIDER == "gemini":
            # google-genai is only imported when the Gemini provider is selected
            from face_reading.services.adapters.narrative_gemini_adapter import NarrativeGeminiAdapter

            return NarrativeGeminiAdapter(credentials.narrative_token)
        return NarrativeTogetherAdapter(credentials.narrative_token)

    def analyze(self, image: Any, client_key: str) -> FaceReadingResponse:
        credentials = resolve_credentials()
        payload_b64, image_bytes = decode_image(image)

        now = self._clock()
        if not self.rate_limiter.hit(client_key, now):
            logger.info(f"Rate limit exceeded for client={client_key}")
            raise RateLimitExceededError(
                "Terlalu banyak analisis dalam waktu singkat. Coba lagi dalam beberapa detik."
            )

        image_hash = hashlib.sha256(image_bytes).hexdigest()
        cached = self.cache.get(image_hash, now)
        if cached is not None:
            logger.info(f"Cache hit for image={image_hash[:12]}")
            replay = cached.model_copy(update={"meta": cached.meta.model_copy(update={"cached": True})})
            return self._respond(replay)

        classifier = self._select_classifier(credentials)

        expression = classifier.classify_expression(image_bytes)
        age = classifier.classify_age(image_bytes, expression)

        source = "ai"
        try:
            # adapter construction failures fall back too
            narrative = self._select_narrative(credentials)
            result: NarrativeResult = narrative.generate(
                NarrativeContext(
                    expression=expression,
                    age=age,
                    image_hint=payload_b64[:IMAGE_HINT_LENGTH],
                )
            )
        except NarrativeGenerationError as e:
            logger.warning(f"Narrative generation failed, using fallback template. reason={e.reason} error={e}")
            result = build_fallback_analysis(expression)
            source = "fallback"
        except Exception:
            logger.exception("Unexpected narrative failure, using fallback template. reason=narrative_unexpected")
            result = build_fallback_analysis(expression)
            source = "fallback"

        payload = build_analysis_payload(result, expression, age, source)
        self.cache.put(image_hash, payload, now)
        logger.info(
            f"Face reading built image={image_hash[:12]} source={source} "
            f"expression={expression.label} major={payload.recommendation.primary.code}"
        )
        return self._respond(payload)

    @staticmethod
    def _respond(payload: AnalysisPayload) -> FaceReadingResponse:
        return FaceReadingResponse(**payload.model_dump(), generated_at=now_iso())


_service: Optional[FaceReadingService] = None
_service_lock = threading.Lock()


def get_face_reading_service() -> FaceReadingService:
    global _service
    with _service_lock:
        if _service is None:
            _service = FaceReadingService()
    return _service
