# face_reading/services/adapters/classifier_http_adapter.py
from __future__ import annotations

import logging

import requests

from face_reading.core.config import (
    CLASSIFIER_HTTP_TIMEOUT_SECONDS,
    HF_AGE_MODEL_URL,
    HF_EXPRESSION_MODEL_URL,
)
from face_reading.schemas.insight_schema import AgeInsight, ExpressionInsight
from face_reading.services.adapters.classifier_adapter import ClassifierAdapter
from face_reading.services.age import build_age_insight, build_fallback_age_insight
from face_reading.services.expression import build_expression_insight, default_expression

logger = logging.getLogger(__name__)

ERROR_PREVIEW_LENGTH = 180


# Hugging Face inference API (raw image bytes in, JSON out)
class ClassifierHttpAdapter(ClassifierAdapter):
    def __init__(
        self,
        token: str,
        *,
        expression_url: str = HF_EXPRESSION_MODEL_URL,
        age_url: str = HF_AGE_MODEL_URL,
        timeout: float = CLASSIFIER_HTTP_TIMEOUT_SECONDS,
    ) -> None:
        self.token = token
        self.expression_url = expression_url
        self.age_url = age_url
        self.timeout = timeout

    def _post_image(self, url: str, image: bytes) -> requests.Response:
        return requests.post(
            url,
            data=image,
            headers={
                "Authorization": f"Bearer {self.token}",
                "Content-Type": "application/octet-stream",
            },
            timeout=self.timeout,
        )

    def classify_expression(self, image: bytes) -> ExpressionInsight:
        try:
            r = self._post_image(self.expression_url, image)
        except requests.RequestException as e:
            logger.warning(f"Expression classifier unavailable, using default. reason=expression_transport error={e}")
            return default_expression()

        if not r.ok:
            logger.warning(
                f"Expression classifier returned {r.status_code}, using default. "
                f"reason=expression_http_status detail={r.text[:ERROR_PREVIEW_LENGTH]}"
            )
            return default_expression()

        try:
            data = r.json()
        except ValueError:
            logger.warning("Expression classifier returned invalid JSON, using default. reason=expression_malformed")
            return default_expression()

        insight = build_expression_insight(data)
        if insight is None:
            logger.warning("Expression classifier returned no candidates, using default. reason=expression_empty")
            return default_expression()
        return insight

    def classify_age(self, image: bytes, expression: ExpressionInsight) -> AgeInsight:
        try:
            r = self._post_image(self.age_url, image)
            if not r.ok:
                logger.warning(
                    f"Age classifier returned {r.status_code}, using preset. "
                    f"reason=age_http_status detail={r.text[:ERROR_PREVIEW_LENGTH]}"
                )
                return build_fallback_age_insight(expression)

            insight = build_age_insight(r.json())
            if insight is None:
                logger.warning("Age classifier response unusable, using preset. reason=age_unparseable")
                return build_fallback_age_insight(expression)
            return insight
        # requests' JSONDecodeError is also a RequestException, so ValueError goes first
        except ValueError as e:
            logger.warning(f"Age classifier returned invalid JSON, using preset. reason=age_malformed error={e}")
        except requests.RequestException as e:
            logger.warning(f"Age classifier unavailable, using preset. reason=age_transport error={e}")
        except Exception:
            logger.exception("Unexpected age classifier failure, using preset. reason=age_unexpected")
        return build_fallback_age_insight(expression)
