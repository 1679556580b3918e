# face_reading/services/adapters/classifier_mock_adapter.py
from __future__ import annotations

from face_reading.core.config import MOCK_EXPRESSION_LABEL
from face_reading.schemas.insight_schema import AgeInsight, ExpressionInsight
from face_reading.services.adapters.classifier_adapter import ClassifierAdapter
from face_reading.services.age import build_age_insight, build_fallback_age_insight
from face_reading.services.expression import build_expression_insight, default_expression


# Offline classifier for local development (CLASSIFIER_MODE=mock)
class ClassifierMockAdapter(ClassifierAdapter):
    def __init__(self, label: str = MOCK_EXPRESSION_LABEL) -> None:
        self.label = label

    def classify_expression(self, image: bytes) -> ExpressionInsight:
        scores = [
            {"label": self.label, "score": 0.85},
            {"label": "neutral", "score": 0.10},
            {"label": "surprise", "score": 0.05},
        ]
        return build_expression_insight(scores) or default_expression()

    def classify_age(self, image: bytes, expression: ExpressionInsight) -> AgeInsight:
        insight = build_age_insight([{"label": "16-20", "score": 0.61}])
        return insight or build_fallback_age_insight(expression)
