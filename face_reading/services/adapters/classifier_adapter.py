# face_reading/services/adapters/classifier_adapter.py
from __future__ import annotations

from abc import ABC, abstractmethod

from face_reading.schemas.insight_schema import AgeInsight, ExpressionInsight


class ClassifierAdapter(ABC):
    """Both methods degrade to defaults instead of raising."""

    @abstractmethod
    def classify_expression(self, image: bytes) -> ExpressionInsight:
        raise NotImplementedError

    @abstractmethod
    def classify_age(self, image: bytes, expression: ExpressionInsight) -> AgeInsight:
        """`expression` selects the fallback preset when the age signal is unusable."""
        raise NotImplementedError
