# face_reading/services/expression.py
from __future__ import annotations

import math
from typing import Any, List, Optional, Tuple

from face_reading.schemas.insight_schema import ExpressionInsight

EXPRESSION_LABELS = {
    "neutral": "Wajah tampak netral dan tenang.",
    "happiness": "Ekspresi bahagia mendominasi, menunjukkan energi positif dan terbuka.",
    "surprise": "Ada unsur terkejut atau rasa kagum yang kuat.",
    "sadness": "Ekspresi sedih terlihat, perlunya dukungan emosional.",
    "anger": "Wajah menunjukkan ketegasan dan fokus tinggi, mungkin ada sedikit ketegangan.",
    "disgust": "Ekspresi kurang nyaman atau ada hal yang membuat kurang sreg.",
    "fear": "Ada sinyal kehati-hatian tinggi atau keraguan yang perlu ditenangkan.",
    "contempt": "Ekspresi kritis, menggambarkan standar tinggi terhadap diri atau sekitar.",
}

DEFAULT_EXPRESSION = (
    "Ekspresi wajah tampak netral dan tenang; AI menganggapmu menjaga emosi tetap seimbang."
)
DEFAULT_EXPRESSION_LABEL = "neutral"
DEFAULT_EXPRESSION_CONFIDENCE = 0.4


def clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    return min(max(value, lower), upper)


def to_finite_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def default_expression() -> ExpressionInsight:
    return ExpressionInsight(
        label=DEFAULT_EXPRESSION_LABEL,
        confidence=DEFAULT_EXPRESSION_CONFIDENCE,
        narrative=DEFAULT_EXPRESSION,
    )


def describe_expression(label: str, score: float) -> str:
    known = EXPRESSION_LABELS.get(label.lower())
    if known:
        return known
    return f"Ekspresi dominan: {label} dengan tingkat keyakinan {score * 100:.0f}%."


def _valid_candidates(data: Any) -> List[Tuple[str, float]]:
    candidates: List[Tuple[str, float]] = []
    if not isinstance(data, list):
        return candidates
    for item in data:
        if not isinstance(item, dict):
            continue
        label = item.get("label")
        score = to_finite_float(item.get("score"))
        if not isinstance(label, str) or not label.strip() or score is None:
            continue
        candidates.append((label.strip(), score))
    return candidates


def build_expression_insight(data: Any) -> Optional[ExpressionInsight]:
    """
    Picks the top-scoring {label, score} entry of a classifier response.
    Equal scores keep first-seen order (sorted() is stable, also with reverse=True).
    Returns None when the response holds no usable candidate.
    """
    candidates = _valid_candidates(data)
    if not candidates:
        return None

    label, score = sorted(candidates, key=lambda c: c[1], reverse=True)[0]
    return ExpressionInsight(
        label=label,
        confidence=clamp(score),
        narrative=describe_expression(label, score),
    )
