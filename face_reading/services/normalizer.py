# face_reading/services/normalizer.py
from __future__ import annotations

from typing import Iterable, List, Optional, Set

from face_reading.schemas.face_reading_schema import (
    AlternativeMajor,
    AnalysisMeta,
    AnalysisPayload,
    ExpressionSummary,
    ManifestingSection,
    MajorRecommendation,
    PrimaryMajor,
)
from face_reading.schemas.insight_schema import (
    AgeInsight,
    ExpressionInsight,
    Indicator,
    ManifestingPoint,
    NarrativeResult,
    PointDraft,
    PrimaryMajorDraft,
)
from face_reading.services.expression import clamp, to_finite_float
from face_reading.services.majors import (
    MAJOR_CODES,
    get_major,
    is_major_code,
    normalize_major_code,
    resolve_major_name,
)

DEFAULT_ENERGY_TONE = "Energi netral, tetap jaga kestabilan emosi."
DEFAULT_PERSONALITY = "Karakter terlihat seimbang dan responsif."

_INDICATORS = {indicator.value for indicator in Indicator}


def _clean(value: Optional[str]) -> str:
    return value.strip() if isinstance(value, str) else ""


def normalize_points(items: Optional[Iterable[Optional[PointDraft]]]) -> List[ManifestingPoint]:
    points: List[ManifestingPoint] = []
    for item in items or []:
        if item is None:
            continue
        title = _clean(item.title)
        description = _clean(item.description)
        if not title or not description:
            continue
        indicator = _clean(item.indicator).lower()
        points.append(
            ManifestingPoint(
                title=title,
                description=description,
                indicator=Indicator(indicator) if indicator in _INDICATORS else Indicator.OPPORTUNITY,
            )
        )
    return points


def sanitize_strings(items: Optional[Iterable[Optional[str]]]) -> List[str]:
    return [entry for entry in (_clean(item) for item in items or []) if entry]


def apply_confidence_modifier(base: float, modifier: Optional[float]) -> float:
    offset = to_finite_float(modifier)
    if offset is None:
        return base
    return clamp(base + offset)


def _primary_major(draft: Optional[PrimaryMajorDraft]) -> PrimaryMajor:
    draft = draft or PrimaryMajorDraft()
    code = normalize_major_code(draft.code)
    reference = get_major(code)

    return PrimaryMajor(
        code=code,
        name=resolve_major_name(draft.code, draft.name),
        reasons=normalize_points(draft.reasons) or [p.model_copy() for p in reference.reasons],
        focus_step=_clean(draft.focus_step) or reference.focus_step,
        habits=sanitize_strings(draft.habits) or list(reference.habits),
    )


def _alternatives(result: NarrativeResult, primary_code: str) -> List[AlternativeMajor]:
    seen: Set[str] = {primary_code}
    alternatives: List[AlternativeMajor] = []

    drafts = result.recommendation.alternatives if result.recommendation else None
    for item in drafts or []:
        if item is None:
            continue
        note = _clean(item.note)
        if not note or not is_major_code(item.code):
            continue
        code = normalize_major_code(item.code)
        if code in seen:
            continue
        alternatives.append(
            AlternativeMajor(code=code, name=resolve_major_name(item.code, item.name), note=note)
        )
        seen.add(code)

    for code in MAJOR_CODES:
        if code in seen:
            continue
        reference = get_major(code)
        alternatives.append(AlternativeMajor(code=code, name=reference.name, note=reference.note))
        seen.add(code)

    return alternatives


def build_analysis_payload(
    result: NarrativeResult,
    expression: ExpressionInsight,
    age: AgeInsight,
    source: str,
) -> AnalysisPayload:
    """
    Merges generator (or fallback) output with defaults into the response contract.
    Must not raise: this is the last step before the response is sent.
    """
    summary = result.expression_summary
    manifesting = result.manifesting
    primary = _primary_major(result.recommendation.primary if result.recommendation else None)

    return AnalysisPayload(
        expression=ExpressionSummary(
            headline=_clean(summary.headline if summary else None) or expression.narrative,
            energy_tone=_clean(summary.energy_tone if summary else None) or DEFAULT_ENERGY_TONE,
            personality_highlight=_clean(summary.personality_highlight if summary else None)
            or DEFAULT_PERSONALITY,
            confidence=apply_confidence_modifier(
                expression.confidence, summary.confidence_modifier if summary else None
            ),
            base_label=expression.label,
            base_confidence=expression.confidence,
        ),
        age=age.model_copy(deep=True),
        manifesting=ManifestingSection(
            career=normalize_points(manifesting.career if manifesting else None),
            future=normalize_points(manifesting.future if manifesting else None),
        ),
        recommendation=MajorRecommendation(
            primary=primary,
            alternatives=_alternatives(result, primary.code),
        ),
        meta=AnalysisMeta(source=source),
    )
