# face_reading/schemas/insight_schema.py
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class WireModel(BaseModel):
    """Python attribute names, camelCase / Indonesian keys on the wire."""

    model_config = ConfigDict(populate_by_name=True)


# Polarity of a manifesting point
class Indicator(str, Enum):
    STRENGTH = "strength"
    OPPORTUNITY = "opportunity"
    WARNING = "warning"


# Built once per request from the expression classifier
class ExpressionInsight(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    narrative: str


class AgeRange(BaseModel):
    min: Optional[int] = None
    max: Optional[int] = None


class AgeInsight(BaseModel):
    label: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    estimated: Optional[int] = None
    range: AgeRange = Field(default_factory=AgeRange)
    headline: str
    narrative: str


class ManifestingPoint(BaseModel):
    title: str
    description: str
    indicator: Indicator = Indicator.OPPORTUNITY


# --- Narrative generator output (partial / untrusted) ---
# Every field is optional: the normalizer decides what survives.
# List entries that fail validation are dropped one by one; the rest of the result is kept.

def _text_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _valid_items(value: Any, model: Type[BaseModel]) -> Optional[List[BaseModel]]:
    if not isinstance(value, list):
        return None
    items: List[BaseModel] = []
    for entry in value:
        try:
            items.append(model.model_validate(entry))
        except ValidationError:
            logger.debug(f"Dropping invalid {model.__name__} entry: {entry!r}"[:300])
    return items


def _text_items(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    return [entry for entry in value if isinstance(entry, str)]


class PointDraft(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    indicator: Optional[str] = None

    @field_validator("indicator", mode="before")
    @classmethod
    def _indicator_text(cls, value: Any) -> Optional[str]:
        return _text_or_none(value)


class ExpressionSummaryDraft(WireModel):
    headline: Optional[str] = None
    energy_tone: Optional[str] = Field(default=None, alias="energyTone")
    personality_highlight: Optional[str] = Field(default=None, alias="personalityHighlight")
    confidence_modifier: Optional[float] = Field(default=None, alias="confidenceModifier")

    @field_validator("headline", "energy_tone", "personality_highlight", mode="before")
    @classmethod
    def _summary_text(cls, value: Any) -> Optional[str]:
        return _text_or_none(value)

    @field_validator("confidence_modifier", mode="before")
    @classmethod
    def _modifier_number(cls, value: Any) -> Optional[float]:
        if isinstance(value, bool):
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None


class ManifestingDraft(WireModel):
    career: Optional[List[Optional[PointDraft]]] = Field(default=None, alias="pekerjaanKarir")
    future: Optional[List[Optional[PointDraft]]] = Field(default=None, alias="masaDepan")

    @field_validator("career", "future", mode="before")
    @classmethod
    def _points(cls, value: Any) -> Optional[List[BaseModel]]:
        return _valid_items(value, PointDraft)


class PrimaryMajorDraft(WireModel):
    code: Optional[str] = Field(default=None, alias="kode")
    name: Optional[str] = Field(default=None, alias="nama")
    reasons: Optional[List[Optional[PointDraft]]] = Field(default=None, alias="alasan")
    focus_step: Optional[str] = Field(default=None, alias="langkahFokus")
    habits: Optional[List[Optional[str]]] = Field(default=None, alias="kebiasaanPendukung")

    @field_validator("code", "name", "focus_step", mode="before")
    @classmethod
    def _major_text(cls, value: Any) -> Optional[str]:
        return _text_or_none(value)

    @field_validator("reasons", mode="before")
    @classmethod
    def _reasons(cls, value: Any) -> Optional[List[BaseModel]]:
        return _valid_items(value, PointDraft)

    @field_validator("habits", mode="before")
    @classmethod
    def _habits(cls, value: Any) -> Optional[List[str]]:
        return _text_items(value)


class AlternativeMajorDraft(WireModel):
    code: Optional[str] = Field(default=None, alias="kode")
    name: Optional[str] = Field(default=None, alias="nama")
    note: Optional[str] = Field(default=None, alias="catatan")


class RecommendationDraft(WireModel):
    primary: Optional[PrimaryMajorDraft] = Field(default=None, alias="utama")
    alternatives: Optional[List[Optional[AlternativeMajorDraft]]] = Field(default=None, alias="alternatif")

    @field_validator("alternatives", mode="before")
    @classmethod
    def _alternatives(cls, value: Any) -> Optional[List[BaseModel]]:
        return _valid_items(value, AlternativeMajorDraft)


class NarrativeResult(WireModel):
    expression_summary: Optional[ExpressionSummaryDraft] = Field(default=None, alias="expressionSummary")
    manifesting: Optional[ManifestingDraft] = None
    recommendation: Optional[RecommendationDraft] = Field(default=None, alias="rekomendasiJurusan")
