# face_reading/schemas/face_reading_schema.py
from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import Field

from face_reading.schemas.insight_schema import AgeInsight, ManifestingPoint, WireModel


# Request body of POST /api/face-reading
# image is typed loosely so a missing / non-string value is reported as 400 by the service.
class FaceReadingRequest(WireModel):
    image: Optional[Any] = None


class ExpressionSummary(WireModel):
    headline: str
    energy_tone: str = Field(..., alias="energyTone")
    personality_highlight: str = Field(..., alias="personalityHighlight")
    confidence: float = Field(..., ge=0.0, le=1.0)
    base_label: str = Field(..., alias="baseLabel")
    base_confidence: float = Field(..., ge=0.0, le=1.0, alias="baseConfidence")


class ManifestingSection(WireModel):
    career: List[ManifestingPoint] = Field(default_factory=list, alias="pekerjaanKarir")
    future: List[ManifestingPoint] = Field(default_factory=list, alias="masaDepan")


class PrimaryMajor(WireModel):
    code: str = Field(..., alias="kode")
    name: str = Field(..., alias="nama")
    reasons: List[ManifestingPoint] = Field(default_factory=list, alias="alasan")
    focus_step: str = Field(..., alias="langkahFokus")
    habits: List[str] = Field(default_factory=list, alias="kebiasaanPendukung")


class AlternativeMajor(WireModel):
    code: str = Field(..., alias="kode")
    name: str = Field(..., alias="nama")
    note: str = Field(..., alias="catatan")


class MajorRecommendation(WireModel):
    primary: PrimaryMajor = Field(..., alias="utama")
    alternatives: List[AlternativeMajor] = Field(default_factory=list, alias="alternatif")


class AnalysisMeta(WireModel):
    source: Literal["ai", "fallback"]
    cached: bool = False


# Cached as built; only meta.cached changes on replay
class AnalysisPayload(WireModel):
    expression: ExpressionSummary
    age: AgeInsight
    manifesting: ManifestingSection
    recommendation: MajorRecommendation = Field(..., alias="rekomendasiJurusan")
    meta: AnalysisMeta


class FaceReadingResponse(AnalysisPayload):
    generated_at: str = Field(..., alias="generatedAt")


# Error body for 4xx/5xx
class ErrorResponse(WireModel):
    message: str
    error_code: str = Field(..., alias="errorCode")
