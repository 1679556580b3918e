# face_reading/services/age.py
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel

from face_reading.schemas.insight_schema import AgeInsight, AgeRange, ExpressionInsight
from face_reading.services.expression import clamp, to_finite_float

_INTEGER_PATTERN = re.compile(r"\d+")


def round_half_up(value: float) -> int:
    # round() is banker's rounding; 28.5 must become 29.
    return int(math.floor(value + 0.5))


# --- Age stage descriptors ---

class AgeStage(BaseModel):
    max: float
    label: str
    narrative: str
    prompt: str


AGE_STAGE_DESCRIPTORS: List[AgeStage] = [
    AgeStage(
        max=12,
        label="Pra-remaja",
        narrative="Fokus pada kebiasaan belajar ringan, eksplorasi minat, dan pendampingan orang tua agar tetap menyenangkan.",
        prompt="pra-remaja yang membutuhkan aktivitas eksploratif dan pendampingan intensif",
    ),
    AgeStage(
        max=15,
        label="Remaja awal",
        narrative="Sedang memasuki masa SMP; bekali dengan dasar literasi digital, disiplin belajar, dan proyek kecil yang menyenangkan.",
        prompt="pelajar SMP yang baru mengeksplorasi minat jurusan",
    ),
    AgeStage(
        max=18,
        label="Remaja akhir",
        narrative="Usia SMA/SMK; saat yang tepat untuk menguatkan portofolio, pengalaman organisasi, dan memilih jalur lanjutan.",
        prompt="pelajar SMA/SMK yang bersiap memilih jurusan lanjutan",
    ),
    AgeStage(
        max=24,
        label="Dewasa muda",
        narrative="Rentang kuliah awal; arahkan pada pengalaman magang, proyek penelitian, dan perluasan jejaring profesional.",
        prompt="mahasiswa awal yang menguatkan fondasi karier",
    ),
    AgeStage(
        max=35,
        label="Profesional awal",
        narrative="Mulai meniti karier; fokus pada spesialisasi skill, sertifikasi, dan kepemimpinan proyek.",
        prompt="profesional muda yang ingin memantapkan spesialisasi",
    ),
    AgeStage(
        max=50,
        label="Profesional madya",
        narrative="Tahap mengembangkan peran strategis; perkuat mentoring, manajemen tim, dan keseimbangan hidup.",
        prompt="profesional madya yang ingin memperluas peran strategis",
    ),
    AgeStage(
        max=math.inf,
        label="Mentor berpengalaman",
        narrative="Pengalaman matang; saatnya membagikan wawasan, menjadi mentor, dan merancang legacy karya.",
        prompt="mentor berpengalaman yang membina generasi berikutnya",
    ),
]

DEFAULT_STAGE_DESCRIPTOR = AgeStage(
    max=math.inf,
    label="Rentang belum jelas",
    narrative=(
        "AI membaca sinyal usia yang unik, jadi tebakan dibuat santai. Jika ingin hasil lebih tajam, "
        "boleh coba ulang foto dengan pencahayaan merata."
    ),
    prompt="pelajar dengan usia visual yang belum terbaca jelas",
)


def describe_age_stage(age: Optional[float]) -> AgeStage:
    if age is None or not math.isfinite(age):
        return DEFAULT_STAGE_DESCRIPTOR
    for stage in AGE_STAGE_DESCRIPTORS:
        if age <= stage.max:
            return stage
    return AGE_STAGE_DESCRIPTORS[-1]


def stage_reference_age(insight: AgeInsight) -> Optional[int]:
    if insight.estimated is not None:
        return insight.estimated
    if insight.range.min is not None:
        return insight.range.min
    return insight.range.max


# --- Label parsing ---

def parse_age_label_range(label: str) -> AgeRange:
    """
    "25-32" -> (25, 32), "60+" -> (60, None), "30" -> (30, 30), "n/a" -> (None, None).
    With more than two numbers only the first two are used.
    """
    if not label:
        return AgeRange()
    numbers = [int(match) for match in _INTEGER_PATTERN.findall(label)]
    if not numbers:
        return AgeRange()
    if len(numbers) == 1:
        value = numbers[0]
        return AgeRange(min=value, max=None if "+" in label else value)
    first, second = numbers[0], numbers[1]
    return AgeRange(min=min(first, second), max=max(first, second))


def compute_estimated_age(age_range: AgeRange, fallback: Optional[float] = None) -> Optional[int]:
    if age_range.min is not None and age_range.max is not None:
        return round_half_up((age_range.min + age_range.max) / 2)
    if age_range.min is not None:
        return age_range.min
    if age_range.max is not None:
        return age_range.max
    if fallback is not None and math.isfinite(fallback):
        return round_half_up(fallback)
    return None


def format_age_range_text(age_range: AgeRange, estimated: Optional[int]) -> str:
    if age_range.min is not None and age_range.max is not None:
        return f"{age_range.min}–{age_range.max} tahun"
    if age_range.min is not None:
        return f"{age_range.min}+ tahun"
    if estimated is not None:
        return f"sekitar {estimated} tahun"
    return ""


def build_age_headline(age_range: AgeRange, estimated: Optional[int]) -> str:
    formatted = format_age_range_text(age_range, estimated)
    return f"Perkiraan usia {formatted}" if formatted else "Perkiraan usia belum terbaca"


def build_age_narrative(age_range: AgeRange, estimated: Optional[int], confidence: float) -> str:
    reference = estimated
    if reference is None:
        reference = age_range.min if age_range.min is not None else age_range.max
    descriptor = describe_age_stage(reference)
    range_text = format_age_range_text(age_range, estimated)
    if confidence > 0:
        confidence_text = f"Keyakinan model sekitar {confidence * 100:.0f}%."
    else:
        confidence_text = "Model belum yakin dengan hasil ini."

    if range_text:
        return (
            f"AI memperkirakan usia visual berada di {range_text}. {descriptor.narrative} "
            f"{confidence_text} Ingat, tebakan ini hanya referensi santai dan bukan identitas resmi."
        )
    return (
        f"{descriptor.narrative} {confidence_text} "
        "Ulangi foto dengan pencahayaan lebih merata agar AI dapat membaca usia lebih baik."
    )


# --- Fallback presets (keyed by expression label) ---

FALLBACK_AGE_PRESETS: Dict[str, Dict[str, Any]] = {
    "happiness": {"min": 16, "max": 20, "estimated": 18, "confidence": 0.38, "label": "16-20"},
    "surprise": {"min": 16, "max": 19, "estimated": 17, "confidence": 0.36, "label": "16-19"},
    "sadness": {"min": 17, "max": 21, "estimated": 19, "confidence": 0.34, "label": "17-21"},
    "anger": {"min": 18, "max": 24, "estimated": 21, "confidence": 0.33, "label": "18-24"},
    "disgust": {"min": 17, "max": 23, "estimated": 20, "confidence": 0.33, "label": "17-23"},
    "fear": {"min": 16, "max": 22, "estimated": 19, "confidence": 0.32, "label": "16-22"},
    "contempt": {"min": 18, "max": 24, "estimated": 21, "confidence": 0.35, "label": "18-24"},
    "neutral": {"min": 16, "max": 20, "estimated": 18, "confidence": 0.35, "label": "16-20"},
    "unknown": {"min": 16, "max": 19, "estimated": 17, "confidence": 0.33, "label": "16-19"},
    "default": {"min": 16, "max": 19, "estimated": 17, "confidence": 0.34, "label": "16-19"},
}


def build_fallback_age_insight(expression: Optional[ExpressionInsight] = None) -> AgeInsight:
    key = expression.label.lower() if expression and expression.label else "default"
    preset = FALLBACK_AGE_PRESETS.get(key, FALLBACK_AGE_PRESETS["default"])
    age_range = AgeRange(min=preset["min"], max=preset["max"])
    estimated = preset["estimated"]
    confidence = clamp(preset["confidence"])
    return AgeInsight(
        label=preset["label"],
        confidence=confidence,
        estimated=estimated,
        range=age_range,
        headline=build_age_headline(age_range, estimated),
        narrative=build_age_narrative(age_range, estimated, confidence),
    )


# --- Classifier response shapes ---

class AgeShape(str, Enum):
    CANDIDATES = "candidates"              # [{label, score}, ...]
    AGE_PREDICTIONS = "age_predictions"    # {"age_predictions": [{label|age, score|confidence}, ...]}
    DIRECT_AGE = "direct_age"              # {"age": 27, "confidence": ...}
    BARE_LABEL = "bare_label"              # {"label": "20-29", "score": ...}


@dataclass(frozen=True)
class AgeCandidate:
    label: str
    score: Optional[float]
    direct_age: Optional[float] = None


def _is_number(value: Any) -> bool:
    return to_finite_float(value) is not None and not isinstance(value, str)


def detect_age_shape(raw: Any) -> Optional[AgeShape]:
    if isinstance(raw, list):
        return AgeShape.CANDIDATES
    if not isinstance(raw, dict):
        return None
    if isinstance(raw.get("age_predictions"), list):
        return AgeShape.AGE_PREDICTIONS
    if _is_number(raw.get("age")):
        return AgeShape.DIRECT_AGE
    if isinstance(raw.get("label"), str):
        return AgeShape.BARE_LABEL
    return None


def _first_score(item: Dict[str, Any], *keys: str) -> Optional[float]:
    for key in keys:
        if item.get(key) is not None:
            return to_finite_float(item.get(key))
    return None


def _top_item(items: List[Any]) -> Optional[Any]:
    if not items:
        return None

    def score_of(item: Any) -> float:
        if isinstance(item, dict):
            return to_finite_float(item.get("score")) or 0.0
        return 0.0

    return sorted(items, key=score_of, reverse=True)[0]


def _age_label(value: float) -> str:
    return str(round_half_up(value))


def _extract_candidates(raw: List[Any]) -> Optional[AgeCandidate]:
    top = _top_item(raw)
    if top is None:
        return None
    item = top if isinstance(top, dict) else {}
    label = item.get("label")
    score = _first_score(item, "score")
    return AgeCandidate(
        label=str(label) if label is not None else "unknown",
        score=0.35 if score is None else score,
    )


def _extract_age_predictions(raw: Dict[str, Any]) -> Optional[AgeCandidate]:
    top = _top_item(raw["age_predictions"])
    if top is None:
        return None
    item = top if isinstance(top, dict) else {}
    if isinstance(item.get("label"), str):
        label = item["label"]
    elif _is_number(item.get("age")):
        label = _age_label(float(item["age"]))
    else:
        label = "unknown"
    score = _first_score(item, "score", "confidence")
    return AgeCandidate(label=label, score=0.3 if score is None else score)


def _extract_direct_age(raw: Dict[str, Any]) -> Optional[AgeCandidate]:
    age = float(raw["age"])
    score = _first_score(raw, "confidence", "score")
    return AgeCandidate(label=_age_label(age), score=0.55 if score is None else score, direct_age=age)


def _extract_bare_label(raw: Dict[str, Any]) -> Optional[AgeCandidate]:
    score = _first_score(raw, "score", "confidence")
    return AgeCandidate(label=raw["label"], score=0.4 if score is None else score)


_EXTRACTORS: Dict[AgeShape, Callable[[Any], Optional[AgeCandidate]]] = {
    AgeShape.CANDIDATES: _extract_candidates,
    AgeShape.AGE_PREDICTIONS: _extract_age_predictions,
    AgeShape.DIRECT_AGE: _extract_direct_age,
    AgeShape.BARE_LABEL: _extract_bare_label,
}


def extract_age_candidate(raw: Any) -> Optional[AgeCandidate]:
    shape = detect_age_shape(raw)
    if shape is None:
        return None
    return _EXTRACTORS[shape](raw)


def build_age_insight(raw: Any) -> Optional[AgeInsight]:
    """
    Turns an age classifier response into an AgeInsight.
    Returns None when no range and no estimate can be derived; callers then use the preset.
    """
    candidate = extract_age_candidate(raw)
    if candidate is None:
        return None

    age_range = parse_age_label_range(candidate.label)
    estimated = compute_estimated_age(age_range, candidate.direct_age)
    if age_range.min is None and age_range.max is None and estimated is None:
        return None

    confidence = clamp(candidate.score if candidate.score is not None else 0.35)
    return AgeInsight(
        label=candidate.label,
        confidence=confidence,
        estimated=estimated,
        range=age_range,
        headline=build_age_headline(age_range, estimated),
        narrative=build_age_narrative(age_range, estimated, confidence),
    )
