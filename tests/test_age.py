import pytest

from face_reading.schemas.insight_schema import AgeRange, ExpressionInsight
from face_reading.services.age import (
    AgeShape,
    FALLBACK_AGE_PRESETS,
    build_age_insight,
    build_fallback_age_insight,
    compute_estimated_age,
    describe_age_stage,
    detect_age_shape,
    format_age_range_text,
    parse_age_label_range,
    round_half_up,
)


def _expression(label: str) -> ExpressionInsight:
    return ExpressionInsight(label=label, confidence=0.8, narrative="x")


@pytest.mark.parametrize(
    "label, expected",
    [
        ("25-32", (25, 32)),
        ("32-25", (25, 32)),
        ("60+", (60, None)),
        ("30", (30, 30)),
        ("n/a", (None, None)),
        ("", (None, None)),
        ("10-19-29", (10, 19)),
    ],
)
def test_parse_age_label_range(label, expected):
    parsed = parse_age_label_range(label)
    assert (parsed.min, parsed.max) == expected


def test_round_half_up_is_not_bankers_rounding():
    assert round_half_up(28.5) == 29
    assert round_half_up(18.5) == 19
    assert round_half_up(27.4) == 27


def test_compute_estimated_age():
    assert compute_estimated_age(AgeRange(min=25, max=32)) == 29
    assert compute_estimated_age(AgeRange(min=60)) == 60
    assert compute_estimated_age(AgeRange(), 27.6) == 28
    assert compute_estimated_age(AgeRange()) is None


def test_format_age_range_text():
    assert format_age_range_text(AgeRange(min=25, max=32), 29) == "25–32 tahun"
    assert format_age_range_text(AgeRange(min=60), 60) == "60+ tahun"
    assert format_age_range_text(AgeRange(), 27) == "sekitar 27 tahun"
    assert format_age_range_text(AgeRange(), None) == ""


def test_describe_age_stage_boundaries():
    assert describe_age_stage(12).label == "Pra-remaja"
    assert describe_age_stage(13).label == "Remaja awal"
    assert describe_age_stage(18).label == "Remaja akhir"
    assert describe_age_stage(35).label == "Profesional awal"
    assert describe_age_stage(90).label == "Mentor berpengalaman"
    assert describe_age_stage(None).label == "Rentang belum jelas"


def test_candidates_shape_uses_top_score():
    raw = [{"label": "20-29", "score": 0.2}, {"label": "25-32", "score": 0.7}]
    assert detect_age_shape(raw) is AgeShape.CANDIDATES

    insight = build_age_insight(raw)
    assert insight.label == "25-32"
    assert (insight.range.min, insight.range.max) == (25, 32)
    assert insight.estimated == 29
    assert insight.confidence == pytest.approx(0.7)
    assert insight.headline == "Perkiraan usia 25–32 tahun"
    assert "25–32 tahun" in insight.narrative


def test_open_ended_label():
    insight = build_age_insight([{"label": "60+", "score": 0.5}])
    assert insight.range.min == 60
    assert insight.range.max is None
    assert insight.estimated == 60
    assert insight.headline == "Perkiraan usia 60+ tahun"


def test_age_predictions_shape():
    raw = {"age_predictions": [{"age": 22.6, "confidence": 0.4}, {"label": "30-39", "score": 0.9}]}
    assert detect_age_shape(raw) is AgeShape.AGE_PREDICTIONS

    insight = build_age_insight(raw)
    assert insight.label == "30-39"
    assert insight.estimated == 35


def test_direct_age_shape():
    raw = {"age": 27.4}
    assert detect_age_shape(raw) is AgeShape.DIRECT_AGE

    insight = build_age_insight(raw)
    assert insight.label == "27"
    assert insight.estimated == 27
    assert insight.confidence == pytest.approx(0.55)


def test_bare_label_shape():
    raw = {"label": "40-49", "confidence": 0.3}
    assert detect_age_shape(raw) is AgeShape.BARE_LABEL

    insight = build_age_insight(raw)
    assert insight.estimated == 45
    assert insight.confidence == pytest.approx(0.3)


@pytest.mark.parametrize("raw", [[], {}, "text", None, [{"label": "n/a", "score": 0.9}], {"label": "unknown"}])
def test_unusable_responses_return_none(raw):
    assert build_age_insight(raw) is None


def test_fallback_preset_follows_expression():
    insight = build_fallback_age_insight(_expression("anger"))
    preset = FALLBACK_AGE_PRESETS["anger"]
    assert insight.label == preset["label"]
    assert (insight.range.min, insight.range.max) == (preset["min"], preset["max"])
    assert insight.estimated == preset["estimated"]


def test_fallback_preset_for_unknown_label_uses_default():
    insight = build_fallback_age_insight(_expression("bewildered"))
    assert insight.label == FALLBACK_AGE_PRESETS["default"]["label"]
    assert build_fallback_age_insight(None).label == FALLBACK_AGE_PRESETS["default"]["label"]
