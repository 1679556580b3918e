import pytest

from face_reading.schemas.insight_schema import ExpressionInsight, Indicator, NarrativeResult
from face_reading.services.age import build_fallback_age_insight
from face_reading.services.majors import MAJOR_CODES, MAJOR_REFERENCE_STORE_DATA
from face_reading.services.normalizer import (
    DEFAULT_ENERGY_TONE,
    DEFAULT_PERSONALITY,
    apply_confidence_modifier,
    build_analysis_payload,
)


EXPRESSION = ExpressionInsight(label="happiness", confidence=0.8, narrative="Ekspresi bahagia.")
AGE = build_fallback_age_insight(EXPRESSION)


def _build(data: dict, source: str = "ai"):
    return build_analysis_payload(NarrativeResult.model_validate(data), EXPRESSION, AGE, source)


def test_empty_result_is_filled_with_defaults():
    payload = _build({})

    assert payload.expression.headline == EXPRESSION.narrative
    assert payload.expression.energy_tone == DEFAULT_ENERGY_TONE
    assert payload.expression.personality_highlight == DEFAULT_PERSONALITY
    assert payload.expression.confidence == pytest.approx(0.8)
    assert payload.expression.base_label == "happiness"
    assert payload.expression.base_confidence == pytest.approx(0.8)

    primary = payload.recommendation.primary
    assert primary.code == "RPL"
    assert primary.name == MAJOR_REFERENCE_STORE_DATA["RPL"]["name"]
    assert primary.focus_step == MAJOR_REFERENCE_STORE_DATA["RPL"]["focus_step"]
    assert primary.reasons
    assert primary.habits
    assert [alt.code for alt in payload.recommendation.alternatives] == ["DKV", "TKJ"]

    assert payload.manifesting.career == []
    assert payload.manifesting.future == []
    assert payload.meta.source == "ai"
    assert payload.meta.cached is False


def test_points_are_trimmed_and_filtered():
    payload = _build(
        {
            "manifesting": {
                "pekerjaanKarir": [
                    {"title": "  Fokus  ", "description": " Tekun ", "indicator": "Strength"},
                    {"title": "", "description": "no title"},
                    {"title": "no description", "description": "   "},
                    None,
                    {"title": "Peluang", "description": "Coba hal baru", "indicator": "bogus"},
                ],
                "masaDepan": [{"title": "Waspada", "description": "Atur waktu", "indicator": "warning"}],
            }
        }
    )

    career = payload.manifesting.career
    assert [(p.title, p.description) for p in career] == [("Fokus", "Tekun"), ("Peluang", "Coba hal baru")]
    assert career[0].indicator is Indicator.STRENGTH
    assert career[1].indicator is Indicator.OPPORTUNITY
    assert payload.manifesting.future[0].indicator is Indicator.WARNING


def test_every_track_appears_exactly_once():
    payload = _build(
        {
            "rekomendasiJurusan": {
                "utama": {"kode": "dkv", "nama": "DKV Kreatif"},
                "alternatif": [
                    {"kode": "DKV", "nama": "dup of primary", "catatan": "skip"},
                    {"kode": "XYZ", "nama": "unknown", "catatan": "skip"},
                    {"kode": "TKJ", "nama": "", "catatan": "  Catatan TKJ  "},
                    {"kode": "TKJ", "nama": "dup", "catatan": "second"},
                    {"kode": "RPL", "nama": "RPL", "catatan": ""},
                ],
            }
        }
    )

    recommendation = payload.recommendation
    assert recommendation.primary.code == "DKV"
    assert recommendation.primary.name == "DKV Kreatif"

    alternatives = recommendation.alternatives
    assert [alt.code for alt in alternatives] == ["TKJ", "RPL"]
    assert alternatives[0].note == "Catatan TKJ"
    assert alternatives[0].name == MAJOR_REFERENCE_STORE_DATA["TKJ"]["name"]
    assert alternatives[1].note == MAJOR_REFERENCE_STORE_DATA["RPL"]["note"]

    codes = [recommendation.primary.code] + [alt.code for alt in alternatives]
    assert sorted(codes) == sorted(MAJOR_CODES)


def test_unknown_primary_code_falls_back_to_default_track():
    payload = _build({"rekomendasiJurusan": {"utama": {"kode": "MM", "nama": "Multimedia", "langkahFokus": "   "}}})
    primary = payload.recommendation.primary
    assert primary.code == "RPL"
    assert primary.name == MAJOR_REFERENCE_STORE_DATA["RPL"]["name"]
    assert primary.focus_step == MAJOR_REFERENCE_STORE_DATA["RPL"]["focus_step"]


def test_primary_habits_are_sanitized():
    payload = _build(
        {"rekomendasiJurusan": {"utama": {"kode": "TKJ", "kebiasaanPendukung": [" Rakit PC ", "", None, "Baca RFC"]}}}
    )
    assert payload.recommendation.primary.habits == ["Rakit PC", "Baca RFC"]


@pytest.mark.parametrize(
    "base, modifier, expected",
    [
        (0.8, -0.15, 0.65),
        (0.8, 0.5, 1.0),
        (0.1, -0.5, 0.0),
        (0.6, None, 0.6),
    ],
)
def test_apply_confidence_modifier(base, modifier, expected):
    assert apply_confidence_modifier(base, modifier) == pytest.approx(expected)


def test_summary_fields_from_result_are_used():
    payload = _build(
        {
            "expressionSummary": {
                "headline": " Ceria ",
                "energyTone": "Hangat",
                "personalityHighlight": "Ramah",
                "confidenceModifier": 0.1,
            }
        },
        source="fallback",
    )
    assert payload.expression.headline == "Ceria"
    assert payload.expression.energy_tone == "Hangat"
    assert payload.expression.personality_highlight == "Ramah"
    assert payload.expression.confidence == pytest.approx(0.9)
    assert payload.meta.source == "fallback"


def test_wire_aliases():
    body = _build({}).model_dump(by_alias=True)
    assert set(body) == {"expression", "age", "manifesting", "rekomendasiJurusan", "meta"}
    assert "energyTone" in body["expression"]
    assert "baseLabel" in body["expression"]
    assert set(body["manifesting"]) == {"pekerjaanKarir", "masaDepan"}
    assert set(body["rekomendasiJurusan"]) == {"utama", "alternatif"}
    assert set(body["rekomendasiJurusan"]["utama"]) == {"kode", "nama", "alasan", "langkahFokus", "kebiasaanPendukung"}
