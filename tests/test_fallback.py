import pytest

from face_reading.schemas.insight_schema import ExpressionInsight
from face_reading.services.fallback import (
    DEFAULT_CONFIDENCE_MODIFIER,
    FALLBACK_TEMPLATE_STORE_DATA,
    build_fallback_analysis,
    get_fallback_template,
)
from face_reading.services.majors import MAJOR_CODES


def _expression(label: str) -> ExpressionInsight:
    return ExpressionInsight(label=label, confidence=0.7, narrative=f"narrative for {label}")


LABELS = list(FALLBACK_TEMPLATE_STORE_DATA.keys()) + ["", "bewildered", "HAPPINESS"]


@pytest.mark.parametrize("label", LABELS)
def test_every_label_builds_a_complete_result(label):
    result = build_fallback_analysis(_expression(label))

    summary = result.expression_summary
    assert summary.headline == f"narrative for {label}"
    assert summary.energy_tone
    assert summary.personality_highlight

    assert result.manifesting.career
    assert result.manifesting.future

    primary = result.recommendation.primary
    assert primary.code in MAJOR_CODES
    assert primary.name
    assert primary.reasons
    assert primary.focus_step
    assert primary.habits

    alternative_codes = [alt.code for alt in result.recommendation.alternatives]
    assert sorted(alternative_codes + [primary.code]) == sorted(MAJOR_CODES)
    assert all(alt.note for alt in result.recommendation.alternatives)


def test_unknown_label_uses_default_template():
    assert get_fallback_template("bewildered") is get_fallback_template("default")
    assert get_fallback_template(None) is get_fallback_template("default")
    assert get_fallback_template("Anger") is get_fallback_template("anger")


def test_default_template_recommends_dkv_with_template_notes():
    result = build_fallback_analysis(_expression("unknown"))
    recommendation = result.recommendation
    assert recommendation.primary.code == "DKV"

    notes = {alt.code: alt.note for alt in recommendation.alternatives}
    assert notes["RPL"] == FALLBACK_TEMPLATE_STORE_DATA["default"]["alternative_notes"]["RPL"]


def test_confidence_modifier_defaults_when_template_has_none():
    for label, data in FALLBACK_TEMPLATE_STORE_DATA.items():
        result = build_fallback_analysis(_expression(label))
        expected = data.get("confidence_modifier", DEFAULT_CONFIDENCE_MODIFIER)
        assert result.expression_summary.confidence_modifier == pytest.approx(expected)
