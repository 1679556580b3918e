import json
from types import SimpleNamespace

import pytest
import requests

from face_reading.core.errors import NarrativeGenerationError
from face_reading.schemas.insight_schema import ExpressionInsight
from face_reading.services.adapters import narrative_gemini_adapter, narrative_together_adapter
from face_reading.services.adapters.narrative_adapter import (
    NarrativeContext,
    parse_narrative_text,
    strip_code_fences,
)
from face_reading.services.adapters.narrative_gemini_adapter import NarrativeGeminiAdapter
from face_reading.services.adapters.narrative_together_adapter import (
    NarrativeTogetherAdapter,
    describe_error_response,
)
from face_reading.services.age import build_fallback_age_insight

GOOD_OUTPUT = {
    "expressionSummary": {"headline": "Ceria", "energyTone": "Hangat", "confidenceModifier": 0.05},
    "manifesting": {"pekerjaanKarir": [{"title": "A", "description": "B", "indicator": "strength"}]},
    "rekomendasiJurusan": {"utama": {"kode": "DKV", "nama": "Desain"}},
}


class DummyResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON")
        return self._payload


def _context() -> NarrativeContext:
    expression = ExpressionInsight(label="happiness", confidence=0.9, narrative="Bahagia.")
    return NarrativeContext(
        expression=expression,
        age=build_fallback_age_insight(expression),
        image_hint="iVBORw0KGgo" * 10,
    )


def _completion(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences("```\n[]\n```") == "[]"


def test_parse_narrative_text_accepts_fenced_json():
    result = parse_narrative_text("```json\n" + json.dumps(GOOD_OUTPUT) + "\n```")
    assert result.expression_summary.energy_tone == "Hangat"
    assert result.recommendation.primary.code == "DKV"


@pytest.mark.parametrize(
    "raw, reason",
    [
        ("", "narrative_empty"),
        ("```json\n```", "narrative_empty"),
        ("Maaf, saya tidak bisa.", "narrative_parse"),
        ("[1, 2, 3]", "narrative_schema"),
        ('{"expressionSummary": "not an object"}', "narrative_schema"),
    ],
)
def test_parse_narrative_text_failures(raw, reason):
    with pytest.raises(NarrativeGenerationError) as excinfo:
        parse_narrative_text(raw)
    assert excinfo.value.reason == reason


def test_parse_narrative_text_drops_invalid_list_entries():
    raw = json.dumps(
        {
            "expressionSummary": {"headline": 7, "energyTone": "Hangat", "confidenceModifier": "n/a"},
            "manifesting": {
                "pekerjaanKarir": [{"title": "Kreatif", "description": "Suka mencoba"}, "stray string entry"],
                "masaDepan": [
                    {"title": 2030, "description": "numeric title"},
                    {"title": "A", "description": "B", "indicator": 3},
                ],
            },
            "rekomendasiJurusan": {
                "utama": {"kode": "TKJ", "alasan": "not a list", "kebiasaanPendukung": ["Rakit PC", 5, None]},
                "alternatif": [{"kode": "RPL", "catatan": "Bangun aplikasi"}, 42],
            },
        }
    )

    result = parse_narrative_text(raw)

    assert result.expression_summary.headline is None
    assert result.expression_summary.energy_tone == "Hangat"
    assert result.expression_summary.confidence_modifier is None
    assert [p.title for p in result.manifesting.career] == ["Kreatif"]
    assert [p.title for p in result.manifesting.future] == ["A"]
    assert result.manifesting.future[0].indicator is None
    primary = result.recommendation.primary
    assert primary.code == "TKJ"
    assert primary.reasons is None
    assert primary.habits == ["Rakit PC"]
    assert [alt.code for alt in result.recommendation.alternatives] == ["RPL"]


def test_describe_error_response():
    assert describe_error_response(401, '{"error": {"message": "Invalid API key"}}') == "Invalid API key"
    assert describe_error_response(400, '{"message": "Bad model"}') == "Bad model"
    assert describe_error_response(500, '{"detail": "x"}') == "Together API error (500)"
    assert describe_error_response(502, "<html>Bad Gateway</html>") == "Together API error (502): <html>Bad Gateway</html>"
    assert describe_error_response(503, "") == "Together API error (503)"


def test_together_request_body():
    adapter = NarrativeTogetherAdapter("secret", model="m", max_tokens=700, temperature=0.7, top_p=0.9)
    body = adapter.build_request_body(_context())

    assert body["model"] == "m"
    assert body["max_tokens"] == 700
    assert [m["role"] for m in body["messages"]] == ["system", "user"]
    user_prompt = body["messages"][1]["content"]
    assert "happiness" in user_prompt
    assert ("iVBORw0KGgo" * 10)[:64] in user_prompt
    assert ("iVBORw0KGgo" * 10)[:65] not in user_prompt


def test_together_generate_success(monkeypatch):
    calls = []
    content = "```json\n" + json.dumps(GOOD_OUTPUT) + "\n```"

    def fake_post(url, **kwargs):
        calls.append(SimpleNamespace(url=url, **kwargs))
        return DummyResponse(payload=_completion(content))

    monkeypatch.setattr(narrative_together_adapter.requests, "post", fake_post)
    adapter = NarrativeTogetherAdapter("secret", url="http://together.test/v1/chat/completions", timeout=5)

    result = adapter.generate(_context())

    assert result.recommendation.primary.code == "DKV"
    assert calls[0].url == "http://together.test/v1/chat/completions"
    assert calls[0].headers["Authorization"] == "Bearer secret"
    assert calls[0].timeout == 5


def test_together_non_2xx_raises_with_decoded_message(monkeypatch):
    monkeypatch.setattr(
        narrative_together_adapter.requests,
        "post",
        lambda *a, **k: DummyResponse(429, {"error": {"message": "Rate limit reached"}}),
    )
    with pytest.raises(NarrativeGenerationError) as excinfo:
        NarrativeTogetherAdapter("secret").generate(_context())
    assert excinfo.value.reason == "narrative_http_status"
    assert str(excinfo.value) == "Rate limit reached"


def test_together_transport_error(monkeypatch):
    def boom(*args, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(narrative_together_adapter.requests, "post", boom)
    with pytest.raises(NarrativeGenerationError) as excinfo:
        NarrativeTogetherAdapter("secret").generate(_context())
    assert excinfo.value.reason == "narrative_transport"


def test_together_missing_content_is_empty(monkeypatch):
    monkeypatch.setattr(
        narrative_together_adapter.requests, "post", lambda *a, **k: DummyResponse(payload={"choices": []})
    )
    with pytest.raises(NarrativeGenerationError) as excinfo:
        NarrativeTogetherAdapter("secret").generate(_context())
    assert excinfo.value.reason == "narrative_empty"


def test_together_non_json_envelope(monkeypatch):
    monkeypatch.setattr(
        narrative_together_adapter.requests, "post", lambda *a, **k: DummyResponse(200, None, text="<html/>")
    )
    with pytest.raises(NarrativeGenerationError) as excinfo:
        NarrativeTogetherAdapter("secret").generate(_context())
    assert excinfo.value.reason == "narrative_parse"


class FakeGeminiModels:
    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = []

    def generate_content(self, model, contents, config):
        self.calls.append(SimpleNamespace(model=model, contents=contents, config=config))
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return SimpleNamespace(text=self.outcome)


def _install_fake_gemini(monkeypatch, outcome) -> FakeGeminiModels:
    models = FakeGeminiModels(outcome)

    def fake_client(api_key=None, http_options=None):
        return SimpleNamespace(models=models)

    monkeypatch.setattr(narrative_gemini_adapter.genai, "Client", fake_client)
    return models


def test_gemini_requires_api_key():
    with pytest.raises(ValueError):
        NarrativeGeminiAdapter("")


def test_gemini_generate_success(monkeypatch):
    models = _install_fake_gemini(monkeypatch, json.dumps(GOOD_OUTPUT))
    adapter = NarrativeGeminiAdapter("key", model_name="gemini-test")

    result = adapter.generate(_context())

    assert result.expression_summary.headline == "Ceria"
    assert models.calls[0].model == "gemini-test"


def test_gemini_upstream_error(monkeypatch):
    _install_fake_gemini(monkeypatch, RuntimeError("quota exceeded"))
    with pytest.raises(NarrativeGenerationError) as excinfo:
        NarrativeGeminiAdapter("key").generate(_context())
    assert excinfo.value.reason == "narrative_upstream"


def test_gemini_empty_text(monkeypatch):
    _install_fake_gemini(monkeypatch, None)
    with pytest.raises(NarrativeGenerationError) as excinfo:
        NarrativeGeminiAdapter("key").generate(_context())
    assert excinfo.value.reason == "narrative_empty"
