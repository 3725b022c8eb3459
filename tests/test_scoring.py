import json

import httpx
import pytest

from conftest import make_content
from services.advisory import scoring
from services.llm import ollama_client
from services.llm.ollama_client import LLMError
from services.llm.prompts import render_score_prompt


def test_score_assessment_parses_llm_json(monkeypatch):
    captured = {}

    def fake_generate(prompt, **kwargs):
        captured["prompt"] = prompt
        captured["kwargs"] = kwargs
        return json.dumps(
            {
                "riskScore": 71,
                "likelihoodScore": 4,
                "consequenceScore": 3,
                "recommendations": "Pair the acting second engineer with the chief.",
                "regulatoryConsiderations": "SOLAS chapter V and MPR manning requirements.",
            }
        )

    monkeypatch.setattr(scoring, "llm_generate", fake_generate)
    score = scoring.score_assessment(make_content())

    assert score.value == 71
    assert (score.likelihood, score.consequence) == (4, 3)
    assert "SOLAS" in score.regulatory_notes
    assert captured["kwargs"]["json_mode"] is True
    assert "CCGS Amundsen" in captured["prompt"]


def test_score_assessment_rejects_out_of_range_output(monkeypatch):
    bad = json.dumps({"riskScore": 140, "likelihoodScore": 9, "consequenceScore": 0})
    monkeypatch.setattr(scoring, "llm_generate", lambda prompt, **kw: bad)
    with pytest.raises(LLMError):
        scoring.score_assessment(make_content())


def test_prompt_mentions_attachments_and_imo():
    prompt = render_score_prompt(make_content(attachments=[{"name": "crew-list.pdf"}]))
    assert "IMO number: 7824534" in prompt
    assert "crew-list.pdf" in prompt


def test_generate_wraps_transport_errors(monkeypatch):
    class BoomClient:
        def __init__(self, *args, **kwargs):
            pass

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def post(self, url, json):
            raise httpx.ConnectError("connection refused")

    monkeypatch.setattr(ollama_client.httpx, "Client", BoomClient)
    with pytest.raises(LLMError):
        ollama_client.generate("hello")


def test_generate_rejects_empty_response(monkeypatch):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"response": ""}))
    real_client = httpx.Client

    monkeypatch.setattr(
        ollama_client.httpx, "Client", lambda **kw: real_client(transport=transport, **kw)
    )
    with pytest.raises(LLMError):
        ollama_client.generate("hello")
