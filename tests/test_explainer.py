"""
Unit tests for the explanation requester.
Validates the request contract, response validation and the fallback path.
"""
import json

import pytest
import requests

from fd_calc.data_models import CompoundingFrequency, FDParameters
from fd_calc.engine import compute_maturity
from fd_calc.explainer import (
    FALLBACK_MESSAGE,
    ExplainerConfig,
    ExplanationClient,
    ExplanationError,
    ExplanationResponse,
    build_request,
    explain_results,
    parse_response,
    render_prompt,
    request_explanation,
)


@pytest.fixture()
def params() -> FDParameters:
    return FDParameters(100000, 5, 6.5, CompoundingFrequency.MONTHLY)


@pytest.fixture()
def result(params):
    return compute_maturity(params)


class FakeResponse:
    def __init__(self, body, status_code: int = 200) -> None:
        self._body = body
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class FakeSession:
    def __init__(self, response=None, exc=None) -> None:
        self.response = response
        self.exc = exc
        self.calls = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if self.exc is not None:
            raise self.exc
        return self.response


def chat_body(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def make_client(session: FakeSession, api_key: str = "test-key") -> ExplanationClient:
    config = ExplainerConfig(api_url="https://llm.example/v1/chat/completions", api_key=api_key, model="test-model", timeout=3.0)
    return ExplanationClient(config, session=session)


class StaticExplainer:
    def __init__(self, text: str) -> None:
        self.text = text
        self.requests = []

    def explain(self, request):
        self.requests.append(request)
        return ExplanationResponse(explanation=self.text)


class FailingExplainer:
    def explain(self, request):
        raise ExplanationError("service down")


def test_request_carries_all_six_fields(params, result):
    request = build_request(params, result)

    assert request.model_dump() == {
        "principal": 100000,
        "tenure": 5,
        "interestRate": 6.5,
        "compoundingFrequency": CompoundingFrequency.MONTHLY,
        "maturityAmount": result.maturity_amount,
        "totalInterest": result.total_interest,
    }


def test_prompt_embeds_request_fields(params, result):
    prompt = render_prompt(build_request(params, result))

    assert "Principal Amount: 100000" in prompt
    assert "Tenure (Years): 5" in prompt
    assert "Interest Rate: 6.5" in prompt
    assert "Compounding Frequency: Monthly" in prompt
    assert f"Maturity Amount: {result.maturity_amount}" in prompt
    assert f"Total Interest Earned: {result.total_interest}" in prompt
    assert '"explanation"' in prompt


def test_successful_explanation(params, result):
    explainer = StaticExplainer("Your money grew because interest compounds monthly.")

    outcome = explain_results(params, result, explainer)

    assert outcome.ok
    assert outcome.error is None
    assert outcome.text == "Your money grew because interest compounds monthly."
    assert explainer.requests[0].maturityAmount == result.maturity_amount


def test_failure_returns_fallback(params, result):
    outcome = explain_results(params, result, FailingExplainer())

    assert not outcome.ok
    assert outcome.explanation is None
    assert outcome.text == FALLBACK_MESSAGE
    assert "service down" in outcome.error


def test_unexpected_exception_returns_fallback(params, result):
    class Broken:
        def explain(self, request):
            raise KeyError("boom")

    assert request_explanation(params, result, Broken()) == FALLBACK_MESSAGE


def test_fallback_message_text():
    assert FALLBACK_MESSAGE == "Could not generate an explanation at this time. Please try again later."


def test_client_posts_chat_completion(params, result):
    session = FakeSession(FakeResponse(chat_body(json.dumps({"explanation": "Plain words."}))))
    client = make_client(session)

    response = client.explain(build_request(params, result))

    assert response.explanation == "Plain words."
    call = session.calls[0]
    assert call["url"] == "https://llm.example/v1/chat/completions"
    assert call["timeout"] == 3.0
    assert call["headers"]["Authorization"] == "Bearer test-key"
    assert call["json"]["model"] == "test-model"
    assert call["json"]["response_format"] == {"type": "json_object"}
    assert "Compounding Frequency: Monthly" in call["json"]["messages"][0]["content"]


def test_client_end_to_end_success(params, result):
    session = FakeSession(FakeResponse(chat_body('{"explanation": "Good deposit."}')))

    assert request_explanation(params, result, make_client(session)) == "Good deposit."


@pytest.mark.parametrize(
    "session",
    [
        FakeSession(exc=requests.Timeout("read timed out")),
        FakeSession(exc=requests.ConnectionError("refused")),
        FakeSession(FakeResponse({"error": "rate limited"}, status_code=429)),
        FakeSession(FakeResponse(ValueError("not json"))),
        FakeSession(FakeResponse({"choices": []})),
        FakeSession(FakeResponse(chat_body(None))),
        FakeSession(FakeResponse(chat_body("not json at all"))),
        FakeSession(FakeResponse(chat_body('{"summary": "wrong key"}'))),
        FakeSession(FakeResponse(chat_body('{"explanation": 42}'))),
    ],
)
def test_client_failures_degrade_to_fallback(params, result, session):
    outcome = explain_results(params, result, make_client(session))

    assert not outcome.ok
    assert outcome.text == FALLBACK_MESSAGE


def test_client_failures_raise_typed_error(params, result):
    client = make_client(FakeSession(exc=requests.Timeout("slow")))

    with pytest.raises(ExplanationError, match="timed out"):
        client.explain(build_request(params, result))


def test_missing_api_key_skips_network(params, result):
    session = FakeSession(FakeResponse(chat_body('{"explanation": "unused"}')))

    outcome = explain_results(params, result, make_client(session, api_key=""))

    assert outcome.text == FALLBACK_MESSAGE
    assert session.calls == []


def test_parse_response_validates_schema():
    assert parse_response('{"explanation": "ok"}').explanation == "ok"
    with pytest.raises(ExplanationError):
        parse_response("{}")


def test_config_from_env():
    config = ExplainerConfig.from_env(
        {
            "FD_EXPLAINER_API_URL": "http://localhost:11434/v1/chat/completions",
            "OPENAI_API_KEY": "sk-fallback",
            "FD_EXPLAINER_MODEL": "llama3",
            "FD_EXPLAINER_TIMEOUT": "7.5",
        }
    )

    assert config.api_url == "http://localhost:11434/v1/chat/completions"
    assert config.api_key == "sk-fallback"
    assert config.model == "llama3"
    assert config.timeout == 7.5


def test_config_defaults_and_bad_timeout():
    config = ExplainerConfig.from_env({"FD_EXPLAINER_API_KEY": "k", "FD_EXPLAINER_TIMEOUT": "soon"})

    assert config.api_key == "k"
    assert config.model == "gpt-4o-mini"
    assert config.timeout == 15.0
