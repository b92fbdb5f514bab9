"""Plain-language explanations of deposit results.

The explanation is produced by an external text-generation service speaking the
OpenAI chat-completions protocol. A request embeds the six deposit figures in a
prompt and asks for a JSON object with a single ``explanation`` string, which is
validated with pydantic before it is returned.

``explain_results`` never raises: any failure of the service call (network
error, timeout, bad status, malformed answer, missing configuration) is logged
and reported as a failed ``ExplanationResult`` whose text is ``FALLBACK_MESSAGE``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .data_models import CompoundingFrequency, FDParameters, FDResult

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Could not generate an explanation at this time. Please try again later."

DEFAULT_API_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TIMEOUT = 15.0

PROMPT_TEMPLATE = """You are an expert financial advisor explaining Fixed Deposit (FD) results to a user in plain language.

Given the following FD details, provide a concise and easy-to-understand explanation of the key factors influencing the maturity amount and interest earned. Focus on helping the user understand the impact of each factor (principal, tenure, interest rate, compounding frequency) on the final outcome. Allow the user to run 'what if' scenarios by providing them a plain-language interpretation of their calculated results.

Principal Amount: {principal}
Tenure (Years): {tenure}
Interest Rate: {interestRate}
Compounding Frequency: {compoundingFrequency}
Maturity Amount: {maturityAmount}
Total Interest Earned: {totalInterest}

Respond with a JSON object of the form {{"explanation": "<your explanation>"}}."""


class ExplanationError(RuntimeError):
    """The explanation service could not produce a valid answer."""


class ExplanationRequest(BaseModel):
    """The six figures sent to the explanation service."""

    principal: float = Field(..., description="The principal FD amount.")
    tenure: float = Field(..., description="The tenure of the deposit in years.")
    interestRate: float = Field(..., description="The annual interest rate.")
    compoundingFrequency: CompoundingFrequency = Field(..., description="The compounding frequency.")
    maturityAmount: float = Field(..., description="The calculated maturity amount.")
    totalInterest: float = Field(..., description="The calculated total interest earned.")

    model_config = ConfigDict(frozen=True)


class ExplanationResponse(BaseModel):
    """The service's answer: one plain-language explanation."""

    explanation: str = Field(..., description="A plain language explanation of the FD results.")


@dataclass(frozen=True)
class ExplanationResult:
    """Outcome of an explanation request.

    Exactly one of ``explanation`` and ``error`` is set.
    """

    explanation: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.explanation is not None

    @property
    def text(self) -> str:
        return self.explanation if self.explanation is not None else FALLBACK_MESSAGE


@dataclass(frozen=True)
class ExplainerConfig:
    """Connection settings for the explanation service."""

    api_url: str = DEFAULT_API_URL
    api_key: str = ""
    model: str = DEFAULT_MODEL
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "ExplainerConfig":
        env = os.environ if environ is None else environ
        try:
            timeout = float(env.get("FD_EXPLAINER_TIMEOUT", DEFAULT_TIMEOUT))
        except ValueError:
            logger.warning("Ignoring invalid FD_EXPLAINER_TIMEOUT=%r", env.get("FD_EXPLAINER_TIMEOUT"))
            timeout = DEFAULT_TIMEOUT
        return cls(
            api_url=env.get("FD_EXPLAINER_API_URL", DEFAULT_API_URL),
            api_key=env.get("FD_EXPLAINER_API_KEY") or env.get("OPENAI_API_KEY", ""),
            model=env.get("FD_EXPLAINER_MODEL", DEFAULT_MODEL),
            timeout=timeout,
        )


class Explainer(Protocol):
    def explain(self, request: ExplanationRequest) -> ExplanationResponse:
        ...


def build_request(params: FDParameters, result: FDResult) -> ExplanationRequest:
    """Combine the submitted deposit and its computed figures."""
    return ExplanationRequest(
        principal=params.principal,
        tenure=params.tenure_years,
        interestRate=params.annual_rate_percent,
        compoundingFrequency=CompoundingFrequency.parse(params.compounding_frequency),
        maturityAmount=result.maturity_amount,
        totalInterest=result.total_interest,
    )


def render_prompt(request: ExplanationRequest) -> str:
    fields = request.model_dump()
    fields["compoundingFrequency"] = request.compoundingFrequency.value
    return PROMPT_TEMPLATE.format(**fields)


class ExplanationClient:
    """Blocking client for an OpenAI-compatible chat-completions endpoint."""

    def __init__(self, config: Optional[ExplainerConfig] = None, session: Optional[requests.Session] = None) -> None:
        self.config = config or ExplainerConfig.from_env()
        self._session = session or requests.Session()

    def _payload(self, request: ExplanationRequest) -> Dict[str, Any]:
        return {
            "model": self.config.model,
            "temperature": 0.2,
            "response_format": {"type": "json_object"},
            "messages": [{"role": "user", "content": render_prompt(request)}],
        }

    def explain(self, request: ExplanationRequest) -> ExplanationResponse:
        """Send one request and validate the answer.

        Raises
        ------
        ExplanationError
            If the client is not configured, the call fails or times out, or
            the answer does not match ``ExplanationResponse``.
        """
        if not self.config.api_key:
            raise ExplanationError("No API key configured for the explanation service")
        try:
            response = self._session.post(
                self.config.api_url,
                json=self._payload(request),
                headers={"Authorization": f"Bearer {self.config.api_key}"},
                timeout=self.config.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except requests.Timeout as exc:
            raise ExplanationError(f"Explanation service timed out after {self.config.timeout}s") from exc
        except (requests.RequestException, ValueError) as exc:
            raise ExplanationError(f"Explanation service call failed: {exc}") from exc

        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ExplanationError("Explanation service returned an unexpected payload") from exc
        if not isinstance(content, str):
            raise ExplanationError("Explanation service returned no message content")
        return parse_response(content)


def parse_response(content: str) -> ExplanationResponse:
    """Validate the raw JSON text returned by the service."""
    try:
        return ExplanationResponse.model_validate_json(content)
    except ValidationError as exc:
        raise ExplanationError(f"Malformed explanation: {exc.errors()}") from exc


def explain_results(
    params: FDParameters, result: FDResult, client: Optional[Explainer] = None
) -> ExplanationResult:
    """Request an explanation of ``result``; failures degrade to the fallback."""
    request = build_request(params, result)
    client = client or ExplanationClient()
    try:
        response = client.explain(request)
    except Exception as exc:
        logger.warning("AI explanation failed: %s", exc, exc_info=True)
        return ExplanationResult(error=str(exc))
    logger.info("Explanation received (%d characters)", len(response.explanation))
    return ExplanationResult(explanation=response.explanation)


def request_explanation(
    params: FDParameters, result: FDResult, client: Optional[Explainer] = None
) -> str:
    """Return the explanation text, or ``FALLBACK_MESSAGE`` if none is available."""
    return explain_results(params, result, client).text

