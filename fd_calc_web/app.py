import os
from http import HTTPStatus

from flask import Flask, jsonify, render_template, request

from fd_calc.data_models import CompoundingFrequency, FDParameters
from fd_calc.engine import FDValidationError, compute_maturity, validate_parameters
from fd_calc.explainer import ExplanationClient, ExplainerConfig, explain_results
from fd_calc.formatter import result_to_dict
from fd_calc.utils import configure_logging, format_currency, parse_amount, parse_number, parse_percent

configure_logging(os.environ.get("FD_LOG_LEVEL", "INFO"))

app = Flask(__name__)
app.config["ASSET_VERSION"] = os.environ.get("ASSET_VERSION", "1")
app.config["EXPLAINER_CONFIG"] = ExplainerConfig.from_env()
# Set to an object with an ``explain`` method to replace the HTTP client.
app.config["EXPLAINER"] = None

DEFAULT_FORM = {
    "principal": "100000",
    "tenure": "5",
    "interest_rate": "6.5",
    "compounding_frequency": CompoundingFrequency.ANNUALLY.value,
}


def _form_to_parameters(form) -> FDParameters:
    """Parse and validate the four form fields.

    Every field is checked so that all problems can be shown next to their
    inputs at once.
    """
    errors = {}
    values = {}
    for field, parser in (("principal", parse_amount), ("tenure", parse_number), ("interest_rate", parse_percent)):
        raw = str(form.get(field, "")).strip()
        try:
            values[field] = parser(raw)
        except ValueError:
            errors[field] = "Please enter a valid number."
    try:
        frequency = CompoundingFrequency.parse(form.get("compounding_frequency", DEFAULT_FORM["compounding_frequency"]))
    except ValueError:
        errors["compounding_frequency"] = "Please choose a valid compounding frequency."
        frequency = CompoundingFrequency.ANNUALLY

    params = FDParameters(
        principal=values.get("principal", float("nan")),
        tenure_years=values.get("tenure", float("nan")),
        annual_rate_percent=values.get("interest_rate", float("nan")),
        compounding_frequency=frequency,
    )
    try:
        validate_parameters(params)
    except FDValidationError as exc:
        for field, message in exc.errors.items():
            errors.setdefault(field, message)
    if errors:
        raise FDValidationError(errors)
    return params


def _explainer():
    """Return the explanation client for the current request.

    A fresh client is built per request so that worker threads never share a
    ``requests.Session``.
    """
    return app.config["EXPLAINER"] or ExplanationClient(app.config["EXPLAINER_CONFIG"])


def _run_calculation(form):
    params = _form_to_parameters(form)
    result = compute_maturity(params)
    explanation = explain_results(params, result, _explainer())
    return params, result, explanation


@app.route("/", methods=["GET", "POST"])
def index():
    form_values = dict(DEFAULT_FORM)
    errors = {}
    result = None
    explanation = None

    if request.method == "POST":
        form_values.update({key: request.form.get(key, "") for key in DEFAULT_FORM})
        try:
            _, result, explanation = _run_calculation(request.form)
        except FDValidationError as exc:
            errors = exc.errors

    return render_template(
        "index.html",
        form=form_values,
        errors=errors,
        frequencies=[f.value for f in CompoundingFrequency],
        maturity_amount=format_currency(result.maturity_amount) if result else None,
        total_interest=format_currency(result.total_interest) if result else None,
        explanation=explanation.text if explanation else None,
        explanation_ok=explanation.ok if explanation else None,
        asset_version=app.config["ASSET_VERSION"],
    )


@app.get("/api/ping")
def ping():
    return jsonify({"message": "pong"})


@app.post("/api/calculate")
def calculate():
    """Return the computed figures and explanation as JSON."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}
    try:
        params, result, explanation = _run_calculation(payload)
    except FDValidationError as exc:
        return jsonify({"detail": exc.errors}), HTTPStatus.UNPROCESSABLE_ENTITY
    data = result_to_dict(params, result, explanation.text)
    data["explanation_ok"] = explanation.ok
    return jsonify(data), HTTPStatus.OK


if __name__ == "__main__":
    print("Starting FD calculator web app...")
    app.run(host="0.0.0.0", port=8710, debug=True)
