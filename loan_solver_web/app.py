"""JSON API for the loan solver.

Each query has its own POST endpoint accepting either a JSON body or form
fields named like the engine's arguments. Successful calculations return the
summary, the yearly chart series and the full schedule; domain failures come
back as 422 with the failure kind and its user-facing message, unparseable
input as 400.
"""

import os
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Dict, Mapping, Tuple

from flask import Flask, jsonify, request

from loan_solver.data_models import ErrorKind, Failure
from loan_solver.engine import (
    calculate_loan_term,
    calculate_max_loan_amount,
    calculate_monthly_payment,
    yearly_snapshots,
)
from loan_solver.formatter import (
    ERROR_MESSAGES,
    describe_failure,
    serialize_schedule,
    serialize_yearly,
    summarize,
)
from loan_solver.utils import parse_amount, parse_percent, parse_start_date, parse_term

app = Flask(__name__)


def _field(form: Mapping[str, Any], name: str, parse: Callable[[str], Any], default: Any = None) -> Any:
    """Read ``name`` from the request and parse it; ``ValueError`` on failure."""
    raw = form.get(name)
    if raw is None or str(raw).strip() == "":
        if default is not None:
            return default
        raise ValueError(f"Missing field: {name}")
    return parse(str(raw))


def _request_data() -> Mapping[str, Any]:
    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    return request.form


def _common_fields(form: Mapping[str, Any]) -> Tuple[Any, Any, date]:
    rate = _field(form, "annual_rate", parse_percent)
    extra = _field(form, "annual_extra_payment", parse_amount, default=Decimal("0"))
    start = _field(form, "start_date", parse_start_date, default=date.today().replace(day=1))
    return rate, extra, start


def _invalid_input(exc: ValueError):
    app.logger.info("Rejected request: %s", exc)
    body = {
        "error": ErrorKind.INVALID_INPUT.value,
        "message": ERROR_MESSAGES[ErrorKind.INVALID_INPUT],
        "detail": str(exc),
    }
    return jsonify(body), 400


def _respond(result, quantity: str):
    if isinstance(result, Failure):
        body: Dict[str, Any] = {
            "error": result.reason.value,
            "message": describe_failure(result, quantity),
        }
        return jsonify(body), 422
    return jsonify(
        {
            "summary": summarize(result),
            "yearly": serialize_yearly(yearly_snapshots(result.schedule)),
            "schedule": serialize_schedule(result.schedule),
        }
    )


@app.get("/api/health")
def health():
    return jsonify({"status": "ok"})


@app.post("/api/loan-term")
def loan_term():
    form = _request_data()
    try:
        principal = _field(form, "principal", parse_amount)
        payment = _field(form, "monthly_payment", parse_amount)
        rate, extra, start = _common_fields(form)
    except ValueError as exc:
        return _invalid_input(exc)
    result = calculate_loan_term(principal, rate, payment, extra, start)
    return _respond(result, "loan term")


@app.post("/api/monthly-payment")
def monthly_payment():
    form = _request_data()
    try:
        principal = _field(form, "principal", parse_amount)
        term_months = _field(form, "term_months", parse_term)
        rate, extra, start = _common_fields(form)
    except ValueError as exc:
        return _invalid_input(exc)
    result = calculate_monthly_payment(principal, rate, term_months, extra, start)
    return _respond(result, "monthly payment")


@app.post("/api/max-loan-amount")
def max_loan_amount():
    form = _request_data()
    try:
        payment = _field(form, "monthly_payment", parse_amount)
        term_months = _field(form, "term_months", parse_term)
        rate, extra, start = _common_fields(form)
    except ValueError as exc:
        return _invalid_input(exc)
    result = calculate_max_loan_amount(payment, rate, term_months, extra, start)
    return _respond(result, "max loan amount")


if __name__ == "__main__":
    print("Starting loan solver API...")
    app.run(debug=os.environ.get("FLASK_DEBUG") == "1")
