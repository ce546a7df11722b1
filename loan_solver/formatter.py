"""Output helpers for the loan solver.

This module turns engine results into things people read: currency strings,
a summary block, tab-separated schedule tables and the user-facing text for
each failure. It also flattens results into JSON-friendly dictionaries for
the exports and the web API.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from .constants import DEFAULT_CURRENCY
from .data_models import (
    CalculationResult,
    ErrorKind,
    Failure,
    LoanTermResult,
    MaxLoanAmountResult,
    MonthlyPaymentResult,
    ScheduleRow,
    YearlySnapshot,
)

ERROR_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.PAYMENT_BELOW_INTEREST: "Monthly payment is less than interest - loan term would be infinite",
    ErrorKind.TERM_EXCEEDED: "Loan cannot be paid off within the specified term",
    ErrorKind.ITERATION_LIMIT_EXCEEDED: "Loan term exceeds maximum iterations",
    ErrorKind.SOLVER_DID_NOT_CONVERGE: "Could not calculate {quantity} within tolerance",
    ErrorKind.INVALID_INPUT: "Invalid input values. Please check your entries.",
}


def describe_failure(failure: Failure, quantity: str = "the result") -> str:
    """Return the message shown to the user for ``failure``.

    ``quantity`` names what was being solved for ("monthly payment", "max
    loan amount") and only appears in the non-convergence message.
    """
    return ERROR_MESSAGES[failure.reason].format(quantity=quantity)


def format_currency(amount: Decimal, currency: str = DEFAULT_CURRENCY) -> str:
    """Format ``amount`` with two decimals and comma thousands separators."""
    return f"{currency}{amount:,.2f}"


def summarize(result: CalculationResult) -> Dict[str, object]:
    """Flatten the headline figures of a successful result into floats."""
    summary: Dict[str, object] = {
        "total_payment": float(result.total_payment),
        "total_interest": float(result.total_interest),
        "months": result.months,
        "repayment_rate": float(result.repayment_rate),
    }
    if isinstance(result, LoanTermResult):
        summary["loan_term_years"] = result.loan_term_years
        summary["loan_term_months"] = result.loan_term_months
    elif isinstance(result, MonthlyPaymentResult):
        summary["monthly_payment"] = float(result.monthly_payment)
    elif isinstance(result, MaxLoanAmountResult):
        summary["max_loan_amount"] = float(result.max_loan_amount)
    return summary


def serialize_schedule(schedule: Iterable[ScheduleRow]) -> List[Dict[str, object]]:
    """Convert schedule rows into JSON-serialisable dictionaries."""
    return [
        {
            "month": row.month,
            "date": row.date.isoformat(),
            "interest": float(row.interest),
            "principal": float(row.principal),
            "extra_payment": float(row.extra_payment),
            "remaining_debt": float(row.remaining_debt),
        }
        for row in schedule
    ]


def serialize_yearly(snapshots: Iterable[YearlySnapshot]) -> List[Dict[str, object]]:
    return [
        {
            "month": s.month,
            "years": round(float(s.years), 1),
            "remaining_debt": float(s.remaining_debt),
            "cumulative_payments": float(s.cumulative_payments),
        }
        for s in snapshots
    ]


def print_summary(result: CalculationResult, currency: str = DEFAULT_CURRENCY) -> None:
    """Print the headline figures of a successful result."""
    print("Summary")
    print("-" * 72)
    if isinstance(result, LoanTermResult):
        print(f"Loan term          : {result.loan_term_years} years, {result.loan_term_months} months")
    elif isinstance(result, MonthlyPaymentResult):
        print(f"Monthly payment    : {format_currency(result.monthly_payment, currency)}")
    elif isinstance(result, MaxLoanAmountResult):
        print(f"Max loan amount    : {format_currency(result.max_loan_amount, currency)}")
    print(f"Total interest     : {format_currency(result.total_interest, currency)}")
    print(f"Total payment      : {format_currency(result.total_payment, currency)}")
    print(f"Repayment rate     : {result.repayment_rate:.2f}%")
    print(f"Payments made      : {result.months}")
    print("-" * 72)


def print_schedule(schedule: Iterable[ScheduleRow], currency: Optional[str] = None) -> None:
    """Print the amortization schedule as a simple table.

    Amounts are plain two-decimal numbers unless ``currency`` is given.
    """
    headers = ["Month", "Date", "Interest", "Principal", "Extra", "RemainingDebt"]
    print("\t".join(headers))
    for row in schedule:
        amounts = [row.interest, row.principal, row.extra_payment, row.remaining_debt]
        if currency:
            cells = [format_currency(a, currency) for a in amounts]
        else:
            cells = [f"{a:.2f}" for a in amounts]
        print("\t".join([str(row.month), row.date.strftime("%Y-%m")] + cells))


def print_yearly(snapshots: Iterable[YearlySnapshot], currency: str = DEFAULT_CURRENCY) -> None:
    """Print the once-a-year debt and cumulative payments series."""
    print("\t".join(["Year", "RemainingDebt", "SumOfPayments"]))
    for s in snapshots:
        print(
            "\t".join(
                [
                    f"{s.years:.1f}",
                    format_currency(s.remaining_debt, currency),
                    format_currency(s.cumulative_payments, currency),
                ]
            )
        )
