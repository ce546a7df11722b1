"""Data models for the loan solver.

This module defines the dataclasses passed between the engine and its
callers: a schedule row, the per-call loan parameters, the success variants
for each query and the ``Failure`` variant carrying an ``ErrorKind``. All
results are frozen so a schedule cannot change after it is returned.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional, Tuple, Union


class ErrorKind(Enum):
    """Reasons a calculation can fail.

    ``INVALID_INPUT`` is never produced by the engine itself; the CLI and web
    front ends use it when user text cannot be parsed.
    """

    PAYMENT_BELOW_INTEREST = "payment_below_interest"
    TERM_EXCEEDED = "term_exceeded"
    ITERATION_LIMIT_EXCEEDED = "iteration_limit_exceeded"
    SOLVER_DID_NOT_CONVERGE = "solver_did_not_converge"
    INVALID_INPUT = "invalid_input"


@dataclass(frozen=True)
class ScheduleRow:
    """One month of an amortization schedule.

    Attributes
    ----------
    month: int
        1-based month number.
    date: date
        Start date advanced by ``month - 1`` calendar months.
    interest: Decimal
        Interest accrued on the balance carried into this month.
    principal: Decimal
        Part of the regular payment applied to the balance.
    extra_payment: Decimal
        Annual extra payment applied this month; zero except on every 12th
        month.
    remaining_debt: Decimal
        Balance after this month's payment, never negative.
    """

    month: int
    date: date
    interest: Decimal
    principal: Decimal
    extra_payment: Decimal
    remaining_debt: Decimal


Schedule = Tuple[ScheduleRow, ...]


@dataclass(frozen=True)
class LoanParameters:
    """Inputs for one calculation.

    Exactly one of ``principal``, ``monthly_payment`` and ``term_months`` is
    left as ``None``: it is the quantity the calculation solves for.
    """

    annual_rate: Decimal  # annual nominal rate in percent
    start_date: date
    principal: Optional[Decimal] = None
    monthly_payment: Optional[Decimal] = None
    term_months: Optional[int] = None
    annual_extra_payment: Decimal = Decimal("0")


@dataclass(frozen=True)
class Failure:
    reason: ErrorKind

    ok: ClassVar[bool] = False


@dataclass(frozen=True)
class SimulationResult:
    """A schedule that ran to payoff, with its running totals."""

    schedule: Schedule
    total_payment: Decimal
    total_interest: Decimal
    months: int

    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class LoanTermResult:
    schedule: Schedule
    total_payment: Decimal
    total_interest: Decimal
    months: int
    loan_term_years: int
    loan_term_months: int
    repayment_rate: Decimal

    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class MonthlyPaymentResult:
    schedule: Schedule
    total_payment: Decimal
    total_interest: Decimal
    months: int
    monthly_payment: Decimal
    repayment_rate: Decimal

    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class MaxLoanAmountResult:
    schedule: Schedule
    total_payment: Decimal
    total_interest: Decimal
    months: int
    max_loan_amount: Decimal
    repayment_rate: Decimal

    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class YearlySnapshot:
    """A point of the yearly debt/payments series used for charts."""

    month: int
    years: Decimal
    remaining_debt: Decimal
    cumulative_payments: Decimal


CalculationResult = Union[LoanTermResult, MonthlyPaymentResult, MaxLoanAmountResult, Failure]
