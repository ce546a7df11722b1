"""Core calculation engine for the loan solver.

This module implements the amortization simulator and the three queries
built on it: the payoff term for a given payment, the payment that clears a
loan within a given term and the largest loan a payment can clear within a
given term. Interest is flat monthly simple interest on the declining balance
and an optional extra payment is applied at the end of every loan year.

Expected outcomes such as an insufficient payment are returned as a
``Failure`` carrying an ``ErrorKind``. Arguments that no caller should ever
pass (non-finite or negative amounts, a non-positive term) raise
``ValueError``.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, Overflow, getcontext
from typing import List, Optional, Tuple, Union

from .constants import (
    MAX_SIMULATION_MONTHS,
    MONTHS_PER_YEAR,
    PAID_OFF_THRESHOLD,
    PAYMENT_TOLERANCE,
    PAYMENT_UPPER_BOUND_FACTOR,
    PRINCIPAL_TOLERANCE,
    PRINCIPAL_UPPER_BOUND,
)
from .data_models import (
    CalculationResult,
    ErrorKind,
    Failure,
    LoanParameters,
    LoanTermResult,
    MaxLoanAmountResult,
    MonthlyPaymentResult,
    Schedule,
    ScheduleRow,
    SimulationResult,
    YearlySnapshot,
)
from .search import Probe, Root, bisect
from .utils import Number, add_months, to_decimal

getcontext().prec = 28  # increase precision for financial calculations

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _amount(name: str, value: Number, allow_negative: bool = False) -> Decimal:
    amount = to_decimal(value)
    if not amount.is_finite():
        raise ValueError(f"{name} must be a finite number, got {value!r}")
    if amount < 0 and not allow_negative:
        raise ValueError(f"{name} must not be negative, got {value!r}")
    return amount


def _term(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"Term must be a positive number of months, got {value!r}")
    return value


def _start(value: date) -> date:
    if not isinstance(value, date):
        raise ValueError(f"Start date must be a date, got {value!r}")
    return value


def simulate(
    principal: Number,
    annual_rate: Number,
    monthly_payment: Number,
    annual_extra_payment: Number,
    start_date: date,
    term_months: Optional[int] = None,
) -> Union[SimulationResult, Failure]:
    """Run the loan month by month until the balance is paid off.

    Parameters
    ----------
    principal: Number
        Amount borrowed.
    annual_rate: Number
        Annual nominal interest rate in percent (5 means 5 %).
    monthly_payment: Number
        Fixed regular payment.
    annual_extra_payment: Number
        Extra amount paid at the end of every 12th month.
    start_date: date
        Date of the first payment. Later rows advance by calendar months.
    term_months: Optional[int]
        When set, the loan must be cleared within this many months.

    Returns
    -------
    SimulationResult or Failure
        The schedule with its totals, or the reason the loan cannot be paid
        off: ``TERM_EXCEEDED`` when debt outlives ``term_months``,
        ``PAYMENT_BELOW_INTEREST`` when the payment never covers the interest
        and no extra payment helps, ``ITERATION_LIMIT_EXCEEDED`` when the loan
        outlives 100 years or its balance grows without bound.
    """
    principal = _amount("Principal", principal)
    annual_rate = _amount("Interest rate", annual_rate, allow_negative=True)
    monthly_payment = _amount("Monthly payment", monthly_payment)
    annual_extra_payment = _amount("Annual extra payment", annual_extra_payment)
    start_date = _start(start_date)
    if term_months is not None:
        term_months = _term(term_months)

    schedule: List[ScheduleRow] = []
    remaining_debt = principal
    total_payment = ZERO
    total_interest = ZERO
    month = 0

    while remaining_debt > PAID_OFF_THRESHOLD:
        if month >= MAX_SIMULATION_MONTHS:
            logger.debug("Simulation still owes %s after %d months", remaining_debt, month)
            return Failure(ErrorKind.ITERATION_LIMIT_EXCEEDED)
        if term_months is not None and month >= term_months:
            logger.debug("Debt of %s remains after the %d month term", remaining_debt, term_months)
            return Failure(ErrorKind.TERM_EXCEEDED)

        try:
            interest = remaining_debt * annual_rate / 100 / 12
            if monthly_payment < interest and annual_extra_payment == 0:
                logger.debug("Payment %s is below the interest %s", monthly_payment, interest)
                return Failure(ErrorKind.PAYMENT_BELOW_INTEREST)

            principal_payment = monthly_payment - interest
            extra_payment = annual_extra_payment if (month + 1) % MONTHS_PER_YEAR == 0 else ZERO

            # Last payment: settle exactly the remaining balance, no overpayment.
            if principal_payment + extra_payment > remaining_debt:
                principal_payment = remaining_debt
                extra_payment = ZERO

            remaining_debt -= principal_payment + extra_payment
            total_payment += monthly_payment + extra_payment
            total_interest += interest
        except Overflow:
            # The balance grows past what Decimal can represent; it never ends.
            logger.debug("Balance overflowed after %d months", month)
            return Failure(ErrorKind.ITERATION_LIMIT_EXCEEDED)

        schedule.append(
            ScheduleRow(
                month=month + 1,
                date=add_months(start_date, month),
                interest=interest,
                principal=principal_payment,
                extra_payment=extra_payment,
                remaining_debt=max(ZERO, remaining_debt),
            )
        )
        month += 1

    return SimulationResult(
        schedule=tuple(schedule),
        total_payment=total_payment,
        total_interest=total_interest,
        months=month,
    )


def horizon_residual(
    simulation: SimulationResult,
    monthly_payment: Decimal,
    annual_extra_payment: Decimal,
    term_months: int,
) -> Decimal:
    """Return the signed balance left at the end of ``term_months``.

    A schedule that runs the full term without clamping its last payment
    leaves its final balance (at most one cent). A schedule whose last payment
    was clamped, or that ends before the term, overshoots the debt: the result
    is then negative by the unused part of the last month's payment plus one
    regular payment for every month left idle.
    """
    last = simulation.schedule[-1]
    extra_due = annual_extra_payment if last.month % MONTHS_PER_YEAR == 0 else ZERO
    unused = (monthly_payment + extra_due) - (last.interest + last.principal + last.extra_payment)
    idle_months = term_months - simulation.months
    return last.remaining_debt - unused - monthly_payment * idle_months


def repayment_rate(first_month_principal: Decimal, principal: Decimal) -> Decimal:
    """Annualised first-month principal repayment as a percentage of the loan."""
    if principal == 0:
        return ZERO
    return first_month_principal * 12 / principal * 100


def split_term(months: int) -> Tuple[int, int]:
    """Split a number of months into whole years and leftover months."""
    return months // MONTHS_PER_YEAR, months % MONTHS_PER_YEAR


def _first_principal(schedule: Schedule) -> Decimal:
    return schedule[0].principal if schedule else ZERO


def yearly_snapshots(schedule: Schedule) -> List[YearlySnapshot]:
    """Sample the schedule once a year (and at its last row) for charting.

    Each snapshot carries the balance at that row and everything paid up to
    and including it: interest, principal and extra payments.
    """
    snapshots: List[YearlySnapshot] = []
    cumulative = ZERO
    last_index = len(schedule) - 1
    for index, row in enumerate(schedule):
        cumulative += row.interest + row.principal + row.extra_payment
        if index % MONTHS_PER_YEAR == 0 or index == last_index:
            snapshots.append(
                YearlySnapshot(
                    month=row.month,
                    years=Decimal(row.month) / MONTHS_PER_YEAR,
                    remaining_debt=row.remaining_debt,
                    cumulative_payments=cumulative,
                )
            )
    return snapshots


def calculate_loan_term(
    principal: Number,
    annual_rate: Number,
    monthly_payment: Number,
    annual_extra_payment: Number,
    start_date: date,
) -> Union[LoanTermResult, Failure]:
    """Find how long ``monthly_payment`` takes to clear ``principal``."""
    principal = _amount("Principal", principal)
    result = simulate(principal, annual_rate, monthly_payment, annual_extra_payment, start_date)
    if not result.ok:
        return result

    years, months = split_term(result.months)
    return LoanTermResult(
        schedule=result.schedule,
        total_payment=result.total_payment,
        total_interest=result.total_interest,
        months=result.months,
        loan_term_years=years,
        loan_term_months=months,
        repayment_rate=repayment_rate(_first_principal(result.schedule), principal),
    )


def calculate_monthly_payment(
    principal: Number,
    annual_rate: Number,
    term_months: int,
    annual_extra_payment: Number,
    start_date: date,
) -> Union[MonthlyPaymentResult, Failure]:
    """Find the regular payment that clears ``principal`` in ``term_months``.

    The payment is bisected over ``[0, 2 * principal]`` until the balance at
    the end of the term is within a cent of zero. When the annual extra
    payment alone clears the loan within the term, the payment is zero.
    """
    principal = _amount("Principal", principal)
    annual_rate = _amount("Interest rate", annual_rate, allow_negative=True)
    annual_extra_payment = _amount("Annual extra payment", annual_extra_payment)
    term_months = _term(term_months)
    start_date = _start(start_date)

    def evaluate(payment: Decimal) -> Optional[Probe]:
        simulation = simulate(
            principal, annual_rate, payment, annual_extra_payment, start_date, term_months
        )
        if not simulation.ok or not simulation.schedule:
            return None
        residual = horizon_residual(simulation, payment, annual_extra_payment, term_months)
        return Probe(residual=residual, payload=simulation)

    # No regular payment can bring the residual up to zero once the extra
    # payments overshoot on their own.
    unpaid = evaluate(ZERO)
    if unpaid is not None:
        root = Root(value=ZERO, payload=unpaid.payload, iterations=0)
    else:
        root = bisect(
            evaluate,
            low=ZERO,
            high=principal * PAYMENT_UPPER_BOUND_FACTOR,
            tolerance=PAYMENT_TOLERANCE,
            residual_falls_as_value_rises=True,
        )
    if root is None:
        logger.info("Monthly payment search did not converge for principal %s", principal)
        return Failure(ErrorKind.SOLVER_DID_NOT_CONVERGE)

    simulation: SimulationResult = root.payload
    logger.info(
        "Monthly payment %s clears %s in %d months (%d iterations)",
        root.value,
        principal,
        simulation.months,
        root.iterations,
    )
    return MonthlyPaymentResult(
        schedule=simulation.schedule,
        total_payment=simulation.total_payment,
        total_interest=simulation.total_interest,
        months=simulation.months,
        monthly_payment=root.value,
        repayment_rate=repayment_rate(_first_principal(simulation.schedule), principal),
    )


def calculate_max_loan_amount(
    monthly_payment: Number,
    annual_rate: Number,
    term_months: int,
    annual_extra_payment: Number,
    start_date: date,
) -> Union[MaxLoanAmountResult, Failure]:
    """Find the largest principal ``monthly_payment`` clears in ``term_months``.

    The principal is bisected over ``[0, 10_000_000]`` until the balance at
    the end of the term is within one currency unit of zero.
    """
    monthly_payment = _amount("Monthly payment", monthly_payment)
    annual_rate = _amount("Interest rate", annual_rate, allow_negative=True)
    annual_extra_payment = _amount("Annual extra payment", annual_extra_payment)
    term_months = _term(term_months)
    start_date = _start(start_date)

    def evaluate(principal: Decimal) -> Optional[Probe]:
        simulation = simulate(
            principal, annual_rate, monthly_payment, annual_extra_payment, start_date, term_months
        )
        if not simulation.ok or not simulation.schedule:
            return None
        residual = horizon_residual(simulation, monthly_payment, annual_extra_payment, term_months)
        return Probe(residual=residual, payload=simulation)

    root = bisect(
        evaluate,
        low=ZERO,
        high=PRINCIPAL_UPPER_BOUND,
        tolerance=PRINCIPAL_TOLERANCE,
        residual_falls_as_value_rises=False,
    )
    if root is None:
        logger.info("Max loan amount search did not converge for payment %s", monthly_payment)
        return Failure(ErrorKind.SOLVER_DID_NOT_CONVERGE)

    simulation: SimulationResult = root.payload
    logger.info(
        "Payment %s clears at most %s in %d months (%d iterations)",
        monthly_payment,
        root.value,
        simulation.months,
        root.iterations,
    )
    return MaxLoanAmountResult(
        schedule=simulation.schedule,
        total_payment=simulation.total_payment,
        total_interest=simulation.total_interest,
        months=simulation.months,
        max_loan_amount=root.value,
        repayment_rate=repayment_rate(_first_principal(simulation.schedule), root.value),
    )


def calculate(params: LoanParameters) -> CalculationResult:
    """Run the query implied by whichever of the three unknowns is missing."""
    missing = [
        name
        for name in ("principal", "monthly_payment", "term_months")
        if getattr(params, name) is None
    ]
    if len(missing) != 1:
        raise ValueError(
            "Exactly one of principal, monthly_payment and term_months must be unknown; "
            f"got {missing or 'none'}"
        )

    if missing[0] == "term_months":
        return calculate_loan_term(
            params.principal,
            params.annual_rate,
            params.monthly_payment,
            params.annual_extra_payment,
            params.start_date,
        )
    if missing[0] == "monthly_payment":
        return calculate_monthly_payment(
            params.principal,
            params.annual_rate,
            params.term_months,
            params.annual_extra_payment,
            params.start_date,
        )
    return calculate_max_loan_amount(
        params.monthly_payment,
        params.annual_rate,
        params.term_months,
        params.annual_extra_payment,
        params.start_date,
    )
