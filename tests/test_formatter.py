"""
Tests for text rendering and serialisation.
"""

from decimal import Decimal

from loan_solver.data_models import ErrorKind, Failure
from loan_solver.engine import calculate_loan_term, calculate_monthly_payment, yearly_snapshots
from loan_solver.formatter import (
    describe_failure,
    format_currency,
    print_schedule,
    print_summary,
    print_yearly,
    serialize_schedule,
    serialize_yearly,
    summarize,
)


class TestFormatting:
    """Currency strings and failure messages."""

    def test_format_currency(self):
        assert format_currency(Decimal("1234.5")) == "€1,234.50"
        assert format_currency(Decimal("0.004"), "$") == "$0.00"

    def test_failure_messages(self):
        assert describe_failure(Failure(ErrorKind.TERM_EXCEEDED)) == (
            "Loan cannot be paid off within the specified term"
        )
        assert describe_failure(Failure(ErrorKind.SOLVER_DID_NOT_CONVERGE), "monthly payment") == (
            "Could not calculate monthly payment within tolerance"
        )

    def test_every_kind_has_a_message(self):
        for kind in ErrorKind:
            assert describe_failure(Failure(kind))


class TestSerialisation:
    """Dictionaries for JSON export and the API."""

    def test_summarize_loan_term(self, start_date):
        result = calculate_loan_term(200000, 5, 1200, 0, start_date)
        summary = summarize(result)
        assert summary["months"] == result.months
        assert summary["loan_term_years"] == result.loan_term_years
        assert isinstance(summary["total_payment"], float)

    def test_summarize_monthly_payment(self, start_date):
        result = calculate_monthly_payment(12000, 0, 12, 0, start_date)
        assert abs(summarize(result)["monthly_payment"] - 1000) < 0.01

    def test_serialize_schedule(self, start_date):
        result = calculate_loan_term(1200, 0, 100, 0, start_date)
        rows = serialize_schedule(result.schedule)
        assert rows[0] == {
            "month": 1,
            "date": "2026-02-01",
            "interest": 0.0,
            "principal": 100.0,
            "extra_payment": 0.0,
            "remaining_debt": 1100.0,
        }
        assert rows[-1]["date"] == "2027-01-01"

    def test_serialize_yearly(self, start_date):
        result = calculate_loan_term(3000, 0, 100, 0, start_date)
        series = serialize_yearly(yearly_snapshots(result.schedule))
        assert series[-1]["years"] == 2.5
        assert series[-1]["cumulative_payments"] == 3000.0


class TestPrinting:
    """Tab-separated terminal output."""

    def test_print_summary(self, start_date, capsys):
        print_summary(calculate_loan_term(200000, 5, 1200, 0, start_date))
        out = capsys.readouterr().out
        assert "Loan term" in out
        assert "Repayment rate" in out

    def test_print_schedule(self, start_date, capsys):
        print_schedule(calculate_loan_term(1200, 0, 100, 0, start_date).schedule)
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].split("\t")[0] == "Month"
        assert lines[1].split("\t") == ["1", "2026-02", "0.00", "100.00", "0.00", "1100.00"]
        assert len(lines) == 13

    def test_print_yearly(self, start_date, capsys):
        print_yearly(yearly_snapshots(calculate_loan_term(3000, 0, 100, 0, start_date).schedule), "$")
        lines = capsys.readouterr().out.splitlines()
        assert lines[-1] == "2.5\t$0.00\t$3,000.00"
