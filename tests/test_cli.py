"""
Tests for the click command-line interface.
"""

import json

from click.testing import CliRunner

from loan_solver.main import cli

START = ["--start-date", "2026-02-01"]


class TestTermCommand:
    def test_prints_summary_and_schedule(self):
        result = CliRunner().invoke(cli, ["term", "-p", "200k", "-r", "5", "-m", "1200"] + START)
        assert result.exit_code == 0, result.output
        assert "Loan term" in result.output
        assert "RemainingDebt" in result.output

    def test_failure_exits_with_message(self):
        result = CliRunner().invoke(cli, ["term", "-p", "200000", "-r", "5", "-m", "500"] + START)
        assert result.exit_code == 1
        assert "Monthly payment is less than interest" in result.output

    def test_invalid_amount(self):
        result = CliRunner().invoke(cli, ["term", "-p", "lots", "-r", "5", "-m", "1200"] + START)
        assert result.exit_code == 2
        assert "Invalid amount" in result.output

    def test_invalid_start_date(self):
        result = CliRunner().invoke(cli, ["term", "-p", "1000", "-r", "5", "-m", "100", "-s", "02/2026"])
        assert result.exit_code == 2

    def test_yearly_table_and_currency(self):
        result = CliRunner().invoke(
            cli,
            ["term", "-p", "3000", "-r", "0", "-m", "100", "--yearly"] + START,
            env={"LOAN_SOLVER_CURRENCY": "$"},
        )
        assert result.exit_code == 0, result.output
        assert "SumOfPayments" in result.output
        assert "$3,000.00" in result.output


class TestPaymentCommand:
    def test_json_export(self, tmp_path):
        out = tmp_path / "schedule.json"
        result = CliRunner().invoke(
            cli, ["payment", "-p", "200000", "-r", "5", "-t", "240", "--output", str(out)] + START
        )
        assert result.exit_code == 0, result.output
        data = json.loads(out.read_text(encoding="utf-8"))
        assert len(data["schedule"]) == 240
        assert abs(data["summary"]["monthly_payment"] - 1319.91) < 0.01
        assert data["yearly"][0]["month"] == 1

    def test_csv_export(self, tmp_path):
        out = tmp_path / "schedule.csv"
        result = CliRunner().invoke(
            cli, ["payment", "-p", "12000", "-r", "0", "-t", "12", "--output", str(out)] + START
        )
        assert result.exit_code == 0, result.output
        lines = out.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "Month,Date,Interest,Principal,Extra_Payment,Remaining_Debt"
        assert len(lines) == 13

    def test_rejects_non_positive_term(self):
        result = CliRunner().invoke(cli, ["payment", "-p", "1000", "-r", "5", "-t", "0"] + START)
        assert result.exit_code == 2


class TestMaxLoanCommand:
    def test_prints_amount(self):
        result = CliRunner().invoke(cli, ["max-loan", "-m", "1500", "-r", "5", "-t", "240", "-x", "5000"] + START)
        assert result.exit_code == 0, result.output
        assert "Max loan amount" in result.output

    def test_unsupported_output(self, tmp_path):
        out = tmp_path / "schedule.txt"
        result = CliRunner().invoke(
            cli, ["max-loan", "-m", "1500", "-r", "5", "-t", "240", "--output", str(out)] + START
        )
        assert result.exit_code == 2
        assert not out.exists()

    def test_not_converging(self):
        result = CliRunner().invoke(cli, ["max-loan", "-m", "100000", "-r", "1", "-t", "360"] + START)
        assert result.exit_code == 1
        assert "Could not calculate max loan amount within tolerance" in result.output
