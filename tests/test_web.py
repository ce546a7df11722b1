"""
Tests for the Flask JSON API.
"""

import pytest

from loan_solver_web.app import app


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


class TestLoanTermEndpoint:
    def test_success(self, client):
        response = client.post(
            "/api/loan-term",
            json={"principal": 200000, "annual_rate": 5, "monthly_payment": 1200, "start_date": "2026-02-01"},
        )
        assert response.status_code == 200
        data = response.get_json()
        assert data["summary"]["total_payment"] > 200000
        assert data["schedule"][0]["date"] == "2026-02-01"
        assert data["schedule"][-1]["remaining_debt"] < 1
        assert data["yearly"][-1]["month"] == data["summary"]["months"]

    def test_domain_failure(self, client):
        response = client.post(
            "/api/loan-term",
            json={"principal": 200000, "annual_rate": 5, "monthly_payment": 500},
        )
        assert response.status_code == 422
        assert response.get_json()["error"] == "payment_below_interest"

    def test_missing_field(self, client):
        response = client.post("/api/loan-term", json={"principal": 200000, "annual_rate": 5})
        assert response.status_code == 400
        body = response.get_json()
        assert body["error"] == "invalid_input"
        assert "monthly_payment" in body["detail"]

    def test_form_fields(self, client):
        response = client.post(
            "/api/loan-term",
            data={"principal": "150k", "annual_rate": "1.5", "monthly_payment": "1000", "start_date": "2026-02"},
        )
        assert response.status_code == 200


class TestSolverEndpoints:
    def test_monthly_payment(self, client):
        response = client.post(
            "/api/monthly-payment",
            json={"principal": 200000, "annual_rate": 5, "term_months": 240, "start_date": "2026-02-01"},
        )
        assert response.status_code == 200
        data = response.get_json()
        assert len(data["schedule"]) == 240
        assert abs(data["summary"]["monthly_payment"] - 1319.91) < 0.01

    def test_max_loan_amount(self, client):
        response = client.post(
            "/api/max-loan-amount",
            json={
                "monthly_payment": 1500,
                "annual_rate": 5,
                "term_months": 240,
                "annual_extra_payment": 5000,
                "start_date": "2026-02-01",
            },
        )
        assert response.status_code == 200
        assert response.get_json()["summary"]["max_loan_amount"] > 227000

    def test_bad_term(self, client):
        response = client.post(
            "/api/monthly-payment",
            json={"principal": 200000, "annual_rate": 5, "term_months": "twenty"},
        )
        assert response.status_code == 400

    def test_runaway_rate(self, client):
        response = client.post(
            "/api/loan-term",
            json={"principal": 1000, "annual_rate": "1e900", "monthly_payment": 1, "annual_extra_payment": 1},
        )
        assert response.status_code == 422
        assert response.get_json()["error"] == "iteration_limit_exceeded"

    def test_health(self, client):
        assert client.get("/api/health").get_json() == {"status": "ok"}
