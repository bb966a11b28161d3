"""HTTP API: status codes and the {success, message} envelope for every route."""

from decimal import Decimal
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from payroll_api.app import REQUEST_ID_HEADER, create_app
from payroll_kernel.services.ledger_service import LedgerService
from tests.conftest import OPENING_BALANCE


@pytest.fixture
def client(database, clock):
    app = create_app(database=database, clock=clock)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def employee_id(make_employee):
    return make_employee(secret_id="abc", salary=Decimal("300.00"))


class TestTopUpRoute:
    def test_success(self, client, read_balance):
        response = client.post("/topup", json={"amount": 500})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Balance topped up successfully",
        }
        assert read_balance() == Decimal("1500.00")

    def test_decimal_string_amount(self, client, read_balance):
        response = client.post("/topup", json={"amount": "0.10"})
        assert response.status_code == 200
        assert read_balance() == Decimal("1000.10")

    @pytest.mark.parametrize("amount", [0, -5, "-0.01", "1e-12", "1e400", "1e29"])
    def test_unusable_amount(self, client, read_balance, amount):
        response = client.post("/topup", json={"amount": amount})

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Invalid request"}
        assert read_balance() == OPENING_BALANCE

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"content": b"not json", "headers": {"Content-Type": "application/json"}},
            {"json": {}},
            {"json": {"amount": "abc"}},
            {"json": {"value": 10}},
        ],
    )
    def test_undecodable_body(self, client, read_balance, kwargs):
        response = client.post("/topup", **kwargs)

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Invalid request"}
        assert read_balance() == OPENING_BALANCE

    def test_storage_failure(self, client, read_balance):
        failure = OperationalError("UPDATE company", {}, Exception("disk I/O error"))
        with patch.object(LedgerService, "apply_balance_delta", side_effect=failure):
            response = client.post("/topup", json={"amount": 10})

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Failed to top up balance",
        }
        assert "disk I/O" not in response.text
        assert read_balance() == OPENING_BALANCE


class TestDeductRoute:
    def test_success(self, client, read_balance):
        response = client.post("/deduct", json={"amount": "200.00"})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Balance deducted successfully",
        }
        assert read_balance() == Decimal("800.00")

    def test_invalid_amount(self, client):
        response = client.post("/deduct", json={"amount": 0})
        assert response.status_code == 400

    def test_storage_failure(self, client):
        failure = OperationalError("INSERT INTO deduction", {}, Exception("boom"))
        with patch.object(LedgerService, "record_deduction", side_effect=failure):
            response = client.post("/deduct", json={"amount": 10})

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to deduct balance"


class TestWithdrawRoute:
    def test_form_fields(self, client, employee_id, read_balance):
        response = client.post(
            "/withdraw", data={"employee_id": str(employee_id), "secret_id": "abc"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Salary withdrawn successfully",
        }
        assert read_balance() == Decimal("700.00")

    def test_query_parameters(self, client, employee_id, read_balance):
        response = client.post(
            "/withdraw", params={"employee_id": employee_id, "secret_id": "abc"}
        )

        assert response.status_code == 200
        assert read_balance() == Decimal("700.00")

    def test_form_takes_precedence_over_query(self, client, employee_id):
        response = client.post(
            "/withdraw",
            params={"employee_id": employee_id, "secret_id": "wrong"},
            data={"secret_id": "abc"},
        )
        assert response.status_code == 200

    def test_unknown_employee(self, client):
        response = client.post(
            "/withdraw", data={"employee_id": "9999", "secret_id": "abc"}
        )

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Employee not found"}

    @pytest.mark.parametrize(
        "raw_id", ["abc", "", "1.5", "0_1", "99999999999999999999", str(2**63)]
    )
    def test_unparseable_employee_id(self, client, raw_id):
        response = client.post(
            "/withdraw", data={"employee_id": raw_id, "secret_id": "abc"}
        )
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Employee not found"}

    def test_missing_parameters(self, client):
        response = client.post("/withdraw")
        assert response.status_code == 404

    def test_wrong_secret(self, client, employee_id, read_balance):
        response = client.post(
            "/withdraw", data={"employee_id": str(employee_id), "secret_id": "nope"}
        )

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Unauthorized"}
        assert read_balance() == OPENING_BALANCE

    def test_missing_secret(self, client, employee_id):
        response = client.post("/withdraw", data={"employee_id": str(employee_id)})
        assert response.status_code == 401

    def test_second_withdrawal_same_month(self, client, employee_id, read_balance):
        form = {"employee_id": str(employee_id), "secret_id": "abc"}
        assert client.post("/withdraw", data=form).status_code == 200

        response = client.post("/withdraw", data=form)

        assert response.status_code == 403
        assert response.json() == {
            "success": False,
            "message": "Salary already withdrawn this month",
        }
        assert read_balance() == Decimal("700.00")


class TestBalanceRoute:
    def test_reports_balance(self, client):
        client.post("/topup", json={"amount": "0.5"})

        response = client.get("/balance")

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Balance retrieved",
            "balance": "1000.5",
        }


class TestRequestId:
    def test_generated_when_absent(self, client):
        response = client.get("/balance")
        assert len(response.headers[REQUEST_ID_HEADER]) == 32

    def test_echoed_and_logged(self, client, captured_logs):
        response = client.post(
            "/topup", json={"amount": 1}, headers={REQUEST_ID_HEADER: "req-42"}
        )

        assert response.headers[REQUEST_ID_HEADER] == "req-42"
        logs = captured_logs()
        applied = [r for r in logs if r["message"] == "top_up_applied"]
        assert applied[0]["request_id"] == "req-42"
        completed = [r for r in logs if r["message"] == "request_completed"]
        assert completed[0]["status_code"] == 200

    def test_present_on_error_responses(self, client):
        response = client.post(
            "/withdraw",
            data={"employee_id": "9999"},
            headers={REQUEST_ID_HEADER: "req-404"},
        )
        assert response.status_code == 404
        assert response.headers[REQUEST_ID_HEADER] == "req-404"
