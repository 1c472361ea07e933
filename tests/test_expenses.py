"""Tests for the owner-scoped expense endpoints."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel import Session

from conftest import auth_headers
from expense_tracker.database import engine
from expense_tracker.models.expense import Expense


class TestCreate:

    def test_coffee_total_is_stored(self, client, user_token):
        response = client.post(
            "/api/expenses",
            json={
                "description": "Coffee",
                "amount": 4.00,
                "type": "expense",
                "taxType": "percentage",
                "taxAmount": 10,
            },
            headers=auth_headers(user_token),
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["totalAmount"] == pytest.approx(4.40)

        with Session(engine) as session:
            stored = session.get(Expense, uuid.UUID(data["id"]))
        assert stored.total_amount == pytest.approx(4.40)

    def test_defaults_to_flat_zero_tax(self, create_expense, user_token):
        data = create_expense(user_token, amount=12.5)
        assert data["taxType"] == "flat"
        assert data["taxAmount"] == 0
        assert data["totalAmount"] == 12.5

    def test_description_is_trimmed(self, create_expense, user_token):
        data = create_expense(user_token, description="  Rent  ")
        assert data["description"] == "Rent"

    def test_client_total_is_ignored(self, create_expense, user_token):
        data = create_expense(user_token, amount=10, taxAmount=2, totalAmount=999)
        assert data["totalAmount"] == 12

    def test_owner_is_caller(self, client, register, create_expense):
        token, user = register()
        data = create_expense(token)
        assert data["userId"] == user["id"]

    @pytest.mark.parametrize(
        "fields",
        [
            {"amount": 0},
            {"amount": -5},
            {"type": "gift"},
            {"taxType": "compound"},
            {"taxAmount": -1},
            {"description": "   "},
        ],
    )
    def test_schema_violations_rejected(self, client, user_token, fields):
        body = {"description": "Coffee", "amount": 4.0, "type": "expense"}
        body.update(fields)
        response = client.post("/api/expenses", json=body, headers=auth_headers(user_token))
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_missing_fields_rejected(self, client, user_token):
        response = client.post(
            "/api/expenses", json={"description": "Coffee"}, headers=auth_headers(user_token)
        )
        assert response.status_code == 400


class TestList:

    def _seed(self, user_id, count):
        start = datetime(2026, 1, 1, tzinfo=timezone.utc)
        with Session(engine) as session:
            for i in range(count):
                session.add(
                    Expense(
                        user_id=user_id,
                        description=f"Entry {i}",
                        amount=i + 1,
                        type="expense",
                        tax_type="flat",
                        tax_amount=0,
                        created_at=start + timedelta(minutes=i),
                    )
                )
            session.commit()

    def test_defaults_and_newest_first(self, client, register):
        token, user = register()
        self._seed(uuid.UUID(user["id"]), 12)

        response = client.get("/api/expenses", headers=auth_headers(token))
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["currentPage"] == 1
        assert data["totalPages"] == 2
        assert data["totalExpenses"] == 12
        assert len(data["expenses"]) == 10
        assert data["expenses"][0]["description"] == "Entry 11"

    def test_second_page(self, client, register):
        token, user = register()
        self._seed(uuid.UUID(user["id"]), 7)

        response = client.get("/api/expenses?page=2&limit=5", headers=auth_headers(token))
        data = response.json()["data"]
        assert data["currentPage"] == 2
        assert data["totalPages"] == 2
        assert [e["description"] for e in data["expenses"]] == ["Entry 1", "Entry 0"]

    def test_empty(self, client, user_token):
        data = client.get("/api/expenses", headers=auth_headers(user_token)).json()["data"]
        assert data == {"expenses": [], "currentPage": 1, "totalPages": 0, "totalExpenses": 0}

    def test_only_own_records(self, client, register, create_expense):
        alice, _ = register(email="alice@example.com")
        bob, _ = register(email="bob@example.com")
        create_expense(alice, description="Alice's")
        create_expense(bob, description="Bob's")

        data = client.get("/api/expenses", headers=auth_headers(alice)).json()["data"]
        assert [e["description"] for e in data["expenses"]] == ["Alice's"]

    def test_invalid_page_rejected(self, client, user_token):
        response = client.get("/api/expenses?page=0", headers=auth_headers(user_token))
        assert response.status_code == 400

    def test_large_limit_returns_everything(self, client, register):
        token, user = register()
        self._seed(uuid.UUID(user["id"]), 12)

        response = client.get("/api/expenses?limit=500", headers=auth_headers(token))
        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data["expenses"]) == 12
        assert data["totalPages"] == 1


class TestDashboard:

    def test_totals(self, client, user_token, create_expense):
        create_expense(user_token, description="Salary", type="income", amount=100)
        create_expense(user_token, description="Groceries", type="expense", amount=40)

        response = client.get("/api/expenses/dashboard", headers=auth_headers(user_token))
        assert response.status_code == 200
        assert response.json()["data"] == {
            "totalIncome": 100,
            "totalExpense": 40,
            "balance": 60,
            "totalRecords": 2,
        }

    def test_uses_tax_adjusted_totals(self, client, user_token, create_expense):
        create_expense(user_token, type="income", amount=100, taxType="percentage", taxAmount=10)
        create_expense(user_token, type="expense", amount=20, taxType="flat", taxAmount=5)

        data = client.get("/api/expenses/dashboard", headers=auth_headers(user_token)).json()["data"]
        assert data["totalIncome"] == pytest.approx(110)
        assert data["totalExpense"] == pytest.approx(25)
        assert data["balance"] == pytest.approx(85)

    def test_empty(self, client, user_token):
        data = client.get("/api/expenses/dashboard", headers=auth_headers(user_token)).json()["data"]
        assert data == {"totalIncome": 0, "totalExpense": 0, "balance": 0, "totalRecords": 0}


class TestPreview:

    def test_matches_stored_total(self, client, user_token, create_expense):
        fields = {"amount": 19.99, "taxType": "percentage", "taxAmount": 8.25}
        preview = client.post(
            "/api/expenses/calculate-total", json=fields, headers=auth_headers(user_token)
        )
        assert preview.status_code == 200
        stored = create_expense(user_token, **fields)
        assert preview.json()["data"]["totalAmount"] == stored["totalAmount"]

    def test_requires_auth(self, client):
        response = client.post("/api/expenses/calculate-total", json={"amount": 1})
        assert response.status_code == 401


class TestSingleRecord:

    def test_get_own(self, client, user_token, create_expense):
        created = create_expense(user_token)
        response = client.get(f"/api/expenses/{created['id']}", headers=auth_headers(user_token))
        assert response.status_code == 200
        assert response.json()["data"] == created

    def test_other_users_record_is_404(self, client, register, create_expense):
        alice, _ = register(email="alice@example.com")
        bob, _ = register(email="bob@example.com")
        created = create_expense(alice, description="Private")

        for method in ("get", "delete"):
            response = getattr(client, method)(
                f"/api/expenses/{created['id']}", headers=auth_headers(bob)
            )
            assert response.status_code == 404
            assert response.json() == {"success": False, "message": "Expense not found"}
            assert "Private" not in response.text

        response = client.put(
            f"/api/expenses/{created['id']}",
            json={"description": "Hijacked", "amount": 1, "type": "income"},
            headers=auth_headers(bob),
        )
        assert response.status_code == 404

    def test_unknown_id_is_404(self, client, user_token):
        response = client.get(f"/api/expenses/{uuid.uuid4()}", headers=auth_headers(user_token))
        assert response.status_code == 404

    def test_malformed_id_is_400(self, client, user_token):
        response = client.get("/api/expenses/not-an-id", headers=auth_headers(user_token))
        assert response.status_code == 400

    def test_update_replaces_fields_and_recomputes(self, client, user_token, create_expense):
        created = create_expense(user_token, amount=10, taxType="percentage", taxAmount=20)
        assert created["totalAmount"] == pytest.approx(12)

        response = client.put(
            f"/api/expenses/{created['id']}",
            json={"description": "Refund", "amount": 50, "type": "income"},
            headers=auth_headers(user_token),
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["description"] == "Refund"
        assert data["type"] == "income"
        # omitted tax fields fall back to their defaults
        assert data["taxType"] == "flat"
        assert data["taxAmount"] == 0
        assert data["totalAmount"] == 50
        assert data["id"] == created["id"]

    def test_update_rejects_invalid_body(self, client, user_token, create_expense):
        created = create_expense(user_token)
        response = client.put(
            f"/api/expenses/{created['id']}",
            json={"description": "x", "amount": 0, "type": "expense"},
            headers=auth_headers(user_token),
        )
        assert response.status_code == 400

    def test_delete(self, client, user_token, create_expense):
        created = create_expense(user_token)
        response = client.delete(f"/api/expenses/{created['id']}", headers=auth_headers(user_token))
        assert response.status_code == 200
        assert response.json()["message"] == "Expense deleted successfully"

        again = client.get(f"/api/expenses/{created['id']}", headers=auth_headers(user_token))
        assert again.status_code == 404
