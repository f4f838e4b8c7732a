from datetime import date, timedelta
from decimal import Decimal

import pytest

from tailorshop.domain.models import Order


@pytest.fixture
def customer(make_customer):
    return make_customer(name="Ayesha Khan")


@pytest.fixture
def order(customer, make_order):
    return make_order(customer["id"], total=1000, advance=400)


def balance_of(client, order_id):
    return client.get(f"/api/orders/{order_id}").json()["balance"]


class TestBalance:
    def test_two_payments_settle_the_order(self, client, order, make_payment):
        make_payment(order["id"], 300)
        make_payment(order["id"], 300)
        assert balance_of(client, order["id"]) == 0

    def test_payment_response_carries_refreshed_order_snapshot(self, order, make_payment):
        payment = make_payment(order["id"], 250, payment_method="cash", notes="Cash at the counter")
        assert payment["amount"] == 250
        assert payment["payment_method"] == "cash"
        assert payment["order"]["order_number"] == order["order_number"]
        assert payment["order"]["balance"] == 350
        assert payment["order"]["customer"]["name"] == "Ayesha Khan"

    def test_stored_balance_follows_the_ledger(self, db, order, make_payment):
        make_payment(order["id"], 100)
        assert db.get(Order, order["id"]).balance == Decimal("500.00")

    def test_correcting_an_amount_refreshes_balance(self, client, order, make_payment):
        payment = make_payment(order["id"], 300)
        resp = client.patch(f"/api/payments/{payment['id']}", json={"amount": 500})
        assert resp.status_code == 200
        assert resp.json()["order"]["balance"] == 100
        assert balance_of(client, order["id"]) == 100

    def test_deleting_a_payment_restores_balance(self, client, order, make_payment):
        payment = make_payment(order["id"], 300)
        assert client.delete(f"/api/payments/{payment['id']}").json() == {"success": True}
        assert balance_of(client, order["id"]) == 600

    def test_overpayment_goes_negative(self, client, order, make_payment):
        make_payment(order["id"], 700)
        assert balance_of(client, order["id"]) == -100


class TestPaymentValidation:
    def test_order_of_another_customer_is_not_found(self, client, order, make_customer):
        stranger = make_customer(name="Stranger")
        resp = client.post("/api/payments", json={
            "order_id": order["id"], "customer_id": stranger["id"], "amount": 100,
        })
        assert resp.status_code == 404
        assert resp.json() == {"error": "Order not found or does not belong to customer"}

    def test_missing_order_is_not_found(self, client):
        resp = client.post("/api/payments", json={"order_id": 999, "amount": 100})
        assert resp.status_code == 404

    def test_customer_defaults_to_order_owner(self, order, customer, make_payment):
        payment = make_payment(order["id"], 100)
        assert payment["customer_id"] == customer["id"]

    @pytest.mark.parametrize("amount", [0, -50])
    def test_amount_must_be_positive(self, client, order, amount):
        resp = client.post("/api/payments", json={"order_id": order["id"], "amount": amount})
        assert resp.status_code == 400

    def test_future_date_is_rejected(self, client, order):
        tomorrow = (date.today() + timedelta(days=1)).isoformat()
        resp = client.post("/api/payments", json={"order_id": order["id"], "amount": 10, "payment_date": tomorrow})
        assert resp.status_code == 400
        assert resp.json()["details"][0]["message"] == "Payment date cannot be in the future"

    def test_date_defaults_to_today(self, order, make_payment):
        assert make_payment(order["id"], 10)["payment_date"] == date.today().isoformat()

    def test_unknown_method_is_rejected(self, client, order):
        resp = client.post("/api/payments", json={"order_id": order["id"], "amount": 10, "payment_method": "cheque"})
        assert resp.status_code == 400


def test_notes_can_be_cleared(client, order, make_payment):
    payment = make_payment(order["id"], 100, notes="Partial")
    resp = client.patch(f"/api/payments/{payment['id']}", json={"notes": ""})
    assert resp.json()["notes"] is None


def test_missing_payment_is_404(client):
    assert client.patch("/api/payments/999", json={"amount": 5}).status_code == 404
    assert client.delete("/api/payments/999").json() == {"error": "Payment not found"}


def test_list_filters_and_search(client, customer, make_customer, make_order, make_payment):
    first = make_order(customer["id"], total=5000)
    other_customer = make_customer(name="Rashid Mehmood")
    second = make_order(other_customer["id"], total=5000)
    make_payment(first["id"], 100, payment_date="2024-01-10")
    make_payment(first["id"], 200, payment_date="2024-02-10", notes="Bank transfer ref 77")
    make_payment(second["id"], 300, payment_date="2024-03-10")

    def amounts(**params):
        return sorted(p["amount"] for p in client.get("/api/payments", params=params).json()["data"])

    assert amounts(order_id=first["id"]) == [100, 200]
    assert amounts(customer_id=other_customer["id"]) == [300]
    assert amounts(**{"from": "2024-02-01", "to": "2024-03-10"}) == [200, 300]
    assert amounts(q="rashid") == [300]
    assert amounts(q="ref 77") == [200]
    assert amounts(q=second["order_number"]) == [300]
