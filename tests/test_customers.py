def test_create_then_fetch_returns_same_fields(client):
    resp = client.post("/api/customers", json={
        "name": "Bilal Ahmed",
        "phone": "+923001234567",
        "address": "12 Mall Road, Lahore",
    })
    assert resp.status_code == 201
    created = resp.json()

    resp = client.get(f"/api/customers/{created['id']}")
    assert resp.status_code == 200
    fetched = resp.json()
    assert fetched["name"] == "Bilal Ahmed"
    assert fetched["phone"] == "+923001234567"
    assert fetched["address"] == "12 Mall Road, Lahore"


def test_blank_address_is_stored_as_null(client, unique_phone):
    resp = client.post("/api/customers", json={"name": "Sana Iqbal", "phone": unique_phone(), "address": "   "})
    assert resp.status_code == 201
    assert resp.json()["address"] is None


def test_duplicate_phone_is_a_conflict_not_a_server_error(client, make_customer):
    make_customer(phone="+923001111111")
    resp = client.post("/api/customers", json={"name": "Someone Else", "phone": "+923001111111"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Phone number already exists"}


def test_update_to_taken_phone_is_a_conflict(client, make_customer):
    make_customer(phone="+923002222222")
    other = make_customer()
    resp = client.patch(f"/api/customers/{other['id']}", json={"phone": "+923002222222"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Phone number already exists"


def test_invalid_phone_and_short_name_are_rejected(client):
    resp = client.post("/api/customers", json={"name": "A", "phone": "0300-123"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Validation failed"
    fields = {d["field"]: d["message"] for d in body["details"]}
    assert "name" in fields
    assert fields["phone"] == "Invalid phone number format"


def test_phone_longer_than_twenty_characters_is_rejected(client):
    resp = client.post("/api/customers", json={"name": "Long Phone", "phone": "+" + "1" * 21})
    assert resp.status_code == 400
    assert resp.json()["details"][0]["message"] == "Phone number too long"


def test_partial_update_keeps_untouched_fields(client, make_customer):
    customer = make_customer(name="Usman Ali", address="Old address")
    resp = client.patch(f"/api/customers/{customer['id']}", json={"name": "Usman Ali Khan"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "Usman Ali Khan"
    assert body["phone"] == customer["phone"]
    assert body["address"] == "Old address"


def test_missing_customer_is_404(client):
    assert client.get("/api/customers/999").status_code == 404
    assert client.patch("/api/customers/999", json={"name": "Nobody"}).status_code == 404
    resp = client.delete("/api/customers/999")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Customer not found"}


class TestCustomerDeletion:
    """Customers with orders cannot be deleted; measurements go with the customer"""

    def test_delete_with_orders_is_refused(self, client, make_customer, make_order):
        customer = make_customer()
        make_order(customer["id"])
        resp = client.delete(f"/api/customers/{customer['id']}")
        assert resp.status_code == 400
        assert resp.json()["error"] == "Customer has orders; reassign or delete orders first"
        assert client.get(f"/api/customers/{customer['id']}").status_code == 200

    def test_delete_without_orders_succeeds(self, client, make_customer, make_measurement):
        customer = make_customer()
        measurement = make_measurement(customer["id"])
        resp = client.delete(f"/api/customers/{customer['id']}")
        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        assert client.get(f"/api/customers/{customer['id']}").status_code == 404
        assert client.get(f"/api/measurements/{measurement['id']}").status_code == 404

    def test_delete_after_orders_removed_succeeds(self, client, make_customer, make_order):
        customer = make_customer()
        order = make_order(customer["id"])
        assert client.delete(f"/api/orders/{order['id']}").status_code == 200
        assert client.delete(f"/api/customers/{customer['id']}").status_code == 200


class TestCustomerList:
    def test_second_page_of_fifteen(self, client, make_customer):
        for i in range(15):
            make_customer(name=f"Tailor Client {i:02d}")
        resp = client.get("/api/customers", params={"q": "tailor client", "page": 2, "pageSize": 10})
        assert resp.status_code == 200
        body = resp.json()
        assert len(body["data"]) == 5
        assert body["pagination"] == {"page": 2, "pageSize": 10, "total": 15, "pages": 2}

    def test_search_matches_name_case_insensitively_and_phone_partially(self, client, make_customer):
        make_customer(name="Hamza Sheikh", phone="+923335550001")
        make_customer(name="Zain Malik", phone="+923215550002")
        by_name = client.get("/api/customers", params={"q": "hamza"}).json()
        assert [c["name"] for c in by_name["data"]] == ["Hamza Sheikh"]
        by_phone = client.get("/api/customers", params={"q": "32155"}).json()
        assert [c["name"] for c in by_phone["data"]] == ["Zain Malik"]

    def test_search_treats_wildcards_literally(self, client, make_customer):
        make_customer(name="Percent Person")
        resp = client.get("/api/customers", params={"q": "%"})
        assert resp.json()["pagination"]["total"] == 0

    def test_rows_carry_order_counts(self, client, make_customer, make_order):
        busy = make_customer(name="Busy Customer")
        make_customer(name="Idle Customer")
        make_order(busy["id"])
        make_order(busy["id"])
        rows = client.get("/api/customers", params={"sortBy": "name", "sortDir": "asc"}).json()["data"]
        assert [(r["name"], r["order_count"]) for r in rows] == [("Busy Customer", 2), ("Idle Customer", 0)]

    def test_invalid_paging_values_fall_back_to_defaults(self, client, make_customer):
        for i in range(3):
            make_customer(name=f"Client {i}")
        body = client.get("/api/customers", params={"page": "abc", "pageSize": "-5"}).json()
        assert body["pagination"]["page"] == 1
        assert body["pagination"]["pageSize"] == 1
        assert len(body["data"]) == 1

    def test_page_size_is_capped(self, client):
        body = client.get("/api/customers", params={"pageSize": 500}).json()
        assert body["pagination"]["pageSize"] == 100
        assert body["pagination"]["pages"] == 0

    def test_unknown_sort_column_is_rejected(self, client):
        resp = client.get("/api/customers", params={"sortBy": "password"})
        assert resp.status_code == 400
        assert resp.json()["details"][0]["field"] == "sortBy"

    def test_invalid_sort_direction_is_rejected(self, client):
        resp = client.get("/api/customers", params={"sortDir": "sideways"})
        assert resp.status_code == 400


def test_customer_measurements_are_listed(client, make_customer, make_measurement):
    customer = make_customer()
    make_measurement(customer["id"], name="Sherwani")
    make_measurement(customer["id"], name="Kurta")
    resp = client.get(f"/api/customers/{customer['id']}/measurements")
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 2
    assert {m["name"] for m in body["measurements"]} == {"Sherwani", "Kurta"}
