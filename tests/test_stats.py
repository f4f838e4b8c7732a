from datetime import date, datetime

from tailorshop.application.stats_service import StatsService, month_starts


def test_empty_store(client):
    resp = client.get("/api/stats")
    assert resp.status_code == 200
    body = resp.json()
    assert body["totalCustomers"] == 0
    assert body["totalOrders"] == 0
    assert body["totalRevenue"] == 0
    assert body["totalBalance"] == 0
    assert body["statusCounts"] == {"In Process": 0, "Delivered": 0, "Cancelled": 0}
    assert len(body["chartData"]) == 6
    assert all(point["revenue"] == 0 for point in body["chartData"])


def test_totals_follow_orders_and_ledger(client, make_customer, make_order, make_payment):
    first = make_customer(name="Customer One")
    second = make_customer(name="Customer Two")
    a = make_order(first["id"], total=1000, advance=400)
    make_order(second["id"], total=2500, advance=500, status="Delivered")
    make_payment(a["id"], 300)

    body = client.get("/api/stats").json()
    assert body["totalCustomers"] == 2
    assert body["totalOrders"] == 2
    assert body["totalRevenue"] == 3500
    assert body["totalAdvances"] == 900
    assert body["totalPayments"] == 300
    assert body["totalBalance"] == 2300
    assert body["recentOrdersCount"] == 2
    assert body["statusCounts"]["Delivered"] == 1
    assert body["statusCounts"]["In Process"] == 1

    current_month = datetime.utcnow().strftime("%b %Y")
    assert body["chartData"][-1] == {"month": current_month, "revenue": 3500}


def test_month_starts_cross_year_boundary():
    assert month_starts(date(2024, 2, 17)) == [
        date(2023, 9, 1),
        date(2023, 10, 1),
        date(2023, 11, 1),
        date(2023, 12, 1),
        date(2024, 1, 1),
        date(2024, 2, 1),
    ]


def test_chart_labels_for_given_day(db):
    points = StatsService(db).chart_data(date(2025, 3, 31))
    assert [p["month"] for p in points] == ["Oct 2024", "Nov 2024", "Dec 2024", "Jan 2025", "Feb 2025", "Mar 2025"]
