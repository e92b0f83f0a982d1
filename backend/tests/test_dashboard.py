"""
Dashboard, health and error envelope tests.
"""

from ispstock.models import StockItem
from ispstock.services import transaction_service

from conftest import make_customer, make_staff, make_stock


def _seed(db_session):
    make_stock(db_session, name="Router AX1800", quantity=10, min_stock=2, price=500000)
    make_stock(db_session, name="Cat6 UTP Cable", quantity=1, min_stock=5, category="cable", price=10000)
    alpha = make_staff(db_session, name="Alpha One", email="a1@isp.test", rating=4.0, efficiency=90)
    make_staff(db_session, name="Beta One", email="b1@isp.test", team="Team Beta", rating=5.0, efficiency=80)
    make_customer(db_session)
    return alpha


class TestDashboardStats:

    def test_stats(self, client, db_session, technician_headers):
        alpha = _seed(db_session)
        router = db_session.query(StockItem).filter_by(name="Router AX1800").one()
        transaction_service.create_transaction(
            type="installation",
            staff_id=alpha.id,
            notes="Install at block C",
            items=[{"stock_id": router.id, "quantity": 1}],
        )

        resp = client.get("/api/dashboard/stats", headers=technician_headers)

        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["totalStock"] == 2
        assert data["lowStockItems"] == 1
        assert data["pendingTransactions"] == 1
        assert data["totalTransactions"] == 1
        assert data["completedTransactions"] == 0
        assert data["activeCustomers"] == 1
        assert data["monthlyInstallations"] == 1
        assert data["totalStaff"] == 2
        assert data["teamPerformance"] == 90
        assert data["averageRating"] == "4.5"
        assert data["averageEfficiency"] == 85
        assert data["totalStockValue"] == 5010000.0
        assert data["recentActivities"][0]["staff_name"] == "Alpha One"
        assert [a["name"] for a in data["lowStockAlerts"]] == ["Cat6 UTP Cable"]

    def test_empty_database(self, client, db_session, technician_headers):
        data = client.get("/api/dashboard/stats", headers=technician_headers).get_json()["data"]
        assert data["totalStock"] == 0
        assert data["teamPerformance"] == 0
        assert data["averageRating"] == "0.0"
        assert data["totalStockValue"] == 0.0
        assert data["recentActivities"] == []


class TestTrendsAndPerformance:

    def test_trends(self, client, db_session, technician_headers):
        _seed(db_session)

        data = client.get("/api/dashboard/trends", headers=technician_headers).get_json()["data"]

        assert sum(row["new_customers"] for row in data["customers"]) == 1
        assert data["transactions"] == []
        assert data["stock"][0] == {"category": "router", "items": 1, "value": 5000000.0}

    def test_performance(self, client, db_session, admin_user, technician_headers):
        alpha = _seed(db_session)
        router = db_session.query(StockItem).filter_by(name="Router AX1800").one()
        tx = transaction_service.create_transaction(
            type="maintenance",
            staff_id=alpha.id,
            notes="Check signal levels",
            items=[{"stock_id": router.id, "quantity": 1}],
        )
        transaction_service.approve_transaction(tx.id, admin_user.id)
        transaction_service.complete_transaction(tx.id)

        data = client.get("/api/dashboard/performance", headers=technician_headers).get_json()["data"]

        assert [t["team"] for t in data["teams"]] == ["Team Beta", "Team Alpha"]
        assert data["topStaff"][0]["name"] == "Beta One"
        assert data["completionRates"] == [
            {"type": "maintenance", "total": 1, "completed": 1, "completion_rate": 100.0}
        ]


class TestSystem:

    def test_health(self, client, db_session):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["status"] == "OK"
        assert body["checks"]["notifications"]["details"]["sender"] == "RecordingSender"

    def test_unknown_api_route(self, client, db_session):
        resp = client.get("/api/nope")
        assert resp.status_code == 404
        assert resp.get_json() == {"success": False, "message": "API endpoint not found"}

    def test_cors_only_for_frontend(self, client, db_session):
        allowed = client.get("/api/health", headers={"Origin": "http://frontend.test"})
        assert allowed.headers["Access-Control-Allow-Origin"] == "http://frontend.test"

        other = client.get("/api/health", headers={"Origin": "http://evil.test"})
        assert "Access-Control-Allow-Origin" not in other.headers
