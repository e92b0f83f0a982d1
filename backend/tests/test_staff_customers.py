"""
Staff and customer API tests.

Staff are soft-deleted and unique by email. Customers are hard-deleted and
carry installed devices (unique serial numbers) and service history.
"""

from ispstock.models import Customer, CustomerDevice, Staff

from conftest import make_customer, make_staff


STAFF_BODY = {
    "name": "Siti Rahma",
    "email": "siti@isp.test",
    "phone": "+6281311112222",
    "role": "technician",
    "team": "Team Beta",
    "area": "Bekasi",
    "skills": ["fiber", "wireless"],
}

CUSTOMER_BODY = {
    "name": "PT Maju Jaya",
    "email": "it@majujaya.co.id",
    "phone": "+622155556666",
    "address": "Jl. Sudirman Kav. 21, Jakarta",
    "service_type": "business",
    "package_type": "Business 100Mbps",
}


# =============================================================================
# STAFF
# =============================================================================


class TestStaffApi:

    def test_create_applies_defaults(self, client, supervisor_headers):
        resp = client.post("/api/staff", json=STAFF_BODY, headers=supervisor_headers)

        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["skills"] == ["fiber", "wireless"]
        assert data["rating"] == 5.0
        assert data["efficiency"] == 100
        assert data["completed_jobs"] == 0
        assert data["join_date"] is not None
        assert data["is_active"] is True

    def test_duplicate_email(self, client, supervisor_headers, staff_member):
        resp = client.post("/api/staff", json={**STAFF_BODY, "email": staff_member.email}, headers=supervisor_headers)
        assert resp.status_code == 409
        assert resp.get_json()["message"] == "Staff member with this email already exists"

    def test_update_to_taken_email(self, client, db_session, supervisor_headers, staff_member):
        other = make_staff(db_session, name="Other", email="other@isp.test")

        resp = client.put(
            f"/api/staff/{other.id}",
            json={**STAFF_BODY, "email": staff_member.email},
            headers=supervisor_headers,
        )
        assert resp.status_code == 409
        assert resp.get_json()["message"] == "Another staff member with this email already exists"

    def test_update_keeps_own_email(self, client, supervisor_headers, staff_member):
        resp = client.put(
            f"/api/staff/{staff_member.id}",
            json={**STAFF_BODY, "email": staff_member.email, "team": "Team Gamma"},
            headers=supervisor_headers,
        )
        assert resp.status_code == 200
        assert resp.get_json()["data"]["team"] == "Team Gamma"

    def test_soft_delete(self, client, db_session, admin_headers, staff_member):
        resp = client.delete(f"/api/staff/{staff_member.id}", headers=admin_headers)
        assert resp.status_code == 200

        assert db_session.get(Staff, staff_member.id, populate_existing=True).is_active is False
        assert client.get(f"/api/staff/{staff_member.id}", headers=admin_headers).status_code == 404

        listed = client.get("/api/staff", headers=admin_headers).get_json()["data"]
        assert listed["staff"] == []

    def test_performance(self, client, supervisor_headers, staff_member):
        resp = client.patch(
            f"/api/staff/{staff_member.id}/performance",
            json={"completed_jobs": 42, "rating": 4.5, "efficiency": 88},
            headers=supervisor_headers,
        )
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert (data["completed_jobs"], data["rating"], data["efficiency"]) == (42, 4.5, 88)

    def test_list_filters_and_stats(self, client, db_session, technician_headers):
        make_staff(db_session, name="Alpha One", email="a1@isp.test", team="Team Alpha", rating=4.0)
        make_staff(db_session, name="Alpha Two", email="a2@isp.test", team="Team Alpha", rating=5.0)
        make_staff(db_session, name="Beta Lead", email="b1@isp.test", team="Team Beta", role="supervisor")
        make_staff(db_session, name="Gone", email="gone@isp.test", is_active=False)

        resp = client.get("/api/staff?team=Team%20Alpha", headers=technician_headers)
        assert {s["name"] for s in resp.get_json()["data"]["staff"]} == {"Alpha One", "Alpha Two"}

        resp = client.get("/api/staff?role=supervisor", headers=technician_headers)
        assert [s["name"] for s in resp.get_json()["data"]["staff"]] == ["Beta Lead"]

        stats = client.get("/api/staff/stats/overview", headers=technician_headers).get_json()["data"]
        assert stats["overview"]["total_staff"] == 3
        assert stats["overview"]["supervisors"] == 1
        assert stats["teams"][0]["team"] == "Team Alpha"
        assert stats["teams"][0]["members"] == 2

    def test_technician_cannot_manage(self, client, technician_headers):
        resp = client.post("/api/staff", json=STAFF_BODY, headers=technician_headers)
        assert resp.status_code == 403


# =============================================================================
# CUSTOMERS
# =============================================================================


class TestCustomerApi:

    def test_create_defaults(self, client, supervisor_headers):
        resp = client.post("/api/customers", json=CUSTOMER_BODY, headers=supervisor_headers)

        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["status"] == "active"
        assert data["installation_date"] is not None
        assert data["devices"] == []
        assert data["service_history"] == []

    def test_get_unknown(self, client, technician_headers):
        resp = client.get("/api/customers/00000000-0000-0000-0000-000000000000", headers=technician_headers)
        assert resp.status_code == 404
        assert resp.get_json()["message"] == "Customer not found"

    def test_status(self, client, supervisor_headers, customer):
        resp = client.patch(f"/api/customers/{customer.id}/status", json={"status": "suspended"}, headers=supervisor_headers)
        assert resp.status_code == 200
        assert resp.get_json()["data"]["status"] == "suspended"

        resp = client.patch(f"/api/customers/{customer.id}/status", json={"status": "paused"}, headers=supervisor_headers)
        assert resp.status_code == 400

    def test_devices(self, client, supervisor_headers, customer, stock_item):
        body = {"stock_id": stock_item.id, "serial_number": "SN-0001", "location": "Living room"}

        resp = client.post(f"/api/customers/{customer.id}/devices", json=body, headers=supervisor_headers)
        assert resp.status_code == 201
        device = resp.get_json()["data"]
        assert device["stock_name"] == stock_item.name
        assert device["status"] == "active"

        again = client.post(f"/api/customers/{customer.id}/devices", json=body, headers=supervisor_headers)
        assert again.status_code == 409
        assert again.get_json()["message"] == "Device with this serial number already exists"

        missing = client.post(
            f"/api/customers/{customer.id}/devices",
            json={**body, "serial_number": "SN-0002", "stock_id": "00000000-0000-0000-0000-000000000000"},
            headers=supervisor_headers,
        )
        assert missing.status_code == 404
        assert missing.get_json()["message"] == "Stock item not found"

    def test_service_history(self, client, supervisor_headers, customer):
        resp = client.post(
            f"/api/customers/{customer.id}/service-history",
            json={"type": "repair", "description": "Replaced ONT power adapter", "technician": "Budi", "cost": 75000},
            headers=supervisor_headers,
        )
        assert resp.status_code == 201
        entry = resp.get_json()["data"]
        assert entry["status"] == "pending"
        assert entry["cost"] == 75000.0

        detail = client.get(f"/api/customers/{customer.id}", headers=supervisor_headers).get_json()["data"]
        assert [h["description"] for h in detail["service_history"]] == ["Replaced ONT power adapter"]

    def test_delete_removes_devices(self, client, db_session, admin_headers, customer, stock_item):
        client.post(
            f"/api/customers/{customer.id}/devices",
            json={"stock_id": stock_item.id, "serial_number": "SN-0009", "location": "Office"},
            headers=admin_headers,
        )

        resp = client.delete(f"/api/customers/{customer.id}", headers=admin_headers)
        assert resp.status_code == 200
        assert db_session.query(Customer).count() == 0
        assert db_session.query(CustomerDevice).count() == 0

    def test_supervisor_cannot_delete(self, client, supervisor_headers, customer):
        assert client.delete(f"/api/customers/{customer.id}", headers=supervisor_headers).status_code == 403

    def test_list_and_stats(self, client, db_session, technician_headers):
        make_customer(db_session, name="Home A", email="a@example.com")
        make_customer(db_session, name="Office B", email="b@example.com", service_type="business", status="suspended")

        resp = client.get("/api/customers?service_type=business", headers=technician_headers)
        assert [c["name"] for c in resp.get_json()["data"]["customers"]] == ["Office B"]

        resp = client.get("/api/customers?status=all&search=home", headers=technician_headers)
        assert [c["name"] for c in resp.get_json()["data"]["customers"]] == ["Home A"]

        stats = client.get("/api/customers/stats/overview", headers=technician_headers).get_json()["data"]
        assert stats["overview"]["total_customers"] == 2
        assert stats["overview"]["suspended_customers"] == 1
        assert stats["overview"]["business_customers"] == 1
        assert sum(m["installations"] for m in stats["monthly"]) == 2
