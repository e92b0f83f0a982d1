"""
Transaction workflow tests (service layer).

Verifies:
- Create persists the transaction and all items atomically, stock untouched
- A failed create persists nothing
- Approve applies the stock effect per type, exactly once
- Reject and complete only move from their allowed states
- Strict approval refuses to drive stock negative and rolls back
"""

import pytest

from ispstock.models import StockItem, Transaction, TransactionItem
from ispstock.services import transaction_service
from ispstock.services.transaction_service import TransactionError

from conftest import make_customer, make_staff, make_stock


def _create(staff, items, type="installation", customer=None, notes="Install at block C"):
    return transaction_service.create_transaction(
        type=type,
        staff_id=staff.id,
        customer_id=customer.id if customer else None,
        notes=notes,
        items=items,
    )


def _quantity(db_session, stock_id):
    return db_session.get(StockItem, stock_id, populate_existing=True).quantity


# =============================================================================
# CREATE
# =============================================================================


class TestCreateTransaction:

    def test_creates_pending_transaction_with_items(self, db_session, staff_member, customer):
        router = make_stock(db_session, name="Router", quantity=10)
        cable = make_stock(db_session, name="Cable", quantity=5, category="cable")

        tx = _create(
            staff_member,
            [{"stock_id": router.id, "quantity": 2}, {"stock_id": cable.id, "quantity": 1, "notes": "20m"}],
            customer=customer,
        )

        assert tx.status == "pending"
        assert tx.approved_by is None and tx.approved_at is None
        assert len(tx.items) == 2

        data = tx.to_dict()
        assert data["staff_name"] == staff_member.name
        assert data["customer_name"] == customer.name
        assert {item["stock_name"] for item in data["items"]} == {"Router", "Cable"}
        assert all(item["unit"] == "pcs" for item in data["items"])

    def test_create_does_not_touch_stock(self, db_session, staff_member):
        item = make_stock(db_session, quantity=10)
        _create(staff_member, [{"stock_id": item.id, "quantity": 3}])
        assert _quantity(db_session, item.id) == 10

    def test_unknown_stock_item_persists_nothing(self, db_session, staff_member):
        item = make_stock(db_session, quantity=10)
        missing = "00000000-0000-0000-0000-000000000000"

        with pytest.raises(TransactionError) as exc:
            _create(staff_member, [{"stock_id": item.id, "quantity": 1}, {"stock_id": missing, "quantity": 1}])

        assert exc.value.message == f"Stock item {missing} not found"
        assert db_session.query(Transaction).count() == 0
        assert db_session.query(TransactionItem).count() == 0

    def test_insufficient_stock_persists_nothing(self, db_session, staff_member):
        item = make_stock(db_session, quantity=1)

        with pytest.raises(TransactionError) as exc:
            _create(staff_member, [{"stock_id": item.id, "quantity": 2}])

        assert exc.value.message == f"Insufficient stock for item {item.id}"
        assert db_session.query(Transaction).count() == 0

    def test_repeated_stock_lines_are_checked_together(self, db_session, staff_member):
        item = make_stock(db_session, quantity=10)

        with pytest.raises(TransactionError) as exc:
            _create(staff_member, [{"stock_id": item.id, "quantity": 6}, {"stock_id": item.id, "quantity": 6}])

        assert exc.value.message == f"Insufficient stock for item {item.id}"
        assert db_session.query(Transaction).count() == 0

    def test_repeated_stock_lines_within_quantity(self, db_session, staff_member, admin_user):
        item = make_stock(db_session, quantity=10)
        tx = _create(staff_member, [{"stock_id": item.id, "quantity": 6}, {"stock_id": item.id, "quantity": 4}])

        transaction_service.approve_transaction(tx.id, admin_user.id)

        assert _quantity(db_session, item.id) == 0

    def test_items_keep_request_order(self, db_session, staff_member):
        stocks = [make_stock(db_session, name=name) for name in ("Zeta ONT", "Alpha Router", "Mid Splitter")]

        tx = _create(staff_member, [{"stock_id": s.id, "quantity": 1} for s in stocks])

        db_session.expire_all()
        reloaded = transaction_service.get_transaction(tx.id)
        assert [item.position for item in reloaded.items] == [0, 1, 2]
        assert [item["stock_name"] for item in reloaded.to_dict()["items"]] == ["Zeta ONT", "Alpha Router", "Mid Splitter"]

    def test_return_skips_availability_check(self, db_session, staff_member):
        item = make_stock(db_session, quantity=0)
        tx = _create(staff_member, [{"stock_id": item.id, "quantity": 4}], type="return")
        assert tx.status == "pending"

    def test_inactive_staff_rejected(self, db_session):
        staff = make_staff(db_session, is_active=False)
        item = make_stock(db_session)

        with pytest.raises(TransactionError, match="Staff member not found"):
            _create(staff, [{"stock_id": item.id, "quantity": 1}])

    def test_unknown_customer_rejected(self, db_session, staff_member, stock_item):
        with pytest.raises(TransactionError, match="Customer not found"):
            transaction_service.create_transaction(
                type="installation",
                staff_id=staff_member.id,
                customer_id="00000000-0000-0000-0000-000000000000",
                notes="Install at block C",
                items=[{"stock_id": stock_item.id, "quantity": 1}],
            )
        assert db_session.query(Transaction).count() == 0

    def test_empty_items_rejected(self, db_session, staff_member):
        with pytest.raises(TransactionError):
            _create(staff_member, [])


# =============================================================================
# APPROVE
# =============================================================================


class TestApproveTransaction:

    @pytest.mark.parametrize(
        "tx_type,expected",
        [
            ("installation", 7),
            ("borrow", 7),
            ("return", 13),
            ("maintenance", 10),
        ],
    )
    def test_stock_effect_per_type(self, db_session, staff_member, admin_user, tx_type, expected):
        item = make_stock(db_session, quantity=10)
        tx = _create(staff_member, [{"stock_id": item.id, "quantity": 3}], type=tx_type)

        approved = transaction_service.approve_transaction(tx.id, admin_user.id)

        assert approved.status == "approved"
        assert approved.approved_by == admin_user.id
        assert approved.approved_at is not None
        assert _quantity(db_session, item.id) == expected

    def test_second_approval_fails_without_touching_stock(self, db_session, staff_member, admin_user):
        item = make_stock(db_session, quantity=10)
        tx = _create(staff_member, [{"stock_id": item.id, "quantity": 3}])

        transaction_service.approve_transaction(tx.id, admin_user.id)
        with pytest.raises(TransactionError) as exc:
            transaction_service.approve_transaction(tx.id, admin_user.id)

        assert exc.value.message == "Transaction not found or already processed"
        assert exc.value.status_code == 404
        assert _quantity(db_session, item.id) == 7

    def test_unknown_transaction(self, db_session, admin_user):
        with pytest.raises(TransactionError, match="not found or already processed"):
            transaction_service.approve_transaction("00000000-0000-0000-0000-000000000000", admin_user.id)

    def test_stock_may_go_negative_by_default(self, db_session, staff_member, admin_user):
        item = make_stock(db_session, quantity=5)
        first = _create(staff_member, [{"stock_id": item.id, "quantity": 5}])
        second = _create(staff_member, [{"stock_id": item.id, "quantity": 5}])

        transaction_service.approve_transaction(first.id, admin_user.id)
        transaction_service.approve_transaction(second.id, admin_user.id)

        assert _quantity(db_session, item.id) == -5

    def test_strict_approval_rolls_back_everything(self, db_session, staff_member, admin_user):
        plenty = make_stock(db_session, name="Plenty", quantity=10)
        scarce = make_stock(db_session, name="Scarce", quantity=5)
        tx = _create(staff_member, [{"stock_id": plenty.id, "quantity": 2}, {"stock_id": scarce.id, "quantity": 5}])

        # Drain the scarce item after the transaction was created
        scarce.quantity = 1
        db_session.commit()

        with pytest.raises(TransactionError) as exc:
            transaction_service.approve_transaction(tx.id, admin_user.id, strict=True)

        assert exc.value.message == f"Insufficient stock for item {scarce.id}"
        assert _quantity(db_session, plenty.id) == 10
        assert _quantity(db_session, scarce.id) == 1
        assert db_session.get(Transaction, tx.id, populate_existing=True).status == "pending"


# =============================================================================
# REJECT / COMPLETE
# =============================================================================


class TestRejectAndComplete:

    def test_reject_is_terminal_and_leaves_stock(self, db_session, staff_member, supervisor_user):
        item = make_stock(db_session, quantity=10)
        tx = _create(staff_member, [{"stock_id": item.id, "quantity": 3}])

        rejected = transaction_service.reject_transaction(tx.id, supervisor_user.id)
        assert rejected.status == "rejected"
        assert rejected.approved_by == supervisor_user.id
        assert _quantity(db_session, item.id) == 10

        with pytest.raises(TransactionError, match="already processed"):
            transaction_service.reject_transaction(tx.id, supervisor_user.id)
        with pytest.raises(TransactionError, match="already processed"):
            transaction_service.approve_transaction(tx.id, supervisor_user.id)
        with pytest.raises(TransactionError, match="not approved"):
            transaction_service.complete_transaction(tx.id)

    def test_complete_requires_approval(self, db_session, staff_member, admin_user):
        item = make_stock(db_session, quantity=10)
        tx = _create(staff_member, [{"stock_id": item.id, "quantity": 3}])

        with pytest.raises(TransactionError) as exc:
            transaction_service.complete_transaction(tx.id)
        assert exc.value.message == "Transaction not found or not approved"
        assert exc.value.status_code == 404

        transaction_service.approve_transaction(tx.id, admin_user.id)
        completed = transaction_service.complete_transaction(tx.id)

        assert completed.status == "completed"
        assert _quantity(db_session, item.id) == 7

        with pytest.raises(TransactionError, match="not approved"):
            transaction_service.complete_transaction(tx.id)


# =============================================================================
# SCENARIOS
# =============================================================================


class TestScenarios:

    def test_borrow_then_return_restores_stock(self, db_session, staff_member, admin_user):
        item = make_stock(db_session, quantity=10)

        borrow = _create(staff_member, [{"stock_id": item.id, "quantity": 4}], type="borrow")
        transaction_service.approve_transaction(borrow.id, admin_user.id)
        assert _quantity(db_session, item.id) == 6

        give_back = _create(staff_member, [{"stock_id": item.id, "quantity": 4}], type="return")
        transaction_service.approve_transaction(give_back.id, admin_user.id)
        assert _quantity(db_session, item.id) == 10

    def test_installation_for_customer_full_lifecycle(self, db_session, staff_member, admin_user):
        customer = make_customer(db_session, name="PT Maju Jaya", email="it@majujaya.test", service_type="business")
        router = make_stock(db_session, name="Router", quantity=3)

        tx = _create(staff_member, [{"stock_id": router.id, "quantity": 1}], customer=customer)
        transaction_service.approve_transaction(tx.id, admin_user.id)
        done = transaction_service.complete_transaction(tx.id)

        assert done.status == "completed"
        assert done.customer_id == customer.id
        assert _quantity(db_session, router.id) == 2


# =============================================================================
# QUERIES
# =============================================================================


class TestQueries:

    def test_list_filters_and_paginates(self, db_session, staff_member, admin_user):
        item = make_stock(db_session, quantity=100)
        for _ in range(3):
            _create(staff_member, [{"stock_id": item.id, "quantity": 1}], type="installation")
        maint = _create(staff_member, [{"stock_id": item.id, "quantity": 1}], type="maintenance", notes="Fix ONT on site")
        transaction_service.approve_transaction(maint.id, admin_user.id)

        rows, pagination = transaction_service.list_transactions(type="installation", page=1, limit=2)
        assert len(rows) == 2
        assert pagination == {"page": 1, "limit": 2, "total": 3, "pages": 2}

        rows, _ = transaction_service.list_transactions(status="approved")
        assert [t.id for t in rows] == [maint.id]

        rows, _ = transaction_service.list_transactions(type="all", status="all", search="ONT")
        assert [t.id for t in rows] == [maint.id]

    def test_get_unknown_transaction(self, db_session):
        with pytest.raises(TransactionError) as exc:
            transaction_service.get_transaction("00000000-0000-0000-0000-000000000000")
        assert exc.value.status_code == 404

    def test_stats(self, db_session, staff_member, admin_user):
        item = make_stock(db_session, quantity=100)
        tx = _create(staff_member, [{"stock_id": item.id, "quantity": 1}])
        _create(staff_member, [{"stock_id": item.id, "quantity": 1}], type="return")
        transaction_service.approve_transaction(tx.id, admin_user.id)

        stats = transaction_service.get_transaction_stats()

        assert stats["overview"]["total_transactions"] == 2
        assert stats["overview"]["approved_transactions"] == 1
        assert stats["overview"]["pending_transactions"] == 1
        assert stats["overview"]["installations"] == 1
        assert stats["overview"]["returns"] == 1
        assert sum(row["count"] for row in stats["monthly"]) == 2
        assert stats["staff"][0] == {
            "staff_name": staff_member.name,
            "transaction_count": 2,
            "completed_count": 0,
        }
