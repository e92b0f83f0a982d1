"""
Schema validation tests.

Covers strict integer coercion, aggregated messages, defaults and the
blank-reference rule. Schemas are exercised directly, without HTTP.
"""

import pytest

from ispstock.validation import (
    CUSTOMER_SCHEMA,
    REGISTER_SCHEMA,
    STAFF_SCHEMA,
    TRANSACTION_SCHEMA,
    ValidationError,
)


VALID_ID = "3f2b8c1e-5a4d-4e6f-9b7a-1c2d3e4f5a6b"


def _transaction(**overrides):
    body = {
        "type": "installation",
        "staff_id": VALID_ID,
        "notes": "Install at block C",
        "items": [{"stock_id": VALID_ID, "quantity": 1}],
    }
    body.update(overrides)
    return body


class TestIntegerCoercion:

    @pytest.mark.parametrize("value", [True, 1.5, 2.0, "1e3", "2.0", "abc", None])
    def test_rejects_non_integers(self, value):
        items = [{"stock_id": VALID_ID, "quantity": value}]
        with pytest.raises(ValidationError):
            TRANSACTION_SCHEMA.validate(_transaction(items=items))

    def test_accepts_integer_string(self):
        cleaned = TRANSACTION_SCHEMA.validate(_transaction(items=[{"stock_id": VALID_ID, "quantity": "3"}]))
        assert cleaned["items"][0]["quantity"] == 3


class TestTransactionSchema:

    def test_blank_customer_becomes_none(self):
        cleaned = TRANSACTION_SCHEMA.validate(_transaction(customer_id=""))
        assert cleaned["customer_id"] is None

    def test_item_notes_default(self):
        cleaned = TRANSACTION_SCHEMA.validate(_transaction())
        assert cleaned["items"][0]["notes"] == ""

    def test_every_violation_reported(self):
        with pytest.raises(ValidationError) as exc:
            TRANSACTION_SCHEMA.validate({
                "type": "installation",
                "staff_id": "not-a-uuid",
                "notes": "ok",
                "items": [{"stock_id": VALID_ID, "quantity": 0}, {"quantity": 1}],
            })

        assert exc.value.errors == [
            '"staff_id" must be a valid GUID',
            '"notes" length must be at least 5 characters long',
            '"items[0].quantity" must be greater than or equal to 1',
            '"items[1].stock_id" is required',
        ]
        assert str(exc.value) == ", ".join(exc.value.errors)

    def test_non_object_payload(self):
        with pytest.raises(ValidationError):
            TRANSACTION_SCHEMA.validate(["not", "an", "object"])


class TestOtherSchemas:

    def test_register_defaults_role(self):
        cleaned = REGISTER_SCHEMA.validate({"name": "Jo Tech", "email": "jo@isp.test", "password": "secret1"})
        assert cleaned["role"] == "technician"

    def test_register_rules(self):
        with pytest.raises(ValidationError) as exc:
            REGISTER_SCHEMA.validate({"name": "J", "email": "nope", "password": "123", "phone": "0812"})
        assert len(exc.value.errors) == 4

    def test_staff_bounds(self):
        with pytest.raises(ValidationError) as exc:
            STAFF_SCHEMA.validate({
                "name": "Budi Santoso",
                "email": "budi@isp.test",
                "phone": "+6281234567890",
                "role": "technician",
                "team": "Team Alpha",
                "area": "Jakarta",
                "rating": 6,
                "efficiency": 101,
            })
        assert '"rating" must be less than or equal to 5' in exc.value.errors
        assert '"efficiency" must be less than or equal to 100' in exc.value.errors

    def test_customer_date(self):
        base = {
            "name": "Andi Wijaya",
            "email": "andi@example.com",
            "phone": "+6281298765432",
            "address": "Jl. Melati No. 5",
            "service_type": "residential",
            "package_type": "Home 30Mbps",
        }
        cleaned = CUSTOMER_SCHEMA.validate({**base, "installation_date": "2026-01-15"})
        assert cleaned["installation_date"].isoformat() == "2026-01-15"
        assert cleaned["status"] == "active"

        with pytest.raises(ValidationError, match="must be a valid date"):
            CUSTOMER_SCHEMA.validate({**base, "installation_date": "15/01/2026"})
