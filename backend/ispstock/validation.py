"""
Declarative request schemas.

Each schema maps field name -> Field(kind, required, bounds, choices, default).
Schema.validate() checks the whole payload and raises a single
ValidationError listing every violated field, in the order the fields were
declared. Business rules (stock availability, referenced rows existing)
live in the services, not here.
"""
from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field as dc_field
from datetime import date
from typing import Any

from ispstock.time_utils import parse_iso_date
from .models import (
    USER_ROLES,
    STOCK_CATEGORIES,
    STAFF_ROLES,
    SERVICE_TYPES,
    CUSTOMER_STATUSES,
    DEVICE_STATUSES,
    SERVICE_HISTORY_TYPES,
    SERVICE_HISTORY_STATUSES,
    TRANSACTION_TYPES,
)


EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_RE = re.compile(r"^\+?[1-9]\d{1,14}$")

_MISSING = object()


class ValidationError(ValueError):
    """400-level input problem. Carries every violated field message."""

    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__(", ".join(self.errors))


@dataclass(frozen=True)
class Field:
    kind: str
    required: bool = False
    min: float | None = None
    max: float | None = None
    choices: tuple | None = None
    pattern: re.Pattern | None = None
    default: Any = _MISSING
    allow_blank: bool = False
    items: "Field | Schema | None" = None


@dataclass(frozen=True)
class Schema:
    name: str
    fields: dict[str, Field] = dc_field(default_factory=dict)

    def validate(self, payload: Any, *, prefix: str = "") -> dict:
        """
        Validate + normalize a JSON object against this schema.

        Returns a cleaned dict containing declared fields only (defaults
        applied). Raises ValidationError with all problems found.
        """
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise ValidationError(f'"{prefix or "value"}" must be an object')

        errors: list[str] = []
        cleaned: dict = {}

        for key, rule in self.fields.items():
            label = f"{prefix}{key}"
            raw = payload.get(key, _MISSING)

            if raw is _MISSING or raw is None:
                if rule.required:
                    errors.append(f'"{label}" is required')
                elif rule.default is not _MISSING:
                    cleaned[key] = rule.default() if callable(rule.default) else rule.default
                continue

            try:
                cleaned[key] = _check_value(rule, raw, label)
            except ValidationError as e:
                errors.extend(e.errors)

        for key in payload.keys():
            if key not in self.fields:
                errors.append(f'"{prefix}{key}" is not allowed')

        if errors:
            raise ValidationError(errors)
        return cleaned


def _check_value(rule: Field, raw: Any, label: str) -> Any:
    kind = rule.kind

    if kind in ("string", "email", "id"):
        if not isinstance(raw, str):
            raise ValidationError(f'"{label}" must be a string')
        value = raw.strip()
        if value == "":
            if rule.allow_blank:
                # Optional references sent as "" mean "not provided"
                return None if kind == "id" else ""
            raise ValidationError(f'"{label}" is not allowed to be empty')
        if kind == "email" and not EMAIL_RE.match(value):
            raise ValidationError(f'"{label}" must be a valid email')
        if kind == "id":
            try:
                uuid.UUID(value)
            except ValueError:
                raise ValidationError(f'"{label}" must be a valid GUID')
        if rule.min is not None and len(value) < rule.min:
            raise ValidationError(f'"{label}" length must be at least {int(rule.min)} characters long')
        if rule.max is not None and len(value) > rule.max:
            raise ValidationError(f'"{label}" length must be less than or equal to {int(rule.max)} characters long')
        if rule.pattern is not None and not rule.pattern.match(value):
            raise ValidationError(f'"{label}" with value "{value}" fails to match the required pattern')
        _check_choices(rule, value, label)
        return value

    if kind == "integer":
        value = _coerce_integer(raw, label)
        _check_range(rule, value, label)
        return value

    if kind == "number":
        value = _coerce_number(raw, label)
        _check_range(rule, value, label)
        return value

    if kind == "boolean":
        if not isinstance(raw, bool):
            raise ValidationError(f'"{label}" must be a boolean')
        return raw

    if kind == "date":
        if isinstance(raw, date):
            return raw
        if not isinstance(raw, str):
            raise ValidationError(f'"{label}" must be a valid date')
        try:
            value = parse_iso_date(raw)
        except ValueError:
            raise ValidationError(f'"{label}" must be a valid date')
        if value is None:
            raise ValidationError(f'"{label}" must be a valid date')
        return value

    if kind == "list":
        if not isinstance(raw, list):
            raise ValidationError(f'"{label}" must be an array')
        if rule.min is not None and len(raw) < rule.min:
            raise ValidationError(f'"{label}" must contain at least {int(rule.min)} items')
        if rule.max is not None and len(raw) > rule.max:
            raise ValidationError(f'"{label}" must contain less than or equal to {int(rule.max)} items')
        errors: list[str] = []
        values = []
        for index, entry in enumerate(raw):
            entry_label = f"{label}[{index}]"
            try:
                if isinstance(rule.items, Schema):
                    values.append(rule.items.validate(entry, prefix=f"{entry_label}."))
                elif isinstance(rule.items, Field):
                    values.append(_check_value(rule.items, entry, entry_label))
                else:
                    values.append(entry)
            except ValidationError as e:
                errors.extend(e.errors)
        if errors:
            raise ValidationError(errors)
        return values

    if kind == "object":
        if not isinstance(rule.items, Schema):
            raise TypeError(f"object field {label} needs a nested Schema")
        return rule.items.validate(raw, prefix=f"{label}.")

    raise TypeError(f"Unknown field kind: {kind}")


def _coerce_integer(raw: Any, label: str) -> int:
    # Strict: reject bools, every float (2.0 included) and scientific notation
    if isinstance(raw, bool):
        raise ValidationError(f'"{label}" must be an integer')
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        raise ValidationError(f'"{label}" must be an integer')
    if isinstance(raw, str):
        stripped = raw.strip()
        if not stripped or "e" in stripped.lower() or "." in stripped:
            raise ValidationError(f'"{label}" must be an integer')
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f'"{label}" must be an integer')
    raise ValidationError(f'"{label}" must be an integer')


def _coerce_number(raw: Any, label: str) -> float:
    if isinstance(raw, bool):
        raise ValidationError(f'"{label}" must be a number')
    if isinstance(raw, (int, float)):
        return raw
    if isinstance(raw, str):
        try:
            return float(raw.strip())
        except ValueError:
            raise ValidationError(f'"{label}" must be a number')
    raise ValidationError(f'"{label}" must be a number')


def _check_range(rule: Field, value: float, label: str) -> None:
    if rule.min is not None and value < rule.min:
        raise ValidationError(f'"{label}" must be greater than or equal to {_fmt(rule.min)}')
    if rule.max is not None and value > rule.max:
        raise ValidationError(f'"{label}" must be less than or equal to {_fmt(rule.max)}')
    _check_choices(rule, value, label)


def _check_choices(rule: Field, value: Any, label: str) -> None:
    if rule.choices is not None and value not in rule.choices:
        options = ", ".join(str(c) for c in rule.choices)
        raise ValidationError(f'"{label}" must be one of [{options}]')


def _fmt(bound: float) -> str:
    return str(int(bound)) if float(bound).is_integer() else str(bound)


# =============================================================================
# SCHEMAS
# =============================================================================

REGISTER_SCHEMA = Schema("register", {
    "name": Field("string", required=True, min=2, max=255),
    "email": Field("email", required=True),
    "password": Field("string", required=True, min=6),
    "role": Field("string", choices=USER_ROLES, default="technician"),
    "phone": Field("string", pattern=PHONE_RE),
})

LOGIN_SCHEMA = Schema("login", {
    "email": Field("email", required=True),
    "password": Field("string", required=True),
})

STOCK_ITEM_SCHEMA = Schema("stock_item", {
    "name": Field("string", required=True, min=2, max=255),
    "category": Field("string", required=True, choices=STOCK_CATEGORIES),
    "brand": Field("string", required=True, min=1, max=100),
    "model": Field("string", required=True, min=1, max=100),
    "quantity": Field("integer", required=True, min=0),
    "min_stock": Field("integer", required=True, min=0),
    "unit": Field("string", required=True, min=1, max=20),
    "location": Field("string", required=True, min=1, max=255),
    "price": Field("number", required=True, min=0),
    "description": Field("string", max=1000, allow_blank=True, default=""),
})

STOCK_QUANTITY_SCHEMA = Schema("stock_quantity", {
    "quantity": Field("integer", required=True, min=1),
    "operation": Field("string", required=True, choices=("add", "subtract")),
})

STAFF_SCHEMA = Schema("staff", {
    "name": Field("string", required=True, min=2, max=255),
    "email": Field("email", required=True),
    "phone": Field("string", required=True, pattern=PHONE_RE),
    "role": Field("string", required=True, choices=STAFF_ROLES),
    "team": Field("string", required=True, min=1, max=100),
    "area": Field("string", required=True, min=1, max=255),
    "skills": Field("list", items=Field("string"), default=list),
    "completed_jobs": Field("integer", min=0, default=0),
    "rating": Field("number", min=1, max=5, default=5.0),
    "efficiency": Field("integer", min=0, max=100, default=100),
})

STAFF_PERFORMANCE_SCHEMA = Schema("staff_performance", {
    "completed_jobs": Field("integer", required=True, min=0),
    "rating": Field("number", required=True, min=1, max=5),
    "efficiency": Field("integer", required=True, min=0, max=100),
})

CUSTOMER_SCHEMA = Schema("customer", {
    "name": Field("string", required=True, min=2, max=255),
    "email": Field("email", required=True),
    "phone": Field("string", required=True, pattern=PHONE_RE),
    "address": Field("string", required=True, min=5),
    "service_type": Field("string", required=True, choices=SERVICE_TYPES),
    "package_type": Field("string", required=True, min=1, max=100),
    "status": Field("string", choices=CUSTOMER_STATUSES, default="active"),
    "installation_date": Field("date"),
})

CUSTOMER_STATUS_SCHEMA = Schema("customer_status", {
    "status": Field("string", required=True, choices=CUSTOMER_STATUSES),
})

DEVICE_SCHEMA = Schema("customer_device", {
    "stock_id": Field("id", required=True),
    "serial_number": Field("string", required=True, min=1, max=100),
    "install_date": Field("date"),
    "location": Field("string", required=True, min=1, max=255),
    "status": Field("string", choices=DEVICE_STATUSES, default="active"),
})

SERVICE_HISTORY_SCHEMA = Schema("service_history", {
    "type": Field("string", required=True, choices=SERVICE_HISTORY_TYPES),
    "description": Field("string", required=True, min=1),
    "technician": Field("string", required=True, min=1, max=255),
    "date": Field("date"),
    "status": Field("string", choices=SERVICE_HISTORY_STATUSES, default="pending"),
    "cost": Field("number", min=0, default=0),
})

TRANSACTION_ITEM_SCHEMA = Schema("transaction_item", {
    "stock_id": Field("id", required=True),
    "quantity": Field("integer", required=True, min=1),
    "notes": Field("string", allow_blank=True, default=""),
})

TRANSACTION_SCHEMA = Schema("transaction", {
    "type": Field("string", required=True, choices=TRANSACTION_TYPES),
    "staff_id": Field("id", required=True),
    "customer_id": Field("id", allow_blank=True),
    "notes": Field("string", required=True, min=5),
    "items": Field("list", required=True, min=1, items=TRANSACTION_ITEM_SCHEMA),
})
