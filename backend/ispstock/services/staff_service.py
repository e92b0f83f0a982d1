# Overview: Service-layer operations for field staff; encapsulates business logic and database work.

from __future__ import annotations

from sqlalchemy import case, func, or_

from ..errors import ServiceError
from ..extensions import db
from ..models import Staff
from ..time_utils import today
from .pagination import paginate


STAFF_FIELDS = (
    "name", "email", "phone", "role", "team", "area",
    "skills", "completed_jobs", "rating", "efficiency",
)


class StaffError(ServiceError):
    """Raised for staff operation errors."""
    pass


def _active_staff(staff_id: str) -> Staff:
    staff = db.session.query(Staff).filter_by(id=staff_id, is_active=True).first()
    if not staff:
        raise StaffError("Staff member not found", 404)
    return staff


def list_staff(
    *,
    role: str | None = None,
    team: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 50,
) -> tuple[list[Staff], dict]:
    query = db.session.query(Staff).filter(Staff.is_active.is_(True))

    if role and role != "all":
        query = query.filter(Staff.role == role)
    if team and team != "all":
        query = query.filter(Staff.team == team)
    if search:
        term = f"%{search}%"
        query = query.filter(or_(Staff.name.ilike(term), Staff.email.ilike(term), Staff.area.ilike(term)))

    query = query.order_by(Staff.created_at.desc())
    return paginate(query, page, limit)


def get_staff(staff_id: str) -> Staff:
    return _active_staff(staff_id)


def create_staff(data: dict) -> Staff:
    if db.session.query(Staff.id).filter_by(email=data["email"]).first():
        raise StaffError("Staff member with this email already exists", 409)

    staff = Staff(**{k: data[k] for k in STAFF_FIELDS if k in data})
    staff.join_date = today()
    db.session.add(staff)
    db.session.commit()
    return staff


def update_staff(staff_id: str, data: dict) -> Staff:
    staff = _active_staff(staff_id)

    duplicate = db.session.query(Staff.id).filter(
        Staff.email == data.get("email", staff.email),
        Staff.id != staff_id,
    ).first()
    if duplicate:
        raise StaffError("Another staff member with this email already exists", 409)

    for key in STAFF_FIELDS:
        if key in data:
            setattr(staff, key, data[key])
    db.session.commit()
    return staff


def deactivate_staff(staff_id: str) -> None:
    """Soft delete: the row stays so transaction history keeps its staff names."""
    staff = db.session.get(Staff, staff_id)
    if not staff:
        raise StaffError("Staff member not found", 404)
    staff.is_active = False
    db.session.commit()


def update_performance(staff_id: str, *, completed_jobs: int, rating: float, efficiency: int) -> Staff:
    staff = _active_staff(staff_id)
    staff.completed_jobs = completed_jobs
    staff.rating = rating
    staff.efficiency = efficiency
    db.session.commit()
    return staff


def get_staff_stats() -> dict:
    active = Staff.is_active.is_(True)

    overview = db.session.query(
        func.count(Staff.id).label("total_staff"),
        func.count(case((Staff.role == "technician", 1))).label("technicians"),
        func.count(case((Staff.role == "supervisor", 1))).label("supervisors"),
        func.count(case((Staff.role == "admin", 1))).label("admins"),
        func.avg(Staff.rating).label("average_rating"),
        func.avg(Staff.efficiency).label("average_efficiency"),
        func.coalesce(func.sum(Staff.completed_jobs), 0).label("total_completed_jobs"),
    ).filter(active).one()

    members = func.count(Staff.id)
    teams = (
        db.session.query(
            Staff.team,
            members.label("members"),
            func.avg(Staff.rating).label("avg_rating"),
            func.avg(Staff.efficiency).label("avg_efficiency"),
            func.coalesce(func.sum(Staff.completed_jobs), 0).label("total_jobs"),
        )
        .filter(active)
        .group_by(Staff.team)
        .order_by(members.desc())
        .all()
    )

    return {
        "overview": dict(overview._mapping),
        "teams": [dict(row._mapping) for row in teams],
    }
