from __future__ import annotations

from ..extensions import db
from ispstock.time_utils import to_utc_z, to_iso_date
from .mixins import new_id


STAFF_ROLES = ("technician", "supervisor", "admin")


class Staff(db.Model):
    """
    Field staff (technicians and their supervisors).

    Staff are not login accounts; transactions reference the staff member
    who takes or returns the stock. Deletion is soft (is_active=False) so
    transaction history keeps its references.
    """
    __tablename__ = "staff"
    __table_args__ = (
        db.Index("ix_staff_role", "role"),
        db.Index("ix_staff_team", "team"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True)
    phone = db.Column(db.String(20), nullable=False)
    role = db.Column(db.String(20), nullable=False)
    team = db.Column(db.String(100), nullable=False)
    area = db.Column(db.String(255), nullable=False)
    skills = db.Column(db.JSON, nullable=False, default=list)
    join_date = db.Column(db.Date, nullable=False)

    completed_jobs = db.Column(db.Integer, nullable=False, default=0)
    rating = db.Column(db.Float, nullable=False, default=5.0)
    efficiency = db.Column(db.Integer, nullable=False, default=100)

    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role,
            "team": self.team,
            "area": self.area,
            "skills": list(self.skills or []),
            "join_date": to_iso_date(self.join_date),
            "completed_jobs": self.completed_jobs,
            "rating": self.rating,
            "efficiency": self.efficiency,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
