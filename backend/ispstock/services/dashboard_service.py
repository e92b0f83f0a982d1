# Overview: Read-only aggregates for the dashboard; encapsulates reporting queries.

from __future__ import annotations

from datetime import timedelta

from sqlalchemy import case, func

from ..extensions import db
from ..models import Customer, Staff, StockItem, Transaction
from ..time_utils import today, to_utc_z, utcnow
from .stock_service import get_low_stock_items


def _count_where(condition):
    return func.count(case((condition, 1)))


def _to_float(value) -> float:
    return float(value) if value is not None else 0.0


def get_dashboard_stats() -> dict:
    stock = db.session.query(
        func.count(StockItem.id).label("total_stock"),
        _count_where(StockItem.quantity <= StockItem.min_stock).label("low_stock_items"),
        func.sum(StockItem.quantity * StockItem.price).label("total_stock_value"),
    ).one()

    transactions = db.session.query(
        func.count(Transaction.id).label("total"),
        _count_where(Transaction.status == "pending").label("pending"),
        _count_where(Transaction.status == "completed").label("completed"),
        _count_where(
            (Transaction.type == "installation") & (func.date(Transaction.created_at) == today().isoformat())
        ).label("today_installations"),
    ).one()

    customers = db.session.query(
        _count_where(Customer.status == "active").label("active"),
        _count_where(Customer.installation_date >= today() - timedelta(days=30)).label("monthly_installations"),
    ).one()

    staff = db.session.query(
        func.count(Staff.id).label("total"),
        func.avg(Staff.rating).label("average_rating"),
        func.avg(Staff.efficiency).label("average_efficiency"),
    ).filter(Staff.is_active.is_(True)).one()

    recent = (
        db.session.query(Transaction)
        .order_by(Transaction.created_at.desc())
        .limit(10)
        .all()
    )

    average_rating = _to_float(staff.average_rating)

    return {
        "totalStock": stock.total_stock,
        "lowStockItems": stock.low_stock_items,
        "pendingTransactions": transactions.pending,
        "activeCustomers": customers.active,
        "monthlyInstallations": customers.monthly_installations,
        # 5-star average as a percentage
        "teamPerformance": round(average_rating * 20),
        "totalStockValue": _to_float(stock.total_stock_value),
        "todayInstallations": transactions.today_installations,
        "totalTransactions": transactions.total,
        "completedTransactions": transactions.completed,
        "totalStaff": staff.total,
        "averageRating": f"{average_rating:.1f}",
        "averageEfficiency": round(_to_float(staff.average_efficiency)),
        "recentActivities": [
            {
                "id": t.id,
                "type": t.type,
                "status": t.status,
                "notes": t.notes,
                "created_at": to_utc_z(t.created_at),
                "staff_name": t.staff.name if t.staff else None,
            }
            for t in recent
        ],
        "lowStockAlerts": [
            {
                "id": item.id,
                "name": item.name,
                "quantity": item.quantity,
                "min_stock": item.min_stock,
                "unit": item.unit,
                "location": item.location,
            }
            for item in get_low_stock_items(limit=5)
        ],
    }


def get_trends() -> dict:
    """Monthly transaction and customer counts for the last year, stock value per category."""
    tx_month = func.strftime("%Y-%m", Transaction.created_at)
    transaction_rows = (
        db.session.query(
            tx_month.label("month"),
            func.count(Transaction.id).label("total"),
            _count_where(Transaction.type == "installation").label("installations"),
            _count_where(Transaction.type == "maintenance").label("maintenance"),
        )
        .filter(Transaction.created_at >= utcnow() - timedelta(days=365))
        .group_by(tx_month)
        .order_by(tx_month.asc())
        .all()
    )

    cust_month = func.strftime("%Y-%m", Customer.installation_date)
    customer_rows = (
        db.session.query(cust_month.label("month"), func.count(Customer.id).label("new_customers"))
        .filter(Customer.installation_date >= today() - timedelta(days=365))
        .group_by(cust_month)
        .order_by(cust_month.asc())
        .all()
    )

    value = func.coalesce(func.sum(StockItem.quantity * StockItem.price), 0)
    stock_rows = (
        db.session.query(StockItem.category, func.count(StockItem.id).label("items"), value.label("value"))
        .group_by(StockItem.category)
        .order_by(value.desc())
        .all()
    )

    return {
        "transactions": [dict(row._mapping) for row in transaction_rows],
        "customers": [dict(row._mapping) for row in customer_rows],
        "stock": [
            {"category": row.category, "items": row.items, "value": _to_float(row.value)}
            for row in stock_rows
        ],
    }


def get_performance() -> dict:
    active = Staff.is_active.is_(True)

    avg_rating = func.avg(Staff.rating)
    teams = (
        db.session.query(
            Staff.team,
            func.count(Staff.id).label("members"),
            avg_rating.label("avg_rating"),
            func.avg(Staff.efficiency).label("avg_efficiency"),
            func.coalesce(func.sum(Staff.completed_jobs), 0).label("total_jobs"),
        )
        .filter(active)
        .group_by(Staff.team)
        .order_by(avg_rating.desc())
        .all()
    )

    top_staff = (
        db.session.query(Staff)
        .filter(active)
        .order_by(Staff.rating.desc(), Staff.efficiency.desc())
        .limit(10)
        .all()
    )

    completion = (
        db.session.query(
            Transaction.type,
            func.count(Transaction.id).label("total"),
            _count_where(Transaction.status == "completed").label("completed"),
        )
        .group_by(Transaction.type)
        .all()
    )

    return {
        "teams": [dict(row._mapping) for row in teams],
        "topStaff": [
            {
                "name": s.name,
                "team": s.team,
                "rating": s.rating,
                "efficiency": s.efficiency,
                "completed_jobs": s.completed_jobs,
            }
            for s in top_staff
        ],
        "completionRates": [
            {
                "type": row.type,
                "total": row.total,
                "completed": row.completed,
                "completion_rate": round(row.completed * 100.0 / row.total, 2) if row.total else 0.0,
            }
            for row in completion
        ],
    }
