# Overview: Flask CLI command groups for bootstrap and inspection.

# backend/ispstock/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent bootstrap: creates tables and the default admin account.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system seed-sample
#   Load a small set of stock, staff and customers for local development.
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all user accounts with role and active status.
# - python -m flask users create --name "Jane" --email jane@isp.com --password secret1 --role supervisor
#   Create a user (prompts if options are omitted).


import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .models import Customer, Staff, StockItem, User, USER_ROLES
from .services.auth_service import AuthError, create_user
from .time_utils import today


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Create tables (if missing) and the default admin account.

    The admin credentials come from DEFAULT_ADMIN_EMAIL and
    DEFAULT_ADMIN_PASSWORD. Change the password immediately in production.
    """
    click.echo("START Initializing ISP stock system...")

    db.create_all()
    click.echo("PASS Tables ready")

    email = current_app.config["DEFAULT_ADMIN_EMAIL"]
    if db.session.query(User).filter_by(email=email).first():
        click.echo(f"WARN  Admin '{email}' already exists, skipping...")
    else:
        create_user(
            name="System Administrator",
            email=email,
            password=current_app.config["DEFAULT_ADMIN_PASSWORD"],
            role="admin",
            password_rounds=current_app.config["BCRYPT_ROUNDS"],
        )
        click.echo(f"PASS Created admin user: {email}")

    click.echo("DONE System initialized. Change the default admin password in production!")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


SAMPLE_STOCK = [
    ("TP-Link Archer C6", "router", "TP-Link", "Archer C6", 25, 10, "pcs", "Warehouse A-1", 450000),
    ("Cisco SG110-16", "switch", "Cisco", "SG110-16", 8, 5, "pcs", "Warehouse A-2", 1850000),
    ("Cat6 UTP Cable", "cable", "Belden", "Cat6-305", 3, 5, "roll", "Warehouse B-1", 1200000),
    ("Huawei HG8245H ONT", "modem", "Huawei", "HG8245H", 40, 15, "pcs", "Warehouse A-3", 350000),
]

SAMPLE_STAFF = [
    ("Budi Santoso", "budi@isp.com", "+6281234567890", "technician", "Team Alpha", "Jakarta Selatan", ["fiber", "router"]),
    ("Siti Rahma", "siti@isp.com", "+6281234567891", "supervisor", "Team Alpha", "Jakarta Selatan", ["management"]),
]

SAMPLE_CUSTOMERS = [
    ("PT Maju Jaya", "it@majujaya.co.id", "+622155512345", "Jl. Sudirman No. 10, Jakarta", "business", "Business 100Mbps"),
    ("Andi Wijaya", "andi@example.com", "+6281298765432", "Jl. Melati No. 5, Depok", "residential", "Home 30Mbps"),
]


@system_group.command('seed-sample')
@with_appcontext
def seed_sample():
    """Load sample stock, staff and customers (skips rows that already exist)."""
    created = 0

    for name, category, brand, model, qty, min_stock, unit, location, price in SAMPLE_STOCK:
        if db.session.query(StockItem).filter_by(name=name).first():
            continue
        db.session.add(StockItem(
            name=name, category=category, brand=brand, model=model,
            quantity=qty, min_stock=min_stock, unit=unit, location=location, price=price,
        ))
        created += 1

    for name, email, phone, role, team, area, skills in SAMPLE_STAFF:
        if db.session.query(Staff).filter_by(email=email).first():
            continue
        db.session.add(Staff(
            name=name, email=email, phone=phone, role=role, team=team,
            area=area, skills=skills, join_date=today(),
        ))
        created += 1

    for name, email, phone, address, service_type, package_type in SAMPLE_CUSTOMERS:
        if db.session.query(Customer).filter_by(email=email).first():
            continue
        db.session.add(Customer(
            name=name, email=email, phone=phone, address=address,
            service_type=service_type, package_type=package_type,
            installation_date=today(),
        ))
        created += 1

    db.session.commit()
    click.echo(f"PASS Seeded {created} sample rows")


@click.group('users')
def users_group():
    """User account commands."""


@users_group.command('create')
@click.option('--name', prompt=True, help='Full name')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(USER_ROLES), prompt=True, help='Role')
@with_appcontext
def create_user_cli(name, email, password, role):
    """Create a new user account."""
    if len(password) < 6:
        raise click.ClickException("Password must be at least 6 characters long")

    try:
        user = create_user(
            name=name,
            email=email,
            password=password,
            role=role,
            password_rounds=current_app.config["BCRYPT_ROUNDS"],
        )
    except AuthError as e:
        raise click.ClickException(e.message)

    click.echo(f"PASS Created user: {user.email} with role '{user.role}' (ID: {user.id})")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their roles."""
    users = db.session.query(User).order_by(User.created_at).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*100)
    click.echo(f"{'ID':<38} {'Email':<30} {'Role':<12} {'Active':<8} {'Name'}")
    click.echo("="*100)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<38} {user.email:<30} {user.role:<12} {active_str:<8} {user.name}")

    click.echo("="*100 + "\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
