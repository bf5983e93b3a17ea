"""CLI tools for NestFlow administration."""

import click

from nestflow.core.config import settings
from nestflow.core.security import hash_password
from nestflow.db.base import Base
from nestflow.db.enums import Role
from nestflow.db.models import Center, Classroom, User
from nestflow.db.session import SessionLocal, engine
from nestflow.services import attendance_service, invoice_service
from nestflow.utils.normalization import normalize_email

DEMO_CENTER = {
    "name": "Demo Childcare Center",
    "address": "123 Main St, Anytown, USA",
    "phone": "555-0100",
    "email": "info@democenter.com",
}
DEMO_PASSWORD = "demo123"
DEMO_USERS = [
    {"email": "admin@demo.com", "role": Role.ADMIN, "first_name": "Admin", "last_name": "User"},
    {"email": "teacher@demo.com", "role": Role.TEACHER, "first_name": "Sarah", "last_name": "Teacher"},
    {"email": "parent@demo.com", "role": Role.PARENT, "first_name": "Parent", "last_name": "User"},
]
DEMO_CLASSROOMS = [
    {"name": "Toddlers 1A", "capacity": 12, "age_group": "1-2 years"},
    {"name": "Infants", "capacity": 8, "age_group": "0-1 years"},
]


@click.group()
def cli():
    """NestFlow CLI tools."""
    pass


def seed_demo(db) -> Center:
    """Create the demo center, users and classrooms. Safe to run repeatedly."""
    center = db.query(Center).filter(Center.name == DEMO_CENTER["name"]).first()
    if not center:
        center = Center(**DEMO_CENTER)
        db.add(center)
        db.flush()

    password_hash = hash_password(DEMO_PASSWORD)
    for demo in DEMO_USERS:
        if db.query(User.id).filter(User.email == demo["email"]).first():
            continue
        db.add(User(
            center_id=center.id,
            email=demo["email"],
            password_hash=password_hash,
            role=demo["role"].value,
            first_name=demo["first_name"],
            last_name=demo["last_name"],
        ))

    for demo in DEMO_CLASSROOMS:
        exists = db.query(Classroom.id).filter(
            Classroom.center_id == center.id,
            Classroom.name == demo["name"],
        ).first()
        if not exists:
            db.add(Classroom(center_id=center.id, **demo))

    db.commit()
    return center


@cli.command()
@click.option("--no-seed", is_flag=True, help="Create tables only")
def init_db(no_seed: bool):
    """
    Create tables and seed the demo center.

    Demo logins are admin@demo.com, teacher@demo.com and parent@demo.com
    with password demo123. Production schemas are managed with Alembic.

    Example:
        python -m nestflow.cli init-db
    """
    Base.metadata.create_all(bind=engine)
    click.echo("✓ Tables created")
    if no_seed:
        return

    db = SessionLocal()
    try:
        center = seed_demo(db)
        click.echo(f"✓ Demo center ready: {center.name}")
        click.echo(f"  ID: {center.id}")
        for demo in DEMO_USERS:
            click.echo(f"  {demo['role'].value}: {demo['email']} / {DEMO_PASSWORD}")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@cli.command()
@click.option("--name", required=True, help="Center name")
@click.option("--admin-email", required=True, help="Admin email address")
@click.option("--password", required=True, help="Initial admin password (min 6 characters)")
@click.option("--timezone", "tz_name", default=None, help="IANA timezone of the center")
def create_center(name: str, admin_email: str, password: str, tz_name: str | None):
    """
    Create a center and its first admin.

    This is the bootstrap command for setting up a new tenant.

    Example:
        python -m nestflow.cli create-center --name "Sunny Days" --admin-email "admin@sunny.com" --password secret1
    """
    email = normalize_email(admin_email)
    if len(password) < 6:
        raise click.ClickException("Password must be at least 6 characters")

    db = SessionLocal()
    try:
        if db.query(User.id).filter(User.email == email).first():
            raise click.ClickException(f"User {email} already exists")

        center = Center(name=name.strip())
        if tz_name:
            center.timezone = tz_name
        db.add(center)
        db.flush()

        db.add(User(
            center_id=center.id,
            email=email,
            password_hash=hash_password(password),
            role=Role.ADMIN.value,
        ))
        db.commit()

        click.echo(f"✓ Created center: {center.name}")
        click.echo(f"  ID: {center.id}")
        click.echo(f"✓ Created admin {email}")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@cli.command()
@click.option("--center-id", default=None, help="Limit to one center")
def reconcile_status(center_id: str | None):
    """
    Recompute every child's attendance status from today's records.

    Run daily after midnight to reset yesterday's statuses to ABSENT.
    """
    db = SessionLocal()
    try:
        changed = attendance_service.reconcile_statuses(db, center_id=center_id)
        click.echo(f"✓ Reconciled statuses ({changed} changed)")
    finally:
        db.close()


@cli.command()
def mark_overdue():
    """Flip PENDING invoices past their due date to OVERDUE."""
    db = SessionLocal()
    try:
        count = invoice_service.mark_overdue(db)
        click.echo(f"✓ Marked {count} invoice(s) overdue")
    finally:
        db.close()


@cli.command()
@click.option("--host", default=None, help="Bind address (defaults to HOST)")
@click.option("--port", type=int, default=None, help="Port (defaults to PORT)")
@click.option("--reload", is_flag=True, help="Restart on code changes")
def serve(host: str | None, port: int | None, reload: bool):
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "nestflow.main:app",
        host=host or settings.HOST,
        port=port or settings.PORT,
        reload=reload,
    )


if __name__ == "__main__":
    cli()
