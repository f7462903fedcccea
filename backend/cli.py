"""SaaS permissions CLI tool (permctl)."""

from typing import Optional
from urllib.parse import urlparse

import typer

app = typer.Typer(name="permctl", help="SaaS permissions CLI")
db_app = typer.Typer(help="Database management commands")
app.add_typer(db_app, name="db")


def _mysql_params(url: str) -> dict:
    """Split a mysql+pymysql:// URL into pymysql.connect() arguments plus the db name."""
    parsed = urlparse(url)
    return {
        "host": parsed.hostname or "localhost",
        "port": parsed.port or 3306,
        "user": parsed.username or "root",
        "password": parsed.password or "",
        "database": parsed.path.lstrip("/"),
    }


def _server_connection(params: dict):
    import pymysql

    return pymysql.connect(
        host=params["host"], port=params["port"],
        user=params["user"], password=params["password"],
    )


@db_app.command("create")
def db_create():
    """Create the MySQL database if it doesn't exist."""
    from backend.core.config import settings

    params = _mysql_params(settings.DATABASE_URL)
    conn = _server_connection(params)
    try:
        cursor = conn.cursor()
        cursor.execute(
            f"CREATE DATABASE IF NOT EXISTS `{params['database']}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
        typer.echo(f"✅ Database '{params['database']}' created (or already exists)")
    finally:
        conn.close()


@db_app.command("init")
def db_init():
    """Create all tables."""
    from backend.db.base import Base
    from backend.db.session import engine
    import backend.models  # noqa: F401  registers the tables on Base.metadata

    Base.metadata.create_all(bind=engine)
    typer.echo("✅ Tables created")


@db_app.command("seed")
def db_seed():
    """Seed roles, actions, plans, entitlements and role allowances."""
    from backend.core.config import settings
    from backend.db.session import SessionLocal
    from backend.db.seeds import run_all_seeds
    from backend.services.cache_service import build_permission_cache

    cache = build_permission_cache(settings)
    db = SessionLocal()
    try:
        run_all_seeds(db, cache)
    finally:
        db.close()
    typer.echo("✅ All seeds applied")


@db_app.command("reset")
def db_reset():
    """Drop and recreate the database (DANGER)."""
    confirm = typer.confirm("⚠️  This will DROP the entire database. Continue?")
    if not confirm:
        raise typer.Abort()
    from backend.core.config import settings

    params = _mysql_params(settings.DATABASE_URL)
    conn = _server_connection(params)
    try:
        cursor = conn.cursor()
        cursor.execute(f"DROP DATABASE IF EXISTS `{params['database']}`")
        cursor.execute(
            f"CREATE DATABASE `{params['database']}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
        typer.echo(f"✅ Database '{params['database']}' reset")
    finally:
        conn.close()


@app.command("check")
def check(
    plan: str = typer.Argument(..., help="Plan name, e.g. free"),
    role: str = typer.Argument(..., help="Role name, e.g. ADMIN"),
    action: str = typer.Argument(..., help="Action slug, e.g. project:delete"),
):
    """Evaluate one permission against the database, bypassing any cache."""
    from backend.db.session import SessionLocal
    from backend.services.permission_cache import PermissionCache
    from backend.services.permission_service import PermissionService
    from backend.services.plan_service import PlanService
    from backend.services.role_service import RoleService

    db = SessionLocal()
    try:
        plan_row = PlanService.find_by_name(db, plan)
        role_row = RoleService.find_by_name(db, role)
        if plan_row is None or role_row is None:
            typer.echo(f"❌ Unknown plan '{plan}' or role '{role}'")
            raise typer.Exit(code=1)
        allowed = PermissionService(PermissionCache()).can_role_perform_action(
            db, plan_row.id, role_row.id, action,
        )
    finally:
        db.close()
    verdict = "ALLOWED" if allowed else "DENIED"
    typer.echo(f"{plan} / {role} / {action}: {verdict}")
    if not allowed:
        raise typer.Exit(code=2)


@app.command("token")
def token(
    user_id: int = typer.Argument(..., help="User ID"),
    role_id: int = typer.Argument(..., help="Role ID"),
    plan_id: int = typer.Argument(..., help="Plan ID"),
    minutes: Optional[int] = typer.Option(None, help="Lifetime in minutes"),
):
    """Mint an access token for local testing."""
    from datetime import timedelta
    from backend.core.security import create_access_token

    expires = timedelta(minutes=minutes) if minutes else None
    typer.echo(create_access_token(user_id, role_id, plan_id, expires))


@app.command("serve")
def serve(
    host: str = typer.Option("0.0.0.0", help="Host"),
    port: int = typer.Option(8000, help="Port"),
    reload: bool = typer.Option(True, help="Auto-reload"),
):
    """Start the FastAPI development server."""
    import uvicorn
    uvicorn.run("backend.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
