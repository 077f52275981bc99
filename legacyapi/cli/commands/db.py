"""
Database and account management commands.
"""
import asyncio
from typing import Optional

import typer
from rich.table import Table

from ..utils import console, create_progress, print_error, print_info, print_success, print_warning


def _database():
    from legacyapi.core.config import settings
    from legacyapi.db import Database

    return Database(settings.DATABASE_URL, echo_sql=settings.ECHO_SQL)


def init_db(
    reset: bool = typer.Option(False, "--reset", help="Drop every table first (deletes all data)"),
) -> None:
    """Create all database tables."""
    if reset:
        typer.confirm("This deletes all data. Continue?", abort=True)

    async def _init() -> None:
        database = _database()
        try:
            if reset:
                await database.drop_tables()
            await database.create_tables()
        finally:
            await database.close()

    with create_progress() as progress:
        progress.add_task(description="Creating tables...", total=None)
        asyncio.run(_init())
    if reset:
        print_warning("Existing tables were dropped")
    print_success("Database tables created")


def create_admin(
    email: str = typer.Option(..., prompt=True, help="Admin email address"),
    password: str = typer.Option(
        ..., prompt=True, hide_input=True, confirmation_prompt=True, help="Admin password"
    ),
    first_name: Optional[str] = typer.Option(None, help="First name"),
    last_name: Optional[str] = typer.Option(None, help="Last name"),
    username: Optional[str] = typer.Option(None, help="Optional login username"),
    role: str = typer.Option("admin", help="admin or member"),
) -> None:
    """Create an administrator account."""
    from legacyapi.auth.exceptions import BadRequest
    from legacyapi.auth.rate_limiting import LoginRateLimiter
    from legacyapi.core.config import settings
    from legacyapi.core.security import PasswordHasher
    from legacyapi.db import AdminRole
    from legacyapi.services.accounts import AccountService

    try:
        admin_role = AdminRole(role)
    except ValueError:
        print_error(f"Unknown role '{role}' (expected 'admin' or 'member')")
        raise typer.Exit(code=1)

    if len(password) < settings.PASSWORD_MIN_LENGTH:
        print_error(f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters long")
        raise typer.Exit(code=1)

    async def _create() -> int:
        database = _database()
        try:
            await database.create_tables()
            async with database.get_session() as db:
                accounts = AccountService(
                    db, PasswordHasher(settings.BCRYPT_ROUNDS), LoginRateLimiter()
                )
                admin = await accounts.create_admin(
                    email=email,
                    password=password,
                    first_name=first_name,
                    last_name=last_name,
                    username=username,
                    role=admin_role,
                )
                return admin.id
        finally:
            await database.close()

    try:
        admin_id = asyncio.run(_create())
    except BadRequest as e:
        print_error(e.message)
        raise typer.Exit(code=1)
    print_success(f"Admin {email} created (id {admin_id})")


def create_family_accounts(
    dry_run: bool = typer.Option(False, "--dry-run", help="Only list members without accounts"),
) -> None:
    """Give every family member without a login a username and initial password."""
    from legacyapi.auth.rate_limiting import LoginRateLimiter
    from legacyapi.core.config import settings
    from legacyapi.core.security import PasswordHasher
    from legacyapi.services.accounts import AccountService
    from legacyapi.services.family import FamilyService

    async def _provision():
        database = _database()
        created = []
        try:
            async with database.get_session() as db:
                members = await FamilyService(db).without_accounts()
                if dry_run:
                    return [(member.display_name, member.username or "-", "-") for member in members]
                accounts = AccountService(
                    db, PasswordHasher(settings.BCRYPT_ROUNDS), LoginRateLimiter()
                )
                for member in members:
                    credentials = await accounts.provision_family_account(member.id)
                    created.append((member.display_name, credentials.username, credentials.password))
        finally:
            await database.close()
        return created

    rows = asyncio.run(_provision())
    if not rows:
        print_info("Every family member already has an account")
        return

    table = Table(title="Family accounts" + (" (dry run)" if dry_run else ""))
    table.add_column("Name")
    table.add_column("Username")
    table.add_column("Initial password")
    for row in rows:
        table.add_row(*row)
    console.print(table)

    if not dry_run:
        print_success(f"Created {len(rows)} account(s); the initial password is the username")
