"""
Main CLI command registration.

Commands import the application code lazily so ``legacy --help`` stays fast.
"""
import typer

# Create the main command group
app = typer.Typer(help="Legacy API command line interface")

from . import db, server

app.command("run")(server.run_server)
app.command("status")(server.server_status)
app.command("init-db")(db.init_db)
app.command("create-admin")(db.create_admin)
app.command("create-family-accounts")(db.create_family_accounts)

__all__ = ['app']
