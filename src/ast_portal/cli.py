"""`ast-portal` command implementations."""

from __future__ import annotations

from typing import Annotated

import typer
import uvicorn
from pydantic import ValidationError

from ast_portal.common.errors import ConfigError
from ast_portal.db import build_engine, create_schema
from ast_portal.infra.storage import StorageError
from ast_portal.lifecycles import build_storage
from ast_portal.main import create_app
from ast_portal.settings import Settings, get_settings

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8000

app = typer.Typer(
    add_completion=False,
    invoke_without_command=True,
    help="AST Run Portal CLI (serve, check-storage, init-db).",
)


@app.callback()
def _main(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


def _load_settings(*, complete: bool = True) -> Settings:
    """Read settings; ``complete=False`` skips the check for the Azure and Fabric secrets."""
    try:
        return get_settings() if complete else Settings()
    except ValidationError as exc:
        typer.echo(f"error: invalid configuration: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    except ConfigError as exc:
        typer.echo(f"error: {exc.detail}", err=True)
        raise typer.Exit(code=2) from exc


@app.command(name="serve", help="Run the portal with uvicorn.")
def serve(
    host: Annotated[
        str,
        typer.Option("--host", help="Host/interface to bind.", envvar="AST_HOST"),
    ] = DEFAULT_HOST,
    port: Annotated[
        int,
        typer.Option("--port", help="Port to bind.", envvar="AST_PORT"),
    ] = DEFAULT_PORT,
) -> None:
    settings = _load_settings()
    application = create_app(settings)
    typer.echo(f"Starting {settings.app_name} on http://{host}:{port}")
    uvicorn.run(
        application,
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
        log_config=None,
        proxy_headers=True,
    )


@app.command(name="check-storage", help="Verify the blob container is reachable.")
def check_storage() -> None:
    settings = _load_settings(complete=False)
    try:
        storage = build_storage(settings)
        storage.check_connection()
    except ConfigError as exc:
        typer.echo(f"error: {exc.detail}", err=True)
        raise typer.Exit(code=2) from exc
    except StorageError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"storage connection OK (container: {settings.blob_container})")


@app.command(name="init-db", help="Create the run record tables if they are missing.")
def init_db() -> None:
    settings = _load_settings(complete=False)
    engine = build_engine(settings)
    try:
        create_schema(engine)
    finally:
        engine.dispose()
    typer.echo("database schema ready")


def main() -> None:
    app()


__all__ = ["app", "main"]
