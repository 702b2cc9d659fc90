"""Lock a collection."""

import asyncio
from typing import Annotated

import typer

from secret_item.app_context import use_context
from secret_item.commands.unlock import run_set_locked
from secret_item.service import SecretServiceError


def lock(
    ctx: typer.Context, alias: Annotated[str | None, typer.Option(help="Collection alias (default from config).")] = None
) -> None:
    """Lock a collection."""
    app = use_context(ctx)
    try:
        asyncio.run(run_set_locked(app.cfg, app.out, alias or app.cfg.alias, locked=True))
    except SecretServiceError as e:
        app.out.print_error_and_exit(e.code, str(e))
