"""Unlock a collection, prompting if the service requires it."""

import asyncio
from typing import Annotated

import typer

from secret_item.app_context import use_context
from secret_item.config import Config
from secret_item.output import Output
from secret_item.service import SecretServiceClient, SecretServiceError, open_connection
from secret_item.workflow import set_collection_locked


async def run_set_locked(cfg: Config, out: Output, alias: str, *, locked: bool) -> str | None:
    """Connect to the bus and lock or unlock the aliased collection."""
    async with open_connection(cfg.bus_address) as conn:
        return await set_collection_locked(
            SecretServiceClient(conn), out, alias, locked=locked, window_id=cfg.window_id, prompt_timeout=cfg.prompt_timeout_or_none
        )


def unlock(
    ctx: typer.Context, alias: Annotated[str | None, typer.Option(help="Collection alias (default from config).")] = None
) -> None:
    """Unlock a collection."""
    app = use_context(ctx)
    try:
        asyncio.run(run_set_locked(app.cfg, app.out, alias or app.cfg.alias, locked=False))
    except SecretServiceError as e:
        app.out.print_error_and_exit(e.code, str(e))
