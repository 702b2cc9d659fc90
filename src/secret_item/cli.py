"""CLI entry point for secret-item."""

from pathlib import Path
from typing import Annotated

import typer
from mm_clikit import TyperPlus

from secret_item.app_context import AppContext
from secret_item.commands.create import create
from secret_item.commands.lock import lock
from secret_item.commands.unlock import unlock
from secret_item.config import Config
from secret_item.log import setup_logging
from secret_item.output import Output

app = TyperPlus(package_name="secret-item")


@app.callback()
def callback(
    ctx: typer.Context,
    *,
    json_output: Annotated[bool, typer.Option("--json", help="Output results as JSON.")] = False,
    data_dir: Annotated[Path | None, typer.Option("--data-dir", help="Data directory path.")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log D-Bus traffic to stderr.")] = False,
) -> None:
    """Store a secret in the freedesktop.org Secret Service."""
    cfg = Config.build(data_dir)
    cfg.data_dir.mkdir(parents=True, exist_ok=True)
    setup_logging(cfg.log_path, verbose=verbose)
    ctx.obj = AppContext(out=Output(json_mode=json_output), cfg=cfg)


# Items
app.command(aliases=["c"])(create)

# Collections
app.command()(unlock)
app.command()(lock)
