"""Create a secret item in the aliased collection."""

import asyncio
import sys
from typing import Annotated

import typer

from secret_item.app_context import use_context
from secret_item.config import Config
from secret_item.output import Output
from secret_item.service import SecretServiceClient, SecretServiceError, open_connection
from secret_item.service.protocol import DEFAULT_CONTENT_TYPE
from secret_item.workflow import CreatedItem, create_item

DEFAULT_LABEL = "label"
DEFAULT_SECRET = "secret value"
DEFAULT_ATTRIBUTES = {"test-lookup-attribute": "value"}


def parse_attributes(values: list[str] | None) -> dict[str, str]:
    """Parse repeated KEY=VALUE options; no options means the default test attribute.

    Raises:
        ValueError: An entry has no '=' or an empty key.

    """
    if not values:
        return dict(DEFAULT_ATTRIBUTES)
    attributes: dict[str, str] = {}
    for entry in values:
        key, sep, value = entry.partition("=")
        if not sep or not key:
            raise ValueError(f"Attribute must be KEY=VALUE, got '{entry}'.")
        attributes[key] = value
    return attributes


async def _run(
    cfg: Config, out: Output, *, label: str, attributes: dict[str, str], secret: str, content_type: str, alias: str, replace: bool
) -> CreatedItem | None:
    async with open_connection(cfg.bus_address) as conn:
        return await create_item(
            SecretServiceClient(conn),
            out,
            label=label,
            attributes=attributes,
            secret=secret,
            content_type=content_type,
            alias=alias,
            replace=replace,
            window_id=cfg.window_id,
            prompt_timeout=cfg.prompt_timeout_or_none,
        )


def create(
    ctx: typer.Context,
    *,
    label: Annotated[str, typer.Option(help="Item label.")] = DEFAULT_LABEL,
    attribute: Annotated[
        list[str] | None, typer.Option("--attribute", "-a", help="Lookup attribute as KEY=VALUE (repeatable).")
    ] = None,
    secret: Annotated[str, typer.Option(help="Secret value to store.")] = DEFAULT_SECRET,
    content_type: Annotated[str, typer.Option(help="Content type hint of the secret.")] = DEFAULT_CONTENT_TYPE,
    alias: Annotated[str | None, typer.Option(help="Collection alias (default from config).")] = None,
    replace: Annotated[bool, typer.Option("--replace/--no-replace", help="Replace an item with the same attributes.")] = True,
    wait: Annotated[bool, typer.Option("--wait/--no-wait", help="Wait for a key press before exiting.")] = True,
) -> None:
    """Open a session, unlock the collection, and create an item."""
    app = use_context(ctx)
    try:
        attributes = parse_attributes(attribute)
    except ValueError as e:
        app.out.print_error_and_exit("invalid_attribute", str(e))

    try:
        created = asyncio.run(
            _run(
                app.cfg,
                app.out,
                label=label,
                attributes=attributes,
                secret=secret,
                content_type=content_type,
                alias=alias or app.cfg.alias,
                replace=replace,
            )
        )
    except SecretServiceError as e:
        app.out.print_error_and_exit(e.code, str(e))

    if created is not None and wait and not app.out.json_mode and sys.stdin.isatty():
        typer.pause("Press any key to exit")
