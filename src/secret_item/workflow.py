"""Secret Service workflows: unlock/lock with prompting, and item creation."""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from secret_item.output import Output
from secret_item.service.client import SecretServiceClient
from secret_item.service.prompt import run_prompt
from secret_item.service.protocol import (
    DEFAULT_CONTENT_TYPE,
    PromptResult,
    SecretRecord,
    SecretServiceError,
    build_item_properties,
)

logger = logging.getLogger(__name__)

DEFAULT_ALIAS = "default"


@dataclass(frozen=True)
class CreatedItem:
    """Object paths involved in a successful item creation."""

    session: str
    collection: str
    item: str


async def lock_or_unlock(
    client: SecretServiceClient,
    paths: Sequence[str],
    *,
    locked: bool,
    window_id: str = "",
    prompt_timeout: float | None = None,
) -> PromptResult | None:
    """Lock or unlock objects in one call, prompting the user if the service asks for it.

    Returns the prompt result, or None when the service finished without a prompt.

    Raises:
        ValueError: No object paths given.

    """
    if not paths:
        raise ValueError("At least one object path is required.")
    result = await (client.lock(paths) if locked else client.unlock(paths))
    if result.prompt is None:
        return None
    prompt_result = await run_prompt(client, result.prompt, window_id, prompt_timeout)
    if prompt_result.dismissed:
        logger.warning("%s prompt %s was dismissed", "Lock" if locked else "Unlock", result.prompt)
    return prompt_result


async def resolve_collection(client: SecretServiceClient, out: Output, alias: str) -> str | None:
    """Look up a collection by alias, reporting progress. None means the alias is not set."""
    out.print_step(f"Retrieving {alias} collection")
    collection = await client.read_alias(alias)
    if collection is None:
        logger.info("Alias %r does not point at a collection", alias)
        out.print_no_collection(alias)
        return None
    out.print_step(f"Retrieved {alias} collection at {collection}")
    return collection


async def create_item(
    client: SecretServiceClient,
    out: Output,
    *,
    label: str,
    attributes: Mapping[str, str],
    secret: str,
    content_type: str = DEFAULT_CONTENT_TYPE,
    alias: str = DEFAULT_ALIAS,
    replace: bool = True,
    window_id: str = "",
    prompt_timeout: float | None = None,
) -> CreatedItem | None:
    """Open a session, unlock the aliased collection, and store a secret in it.

    Returns None when the alias does not resolve to a collection.

    Raises:
        SecretServiceError: The item prompt was dismissed or yielded no item (code: ``item_not_created``).

    """
    out.print_step("Opening D-Bus secret service session")
    session = await client.open_session()
    out.print_step(f"Opened new session at path {session}")

    collection = await resolve_collection(client, out, alias)
    if collection is None:
        return None

    out.print_step("Unlocking collection")
    await lock_or_unlock(client, [collection], locked=False, window_id=window_id, prompt_timeout=prompt_timeout)

    properties = build_item_properties(label, attributes)
    record = SecretRecord(session=session, parameters=b"", value=secret.encode("utf-8"), content_type=content_type)

    out.print_step(f"Creating new item '{label}'")
    created = await client.create_item(collection, properties, record, replace=replace)
    item = created.item
    if item is None and created.prompt is not None:
        prompt_result = await run_prompt(client, created.prompt, window_id, prompt_timeout)
        paths = [] if prompt_result.dismissed else prompt_result.object_paths()
        item = paths[0] if paths else None
    if item is None:
        raise SecretServiceError("item_not_created", f"The service did not create item '{label}'.")

    logger.info("Created item %s in %s", item, collection)
    out.print_item_created(item, collection)
    return CreatedItem(session=session, collection=collection, item=item)


async def set_collection_locked(
    client: SecretServiceClient,
    out: Output,
    alias: str,
    *,
    locked: bool,
    window_id: str = "",
    prompt_timeout: float | None = None,
) -> str | None:
    """Lock or unlock the aliased collection. Return its path, or None if the alias is not set."""
    collection = await resolve_collection(client, out, alias)
    if collection is None:
        return None
    out.print_step(f"{'Locking' if locked else 'Unlocking'} collection")
    prompt_result = await lock_or_unlock(client, [collection], locked=locked, window_id=window_id, prompt_timeout=prompt_timeout)
    dismissed = prompt_result is not None and prompt_result.dismissed
    if locked:
        out.print_locked(collection, dismissed=dismissed)
    else:
        out.print_unlocked(collection, dismissed=dismissed)
    return collection
