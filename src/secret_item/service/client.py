"""Typed client for the org.freedesktop.Secret D-Bus API."""

import logging
from collections.abc import Callable, Mapping, Sequence

from dbus_fast import Variant

from secret_item.service.connection import Connection, SignalWatch
from secret_item.service.protocol import (
    COLLECTION_INTERFACE,
    COMPLETED_SIGNATURE,
    CREATE_ITEM_SIGNATURE,
    PLAIN_ALGORITHM,
    PROMPT_INTERFACE,
    SERVICE_INTERFACE,
    SERVICE_NAME,
    SERVICE_PATH,
    CreateItemResult,
    LockResult,
    PromptResult,
    SecretRecord,
    SecretServiceError,
    optional_path,
)

logger = logging.getLogger(__name__)

PromptCallback = Callable[[PromptResult | None, Exception | None], None]


class SecretServiceClient:
    """Issues Secret Service calls over a shared bus connection."""

    def __init__(self, conn: Connection, service_name: str = SERVICE_NAME) -> None:
        """Initialize client with a bus connection.

        Args:
            conn: Connected bus, shared by every call this client makes.
            service_name: Bus name of the Secret Service implementation.

        """
        self._conn = conn
        self._service_name = service_name

    # --- Service ---

    async def open_session(self, algorithm: str = PLAIN_ALGORITHM, input_: Variant | None = None) -> str:
        """Open a transfer session and return its object path."""
        body = await self._conn.call(
            self._service_name, SERVICE_PATH, SERVICE_INTERFACE, "OpenSession", "sv", [algorithm, input_ or Variant("s", "")]
        )
        _output, session_path = body
        return session_path

    async def read_alias(self, name: str) -> str | None:
        """Resolve a collection alias, or None when the alias is not set."""
        (path,) = await self._conn.call(self._service_name, SERVICE_PATH, SERVICE_INTERFACE, "ReadAlias", "s", [name])
        return optional_path(path)

    async def unlock(self, paths: Sequence[str]) -> LockResult:
        """Unlock objects. Objects needing confirmation are handled by the returned prompt."""
        return await self._lock_call("Unlock", paths)

    async def lock(self, paths: Sequence[str]) -> LockResult:
        """Lock objects. Objects needing confirmation are handled by the returned prompt."""
        return await self._lock_call("Lock", paths)

    # --- Collection ---

    async def create_item(
        self, collection_path: str, properties: Mapping[str, Variant], secret: SecretRecord, *, replace: bool
    ) -> CreateItemResult:
        """Create an item in a collection.

        The secret is re-validated from its struct form so a truncated struct never reaches the bus.

        Raises:
            SecretServiceError: The secret struct is malformed (code: ``malformed_secret``).

        """
        struct = SecretRecord.from_struct(secret.to_struct()).to_struct()
        item, prompt = await self._conn.call(
            self._service_name,
            collection_path,
            COLLECTION_INTERFACE,
            "CreateItem",
            CREATE_ITEM_SIGNATURE,
            [dict(properties), list(struct), replace],
        )
        return CreateItemResult(item=optional_path(item), prompt=optional_path(prompt))

    # --- Prompt ---

    async def prompt(self, prompt_path: str, window_id: str = "") -> None:
        """Ask the service to show a prompt. Completion arrives via the Completed signal."""
        await self._conn.call(self._service_name, prompt_path, PROMPT_INTERFACE, "Prompt", "s", [window_id])

    async def dismiss(self, prompt_path: str) -> None:
        """Dismiss a prompt that is still showing."""
        await self._conn.call(self._service_name, prompt_path, PROMPT_INTERFACE, "Dismiss")

    async def watch_prompt_completed(self, prompt_path: str, callback: PromptCallback) -> SignalWatch:
        """Subscribe to a prompt's Completed signal."""

        def on_signal(body: list[object] | None, error: Exception | None) -> None:
            if error is not None or body is None:
                callback(None, error or SecretServiceError("malformed_signal", "Completed signal without a body."))
                return
            dismissed, result = body
            callback(PromptResult(dismissed=bool(dismissed), result=result), None)  # type: ignore[arg-type]

        return await self._conn.watch_signal(
            self._service_name, prompt_path, PROMPT_INTERFACE, "Completed", COMPLETED_SIGNATURE, on_signal
        )

    async def unwatch(self, watch: SignalWatch) -> None:
        """Remove a subscription made by watch_prompt_completed."""
        await self._conn.unwatch(watch)

    async def _lock_call(self, member: str, paths: Sequence[str]) -> LockResult:
        """Issue Lock or Unlock with a batch of object paths."""
        objects, prompt = await self._conn.call(self._service_name, SERVICE_PATH, SERVICE_INTERFACE, member, "ao", [list(paths)])
        logger.debug("%s: %d object(s) done, prompt %s", member, len(objects), prompt)
        return LockResult(objects=list(objects), prompt=optional_path(prompt))
