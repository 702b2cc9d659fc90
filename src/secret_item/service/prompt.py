"""Prompt rendezvous: turn the Completed signal into a single awaitable result.

Idle -> Subscribed -> Completed. The watch is registered before Prompt() is called so a prompt that
completes immediately is not missed. Resolution is try-set: the first signal (or failure) wins and any
later one is ignored.
"""

import asyncio
import logging

from dbus_fast.errors import DBusError

from secret_item.service.client import SecretServiceClient
from secret_item.service.protocol import PromptResult, SecretServiceError

logger = logging.getLogger(__name__)


class PromptCompletion:
    """One-shot result cell for a prompt, resolved from a signal callback.

    Must be created inside the running event loop; dbus-fast dispatches signal handlers on that same
    loop, so resolve() and wait() never run concurrently.
    """

    def __init__(self) -> None:
        self._future: asyncio.Future[PromptResult] = asyncio.get_running_loop().create_future()

    @property
    def done(self) -> bool:
        """Whether a result or failure has been recorded."""
        return self._future.done()

    def resolve(self, result: PromptResult | None, error: Exception | None = None) -> bool:
        """Record the outcome if none is recorded yet. Return True if this call won."""
        if self._future.done():
            logger.debug("Ignoring duplicate prompt completion")
            return False
        if error is not None:
            self._future.set_exception(error)
        elif result is None:
            self._future.set_exception(SecretServiceError("malformed_signal", "Prompt completed without a result."))
        else:
            self._future.set_result(result)
        return True

    async def wait(self, timeout: float | None = None) -> PromptResult:
        """Wait for the outcome, returning the result or raising the recorded failure.

        Raises:
            TimeoutError: Timeout given and nothing arrived in time.

        """
        if timeout is None:
            return await self._future
        return await asyncio.wait_for(self._future, timeout)


async def run_prompt(
    client: SecretServiceClient, prompt_path: str, window_id: str = "", timeout: float | None = None
) -> PromptResult:
    """Show a prompt and wait for it to complete.

    Args:
        client: Secret Service client.
        prompt_path: Object path of the prompt.
        window_id: Platform window handle for the prompt dialog.
        timeout: Seconds to wait before dismissing the prompt; None waits forever.

    Dismissing after a timeout and removing the watch are best-effort: a D-Bus error from either is
    logged and never replaces the outcome.

    Raises:
        SecretServiceError: Timed out (code: ``prompt_timeout``) or the watch failed.

    """
    completion = PromptCompletion()
    watch = await client.watch_prompt_completed(prompt_path, completion.resolve)
    try:
        logger.info("Showing prompt %s", prompt_path)
        await client.prompt(prompt_path, window_id)
        try:
            result = await completion.wait(timeout)
        except TimeoutError:
            logger.warning("Prompt %s did not complete within %ss, dismissing", prompt_path, timeout)
            try:
                await client.dismiss(prompt_path)
            except DBusError as e:
                logger.warning("Could not dismiss prompt %s: %s", prompt_path, e)
            raise SecretServiceError("prompt_timeout", f"Prompt did not complete within {timeout}s.") from None
    finally:
        try:
            await client.unwatch(watch)
        except DBusError as e:
            logger.warning("Could not remove Completed watch for prompt %s: %s", prompt_path, e)
    logger.info("Prompt %s completed (dismissed=%s)", prompt_path, result.dismissed)
    return result
