"""Thin adapter over a dbus-fast MessageBus: typed method calls and signal watches."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from dbus_fast import BusType, Message, MessageType
from dbus_fast.aio import MessageBus
from dbus_fast.errors import DBusError

from secret_item.service.protocol import SecretServiceError

logger = logging.getLogger(__name__)

BUS_DAEMON_NAME = "org.freedesktop.DBus"
BUS_DAEMON_PATH = "/org/freedesktop/DBus"
BUS_DAEMON_INTERFACE = "org.freedesktop.DBus"

# Called with (body, None) for a matching signal, or (None, error) when the watch fails.
SignalHandler = Callable[[list[Any] | None, Exception | None], None]


@dataclass(frozen=True, eq=False)
class SignalWatch:
    """An active signal subscription (match rule plus local handler).

    ``sender`` is the well-known name used in the match rule; ``owner`` is the unique name that held it
    when the watch was made, which is what incoming signals carry.
    """

    sender: str
    owner: str
    path: str
    interface: str
    member: str
    signature: str
    handler: SignalHandler

    @property
    def rule(self) -> str:
        """D-Bus match rule for this watch."""
        return (
            f"type='signal',sender='{self.sender}',path='{self.path}',interface='{self.interface}',member='{self.member}'"
        )

    def matches(self, msg: Message) -> bool:
        """Check whether an incoming signal targets this watch."""
        return (
            msg.sender == self.owner and msg.path == self.path and msg.interface == self.interface and msg.member == self.member
        )


class Connection(Protocol):
    """What the Secret Service client needs from a bus connection."""

    async def call(
        self, destination: str, path: str, interface: str, member: str, signature: str = "", body: Sequence[Any] = ()
    ) -> list[Any]: ...

    async def watch_signal(
        self, sender: str, path: str, interface: str, member: str, signature: str, handler: SignalHandler
    ) -> SignalWatch: ...

    async def unwatch(self, watch: SignalWatch) -> None: ...


class BusConnection:
    """Session bus connection used to build Secret Service calls."""

    def __init__(self, bus: MessageBus) -> None:
        """Initialize with a connected MessageBus.

        Args:
            bus: Connected dbus-fast message bus.

        """
        self._bus = bus
        self._watches: list[SignalWatch] = []
        self._monitor: asyncio.Task[None] | None = None
        bus.add_message_handler(self._on_message)

    def start(self) -> None:
        """Start watching for disconnects so pending signal watches fail instead of stalling."""
        if self._monitor is None:
            self._monitor = asyncio.ensure_future(self._monitor_disconnect())

    async def close(self) -> None:
        """Stop the disconnect monitor and disconnect from the bus."""
        if self._monitor is not None:
            self._monitor.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._monitor
            self._monitor = None
        self._bus.remove_message_handler(self._on_message)
        self._bus.disconnect()

    async def call(
        self, destination: str, path: str, interface: str, member: str, signature: str = "", body: Sequence[Any] = ()
    ) -> list[Any]:
        """Call a method and return the reply body.

        Raises:
            DBusError: The reply is an error message.
            SecretServiceError: No reply was received (code: ``no_reply``).

        """
        logger.debug("Call %s.%s on %s (%s)", interface, member, path, signature)
        msg = Message(destination=destination, path=path, interface=interface, member=member, signature=signature, body=list(body))
        reply = await self._bus.call(msg)
        if reply is None:
            raise SecretServiceError("no_reply", f"No reply to {interface}.{member}.")
        if reply.message_type == MessageType.ERROR:
            text = str(reply.body[0]) if reply.body else ""
            logger.debug("Error reply to %s.%s: %s %s", interface, member, reply.error_name, text)
            raise DBusError(reply.error_name, text, reply)
        return list(reply.body)

    async def watch_signal(
        self, sender: str, path: str, interface: str, member: str, signature: str, handler: SignalHandler
    ) -> SignalWatch:
        """Subscribe to a signal from the current owner of ``sender``. The subscription is active once this returns.

        Raises:
            DBusError: ``sender`` has no owner, or the bus rejected the match rule.

        """
        owner = await self.get_name_owner(sender)
        watch = SignalWatch(
            sender=sender, owner=owner, path=path, interface=interface, member=member, signature=signature, handler=handler
        )
        self._watches.append(watch)
        try:
            await self.call(BUS_DAEMON_NAME, BUS_DAEMON_PATH, BUS_DAEMON_INTERFACE, "AddMatch", "s", [watch.rule])
        except BaseException:
            self._watches.remove(watch)
            raise
        logger.debug("Watching %s.%s on %s from %s", interface, member, path, owner)
        return watch

    async def get_name_owner(self, name: str) -> str:
        """Resolve a well-known bus name to the unique name that currently owns it."""
        (owner,) = await self.call(BUS_DAEMON_NAME, BUS_DAEMON_PATH, BUS_DAEMON_INTERFACE, "GetNameOwner", "s", [name])
        return owner

    async def unwatch(self, watch: SignalWatch) -> None:
        """Remove a signal subscription. Unknown watches are ignored."""
        if watch not in self._watches:
            return
        self._watches.remove(watch)
        if self._bus.connected:
            await self.call(BUS_DAEMON_NAME, BUS_DAEMON_PATH, BUS_DAEMON_INTERFACE, "RemoveMatch", "s", [watch.rule])

    def _on_message(self, msg: Message) -> None:
        """Dispatch incoming signals to matching watches."""
        if msg.message_type != MessageType.SIGNAL:
            return
        for watch in list(self._watches):
            if not watch.matches(msg):
                continue
            logger.debug("Signal %s.%s on %s (%s)", msg.interface, msg.member, msg.path, msg.signature)
            if msg.signature != watch.signature:
                error = SecretServiceError(
                    "malformed_signal", f"{watch.member} signal has signature {msg.signature!r}, expected {watch.signature!r}."
                )
                watch.handler(None, error)
            else:
                watch.handler(list(msg.body), None)

    async def _monitor_disconnect(self) -> None:
        """Fail every active watch once the bus goes away."""
        error: Exception
        try:
            await self._bus.wait_for_disconnect()
        except Exception as e:  # wait_for_disconnect re-raises the transport error
            error = e
        else:
            error = SecretServiceError("disconnected", "D-Bus connection closed.")
        if self._watches:
            logger.warning("Bus disconnected with %d active signal watch(es): %s", len(self._watches), error)
        for watch in list(self._watches):
            watch.handler(None, error)


@contextlib.asynccontextmanager
async def open_connection(address: str | None = None) -> AsyncIterator[BusConnection]:
    """Connect to the session bus (or an explicit address) for the duration of the block."""
    bus = MessageBus(bus_address=address) if address else MessageBus(bus_type=BusType.SESSION)
    await bus.connect()
    logger.info("Connected to D-Bus as %s", bus.unique_name)
    conn = BusConnection(bus)
    conn.start()
    try:
        yield conn
    finally:
        await conn.close()
