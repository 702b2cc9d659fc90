"""Shared fixtures: a recording stand-in for the D-Bus connection."""

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

import pytest
from dbus_fast import Variant

from secret_item.output import Output
from secret_item.service.client import SecretServiceClient
from secret_item.service.connection import SignalHandler, SignalWatch

COLLECTION_PATH = "/org/freedesktop/secrets/collection/login"
SESSION_PATH = "/org/freedesktop/secrets/session/s1"
ITEM_PATH = "/org/freedesktop/secrets/collection/login/1"


@dataclass(frozen=True)
class Call:
    """A recorded method call."""

    destination: str
    path: str
    interface: str
    member: str
    signature: str
    body: list[Any]


Reply = list[Any] | Exception | Callable[[Call], list[Any]]


class FakeConnection:
    """Records calls and watches; replies are scripted per member name."""

    def __init__(self) -> None:
        self.calls: list[Call] = []
        self.watches: list[SignalWatch] = []
        self.events: list[str] = []  # ordered "call:Member" / "watch:Member" / "unwatch:Member"
        self._replies: dict[str, Reply] = {}
        self.unwatch_error: Exception | None = None  # raised by unwatch after the watch is removed

    def reply(self, member: str, reply: Reply) -> None:
        """Script the reply for a member: a body, an exception to raise, or a callable."""
        self._replies[member] = reply

    def calls_to(self, member: str) -> list[Call]:
        """Recorded calls for one member."""
        return [c for c in self.calls if c.member == member]

    async def call(
        self, destination: str, path: str, interface: str, member: str, signature: str = "", body: Sequence[Any] = ()
    ) -> list[Any]:
        call = Call(destination, path, interface, member, signature, list(body))
        self.calls.append(call)
        self.events.append(f"call:{member}")
        reply = self._replies.get(member, [])
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(call)
        return list(reply)

    async def watch_signal(
        self, sender: str, path: str, interface: str, member: str, signature: str, handler: SignalHandler
    ) -> SignalWatch:
        watch = SignalWatch(
            sender=sender, owner=":1.7", path=path, interface=interface, member=member, signature=signature, handler=handler
        )
        self.watches.append(watch)
        self.events.append(f"watch:{member}")
        return watch

    async def unwatch(self, watch: SignalWatch) -> None:
        if watch in self.watches:
            self.watches.remove(watch)
            self.events.append(f"unwatch:{watch.member}")
        if self.unwatch_error is not None:
            raise self.unwatch_error

    def emit(self, path: str, member: str, body: list[Any]) -> None:
        """Deliver a signal to every watch on path/member."""
        for watch in list(self.watches):
            if watch.path == path and watch.member == member:
                watch.handler(body, None)

    def fail(self, error: Exception) -> None:
        """Fail every active watch."""
        for watch in list(self.watches):
            watch.handler(None, error)

    def complete_prompts(self, *, dismissed: bool = False, result: Variant | None = None) -> None:
        """Make Prompt() schedule Completed on the next loop iteration, like a real service."""

        def on_prompt(call: Call) -> list[Any]:
            body = [dismissed, result if result is not None else Variant("s", "")]
            asyncio.get_running_loop().call_soon(self.emit, call.path, "Completed", body)
            return []

        self.reply("Prompt", on_prompt)


@pytest.fixture
def conn() -> FakeConnection:
    """Recording fake connection with a happy-path default script."""
    fake = FakeConnection()
    fake.reply("OpenSession", [Variant("s", ""), SESSION_PATH])
    fake.reply("ReadAlias", [COLLECTION_PATH])
    fake.reply("Unlock", [[COLLECTION_PATH], "/"])
    fake.reply("Lock", [[COLLECTION_PATH], "/"])
    fake.reply("CreateItem", [ITEM_PATH, "/"])
    return fake


@pytest.fixture
def client(conn: FakeConnection) -> SecretServiceClient:
    """Client bound to the fake connection."""
    return SecretServiceClient(conn)


@pytest.fixture
def out() -> Output:
    """Human-readable output."""
    return Output(json_mode=False)
