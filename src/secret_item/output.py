"""Structured output for CLI and JSON modes."""

# This module is the output layer; print() is its sole mechanism for producing CLI output.
# ruff: noqa: T201

import json
import sys
from typing import NoReturn

import typer


class Output:
    """Handles all CLI output in JSON or human-readable format."""

    def __init__(self, *, json_mode: bool) -> None:
        """Initialize output handler.

        Args:
            json_mode: If True, output JSON envelopes; otherwise human-readable text.

        """
        self._json_mode = json_mode

    @property
    def json_mode(self) -> bool:
        """Whether output is JSON envelopes."""
        return self._json_mode

    def _success(self, data: dict[str, object], message: str) -> None:
        """Print a success result in JSON or human-readable format."""
        if self._json_mode:
            print(json.dumps({"ok": True, "data": data}))
        else:
            print(message)

    def print_error_and_exit(self, code: str, message: str) -> NoReturn:
        """Print an error in JSON or human-readable format and exit with code 1.

        Raises:
            typer.Exit: Always, with code 1.

        """
        if self._json_mode:
            print(json.dumps({"ok": False, "error": code, "message": message}))
        else:
            print(f"Error: {message}", file=sys.stderr)
        raise typer.Exit(code=1)

    # --- Progress ---

    def print_step(self, message: str) -> None:
        """Print a progress line. Silent in JSON mode, which emits a single envelope."""
        if not self._json_mode:
            print(message)

    # --- Results ---

    def print_no_collection(self, alias: str) -> None:
        """Print that the alias does not point at a collection."""
        self._success({"alias": alias, "collection": None}, f"Could not retrieve {alias} collection")

    def print_item_created(self, item: str, collection: str) -> None:
        """Print item creation confirmation."""
        self._success({"item": item, "collection": collection}, f"Created new item at path {item}")

    def print_unlocked(self, collection: str, *, dismissed: bool) -> None:
        """Print collection unlock result."""
        message = "Unlock prompt dismissed." if dismissed else f"Collection {collection} unlocked."
        self._success({"collection": collection, "dismissed": dismissed}, message)

    def print_locked(self, collection: str, *, dismissed: bool) -> None:
        """Print collection lock result."""
        message = "Lock prompt dismissed." if dismissed else f"Collection {collection} locked."
        self._success({"collection": collection, "dismissed": dismissed}, message)
