"""Secret Service wire contract: names, signatures, and typed records.

Only the subset of org.freedesktop.Secret that this tool issues is described here.

CreateItem(properties a{sv}, secret (oayays), replace b) -> (item o, prompt o)

The secret struct has four fields and all of them are mandatory:

    (session o, parameters ay, value ay, content_type s)

A service that receives a three-field struct (content type missing) rejects or truncates the item,
so records are validated here before they ever reach the bus.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from dbus_fast import Variant
from dbus_fast.validators import is_object_path_valid

SERVICE_NAME = "org.freedesktop.secrets"
SERVICE_PATH = "/org/freedesktop/secrets"

SERVICE_INTERFACE = "org.freedesktop.Secret.Service"
COLLECTION_INTERFACE = "org.freedesktop.Secret.Collection"
PROMPT_INTERFACE = "org.freedesktop.Secret.Prompt"

ITEM_LABEL = "org.freedesktop.Secret.Item.Label"
ITEM_ATTRIBUTES = "org.freedesktop.Secret.Item.Attributes"

# D-Bus type signatures
SECRET_SIGNATURE = "(oayays)"
ATTRIBUTES_SIGNATURE = "a{ss}"
CREATE_ITEM_SIGNATURE = "a{sv}" + SECRET_SIGNATURE + "b"
COMPLETED_SIGNATURE = "bv"

# Object path the service returns when there is no object (no prompt, no alias target, ...)
NO_OBJECT = "/"

PLAIN_ALGORITHM = "plain"
DEFAULT_CONTENT_TYPE = "text/plain; charset=utf-8"


class SecretServiceError(Exception):
    """Application-level error raised while talking to the Secret Service."""

    def __init__(self, code: str, message: str) -> None:
        """Initialize with a machine-readable code and a human-readable message.

        Args:
            code: Machine-readable error code (e.g. "malformed_secret").
            message: Human-readable error description.

        """
        super().__init__(message)
        self.code = code


def optional_path(path: str) -> str | None:
    """Convert the "/" sentinel returned by the service into None."""
    return None if path == NO_OBJECT else path


@dataclass(frozen=True)
class SecretRecord:
    """The (oayays) secret struct passed to CreateItem."""

    session: str
    parameters: bytes
    value: bytes
    content_type: str

    def __post_init__(self) -> None:
        """Reject records that would not marshal as (oayays).

        Raises:
            SecretServiceError: Any field is of the wrong type (code: ``malformed_secret``).

        """
        if not isinstance(self.session, str) or not is_object_path_valid(self.session) or self.session == NO_OBJECT:
            raise SecretServiceError("malformed_secret", f"Invalid session object path: {self.session!r}.")
        if not isinstance(self.parameters, bytes) or not isinstance(self.value, bytes):
            raise SecretServiceError("malformed_secret", "Secret parameters and value must be bytes.")
        if not isinstance(self.content_type, str):
            raise SecretServiceError("malformed_secret", "Secret content type must be a string.")

    def to_struct(self) -> tuple[str, bytes, bytes, str]:
        """Return the struct fields in wire order."""
        return (self.session, self.parameters, self.value, self.content_type)

    @staticmethod
    def from_struct(struct: Sequence[object]) -> SecretRecord:
        """Validate a raw struct and build a record from it.

        Raises:
            SecretServiceError: Wrong field count or field types (code: ``malformed_secret``).

        """
        if len(struct) != 4:
            msg = f"Secret struct must have 4 fields (session, parameters, value, content_type), got {len(struct)}."
            raise SecretServiceError("malformed_secret", msg)
        session, parameters, value, content_type = struct
        return SecretRecord(session=session, parameters=parameters, value=value, content_type=content_type)  # type: ignore[arg-type]


@dataclass(frozen=True)
class LockResult:
    """Result of Unlock or Lock: objects affected now, plus a prompt for the rest."""

    objects: list[str]
    prompt: str | None


@dataclass(frozen=True)
class CreateItemResult:
    """Result of CreateItem. ``item`` is None when a prompt must complete first."""

    item: str | None
    prompt: str | None


@dataclass(frozen=True)
class PromptResult:
    """Payload of the Prompt.Completed signal."""

    dismissed: bool
    result: Variant

    def object_paths(self) -> list[str]:
        """Object paths carried by the result variant (``o`` or ``ao``), sentinel excluded."""
        match self.result.signature:
            case "o":
                paths = [self.result.value]
            case "ao":
                paths = list(self.result.value)
            case _:
                return []
        return [p for p in paths if p != NO_OBJECT]


def build_item_properties(label: str, attributes: Mapping[str, str]) -> dict[str, Variant]:
    """Build the CreateItem properties: a label variant and a nested a{ss} attributes variant."""
    return {
        ITEM_LABEL: Variant("s", label),
        ITEM_ATTRIBUTES: Variant(ATTRIBUTES_SIGNATURE, dict(attributes)),
    }


def decode_item_properties(properties: Mapping[str, Variant]) -> tuple[str, dict[str, str]]:
    """Extract label and lookup attributes from CreateItem properties.

    Raises:
        SecretServiceError: Missing key or unexpected variant type (code: ``malformed_properties``).

    """
    label = properties.get(ITEM_LABEL)
    attributes = properties.get(ITEM_ATTRIBUTES)
    if label is None or attributes is None:
        raise SecretServiceError("malformed_properties", f"Properties must contain {ITEM_LABEL} and {ITEM_ATTRIBUTES}.")
    if label.signature != "s" or attributes.signature != ATTRIBUTES_SIGNATURE:
        msg = f"Unexpected property types: label {label.signature!r}, attributes {attributes.signature!r}."
        raise SecretServiceError("malformed_properties", msg)
    return label.value, dict(attributes.value)
