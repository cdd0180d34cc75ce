"""Edit intents shared by every editor backend.

An intent names the target entity (simple or fully qualified name) and
what to change. Backends translate intents into text for their format.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class AddField:
    schema: str
    field_name: str
    field_type: str


@dataclass(frozen=True)
class RemoveField:
    schema: str
    field_name: str


@dataclass(frozen=True)
class RenameField:
    schema: str
    old_name: str
    new_name: str


@dataclass(frozen=True)
class UpdateFieldType:
    schema: str
    field_name: str
    new_type: str


@dataclass(frozen=True)
class UpdateFieldDefault:
    """Set a field default, or drop it when remove is True."""

    schema: str
    field_name: str
    value: Any = None
    remove: bool = False


@dataclass(frozen=True)
class AddSymbol:
    schema: str
    symbol: str


@dataclass(frozen=True)
class RenameSymbol:
    schema: str
    old_name: str
    new_name: str


EditIntent = AddField | RemoveField | RenameField | UpdateFieldType | UpdateFieldDefault | AddSymbol | RenameSymbol
