"""Public edit operations.

Each operation takes the source text, its format and the target schema
name (simple or fully qualified) and returns new text. When an edit does
not apply, the input is returned unchanged.
"""

import logging
from typing import Any, Iterable

from schema_diagram.config.settings import EditorSettings
from schema_diagram.editor.intents import (
    AddField,
    AddSymbol,
    EditIntent,
    RemoveField,
    RenameField,
    RenameSymbol,
    UpdateFieldDefault,
    UpdateFieldType,
)
from schema_diagram.editor.registry import get_global_editor_registry
from schema_diagram.graph.models import SchemaFormat
from schema_diagram.parsers.detector import detect_format
from schema_diagram.utils.helpers import unique_name

logger = logging.getLogger(__name__)

FORMAT_ALIASES = {
    "json": SchemaFormat.AVRO_JSON,
    "avsc": SchemaFormat.AVRO_JSON,
    "avpr": SchemaFormat.AVRO_JSON,
    "idl": SchemaFormat.AVRO_IDL,
    "avdl": SchemaFormat.AVRO_IDL,
}

NEW_FIELD_BASE = "new_field"
NEW_SYMBOL_BASE = "NEW_SYMBOL"


def _coerce_format(text: str, format: SchemaFormat | str | None) -> SchemaFormat:
    if format is None:
        return detect_format(text)
    if isinstance(format, SchemaFormat):
        return format
    key = format.strip().lower()
    if key in FORMAT_ALIASES:
        return FORMAT_ALIASES[key]
    try:
        return SchemaFormat(key)
    except ValueError:
        return SchemaFormat.UNKNOWN


def apply_edit(
    text: str,
    format: SchemaFormat | str | None,
    intent: EditIntent,
    settings: EditorSettings | None = None,
) -> str:
    """Apply an edit intent with the backend for the text's format.

    Args:
        text: Schema source
        format: Format of the text; detected when None
        intent: Edit to perform
        settings: Optional editor settings

    Returns:
        The edited text, or the input unchanged
    """
    schema_format = _coerce_format(text, format)
    backend = get_global_editor_registry().create(schema_format, settings)
    if backend is None:
        logger.debug("no editor for format %s", schema_format.value)
        return text
    return backend.apply(text, intent)


def add_field(
    text: str,
    format: SchemaFormat | str | None,
    schema_name: str,
    field_name: str,
    field_type: str | None = None,
    settings: EditorSettings | None = None,
) -> str:
    """Append a field to a record."""
    if field_type is None:
        field_type = (settings or EditorSettings()).default_field_type
    return apply_edit(text, format, AddField(schema_name, field_name, field_type), settings)


def remove_field(
    text: str,
    format: SchemaFormat | str | None,
    schema_name: str,
    field_name: str,
    settings: EditorSettings | None = None,
) -> str:
    return apply_edit(text, format, RemoveField(schema_name, field_name), settings)


def rename_field(
    text: str,
    format: SchemaFormat | str | None,
    schema_name: str,
    old_name: str,
    new_name: str,
    settings: EditorSettings | None = None,
) -> str:
    return apply_edit(text, format, RenameField(schema_name, old_name, new_name), settings)


def update_field_type(
    text: str,
    format: SchemaFormat | str | None,
    schema_name: str,
    field_name: str,
    new_type: str,
    settings: EditorSettings | None = None,
) -> str:
    """Change a field's type.

    In IDL text a 'union { null, T }' or 'T?' wrapper is kept and only T is
    replaced.
    """
    return apply_edit(text, format, UpdateFieldType(schema_name, field_name, new_type), settings)


def update_field_default(
    text: str,
    format: SchemaFormat | str | None,
    schema_name: str,
    field_name: str,
    value: Any = None,
    remove: bool = False,
    settings: EditorSettings | None = None,
) -> str:
    """Set a field's default value, or drop it when remove is True."""
    intent = UpdateFieldDefault(schema_name, field_name, value=value, remove=remove)
    return apply_edit(text, format, intent, settings)


def add_symbol(
    text: str,
    format: SchemaFormat | str | None,
    schema_name: str,
    symbol: str,
    settings: EditorSettings | None = None,
) -> str:
    return apply_edit(text, format, AddSymbol(schema_name, symbol), settings)


def rename_symbol(
    text: str,
    format: SchemaFormat | str | None,
    schema_name: str,
    old_name: str,
    new_name: str,
    settings: EditorSettings | None = None,
) -> str:
    return apply_edit(text, format, RenameSymbol(schema_name, old_name, new_name), settings)


def unique_field_name(existing: Iterable[str]) -> str:
    """Return 'new_field', or 'new_field_N' with the first unused N >= 2."""
    return unique_name(NEW_FIELD_BASE, existing)


def unique_symbol_name(existing: Iterable[str]) -> str:
    """Return 'NEW_SYMBOL', or 'NEW_SYMBOL_N' with the first unused N >= 2."""
    return unique_name(NEW_SYMBOL_BASE, existing)
