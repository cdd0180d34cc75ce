"""Text edits for Avro JSON and Avro IDL sources.

Example usage:
    from schema_diagram.editor import rename_field

    text = rename_field(text, "avro-idl", "com.acme.User", "mail", "email")
"""

from schema_diagram.editor.base import EditorBackend
from schema_diagram.editor.idl_backend import IdlEditorBackend
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
from schema_diagram.editor.json_backend import JsonEditorBackend
from schema_diagram.editor.operations import (
    add_field,
    add_symbol,
    apply_edit,
    remove_field,
    rename_field,
    rename_symbol,
    unique_field_name,
    unique_symbol_name,
    update_field_default,
    update_field_type,
)
from schema_diagram.editor.registry import EditorRegistry, get_global_editor_registry

__all__ = [
    "AddField",
    "AddSymbol",
    "EditIntent",
    "EditorBackend",
    "EditorRegistry",
    "IdlEditorBackend",
    "JsonEditorBackend",
    "RemoveField",
    "RenameField",
    "RenameSymbol",
    "UpdateFieldDefault",
    "UpdateFieldType",
    "add_field",
    "add_symbol",
    "apply_edit",
    "get_global_editor_registry",
    "remove_field",
    "rename_field",
    "rename_symbol",
    "unique_field_name",
    "unique_symbol_name",
    "update_field_default",
    "update_field_type",
]
