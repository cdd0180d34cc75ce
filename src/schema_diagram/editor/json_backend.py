"""Editor backend for Avro JSON schemas.

Decodes the whole document, mutates the target object and re-serializes
everything with canonical indentation, so formatting is normalized as a
side effect of any successful edit.
"""

import json
from typing import Any, Callable

from schema_diagram.editor.base import EditorBackend
from schema_diagram.editor.intents import (
    AddField,
    AddSymbol,
    RemoveField,
    RenameField,
    RenameSymbol,
    UpdateFieldDefault,
    UpdateFieldType,
)
from schema_diagram.graph.models import SchemaFormat
from schema_diagram.utils.helpers import qualify, split_qualified_name

NAMED_TYPES = ("record", "enum", "fixed")


def coerce_type(type_text: str) -> Any:
    """Turn a type argument into an Avro JSON type value.

    JSON text is decoded, 'T?' becomes ["null", T] and anything else is
    used as a type name.

    Args:
        type_text: Type as typed by the user

    Returns:
        Avro type value
    """
    stripped = type_text.strip()
    if stripped[:1] in ("[", "{"):
        try:
            return json.loads(stripped)
        except ValueError:
            return stripped
    if len(stripped) > 1 and stripped.endswith("?"):
        return ["null", coerce_type(stripped[:-1])]
    return stripped


def _top_level(data: Any) -> list[Any]:
    if isinstance(data, dict) and "protocol" in data and isinstance(data.get("types"), list):
        return data["types"]
    return data if isinstance(data, list) else [data]


def find_schema(data: Any, name: str) -> dict[str, Any] | None:
    """Find a named type by simple or qualified name.

    Nested types declared inside field types (directly, or inside arrays,
    maps and unions) are searched too.

    Args:
        data: Decoded JSON document
        name: Simple or fully qualified name

    Returns:
        The schema object, or None
    """
    namespace = None
    if isinstance(data, dict) and "protocol" in data and isinstance(data.get("namespace"), str):
        namespace = data["namespace"]
    for schema in _top_level(data):
        found = _find_in_type(schema, name, namespace)
        if found is not None:
            return found
    return None


def _find_in_type(avro_type: Any, name: str, namespace: str | None) -> dict[str, Any] | None:
    if isinstance(avro_type, list):
        for member in avro_type:
            found = _find_in_type(member, name, namespace)
            if found is not None:
                return found
        return None

    if not isinstance(avro_type, dict):
        return None

    kind = avro_type.get("type")
    if kind == "array":
        return _find_in_type(avro_type.get("items"), name, namespace)
    if kind == "map":
        return _find_in_type(avro_type.get("values"), name, namespace)
    if kind not in NAMED_TYPES or not isinstance(avro_type.get("name"), str):
        return None

    own_name = avro_type["name"]
    if "." in own_name:
        namespace, simple = split_qualified_name(own_name)
    else:
        simple = own_name
        if isinstance(avro_type.get("namespace"), str):
            namespace = avro_type["namespace"] or None

    if name in (own_name, simple, qualify(simple, namespace)):
        return avro_type

    if kind == "record" and isinstance(avro_type.get("fields"), list):
        for field in avro_type["fields"]:
            if isinstance(field, dict):
                found = _find_in_type(field.get("type"), name, namespace)
                if found is not None:
                    return found
    return None


def _fields(schema: dict[str, Any]) -> list[Any] | None:
    if schema.get("type") != "record" or not isinstance(schema.get("fields"), list):
        return None
    return schema["fields"]


def _find_field(schema: dict[str, Any], field_name: str) -> dict[str, Any] | None:
    for field in _fields(schema) or []:
        if isinstance(field, dict) and field.get("name") == field_name:
            return field
    return None


def _symbols(schema: dict[str, Any]) -> list[Any] | None:
    if schema.get("type") != "enum" or not isinstance(schema.get("symbols"), list):
        return None
    return schema["symbols"]


class JsonEditorBackend(EditorBackend):
    """Applies edit intents to Avro JSON text."""

    format = SchemaFormat.AVRO_JSON

    def _edit(self, text: str, schema_name: str, mutate: Callable[[dict[str, Any]], bool]) -> str:
        """Decode, mutate the named schema in place and re-serialize.

        mutate returns False when it changed nothing; the original text is
        then returned byte-for-byte.
        """
        try:
            data = json.loads(text)
        except (ValueError, RecursionError):
            return text

        target = find_schema(data, schema_name)
        if target is None or not mutate(target):
            return text

        return json.dumps(data, indent=self.settings.json_indent, ensure_ascii=False)

    def add_field(self, text: str, intent: AddField) -> str:
        def mutate(schema: dict[str, Any]) -> bool:
            fields = _fields(schema)
            if fields is None or _find_field(schema, intent.field_name) is not None:
                return False
            fields.append({"name": intent.field_name, "type": coerce_type(intent.field_type)})
            return True

        return self._edit(text, intent.schema, mutate)

    def remove_field(self, text: str, intent: RemoveField) -> str:
        def mutate(schema: dict[str, Any]) -> bool:
            fields = _fields(schema)
            if fields is None:
                return False
            kept = [f for f in fields if not (isinstance(f, dict) and f.get("name") == intent.field_name)]
            if len(kept) == len(fields):
                return False
            schema["fields"] = kept
            return True

        return self._edit(text, intent.schema, mutate)

    def rename_field(self, text: str, intent: RenameField) -> str:
        def mutate(schema: dict[str, Any]) -> bool:
            field = _find_field(schema, intent.old_name)
            if field is None or intent.old_name == intent.new_name:
                return False
            field["name"] = intent.new_name
            return True

        return self._edit(text, intent.schema, mutate)

    def update_field_type(self, text: str, intent: UpdateFieldType) -> str:
        def mutate(schema: dict[str, Any]) -> bool:
            field = _find_field(schema, intent.field_name)
            if field is None:
                return False
            new_type = coerce_type(intent.new_type)
            if field.get("type") == new_type:
                return False
            field["type"] = new_type
            return True

        return self._edit(text, intent.schema, mutate)

    def update_field_default(self, text: str, intent: UpdateFieldDefault) -> str:
        def mutate(schema: dict[str, Any]) -> bool:
            field = _find_field(schema, intent.field_name)
            if field is None:
                return False
            if intent.remove:
                return field.pop("default", _MISSING) is not _MISSING
            # compare as JSON so that true, 1 and 1.0 stay distinct
            if "default" in field and _same_json(field["default"], intent.value):
                return False
            field["default"] = intent.value
            return True

        return self._edit(text, intent.schema, mutate)

    def add_symbol(self, text: str, intent: AddSymbol) -> str:
        def mutate(schema: dict[str, Any]) -> bool:
            symbols = _symbols(schema)
            if symbols is None or intent.symbol in symbols:
                return False
            symbols.append(intent.symbol)
            return True

        return self._edit(text, intent.schema, mutate)

    def rename_symbol(self, text: str, intent: RenameSymbol) -> str:
        def mutate(schema: dict[str, Any]) -> bool:
            symbols = _symbols(schema)
            if symbols is None or intent.old_name not in symbols or intent.old_name == intent.new_name:
                return False
            schema["symbols"] = [intent.new_name if s == intent.old_name else s for s in symbols]
            if schema.get("default") == intent.old_name:
                schema["default"] = intent.new_name
            return True

        return self._edit(text, intent.schema, mutate)


_MISSING = object()


def _same_json(left: Any, right: Any) -> bool:
    try:
        return json.dumps(left, sort_keys=True) == json.dumps(right, sort_keys=True)
    except (TypeError, ValueError):
        return False
