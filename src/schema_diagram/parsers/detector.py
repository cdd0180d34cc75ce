"""Schema format detection.

A heuristic: JSON text declaring at least one named Avro type is the JSON
form; text containing IDL declarations is the IDL form; everything else is
unknown.
"""

import json
import re
from typing import Any

from schema_diagram.graph.models import SchemaFormat

NAMED_TYPES = ("record", "enum", "fixed")

# JSON that fails to decode but clearly declares Avro types is still routed
# to the JSON walker so it can report a positioned error.
BROKEN_JSON_PATTERN = re.compile(r'"type"\s*:\s*"(record|enum|fixed)"')

IDL_PATTERNS = (
    re.compile(r"\bprotocol\s+\w+"),
    re.compile(r"\brecord\s+\w+\s*\{"),
    re.compile(r"\benum\s+\w+\s*\{"),
    re.compile(r"\bfixed\s+\w+\s*\("),
)


def _declares_named_type(data: Any) -> bool:
    if isinstance(data, dict) and "protocol" in data and isinstance(data.get("types"), list):
        return _declares_named_type(data["types"])
    candidates = data if isinstance(data, list) else [data]
    return any(isinstance(c, dict) and c.get("type") in NAMED_TYPES for c in candidates)


def detect_format(text: str) -> SchemaFormat:
    """Detect which frontend should parse the text.

    Args:
        text: Schema source

    Returns:
        Detected SchemaFormat
    """
    stripped = text.strip()
    if not stripped:
        return SchemaFormat.UNKNOWN

    if stripped[0] in "{[":
        try:
            data = json.loads(stripped)
        except (ValueError, RecursionError):
            if BROKEN_JSON_PATTERN.search(stripped):
                return SchemaFormat.AVRO_JSON
        else:
            if _declares_named_type(data):
                return SchemaFormat.AVRO_JSON

    if any(pattern.search(stripped) for pattern in IDL_PATTERNS):
        return SchemaFormat.AVRO_IDL

    return SchemaFormat.UNKNOWN
