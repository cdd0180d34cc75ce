"""Schema frontends for the Avro JSON and Avro IDL syntaxes.

Example usage:
    from schema_diagram.parsers import parse_schema

    result = parse_schema(open("user.avdl").read())
    for entity in result.graph.entities:
        print(entity.id, entity.kind.value)
"""

from schema_diagram.parsers.avro_json import AvroJsonParser, parse_avro_json
from schema_diagram.parsers.detector import detect_format
from schema_diagram.parsers.idl import IdlParser, parse_avro_idl
from schema_diagram.parsers.lexer import Token, TokenKind, tokenize
from schema_diagram.parsers.parser import SchemaParser, parse_schema, parse_schema_file

__all__ = [
    "AvroJsonParser",
    "IdlParser",
    "SchemaParser",
    "Token",
    "TokenKind",
    "detect_format",
    "parse_avro_idl",
    "parse_avro_json",
    "parse_schema",
    "parse_schema_file",
    "tokenize",
]
