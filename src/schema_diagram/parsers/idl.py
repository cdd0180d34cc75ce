"""Avro IDL parser.

Recursive descent over the lexer's token stream. Supports protocol, record,
error, enum and fixed declarations, field types (primitives, named
references, unions, arrays, maps, the 'T?' shorthand) and the @namespace and
@join annotations. Other annotations and unsupported constructs such as
message declarations are skipped.

The parser runs on every keystroke of a live editor, so a missing or
unexpected token becomes a diagnostic and parsing carries on.
"""

import json
import logging
import re
from dataclasses import dataclass, replace
from typing import Any

from schema_diagram.graph.models import EntityKind, SchemaEntity, SchemaField, SchemaGraph, Severity
from schema_diagram.parsers.base import GraphBuilder
from schema_diagram.parsers.lexer import Token, TokenKind, tokenize
from schema_diagram.parsers.types import (
    LOGICAL_PRIMITIVES,
    PRIMITIVE_TYPES,
    ArrayType,
    MapType,
    NamedType,
    PrimitiveType,
    TypeNode,
    UnionType,
    UnknownType,
    nullable,
    resolve_type,
)
from schema_diagram.utils.helpers import qualify, resolve_reference, simple_name, split_qualified_name

logger = logging.getLogger(__name__)

DECLARATION_KEYWORDS = frozenset({"record", "error", "enum", "fixed"})

JOIN_ARGUMENT_PATTERN = re.compile(r'(\w+)\s*=\s*"([^"]*)"')


@dataclass(frozen=True)
class ParseContext:
    """Scope a declaration is parsed in."""

    namespace: str | None = None
    parent_id: str | None = None

    def with_namespace(self, namespace: str | None) -> "ParseContext":
        return replace(self, namespace=namespace)

    def nested_in(self, parent_id: str) -> "ParseContext":
        return replace(self, parent_id=parent_id)


class IdlParser:
    """Parser for Avro IDL source."""

    def __init__(self, text: str, builder: GraphBuilder | None = None):
        """Initialize parser with IDL source.

        Args:
            text: IDL source text
            builder: Graph builder to collect results into
        """
        self.text = text
        self.tokens = tokenize(text)
        self.builder = builder or GraphBuilder(text)
        self.pos = 0

    def parse(self) -> SchemaGraph:
        """Parse the whole token stream.

        Returns:
            The graph collected so far
        """
        ctx = ParseContext()
        explicit_namespace = False

        while not self._at_end():
            token = self._peek()

            if self._is_keyword(token, "protocol"):
                self._parse_protocol(ctx, explicit_namespace)
                explicit_namespace = False
            elif self._is_declaration(token):
                self._parse_declaration(ctx)
            elif token.kind == TokenKind.ANNOTATION and token.value == "@namespace":
                namespace = self._parse_namespace_annotation()
                if namespace:
                    ctx = ctx.with_namespace(namespace)
                    explicit_namespace = True
            elif token.kind == TokenKind.ANNOTATION:
                self._skip_annotation()
            elif self._is_namespace_statement():
                self._advance()
                ctx = ctx.with_namespace(self._advance().value)
                self._consume_if(";")
            else:
                self._advance()

        return self.builder.graph

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _parse_protocol(self, ctx: ParseContext, explicit_namespace: bool) -> None:
        self._advance()  # protocol
        name = self._read_name("protocol")
        if name is not None and not explicit_namespace:
            ctx = ctx.with_namespace(name.value)

        if not self._expect("{"):
            return

        while not self._at_end() and not self._check("}"):
            token = self._peek()

            if token.kind == TokenKind.ANNOTATION and token.value == "@namespace":
                namespace = self._parse_namespace_annotation()
                if namespace:
                    ctx = ctx.with_namespace(namespace)
            elif token.kind == TokenKind.ANNOTATION:
                self._skip_annotation()
            elif self._is_declaration(token):
                self._parse_declaration(ctx)
            else:
                # messages, imports and anything else we do not model
                self._advance()

        self._expect("}")

    def _parse_declaration(self, ctx: ParseContext) -> None:
        keyword = self._peek().value
        if keyword in ("record", "error"):
            self._parse_record(ctx)
        elif keyword == "enum":
            self._parse_enum(ctx)
        else:
            self._parse_fixed(ctx)

    def _declare(self, name_token: Token, kind: EntityKind, ctx: ParseContext, **attrs) -> SchemaEntity | None:
        """Create an entity and register it, keeping the first of duplicate ids.

        Returns:
            The registered entity, or None for a duplicate
        """
        namespace, name = split_qualified_name(name_token.value)
        if namespace is None:
            namespace = ctx.namespace
        entity = SchemaEntity(
            id=qualify(name, namespace),
            name=name,
            namespace=namespace,
            kind=kind,
            is_nested=ctx.parent_id is not None,
            parent_schema=ctx.parent_id,
            **attrs,
        )

        if not self.builder.register(entity):
            self.builder.diagnostic(
                f"Duplicate definition of '{entity.id}'",
                Severity.WARNING,
                name_token.pos,
                name_token.end,
            )
            return None

        if ctx.parent_id is not None:
            self.builder.add_nested(ctx.parent_id, name, entity.id)
        return entity

    def _parse_record(self, ctx: ParseContext) -> None:
        self._advance()  # record / error
        name = self._read_name("record")
        if name is None:
            self._skip_block()
            return

        entity = self._declare(name, EntityKind.RECORD, ctx, fields=[])
        if entity is None:
            # the first declaration wins, the body of a duplicate adds nothing
            self._skip_block()
            return
        body_ctx = ctx.nested_in(entity.id)

        if not self._expect("{"):
            return

        pending_join: dict | None = None
        while not self._at_end() and not self._check("}"):
            token = self._peek()

            if self._is_declaration(token):
                self._parse_declaration(body_ctx)
            elif token.kind == TokenKind.ANNOTATION and token.value == "@join":
                pending_join = self._parse_join_annotation()
            elif token.kind == TokenKind.ANNOTATION:
                self._skip_annotation()
            else:
                field = self._parse_field(entity.id, ctx, pending_join)
                pending_join = None
                if field is not None:
                    entity.fields.append(field)

        self._expect("}")

    def _parse_enum(self, ctx: ParseContext) -> None:
        self._advance()  # enum
        name = self._read_name("enum")
        if name is None:
            self._skip_block()
            return

        entity = self._declare(name, EntityKind.ENUM, ctx, symbols=[])
        if entity is None:
            self._skip_block()
        else:
            if not self._expect("{"):
                return

            while not self._at_end() and not self._check("}"):
                token = self._advance()
                if token.is_word:
                    entity.symbols.append(token.value)

            self._expect("}")

        # enum default: = SYMBOL;
        if self._consume_if("="):
            if not self._at_end() and self._peek().is_word:
                self._advance()
            self._consume_if(";")

    def _parse_fixed(self, ctx: ParseContext) -> None:
        self._advance()  # fixed
        name = self._read_name("fixed")
        if name is None:
            return

        size = None
        if self._expect("("):
            token = self._peek()
            if token is not None and token.kind == TokenKind.NUMBER:
                self._advance()
                try:
                    size = int(token.value)
                except ValueError:
                    self.builder.diagnostic(
                        f"Invalid fixed size '{token.value}'", Severity.WARNING, token.pos, token.end
                    )
            else:
                self._error_at(token, "Expected fixed size")
            self._expect(")")
        self._consume_if(";")

        self._declare(name, EntityKind.FIXED, ctx, size=size)

    # ------------------------------------------------------------------
    # Fields and types
    # ------------------------------------------------------------------

    def _parse_field(self, parent_id: str, ctx: ParseContext, join: dict | None) -> SchemaField | None:
        node = self._parse_type(ctx)
        if node is None:
            return None

        # annotations between type and name, e.g. @order("ascending")
        while not self._at_end() and self._peek().kind == TokenKind.ANNOTATION:
            self._skip_annotation()

        name = self._peek()
        if name is None or not name.is_word:
            self._error_at(name, "Expected field name")
            self._consume_if(";")
            return None
        self._advance()

        has_default = self._consume_if("=")
        default = self._read_default() if has_default else None
        self._expect(";")

        resolved = resolve_type(node)
        if resolved.edge is not None:
            self.builder.add_reference(parent_id, name.value, resolved.edge)
        if join is not None:
            self.builder.add_join_spec(parent_id, name.value, join, ctx.namespace)

        return SchemaField(
            name=name.value,
            type=resolved.field_type,
            default=default,
            has_default=has_default,
        )

    def _read_default(self) -> Any:
        """Consume a default value and decode it as JSON.

        Text that is not JSON is kept as written.
        """
        start = self.pos
        self._skip_default()
        if self.pos == start:
            return None
        raw = self.text[self.tokens[start].pos:self.tokens[self.pos - 1].end]
        try:
            return json.loads(raw)
        except ValueError:
            return raw

    def _skip_default(self) -> None:
        """Skip a default value up to the terminating ';' at depth 0."""
        depth = 0
        while not self._at_end():
            token = self._peek()
            if token.kind == TokenKind.SYMBOL:
                if token.value in "{[":
                    depth += 1
                elif token.value in "}]":
                    if depth == 0:
                        return
                    depth -= 1
                elif token.value == ";" and depth == 0:
                    return
            self._advance()

    def _parse_type(self, ctx: ParseContext) -> TypeNode | None:
        token = self._peek()
        if token is None:
            self._error_at(None, "Expected a type")
            return None

        if self._is_keyword(token, "union"):
            node = self._parse_union(ctx)
        elif self._is_keyword(token, "array"):
            self._advance()
            self._expect("<")
            node = ArrayType(self._parse_type(ctx) or UnknownType("unknown"))
            self._expect(">")
        elif self._is_keyword(token, "map"):
            self._advance()
            self._expect("<")
            node = MapType(self._parse_type(ctx) or UnknownType("unknown"))
            self._expect(">")
        elif token.is_word:
            self._advance()
            if token.value in PRIMITIVE_TYPES or token.value in LOGICAL_PRIMITIVES:
                display = None
                if token.value == "decimal" and self._check("("):
                    display = token.value + self._read_parenthesized()
                node = PrimitiveType(token.value, display)
            else:
                target = resolve_reference(token.value, ctx.namespace, self.builder.known_ids)
                node = NamedType(target, simple_name(token.value))
        else:
            self._error_at(token, "Expected a type")
            self._advance()
            return None

        if self._consume_if("?"):
            node = nullable(node)
        return node

    def _parse_union(self, ctx: ParseContext) -> TypeNode:
        self._advance()  # union
        if not self._expect("{"):
            return UnknownType("union")

        members: list[TypeNode] = []
        while not self._at_end() and not self._check("}") and not self._check(";"):
            member = self._parse_type(ctx)
            if member is not None:
                members.append(member)
            self._consume_if(",")

        self._expect("}")
        return UnionType(tuple(members))

    # ------------------------------------------------------------------
    # Annotations
    # ------------------------------------------------------------------

    def _read_annotation_argument(self) -> str:
        """Consume a balanced '( ... )' group and return the raw text inside."""
        open_token = self._advance()
        depth = 1
        while not self._at_end():
            token = self._advance()
            if token.is_symbol("("):
                depth += 1
            elif token.is_symbol(")"):
                depth -= 1
                if depth == 0:
                    return self.text[open_token.end:token.pos]
        return self.text[open_token.end:]

    def _read_parenthesized(self) -> str:
        open_token = self._peek()
        self._read_annotation_argument()
        end = self.tokens[self.pos - 1].end
        return self.text[open_token.pos:end]

    def _skip_annotation(self) -> None:
        self._advance()
        if self._check("("):
            self._read_annotation_argument()

    def _parse_namespace_annotation(self) -> str | None:
        self._advance()  # @namespace
        if not self._check("("):
            return None
        value = self._read_annotation_argument().strip().strip('"').strip()
        return value or None

    def _parse_join_annotation(self) -> dict | None:
        token = self._advance()  # @join
        if not self._check("("):
            self.builder.diagnostic("@join requires an argument", Severity.WARNING, token.pos, token.end)
            return None

        raw = self._read_annotation_argument().strip()
        if not raw.startswith("{"):
            # @join(schema="Order", field="id", cardinality="N:1")
            pairs = dict(JOIN_ARGUMENT_PATTERN.findall(raw))
            if not pairs:
                self.builder.diagnostic("Invalid @join argument", Severity.WARNING, token.pos, token.end)
                return None
            return pairs

        try:
            value = json.loads(raw)
        except json.JSONDecodeError as e:
            self.builder.diagnostic(f"Invalid @join argument: {e.msg}", Severity.WARNING, token.pos, token.end)
            return None

        if not isinstance(value, dict):
            self.builder.diagnostic("@join argument must be an object", Severity.WARNING, token.pos, token.end)
            return None
        return value

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    def _at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def _peek(self, offset: int = 0) -> Token | None:
        index = self.pos + offset
        return self.tokens[index] if index < len(self.tokens) else None

    def _advance(self) -> Token | None:
        token = self._peek()
        if token is not None:
            self.pos += 1
        return token

    def _check(self, value: str) -> bool:
        token = self._peek()
        return token is not None and token.kind != TokenKind.STRING and token.value == value

    def _consume_if(self, value: str) -> bool:
        if self._check(value):
            self._advance()
            return True
        return False

    def _expect(self, value: str) -> bool:
        """Consume the expected token, or record a diagnostic and leave the stream as is."""
        if self._consume_if(value):
            return True
        self._error_at(self._peek(), f"Expected '{value}'")
        return False

    def _error_at(self, token: Token | None, message: str) -> None:
        if token is None:
            self.builder.diagnostic(f"{message} but got end of input", start=len(self.text))
        else:
            self.builder.diagnostic(f"{message} but got '{token.value}'", start=token.pos, end=token.end)

    def _read_name(self, what: str) -> Token | None:
        token = self._peek()
        if token is not None and token.is_word:
            return self._advance()
        self._error_at(token, f"Expected {what} name")
        return None

    def _skip_block(self) -> None:
        if not self._consume_if("{"):
            return
        depth = 1
        while not self._at_end() and depth > 0:
            token = self._advance()
            if token.is_symbol("{"):
                depth += 1
            elif token.is_symbol("}"):
                depth -= 1

    @staticmethod
    def _is_keyword(token: Token | None, value: str) -> bool:
        return token is not None and token.kind == TokenKind.KEYWORD and token.value == value

    def _is_declaration(self, token: Token | None) -> bool:
        return token is not None and token.kind == TokenKind.KEYWORD and token.value in DECLARATION_KEYWORDS

    def _is_namespace_statement(self) -> bool:
        token, name = self._peek(), self._peek(1)
        return (
            token.kind == TokenKind.IDENT
            and token.value == "namespace"
            and name is not None
            and name.is_word
        )


def parse_avro_idl(text: str) -> SchemaGraph:
    """Parse Avro IDL text into a SchemaGraph.

    Never raises: an unexpected failure is reported as a single diagnostic
    alongside whatever was collected before it.

    Args:
        text: IDL source

    Returns:
        Parsed SchemaGraph
    """
    builder = GraphBuilder(text)
    try:
        IdlParser(text, builder).parse()
    except Exception as e:
        logger.debug("IDL parser failed", exc_info=True)
        builder.diagnostic(f"IDL parse error: {e}")
    return builder.graph
