"""Editor backend for Avro IDL source.

Edits are patches scoped to the body of one declaration, so comments and
formatting elsewhere survive untouched. The declaration header and its
matching closing brace are found on the lexer's token stream, which keeps
braces inside strings and comments from being counted.
"""

import json
from dataclasses import dataclass
from typing import Any

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
from schema_diagram.parsers.lexer import Token, TokenKind, tokenize
from schema_diagram.utils.helpers import simple_name

RECORD_KEYWORDS = frozenset({"record", "error"})
ENUM_KEYWORDS = frozenset({"enum"})
DECLARATION_KEYWORDS = frozenset({"record", "error", "enum", "fixed"})

CLOSERS = {"{": "}", "(": ")", "[": "]", "<": ">"}


@dataclass(frozen=True)
class Body:
    """Token indexes of a declaration's braces."""

    tokens: list[Token]
    open_index: int
    close_index: int

    @property
    def open(self) -> Token:
        return self.tokens[self.open_index]

    @property
    def close(self) -> Token:
        return self.tokens[self.close_index]

    @property
    def inner(self) -> list[Token]:
        return self.tokens[self.open_index + 1:self.close_index]


@dataclass(frozen=True)
class FieldDecl:
    """Token indexes of one field declaration inside a record body."""

    start: int
    type_start: int
    type_end: int
    name: int
    equals: int | None
    semicolon: int | None
    last: int


def _match(tokens: list[Token], open_index: int, limit: int) -> int | None:
    """Index of the token closing the bracket at open_index, if any."""
    opener = tokens[open_index].value
    closer = CLOSERS[opener]
    depth = 0
    for i in range(open_index, limit):
        token = tokens[i]
        if token.kind != TokenKind.SYMBOL:
            continue
        if token.value == opener:
            depth += 1
        elif token.value == closer:
            depth -= 1
            if depth == 0:
                return i
    return None


def find_body(text: str, schema_name: str, keywords: frozenset[str]) -> Body | None:
    """Locate 'keyword Name {' and its matching '}'.

    Args:
        text: IDL source
        schema_name: Simple or qualified name; only the simple name is matched
        keywords: Declaration keywords to accept

    Returns:
        Body, or None when the declaration is missing or unterminated
    """
    tokens = tokenize(text)
    name = simple_name(schema_name)

    for i in range(len(tokens) - 2):
        keyword, name_token, brace = tokens[i], tokens[i + 1], tokens[i + 2]
        if (
            keyword.kind == TokenKind.KEYWORD
            and keyword.value in keywords
            and name_token.is_word
            and simple_name(name_token.value) == name
            and brace.is_symbol("{")
        ):
            close_index = _match(tokens, i + 2, len(tokens))
            if close_index is None:
                return None
            return Body(tokens, i + 2, close_index)
    return None


def _skip_annotations(tokens: list[Token], i: int, limit: int) -> int:
    while i < limit and tokens[i].kind == TokenKind.ANNOTATION:
        i += 1
        if i < limit and tokens[i].is_symbol("("):
            closing = _match(tokens, i, limit)
            i = limit if closing is None else closing + 1
    return i


def _skip_declaration(tokens: list[Token], i: int, limit: int) -> int:
    """Skip a nested record/enum/fixed declaration starting at i."""
    if tokens[i].value == "fixed":
        for j in range(i, limit):
            if tokens[j].is_symbol(";"):
                return j + 1
        return limit

    for j in range(i, limit):
        if tokens[j].is_symbol("{"):
            closing = _match(tokens, j, limit)
            if closing is None:
                return limit
            end = closing + 1
            # enum default: = SYMBOL;
            if end < limit and tokens[end].is_symbol("="):
                while end < limit and not tokens[end].is_symbol(";"):
                    end += 1
                end = min(end + 1, limit)
            return end
    return limit


def _statement_end(tokens: list[Token], i: int, limit: int) -> int:
    """Index of the ';' ending the statement at i, or limit."""
    depth = 0
    for j in range(i, limit):
        token = tokens[j]
        if token.kind != TokenKind.SYMBOL:
            continue
        if token.value in "{([":
            depth += 1
        elif token.value in "})]":
            depth -= 1
        elif token.value == ";" and depth == 0:
            return j
    return limit


def field_declarations(body: Body) -> list[FieldDecl]:
    """Field declarations at the top level of a record body.

    Nested declarations are skipped. The field name is the identifier right
    before '=' or ';'.
    """
    tokens = body.tokens
    limit = body.close_index
    decls = []
    i = body.open_index + 1

    while i < limit:
        start = i
        type_start = _skip_annotations(tokens, i, limit)
        if type_start >= limit:
            break

        head = tokens[type_start]
        if head.kind == TokenKind.KEYWORD and head.value in DECLARATION_KEYWORDS:
            i = _skip_declaration(tokens, type_start, limit)
            continue

        end = _statement_end(tokens, type_start, limit)
        equals = next((j for j in range(type_start, end) if tokens[j].is_symbol("=")), None)
        name = (equals if equals is not None else end) - 1

        if name > type_start and tokens[name].is_word:
            type_end = next(
                (j for j in range(type_start, name) if tokens[j].kind == TokenKind.ANNOTATION),
                name,
            )
            decls.append(FieldDecl(
                start=start,
                type_start=type_start,
                type_end=type_end,
                name=name,
                equals=equals,
                semicolon=end if end < limit else None,
                last=end if end < limit else limit - 1,
            ))

        i = end + 1

    return decls


def _find_field(body: Body, field_name: str) -> FieldDecl | None:
    for decl in field_declarations(body):
        if body.tokens[decl.name].value == field_name:
            return decl
    return None


def _replace(text: str, start: int, end: int, replacement: str) -> str:
    return text[:start] + replacement + text[end:]


def _leading_whitespace(line: str) -> str:
    return line[:len(line) - len(line.lstrip())]


def render_default(value: Any) -> str:
    """Render a default value as IDL text.

    Nested lists and objects are not reconstructed; they render as empty
    placeholders.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return json.dumps(value)
    if isinstance(value, list):
        return "[]"
    if isinstance(value, dict):
        return "{}"
    return json.dumps(str(value))


class IdlEditorBackend(EditorBackend):
    """Applies edit intents to Avro IDL text with body-scoped patches."""

    format = SchemaFormat.AVRO_IDL

    def _insert_member(self, text: str, body: Body, line: str) -> str:
        """Insert a member line right before the closing brace.

        The indentation is taken from the last non-blank line of the body.
        """
        open_end, close_pos = body.open.end, body.close.pos
        inner = text[open_end:close_pos]

        if "\n" not in inner:
            content = inner.strip()
            new_inner = f" {content} {line} " if content else f" {line} "
            return _replace(text, open_end, close_pos, new_inner)

        tail = inner.rpartition("\n")[2]
        # the first segment is the rest of the header line
        indent = next(
            (_leading_whitespace(l) for l in reversed(inner.split("\n")[1:]) if l.strip()),
            None,
        )
        if indent is None:
            indent = _leading_whitespace(tail) + self.settings.indent_unit

        if not tail.strip():
            insert_at = close_pos - len(tail)
            return _replace(text, insert_at, insert_at, f"{indent}{line}\n")

        before = text[:close_pos].rstrip(" \t")
        return before + f"\n{indent}{line}\n" + text[close_pos:]

    def add_field(self, text: str, intent: AddField) -> str:
        body = find_body(text, intent.schema, RECORD_KEYWORDS)
        if body is None or _find_field(body, intent.field_name) is not None:
            return text
        field_type = intent.field_type.strip() or self.settings.default_field_type
        return self._insert_member(text, body, f"{field_type} {intent.field_name};")

    def remove_field(self, text: str, intent: RemoveField) -> str:
        body = find_body(text, intent.schema, RECORD_KEYWORDS)
        decl = _find_field(body, intent.field_name) if body else None
        if decl is None:
            return text

        start = body.tokens[decl.start].pos
        end = body.tokens[decl.last].end

        line_start = text.rfind("\n", 0, start) + 1
        line_end = text.find("\n", end)
        if line_end == -1:
            line_end = len(text)
        rest = text[end:line_end].strip()

        if not text[line_start:start].strip() and (not rest or rest.startswith("//")):
            return _replace(text, line_start, min(line_end + 1, len(text)), "")

        while end < len(text) and text[end] in " \t":
            end += 1
        return _replace(text, start, end, "")

    def rename_field(self, text: str, intent: RenameField) -> str:
        """Rename the field's declared name only.

        Other words in the body are left alone, even when they match, so a
        type spelled like the field (`Status Status;`) keeps its name.
        """
        body = find_body(text, intent.schema, RECORD_KEYWORDS)
        decl = _find_field(body, intent.old_name) if body else None
        if decl is None:
            return text
        name = body.tokens[decl.name]
        return _replace(text, name.pos, name.end, intent.new_name)

    def update_field_type(self, text: str, intent: UpdateFieldType) -> str:
        body = find_body(text, intent.schema, RECORD_KEYWORDS)
        decl = _find_field(body, intent.field_name) if body else None
        if decl is None or decl.type_end <= decl.type_start:
            return text

        tokens = body.tokens
        new_type = intent.new_type.strip()
        span = self._nullable_union_member(tokens, decl.type_start, decl.type_end)

        if span is None and decl.type_end - decl.type_start > 1 and tokens[decl.type_end - 1].is_symbol("?"):
            # postfix-nullable shorthand: OLD? name
            span = (decl.type_start, decl.type_end - 2)
        if span is None:
            # plain OLD name
            return _replace(text, tokens[decl.type_start].pos, tokens[decl.type_end - 1].end, new_type)

        if len(new_type) > 1 and new_type.endswith("?"):
            new_type = new_type[:-1]
        first, last = span
        return _replace(text, tokens[first].pos, tokens[last].end, new_type)

    @staticmethod
    def _nullable_union_member(tokens: list[Token], start: int, end: int) -> tuple[int, int] | None:
        """Token span of T in 'union { null, T }' (either order), if that is the type."""
        if not (
            end - start >= 4
            and tokens[start].kind == TokenKind.KEYWORD
            and tokens[start].value == "union"
            and tokens[start + 1].is_symbol("{")
            and tokens[end - 1].is_symbol("}")
        ):
            return None

        members: list[tuple[int, int]] = []
        member_start = start + 2
        depth = 0
        for i in range(start + 2, end - 1):
            token = tokens[i]
            if token.kind == TokenKind.SYMBOL and token.value in "{<(":
                depth += 1
            elif token.kind == TokenKind.SYMBOL and token.value in "}>)":
                depth -= 1
            elif token.is_symbol(",") and depth == 0:
                members.append((member_start, i - 1))
                member_start = i + 1
        if member_start <= end - 2:
            members.append((member_start, end - 2))

        if len(members) != 2:
            return None
        nulls = [m for m in members if m[0] == m[1] and tokens[m[0]].value == "null"]
        if len(nulls) != 1:
            return None
        other = members[1] if members[0] in nulls else members[0]
        return other if other[0] <= other[1] else None

    def update_field_default(self, text: str, intent: UpdateFieldDefault) -> str:
        body = find_body(text, intent.schema, RECORD_KEYWORDS)
        decl = _find_field(body, intent.field_name) if body else None
        if decl is None or decl.semicolon is None:
            return text
        if intent.remove and decl.equals is None:
            return text

        name = body.tokens[decl.name]
        written_name = text[name.pos:name.end]
        replacement = written_name if intent.remove else f"{written_name} = {render_default(intent.value)}"
        return _replace(text, name.pos, body.tokens[decl.semicolon].pos, replacement)

    def add_symbol(self, text: str, intent: AddSymbol) -> str:
        body = find_body(text, intent.schema, ENUM_KEYWORDS)
        if body is None:
            return text

        inner = body.inner
        if any(t.is_word and t.value == intent.symbol for t in inner):
            return text

        if not inner:
            return _replace(text, body.open.end, body.close.pos, f" {intent.symbol} ")

        last = inner[-1]
        separator = " " if last.is_symbol(",") else ", "
        return _replace(text, last.end, last.end, f"{separator}{intent.symbol}")

    def rename_symbol(self, text: str, intent: RenameSymbol) -> str:
        body = find_body(text, intent.schema, ENUM_KEYWORDS)
        if body is None:
            return text

        matches = [t for t in body.inner if t.is_word and t.value == intent.old_name]
        if not matches:
            return text

        # enum default after the body: } = OLD;
        tokens = body.tokens
        after = body.close_index + 1
        if (
            after + 1 < len(tokens)
            and tokens[after].is_symbol("=")
            and tokens[after + 1].is_word
            and tokens[after + 1].value == intent.old_name
        ):
            matches.append(tokens[after + 1])

        for token in reversed(matches):
            text = _replace(text, token.pos, token.end, intent.new_name)
        return text
