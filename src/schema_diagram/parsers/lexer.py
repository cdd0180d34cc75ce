"""Tokenizer for the Avro IDL syntax.

A single left-to-right scan. Every branch advances by at least one
character, so unterminated strings and comments and unknown characters
still end the scan.
"""

from dataclasses import dataclass
from enum import Enum


class TokenKind(str, Enum):
    """Token categories."""

    KEYWORD = "keyword"
    IDENT = "ident"
    STRING = "string"
    NUMBER = "number"
    SYMBOL = "symbol"
    ANNOTATION = "annotation"


KEYWORDS = frozenset({
    "protocol", "record", "enum", "fixed", "union", "array", "map",
    "null", "boolean", "int", "long", "float", "double", "bytes", "string",
    "void", "import", "idl", "schema", "throws", "oneway", "error",
    "date", "time_ms", "timestamp_ms", "local_timestamp_ms", "decimal", "uuid",
})

SYMBOLS = frozenset("<>{}()[];,=?")


@dataclass(frozen=True)
class Token:
    """A lexed token.

    pos is the offset of the first character, end the offset one past the
    last one (quotes and backticks included).
    """

    kind: TokenKind
    value: str
    pos: int
    end: int

    def is_symbol(self, value: str) -> bool:
        return self.kind == TokenKind.SYMBOL and self.value == value

    @property
    def is_word(self) -> bool:
        return self.kind in (TokenKind.IDENT, TokenKind.KEYWORD)


def _is_ident_start(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


def _is_ident_char(ch: str) -> bool:
    return ch.isalnum() or ch in "_."


def _is_annotation_char(ch: str) -> bool:
    return ch.isalnum() or ch in "_.-"


def tokenize(text: str) -> list[Token]:
    """Split IDL source into tokens, skipping whitespace and comments.

    Args:
        text: IDL source

    Returns:
        Tokens in source order
    """
    tokens: list[Token] = []
    length = len(text)
    i = 0

    while i < length:
        ch = text[i]
        nxt = text[i + 1] if i + 1 < length else ""

        if ch.isspace():
            i += 1
            continue

        if ch == "/" and nxt == "/":
            newline = text.find("\n", i)
            i = length if newline == -1 else newline
            continue

        if ch == "/" and nxt == "*":
            close = text.find("*/", i + 2)
            i = length if close == -1 else close + 2
            continue

        if ch == "@":
            start = i
            i += 1
            while i < length and _is_annotation_char(text[i]):
                i += 1
            tokens.append(Token(TokenKind.ANNOTATION, text[start:i], start, i))
            continue

        if ch == '"':
            start = i
            i += 1
            while i < length and text[i] != '"':
                if text[i] == "\\":
                    i += 1
                i += 1
            value = text[start + 1:min(i, length)]
            i = min(i + 1, length)
            tokens.append(Token(TokenKind.STRING, value, start, i))
            continue

        if ch == "`":
            start = i
            close = text.find("`", i + 1)
            i = length if close == -1 else close + 1
            value = text[start + 1:close if close != -1 else length]
            tokens.append(Token(TokenKind.IDENT, value, start, i))
            continue

        if ch.isdigit() or (ch == "-" and nxt.isdigit()):
            start = i
            i += 1
            while i < length and (text[i].isdigit() or text[i] == "."):
                i += 1
            tokens.append(Token(TokenKind.NUMBER, text[start:i], start, i))
            continue

        if _is_ident_start(ch):
            start = i
            while i < length and _is_ident_char(text[i]):
                i += 1
            value = text[start:i]
            kind = TokenKind.KEYWORD if value in KEYWORDS else TokenKind.IDENT
            tokens.append(Token(kind, value, start, i))
            continue

        if ch in SYMBOLS:
            tokens.append(Token(TokenKind.SYMBOL, ch, i, i + 1))
            i += 1
            continue

        # unknown character
        i += 1

    return tokens
