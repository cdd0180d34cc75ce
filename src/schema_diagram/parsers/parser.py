"""Main schema parser module.

Provides a unified interface to parse schemas from either Avro syntax.
"""

import logging
from pathlib import Path

from schema_diagram.graph.models import Diagnostic, ParseResult, SchemaFormat, SchemaGraph
from schema_diagram.parsers.avro_json import parse_avro_json
from schema_diagram.parsers.detector import detect_format
from schema_diagram.parsers.idl import parse_avro_idl

logger = logging.getLogger(__name__)

UNKNOWN_FORMAT_MESSAGE = "Could not detect schema format. Expected Avro JSON or Avro IDL."


class SchemaParser:
    """Unified schema parser for Avro JSON and Avro IDL."""

    # File extensions to format mapping
    EXTENSION_FORMATS = {
        ".avsc": SchemaFormat.AVRO_JSON,
        ".avpr": SchemaFormat.AVRO_JSON,
        ".json": SchemaFormat.AVRO_JSON,
        ".avdl": SchemaFormat.AVRO_IDL,
    }

    def __init__(self, content: str, format: SchemaFormat | str | None = None):
        """Initialize parser with content and format.

        Args:
            content: Schema content as string
            format: Schema format (detected from content if not provided)
        """
        if isinstance(format, str):
            format = SchemaFormat(format.lower())

        self.content = content
        self.format = format if format is not None else detect_format(content)

    @classmethod
    def from_file(cls, path: Path | str, format: SchemaFormat | str | None = None) -> "SchemaParser":
        """Create parser from a file.

        The extension is only a hint: content detection wins when it
        recognizes the text.

        Args:
            path: Path to schema file
            format: Optional explicit format

        Returns:
            Initialized SchemaParser
        """
        path = Path(path)
        content = path.read_text()

        if format is None:
            format = detect_format(content)
            if format == SchemaFormat.UNKNOWN:
                format = cls.EXTENSION_FORMATS.get(path.suffix.lower(), SchemaFormat.UNKNOWN)

        return cls(content, format)

    def parse(self) -> ParseResult:
        """Parse the content with the frontend for its format.

        Returns:
            ParseResult with the graph and the format used
        """
        if self.format == SchemaFormat.AVRO_JSON:
            graph = parse_avro_json(self.content)
        elif self.format == SchemaFormat.AVRO_IDL:
            graph = parse_avro_idl(self.content)
        else:
            logger.debug("unrecognized schema format")
            graph = SchemaGraph(diagnostics=[Diagnostic(message=UNKNOWN_FORMAT_MESSAGE)])

        return ParseResult(graph=graph, format=self.format)


def parse_schema(text: str) -> ParseResult:
    """Detect the format of the text and parse it.

    Never raises; unrecognized input yields an empty graph with one
    diagnostic naming the expected formats.

    Args:
        text: Schema source

    Returns:
        ParseResult with the graph and the detected format
    """
    return SchemaParser(text).parse()


def parse_schema_file(path: Path | str, format: SchemaFormat | str | None = None) -> ParseResult:
    """Convenience function to parse a schema file.

    Args:
        path: Path to schema file
        format: Optional explicit format (auto-detected if not provided)

    Returns:
        ParseResult
    """
    return SchemaParser.from_file(path, format).parse()
