"""Base class for editor backends.

Backends are responsible for:
- Applying edit intents to the source text of one schema format
- Returning the input unchanged when an intent does not apply
- Never raising
"""

import logging
from abc import ABC, abstractmethod

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
from schema_diagram.graph.models import SchemaFormat

logger = logging.getLogger(__name__)


class EditorBackend(ABC):
    """Abstract base class for per-format text editors."""

    format: SchemaFormat = SchemaFormat.UNKNOWN

    def __init__(self, settings: EditorSettings | None = None):
        self.settings = settings or EditorSettings()

    def apply(self, text: str, intent: EditIntent) -> str:
        """Apply an intent to the text.

        Args:
            text: Source text
            intent: Edit to perform

        Returns:
            The edited text, or the input unchanged when the intent does
            not apply
        """
        handlers = {
            AddField: self.add_field,
            RemoveField: self.remove_field,
            RenameField: self.rename_field,
            UpdateFieldType: self.update_field_type,
            UpdateFieldDefault: self.update_field_default,
            AddSymbol: self.add_symbol,
            RenameSymbol: self.rename_symbol,
        }
        handler = handlers.get(type(intent))
        if handler is None:
            logger.debug("unsupported intent %r", intent)
            return text

        try:
            result = handler(text, intent)
        except Exception:
            logger.debug("%s edit failed for %r", self.format.value, intent, exc_info=True)
            return text

        if result == text:
            logger.debug("%s edit not applicable: %r", self.format.value, intent)
        return result

    @abstractmethod
    def add_field(self, text: str, intent: AddField) -> str:
        pass

    @abstractmethod
    def remove_field(self, text: str, intent: RemoveField) -> str:
        pass

    @abstractmethod
    def rename_field(self, text: str, intent: RenameField) -> str:
        pass

    @abstractmethod
    def update_field_type(self, text: str, intent: UpdateFieldType) -> str:
        pass

    @abstractmethod
    def update_field_default(self, text: str, intent: UpdateFieldDefault) -> str:
        pass

    @abstractmethod
    def add_symbol(self, text: str, intent: AddSymbol) -> str:
        pass

    @abstractmethod
    def rename_symbol(self, text: str, intent: RenameSymbol) -> str:
        pass
