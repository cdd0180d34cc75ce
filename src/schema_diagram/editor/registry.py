"""Editor Registry for managing per-format editor backends."""

from typing import Type

from schema_diagram.config.settings import EditorSettings
from schema_diagram.editor.base import EditorBackend
from schema_diagram.graph.models import SchemaFormat


class EditorRegistry:
    """Registry for editor backends.

    Maps each schema format to the backend class that edits its text.
    """

    def __init__(self):
        self._backends: dict[SchemaFormat, Type[EditorBackend]] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        """Register the built-in backends."""
        from schema_diagram.editor.idl_backend import IdlEditorBackend
        from schema_diagram.editor.json_backend import JsonEditorBackend

        self.register(SchemaFormat.AVRO_JSON, JsonEditorBackend)
        self.register(SchemaFormat.AVRO_IDL, IdlEditorBackend)

    def register(self, schema_format: SchemaFormat, backend_class: Type[EditorBackend]) -> None:
        """Register a backend for a format.

        Args:
            schema_format: The format the backend edits
            backend_class: The backend class to register
        """
        self._backends[schema_format] = backend_class

    def get(self, schema_format: SchemaFormat | str) -> Type[EditorBackend] | None:
        """Get a backend class by format.

        Args:
            schema_format: The format (can be string or enum)

        Returns:
            The backend class or None if not found
        """
        if isinstance(schema_format, str):
            try:
                schema_format = SchemaFormat(schema_format)
            except ValueError:
                return None

        return self._backends.get(schema_format)

    def create(
        self,
        schema_format: SchemaFormat | str,
        settings: EditorSettings | None = None,
    ) -> EditorBackend | None:
        """Create a backend instance.

        Args:
            schema_format: The format to edit
            settings: Optional editor settings

        Returns:
            A backend instance or None if the format has no editor
        """
        backend_class = self.get(schema_format)
        if backend_class is None:
            return None
        return backend_class(settings=settings)

    def list_formats(self) -> list[SchemaFormat]:
        """List all formats with a registered backend."""
        return list(self._backends.keys())

    def __contains__(self, schema_format: SchemaFormat | str) -> bool:
        return self.get(schema_format) is not None


_global_registry: EditorRegistry | None = None


def get_global_editor_registry() -> EditorRegistry:
    """Get the global editor registry singleton."""
    global _global_registry
    if _global_registry is None:
        _global_registry = EditorRegistry()
    return _global_registry
