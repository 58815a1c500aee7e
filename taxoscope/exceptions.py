"""Exceptions raised by taxoscope."""


class InvalidArgumentError(ValueError):
    """Raised when an operation is called with a missing mandatory argument."""

    pass


class SchemaDefinitionError(ValueError):
    """Raised when a declarative schema document cannot be loaded."""

    def __init__(self, message: str, source: str | None = None):
        super().__init__(message)
        self.source = source
