"""Errors raised while generating Elm code from protobuf descriptors."""


class GenerationError(RuntimeError):
    """Base class for fatal generation failures.

    `file` and `entity` are filled in as the error propagates, so the
    top-level handler can name the schema file and the field or type that
    failed.
    """

    def __init__(
        self, message: str, *, file: str | None = None, entity: str | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.file = file
        self.entity = entity

    def in_file(self, file: str) -> "GenerationError":
        if self.file is None:
            self.file = file
        return self

    def at(self, entity: str) -> "GenerationError":
        if self.entity is None:
            self.entity = entity
        return self

    def __str__(self) -> str:
        location = [part for part in (self.file, self.entity) if part]
        return ": ".join([*location, self.message])


class MalformedRequestError(GenerationError):
    """Raised when the plugin request, a parameter or the options file is invalid."""


class UnsupportedSchemaError(GenerationError):
    """Raised when a schema uses a construct the generator has no rule for."""


class NameCollisionError(GenerationError):
    """Raised when two schema entities resolve to the same Elm identifier."""


class MissingDefaultError(GenerationError):
    """Raised when a required field's type has no default value."""
