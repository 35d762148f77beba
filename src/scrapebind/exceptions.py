"""Package exceptions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from types import TracebackType

FieldIdentifier = str | int


class PackageError(Exception):
    """Root exception for the package."""


@dataclass(frozen=True)
class SettingsError(PackageError):
    """Raised when settings cannot be loaded or validated."""

    message: str = "Failed to load settings"
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.exc}" if self.exc else self.message


@dataclass(frozen=True)
class SchemaError(PackageError):
    """Raised when a schema cannot be built for a target type."""

    target: str
    message: str
    field: FieldIdentifier | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        if self.field is None:
            return f"Invalid schema for '{self.target}': {self.message}"
        return f"Invalid schema for '{self.target}.{self.field}': {self.message}"


class FieldError(PackageError):
    """Base class for failures attributable to a single field."""


@dataclass(frozen=True)
class QueryError(FieldError):
    """Raised when the evaluator cannot execute a query."""

    query: str | None
    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        if self.query is None:
            return self.message
        return f"{self.message} (query: {self.query!r})"


@dataclass(frozen=True)
class ConversionError(FieldError):
    """Raised when a match exists but cannot be coerced to the declared shape."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class MissingError(FieldError):
    """Raised when a required shape has zero matches."""

    query: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"No match for required query {self.query!r}"


@dataclass(frozen=True)
class ExtractionError(PackageError):
    """Field-scoped failure of a materialize call.

    `field_path` lists identifiers from the outermost structure to the failing field.
    """

    field_path: tuple[FieldIdentifier, ...]
    cause: FieldError

    def __str__(self) -> str:
        """Return error message payload."""
        path = " -> ".join(str(part) for part in self.field_path) or "<structure>"
        return f"{path}: {self.cause}"

    def prepend(self, identifier: FieldIdentifier) -> ExtractionError:
        """Return a copy of the error scoped one level further out.

        Args:
            identifier (FieldIdentifier): Identifier of the enclosing field.

        Returns:
            ExtractionError: Error with `identifier` in front of the field path.
        """
        return ExtractionError(field_path=(identifier, *self.field_path), cause=self.cause)


class field_context:  # noqa: N801
    """Attach a field identifier to any field failure raised in the block.

    Used as a context manager around the binding of one field. Failures that are not
    field failures propagate untouched.
    """

    def __init__(self, identifier: FieldIdentifier) -> None:
        """Store the identifier of the field being bound.

        Args:
            identifier (FieldIdentifier): Field name or positional index.
        """
        self.identifier = identifier

    def __enter__(self) -> FieldIdentifier:
        """Enter the field scope."""
        return self.identifier

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool:
        """Re-raise field failures with the identifier attached.

        Raises:
            ExtractionError: When the block raised a field failure.

        Returns:
            bool: Always False, other exceptions propagate.
        """
        if isinstance(exc, ExtractionError):
            raise exc.prepend(self.identifier) from exc.__cause__
        if isinstance(exc, FieldError):
            raise ExtractionError(field_path=(self.identifier,), cause=exc) from exc
        return False
