"""Project enums."""

from __future__ import annotations

from enum import StrEnum


class _EnumMixin(StrEnum):
    """Shared conversion helpers for user-facing enums."""

    @classmethod
    def from_str(cls, value: str) -> _EnumMixin:
        """Parse enum from string.

        Args:
            value: Raw string value.

        Raises:
            ValueError: If the value is not supported.

        Returns:
            _EnumMixin: Parsed enum value.
        """
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            supported = ", ".join(member.value for member in cls)
            message = f"Unsupported {cls.__name__} value '{value}'. Expected one of: {supported}"
            raise ValueError(message) from exc

    def to_str(self) -> str:
        """Return string representation.

        Returns:
            str: Enum string value.
        """
        return self.value


class BindingMode(_EnumMixin):
    """How a field obtains its value."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    USE_DEFAULT = "use_default"
    IGNORE = "ignore"

    @property
    def queries(self) -> bool:
        """Return whether fields in this mode evaluate a query."""
        return self in {BindingMode.REQUIRED, BindingMode.OPTIONAL}


class ShapeKind(_EnumMixin):
    """Coercion target for a field's matches."""

    SCALAR = "scalar"
    OPTIONAL_SCALAR = "optional_scalar"
    STRING_LIST = "string_list"
    NESTED_ONE = "nested_one"
    NESTED_LIST = "nested_list"

    @property
    def nested(self) -> bool:
        """Return whether the shape recurses into a nested structure."""
        return self in {ShapeKind.NESTED_ONE, ShapeKind.NESTED_LIST}


class MatchKind(_EnumMixin):
    """Kind of a single query result."""

    NODE = "node"
    STRING = "string"
    OTHER = "other"


class StringListPolicy(_EnumMixin):
    """What a string list does with matches that cannot produce a string."""

    ERROR = "error"
    DROP = "drop"
