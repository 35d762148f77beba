"""Schema-centric domain models."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from scrapebind.typing.enums import BindingMode, ShapeKind

Transform = Callable[[Any], Any]


class TargetShape(BaseModel):
    """Coercion target of a field, derived from its declared type."""

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    kind: ShapeKind
    target: type | None = None

    @model_validator(mode="after")
    def _check_target(self) -> TargetShape:
        """Ensure nested kinds, and only nested kinds, name a target type.

        Raises:
            ValueError: If the target does not fit the kind.

        Returns:
            TargetShape: The validated shape.
        """
        if self.kind.nested and self.target is None:
            raise ValueError(f"Shape '{self.kind}' requires a target type")  # noqa: TRY003
        if not self.kind.nested and self.target is not None:
            raise ValueError(f"Shape '{self.kind}' does not take a target type")  # noqa: TRY003
        return self

    def __str__(self) -> str:
        """Return a readable shape description."""
        if self.target is None:
            return self.kind.value
        return f"{self.kind.value}<{self.target.__name__}>"


class FieldSpec(BaseModel):
    """Binding of one field to a query, an optional transform and a mode."""

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    identifier: str | int
    mode: BindingMode
    query: str | None = None
    shape: TargetShape | None = None
    transform: Transform | None = None
    default_factory: Callable[[], Any] | None = None

    @model_validator(mode="after")
    def _check_mode(self) -> FieldSpec:
        """Enforce the query/shape requirements of the binding mode.

        Raises:
            ValueError: If the spec is inconsistent with its mode.

        Returns:
            FieldSpec: The validated spec.
        """
        if self.mode.queries:
            if not self.query:
                raise ValueError(f"Mode '{self.mode}' requires a query")  # noqa: TRY003
            if self.shape is None:
                raise ValueError(f"Mode '{self.mode}' requires a target shape")  # noqa: TRY003
            _check_optionality(self.mode, self.shape.kind)
            return self

        if self.query is not None or self.transform is not None:
            raise ValueError(f"Mode '{self.mode}' never queries")  # noqa: TRY003
        if self.mode == BindingMode.USE_DEFAULT and self.default_factory is None:
            raise ValueError("Mode 'use_default' requires a default")  # noqa: TRY003
        return self

    @property
    def optional(self) -> bool:
        """Return whether zero matches bind to None."""
        return self.mode == BindingMode.OPTIONAL


class Schema(BaseModel):
    """Ordered field specs bound to one target type."""

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    target: type
    fields: tuple[FieldSpec, ...]
    positional: bool = False

    @property
    def name(self) -> str:
        """Return the target type name."""
        return self.target.__qualname__

    @property
    def identifiers(self) -> tuple[str | int, ...]:
        """Return field identifiers in declaration order."""
        return tuple(spec.identifier for spec in self.fields)

    def field(self, identifier: str | int) -> FieldSpec:
        """Return the spec for a field identifier.

        Args:
            identifier (str | int): Field name or positional index.

        Raises:
            KeyError: If the schema has no such field.

        Returns:
            FieldSpec: Matching field spec.
        """
        for spec in self.fields:
            if spec.identifier == identifier:
                return spec
        raise KeyError(identifier)


def _check_optionality(mode: BindingMode, kind: ShapeKind) -> None:
    if mode == BindingMode.OPTIONAL and kind not in {ShapeKind.OPTIONAL_SCALAR, ShapeKind.NESTED_ONE}:
        raise ValueError(f"Shape '{kind}' cannot be optional")  # noqa: TRY003
    if kind == ShapeKind.OPTIONAL_SCALAR and mode != BindingMode.OPTIONAL:
        raise ValueError("Shape 'optional_scalar' requires mode 'optional'")  # noqa: TRY003
