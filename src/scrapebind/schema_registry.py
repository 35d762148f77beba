"""Schema construction and per-type schema registry."""

from __future__ import annotations

import copy
import threading
import types
from typing import TYPE_CHECKING, Any, Union, get_args, get_origin

from pydantic import BaseModel, RootModel, ValidationError

from scrapebind.binding import Scrape
from scrapebind.exceptions import SchemaError
from scrapebind.logging import get_logger
from scrapebind.typing.enums import BindingMode, ShapeKind
from scrapebind.typing.models import FieldSpec, Schema, TargetShape

if TYPE_CHECKING:
    from collections.abc import Callable

    from pydantic.fields import FieldInfo

logger = get_logger(__name__)

_UNION_ORIGINS = (Union, types.UnionType)


class SchemaRegistry:
    """Thread-safe cache holding one schema per target type.

    Registering a type also registers every nested type it references, so a schema
    that validates here cannot fail construction later during materialization.
    """

    def __init__(self) -> None:
        """Create an empty registry."""
        self._schemas: dict[type, Schema] = {}
        self._lock = threading.RLock()

    def __contains__(self, target: object) -> bool:
        """Return whether `target` already has a schema."""
        return target in self._schemas

    def __len__(self) -> int:
        """Return the number of registered types."""
        return len(self._schemas)

    def register(self, target: type) -> Schema:
        """Build, validate and cache the schema of `target` and its nested types.

        Args:
            target (type): Pydantic model class.

        Raises:
            SchemaError: If the type or one of its nested types has an invalid schema.

        Returns:
            Schema: Cached schema for `target`.
        """
        with self._lock:
            cached = self._schemas.get(target)
            if cached is not None:
                return cached

            schema = build_schema(target)
            self._schemas[target] = schema
            try:
                for spec in schema.fields:
                    if spec.shape is not None and spec.shape.target is not None:
                        self.register(spec.shape.target)
            except SchemaError:
                del self._schemas[target]
                raise

        logger.debug(
            "Schema registered",
            extra={"target": schema.name, "fields": list(schema.identifiers)},
        )
        return schema

    def get(self, target: type) -> Schema:
        """Return the schema of `target`, registering it on first use.

        Args:
            target (type): Pydantic model class.

        Returns:
            Schema: Cached schema.
        """
        return self.register(target)

    def clear(self) -> None:
        """Forget every registered schema."""
        with self._lock:
            self._schemas.clear()


default_registry = SchemaRegistry()


def scraper[ModelT: BaseModel](target: type[ModelT]) -> type[ModelT]:
    """Class decorator registering a model in the default registry at definition time.

    Args:
        target (type[ModelT]): Pydantic model class.

    Returns:
        type[ModelT]: The unchanged class.
    """
    default_registry.register(target)
    return target


def build_schema(target: type) -> Schema:
    """Build the schema of a pydantic model from its annotated fields.

    Args:
        target (type): Pydantic model class. `RootModel` subclasses are bound
            positionally, their single field having identifier 0.

    Raises:
        SchemaError: If a field has no directive, a directive is inconsistent with its
            mode, or an annotation maps to no shape.

    Returns:
        Schema: Schema listing fields in declaration order.
    """
    name = getattr(target, "__qualname__", repr(target))
    if not _is_model(target):
        raise SchemaError(target=name, message="target must be a pydantic BaseModel subclass")

    positional = issubclass(target, RootModel)
    specs: list[FieldSpec] = []
    for index, (field_name, info) in enumerate(target.model_fields.items()):
        identifier: str | int = index if positional else field_name
        directive = _directive_for(name, identifier, info)
        try:
            if not positional:
                _check_binds_by_name(target, field_name, info)
            specs.append(_build_field_spec(identifier, directive, info))
        except (ValidationError, ValueError) as exc:
            raise SchemaError(target=name, field=identifier, message=_reason(exc)) from exc

    return Schema(target=target, fields=tuple(specs), positional=positional)


def _directive_for(target_name: str, identifier: str | int, info: FieldInfo) -> Scrape:
    directives = [item for item in info.metadata if isinstance(item, Scrape)]
    if not directives:
        raise SchemaError(
            target=target_name,
            field=identifier,
            message="field has no binding directive; use scrape(), use_default() or ignore()",
        )
    if len(directives) > 1:
        raise SchemaError(target=target_name, field=identifier, message="field has several binding directives")
    return directives[0]


def _check_binds_by_name(target: type[BaseModel], field_name: str, info: FieldInfo) -> None:
    config = target.model_config
    if config.get("populate_by_name") or config.get("validate_by_name"):
        return
    for alias in (info.alias, info.validation_alias):
        if alias is not None and alias != field_name:
            raise ValueError(  # noqa: TRY003
                f"Field is aliased as {alias!r}; bound values are passed by name, enable validate_by_name"
            )


def _build_field_spec(identifier: str | int, directive: Scrape, info: FieldInfo) -> FieldSpec:
    if directive.mode is not None:
        if info.is_required():
            raise ValueError(f"Mode '{directive.mode}' requires the field to declare a default")  # noqa: TRY003
        default_factory = None
        if directive.mode == BindingMode.USE_DEFAULT:
            default_factory = _default_factory(info)
        return FieldSpec(
            identifier=identifier,
            mode=directive.mode,
            query=directive.query,
            transform=directive.transform,
            default_factory=default_factory,
        )

    shape, mode = infer_shape(info.annotation, explicit=directive.shape, transformed=directive.transform is not None)
    return FieldSpec(
        identifier=identifier,
        mode=mode,
        query=directive.query,
        shape=shape,
        transform=directive.transform,
    )


def infer_shape(
    annotation: Any,
    *,
    explicit: ShapeKind | None = None,
    transformed: bool = False,
) -> tuple[TargetShape, BindingMode]:
    """Derive the target shape and binding mode of a queried field.

    Args:
        annotation (Any): Declared field type, without `Annotated` metadata.
        explicit (ShapeKind | None): Shape forced by the directive.
        transformed (bool): Whether a transform produces the final value, in which case
            a non-string leaf type is accepted.

    Raises:
        ValueError: If the annotation cannot be bound.

    Returns:
        tuple[TargetShape, BindingMode]: Shape and mode of the field.
    """
    inner, optional = _unwrap_optional(annotation)
    item, is_list = _unwrap_list(inner)

    if explicit is not None:
        return _explicit_shape(explicit, item if is_list else inner, optional=optional)

    if is_list:
        if optional:
            raise ValueError("Optional lists are not supported, zero matches already bind to []")  # noqa: TRY003
        if _is_model(item):
            return TargetShape(kind=ShapeKind.NESTED_LIST, target=item), BindingMode.REQUIRED
        if item is str or transformed:
            return TargetShape(kind=ShapeKind.STRING_LIST), BindingMode.REQUIRED
        raise ValueError(f"Cannot bind list items of type {item!r} without a transform")  # noqa: TRY003

    mode = BindingMode.OPTIONAL if optional else BindingMode.REQUIRED
    if _is_model(inner):
        return TargetShape(kind=ShapeKind.NESTED_ONE, target=inner), mode
    if inner is str or transformed:
        kind = ShapeKind.OPTIONAL_SCALAR if optional else ShapeKind.SCALAR
        return TargetShape(kind=kind), mode
    raise ValueError(f"Cannot bind type {inner!r} without a transform")  # noqa: TRY003


def _explicit_shape(kind: ShapeKind, leaf: Any, *, optional: bool) -> tuple[TargetShape, BindingMode]:
    mode = BindingMode.REQUIRED
    if kind == ShapeKind.OPTIONAL_SCALAR or (kind == ShapeKind.NESTED_ONE and optional):
        mode = BindingMode.OPTIONAL
    if not kind.nested:
        return TargetShape(kind=kind), mode
    if not _is_model(leaf):
        raise ValueError(f"Shape '{kind}' requires a pydantic model type, got {leaf!r}")  # noqa: TRY003
    return TargetShape(kind=kind, target=leaf), mode


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    if get_origin(annotation) not in _UNION_ORIGINS:
        return annotation, False
    members = [member for member in get_args(annotation) if member is not type(None)]
    if len(members) == len(get_args(annotation)) or len(members) != 1:
        return annotation, False
    return members[0], True


def _unwrap_list(annotation: Any) -> tuple[Any, bool]:
    if get_origin(annotation) is not list:
        return annotation, False
    args = get_args(annotation)
    return (args[0] if args else Any), True


def _is_model(candidate: Any) -> bool:
    return isinstance(candidate, type) and issubclass(candidate, BaseModel)


def _default_factory(info: FieldInfo) -> Callable[[], Any]:
    factory = info.default_factory
    if factory is not None:
        return factory  # type: ignore[return-value]
    default = info.default
    return lambda: copy.deepcopy(default)


def _reason(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        return "; ".join(str(error.get("msg", "")).removeprefix("Value error, ") for error in exc.errors())
    return str(exc)
