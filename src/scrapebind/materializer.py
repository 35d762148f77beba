"""Recursive assembly of typed structures from documents."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from scrapebind.conversion import apply_transform, coerce
from scrapebind.evaluator import LxmlEvaluator
from scrapebind.exceptions import ConversionError, ExtractionError, field_context
from scrapebind.logging import get_logger, log_context
from scrapebind.schema_registry import SchemaRegistry, default_registry
from scrapebind.settings import Settings, get_settings
from scrapebind.typing.enums import BindingMode

if TYPE_CHECKING:
    from collections.abc import Mapping

    from scrapebind.typing.enums import StringListPolicy
    from scrapebind.typing.models import FieldSpec, Schema
    from scrapebind.typing.protocol import QueryEvaluator

logger = get_logger(__name__)


class Materializer:
    """Builds model instances by binding each schema field to its query matches.

    Fields are bound in declaration order and the first failure aborts the call, so a
    partially built structure is never returned. Nested shapes re-enter the materializer
    scoped to the matched node; depth is bounded only by the interpreter stack.
    """

    def __init__(
        self,
        evaluator: QueryEvaluator[Any, Any] | None = None,
        registry: SchemaRegistry | None = None,
        *,
        settings: Settings | None = None,
        string_list_policy: StringListPolicy | None = None,
    ) -> None:
        """Create a materializer.

        Args:
            evaluator (QueryEvaluator | None): Query evaluator, lxml XPath by default.
            registry (SchemaRegistry | None): Schema registry, the default registry if omitted.
            settings (Settings | None): Settings, the cached settings if omitted.
            string_list_policy (StringListPolicy | None): Overrides the settings policy.
        """
        self.evaluator = evaluator if evaluator is not None else LxmlEvaluator()
        self.registry = registry if registry is not None else default_registry
        config = settings or get_settings()
        self.string_list_policy = string_list_policy or config.string_list_policy

    def materialize[ModelT: BaseModel](
        self,
        target: type[ModelT],
        document: Any,
        scope: Any | None = None,
        *,
        preset: Mapping[str, Any] | None = None,
    ) -> ModelT:
        """Build one `target` instance from a document.

        Args:
            target (type[ModelT]): Pydantic model with binding directives.
            document (Any): Parsed document.
            scope (Any | None): Node to evaluate relative to, None for the whole document.
            preset (Mapping[str, Any] | None): Values for fields bound with `ignore()`.

        Raises:
            ExtractionError: If any field fails, with the path to the failing field.
            ValueError: If `preset` names a field that is not ignored.

        Returns:
            ModelT: Fully assembled instance.
        """
        schema = self.registry.get(target)
        presets = dict(preset or {})
        _check_presets(schema, presets)

        with log_context(target=schema.name):
            try:
                result = self._materialize(schema, document, scope, presets)
            except ExtractionError as exc:
                logger.debug(
                    "Materialization failed",
                    extra={"field_path": list(exc.field_path), "cause": type(exc.cause).__name__},
                )
                raise

            logger.debug("Materialization completed")
        return result

    def _materialize(self, schema: Schema, document: Any, scope: Any | None, presets: dict[str, Any]) -> Any:
        values: dict[str | int, Any] = {}
        for spec in schema.fields:
            if spec.mode == BindingMode.IGNORE:
                if spec.identifier in presets:
                    values[spec.identifier] = presets[spec.identifier]
                continue
            if spec.mode == BindingMode.USE_DEFAULT and spec.default_factory is not None:
                values[spec.identifier] = spec.default_factory()
                continue

            with field_context(spec.identifier):
                values[spec.identifier] = self._bind_field(spec, document, scope)

        return _assemble(schema, values)

    def _bind_field(self, spec: FieldSpec, document: Any, scope: Any | None) -> Any:
        matches = self.evaluator.evaluate(spec.query or "", document, scope)

        def _materialize_node(target: type, node: Any) -> Any:
            return self._materialize(self.registry.get(target), document, node, {})

        value = coerce(
            matches,
            spec,
            evaluator=self.evaluator,
            materialize_node=_materialize_node,
            string_list_policy=self.string_list_policy,
        )
        return apply_transform(spec, value)


def materialize[ModelT: BaseModel](
    target: type[ModelT],
    document: Any,
    scope: Any | None = None,
    *,
    preset: Mapping[str, Any] | None = None,
) -> ModelT:
    """Build one `target` instance with the default evaluator, registry and settings.

    Args:
        target (type[ModelT]): Pydantic model with binding directives.
        document (Any): Parsed document.
        scope (Any | None): Node to evaluate relative to, None for the whole document.
        preset (Mapping[str, Any] | None): Values for fields bound with `ignore()`.

    Returns:
        ModelT: Fully assembled instance.
    """
    return Materializer().materialize(target, document, scope, preset=preset)


def _check_presets(schema: Schema, presets: dict[str, Any]) -> None:
    ignored = {spec.identifier for spec in schema.fields if spec.mode == BindingMode.IGNORE}
    unknown = sorted(str(key) for key in presets if key not in ignored)
    if unknown:
        raise ValueError(f"Cannot preset fields of '{schema.name}' that are not ignored: {', '.join(unknown)}")  # noqa: TRY003


def _assemble(schema: Schema, values: dict[str | int, Any]) -> Any:
    try:
        if schema.positional:
            return schema.target(values[0]) if 0 in values else schema.target()
        return schema.target(**values)
    except ValidationError as exc:
        errors = exc.errors()
        first = errors[0] if errors else {}
        raise ExtractionError(
            field_path=_error_path(schema, first.get("loc", ())),
            cause=ConversionError(message=f"Validation failed: {first.get('msg', str(exc))}"),
        ) from exc


def _error_path(schema: Schema, loc: tuple[Any, ...]) -> tuple[str | int, ...]:
    """Map a validation error location to a field path.

    Errors raised by model-level validators have no field location and map to the empty
    path, rendered as `<structure>`.
    """
    if schema.positional:
        return (0,)
    if not loc:
        return ()
    head = loc[0]
    if head in schema.identifiers:
        return (head,)
    for field_name, info in schema.target.model_fields.items():
        if head in (info.alias, info.validation_alias):
            return (field_name,)
    return ()
