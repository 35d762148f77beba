"""Shape-directed coercion of match sequences into field values."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from scrapebind.exceptions import ConversionError, MissingError, QueryError
from scrapebind.logging import get_logger
from scrapebind.typing.enums import MatchKind, ShapeKind, StringListPolicy

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from scrapebind.typing.models import FieldSpec, Match
    from scrapebind.typing.protocol import QueryEvaluator

    NestedMaterializer = Callable[[type, Any], Any]

logger = get_logger(__name__)


def coerce(
    matches: Sequence[Match],
    spec: FieldSpec,
    *,
    evaluator: QueryEvaluator[Any, Any],
    materialize_node: NestedMaterializer,
    string_list_policy: StringListPolicy = StringListPolicy.ERROR,
) -> Any:
    """Coerce the matches of a field's query into the field's target shape.

    | Shape             | Zero matches                      | One or more matches                  |
    |-------------------|-----------------------------------|--------------------------------------|
    | `SCALAR`          | `MissingError`                    | first match as string                |
    | `OPTIONAL_SCALAR` | None                              | first match as string                |
    | `STRING_LIST`     | []                                | every match as string, in order      |
    | `NESTED_ONE`      | None if optional, else missing    | first node materialized              |
    | `NESTED_LIST`     | []                                | every node materialized, in order    |

    Args:
        matches (Sequence[Match]): Matches of the field's query.
        spec (FieldSpec): Queried field spec.
        evaluator (QueryEvaluator): Evaluator used to read node values.
        materialize_node (NestedMaterializer): Callback materializing a nested target
            type scoped to a node.
        string_list_policy (StringListPolicy): Handling of unconvertible list matches.

    Raises:
        MissingError: If a required shape has zero matches.
        ConversionError: If a present match cannot be coerced.
        ValueError: If the spec has no shape.

    Returns:
        Any: Coerced value, before any transform.
    """
    shape = spec.shape
    if shape is None:
        raise ValueError(f"Field '{spec.identifier}' has no target shape")  # noqa: TRY003

    kind = shape.kind
    if kind == ShapeKind.STRING_LIST:
        return _to_string_list(matches, spec, evaluator, string_list_policy)
    if kind == ShapeKind.NESTED_LIST:
        return [materialize_node(shape.target, _require_node(match)) for match in matches]

    if not matches:
        if kind == ShapeKind.OPTIONAL_SCALAR or (kind == ShapeKind.NESTED_ONE and spec.optional):
            return None
        raise MissingError(query=spec.query or "")

    first = matches[0]
    if kind == ShapeKind.NESTED_ONE:
        return materialize_node(shape.target, _require_node(first))
    return to_string(first, evaluator)


def to_string(match: Match, evaluator: QueryEvaluator[Any, Any]) -> str:
    """Return the string form of a match.

    Args:
        match (Match): Query result.
        evaluator (QueryEvaluator): Evaluator used to read node values.

    Raises:
        ConversionError: If the match has no string form.

    Returns:
        str: Owned string value.
    """
    if match.kind == MatchKind.STRING:
        return str(match.value)
    if match.kind == MatchKind.NODE:
        try:
            return str(evaluator.node_value(match.node))
        except QueryError as exc:
            raise ConversionError(message=f"Cannot read node value: {exc.message}") from exc
    raise ConversionError(message=f"Cannot convert {type(match.value).__name__} result {match.value!r} to a string")


def apply_transform(spec: FieldSpec, value: Any) -> Any:
    """Run the field transform once on a coerced value.

    Args:
        spec (FieldSpec): Field spec holding the transform.
        value (Any): Coerced value.

    Raises:
        ConversionError: If the transform raises.

    Returns:
        Any: Transformed value, or `value` when the field has no transform.
    """
    if spec.transform is None:
        return value
    try:
        return spec.transform(value)
    except Exception as exc:
        name = getattr(spec.transform, "__name__", type(spec.transform).__name__)
        raise ConversionError(message=f"Transform '{name}' failed: {exc}") from exc


def _to_string_list(
    matches: Sequence[Match],
    spec: FieldSpec,
    evaluator: QueryEvaluator[Any, Any],
    policy: StringListPolicy,
) -> list[str]:
    if policy == StringListPolicy.ERROR:
        return [to_string(match, evaluator) for match in matches]

    values: list[str] = []
    for match in matches:
        try:
            values.append(to_string(match, evaluator))
        except ConversionError:
            continue
    dropped = len(matches) - len(values)
    if dropped:
        logger.debug("Dropped unconvertible list matches", extra={"query": spec.query, "dropped": dropped})
    return values


def _require_node(match: Match) -> Any:
    if not match.is_node:
        raise ConversionError(message=f"Nested structures need a node match, got {match.kind} {match.value!r}")
    return match.node
