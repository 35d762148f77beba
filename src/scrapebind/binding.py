"""Field binding directives used inside `typing.Annotated` declarations.

Example:
    class Item(BaseModel):
        url: Annotated[str, scrape(".//a/@href")]
        votes: Annotated[str | None, scrape("./div/text()")]
        source: Annotated[str, ignore()] = ""
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from scrapebind.typing.enums import BindingMode, ShapeKind

if TYPE_CHECKING:
    from scrapebind.typing.models import Transform


@dataclass(frozen=True)
class Scrape:
    """Binding directive attached to one model field.

    `mode` is None for queried fields: required or optional is then read from the
    field annotation.
    """

    query: str | None = None
    transform: Transform | None = None
    shape: ShapeKind | None = None
    mode: BindingMode | None = None


def scrape(
    query: str,
    *,
    transform: Transform | None = None,
    shape: ShapeKind | str | None = None,
) -> Scrape:
    """Bind a field to the matches of `query`.

    Args:
        query (str): Query evaluated against the document or the enclosing node.
        transform (Transform | None): Callable applied once to the coerced value.
        shape (ShapeKind | str | None): Explicit coercion target, inferred from the
            annotation when omitted.

    Returns:
        Scrape: Directive for `typing.Annotated`.
    """
    if isinstance(shape, str):
        shape = ShapeKind.from_str(shape)
    return Scrape(query=query, transform=transform, shape=shape)


def use_default() -> Scrape:
    """Fill the field with its declared default on every materialization."""
    return Scrape(mode=BindingMode.USE_DEFAULT)


def ignore() -> Scrape:
    """Leave the field unbound: the caller presets it or the model default applies."""
    return Scrape(mode=BindingMode.IGNORE)
