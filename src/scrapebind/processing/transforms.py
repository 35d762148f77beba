"""Reusable field transforms.

Transforms receive the coerced field value. The helpers here accept a string, an optional
string or a list of strings: lists are mapped element-wise and None passes through.
Transforms raise on invalid input; the materializer reports the failure as a
`ConversionError` on the field.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from functools import reduce
from typing import TYPE_CHECKING, Any
from urllib.parse import urljoin, urlsplit

if TYPE_CHECKING:
    from collections.abc import Callable

    from scrapebind.typing.models import Transform


def _map_value(value: Any, func: Callable[[str], Any]) -> Any:
    if value is None:
        return None
    if isinstance(value, list):
        return [func(item) for item in value]
    return func(value)


def prefix(base: str) -> Transform:
    """Return a transform prepending `base` to every value.

    Args:
        base (str): Text put in front of the value.

    Returns:
        Transform: Prefixing transform.
    """

    def _prefix(value: Any) -> Any:
        return _map_value(value, lambda item: f"{base}{item}")

    _prefix.__name__ = "prefix"
    return _prefix


def fix_scheme(base_url: str) -> Transform:
    """Return a transform giving protocol-relative URLs the scheme of `base_url`.

    `//cdn.example.com/a.png` becomes `https://cdn.example.com/a.png` for an https base.
    URLs starting with `http` and relative paths are returned unchanged.

    Args:
        base_url (str): URL of the scraped site.

    Returns:
        Transform: Scheme fixing transform.
    """
    scheme = "https:" if base_url.startswith("https") else "http:"

    def _fix(url: str) -> str:
        if url.startswith("http"):
            return url
        if url.startswith("//"):
            return f"{scheme}{url}"
        return url

    def _fix_scheme(value: Any) -> Any:
        return _map_value(value, _fix)

    _fix_scheme.__name__ = "fix_scheme"
    return _fix_scheme


def absolute_url(base_url: str) -> Transform:
    """Return a transform resolving URLs against `base_url`.

    Args:
        base_url (str): Absolute URL of the scraped page.

    Raises:
        ValueError: If `base_url` is not absolute.

    Returns:
        Transform: URL resolving transform.
    """
    parts = urlsplit(base_url)
    if not parts.scheme or not parts.netloc:
        raise ValueError(f"Base URL must be absolute, got '{base_url}'")  # noqa: TRY003

    def _absolute_url(value: Any) -> Any:
        return _map_value(value, lambda item: urljoin(base_url, item.strip()))

    _absolute_url.__name__ = "absolute_url"
    return _absolute_url


def strip(value: Any) -> Any:
    """Strip surrounding whitespace."""
    return _map_value(value, str.strip)


def normalize_whitespace(value: Any) -> Any:
    """Collapse whitespace runs to single spaces and strip the ends."""
    return _map_value(value, lambda item: " ".join(item.split()))


def to_int(value: Any) -> Any:
    """Parse integers, tolerating thousands separators such as `1 204` or `1,204`.

    Raises:
        ValueError: If the value is not an integer.
    """

    def _parse(item: str) -> int:
        compact = item.strip().replace(" ", "").replace("\u00a0", "").replace(",", "")
        return int(compact)

    return _map_value(value, _parse)


def to_decimal(value: Any) -> Any:
    """Parse decimals written with a comma or dot separator, like `1 234,50`.

    When both separators appear, the last one is the decimal separator and the other
    groups thousands: `1,234.50` and `1.234,50` both parse as `1234.50`.

    Raises:
        ValueError: If the value is not a number.
    """

    def _parse(item: str) -> Decimal:
        compact = item.strip().replace(" ", "").replace("\u00a0", "")
        if "," in compact and "." in compact:
            grouping = "," if compact.rfind(",") < compact.rfind(".") else "."
            compact = compact.replace(grouping, "")
        compact = compact.replace(",", ".")
        try:
            return Decimal(compact)
        except InvalidOperation as exc:
            raise ValueError(f"Not a decimal number: '{item}'") from exc

    return _map_value(value, _parse)


def compose(*transforms: Transform) -> Transform:
    """Chain transforms, applied left to right.

    Args:
        *transforms (Transform): Transforms to chain.

    Returns:
        Transform: Combined transform.
    """

    def _compose(value: Any) -> Any:
        return reduce(lambda acc, func: func(acc), transforms, value)

    _compose.__name__ = "+".join(getattr(func, "__name__", "transform") for func in transforms) or "identity"
    return _compose
