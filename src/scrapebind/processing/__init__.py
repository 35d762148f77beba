"""Field value processing helpers."""

from scrapebind.processing.transforms import (
    absolute_url,
    compose,
    fix_scheme,
    normalize_whitespace,
    prefix,
    strip,
    to_decimal,
    to_int,
)

__all__ = [
    "absolute_url",
    "compose",
    "fix_scheme",
    "normalize_whitespace",
    "prefix",
    "strip",
    "to_decimal",
    "to_int",
]
