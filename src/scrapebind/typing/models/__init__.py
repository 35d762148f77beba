"""Core domain model exports."""

from scrapebind.typing.models.match import Match
from scrapebind.typing.models.schema import FieldSpec, Schema, TargetShape, Transform

__all__ = [
    "FieldSpec",
    "Match",
    "Schema",
    "TargetShape",
    "Transform",
]
