"""Typing-centric domain modules."""

from scrapebind.typing.enums import BindingMode, MatchKind, ShapeKind, StringListPolicy
from scrapebind.typing.models import FieldSpec, Match, Schema, TargetShape, Transform
from scrapebind.typing.protocol import QueryEvaluator

__all__ = [
    "BindingMode",
    "FieldSpec",
    "Match",
    "MatchKind",
    "QueryEvaluator",
    "Schema",
    "ShapeKind",
    "StringListPolicy",
    "TargetShape",
    "Transform",
]
