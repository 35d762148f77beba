"""Query result models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from scrapebind.typing.enums import MatchKind


class Match(BaseModel):
    """One query result: a document node, a resolved string, or another scalar.

    `node` references the evaluated document and must not outlive it.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: MatchKind
    node: Any = None
    value: Any = None

    @classmethod
    def of_node(cls, node: object) -> Match:
        """Build a node match."""
        return cls(kind=MatchKind.NODE, node=node)

    @classmethod
    def of_string(cls, value: str) -> Match:
        """Build a resolved string match."""
        return cls(kind=MatchKind.STRING, value=str(value))

    @classmethod
    def of_other(cls, value: object) -> Match:
        """Build a match for a result that has no string form (number, boolean...)."""
        return cls(kind=MatchKind.OTHER, value=value)

    @property
    def is_node(self) -> bool:
        """Return whether the match references a document node."""
        return self.kind == MatchKind.NODE
