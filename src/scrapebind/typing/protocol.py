"""Evaluator interfaces."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from scrapebind.typing.models import Match


class QueryEvaluator[DocumentT, NodeT](Protocol):
    """Evaluates queries against a parsed document."""

    def evaluate(self, query: str, document: DocumentT, scope: NodeT | None = None) -> tuple[Match, ...]:
        """Evaluate a query globally or relative to a node.

        Re-evaluating the same query on the same scope of an unmodified document must
        yield an equivalent sequence.

        Args:
            query: Query expression in the evaluator's language.
            document: Document to query.
            scope: Context node, None to evaluate from the document root.

        Returns:
            tuple[Match, ...]: Ordered matches.
        """

    def node_value(self, node: NodeT) -> str:
        """Return the textual value of a node.

        Args:
            node: Node referenced by a match.

        Returns:
            str: Node value.
        """
