"""XPath evaluation over lxml documents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from lxml import etree, html

from scrapebind.exceptions import QueryError
from scrapebind.typing.models import Match

if TYPE_CHECKING:
    from collections.abc import Iterable

NodeRef = etree._Element  # noqa: SLF001


@dataclass(frozen=True)
class Document:
    """Parsed, read-only document tree."""

    tree: etree._ElementTree  # noqa: SLF001

    @property
    def root(self) -> NodeRef:
        """Return the root element."""
        return self.tree.getroot()


def parse_html(markup: str | bytes, *, base_url: str | None = None) -> Document:
    """Parse HTML markup into a document.

    Args:
        markup (str | bytes): HTML source.
        base_url (str | None): URL the document was fetched from.

    Raises:
        etree.ParserError: If the markup holds no element.

    Returns:
        Document: Parsed document.
    """
    root = html.fromstring(markup, base_url=base_url)
    return Document(tree=root.getroottree())


def parse_xml(data: str | bytes) -> Document:
    """Parse XML without resolving entities, loading DTDs or touching the network.

    Args:
        data (str | bytes): XML source.

    Raises:
        etree.XMLSyntaxError: If the data is not well-formed.

    Returns:
        Document: Parsed document.
    """
    parser = etree.XMLParser(resolve_entities=False, no_network=True, load_dtd=False, huge_tree=False)
    payload = data.encode("utf-8") if isinstance(data, str) else data
    root = etree.fromstring(payload, parser=parser)
    return Document(tree=root.getroottree())


class LxmlEvaluator:
    """Query evaluator backed by lxml XPath 1.0."""

    def evaluate(self, query: str, document: Document, scope: NodeRef | None = None) -> tuple[Match, ...]:
        """Evaluate `query` from the document root or relative to `scope`.

        Args:
            query (str): XPath expression.
            document (Document): Document to query.
            scope (NodeRef | None): Context node, None for global evaluation.

        Raises:
            QueryError: If the expression is malformed or evaluation fails.

        Returns:
            tuple[Match, ...]: Matches in the order lxml returns them.
        """
        context = document.tree if scope is None else scope
        try:
            result = context.xpath(query)
        except (etree.XPathError, TypeError, ValueError) as exc:
            raise QueryError(query=query, message=f"XPath evaluation failed: {exc}") from exc

        if isinstance(result, list):
            return tuple(_to_match(item) for item in result)
        return (_to_match(result),)

    def node_value(self, node: object) -> str:
        """Return the textual value of a node.

        Args:
            node (object): Element, comment or processing instruction.

        Raises:
            QueryError: If the node has no textual value.

        Returns:
            str: Text content of the node.
        """
        if isinstance(node, etree._Comment | etree._ProcessingInstruction | etree._Entity):  # noqa: SLF001
            return str(node.text or "")
        if isinstance(node, etree._Element):  # noqa: SLF001
            return _join_text(node.itertext())
        raise QueryError(query=None, message=f"Node of type {type(node).__name__} has no textual value")


def _to_match(item: object) -> Match:
    if isinstance(item, etree._Element):  # noqa: SLF001
        return Match.of_node(item)
    if isinstance(item, str):
        return Match.of_string(item)
    return Match.of_other(item)


def _join_text(parts: Iterable[str]) -> str:
    return "".join(str(part) for part in parts)
