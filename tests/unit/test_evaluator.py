from __future__ import annotations

import pytest
from lxml import etree

from scrapebind.evaluator import LxmlEvaluator, parse_html, parse_xml
from scrapebind.exceptions import QueryError
from scrapebind.typing.enums import MatchKind

_HTML = """
<html><body>
  <ul>
    <li class="item"><a href="/a">First <b>post</b></a></li>
    <li class="item"><a href="/b">Second</a></li>
  </ul>
</body></html>
"""


@pytest.fixture
def evaluator() -> LxmlEvaluator:
    return LxmlEvaluator()


def test_global_evaluation_returns_nodes_in_document_order(evaluator: LxmlEvaluator) -> None:
    document = parse_html(_HTML)

    matches = evaluator.evaluate("//li[@class='item']/a", document)

    assert [match.kind for match in matches] == [MatchKind.NODE, MatchKind.NODE]
    assert [match.node.get("href") for match in matches] == ["/a", "/b"]


def test_attribute_and_text_results_are_string_matches(evaluator: LxmlEvaluator) -> None:
    document = parse_html(_HTML)

    hrefs = evaluator.evaluate("//a/@href", document)
    texts = evaluator.evaluate("//a/b/text()", document)

    assert [(match.kind, match.value) for match in hrefs] == [(MatchKind.STRING, "/a"), (MatchKind.STRING, "/b")]
    assert [match.value for match in texts] == ["post"]
    assert all(type(match.value) is str for match in hrefs)


def test_scoped_evaluation_is_relative_to_node(evaluator: LxmlEvaluator) -> None:
    document = parse_html(_HTML)
    second = evaluator.evaluate("//li", document)[1].node

    matches = evaluator.evaluate("./a/@href", document, second)

    assert [match.value for match in matches] == ["/b"]


def test_scalar_expressions_yield_a_single_match(evaluator: LxmlEvaluator) -> None:
    document = parse_html(_HTML)

    (count,) = evaluator.evaluate("count(//li)", document)
    (flag,) = evaluator.evaluate("boolean(//li)", document)
    (text,) = evaluator.evaluate("string(//li/a)", document)

    assert count.kind == MatchKind.OTHER
    assert count.value == 2.0
    assert flag.kind == MatchKind.OTHER
    assert (text.kind, text.value) == (MatchKind.STRING, "First post")


def test_no_match_yields_empty_sequence(evaluator: LxmlEvaluator) -> None:
    assert evaluator.evaluate("//table", parse_html(_HTML)) == ()


def test_evaluation_is_restartable(evaluator: LxmlEvaluator) -> None:
    document = parse_html(_HTML)

    first = evaluator.evaluate("//a/@href", document)
    second = evaluator.evaluate("//a/@href", document)

    assert first == second


@pytest.mark.parametrize("query", ["//li[", "unknown-function()", "//li/@"])
def test_malformed_query_raises_query_error(evaluator: LxmlEvaluator, query: str) -> None:
    with pytest.raises(QueryError) as exc_info:
        evaluator.evaluate(query, parse_html(_HTML))

    assert exc_info.value.query == query
    assert isinstance(exc_info.value.__cause__, etree.XPathError)


def test_node_value_joins_descendant_text(evaluator: LxmlEvaluator) -> None:
    document = parse_html(_HTML)
    (link, _) = evaluator.evaluate("//a", document)

    assert evaluator.node_value(link.node) == "First post"


def test_node_value_reads_comments(evaluator: LxmlEvaluator) -> None:
    document = parse_xml("<root><!-- note --></root>")
    (comment,) = evaluator.evaluate("//comment()", document)

    assert evaluator.node_value(comment.node) == " note "


def test_node_value_rejects_non_nodes(evaluator: LxmlEvaluator) -> None:
    with pytest.raises(QueryError, match="has no textual value"):
        evaluator.node_value(42)


def test_parse_xml_does_not_expand_entities() -> None:
    payload = (
        '<?xml version="1.0"?>'
        '<!DOCTYPE r [<!ENTITY secret SYSTEM "file:///etc/passwd">]>'
        "<r>&secret;</r>"
    )

    document = parse_xml(payload)

    assert "root:" not in "".join(document.root.itertext())


def test_parse_html_keeps_base_url() -> None:
    document = parse_html(_HTML, base_url="https://example.test/list")

    assert document.tree.docinfo.URL == "https://example.test/list"
