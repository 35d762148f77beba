from concurrent.futures import ThreadPoolExecutor
from typing import Annotated

import pytest
from pydantic import BaseModel, RootModel

from scrapebind import ExtractionError, Materializer, MissingError, SchemaRegistry, parse_html, scrape
from scrapebind.processing import compose, normalize_whitespace, prefix, to_int

_REDDIT = """
<html><body>
  <div id="siteTable">
    <div class="thing Post">
      <div class="score unvoted">12</div>
      <a class="title" href="/r/python/comments/a">Release notes</a>
    </div>
    <div class="thing Post promoted">
      <a class="title" href="/r/python/comments/b">Sponsored</a>
    </div>
  </div>
</body></html>
"""

_CATALOG = """
<html><body>
  <section class="shelf"><h2> Fiction </h2>
    <article><h3>Dune</h3><span class="price">12</span></article>
    <article><h3>Emma</h3><span class="price">7</span></article>
  </section>
  <section class="shelf"><h2>Poetry</h2></section>
  <section class="shelf"><h2>Science</h2>
    <article><h3>Cosmos</h3><span class="price">1 204</span></article>
  </section>
</body></html>
"""

_THREAD = """
<html><body>
  <div class="comment"><p>root</p>
    <ul>
      <li class="comment"><p>first reply</p><ul><li class="comment"><p>nested reply</p></li></ul></li>
      <li class="comment"><p>second reply</p></li>
    </ul>
  </div>
</body></html>
"""


class RedditPost(BaseModel):
    url: Annotated[str, scrape(".//a[contains(@class, 'title')]/@href")]
    votes: Annotated[str | None, scrape(".//div[contains(@class, 'score')]/text()")]


class RedditListing(RootModel[list[RedditPost]]):
    root: Annotated[list[RedditPost], scrape("//div[contains(@class, 'Post')]")]


class Book(BaseModel):
    title: Annotated[str, scrape("./h3/text()")]
    price: Annotated[int, scrape("./span[@class='price']/text()", transform=to_int)]


class Shelf(BaseModel):
    name: Annotated[str, scrape("./h2/text()", transform=normalize_whitespace)]
    books: Annotated[list[Book], scrape("./article")]


class Catalog(BaseModel):
    shelves: Annotated[list[Shelf], scrape("//section[@class='shelf']")]


class Comment(BaseModel):
    text: Annotated[str, scrape("./p/text()")]
    replies: Annotated[list["Comment"], scrape("./ul/li[@class='comment']")]


Comment.model_rebuild()


class Discussion(BaseModel):
    root: Annotated[Comment, scrape("//div[@class='comment']")]


@pytest.fixture
def materializer() -> Materializer:
    return Materializer(registry=SchemaRegistry())


def test_reddit_listing(materializer: Materializer) -> None:
    listing = materializer.materialize(RedditListing, parse_html(_REDDIT))

    assert listing.model_dump() == [
        {"url": "/r/python/comments/a", "votes": "12"},
        {"url": "/r/python/comments/b", "votes": None},
    ]


def test_reddit_listing_with_absolute_urls(materializer: Materializer) -> None:
    class AbsolutePost(BaseModel):
        url: Annotated[
            str,
            scrape(
                ".//a[contains(@class, 'title')]/@href",
                transform=compose(str.strip, prefix("https://www.reddit.com")),
            ),
        ]

    class AbsoluteListing(RootModel[list[AbsolutePost]]):
        root: Annotated[list[AbsolutePost], scrape("//div[contains(@class, 'Post')]")]

    listing = materializer.materialize(AbsoluteListing, parse_html(_REDDIT))

    assert [post.url for post in listing.root] == [
        "https://www.reddit.com/r/python/comments/a",
        "https://www.reddit.com/r/python/comments/b",
    ]


def test_nested_lists_keep_grouping_and_order(materializer: Materializer) -> None:
    catalog = materializer.materialize(Catalog, parse_html(_CATALOG))

    assert [(shelf.name, [(book.title, book.price) for book in shelf.books]) for shelf in catalog.shelves] == [
        ("Fiction", [("Dune", 12), ("Emma", 7)]),
        ("Poetry", []),
        ("Science", [("Cosmos", 1204)]),
    ]


def test_nested_list_failure_names_the_field_path(materializer: Materializer) -> None:
    broken = _CATALOG.replace('<span class="price">7</span>', "")

    with pytest.raises(ExtractionError) as exc_info:
        materializer.materialize(Catalog, parse_html(broken))

    assert exc_info.value.field_path == ("shelves", "books", "price")
    assert isinstance(exc_info.value.cause, MissingError)


def test_recursive_structures(materializer: Materializer) -> None:
    discussion = materializer.materialize(Discussion, parse_html(_THREAD))

    root = discussion.root
    assert root.text == "root"
    assert [reply.text for reply in root.replies] == ["first reply", "second reply"]
    assert [reply.text for reply in root.replies[0].replies] == ["nested reply"]
    assert root.replies[1].replies == []


def test_same_document_can_be_materialized_concurrently(materializer: Materializer) -> None:
    document = parse_html(_CATALOG)

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(lambda _: materializer.materialize(Catalog, document), range(8)))

    assert all(result == results[0] for result in results)
