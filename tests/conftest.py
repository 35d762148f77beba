"""Pytest marker auto-assignment by folder and shared fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from scrapebind import logger
from scrapebind.materializer import Materializer
from scrapebind.schema_registry import SchemaRegistry
from scrapebind.typing.enums import StringListPolicy


def _mark_tests_by_directory(
    config: pytest.Config,
    items: list[pytest.Item],
    marker: str,
) -> None:
    """Mark collected tests located under tests/<marker>/."""
    target_dir = (Path(config.rootpath) / "tests" / marker).resolve()

    for item in items:
        try:
            path = Path(str(item.path)).resolve()
        except OSError:
            logger.warning(
                f"Could not resolve path for test item {item.name!s}; skipping {marker!s} marker assignment",
            )
            continue

        if path == target_dir or target_dir in path.parents:
            item.add_marker(getattr(pytest.mark, marker))


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    """Apply directory-based markers to test items."""
    _mark_tests_by_directory(config, items, "unit")
    _mark_tests_by_directory(config, items, "integration")


@pytest.fixture
def registry() -> SchemaRegistry:
    """Return an empty schema registry."""
    return SchemaRegistry()


@pytest.fixture
def materializer(registry: SchemaRegistry) -> Materializer:
    """Return a materializer bound to the lxml evaluator and a fresh registry."""
    return Materializer(registry=registry, string_list_policy=StringListPolicy.ERROR)
