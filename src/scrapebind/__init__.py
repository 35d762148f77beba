"""ScrapeBind package: declarative binding of document queries to typed models."""

from scrapebind.binding import Scrape, ignore, scrape, use_default
from scrapebind.evaluator import Document, LxmlEvaluator, parse_html, parse_xml
from scrapebind.exceptions import (
    ConversionError,
    ExtractionError,
    FieldError,
    MissingError,
    PackageError,
    QueryError,
    SchemaError,
    SettingsError,
)
from scrapebind.logging import configure_logging, get_logger, log_context
from scrapebind.materializer import Materializer, materialize
from scrapebind.schema_registry import SchemaRegistry, build_schema, default_registry, scraper
from scrapebind.settings import Settings, get_settings
from scrapebind.typing.models import Schema

__version__ = "0.1.0"

# Initialize package logger at import time via `get_logger`.
logger = get_logger("scrapebind")

__all__ = [
    "ConversionError",
    "Document",
    "ExtractionError",
    "FieldError",
    "LxmlEvaluator",
    "Materializer",
    "MissingError",
    "PackageError",
    "QueryError",
    "Schema",
    "SchemaError",
    "SchemaRegistry",
    "Scrape",
    "Settings",
    "SettingsError",
    "__version__",
    "build_schema",
    "configure_logging",
    "default_registry",
    "get_logger",
    "get_settings",
    "ignore",
    "log_context",
    "logger",
    "materialize",
    "parse_html",
    "parse_xml",
    "scrape",
    "scraper",
    "use_default",
]
