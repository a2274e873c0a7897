"""Normalize Trello board exports into a Linear-style issue import model."""

from __future__ import annotations

# Import CLI from extracted module
from trello2linear.cli import main

# Import configuration and mapping tables
from trello2linear.config import NormalizerConfig, load_mapping_config

# Import exceptions from extracted module
from trello2linear.exceptions import (
    ExportFormatError,
    MappingConfigError,
    Trello2LinearError,
    TrelloAPIError,
    TrelloAuthenticationError,
    TrelloNotFoundError,
    TrelloRateLimitError,
    TrelloServerError,
)

# Import file importer
from trello2linear.importer import TrelloJsonImporter

# Import logging configuration
from trello2linear.logging_config import setup_logging

# Import result models
from trello2linear.models import Comment, Estimate, ImportResult, Issue, LabelEntry, UserEntry

# Import normalizer
from trello2linear.normalizer import TrelloExportNormalizer, parse_export, validate_export

# Import phase model
from trello2linear.phases import Phase

# Import Trello API client
from trello2linear.trello_client import TrelloExportReader

__version__ = "0.1.0"

__all__ = [
    # Core classes
    "TrelloExportNormalizer",
    "TrelloJsonImporter",
    "TrelloExportReader",
    "NormalizerConfig",
    "Phase",
    "parse_export",
    "validate_export",
    "load_mapping_config",
    "setup_logging",
    # Result models
    "ImportResult",
    "Issue",
    "Comment",
    "LabelEntry",
    "UserEntry",
    "Estimate",
    # Exceptions
    "Trello2LinearError",
    "ExportFormatError",
    "MappingConfigError",
    "TrelloAPIError",
    "TrelloAuthenticationError",
    "TrelloNotFoundError",
    "TrelloRateLimitError",
    "TrelloServerError",
    # CLI
    "main",
]
