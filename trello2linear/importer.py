"""Import front end reading a Trello JSON export from disk."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

from trello2linear.config import NormalizerConfig
from trello2linear.models import ImportResult
from trello2linear.normalizer import TrelloExportNormalizer, parse_export

logger = logging.getLogger(__name__)


class TrelloJsonImporter:
    """Read a board export file and normalize it

    The file is read once, up front; everything after that is in memory.
    Discard flags given here override the ones on ``config``.
    """

    def __init__(
        self,
        file_path: str,
        discard_archived_cards: bool = False,
        discard_archived_lists: bool = False,
        config: NormalizerConfig | None = None,
    ):
        self.file_path = file_path
        self.config = replace(
            config if config is not None else NormalizerConfig(),
            discard_archived_cards=discard_archived_cards,
            discard_archived_lists=discard_archived_lists,
        )

    @property
    def name(self) -> str:
        return "Trello (JSON)"

    @property
    def default_team_name(self) -> str:
        return "Trello"

    def import_data(self) -> ImportResult:
        """Read, validate and normalize the export file

        Raises:
            FileNotFoundError: If the export file doesn't exist
            ExportFormatError: If the file is not a usable Trello export
        """
        path = Path(self.file_path)
        if not path.exists():
            raise FileNotFoundError(f"Trello export not found: {self.file_path}")

        logger.info(f"📂 Reading Trello export: {self.file_path}")
        export = parse_export(path.read_bytes())
        return TrelloExportNormalizer(self.config).normalize(export)
