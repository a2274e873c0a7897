"""CLI entry point for trello2linear."""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import replace
from pathlib import Path

from trello2linear.config import NormalizerConfig, load_mapping_config
from trello2linear.exceptions import ExportFormatError, MappingConfigError, TrelloAPIError
from trello2linear.importer import TrelloJsonImporter
from trello2linear.logging_config import setup_logging
from trello2linear.normalizer import TrelloExportNormalizer, validate_export
from trello2linear.trello_client import TrelloExportReader

logger = logging.getLogger("trello2linear.cli")

# Module docstring for --help
__doc__ = """
trello2linear - Normalize a Trello board export for import into Linear

Usage:
    # Normalize an exported board (Menu > Print, export and share > Export as JSON)
    python3 -m trello2linear board.json --output import.json

    # Skip archived cards and cards in archived lists
    python3 -m trello2linear board.json --discard-archived-cards --discard-archived-lists

    # Use custom status/estimate/project/milestone tables
    python3 -m trello2linear board.json --mapping mapping.json

    # Fetch the board from the Trello API instead of a file
    export TRELLO_API_KEY="your-key"
    export TRELLO_TOKEN="your-token"
    python3 -m trello2linear --board-url https://trello.com/b/Bm0nnz1R/my-board

Options:
    --output FILE               Write the normalized result here (default: stdout)
    --mapping FILE              JSON mapping tables overriding the defaults
    --discard-archived-cards    Skip archived cards
    --discard-archived-lists    Skip cards in archived lists
    --board-id ID / --board-url URL
                                Fetch the board via API (needs TRELLO_API_KEY, TRELLO_TOKEN)
    --no-verify-ssl             Disable SSL verification for API requests
    -v, --verbose / -q, --quiet / --log-level LEVEL / --log-file FILE

For full documentation, see README.md
"""

VALUE_FLAGS = {"--output", "--mapping", "--board-id", "--board-url", "--log-level", "--log-file"}


def _flag_value(flag: str) -> str | None:
    """Return the argument following ``flag``; exit if it is missing"""
    if flag not in sys.argv:
        return None
    idx = sys.argv.index(flag)
    if idx + 1 >= len(sys.argv):
        logger.error(f"❌ Error: {flag} requires a value")
        sys.exit(1)
    return sys.argv[idx + 1]


def _positional_args() -> list[str]:
    """Arguments that are neither flags nor flag values"""
    positional = []
    skip_next = False
    for arg in sys.argv[1:]:
        if skip_next:
            skip_next = False
            continue
        if arg in VALUE_FLAGS:
            skip_next = True
            continue
        if not arg.startswith("-"):
            positional.append(arg)
    return positional


def _load_env_file() -> None:
    """Load KEY=VALUE lines from .env without overriding the environment"""
    env_file = os.getenv("TRELLO_ENV_FILE", ".env")
    if not Path(env_file).exists():
        return
    with open(env_file) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, value = line.split("=", 1)
                if key not in os.environ:
                    os.environ[key] = value


def main() -> None:
    if "--help" in sys.argv or "-h" in sys.argv:
        print(__doc__)
        sys.exit(0)

    # Logging flags first so everything after is visible
    log_level = "INFO"
    if "--verbose" in sys.argv or "-v" in sys.argv:
        log_level = "DEBUG"
    elif "--quiet" in sys.argv or "-q" in sys.argv:
        log_level = "ERROR"
    elif "--log-level" in sys.argv:
        log_level = (_flag_value("--log-level") or "INFO").upper()
    setup_logging(log_level, _flag_value("--log-file"))

    discard_archived_cards = "--discard-archived-cards" in sys.argv
    discard_archived_lists = "--discard-archived-lists" in sys.argv
    output_path = _flag_value("--output")
    board_id = _flag_value("--board-id")
    board_url = _flag_value("--board-url")
    inputs = _positional_args()

    if not inputs and not board_id and not board_url:
        logger.error("❌ Error: Missing input")
        logger.error("\nProvide a Trello export file, or --board-id / --board-url")
        logger.error("Run with --help for usage")
        sys.exit(1)

    config = NormalizerConfig()
    mapping_path = _flag_value("--mapping")
    if mapping_path:
        try:
            config = load_mapping_config(mapping_path)
            logger.info(f"✅ Loaded mapping tables from: {mapping_path}")
        except (FileNotFoundError, MappingConfigError) as e:
            logger.error(f"❌ Error loading mapping: {e}")
            sys.exit(1)

    try:
        if inputs:
            importer = TrelloJsonImporter(
                inputs[0],
                discard_archived_cards=discard_archived_cards,
                discard_archived_lists=discard_archived_lists,
                config=config,
            )
            result = importer.import_data()
        else:
            _load_env_file()
            api_key = os.getenv("TRELLO_API_KEY")
            token = os.getenv("TRELLO_TOKEN")
            if not api_key or not token:
                logger.error("❌ Error: Missing required Trello credentials")
                logger.error("\nRequired environment variables:")
                logger.error("  TRELLO_API_KEY     - Your Trello API key")
                logger.error("  TRELLO_TOKEN       - Your Trello API token")
                sys.exit(1)

            no_verify_ssl = "--no-verify-ssl" in sys.argv
            if no_verify_ssl:
                import urllib3

                urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
                logger.info("🔓 SSL verification disabled")

            reader = TrelloExportReader(
                api_key,
                token,
                board_id=board_id,
                board_url=board_url,
                verify_ssl=not no_verify_ssl,
            )
            config = replace(
                config,
                discard_archived_cards=discard_archived_cards,
                discard_archived_lists=discard_archived_lists,
            )
            export = validate_export(reader.get_board_export())
            result = TrelloExportNormalizer(config).normalize(export)
    except FileNotFoundError as e:
        logger.error(f"❌ Error: {e}")
        sys.exit(1)
    except ExportFormatError as e:
        logger.error(f"❌ Invalid Trello export: {e}")
        sys.exit(1)
    except TrelloAPIError as e:
        logger.error(f"❌ Trello API error: {e}")
        sys.exit(1)
    except ValueError as e:
        logger.error(f"❌ Error: {e}")
        sys.exit(1)

    payload = json.dumps(result.to_dict(), indent=2)
    if output_path:
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        Path(output_path).write_text(payload)
        logger.info(f"💾 Wrote {len(result.issues)} issues to {output_path}")
    else:
        print(payload)


if __name__ == "__main__":
    main()
