"""Custom exception classes for trello2linear.

This module defines the exception hierarchy for malformed export documents,
invalid mapping configuration and Trello API errors raised while fetching a
board export.
"""

from __future__ import annotations


class Trello2LinearError(Exception):
    """Base exception for all trello2linear errors"""

    pass


class ExportFormatError(Trello2LinearError):
    """Raised when the export document cannot be normalized at all.

    This can occur when:
    - The input is not valid JSON
    - The top-level JSON value is not an object
    - A required top-level array (cards, lists, checklists, customFields,
      members, actions) is missing or is not a list

    Attributes:
        missing_keys: Required top-level keys that were absent or malformed

    Resolution:
        Re-export the board from Trello (Menu > Print, export and share >
        Export as JSON) and make sure the file was not truncated.
    """

    def __init__(self, message: str, missing_keys: list[str] | None = None):
        self.missing_keys = missing_keys or []
        super().__init__(message)


class MappingConfigError(Trello2LinearError, ValueError):
    """Raised when a mapping configuration file has an invalid shape"""

    pass


class TrelloAPIError(Trello2LinearError):
    """Raised when fetching a board export from the Trello API fails

    Carries the HTTP status and response body, when there was one, so the CLI
    can report why the export could not be built.
    """

    def __init__(
        self, message: str, status_code: int | None = None, response_text: str | None = None
    ):
        self.status_code = status_code
        self.response_text = response_text
        super().__init__(message)


class TrelloAuthenticationError(TrelloAPIError):
    """TRELLO_API_KEY or TRELLO_TOKEN was rejected (401/403)"""

    pass


class TrelloNotFoundError(TrelloAPIError):
    """The board id or board URL does not name a board the token can read (404)"""

    pass


class TrelloRateLimitError(TrelloAPIError):
    """Still throttled (429) after the export fetch exhausted its retries"""

    pass


class TrelloServerError(TrelloAPIError):
    """Trello kept returning 5xx while the export was being fetched"""

    pass
