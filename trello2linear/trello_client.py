"""Fetch a board from the Trello API in the same shape as a JSON export."""

from __future__ import annotations

import logging
import re
import time
from typing import Any, cast

import requests

from trello2linear.exceptions import (
    TrelloAPIError,
    TrelloAuthenticationError,
    TrelloNotFoundError,
    TrelloRateLimitError,
    TrelloServerError,
)

logger = logging.getLogger(__name__)

# Actions the normalizer reads: comments and list moves
EXPORT_ACTION_FILTER = "commentCard,updateCard:idList"

PAGE_LIMIT = 1000


class TrelloExportReader:
    """Read a full board export from the Trello REST API

    The result has the same top-level arrays as the JSON file Trello produces
    from Menu > Export as JSON, so it can go straight into the normalizer.
    """

    def __init__(
        self,
        api_key: str,
        token: str,
        board_id: str | None = None,
        board_url: str | None = None,
        verify_ssl: bool = True,
    ):
        self.api_key = api_key
        self.token = token
        self.base_url = "https://api.trello.com/1"
        self.verify_ssl = verify_ssl
        self.max_retries = 3
        self.base_delay = 1.0

        if board_url:
            self.board_id = self.parse_board_url(board_url)
        elif board_id:
            self.board_id = board_id
        else:
            raise ValueError("Either board_id or board_url is required")

    @staticmethod
    def parse_board_url(url: str) -> str:
        """Extract the board id from ``https://trello.com/b/<id>/<name>``

        Raises:
            ValueError: If URL format is invalid or board ID cannot be extracted
        """
        if not url:
            raise ValueError("URL cannot be empty")

        match = re.search(r"trello\.com/b/([a-zA-Z0-9]+)", url)
        if match:
            return match.group(1)

        raise ValueError(f"Could not extract board ID from URL: {url}")

    def _raise_for_status(self, endpoint: str, status_code: int, response_text: str) -> None:
        """Map non-retryable HTTP errors to typed exceptions"""
        if status_code == 401:
            raise TrelloAuthenticationError(
                "Invalid API credentials. Check your TRELLO_API_KEY and TRELLO_TOKEN.\n"
                "Get credentials at: https://trello.com/power-ups/admin",
                status_code=status_code,
                response_text=response_text,
            )
        if status_code == 403:
            raise TrelloAuthenticationError(
                f"Access forbidden to resource: {endpoint}\n"
                "Your API token may not have permission to access this board.",
                status_code=status_code,
                response_text=response_text,
            )
        if status_code == 404:
            raise TrelloNotFoundError(
                f"Resource not found: {endpoint}\n"
                "Check that your board ID is correct and the board exists.",
                status_code=status_code,
                response_text=response_text,
            )
        raise TrelloAPIError(
            f"HTTP {status_code} error for {endpoint}: {response_text[:200]}",
            status_code=status_code,
            response_text=response_text,
        )

    def _request(self, endpoint: str, params: dict | None = None) -> Any:
        """Make an authenticated GET with exponential backoff on transient errors"""
        url = f"{self.base_url}/{endpoint}"
        auth_params = {"key": self.api_key, "token": self.token}
        if params:
            auth_params.update(params)

        retry_statuses = {429, 500, 502, 503, 504}
        last_status = 0
        last_text = ""

        for attempt in range(self.max_retries):
            try:
                response = requests.get(
                    url, params=auth_params, timeout=30, verify=self.verify_ssl
                )
            except requests.RequestException as e:
                if attempt < self.max_retries - 1:
                    time.sleep(self.base_delay * (2**attempt))
                    continue
                raise TrelloAPIError(
                    f"Network error after {self.max_retries} attempts: {e}\n"
                    "Check your internet connection and try again.",
                ) from e

            if response.ok:
                return cast(Any, response.json())

            last_status = response.status_code
            last_text = response.text
            if last_status not in retry_statuses:
                self._raise_for_status(endpoint, last_status, last_text)

            logger.debug(
                "HTTP %d from %s (attempt %d/%d)", last_status, endpoint, attempt + 1, self.max_retries
            )
            if attempt < self.max_retries - 1:
                time.sleep(self.base_delay * (2**attempt))

        if last_status == 429:
            raise TrelloRateLimitError(
                f"Rate limit exceeded after {self.max_retries} retry attempts.\n"
                "Trello's API rate limit: 100 requests per 10 seconds.\n"
                "Wait a few minutes and try again.",
                status_code=last_status,
                response_text=last_text,
            )
        raise TrelloServerError(
            f"Trello server error (HTTP {last_status}) persisted after "
            f"{self.max_retries} retries.\n"
            "Trello's servers may be experiencing issues. Try again later.",
            status_code=last_status,
            response_text=last_text,
        )

    def _paginated_request(self, endpoint: str, params: dict | None = None) -> list[dict]:
        """Fetch every page of a list endpoint using Trello's ``before`` cursor

        Trello caps list responses at 1000 items; pages are requested until one
        comes back short.
        """
        all_items: list[dict] = []
        request_params = params.copy() if params else {}
        request_params["limit"] = PAGE_LIMIT

        while True:
            page = self._request(endpoint, request_params)
            if not page:
                break

            all_items.extend(page)
            if len(page) < PAGE_LIMIT or not page[-1].get("id"):
                break

            request_params["before"] = page[-1]["id"]

        return all_items

    def get_board_export(self) -> dict:
        """Fetch the board with every array the normalizer reads

        Returns:
            Export document with cards, lists, checklists, customFields,
            members, labels and actions
        """
        logger.info(f"🌐 Fetching board {self.board_id} from Trello API...")
        board = cast(
            dict,
            self._request(
                f"boards/{self.board_id}",
                {
                    "fields": "name,desc,url,shortUrl",
                    "cards": "all",
                    "card_fields": "all",
                    "card_attachments": "true",
                    "card_customFieldItems": "true",
                    "lists": "all",
                    "checklists": "all",
                    "customFields": "true",
                    "members": "all",
                    "labels": "all",
                },
            ),
        )

        logger.info("💬 Fetching activity log...")
        board["actions"] = self._paginated_request(
            f"boards/{self.board_id}/actions", {"filter": EXPORT_ACTION_FILTER}
        )

        for key in ("cards", "lists", "checklists", "customFields", "members", "labels"):
            board.setdefault(key, [])

        logger.info(
            f"✅ Fetched {len(board['cards'])} cards, {len(board['lists'])} lists, "
            f"{len(board['actions'])} actions"
        )
        return board
