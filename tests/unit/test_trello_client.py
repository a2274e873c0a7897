"""
Unit tests for TrelloExportReader (board export via the Trello API)

Uses the `responses` library to avoid real API calls.
"""

from unittest.mock import patch

import pytest
import responses

from trello2linear import (
    TrelloAPIError,
    TrelloAuthenticationError,
    TrelloExportReader,
    TrelloNotFoundError,
    TrelloRateLimitError,
    TrelloServerError,
)
from trello2linear.normalizer import validate_export

BOARD_URL = "https://api.trello.com/1/boards/BRD12345"
ACTIONS_URL = "https://api.trello.com/1/boards/BRD12345/actions"


@pytest.fixture
def reader():
    reader = TrelloExportReader(api_key="test_key", token="test_token", board_id="BRD12345")
    reader.base_delay = 0
    return reader


class TestBoardIdentification:
    """Test board id parsing"""

    def test_board_url(self):
        reader = TrelloExportReader("k", "t", board_url="https://trello.com/b/Bm0nnz1R/my-board")
        assert reader.board_id == "Bm0nnz1R"

    def test_url_takes_precedence(self):
        reader = TrelloExportReader(
            "k", "t", board_id="ignored", board_url="trello.com/b/Abc123"
        )
        assert reader.board_id == "Abc123"

    def test_board_required(self):
        with pytest.raises(ValueError, match="board_id or board_url"):
            TrelloExportReader("k", "t")

    def test_invalid_url(self):
        with pytest.raises(ValueError, match="Could not extract board ID"):
            TrelloExportReader.parse_board_url("https://trello.com/c/card123")

    def test_empty_url(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            TrelloExportReader.parse_board_url("")


class TestGetBoardExport:
    """Test fetching the board in export shape"""

    @responses.activate
    def test_fetches_board_and_actions(self, reader):
        responses.add(
            responses.GET,
            BOARD_URL,
            json={
                "id": "BRD12345",
                "name": "Board",
                "cards": [{"id": "c1"}],
                "lists": [{"id": "l1", "name": "To Do"}],
                "checklists": [],
                "customFields": [],
                "members": [],
            },
        )
        responses.add(responses.GET, ACTIONS_URL, json=[{"id": "a1", "type": "commentCard"}])

        export = reader.get_board_export()

        assert export["cards"] == [{"id": "c1"}]
        assert export["actions"] == [{"id": "a1", "type": "commentCard"}]
        assert export["labels"] == []
        validate_export(export)

        board_request = responses.calls[0].request
        assert "cards=all" in board_request.url
        assert "checklists=all" in board_request.url
        assert "key=test_key" in board_request.url
        actions_request = responses.calls[1].request
        assert "filter=commentCard" in actions_request.url
        assert "limit=1000" in actions_request.url

    def test_actions_paginated(self, reader):
        page1 = [{"id": f"a{i}"} for i in range(1000)]
        page2 = [{"id": "last"}]

        with patch.object(reader, "_request") as mock_request:
            mock_request.side_effect = [{"id": "BRD12345"}, page1, page2]
            export = reader.get_board_export()

        assert len(export["actions"]) == 1001
        third_call_params = mock_request.call_args_list[2][0][1]
        assert third_call_params["before"] == "a999"


class TestErrorHandling:
    """Test HTTP error mapping and retries"""

    @responses.activate
    def test_401_raises_authentication_error(self, reader):
        responses.add(responses.GET, BOARD_URL, status=401, body="unauthorized")

        with pytest.raises(TrelloAuthenticationError) as exc_info:
            reader._request("boards/BRD12345")

        assert exc_info.value.status_code == 401
        assert "TRELLO_API_KEY" in str(exc_info.value)

    @responses.activate
    def test_403_raises_authentication_error(self, reader):
        responses.add(responses.GET, BOARD_URL, status=403, body="forbidden")
        with pytest.raises(TrelloAuthenticationError, match="Access forbidden"):
            reader._request("boards/BRD12345")

    @responses.activate
    def test_404_raises_not_found(self, reader):
        responses.add(responses.GET, BOARD_URL, status=404, body="not found")
        with pytest.raises(TrelloNotFoundError):
            reader._request("boards/BRD12345")

    @responses.activate
    def test_400_not_retried(self, reader):
        responses.add(responses.GET, BOARD_URL, status=400, body="bad")

        with pytest.raises(TrelloAPIError) as exc_info:
            reader._request("boards/BRD12345")

        assert exc_info.value.status_code == 400
        assert len(responses.calls) == 1

    @responses.activate
    def test_retries_then_succeeds(self, reader):
        responses.add(responses.GET, BOARD_URL, status=503)
        responses.add(responses.GET, BOARD_URL, json={"id": "BRD12345"})

        assert reader._request("boards/BRD12345") == {"id": "BRD12345"}
        assert len(responses.calls) == 2

    @responses.activate
    def test_rate_limit_after_retries(self, reader):
        for _ in range(3):
            responses.add(responses.GET, BOARD_URL, status=429)

        with pytest.raises(TrelloRateLimitError):
            reader._request("boards/BRD12345")
        assert len(responses.calls) == 3

    @responses.activate
    def test_server_error_after_retries(self, reader):
        for _ in range(3):
            responses.add(responses.GET, BOARD_URL, status=502)

        with pytest.raises(TrelloServerError) as exc_info:
            reader._request("boards/BRD12345")
        assert exc_info.value.status_code == 502

    @responses.activate
    def test_network_error(self, reader):
        import requests

        for _ in range(3):
            responses.add(responses.GET, BOARD_URL, body=requests.ConnectionError("down"))

        with pytest.raises(TrelloAPIError, match="Network error"):
            reader._request("boards/BRD12345")
