"""
Unit tests for the custom exception hierarchy
"""

from trello2linear import (
    ExportFormatError,
    MappingConfigError,
    Trello2LinearError,
    TrelloAPIError,
    TrelloAuthenticationError,
    TrelloNotFoundError,
    TrelloRateLimitError,
    TrelloServerError,
)


class TestCustomExceptions:
    """Test custom exception classes"""

    def test_export_format_error(self):
        """Should carry the missing top-level keys"""
        error = ExportFormatError("Missing arrays", missing_keys=["cards"])

        assert isinstance(error, Trello2LinearError)
        assert str(error) == "Missing arrays"
        assert error.missing_keys == ["cards"]

    def test_export_format_error_defaults(self):
        assert ExportFormatError("Bad JSON").missing_keys == []

    def test_mapping_config_error_is_value_error(self):
        error = MappingConfigError("bad mapping")

        assert isinstance(error, Trello2LinearError)
        assert isinstance(error, ValueError)

    def test_trello_api_error_base_exception(self):
        """Should create base TrelloAPIError with metadata"""
        error = TrelloAPIError("Test error", status_code=400, response_text="Bad request")

        assert isinstance(error, Trello2LinearError)
        assert str(error) == "Test error"
        assert error.status_code == 400
        assert error.response_text == "Bad request"

    def test_api_error_subclasses(self):
        for cls, status in (
            (TrelloAuthenticationError, 401),
            (TrelloNotFoundError, 404),
            (TrelloRateLimitError, 429),
            (TrelloServerError, 500),
        ):
            error = cls("failed", status_code=status)
            assert isinstance(error, TrelloAPIError)
            assert error.status_code == status
