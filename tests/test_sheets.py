from unittest.mock import MagicMock

import pytest
import requests

from errors import AuthError, SheetWriteError
from sheets import SheetAppender
from tests.conftest import make_response

ROW = ["2025-03-01T14:05:09.123Z", "Ana", "Silva", "", "", "a@x.com"]


@pytest.fixture
def token_provider():
    provider = MagicMock()
    provider.get_access_token.return_value = "ya29.cached"
    return provider


def _appender(token_provider, session, cell_range="Página1!A:F"):
    return SheetAppender(token_provider, "sheet-123", cell_range, session=session, timeout=4)


class TestSheetAppender:

    @pytest.mark.unit
    def test_append_url_quotes_range(self, token_provider):
        appender = _appender(token_provider, MagicMock())
        assert appender.append_url == (
            "https://sheets.googleapis.com/v4/spreadsheets/sheet-123/values/P%C3%A1gina1%21A%3AF:append"
        )

    @pytest.mark.unit
    def test_posts_single_row_with_raw_input(self, token_provider):
        session = MagicMock()
        session.post.return_value = make_response(200, {"updates": {"updatedRows": 1}})

        result = _appender(token_provider, session).append_row(ROW)

        assert result == {"updates": {"updatedRows": 1}}
        call = session.post.call_args
        assert call.kwargs["params"] == {"valueInputOption": "RAW"}
        assert call.kwargs["headers"]["Authorization"] == "Bearer ya29.cached"
        assert call.kwargs["json"] == {"values": [ROW]}
        assert call.kwargs["timeout"] == 4

    @pytest.mark.unit
    def test_error_status_raises_sheet_write_error(self, token_provider):
        session = MagicMock()
        session.post.return_value = make_response(403, {"error": {"status": "PERMISSION_DENIED"}})

        with pytest.raises(SheetWriteError) as exc_info:
            _appender(token_provider, session).append_row(ROW)

        assert exc_info.value.status_code == 403
        assert "PERMISSION_DENIED" in str(exc_info.value)

    @pytest.mark.unit
    def test_transport_failure_raises_sheet_write_error(self, token_provider):
        session = MagicMock()
        session.post.side_effect = requests.Timeout("read timed out")

        with pytest.raises(SheetWriteError):
            _appender(token_provider, session).append_row(ROW)

    @pytest.mark.unit
    def test_auth_error_propagates_without_append(self, token_provider):
        token_provider.get_access_token.side_effect = AuthError("HTTP 401")
        session = MagicMock()

        with pytest.raises(AuthError):
            _appender(token_provider, session).append_row(ROW)
        session.post.assert_not_called()

    @pytest.mark.unit
    def test_redirect_is_not_success(self, token_provider):
        session = MagicMock()
        session.post.return_value = make_response(302, text="")

        with pytest.raises(SheetWriteError) as exc_info:
            _appender(token_provider, session).append_row(ROW)
        assert exc_info.value.status_code == 302

    @pytest.mark.unit
    def test_unauthorized_drops_cached_token(self, token_provider):
        session = MagicMock()
        session.post.return_value = make_response(401, {"error": {"status": "UNAUTHENTICATED"}})

        with pytest.raises(SheetWriteError):
            _appender(token_provider, session).append_row(ROW)
        token_provider.invalidate.assert_called_once_with()

    @pytest.mark.unit
    def test_other_failures_keep_cached_token(self, token_provider):
        session = MagicMock()
        session.post.return_value = make_response(500, {"error": {"status": "INTERNAL"}})

        with pytest.raises(SheetWriteError):
            _appender(token_provider, session).append_row(ROW)
        token_provider.invalidate.assert_not_called()
