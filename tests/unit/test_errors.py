"""Unit tests for typed service errors and their translation."""

import httpx
import pytest
from pydantic import BaseModel, Field, ValidationError

from google_assistant_mcp.services.errors import (
    DateTimeConversionError,
    ErrorCode,
    GCalendarServiceError,
    GmailServiceError,
    ServiceError,
    format_validation_error,
    translate_error,
    upstream_message,
)


def make_status_error(status_code: int, json_body: dict | None = None) -> httpx.HTTPStatusError:
    """Build an HTTPStatusError carrying a Google-style error body."""
    request = httpx.Request("GET", "https://gmail.googleapis.com/gmail/v1/users/me/messages")
    response = httpx.Response(status_code, json=json_body or {}, request=request)
    return httpx.HTTPStatusError("upstream failure", request=request, response=response)


class _Sample(BaseModel):
    count: int = Field(ge=1)


@pytest.mark.unit
class TestServiceError:
    """Tests for ServiceError and its subclasses."""

    def test_should_keep_message_code_and_status(self) -> None:
        """Verify attributes are stored."""
        error = GmailServiceError("boom", ErrorCode.API_ERROR, 500)

        assert error.message == "boom"
        assert error.code == ErrorCode.API_ERROR
        assert error.status_code == 500
        assert str(error) == "boom"

    def test_should_describe_with_service_label(self) -> None:
        """Verify describe() prefixes the service label and code."""
        gmail = GmailServiceError("Email with ID x not found", ErrorCode.EMAIL_NOT_FOUND)
        calendar = GCalendarServiceError("Calendar or event not found.", ErrorCode.NOT_FOUND)

        assert gmail.describe() == "Gmail API Error [EMAIL_NOT_FOUND]: Email with ID x not found"
        assert calendar.describe() == "GCalendar API Error [NOT_FOUND]: Calendar or event not found."

    def test_should_describe_converter_errors(self) -> None:
        """Verify the converter error carries its own label."""
        error = DateTimeConversionError("Invalid date-time string provided.", ErrorCode.INVALID_DATETIME)

        assert error.describe() == "DateTime Error [INVALID_DATETIME]: Invalid date-time string provided."


@pytest.mark.unit
class TestTranslateError:
    """Tests for translate_error()."""

    def test_should_pass_typed_errors_through(self) -> None:
        """Verify an existing ServiceError is returned unchanged."""
        original = GmailServiceError("bad", ErrorCode.DECODE_ERROR)
        assert translate_error(original, "ignored", GmailServiceError) is original

    def test_should_translate_validation_error(self) -> None:
        """Verify pydantic errors become VALIDATION_ERROR."""
        with pytest.raises(ValidationError) as exc_info:
            _Sample(count=0)

        error = translate_error(exc_info.value, "ignored", GCalendarServiceError)

        assert isinstance(error, GCalendarServiceError)
        assert error.code == ErrorCode.VALIDATION_ERROR
        assert error.message.startswith("Invalid input parameters: count:")

    @pytest.mark.parametrize(
        ("status_code", "code"),
        [
            (401, ErrorCode.AUTHENTICATION_FAILED),
            (403, ErrorCode.PERMISSION_DENIED),
            (429, ErrorCode.RATE_LIMIT_EXCEEDED),
        ],
    )
    def test_should_translate_known_statuses(self, status_code: int, code: ErrorCode) -> None:
        """Verify auth, permission and throttling statuses map to fixed codes."""
        error = translate_error(make_status_error(status_code), "Failed", GmailServiceError)

        assert error.code == code
        assert error.status_code == status_code

    def test_should_use_not_found_mapping_for_404(self) -> None:
        """Verify the caller-supplied 404 mapping is applied."""
        error = translate_error(
            make_status_error(404),
            "Failed",
            GmailServiceError,
            not_found=(ErrorCode.EMAIL_NOT_FOUND, "Email with ID m1 not found"),
        )

        assert error.code == ErrorCode.EMAIL_NOT_FOUND
        assert error.message == "Email with ID m1 not found"
        assert error.status_code == 404

    def test_should_report_404_as_api_error_without_mapping(self) -> None:
        """Verify 404 falls back to API_ERROR when no mapping is given."""
        error = translate_error(
            make_status_error(404, {"error": {"message": "Requested entity was not found."}}),
            "Failed to fetch email list",
            GmailServiceError,
        )

        assert error.code == ErrorCode.API_ERROR
        assert error.message == "Failed to fetch email list: Requested entity was not found."
        assert error.status_code == 404

    def test_should_wrap_unknown_errors_as_api_error(self) -> None:
        """Verify arbitrary exceptions become API_ERROR with the original text."""
        error = translate_error(RuntimeError("socket closed"), "Failed to list events")

        assert type(error) is ServiceError
        assert error.code == ErrorCode.API_ERROR
        assert error.message == "Failed to list events: socket closed"
        assert error.status_code is None


@pytest.mark.unit
class TestUpstreamMessage:
    """Tests for upstream_message()."""

    def test_should_read_nested_error_message(self) -> None:
        """Verify error.message is extracted."""
        response = httpx.Response(400, json={"error": {"code": 400, "message": "Invalid query"}})
        assert upstream_message(response) == "Invalid query"

    def test_should_read_oauth_error_description(self) -> None:
        """Verify OAuth-style string errors use error_description."""
        response = httpx.Response(
            400, json={"error": "invalid_token", "error_description": "Invalid Value"}
        )
        assert upstream_message(response) == "Invalid Value"

    def test_should_return_none_for_non_json(self) -> None:
        """Verify non-JSON bodies yield None."""
        assert upstream_message(httpx.Response(502, text="Bad Gateway")) is None


@pytest.mark.unit
def test_should_format_validation_error_on_one_line() -> None:
    """Verify every problem is listed with its location."""
    with pytest.raises(ValidationError) as exc_info:
        _Sample.model_validate({"count": "many"})

    message = format_validation_error(exc_info.value)

    assert message.startswith("Invalid input parameters: count: ")
    assert "\n" not in message
