import httpx
import pytest

from sinta_reviewer.error_handling import InputValidationError, ModelInvocationError, ReviewerError, require_text
from sinta_reviewer.utils.api_error_handler import handle_http_error


def test_require_text_checks_positional_and_keyword():
    @require_text("text")
    def echo(text, suffix=""):
        return text + suffix

    assert echo("a", suffix="b") == "ab"
    assert echo(text="a") == "a"
    with pytest.raises(InputValidationError):
        echo("")
    with pytest.raises(InputValidationError):
        echo(text="   ")
    with pytest.raises(InputValidationError):
        echo(None)


def test_errors_share_base():
    assert issubclass(InputValidationError, ReviewerError)
    assert issubclass(ModelInvocationError, ReviewerError)


def test_handle_status_error_without_json_body():
    request = httpx.Request("POST", "https://example.test/models/x:generateContent")
    response = httpx.Response(503, text="upstream unavailable", request=request)
    error = handle_http_error(httpx.HTTPStatusError("boom", request=request, response=response))

    assert error.status_code == 503
    assert error.response_body == "upstream unavailable"
    assert "Service Unavailable" in error.message
    assert isinstance(error.__cause__, httpx.HTTPStatusError)
