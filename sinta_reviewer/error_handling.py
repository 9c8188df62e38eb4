import functools
import inspect
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class ReviewerError(Exception):
    """Base class for every error raised by the reviewer core"""


class ConfigurationError(ReviewerError):
    """Required configuration (API key, profiles file) is missing or invalid"""


class InputValidationError(ReviewerError):
    """A caller-supplied argument violates a documented constraint"""


class ModelInvocationError(ReviewerError):
    def __init__(self, message: str, status_code: Optional[int] = None, response_body: Optional[str] = None):
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(self.message)


class ResponseParseError(ReviewerError):
    def __init__(self, message: str, raw_text: str = ""):
        self.message = message
        self.raw_text = raw_text
        super().__init__(self.message)


def require_text(*required_fields):
    """Reject calls where any of the named string arguments is empty or blank.

    Works for positional and keyword arguments alike, so prompt builders fail
    before anything is sent to the model.
    """
    def decorator(func):
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            bound = signature.bind_partial(*args, **kwargs)
            for field in required_fields:
                value = bound.arguments.get(field)
                if not isinstance(value, str) or not value.strip():
                    logger.warning(f"Rejected call to {func.__name__}: empty '{field}'")
                    raise InputValidationError(f"Missing required text: {field}")
            return func(*args, **kwargs)
        return wrapper
    return decorator
