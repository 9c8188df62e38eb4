import json
import logging

import httpx

from ..error_handling import ModelInvocationError

logger = logging.getLogger(__name__)


def handle_http_error(e: httpx.HTTPError) -> ModelInvocationError:
    """Convert an httpx failure into a ModelInvocationError with detailed logging"""
    error_msg = str(e) or type(e).__name__
    status_code = None
    response_body = None

    if isinstance(e, httpx.HTTPStatusError):
        status_code = e.response.status_code
        response_body = e.response.text
        try:
            error_details = json.loads(response_body)
            error_msg = f"Gemini API Error: {error_details.get('error', {}).get('message', error_msg)}"
        except (ValueError, AttributeError):
            error_msg = f"Gemini API Error: {e.response.reason_phrase} - {response_body}"
    elif isinstance(e, httpx.TimeoutException):
        error_msg = f"Gemini API timeout: {error_msg}"
    else:
        error_msg = f"Request Error: {error_msg}"

    logger.error(f"Gemini API Error (Status: {status_code}): {error_msg}")
    if response_body:
        logger.error(f"Response body: {response_body}")

    error = ModelInvocationError(error_msg, status_code, response_body)
    error.__cause__ = e
    return error
