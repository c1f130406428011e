"""Request routing."""

from functools import wraps
from typing import Any, Callable

from flask import jsonify, make_response, Response
from werkzeug.exceptions import HTTPException


def json_response(func: Callable) -> Callable:
    """Generate a wrapper for routes that JSONifies the response body."""
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Response:
        r_body, r_status, r_headers = func(*args, **kwargs)
        response: Response = make_response(jsonify(r_body), r_status,
                                           r_headers)
        return response
    return wrapper


def jsonify_exception(error: HTTPException) -> Response:
    """Render exceptions as JSON."""
    exc_resp = error.get_response()
    response: Response = jsonify(error=error.description)
    response.status_code = exc_resp.status_code
    return response


def plaintext_exception(error: HTTPException) -> Response:
    """Render exceptions as plain text."""
    exc_resp = error.get_response()
    response: Response = make_response(error.description or '',
                                       exc_resp.status_code)
    response.mimetype = 'text/plain'
    return response
