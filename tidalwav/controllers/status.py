"""Service status controller."""

from http import HTTPStatus
from typing import Any, Dict, Tuple

from werkzeug.exceptions import ServiceUnavailable

from ..services import records, uploads


def service_status() -> Tuple[Dict[str, Any], HTTPStatus, Dict[str, str]]:
    """Handle requests for the status of this service."""
    if not records.is_available():
        raise ServiceUnavailable('Cannot access submission records')
    if not uploads.is_available():
        raise ServiceUnavailable('Cannot access uploads')
    return {'ok': True}, HTTPStatus.OK, {}
