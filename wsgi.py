"""Web Server Gateway Interface entry-point."""

import os
from typing import Optional

from flask import Flask

from tidalwav.factory import create_web_app

__app__: Optional[Flask] = None


def application(environ, start_response):
    """WSGI application factory."""
    global __app__
    for key, value in environ.items():
        if key == 'SERVER_NAME' or not isinstance(value, str):
            continue
        os.environ[key] = str(value)
        if __app__ is not None and key in __app__.config:
            __app__.config[key] = value
    if __app__ is None:
        __app__ = create_web_app()
    return __app__(environ, start_response)
