"""
Logger factory for the submission service.

Use this in place of :func:`logging.getLogger` so that every module logs with
the same format and level, and so that log lines carry the id of the request
that produced them.

.. code-block:: python

   from tidalwav import logging
   logger = logging.getLogger(__name__)

"""
import logging
import os
import sys
from typing import IO, Optional

from flask import has_request_context, request

DEFAULT_FORMAT = ('application %(asctime)s - %(name)s - %(requestid)s'
                  ' - %(levelname)s: "%(message)s"')
DATE_FORMAT = '%d/%b/%Y:%H:%M:%S %z'


class RequestIDFilter(logging.Filter):
    """Attach the id of the active request (if any) to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        requestid = None
        if has_request_context():
            requestid = request.headers.get('X-Request-Id')
        record.requestid = requestid or '-'
        return True


def getLogger(name: str, fmt: Optional[str] = None,
              stream: IO[str] = sys.stderr) -> logging.Logger:
    """
    Get a logger with the service format and level.

    Parameters
    ----------
    name : str
        Usually ``__name__`` of the calling module.
    fmt : str
        Overrides :data:`DEFAULT_FORMAT`.
    stream : file-like
        Where log lines are written. Defaults to stderr.

    Returns
    -------
    :class:`logging.Logger`

    """
    logger = logging.getLogger(name)
    logger.setLevel(int(os.environ.get('LOGLEVEL', logging.INFO)))
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT,
                                               datefmt=DATE_FORMAT))
        handler.addFilter(RequestIDFilter())
        logger.addHandler(handler)
        logger.propagate = False
    return logger
