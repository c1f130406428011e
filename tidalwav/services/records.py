"""
Record store for submissions.

Dispatches to the backend named by the ``RECORD_STORE`` config parameter:

- ``datafile`` (default): :mod:`tidalwav.services.datafile`, a single JSON
  document;
- ``database``: :mod:`tidalwav.services.database`, one row per submission.

Both offer the same operations, so callers never need to know which one is
in use.
"""

from types import ModuleType
from typing import Iterable, List

from flask import current_app

from ..domain import Submission
from ..exceptions import ConfigurationError
from . import database, datafile

BACKENDS = {'datafile': datafile, 'database': database}


def get_backend() -> ModuleType:
    """Get the backend module selected in the application config."""
    name = current_app.config.get('RECORD_STORE', 'datafile')
    try:
        return BACKENDS[name]
    except KeyError as e:
        raise ConfigurationError(f'Unknown record store: {name}') from e


def is_available() -> bool:
    return get_backend().is_available()


def load_all() -> List[Submission]:
    """Load every submission record, in insertion order."""
    return get_backend().load_all()


def save_all(submissions: Iterable[Submission]) -> None:
    """Replace all stored records."""
    get_backend().save_all(submissions)


def get_submission(submission_id: str) -> Submission:
    return get_backend().get_submission(submission_id)


def add_submission(submission: Submission) -> Submission:
    return get_backend().add_submission(submission)


def update_submission(submission: Submission) -> Submission:
    return get_backend().update_submission(submission)
