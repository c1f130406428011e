"""
Flat-file record store.

All submission records live in a single JSON document (``SUBMISSIONS_FILE``)
holding an array of records. Reads load the whole list; writes replace the
whole document.

A missing or unreadable document reads as an empty list. This keeps the
service up when the file is damaged, at the price of hiding the records it
held until it is repaired.

Writes go to a temporary file that is then renamed over the document, so a
failed write never leaves a truncated document behind. Read-modify-write
operations are serialized within this process; separate processes writing
the same document are not coordinated.
"""

import os
import tempfile
import threading
from typing import Iterable, List

from flask import current_app

from .. import logging, serializer
from ..domain import Submission
from ..exceptions import ConfigurationError, NoSuchSubmission, SaveError

logger = logging.getLogger(__name__)

_write_lock = threading.RLock()


def is_available() -> bool:
    """Determine whether the record document can be written."""
    path = _datafile_path()
    if os.path.exists(path):
        return os.access(path, os.W_OK)
    # The directory is created on first save; check the closest ancestor.
    directory = os.path.dirname(os.path.abspath(path))
    while not os.path.exists(directory):
        directory = os.path.dirname(directory)
    return os.access(directory, os.W_OK)


def load_all() -> List[Submission]:
    """Load every submission record, in insertion order."""
    path = _datafile_path()
    try:
        with open(path, encoding='utf-8') as f:
            return serializer.load_submissions(f.read())
    except FileNotFoundError:
        return []
    except (OSError, ValueError) as e:
        logger.warning('Could not read submission records from %s: %s',
                       path, e)
        return []


def save_all(submissions: Iterable[Submission]) -> None:
    """
    Replace the stored records with ``submissions``.

    Raises
    ------
    :class:`SaveError`
        If the document could not be written.

    """
    path = _datafile_path()
    directory = os.path.dirname(path) or '.'
    content = serializer.dumps(list(submissions), indent=2)
    try:
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.submissions-',
                                        suffix='.json')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(content)
            os.replace(tmp_path, path)
        except BaseException:
            os.unlink(tmp_path)
            raise
    except OSError as e:
        raise SaveError(f'Could not write {path}: {e}') from e


def get_submission(submission_id: str) -> Submission:
    """
    Get a single submission record.

    Raises
    ------
    :class:`NoSuchSubmission`

    """
    for submission in load_all():
        if submission.submission_id == submission_id:
            return submission
    raise NoSuchSubmission(f'No submission with id {submission_id}')


def add_submission(submission: Submission) -> Submission:
    """Append a new submission record."""
    with _write_lock:
        submissions = load_all()
        submissions.append(submission)
        save_all(submissions)
    return submission


def update_submission(submission: Submission) -> Submission:
    """
    Replace the stored record that has the id of ``submission``.

    Raises
    ------
    :class:`NoSuchSubmission`

    """
    with _write_lock:
        submissions = load_all()
        for i, existing in enumerate(submissions):
            if existing.submission_id == submission.submission_id:
                submissions[i] = submission
                break
        else:
            raise NoSuchSubmission(
                f'No submission with id {submission.submission_id}'
            )
        save_all(submissions)
    return submission


def _datafile_path() -> str:
    try:
        return current_app.config['SUBMISSIONS_FILE']
    except KeyError as e:
        raise ConfigurationError(f'Missing required config params: {e}') from e
