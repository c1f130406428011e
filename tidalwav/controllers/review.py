"""Controllers for the admin review workflow and archive download."""

import re
from http import HTTPStatus
from typing import Any, Dict, Iterator, List, Optional, Tuple

from flask import current_app
from unidecode import unidecode
from werkzeug.exceptions import NotFound, InternalServerError

from .. import logging, serializer
from ..domain import Submission
from ..exceptions import AssetsMissing, NoSuchSubmission, SaveError
from ..services import archive, records, uploads

logger = logging.getLogger(__name__)

Response = Tuple[Any, HTTPStatus, Dict[str, str]]

UNSAFE_FILENAME_CHARS = re.compile(r'[^A-Za-z0-9_.\-]')


def list_submissions() -> Response:
    """Get every submission record, in the order they were received."""
    data: List[Dict[str, Any]] = [serializer.submission_to_dict(s)
                                  for s in records.load_all()]
    return data, HTTPStatus.OK, {}


def get_submission(submission_id: str) -> Response:
    """Get a single submission record."""
    return serializer.submission_to_dict(_load(submission_id)), \
        HTTPStatus.OK, {}


def review_submission(submission_id: str, outcome: str,
                      data: Optional[Dict[str, Any]] = None) -> Response:
    """
    Approve or reject a submission.

    Any submission may be reviewed, whatever its current status; the new
    outcome and note replace the old ones.

    Parameters
    ----------
    submission_id : str
    outcome : str
        :attr:`.Submission.APPROVED` or :attr:`.Submission.REJECTED`.
    data : dict
        Request body. An optional ``note`` is stored with the outcome.

    Returns
    -------
    dict
        Data for the response body.
    int
        HTTP response status code.
    dict
        Headers to add to the response.

    """
    note = data.get('note') if isinstance(data, dict) else None
    if note is not None and not isinstance(note, str):
        note = str(note)
    submission = _load(submission_id)
    submission.review(outcome, note)
    try:
        records.update_submission(submission)
    except NoSuchSubmission as e:
        raise NotFound('Not found') from e
    except SaveError as e:
        logger.error('Could not save review of %s: %s', submission_id, e)
        raise InternalServerError('Internal server error') from e
    logger.info('Submission %s %s', submission_id, outcome)
    return {'ok': True}, HTTPStatus.OK, {}


def download_submission(submission_id: str) -> Response:
    """
    Package a submission's metadata and assets as a ZIP archive.

    Returns
    -------
    iterator
        Archive content, as a stream of ``bytes`` chunks.
    int
        HTTP response status code.
    dict
        Headers to add to the response.

    Raises
    ------
    :class:`NotFound`
        If there is no such submission, or its asset directory is missing.

    """
    submission = _load(submission_id)
    try:
        uploads.check_assets(submission.submission_id)
    except AssetsMissing as e:
        logger.warning('Asset directory missing for %s', submission_id)
        raise NotFound('Files missing') from e
    level = current_app.config.get('ARCHIVE_COMPRESSION_LEVEL', 9)
    content: Iterator[bytes] = archive.stream_archive(submission, level)
    headers = {
        'Content-Type': 'application/zip',
        'Content-Disposition':
            f'attachment; filename={archive_filename(submission)}'
    }
    return content, HTTPStatus.OK, headers


def archive_filename(submission: Submission) -> str:
    """Filename for the archive of a submission, derived from the album."""
    name = unidecode(submission.album_name or '') or submission.submission_id
    return UNSAFE_FILENAME_CHARS.sub('_', name) + '.zip'


def _load(submission_id: str) -> Submission:
    try:
        return records.get_submission(submission_id)
    except NoSuchSubmission as e:
        raise NotFound('Not found') from e
    except SaveError as e:
        logger.error('Could not load submission %s: %s', submission_id, e)
        raise InternalServerError('Internal server error') from e
