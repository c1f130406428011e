"""Controller for album submission (ingestion)."""

import json
import re
from http import HTTPStatus
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from werkzeug.datastructures import FileStorage, MultiDict
from werkzeug.exceptions import BadRequest, InternalServerError

from .. import logging, schema
from ..domain import Submission, Track
from ..exceptions import InvalidMetadata, SaveError
from ..matching import match_uploads
from ..serializer import track_from_dict
from ..services import records, uploads

logger = logging.getLogger(__name__)

Response = Tuple[Dict[str, Any], HTTPStatus, Dict[str, str]]

validate_tracks = schema.load('tracks.json')

ACCEPTED = 'Submission received. Admin will review.'


def create_submission(form: MultiDict, files: MultiDict) -> Response:
    """
    Accept a new album submission.

    Parameters
    ----------
    form : :class:`MultiDict`
        Form fields: ``albumName``, ``releaseDate``, ``platforms``
        (comma-separated), ``numSongs``, and ``tracks`` (JSON list of track
        metadata).
    files : :class:`MultiDict`
        File fields: ``cover`` (one image) and ``trackFiles`` (audio, many).

    Returns
    -------
    dict
        Data for the response body, including the new submission id.
    int
        HTTP response status code.
    dict
        Headers to add to the response.

    Raises
    ------
    :class:`BadRequest`
        If the track metadata is invalid. Nothing has been stored.
    :class:`InternalServerError`
        If storing the submission fails. Files already written are left in
        place.

    """
    submission_id = str(uuid4())
    try:
        declared = parse_tracks(form.get('tracks'))
    except InvalidMetadata as e:
        logger.info('Rejected submission metadata: %s', e)
        raise BadRequest('Invalid tracks metadata') from e

    try:
        submission = ingest(submission_id, form, declared,
                            _present(files.get('cover')),
                            [f for f in files.getlist('trackFiles')
                             if _present(f)])
    except SaveError as e:
        logger.error('Could not save submission %s: %s', submission_id, e)
        raise InternalServerError('Internal server error') from e
    except Exception as e:
        logger.exception('Unexpected error ingesting %s', submission_id)
        raise InternalServerError('Internal server error') from e

    logger.info('Accepted submission %s with %i tracks', submission_id,
                len(submission.tracks))
    return {'ok': True, 'id': submission_id, 'message': ACCEPTED}, \
        HTTPStatus.OK, {}


def ingest(submission_id: str, form: MultiDict,
           declared: List[Dict[str, Any]], cover: Optional[FileStorage],
           audio: List[FileStorage]) -> Submission:
    """
    Store the assets and record of a new submission.

    Each declared track is matched to one of the ``audio`` uploads (see
    :mod:`tidalwav.matching`). Every upload is stored, matched or not.
    """
    tracks: List[Track] = [track_from_dict(datum, position)
                           for position, datum in enumerate(declared)]
    matches = match_uploads([track.file_name for track in tracks], audio)

    cover_path = uploads.place(submission_id, cover) if cover else None
    audio_paths = [uploads.place(submission_id, f) for f in audio]

    for track, match in zip(tracks, matches):
        track.file, track.original_file_name = None, None
        if match is not None:
            track.file = audio_paths[match]
            track.original_file_name = audio[match].filename

    submission = Submission(
        submission_id=submission_id,
        album_name=(form.get('albumName') or '').strip(),
        release_date=form.get('releaseDate') or '',
        platforms=parse_platforms(form.get('platforms')),
        num_songs=parse_int(form.get('numSongs')),
        cover=cover_path,
        tracks=tracks,
    )
    records.add_submission(submission)
    return submission


def parse_tracks(raw: Optional[str]) -> List[Dict[str, Any]]:
    """
    Parse the declared track metadata.

    Raises
    ------
    :class:`InvalidMetadata`
        If ``raw`` is not a JSON list of track objects.

    """
    try:
        declared = json.loads(raw or '[]')
    except ValueError as e:
        raise InvalidMetadata(f'Not JSON: {e}') from e
    try:
        validate_tracks(declared)
    except schema.ValidationError as e:
        # A summary of the exception is on the first line of the repr.
        raise InvalidMetadata(str(e).split('\n')[0]) from e
    return declared


def parse_platforms(raw: Optional[str]) -> List[str]:
    """Split a comma-separated platform list, dropping blanks."""
    return [p.strip() for p in (raw or '').split(',') if p.strip()]


def parse_int(raw: Optional[str]) -> int:
    """Read the leading integer of ``raw``; anything else is 0."""
    match = re.match(r'\s*([+-]?\d+)', raw or '')
    return int(match.group(1)) if match else 0


def _present(upload: Optional[FileStorage]) -> Optional[FileStorage]:
    # Browsers send empty file inputs as parts with no filename.
    if upload is None or not upload.filename:
        return None
    return upload
