"""
JSON serialization for submission records.

Records are stored and served with the wire names used by the web client
(``albumName``, ``createdAt``, ...), which differ from the attribute names of
the domain classes. The mapping lives here and nowhere else.
"""

import json
from datetime import datetime, date
from typing import Any, Dict, List, Optional, Tuple

from dataclasses import asdict

from .domain import Submission, Track

SUBMISSION_FIELDS = [
    ('submission_id', 'id'),
    ('album_name', 'albumName'),
    ('release_date', 'releaseDate'),
    ('platforms', 'platforms'),
    ('num_songs', 'numSongs'),
    ('cover', 'cover'),
    ('tracks', 'tracks'),
    ('created', 'createdAt'),
    ('status', 'status'),
    ('admin_note', 'adminNote'),
]
TRACK_FIELDS = [
    ('index', 'index'),
    ('title', 'title'),
    ('featured', 'featured'),
    ('explicit', 'explicit'),
    ('file_name', 'fileName'),
    ('file', 'file'),
    ('original_file_name', 'originalFileName'),
]


class SubmissionJSONEncoder(json.JSONEncoder):
    """Encodes domain objects in this package for serialization."""

    def default(self, obj: object) -> Any:
        """Look for domain objects and dates, and use their wire form."""
        if isinstance(obj, Submission):
            return submission_to_dict(obj)
        elif isinstance(obj, Track):
            return track_to_dict(obj)
        elif isinstance(obj, (datetime, date)):
            return obj.isoformat()
        return super(SubmissionJSONEncoder, self).default(obj)


def track_to_dict(track: Track) -> Dict[str, Any]:
    """Get the wire representation of a :class:`.Track`."""
    data = asdict(track)
    wire = dict(track.extra)
    wire.update({key: data[attr] for attr, key in TRACK_FIELDS})
    return wire


def track_from_dict(data: Dict[str, Any], position: int = 0) -> Track:
    """
    Build a :class:`.Track` from its wire representation.

    Parameters
    ----------
    data : dict
        Keys without a :class:`.Track` attribute are kept in
        :attr:`.Track.extra`.
    position : int
        0-based position of the track in its list; used as the index when
        ``data`` does not carry one.

    """
    values = {attr: data[key] for attr, key in TRACK_FIELDS if key in data}
    if values.get('index') is None:
        values['index'] = position + 1
    values['extra'] = _unknown(data, TRACK_FIELDS)
    return Track(**values)


def submission_to_dict(submission: Submission) -> Dict[str, Any]:
    """Get the wire representation of a :class:`.Submission`."""
    data: Dict[str, Any] = dict(submission.extra)
    for attr, key in SUBMISSION_FIELDS:
        value = getattr(submission, attr)
        if attr == 'tracks':
            value = [track_to_dict(track) for track in value]
        elif attr == 'created' and value is not None:
            value = value.isoformat()
        elif attr == 'platforms':
            value = list(value)
        data[key] = value
    return data


def submission_from_dict(data: Dict[str, Any]) -> Submission:
    """Build a :class:`.Submission` from its wire representation."""
    values = {attr: data[key] for attr, key in SUBMISSION_FIELDS
              if key in data}
    values['tracks'] = [track_from_dict(datum, i) for i, datum
                        in enumerate(values.get('tracks') or [])]
    if values.get('created') is None:
        values.pop('created', None)
    values['extra'] = _unknown(data, SUBMISSION_FIELDS)
    return Submission(**values)


def dumps(obj: Any, indent: Optional[int] = None) -> str:
    """Generate JSON from a Python object."""
    return json.dumps(obj, cls=SubmissionJSONEncoder, indent=indent)


def loads(data: str) -> Any:
    """Load a Python object from JSON."""
    return json.loads(data)


def load_submissions(data: str) -> List[Submission]:
    """
    Load a list of :class:`.Submission` from a JSON document.

    Raises
    ------
    ValueError
        If the document is not JSON, or is not a list of record objects.

    """
    records = loads(data)
    if not isinstance(records, list):
        raise ValueError('Expected a list of submission records')
    try:
        return [submission_from_dict(record) for record in records]
    except (TypeError, AttributeError) as e:
        raise ValueError(f'Malformed submission record: {e}') from e


def _unknown(data: Dict[str, Any], fields: List[Tuple[str, str]]) \
        -> Dict[str, Any]:
    known = {key for _, key in fields}
    return {key: value for key, value in data.items() if key not in known}
