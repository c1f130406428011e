"""
Storage for uploaded submission assets.

Each submission gets its own directory under ``UPLOADS_ROOT``, named by the
submission id. Uploaded files are written into it under their original
names, so ``{UPLOADS_ROOT}/{submission id}/{filename}``. Paths are recorded
in submission records relative to ``UPLOADS_ROOT``.

To use this in a Flask application, the ``UPLOADS_ROOT`` config parameter
must be set.
"""

import os
import uuid
from typing import IO, Optional

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from .. import logging
from ..exceptions import AssetsMissing, ConfigurationError, SecurityError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 4096


def is_available() -> bool:
    """Determine whether the uploads root exists."""
    return os.path.isdir(_uploads_root())


def submission_path(submission_id: str) -> str:
    """Absolute path of the asset directory for a submission."""
    _validate_submission_id(submission_id)
    return os.path.join(_uploads_root(), submission_id)


def check_assets(submission_id: str) -> str:
    """
    Get the asset directory of a submission, which must exist.

    Raises
    ------
    :class:`AssetsMissing`
        If there is no asset directory for ``submission_id``.

    """
    try:
        directory = submission_path(submission_id)
    except SecurityError as e:
        raise AssetsMissing(f'No assets for {submission_id}') from e
    if not os.path.isdir(directory):
        raise AssetsMissing(f'No assets for {submission_id}')
    return directory


def place(submission_id: str, upload: FileStorage) -> str:
    """
    Save an uploaded file in the asset directory of a submission.

    The directory is created if it does not already exist. A file with the
    same name already in the directory is overwritten.

    Parameters
    ----------
    submission_id : str
        Id of the submission that owns the file.
    upload : :class:`FileStorage`
        The uploaded file, as it came off the request.

    Returns
    -------
    str
        Path of the stored file relative to ``UPLOADS_ROOT``.

    """
    directory = submission_path(submission_id)
    os.makedirs(directory, exist_ok=True)
    filename = safe_name(upload.filename)
    _write(os.path.join(directory, filename), upload.stream)
    logger.debug('Stored %s for submission %s', filename, submission_id)
    return os.path.join(submission_id, filename)


def resolve(relative_path: Optional[str]) -> Optional[str]:
    """
    Get the absolute path of a stored asset.

    Returns ``None`` if there is no such file, or if ``relative_path`` would
    point outside of ``UPLOADS_ROOT``.
    """
    if not relative_path:
        return None
    root = os.path.realpath(_uploads_root())
    path = os.path.realpath(os.path.join(root, relative_path))
    if os.path.commonpath([root, path]) != root:
        logger.warning('Refusing asset path outside uploads: %s',
                       relative_path)
        return None
    if not os.path.isfile(path):
        return None
    return path


def safe_name(filename: Optional[str]) -> str:
    """
    Reduce a client-supplied filename to a name we can store.

    The original name is kept as-is, apart from any directory components.
    """
    name = os.path.basename((filename or '').replace('\\', '/'))
    if name in ('', '.', '..'):
        name = secure_filename(filename or '') or 'upload'
    return name


def _write(path: str, content: IO[bytes]) -> None:
    with open(path, 'wb') as f:
        while True:
            chunk = content.read(CHUNK_SIZE)
            if not chunk:
                break
            f.write(chunk)


def _uploads_root() -> str:
    try:
        return current_app.config['UPLOADS_ROOT']
    except KeyError as e:
        raise ConfigurationError(f'Missing required config params: {e}') from e


# Submission ids end up in filesystem paths. Anything that is not one of our
# generated ids is refused here, before it can get that far.
def _validate_submission_id(submission_id: str) -> None:
    try:
        valid = str(uuid.UUID(str(submission_id))) == submission_id
    except ValueError:
        valid = False
    if not valid:
        raise SecurityError('Submission ID is not a valid identifier. This is'
                            ' a security concern.')
