"""
Package a submission as a ZIP archive.

The archive is produced as a stream of byte chunks, in a single pass: each
entry is compressed a block at a time and handed to the caller as it goes,
so a download can start before the whole archive exists. Nothing is written
to disk.

Archive contents:

- ``metadata.json``: the full submission record;
- the cover image, under its base filename;
- each track's audio file, under the client's original filename, or
  ``track-<position><ext>`` when none was recorded.

Assets that are no longer on disk are left out.
"""

import os
import zipfile
from typing import Iterator, List, Optional, Set, Tuple

from .. import logging, serializer
from ..domain import Submission
from . import uploads

logger = logging.getLogger(__name__)

METADATA_ENTRY = 'metadata.json'

COPY_SIZE = 64 * 1024
"""Bytes of an asset read and compressed at a time."""

Entry = Tuple[str, str]
"""Archive name and absolute path of a file to include."""


class StreamSink:
    """
    Write-only, unseekable file-like object that buffers written bytes.

    :class:`zipfile.ZipFile` writes local headers with data descriptors when
    its target cannot seek, which is what lets us emit the archive
    incrementally.
    """

    def __init__(self) -> None:
        self._chunks: List[bytes] = []

    def write(self, data: bytes) -> int:
        self._chunks.append(bytes(data))
        return len(data)

    def flush(self) -> None:
        pass

    def drain(self) -> bytes:
        """Take everything written since the last drain."""
        data = b''.join(self._chunks)
        self._chunks = []
        return data


def asset_entries(submission: Submission) -> List[Entry]:
    """
    Get the asset files to include in the archive of ``submission``.

    Assets that cannot be resolved to a file on disk are skipped. Names that
    would collide with an earlier entry get a numeric suffix.
    """
    entries: List[Entry] = []
    taken: Set[str] = {METADATA_ENTRY}

    cover = uploads.resolve(submission.cover)
    if cover is not None:
        entries.append((_unique(os.path.basename(cover), taken), cover))
    elif submission.cover:
        logger.warning('Cover missing for %s: %s', submission.submission_id,
                       submission.cover)

    for position, track in enumerate(submission.tracks, start=1):
        path = uploads.resolve(track.file)
        if path is None:
            if track.file:
                logger.warning('Audio missing for %s: %s',
                               submission.submission_id, track.file)
            continue
        if track.original_file_name:
            name = uploads.safe_name(track.original_file_name)
        else:
            name = f'track-{position}{os.path.splitext(path)[1]}'
        entries.append((_unique(name, taken), path))
    return entries


def stream_archive(submission: Submission,
                   compresslevel: Optional[int] = 9) -> Iterator[bytes]:
    """
    Generate the ZIP archive of a submission, chunk by chunk.

    Assets are read and compressed :data:`COPY_SIZE` bytes at a time, so the
    size of any one chunk does not depend on the size of the files.

    Parameters
    ----------
    submission : :class:`.Submission`
    compresslevel : int
        Deflate level, from 0 (store) to 9 (best).

    Returns
    -------
    iterator
        Yields ``bytes``; their concatenation is the archive.

    """
    sink = StreamSink()
    with zipfile.ZipFile(sink, 'w', compression=zipfile.ZIP_DEFLATED,
                         compresslevel=compresslevel) as archive:
        archive.writestr(METADATA_ENTRY, serializer.dumps(submission, indent=2))
        yield sink.drain()
        for name, path in asset_entries(submission):
            large = os.path.getsize(path) > zipfile.ZIP64_LIMIT
            with open(path, 'rb') as source, \
                    archive.open(name, 'w', force_zip64=large) as entry:
                while True:
                    block = source.read(COPY_SIZE)
                    if not block:
                        break
                    entry.write(block)
                    yield sink.drain()
            yield sink.drain()
    yield sink.drain()


def _unique(name: str, taken: Set[str]) -> str:
    candidate, n = name, 1
    base, ext = os.path.splitext(name)
    while candidate in taken:
        n += 1
        candidate = f'{base} ({n}){ext}'
    taken.add(candidate)
    return candidate
