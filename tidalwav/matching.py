"""
Correlate declared tracks with uploaded audio files.

The web client declares each track's ``fileName`` alongside the metadata, but
not every client does so reliably. Matching therefore happens in two passes:

1. A track whose declared ``fileName`` equals the original name of an upload
   gets that upload, regardless of upload order. Two tracks declaring the
   same name get the same upload.
2. Every track left without a file takes the upload at its own position in
   the list of uploads that no track claimed by name (kept in upload order),
   or nothing when that list is too short.

A track without a file is not an error.
"""

from typing import List, Optional, Sequence, TypeVar

from typing_extensions import Protocol


class Named(Protocol):
    """Anything with an original filename, e.g. a werkzeug ``FileStorage``."""

    filename: Optional[str]


Upload = TypeVar('Upload', bound=Named)


def find_by_name(uploads: Sequence[Upload],
                 name: Optional[str]) -> Optional[int]:
    """Index of the first upload whose original filename is ``name``."""
    if not name:
        return None
    for i, upload in enumerate(uploads):
        if upload.filename == name:
            return i
    return None


def match_uploads(declared_names: Sequence[Optional[str]],
                  uploads: Sequence[Upload]) -> List[Optional[int]]:
    """
    Pick an upload for each declared track.

    Parameters
    ----------
    declared_names : list
        The ``fileName`` declared by each track, in declared order (``None``
        where a track declared none).
    uploads : list
        Uploaded audio files, in the order they were received.

    Returns
    -------
    list
        For each declared track, the index into ``uploads`` of its file, or
        ``None`` if the track has no file.

    """
    by_name = [find_by_name(uploads, name) for name in declared_names]
    claimed = {i for i in by_name if i is not None}
    unclaimed = [i for i in range(len(uploads)) if i not in claimed]

    matches: List[Optional[int]] = []
    for position, upload_index in enumerate(by_name):
        if upload_index is None and position < len(unclaimed):
            upload_index = unclaimed[position]
        matches.append(upload_index)
    return matches
