"""Data structures for album submissions."""

from typing import Any, Dict, Optional, List
from datetime import datetime

from dataclasses import dataclass, field

from .util import get_tzaware_utc_now, list_coerce, coerce_datetime, \
    coerce_bool, coerce_text


@dataclass
class Track:
    """One song of a submitted album."""

    index: int
    """1-based position as declared by the client; not re-validated."""

    title: str = field(default_factory=str)
    featured: Optional[str] = field(default=None)
    """Free-text featured artists."""

    explicit: bool = field(default=False)

    file_name: Optional[str] = field(default=None)
    """Filename the client declared for this track's audio upload."""

    file: Optional[str] = field(default=None)
    """Path of the matched audio asset, relative to the uploads root."""

    original_file_name: Optional[str] = field(default=None)
    """Name of the matched upload as sent by the client."""

    extra: Dict[str, Any] = field(default_factory=dict)
    """Any other metadata the client declared, kept verbatim."""

    def __post_init__(self) -> None:
        """Normalize values that arrive as form strings or loose JSON."""
        self.explicit = coerce_bool(self.explicit)
        if isinstance(self.index, str) and self.index.strip().isdigit():
            self.index = int(self.index)
        self.title = coerce_text(self.title) or ''
        self.featured = coerce_text(self.featured)
        self.file_name = coerce_text(self.file_name)


@dataclass
class Submission:
    """
    Represents an artist's album submission.

    A submission is created once, at ingestion, with status
    :attr:`PENDING`. Review changes :attr:`status` and :attr:`admin_note`;
    nothing else is ever modified. There is no guard on transitions: an
    approved submission may be rejected later, and vice versa.
    """

    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'

    OUTCOMES = (APPROVED, REJECTED)

    submission_id: str
    """Opaque unique id; also the name of the asset directory."""

    album_name: str = field(default_factory=str)
    release_date: str = field(default_factory=str)
    platforms: List[str] = field(default_factory=list)
    num_songs: int = field(default=0)
    """Declared song count. Informational; may differ from ``len(tracks)``."""

    tracks: List[Track] = field(default_factory=list)
    cover: Optional[str] = field(default=None)
    """Path of the cover image, relative to the uploads root."""

    created: datetime = field(default_factory=get_tzaware_utc_now)
    status: str = field(default=PENDING)
    admin_note: Optional[str] = field(default=None)

    extra: Dict[str, Any] = field(default_factory=dict)
    """Stored fields this version does not know about, kept verbatim."""

    def __post_init__(self) -> None:
        """Rebuild nested tracks and timestamps from serialized data."""
        self.tracks = list_coerce(Track, self.tracks)
        self.created = coerce_datetime(self.created)

    @property
    def is_pending(self) -> bool:
        return self.status == self.PENDING

    @property
    def is_approved(self) -> bool:
        return self.status == self.APPROVED

    def review(self, outcome: str, note: Optional[str] = None) -> None:
        """
        Record a review outcome, overwriting any earlier one.

        Parameters
        ----------
        outcome : str
            One of :attr:`OUTCOMES`.
        note : str
            Optional note from the reviewer; replaces the previous note.

        Raises
        ------
        ValueError
            If ``outcome`` is not a review outcome.

        """
        if outcome not in self.OUTCOMES:
            raise ValueError(f'Not a review outcome: {outcome}')
        self.status = outcome
        self.admin_note = note or None
