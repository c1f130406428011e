"""
Database-backed record store.

Offers the same operations as :mod:`tidalwav.services.datafile`, but keeps
one row per submission, so adding or updating a record is a single atomic
upsert rather than a rewrite of every record. :func:`save_all` is kept for
compatibility and replaces all rows in one transaction.
"""

from typing import Iterable, List

from flask import Flask
from sqlalchemy.exc import SQLAlchemyError

from ... import logging, serializer
from ...domain import Submission
from ...exceptions import NoSuchSubmission, SaveError
from . import models
from .models import db

logger = logging.getLogger(__name__)


def init_app(app: Flask) -> None:
    """Register the SQLAlchemy extension to an application."""
    db.init_app(app)

    @app.teardown_request
    def teardown_request(exception):
        if exception:
            db.session.rollback()


def create_all() -> None:
    """Create all tables in the database."""
    db.create_all()


def drop_all() -> None:
    """Drop all tables in the database."""
    db.drop_all()


def is_available() -> bool:
    """Determine whether the database can be queried."""
    try:
        db.session.query(models.Submission.sequence).limit(1).all()
    except SQLAlchemyError as e:
        logger.warning('Database is not available: %s', e)
        db.session.rollback()
        return False
    return True


def load_all() -> List[Submission]:
    """Load every submission record, in insertion order."""
    try:
        rows = db.session.query(models.Submission) \
            .order_by(models.Submission.sequence) \
            .all()
        return [_to_domain(row) for row in rows]
    except (SQLAlchemyError, ValueError) as e:
        logger.warning('Could not read submission records: %s', e)
        db.session.rollback()
        return []


def save_all(submissions: Iterable[Submission]) -> None:
    """
    Replace the stored records with ``submissions``, in one transaction.

    Raises
    ------
    :class:`SaveError`

    """
    try:
        db.session.query(models.Submission).delete()
        for submission in submissions:
            db.session.add(_to_row(submission))
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise SaveError(f'Could not save submissions: {e}') from e


def get_submission(submission_id: str) -> Submission:
    """
    Get a single submission record.

    Raises
    ------
    :class:`NoSuchSubmission`

    """
    row = _get_row(submission_id)
    if row is None:
        raise NoSuchSubmission(f'No submission with id {submission_id}')
    return _to_domain(row)


def add_submission(submission: Submission) -> Submission:
    """Insert a new submission record."""
    try:
        db.session.add(_to_row(submission))
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise SaveError(f'Could not save submission: {e}') from e
    return submission


def update_submission(submission: Submission) -> Submission:
    """
    Replace the stored record that has the id of ``submission``.

    Raises
    ------
    :class:`NoSuchSubmission`
    :class:`SaveError`

    """
    row = _get_row(submission.submission_id)
    if row is None:
        raise NoSuchSubmission(
            f'No submission with id {submission.submission_id}'
        )
    row.status = submission.status
    row.data = serializer.dumps(submission)
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise SaveError(f'Could not save submission: {e}') from e
    return submission


def _get_row(submission_id: str) -> models.Submission:
    try:
        return db.session.query(models.Submission) \
            .filter(models.Submission.submission_id == submission_id) \
            .one_or_none()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise SaveError(f'Could not read submission: {e}') from e


def _to_row(submission: Submission) -> models.Submission:
    return models.Submission(submission_id=submission.submission_id,
                             status=submission.status,
                             created=submission.created,
                             data=serializer.dumps(submission))


def _to_domain(row: models.Submission) -> Submission:
    return serializer.submission_from_dict(serializer.loads(row.data))
