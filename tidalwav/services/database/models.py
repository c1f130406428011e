"""ORM classes for the submission store."""

from sqlalchemy import Column, DateTime, Integer, String, Text
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


class Submission(db.Model):  # type: ignore
    """One submission record."""

    __tablename__ = 'tidalwav_submission'

    sequence = Column(Integer, primary_key=True, autoincrement=True)
    """Insertion order; records are listed in this order."""

    submission_id = Column(String(36), unique=True, nullable=False,
                           index=True)
    status = Column(String(16), nullable=False, index=True)
    created = Column(DateTime(timezone=True))
    data = Column(Text, nullable=False)
    """The record, in the same JSON form as the flat-file store."""
