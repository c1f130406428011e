"""Core data structures for album submissions."""

from .submission import Submission, Track
