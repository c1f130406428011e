"""Exceptions raised by the submission core."""


class InvalidMetadata(ValueError):
    """The declared track metadata is not a list of track objects."""


class NoSuchSubmission(Exception):
    """An operation was performed on/for a submission that does not exist."""


class AssetsMissing(Exception):
    """The asset directory of a submission is not on disk."""


class SaveError(RuntimeError):
    """Failed to persist submission records."""


class SecurityError(RuntimeError):
    """Something suspicious happened."""


class ConfigurationError(RuntimeError):
    """A required parameter is invalid/missing from the application config."""
