"""
Error types raised by the meta aggregation pipeline.
"""
from typing import Optional


class MetaError(Exception):
    """Base class for every error raised by ptcg_meta."""


class InvalidInput(MetaError):
    """The dataset is empty or no deck has enough games to be ranked."""


class MalformedRecord(MetaError):
    """A match record has fields that cannot be parsed."""

    def __init__(self, message: str, row: Optional[int] = None):
        self.row = row
        if row is not None:
            message = f"row {row}: {message}"
        super().__init__(message)


class ConfigurationError(MetaError):
    """Thresholds or weights are set to unusable values."""


class DataSourceError(MetaError):
    """The matchup data could not be read or fetched."""
