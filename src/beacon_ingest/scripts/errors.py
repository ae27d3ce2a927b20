# File: beacon_ingest/scripts/errors.py
"""Error types raised by the beacon ingest pipeline.

Every error aborts the run; the CLI reports the first one and exits non-zero.
"""
from __future__ import annotations


class BeaconIngestError(Exception):
    """Base class for all pipeline failures."""


class ConfigError(BeaconIngestError):
    """Raised for a missing or malformed pipeline config."""


class FetchError(BeaconIngestError):
    """Raised when a remote resource cannot be downloaded to disk."""

    def __init__(self, url: str, cause: object):
        super().__init__(f"Failed to fetch {url}: {cause}")
        self.url = url
        self.cause = cause


class FetchTimeout(FetchError):
    """Raised when a download exceeds the configured timeout."""


class ParseError(BeaconIngestError):
    """Raised for malformed tables or rows missing required cells."""

    def __init__(self, message: str, path: str | None = None, row: int | None = None):
        where = []
        if path:
            where.append(str(path))
        if row is not None:
            where.append(f"row {row}")
        super().__init__(f"{message} ({', '.join(where)})" if where else message)
        self.path = path
        self.row = row


class IoError(BeaconIngestError):
    """Raised for local file read/write failures."""


class SerializationError(BeaconIngestError):
    """Raised when records cannot be encoded as JSON."""
