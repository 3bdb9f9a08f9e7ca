"""Database models for recorded runs."""

from .base import NAMING_CONVENTION, Base, UTCDateTime, metadata
from .run import RemoteRun

__all__ = ["Base", "metadata", "NAMING_CONVENTION", "RemoteRun", "UTCDateTime"]
