"""Backend implementations for reading and inserting table rows."""

from tableseed.backends.base import SeedBackend
from tableseed.backends.direct import DirectBackend
from tableseed.backends.staging import StagingBackend

__all__ = ["SeedBackend", "DirectBackend", "StagingBackend"]
