"""
tableseed - Table Seed Files

Save and load the rows of a database table as compressed, human-readable
seed files, to replay data from a remote or legacy database locally during
development and testing.
"""

from tableseed.backends import DirectBackend, SeedBackend, StagingBackend
from tableseed.codec import decode_archive, decode_comment, encode_archive
from tableseed.config import Config
from tableseed.models import DumpOptions, LoadOptions, TableDescriptor
from tableseed.seeds import SeedManager, dump, load, read_archive

__version__ = "0.1.0"

__all__ = [
    "SeedManager",
    "dump",
    "load",
    "read_archive",
    "DumpOptions",
    "LoadOptions",
    "TableDescriptor",
    "Config",
    "SeedBackend",
    "DirectBackend",
    "StagingBackend",
    "encode_archive",
    "decode_archive",
    "decode_comment",
]
