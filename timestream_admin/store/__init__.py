"""Remote store operations for timestream_admin."""

from . import databases
from . import tables
from . import records
from . import pagination

__all__ = [
    "databases",
    "tables",
    "records",
    "pagination",
]
