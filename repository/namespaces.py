# repository/namespaces.py
from typing import Final

# Sorted set of candidate keys scored by mtime, filled by the upstream indexer.
MTIME_INDEX: Final[str] = "mtime"

# Hash fields on each candidate record, in HMGET order.
RECORD_FIELDS: Final[tuple[str, str]] = ("mtime", "path")
