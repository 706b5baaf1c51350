"""Database client and query helpers."""

from facelift.db.query_executor import timed_query

__all__ = ["timed_query"]
