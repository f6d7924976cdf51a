"""
Record sources for remote search indexes.
"""

from .elasticsearch_source import ElasticsearchSource, build_time_range_query
from .static_source import StaticRecordSource

__all__ = [
    "ElasticsearchSource",
    "build_time_range_query",
    "StaticRecordSource",
]
