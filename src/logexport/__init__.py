"""
Hourly-partitioned bulk export of search index records.
"""

__version__ = "0.1.0"
