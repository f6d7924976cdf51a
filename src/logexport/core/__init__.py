"""
Core abstractions for the export pipeline.
"""

from .models import SearchHit, Page, ExportMetrics, ExportStatus
from .source import RecordSource
from .channel import RecordChannel
from .counters import AtomicCounter, ExportCounters
from .exceptions import (
    ExportError, FatalSetupError, TransportError,
    RecordFieldError, FileIOError, ChannelClosedError,
)

__all__ = [
    "SearchHit",
    "Page",
    "ExportMetrics",
    "ExportStatus",
    "RecordSource",
    "RecordChannel",
    "AtomicCounter",
    "ExportCounters",
    "ExportError",
    "FatalSetupError",
    "TransportError",
    "RecordFieldError",
    "FileIOError",
    "ChannelClosedError",
]
