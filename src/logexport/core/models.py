"""
Core data models for the export pipeline.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
import uuid


class ExportStatus(str, Enum):
    """Status of an export run."""
    RUNNING = "running"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"
    FAILED = "failed"


@dataclass
class SearchHit:
    """
    A single raw document returned by the search index.
    
    Attributes:
        doc_id: Document identifier, used in log lines
        source: Raw payload; JSON bytes/str, or an already decoded mapping
        index: Concrete index the document came from (optional)
    """
    doc_id: str
    source: Any
    index: Optional[str] = None


# One pagination step. An empty page means the source is exhausted.
Page = List[SearchHit]


@dataclass
class ExportMetrics:
    """Aggregate metrics for an export run."""
    run_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    ended_at: Optional[datetime] = None
    estimated_total: int = 0
    pages_fetched: int = 0
    dispatched: int = 0
    processed: int = 0
    written: int = 0
    skipped: int = 0
    failed: int = 0
    transport_error: Optional[str] = None
    status: ExportStatus = ExportStatus.RUNNING
    
    # Per-worker processed counts
    worker_metrics: Dict[str, int] = field(default_factory=dict)

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.ended_at is None:
            return None
        return (self.ended_at - self.started_at).total_seconds()
