"""
Thread-safe counters shared between pipeline stages.
"""

import threading
from dataclasses import dataclass, field
from typing import Dict


class AtomicCounter:
    """Integer counter guarded by a lock."""
    
    def __init__(self, initial: int = 0):
        self._value = initial
        self._lock = threading.Lock()
    
    def increment(self, amount: int = 1) -> int:
        """Add to the counter and return the new value."""
        with self._lock:
            self._value += amount
            return self._value
    
    def set(self, value: int) -> None:
        with self._lock:
            self._value = value
    
    @property
    def value(self) -> int:
        with self._lock:
            return self._value
    
    def __repr__(self) -> str:
        return f"AtomicCounter({self.value})"


@dataclass
class ExportCounters:
    """
    Counters observed by the progress supervisor.
    
    Attributes:
        estimated_total: Result of the count query
        dispatched: Hits handed to the writer pool
        processed: Hits received by a consumer (written, skipped or failed)
        written: Hits appended to an output file
        skipped: Hits dropped for a field or payload problem
        failed: Hits dropped for an I/O or unexpected error
    """
    estimated_total: AtomicCounter = field(default_factory=AtomicCounter)
    dispatched: AtomicCounter = field(default_factory=AtomicCounter)
    processed: AtomicCounter = field(default_factory=AtomicCounter)
    written: AtomicCounter = field(default_factory=AtomicCounter)
    skipped: AtomicCounter = field(default_factory=AtomicCounter)
    failed: AtomicCounter = field(default_factory=AtomicCounter)
    
    def snapshot(self) -> Dict[str, int]:
        return {
            "estimated_total": self.estimated_total.value,
            "dispatched": self.dispatched.value,
            "processed": self.processed.value,
            "written": self.written.value,
            "skipped": self.skipped.value,
            "failed": self.failed.value,
        }
