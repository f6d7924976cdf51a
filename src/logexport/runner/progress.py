"""
Progress reporting for a running export.
"""

import logging
import time
from pathlib import Path
from typing import Callable, Optional

from ..core.counters import ExportCounters


logger = logging.getLogger(__name__)


class ProgressSupervisor:
    """
    Logs processed/estimated counts at a fixed interval until the
    completion signal fires, then logs the final summary.
    """
    
    def __init__(
        self,
        counters: ExportCounters,
        wait_done: Callable[[float], bool],
        output_dir: Path,
        interval: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            counters: Shared export counters
            wait_done: Blocks up to the given seconds; True once all writers finished
            output_dir: Directory named in the completion message
            interval: Seconds between progress lines
            clock: Monotonic clock used for elapsed time
        """
        if interval <= 0:
            raise ValueError("interval must be positive")
        
        self.counters = counters
        self.wait_done = wait_done
        self.output_dir = Path(output_dir)
        self.interval = interval
        self.clock = clock
        self.reports = 0
        self._started: Optional[float] = None
    
    def elapsed(self) -> float:
        if self._started is None:
            return 0.0
        return self.clock() - self._started
    
    def report(self) -> None:
        """Log one progress line."""
        self.reports += 1
        logger.info(
            f"Processed {self.counters.processed.value} out of "
            f"{self.counters.estimated_total.value} hits in {self.elapsed():.1f}s"
        )
    
    def run(self) -> float:
        """
        Block until the writers finish.
        
        Returns:
            Elapsed wall time in seconds
        """
        self._started = self.clock()
        
        while not self.wait_done(self.interval):
            self.report()
        
        elapsed = self.elapsed()
        snapshot = self.counters.snapshot()
        logger.info(
            f"Data has been written to hourly files in directory {self.output_dir} "
            f"(processed {snapshot['processed']} of {snapshot['estimated_total']} estimated hits: "
            f"written={snapshot['written']}, skipped={snapshot['skipped']}, "
            f"failed={snapshot['failed']}, elapsed={elapsed:.1f}s)"
        )
        return elapsed
