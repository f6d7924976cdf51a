"""
Export runner wiring the source, dispatcher, writer pool and progress
supervisor into one run.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..core.counters import ExportCounters
from ..core.models import ExportMetrics, ExportStatus
from ..core.source import RecordSource
from ..storage.hourly_files import HourlyFileWriter
from .dispatcher import Dispatcher
from .progress import ProgressSupervisor
from .writer_pool import WriterPool


logger = logging.getLogger(__name__)


@dataclass
class RunnerConfig:
    """
    Configuration for the export runner.
    
    Attributes:
        num_workers: Number of writer threads
        queue_size: Channel capacity (None = one slot per worker)
        progress_interval: Seconds between progress log lines
        timestamp_field: Document field used for the hour bucket
        message_field: Document field written to the output files
    """
    num_workers: int = 4
    queue_size: Optional[int] = None
    progress_interval: float = 10.0
    timestamp_field: str = "@timestamp"
    message_field: str = "message"


class ExportRunner:
    """
    Runs one export from a record source into hourly files.
    
    Sequence:
    1. Estimate the total with the source's count query (fatal on failure)
    2. Start the writer pool and the dispatcher thread
    3. Report progress until every writer has exited
    """
    
    def __init__(
        self,
        source: RecordSource,
        output_dir: Path,
        config: Optional[RunnerConfig] = None,
        counters: Optional[ExportCounters] = None,
    ):
        """
        Initialize the export runner.
        
        Args:
            source: Record source to drain
            output_dir: Existing directory receiving the hourly files
            config: Runner configuration (uses defaults if not provided)
            counters: Shared counters (fresh ones if not provided)
        """
        self.source = source
        self.output_dir = Path(output_dir)
        self.config = config or RunnerConfig()
        self.counters = counters or ExportCounters()
    
    def run(self, run_id: Optional[str] = None) -> ExportMetrics:
        """
        Run the export to completion.
        
        Returns:
            ExportMetrics with aggregate statistics
            
        Raises:
            FatalSetupError: If the count query fails; nothing is written
        """
        metrics = ExportMetrics(run_id=run_id or str(uuid.uuid4()))
        
        logger.info(f"Starting export run: {metrics.run_id}")
        logger.info(f"Configuration: source={self.source.get_name()}, "
                    f"workers={self.config.num_workers}, output_dir={self.output_dir}")
        
        try:
            estimated = self.source.count()
            pool = WriterPool(
                writer=HourlyFileWriter(self.output_dir),
                counters=self.counters,
                num_workers=self.config.num_workers,
                queue_size=self.config.queue_size,
                timestamp_field=self.config.timestamp_field,
                message_field=self.config.message_field,
            )
        except Exception:
            self.source.close()
            raise
        self.counters.estimated_total.set(estimated)
        metrics.estimated_total = estimated
        
        dispatcher = Dispatcher(self.source, pool, self.counters)
        supervisor = ProgressSupervisor(
            counters=self.counters,
            wait_done=pool.wait_done,
            output_dir=self.output_dir,
            interval=self.config.progress_interval,
        )
        
        pool.start()
        dispatcher.start()
        supervisor.run()
        dispatcher.join()
        pool.join()
        
        snapshot = self.counters.snapshot()
        metrics.ended_at = datetime.now(timezone.utc)
        metrics.pages_fetched = dispatcher.pages_fetched
        metrics.dispatched = snapshot["dispatched"]
        metrics.processed = snapshot["processed"]
        metrics.written = snapshot["written"]
        metrics.skipped = snapshot["skipped"]
        metrics.failed = snapshot["failed"]
        metrics.worker_metrics = dict(pool.worker_counts)
        
        if dispatcher.transport_error is not None:
            metrics.transport_error = str(dispatcher.transport_error)
            metrics.status = ExportStatus.INCOMPLETE
        elif dispatcher.error is not None:
            metrics.transport_error = str(dispatcher.error)
            metrics.status = ExportStatus.FAILED
        else:
            metrics.status = ExportStatus.COMPLETED
        
        if metrics.status != ExportStatus.COMPLETED:
            logger.warning(
                f"Export ended early: processed {metrics.processed} of "
                f"{metrics.estimated_total} estimated hits ({metrics.transport_error})"
            )
        
        logger.info(f"Run complete: {metrics.run_id}")
        logger.info(f"Metrics: processed={metrics.processed}, written={metrics.written}, "
                    f"skipped={metrics.skipped}, failed={metrics.failed}")
        
        return metrics
