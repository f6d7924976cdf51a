"""
Pool of writer threads that route hits to hourly output files.

Each worker repeatedly:
- Receives a hit from the shared channel
- Decodes it and derives its hour bucket from the timestamp field
- Appends the message field as one line to the bucket's file

Bad hits and I/O failures are logged and skipped; a worker only exits
once the channel is closed and drained.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, Future
from typing import Dict, List, Optional

from ..core.channel import RecordChannel
from ..core.counters import AtomicCounter, ExportCounters
from ..core.exceptions import FileIOError, RecordFieldError
from ..core.models import SearchHit
from ..core.records import route_hit
from ..storage.hourly_files import HourlyFileWriter


logger = logging.getLogger(__name__)


class WriterPool:
    """
    Fixed-size set of consumers draining one bounded channel.
    
    Lifecycle: ``start()``, any number of ``submit()`` calls from the
    producer, one ``close()`` once the producer is done, then ``join()``.
    ``done_event`` is set when the last worker has exited.
    """
    
    def __init__(
        self,
        writer: HourlyFileWriter,
        counters: ExportCounters,
        num_workers: int = 4,
        queue_size: Optional[int] = None,
        timestamp_field: str = "@timestamp",
        message_field: str = "message",
    ):
        """
        Initialize the writer pool.
        
        Args:
            writer: Hourly file writer used by every worker
            counters: Shared counters (processed, written, skipped, failed)
            num_workers: Number of worker threads
            queue_size: Channel capacity (defaults to one slot per worker)
            timestamp_field: Document field holding the record timestamp
            message_field: Document field written as the output line
        """
        if num_workers < 1:
            raise ValueError("num_workers must be at least 1")
        
        self.writer = writer
        self.counters = counters
        self.num_workers = num_workers
        self.timestamp_field = timestamp_field
        self.message_field = message_field
        self.channel = RecordChannel(maxsize=queue_size or num_workers)
        
        self._executor: Optional[ThreadPoolExecutor] = None
        self._futures: List[Future] = []
        self._remaining = AtomicCounter(0)
        self.done_event = threading.Event()
        
        self._metrics_lock = threading.Lock()
        self.worker_counts: Dict[str, int] = {}
    
    def start(self) -> None:
        """Spawn the worker threads."""
        if self._executor is not None:
            raise RuntimeError("WriterPool already started")
        
        self._remaining.set(self.num_workers)
        self._executor = ThreadPoolExecutor(
            max_workers=self.num_workers,
            thread_name_prefix="export-writer",
        )
        for i in range(self.num_workers):
            worker_id = f"writer-{i}"
            self._futures.append(self._executor.submit(self._worker_loop, worker_id))
            logger.debug(f"Started worker: {worker_id}")
    
    def submit(self, hit: SearchHit) -> None:
        """Hand a hit to the workers, blocking while the channel is full."""
        self.channel.send(hit)
    
    def close(self) -> None:
        """
        Stop accepting hits.
        
        Workers finish everything already queued, then exit.
        """
        self.channel.close()
    
    def wait_done(self, timeout: Optional[float] = None) -> bool:
        """Wait for all workers to exit; returns False on timeout."""
        return self.done_event.wait(timeout)
    
    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the workers and shut the executor down.
        
        Returns:
            True if all workers finished within the timeout
        """
        if not self.done_event.wait(timeout):
            return False
        
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        
        for future in self._futures:
            if future.exception() is not None:
                logger.error(f"Writer worker failed with error: {future.exception()}")
        return True
    
    def _worker_loop(self, worker_id: str) -> None:
        """Receive and write hits until the channel is closed and drained."""
        processed = 0
        try:
            while True:
                hit = self.channel.receive()
                if hit is None:
                    break
                
                processed += 1
                self.counters.processed.increment()
                try:
                    self._write_hit(hit, worker_id)
                except Exception as e:
                    self.counters.failed.increment()
                    logger.exception(f"[{worker_id}] Unexpected error writing document ID {hit.doc_id}: {e}")
        finally:
            with self._metrics_lock:
                self.worker_counts[worker_id] = processed
            
            logger.info(f"[{worker_id}] Processed {processed} hits")
            
            if self._remaining.increment(-1) == 0:
                self.done_event.set()
    
    def _write_hit(self, hit: SearchHit, worker_id: str) -> None:
        """Route one hit and append it; field and I/O problems are skipped."""
        try:
            bucket, message = route_hit(hit, self.timestamp_field, self.message_field)
        except RecordFieldError as e:
            self.counters.skipped.increment()
            logger.warning(f"[{worker_id}] {e}")
            return
        
        try:
            self.writer.append(bucket, message)
        except FileIOError as e:
            self.counters.failed.increment()
            logger.error(f"[{worker_id}] {e}")
            return
        
        self.counters.written.increment()
