"""
Dispatcher that drains a record source into the writer pool.
"""

import logging
import threading
from typing import Optional

from ..core.counters import ExportCounters
from ..core.exceptions import TransportError
from ..core.source import RecordSource
from .writer_pool import WriterPool


logger = logging.getLogger(__name__)


class Dispatcher:
    """
    Single producer feeding hits page by page into the writer pool.
    
    The dispatcher is the only party that closes the pool's channel. It
    does so exactly once, after its fetch loop has returned, whether the
    source was exhausted or failed.
    """
    
    def __init__(self, source: RecordSource, pool: WriterPool, counters: ExportCounters):
        self.source = source
        self.pool = pool
        self.counters = counters
        
        self.pages_fetched = 0
        self.transport_error: Optional[TransportError] = None
        self.error: Optional[Exception] = None
        self._thread: Optional[threading.Thread] = None
    
    def start(self) -> None:
        """Run the dispatcher on its own thread."""
        self._thread = threading.Thread(
            target=self.run,
            name="export-dispatcher",
            daemon=True,
        )
        self._thread.start()
    
    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)
    
    def run(self) -> None:
        """Fetch pages until exhaustion or a transport error, then close the channel."""
        try:
            while True:
                try:
                    page = self.source.next_page()
                except TransportError as e:
                    self.transport_error = e
                    logger.error(f"Stopped fetching after {self.pages_fetched} pages: {e}")
                    break
                
                if not page:
                    logger.info(f"Source exhausted after {self.pages_fetched} pages")
                    break
                
                self.pages_fetched += 1
                for hit in page:
                    self.pool.submit(hit)
                    self.counters.dispatched.increment()
                
                logger.debug(f"Dispatched page {self.pages_fetched} ({len(page)} hits)")
        
        except Exception as e:
            self.error = e
            logger.exception(f"Dispatcher failed: {e}")
        
        finally:
            self.pool.close()
            try:
                self.source.close()
            except Exception as e:
                logger.warning(f"Failed to close source {self.source.get_name()}: {e}")
