"""
Bounded blocking channel between the dispatcher and the writer pool.
"""

import logging
import queue
import threading
from typing import Optional

from .exceptions import ChannelClosedError
from .models import SearchHit


logger = logging.getLogger(__name__)

_CLOSED = object()


class RecordChannel:
    """
    Bounded FIFO of hits with close semantics.
    
    - ``send`` blocks while the channel is full (backpressure)
    - ``receive`` blocks while it is empty and returns None once the
      channel is closed and drained
    - ``close`` may be called exactly once; sending after close or
      closing twice raises ChannelClosedError
    """
    
    def __init__(self, maxsize: int = 1):
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self.maxsize = maxsize
        self._queue: "queue.Queue" = queue.Queue(maxsize=maxsize)
        self._state_lock = threading.Lock()
        self._closed = False
    
    @property
    def closed(self) -> bool:
        with self._state_lock:
            return self._closed
    
    def send(self, hit: SearchHit) -> None:
        """Enqueue a hit, blocking while the channel is full."""
        if self.closed:
            raise ChannelClosedError("send on closed channel")
        self._queue.put(hit)
    
    def receive(self) -> Optional[SearchHit]:
        """
        Dequeue the next hit.
        
        Returns:
            The next hit, or None when the channel is closed and drained
        """
        item = self._queue.get()
        if item is _CLOSED:
            # Leave the marker in place for the other consumers. The slot
            # just freed guarantees this put does not block.
            self._queue.put(item)
            return None
        return item
    
    def close(self) -> None:
        """Mark the channel closed; queued hits are still delivered."""
        with self._state_lock:
            if self._closed:
                raise ChannelClosedError("close of closed channel")
            self._closed = True
        logger.debug("Channel closed")
        self._queue.put(_CLOSED)