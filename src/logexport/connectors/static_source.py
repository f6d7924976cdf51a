"""
Static record source for testing and dry runs.

Serves a fixed list of pages from memory without any network access.
Errors can be injected at a given page to exercise the failure paths
of the pipeline.
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from ..core.exceptions import FatalSetupError, TransportError
from ..core.models import Page, SearchHit
from ..core.source import RecordSource

logger = logging.getLogger(__name__)


class StaticRecordSource(RecordSource):
    """
    Deterministic in-memory record source.
    
    Features:
    - Pages served in order, then an empty page
    - Optional TransportError at a given page index (0-based)
    - Optional count failure or count override
    - Call history for assertions
    """
    
    def __init__(
        self,
        pages: Iterable[Iterable[SearchHit]],
        fail_at_page: Optional[int] = None,
        fail_count: bool = False,
        estimated_total: Optional[int] = None,
    ):
        """
        Initialize the static source.
        
        Args:
            pages: Pages of hits to serve
            fail_at_page: Index of the next_page call that raises TransportError
            fail_count: Whether count() raises FatalSetupError
            estimated_total: Value returned by count() (default: total hits)
        """
        self.pages: List[List[SearchHit]] = [list(page) for page in pages]
        self.fail_at_page = fail_at_page
        self.fail_count = fail_count
        self.estimated_total = estimated_total
        
        self.page_calls = 0
        self.count_calls = 0
        self.closed = False
        self._failed = False
        
        logger.debug(f"StaticRecordSource initialized with {len(self.pages)} pages")
    
    @classmethod
    def from_documents(
        cls,
        documents: Iterable[Dict[str, Any]],
        page_size: int = 1000,
        **kwargs,
    ) -> "StaticRecordSource":
        """
        Build a source from plain documents, encoded as JSON payloads.
        
        Document IDs are assigned sequentially (doc-0, doc-1, ...).
        """
        hits = [
            SearchHit(doc_id=f"doc-{i}", source=json.dumps(doc).encode("utf-8"))
            for i, doc in enumerate(documents)
        ]
        pages = [hits[i:i + page_size] for i in range(0, len(hits), page_size)]
        return cls(pages, **kwargs)
    
    @property
    def total_hits(self) -> int:
        return sum(len(page) for page in self.pages)
    
    def count(self) -> int:
        self.count_calls += 1
        if self.fail_count:
            raise FatalSetupError("Error estimating total hits: simulated count failure")
        if self.estimated_total is not None:
            return self.estimated_total
        return self.total_hits
    
    def next_page(self) -> Page:
        call_index = self.page_calls
        self.page_calls += 1
        
        if self._failed:
            raise TransportError("Error scrolling: source already failed")
        if self.fail_at_page is not None and call_index == self.fail_at_page:
            self._failed = True
            raise TransportError(f"Error scrolling: simulated failure at page {call_index}")
        if call_index >= len(self.pages):
            return []
        return list(self.pages[call_index])
    
    def close(self) -> None:
        self.closed = True
    
    def get_name(self) -> str:
        return "static"
