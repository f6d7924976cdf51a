"""
Record source interface for paginated reads from a search index.
"""

from abc import ABC, abstractmethod

from .models import Page


class RecordSource(ABC):
    """
    Abstract base class for record sources.
    
    A record source estimates how many records match its query and then
    produces a lazy, finite, non-restartable sequence of pages.
    """

    @abstractmethod
    def count(self) -> int:
        """
        Estimate the number of matching records.
        
        Returns:
            Estimated total
            
        Raises:
            FatalSetupError if the count query fails
        """
        pass

    @abstractmethod
    def next_page(self) -> Page:
        """
        Fetch the next page of hits.
        
        Returns:
            A non-empty page, or an empty page once the source is exhausted
            
        Raises:
            TransportError if the page cannot be fetched; the source stops
            permanently after the first error
        """
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Return the source name/identifier."""
        pass

    def close(self) -> None:
        """Release any remote or local resources. Optional."""
        pass
