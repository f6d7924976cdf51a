"""
Custom exceptions for the export pipeline.
"""

from typing import Optional


class ExportError(Exception):
    """Base exception for all export errors."""
    pass


class FatalSetupError(ExportError):
    """
    Error that aborts the run before any record is processed.
    
    Raised when:
    - The output directory cannot be created
    - The search client cannot be constructed
    - The count query fails
    """
    pass


class TransportError(ExportError):
    """
    Error fetching a page from the remote source mid-run.
    
    The source stops permanently after raising this; hits already
    dispatched are still written.
    """
    
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RecordFieldError(ExportError):
    """
    A single record could not be routed to an output file.
    
    Raised when the payload cannot be decoded, or the timestamp or
    message field is missing, not a string, or unparseable.
    """
    
    def __init__(self, message: str, doc_id: Optional[str] = None, field: Optional[str] = None):
        super().__init__(message)
        self.doc_id = doc_id
        self.field = field


class FileIOError(ExportError):
    """Failure opening, writing or closing an output file."""
    
    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class ChannelClosedError(ExportError):
    """Send on a closed channel, or a second close."""
    pass
