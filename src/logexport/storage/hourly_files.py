"""
Append-only writer for hourly-partitioned text files.
"""

import logging
from pathlib import Path

from ..core.exceptions import FileIOError


logger = logging.getLogger(__name__)


class HourlyFileWriter:
    """
    Appends lines to one text file per hour bucket.
    
    Files are named: {base_dir}/{YYYY-MM-DD-HH}.txt
    
    Every append opens the file in append-create mode, writes a single
    line and closes it again, so no handle outlives one call and writers
    on different threads need no coordination beyond the filesystem's
    append semantics.
    """

    def __init__(
        self,
        base_dir: Path,
        suffix: str = ".txt",
        encoding: str = "utf-8",
        errors: str = "replace",
    ):
        """
        Initialize the hourly file writer.
        
        Args:
            base_dir: Output directory; must already exist
            suffix: File name suffix
            encoding: Text encoding of the output files
            errors: Encoding error handler; characters the encoding cannot
                represent (such as lone surrogates) are replaced, not raised
        """
        self.base_dir = Path(base_dir)
        self.suffix = suffix
        self.encoding = encoding
        self.errors = errors

    def path_for(self, bucket: str) -> Path:
        """Return the output file path for an hour bucket."""
        return self.base_dir / f"{bucket}{self.suffix}"

    def append(self, bucket: str, message: str) -> Path:
        """
        Append a message as one line to the bucket's file.
        
        Args:
            bucket: Hour bucket (YYYY-MM-DD-HH)
            message: Line content, without terminator
            
        Returns:
            Path of the file written
            
        Raises:
            FileIOError: If opening, writing or closing the file fails
        """
        file_path = self.path_for(bucket)
        try:
            with open(file_path, "a", encoding=self.encoding, errors=self.errors) as f:
                f.write(f"{message}\n")
        except OSError as e:
            raise FileIOError(f"Error writing to file {file_path}: {e}", path=str(file_path)) from e
        
        logger.debug(f"Appended line to: {file_path}")
        return file_path

    def get_name(self) -> str:
        """Return the storage writer name."""
        return "hourly_files"
