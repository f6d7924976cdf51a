"""
Storage implementations for exported records.
"""

from .hourly_files import HourlyFileWriter

__all__ = ["HourlyFileWriter"]
