"""
Runner module for orchestrating the export pipeline.
"""

from .writer_pool import WriterPool
from .dispatcher import Dispatcher
from .progress import ProgressSupervisor
from .export_runner import ExportRunner, RunnerConfig

__all__ = ["WriterPool", "Dispatcher", "ProgressSupervisor", "ExportRunner", "RunnerConfig"]
