"""
Configuration for the export pipeline.
"""

from .config_loader import ExportConfig, DEFAULT_CONFIG

__all__ = ["ExportConfig", "DEFAULT_CONFIG"]
