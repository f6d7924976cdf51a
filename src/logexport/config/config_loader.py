"""
Configuration loader for the export pipeline.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    "elasticsearch": {
        "url": "https://localhost:9200",
        "api_key": None,
        "index": "logs-*",
        "request_timeout": 60,
        "verify_certs": True,
    },
    "query": {
        "days_back": 1,
        "domain": None,
        "timestamp_field": "@timestamp",
        "domain_field": "url.domain",
        "message_field": "message",
    },
    "scroll": {
        "page_size": 1000,
        "keepalive": "5m",
    },
    "runner": {
        "num_workers": 4,
        "queue_size": None,  # None = one slot per worker
        "progress_interval": 10.0,
    },
    "output": {
        "dir": "logdir",
    },
}

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    "LOGEXPORT_ES_URL": ("elasticsearch", "url"),
    "LOGEXPORT_ES_API_KEY": ("elasticsearch", "api_key"),
    "LOGEXPORT_ES_INDEX": ("elasticsearch", "index"),
    "LOGEXPORT_DOMAIN": ("query", "domain"),
    "LOGEXPORT_OUTPUT_DIR": ("output", "dir"),
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ExportConfig:
    """
    Configuration for the exporter.
    
    Values come from the built-in defaults, overlaid by an optional YAML
    file, overlaid by environment variables. CLI flags are applied last
    through ``set``.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration.
        
        Args:
            config_path: Path to YAML config file (optional)
        """
        self.config_path = Path(config_path) if config_path else None
        loaded = self._load_config() if self.config_path else {}
        self.config = _merge(DEFAULT_CONFIG, loaded)
        self._apply_env_overrides()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")
        
        logger.info(f"Loading config from: {self.config_path}")
        
        with open(self.config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
        
        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ValueError(f"Config file must contain a mapping: {self.config_path}")
        return config

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides to loaded config."""
        for env_name, (section, key) in ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value:
                self.config.setdefault(section, {})[key] = value

    def get_elasticsearch_config(self) -> Dict[str, Any]:
        """Get search cluster connection configuration."""
        return self.config.get("elasticsearch", {})

    def get_query_config(self) -> Dict[str, Any]:
        """Get query and field-name configuration."""
        return self.config.get("query", {})

    def get_scroll_config(self) -> Dict[str, Any]:
        """Get scroll pagination configuration."""
        return self.config.get("scroll", {})

    def get_runner_config(self) -> Dict[str, Any]:
        """Get runner configuration."""
        return self.config.get("runner", {})

    def get_output_dir(self) -> Path:
        """Get the output directory."""
        return Path(self.get("output.dir", "logdir"))

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dotted key."""
        keys = key.split(".")
        value = self.config
        
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default
        
        return value if value is not None else default

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value by dotted key; None values are ignored."""
        if value is None:
            return
        keys = key.split(".")
        target = self.config
        for k in keys[:-1]:
            target = target.setdefault(k, {})
        target[keys[-1]] = value
