#!/usr/bin/env python3
"""
CLI entry point for the hourly log exporter.

Downloads the last N days of matching records from an Elasticsearch index
pattern and appends each record's message to an hourly text file.

Usage:
    python -m logexport.export_cli --config config/export.yaml
    python -m logexport.export_cli --days 3 --workers 8 --output-dir logdir
    python -m logexport.export_cli --config config/export.yaml --count-only
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from logexport.config import ExportConfig
from logexport.connectors import ElasticsearchSource, build_time_range_query
from logexport.core.exceptions import FatalSetupError
from logexport.runner import ExportRunner, RunnerConfig


logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    log_level = logging.DEBUG if verbose else logging.INFO
    
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def apply_cli_overrides(config: ExportConfig, args: argparse.Namespace) -> None:
    """Apply command-line flags on top of file and environment config."""
    config.set("elasticsearch.url", args.url)
    config.set("elasticsearch.api_key", args.api_key)
    config.set("elasticsearch.index", args.index)
    config.set("query.domain", args.domain)
    config.set("query.days_back", args.days)
    config.set("scroll.page_size", args.page_size)
    config.set("runner.num_workers", args.workers)
    config.set("runner.progress_interval", args.progress_interval)
    config.set("output.dir", str(args.output_dir) if args.output_dir else None)


def build_source(config: ExportConfig) -> ElasticsearchSource:
    """Build the Elasticsearch source from configuration."""
    es_config = config.get_elasticsearch_config()
    query_config = config.get_query_config()
    scroll_config = config.get_scroll_config()
    
    query = build_time_range_query(
        days_back=int(query_config.get("days_back", 1)),
        domain=query_config.get("domain"),
        timestamp_field=query_config.get("timestamp_field", "@timestamp"),
        domain_field=query_config.get("domain_field", "url.domain"),
    )
    
    return ElasticsearchSource(
        url=es_config.get("url"),
        index=es_config.get("index"),
        query=query,
        api_key=es_config.get("api_key"),
        page_size=int(scroll_config.get("page_size", 1000)),
        scroll_keepalive=scroll_config.get("keepalive", "5m"),
        timeout=int(es_config.get("request_timeout", 60)),
        verify_certs=bool(es_config.get("verify_certs", True)),
    )


def build_runner_config(config: ExportConfig) -> RunnerConfig:
    """Build the runner configuration."""
    runner_config = config.get_runner_config()
    query_config = config.get_query_config()
    queue_size = runner_config.get("queue_size")
    
    return RunnerConfig(
        num_workers=int(runner_config.get("num_workers", 4)),
        queue_size=int(queue_size) if queue_size is not None else None,
        progress_interval=float(runner_config.get("progress_interval", 10.0)),
        timestamp_field=query_config.get("timestamp_field", "@timestamp"),
        message_field=query_config.get("message_field", "message"),
    )


def ensure_output_dir(path: Path) -> Path:
    """Create the output directory if needed."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FatalSetupError(f"Error creating directory {path}: {e}") from e
    return path


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Export search index records into hourly text files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration YAML file",
    )
    
    parser.add_argument(
        "--days",
        type=int,
        help="Number of days back to download records (default: 1)",
    )
    
    parser.add_argument(
        "--url",
        help="Elasticsearch URL",
    )
    
    parser.add_argument(
        "--api-key",
        help="Elasticsearch API key (prefer LOGEXPORT_ES_API_KEY)",
    )
    
    parser.add_argument(
        "--index",
        help="Index name or pattern, may include '*'",
    )
    
    parser.add_argument(
        "--domain",
        help="Only export records whose domain field equals this value",
    )
    
    parser.add_argument(
        "--workers",
        type=int,
        help="Number of concurrent writer threads (default: 4)",
    )
    
    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Directory receiving the hourly files (default: logdir)",
    )
    
    parser.add_argument(
        "--page-size",
        type=int,
        help="Hits per scroll page (default: 1000)",
    )
    
    parser.add_argument(
        "--progress-interval",
        type=float,
        help="Seconds between progress log lines (default: 10)",
    )
    
    parser.add_argument(
        "--count-only",
        action="store_true",
        help="Log the estimated number of matching records and exit",
    )
    
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose/debug logging",
    )
    
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    
    setup_logging(verbose=args.verbose)
    
    try:
        config = ExportConfig(config_path=args.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Error loading configuration: {e}")
        return 1
    apply_cli_overrides(config, args)
    logger.info("Configuration loaded")
    
    try:
        output_dir = config.get_output_dir()
        if not args.count_only:
            ensure_output_dir(output_dir)
        
        runner_config = build_runner_config(config)
        source = build_source(config)
        
        if args.count_only:
            try:
                total = source.count()
            finally:
                source.close()
            logger.info(f"Estimated matching records: {total}")
            return 0
        
        runner = ExportRunner(
            source=source,
            output_dir=output_dir,
            config=runner_config,
        )
        metrics = runner.run()
        logger.info(f"Final metrics: status={metrics.status.value}, "
                    f"pages={metrics.pages_fetched}, processed={metrics.processed}")
        return 0
    
    except FatalSetupError as e:
        logger.error(f"Fatal error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
