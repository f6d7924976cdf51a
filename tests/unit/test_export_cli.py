"""
Unit tests for the export CLI.

The Elasticsearch source is replaced by a static source; no cluster is required.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from logexport import export_cli
from logexport.config import ExportConfig
from logexport.connectors.static_source import StaticRecordSource
from logexport.core.exceptions import FatalSetupError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove exporter environment variables for every test."""
    for name in (
        "LOGEXPORT_ES_URL", "LOGEXPORT_ES_API_KEY", "LOGEXPORT_ES_INDEX",
        "LOGEXPORT_DOMAIN", "LOGEXPORT_OUTPUT_DIR",
    ):
        monkeypatch.delenv(name, raising=False)


class TestArgs:
    """Tests for argument parsing and overrides."""

    def test_overrides(self, tmp_path):
        """Test CLI flags override configuration values."""
        args = export_cli.parse_args([
            "--days", "3",
            "--url", "http://es:9200",
            "--index", "nginx-*",
            "--domain", "example.com",
            "--workers", "8",
            "--output-dir", str(tmp_path / "out"),
            "--page-size", "500",
            "--progress-interval", "2.5",
        ])
        config = ExportConfig()

        export_cli.apply_cli_overrides(config, args)

        assert config.get("query.days_back") == 3
        assert config.get("elasticsearch.url") == "http://es:9200"
        assert config.get("elasticsearch.index") == "nginx-*"
        assert config.get("query.domain") == "example.com"
        assert config.get("runner.num_workers") == 8
        assert config.get("scroll.page_size") == 500
        assert config.get("runner.progress_interval") == 2.5
        assert config.get_output_dir() == tmp_path / "out"

    def test_unset_flags_keep_config(self):
        """Test absent flags leave configuration untouched."""
        config = ExportConfig()

        export_cli.apply_cli_overrides(config, export_cli.parse_args([]))

        assert config.get("runner.num_workers") == 4
        assert config.get("elasticsearch.api_key") is None

    def test_build_source(self):
        """Test the source is built from configuration."""
        config = ExportConfig()
        config.set("elasticsearch.url", "http://es:9200")
        config.set("elasticsearch.api_key", "k")
        config.set("query.domain", "example.com")
        config.set("scroll.page_size", 10)

        source = export_cli.build_source(config)

        assert source.url == "http://es:9200"
        assert source.page_size == 10
        assert source.session.headers["Authorization"] == "ApiKey k"
        assert {"term": {"url.domain": "example.com"}} in source.query["bool"]["filter"]
        source.close()

    def test_build_runner_config(self):
        """Test runner configuration mapping."""
        config = ExportConfig()
        config.set("runner.num_workers", 2)
        config.set("query.message_field", "log")

        runner_config = export_cli.build_runner_config(config)

        assert runner_config.num_workers == 2
        assert runner_config.message_field == "log"
        assert runner_config.timestamp_field == "@timestamp"

    def test_build_runner_config_queue_size(self):
        """Test a queue size read as text is converted to an integer."""
        config = ExportConfig()
        assert export_cli.build_runner_config(config).queue_size is None

        config.set("runner.queue_size", "16")

        assert export_cli.build_runner_config(config).queue_size == 16

    def test_ensure_output_dir(self, tmp_path):
        """Test nested output directories are created."""
        path = export_cli.ensure_output_dir(tmp_path / "a" / "b")

        assert path.is_dir()

    def test_ensure_output_dir_failure(self, tmp_path):
        """Test directory creation failures are fatal."""
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")

        with pytest.raises(FatalSetupError):
            export_cli.ensure_output_dir(blocker / "sub")


class TestMain:
    """Tests for the main entry point."""

    def test_successful_run(self, tmp_path, sample_hits):
        """Test a full run exits 0 and writes hourly files."""
        out = tmp_path / "logdir"
        source = StaticRecordSource([sample_hits])

        with patch.object(export_cli, "build_source", return_value=source):
            code = export_cli.main(["--output-dir", str(out), "--progress-interval", "0.05"])

        assert code == 0
        assert sorted(p.name for p in out.iterdir()) == ["2024-01-01-10.txt", "2024-01-01-11.txt"]

    def test_transport_error_still_exits_zero(self, tmp_path, sample_hits):
        """Test a mid-run transport error is not a fatal exit."""
        out = tmp_path / "logdir"
        source = StaticRecordSource([sample_hits], fail_at_page=1, estimated_total=100)

        with patch.object(export_cli, "build_source", return_value=source):
            code = export_cli.main(["--output-dir", str(out), "--progress-interval", "0.05"])

        assert code == 0

    def test_count_failure_exits_nonzero(self, tmp_path, sample_hits):
        """Test a failing count query exits 1 without output."""
        out = tmp_path / "logdir"
        source = StaticRecordSource([sample_hits], fail_count=True)

        with patch.object(export_cli, "build_source", return_value=source):
            code = export_cli.main(["--output-dir", str(out)])

        assert code == 1
        assert list(out.iterdir()) == []

    def test_invalid_url_exits_nonzero(self, tmp_path):
        """Test client construction failures exit 1."""
        code = export_cli.main(["--url", "not-a-url", "--output-dir", str(tmp_path / "out")])

        assert code == 1

    def test_directory_failure_exits_nonzero(self, tmp_path):
        """Test directory creation failures exit 1."""
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")

        code = export_cli.main(["--output-dir", str(blocker / "sub")])

        assert code == 1

    def test_missing_config_exits_nonzero(self, tmp_path):
        """Test a missing config file exits 1."""
        assert export_cli.main(["--config", str(tmp_path / "missing.yaml")]) == 1

    def test_count_only(self, tmp_path, sample_hits):
        """Test --count-only performs the estimate and writes nothing."""
        out = tmp_path / "logdir"
        source = StaticRecordSource([sample_hits])

        with patch.object(export_cli, "build_source", return_value=source):
            code = export_cli.main(["--count-only", "--output-dir", str(out)])

        assert code == 0
        assert source.count_calls == 1
        assert source.page_calls == 0
        assert source.closed
        assert not out.exists()
