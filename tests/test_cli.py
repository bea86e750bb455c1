"""Tests for the command-line interface."""

from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from regintel.cli import cli
from regintel.scraping.pipeline import CollectionResult


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch("regintel.cli.setup_logging"):
        yield


@pytest.fixture
def cli_db(populated_db):
    with patch("regintel.commands.records.get_db", return_value=populated_db):
        with patch("regintel.cli.get_db", return_value=populated_db):
            yield populated_db


class TestRecordCommands:
    def test_list(self, runner, cli_db):
        result = runner.invoke(cli, ["list", "-r", "EU"])
        assert result.exit_code == 0
        assert "Found 1 updates" in result.output
        assert "EU MDR Transition Extension" in result.output

    def test_list_warns_on_invalid_priority(self, runner, cli_db):
        result = runner.invoke(cli, ["list", "-p", "hgh"])
        assert "Warning: Invalid priority 'hgh'. Did you mean 'high'?" in result.output
        assert "No regulatory updates found." in result.output

    def test_list_normalizes_filters(self, runner, cli_db):
        result = runner.invoke(cli, ["list", "-p", "CRITICAL", "-t", "Recall"])
        assert result.exit_code == 0
        assert "Found 1 updates" in result.output
        assert "BfArM Recall of Infusion Pumps" in result.output

    def test_list_limit_range(self, runner, cli_db):
        assert runner.invoke(cli, ["list", "-n", "0"]).exit_code != 0

    def test_show(self, runner, cli_db):
        result = runner.invoke(cli, ["show", "1"])
        assert result.exit_code == 0
        assert "FDA Cybersecurity Guidance for Medical Devices" in result.output
        assert "https://www.fda.gov/cyber" in result.output

    def test_show_missing(self, runner, cli_db):
        result = runner.invoke(cli, ["show", "99"])
        assert result.exit_code == 1
        assert "Regulatory update not found: 99" in result.output

    def test_stats(self, runner, cli_db):
        result = runner.invoke(cli, ["stats"])
        assert result.exit_code == 0
        assert "Regulatory updates: 4" in result.output
        assert "Legal cases:        1" in result.output

    def test_evaluate(self, runner, cli_db):
        result = runner.invoke(cli, ["evaluate", "1"])
        assert result.exit_code == 0
        assert "review_level=" in result.output
        assert "Compliance issues:" in result.output
        assert "  - Missing device classification" in result.output

    def test_export(self, runner, cli_db, tmp_path):
        output = tmp_path / "out" / "case.pdf"
        result = runner.invoke(cli, ["export", "case", "1", "-o", str(output)])
        assert result.exit_code == 0
        assert output.read_bytes().startswith(b"%PDF")

    def test_export_missing(self, runner, cli_db, tmp_path):
        result = runner.invoke(cli, ["export", "article", "9", "-o", str(tmp_path / "a.pdf")])
        assert result.exit_code == 1
        assert "Article not found: 9" in result.output

    def test_export_invalid_kind(self, runner, cli_db):
        assert runner.invoke(cli, ["export", "newsletter", "1"]).exit_code == 2


class TestCollect:
    def test_collect_reports_result(self, runner):
        pipeline = MagicMock()
        pipeline.run.return_value = CollectionResult(run_id=1, sources_scraped=2, inserted=3)
        with patch("regintel.cli.get_pipeline", return_value=pipeline):
            result = runner.invoke(cli, ["collect", "--no-rss"])

        assert result.exit_code == 0
        pipeline.run.assert_called_once_with(include_rss=False, dry_run=False)

    def test_collect_lists_errors(self, runner):
        pipeline = MagicMock()
        pipeline.run.return_value = CollectionResult(errors=[f"source {i}: timeout" for i in range(7)])
        with patch("regintel.cli.get_pipeline", return_value=pipeline):
            result = runner.invoke(cli, ["collect", "--dry-run"])

        pipeline.run.assert_called_once_with(include_rss=None, dry_run=True)
        assert "source 0: timeout" in result.output
        assert "... and 2 more errors" in result.output


class TestEnhanceAndSeed:
    def test_enhance_single(self, runner, cli_db):
        assert "Update 1 enhanced" in runner.invoke(cli, ["enhance", "1"]).output
        assert "already enhanced" in runner.invoke(cli, ["enhance", "1"]).output

    def test_enhance_all(self, runner, cli_db):
        result = runner.invoke(cli, ["enhance"])
        assert "Enhanced 4, skipped 0, errors 0" in result.output

    def test_seed_empty_database(self, runner, tmp_db):
        with patch("regintel.cli.get_db", return_value=tmp_db):
            result = runner.invoke(cli, ["seed"])
            assert "regulatory_updates: 4" in result.output
            assert "Seeded" in result.output

            again = runner.invoke(cli, ["seed"])
            assert "nothing seeded" in again.output


def test_sources_lists_active(runner):
    result = runner.invoke(cli, ["sources"])
    assert result.exit_code == 0
    assert "active" in result.output


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "regintel" in result.output
