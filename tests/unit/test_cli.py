"""Unit tests for the command-line interface."""

import pytest
from click.testing import CliRunner

from convolut_mcp import __version__
from convolut_mcp.cli import cli


@pytest.fixture
def runner(monkeypatch, tmp_path):
    monkeypatch.delenv("CONVOLUT_API_KEY", raising=False)
    # keep a developer's .env out of the tests
    monkeypatch.chdir(tmp_path)
    return CliRunner()


class TestCli:
    """Test CLI commands that need no network."""

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_tools_table(self, runner):
        result = runner.invoke(cli, ["tools"])

        assert result.exit_code == 0
        assert "list_contexts" in result.output
        assert "get_context_stats" in result.output

    def test_health_without_key_exits(self, runner):
        result = runner.invoke(cli, ["health"])

        assert result.exit_code == 1

    def test_serve_without_key_exits(self, runner):
        result = runner.invoke(cli, ["serve"])

        assert result.exit_code == 1
