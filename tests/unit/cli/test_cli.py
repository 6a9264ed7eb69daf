"""
Unit tests for the LexCerta command-line interface.
"""

import json
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
from click.testing import CliRunner

from lexcerta.cli import cli
from lexcerta.cli.main import _build_service
from lexcerta.logging import DEFAULT_LOG_FORMAT
from lexcerta.verification import ToolResponseEnvelope
from lexcerta.verification.envelope import failure


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def service():
    mock = Mock()
    mock.verify_citation.return_value = ToolResponseEnvelope(
        valid=True, metadata={"status": "verified", "caseName": "Roe v. Wade"}
    )
    mock.verify_quote_integrity.return_value = failure(
        "QUOTE_NOT_FOUND", "Quote does not appear to match the cited opinion (score: 12/100)."
    )
    return mock


class TestParseCommand:
    """Test the network-free parse command."""

    def test_parse_valid(self, runner):
        result = runner.invoke(cli, ["parse", "410 U.S. 113"])

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["valid"] is True
        assert payload["metadata"]["normalized"] == "410 U.S. 113"

    def test_parse_invalid_exits_nonzero(self, runner):
        result = runner.invoke(cli, ["parse", "hello world"])

        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["code"] == "PARSE_ERROR"

    def test_pretty_output(self, runner):
        result = runner.invoke(cli, ["parse", "410 U.S. 113", "--pretty"])

        assert result.exit_code == 0
        assert '\n  "valid": true' in result.output


class TestVerifyCommands:
    """Test the commands that call CourtListener."""

    def test_verify_citation(self, runner, service):
        with patch("lexcerta.cli.main._build_service", return_value=service):
            result = runner.invoke(cli, ["verify-citation", "410 U.S. 113"])

        assert result.exit_code == 0
        assert json.loads(result.output)["metadata"]["caseName"] == "Roe v. Wade"
        service.verify_citation.assert_called_once_with("410 U.S. 113")
        service.close.assert_called_once()

    def test_verify_quote(self, runner, service):
        with patch("lexcerta.cli.main._build_service", return_value=service):
            result = runner.invoke(
                cli, ["verify-quote", "410 U.S. 113", "--text", "a made-up passage"]
            )

        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["code"] == "QUOTE_NOT_FOUND"
        service.verify_quote_integrity.assert_called_once_with("410 U.S. 113", "a made-up passage")
        service.close.assert_called_once()

    def test_verify_quote_requires_text(self, runner):
        result = runner.invoke(cli, ["verify-quote", "410 U.S. 113"])

        assert result.exit_code == 2
        assert "--text" in result.output

    def test_missing_api_key(self, runner):
        result = runner.invoke(
            cli, ["verify-citation", "410 U.S. 113"], env={"COURTLISTENER_API_KEY": ""}
        )

        assert result.exit_code == 1
        assert "COURTLISTENER_API_KEY is required" in result.output

    def test_malformed_setting(self, runner):
        result = runner.invoke(
            cli,
            ["verify-citation", "410 U.S. 113"],
            env={"COURTLISTENER_API_KEY": "k", "COURTLISTENER_TIMEOUT": "abc"},
        )

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestBuildService:
    """Test service construction from the environment."""

    def test_logging_settings_forwarded(self, monkeypatch):
        monkeypatch.setenv("COURTLISTENER_API_KEY", "k")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.delenv("LEXCERTA_LOG_TO_FILE", raising=False)

        with patch("lexcerta.cli.main.initialize_logging") as mock_init:
            service = _build_service()
        service.close()

        mock_init.assert_called_once_with(
            log_dir=Path("logs"),
            level="DEBUG",
            rotation="100 MB",
            retention="1 month",
            format_string=DEFAULT_LOG_FORMAT,
            enable_file_logging=False,
            enable_console_logging=True,
        )
