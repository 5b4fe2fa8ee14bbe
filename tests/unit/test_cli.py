"""Unit tests for CLI commands with mocked dependencies."""

import json
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from brainus_ai import __version__
from brainus_ai.cli import app, make_client
from brainus_ai.config import Settings, set_settings
from brainus_ai.core.exceptions import APIError, RateLimitError
from brainus_ai.core.models import (
    plan_from_wire,
    query_response_from_wire,
    usage_from_wire,
)

runner = CliRunner()


@pytest.fixture
def mock_client():
    client = MagicMock()
    client.query.return_value = query_response_from_wire(
        {
            "answer": "Python is a programming language.",
            "citations": [
                {
                    "document_id": "d1",
                    "document_name": "ICT Textbook",
                    "pages": [12, 13],
                    "chunk_text": "Python is...",
                }
            ],
            "has_citations": True,
        }
    )
    client.get_usage.return_value = usage_from_wire(
        {
            "total_requests": 42,
            "by_endpoint": {"/api/v1/dev/query": 42},
            "plan": {"name": "Free", "rate_limit_per_minute": 10, "rate_limit_per_day": 100},
        }
    )
    client.get_plans.return_value = [
        plan_from_wire({"id": "free", "name": "Free", "rate_limit_per_minute": 10, "is_active": True}),
        plan_from_wire({"id": "pro", "name": "Pro", "price_lkr": 2500, "is_active": True}),
    ]
    with patch("brainus_ai.cli.make_client", return_value=client):
        yield client


def _json_output(output: str):
    start = min(i for i in (output.find("{"), output.find("[")) if i >= 0)
    return json.loads(output[start:])


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout


class TestQueryCommand:
    def test_prints_answer_and_citations(self, mock_client):
        result = runner.invoke(app, ["--no-color", "query", "What is Python?"])

        assert result.exit_code == 0
        assert "Python is a programming language." in result.stdout
        assert "ICT Textbook" in result.stdout
        mock_client.query.assert_called_once_with(
            "What is Python?", store_id=None, filters=None, model=None
        )

    def test_passes_options(self, mock_client):
        result = runner.invoke(
            app,
            [
                "query",
                "What is OOP?",
                "--store-id",
                "abc123",
                "--model",
                "gemini-2.5-flash",
                "--subject",
                "ICT",
                "--grade",
                "12",
            ],
        )

        assert result.exit_code == 0
        kwargs = mock_client.query.call_args.kwargs
        assert kwargs["store_id"] == "abc123"
        assert kwargs["model"] == "gemini-2.5-flash"
        assert kwargs["filters"].to_wire() == {"subject": "ICT", "grade": "12"}

    def test_json_output_is_camel_case(self, mock_client):
        result = runner.invoke(app, ["query", "q", "--json"])

        assert result.exit_code == 0
        data = _json_output(result.stdout)
        assert data["hasCitations"] is True
        assert data["citations"][0]["documentName"] == "ICT Textbook"
        assert data["citations"][0]["pages"] == [12, 13]

    def test_rate_limit_reports_retry_after(self, mock_client):
        mock_client.query.side_effect = RateLimitError("Too many requests", retry_after=30)

        result = runner.invoke(app, ["--no-color", "query", "q"])

        assert result.exit_code == 1
        assert "Rate limited" in result.output
        assert "Retry after 30 seconds" in result.output

    def test_api_error_exits_nonzero(self, mock_client):
        mock_client.query.side_effect = APIError("Request failed after 4 attempts: boom")

        result = runner.invoke(app, ["--no-color", "query", "q"])

        assert result.exit_code == 1
        assert "APIError" in result.output


class TestUsageCommand:
    def test_prints_usage(self, mock_client):
        result = runner.invoke(app, ["--no-color", "usage"])

        assert result.exit_code == 0
        assert "42" in result.stdout
        assert "Free" in result.stdout

    def test_json(self, mock_client):
        result = runner.invoke(app, ["usage", "--json"])

        data = _json_output(result.stdout)
        assert data["totalRequests"] == 42
        assert data["plan"]["rateLimitPerMinute"] == 10


class TestPlansCommand:
    def test_prints_table(self, mock_client):
        result = runner.invoke(app, ["--no-color", "plans"])

        assert result.exit_code == 0
        assert "Pro" in result.stdout
        assert "free" in result.stdout

    def test_json(self, mock_client):
        result = runner.invoke(app, ["plans", "--json"])

        data = _json_output(result.stdout)
        assert [p["id"] for p in data] == ["free", "pro"]
        assert data[0]["allowedModels"] == []


def test_missing_api_key_is_config_error(clean_env):
    result = runner.invoke(app, ["--no-color", "plans"])

    assert result.exit_code == 1
    assert "Configuration error" in result.output


class TestMakeClient:
    def test_cli_args_override_settings(self, clean_env):
        set_settings(Settings(api_key="brainus_from_settings", timeout=1000))

        client = make_client(api_key="brainus_from_cli", max_retries=0)

        assert client.config.api_key == "brainus_from_cli"
        assert client.timeout == 1000
        assert client.max_retries == 0

    def test_defaults_from_env(self, clean_env, monkeypatch):
        monkeypatch.setenv("BRAINUS_API_KEY", "brainus_env")

        client = make_client()

        assert client.config.api_key == "brainus_env"
        assert client.base_url == "https://api.brainus.lk"


def test_malformed_timeout_env_reports_config_error(clean_env, monkeypatch):
    monkeypatch.setenv("BRAINUS_API_KEY", "brainus_env")
    monkeypatch.setenv("BRAINUS_TIMEOUT", "soon")

    result = runner.invoke(app, ["--no-color", "plans"])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "BRAINUS_TIMEOUT" in result.output


class TestConsoleStreams:
    def test_errors_and_warnings_go_to_stderr(self, capsys):
        from brainus_ai import logger as log

        log.init_console(no_color=True)
        log.error("boom")
        log.warning("careful")
        log.info("result")

        captured = capsys.readouterr()
        assert "Error: boom" in captured.err
        assert "careful" in captured.err
        assert "result" in captured.out
        assert "boom" not in captured.out
