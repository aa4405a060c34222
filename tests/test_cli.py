"""Tests for the terminal front end."""

from __future__ import annotations

import httpx
import pytest
from typer.testing import CliRunner

from quiz_gate import cli
from quiz_gate.client import QuizClient

from conftest import BASE_URL

runner = CliRunner()


@pytest.fixture
def patched_client(monkeypatch, settings, backend):
    def build(config, base_url):
        http = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(backend.handle))
        return QuizClient(settings, cli._terminal_environment, http=http)

    monkeypatch.setattr(cli, "_build_client", build)
    return backend


def test_leaderboard_command_prints_scores(patched_client):
    result = runner.invoke(cli.app, ["leaderboard"], input="\n")
    assert result.exit_code == 0, result.output
    assert "Alice" in result.output
    assert "Bob" in result.output


def test_play_command_submits_answers(patched_client):
    result = runner.invoke(cli.app, ["play"], input="\n2\n1\n2\nPlayer\n")
    assert result.exit_code == 0, result.output
    assert "Score: 3" in result.output
    posts = [request for request in patched_client.calls if request.method == "POST"]
    assert len(posts) == 1


def test_play_reports_offline_mode(patched_client):
    patched_client.questions = lambda request: httpx.Response(503)
    result = runner.invoke(cli.app, ["play"], input="\n1\n1\n1\n1\n1\nPlayer\n")
    assert "offline" in result.output
    assert result.exit_code == 1
