"""CLI tests — click commands against the in-process app.

Learn: _client() is patched to return an httpx client on ASGITransport,
so every command exercises the real routes without a server.
"""

import pytest
from click.testing import CliRunner
from httpx import ASGITransport, AsyncClient

from agora.cli import main as cli
from agora.sample_data import SAMPLE_QUESTIONS


@pytest.fixture
def runner(app, monkeypatch):
    monkeypatch.setattr(
        cli,
        "_client",
        lambda: AsyncClient(transport=ASGITransport(app=app), base_url="http://test"),
    )
    return CliRunner()


def test_version(runner):
    result = runner.invoke(cli.main, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_ask_and_list(runner):
    result = runner.invoke(
        cli.main, ["ask", "CLI question", "Asked from the terminal", "--tags", "cli"]
    )
    assert result.exit_code == 0, result.output
    assert "Question #1 created" in result.output

    result = runner.invoke(cli.main, ["questions"])
    assert result.exit_code == 0
    assert "CLI question" in result.output


def test_questions_empty(runner):
    result = runner.invoke(cli.main, ["questions", "--recent"])
    assert result.exit_code == 0
    assert "No questions found." in result.output


def test_search_and_tag(runner):
    runner.invoke(cli.main, ["ask", "Pandas merge", "join two frames", "--tags", "pandas"])
    runner.invoke(cli.main, ["ask", "Go channels", "select statement", "--tags", "go"])

    result = runner.invoke(cli.main, ["questions", "--search", "frames"])
    assert "Pandas merge" in result.output
    assert "Go channels" not in result.output

    result = runner.invoke(cli.main, ["questions", "--tag", "go"])
    assert "Go channels" in result.output
    assert "Pandas merge" not in result.output


def test_answer_like_show_delete(runner):
    runner.invoke(cli.main, ["ask", "Q", "body"])

    result = runner.invoke(cli.main, ["answer", "1", "An answer"])
    assert result.exit_code == 0, result.output
    assert "Answer #1 added to question #1" in result.output

    result = runner.invoke(cli.main, ["like", "1"])
    assert "now has 1 like(s)" in result.output

    result = runner.invoke(cli.main, ["show", "1"])
    assert result.exit_code == 0
    assert "An answer" in result.output
    assert "1 answer(s)" in result.output

    result = runner.invoke(cli.main, ["delete-answer", "1"])
    assert result.exit_code == 0
    assert "Answer #1 deleted" in result.output


def test_not_found_exits_nonzero(runner):
    result = runner.invoke(cli.main, ["like", "42"])
    assert result.exit_code == 1
    assert "Error 404: Answer not found" in result.output


def test_seed_posts_sample_data(runner):
    result = runner.invoke(cli.main, ["seed"])
    assert result.exit_code == 0, result.output
    assert f"Seeded {len(SAMPLE_QUESTIONS)} questions" in result.output

    result = runner.invoke(cli.main, ["tags", "--limit", "3"])
    assert result.exit_code == 0
    assert "javascript" in result.output
