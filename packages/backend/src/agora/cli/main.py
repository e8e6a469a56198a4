"""Agora CLI — browse and post to a running forum, or run the server.

Usage:
    agora serve --port 8000                      # Run the API + /ws with uvicorn
    agora questions                              # All questions
    agora questions --recent                     # Ten newest
    agora questions --search postgres            # Keyword search
    agora questions --tag react                  # Tag filter
    agora show 3                                 # Question with its answers
    agora ask "Title" "Description" --tags a,b   # Post a question
    agora answer 3 "Try EXPLAIN ANALYZE"         # Answer question 3
    agora like 7                                 # Like answer 7
    agora delete-answer 7                        # Delete answer 7
    agora tags --limit 5                         # Popular tags
    agora seed                                   # Post the demo content
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from typing import Optional

import click
import httpx

from agora import __version__

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("AGORA_API_URL", DEFAULT_API_URL).rstrip("/")


def _client() -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Agora backend."""
    return httpx.AsyncClient(base_url=_api_url(), timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _check(r: httpx.Response) -> httpx.Response:
    """Exit with the server's error detail on any non-2xx response."""
    if r.is_success:
        return r
    try:
        detail = r.json().get("detail", r.text)
    except ValueError:
        detail = r.text
    if not isinstance(detail, str):
        detail = json.dumps(detail, default=str)
    click.secho(f"Error {r.status_code}: {detail}", fg="red", err=True)
    sys.exit(1)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(
            str(row.get(k) if row.get(k) is not None else "—")[:w].ljust(w)
            for _, k, w in columns
        )
        click.echo(line)


QUESTION_COLUMNS = [
    ("ID", "id", 5),
    ("TITLE", "title", 60),
    ("TAGS", "tags", 40),
]


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="agora")
def main():
    """Agora — a discussion forum with live updates."""


# ---------------------------------------------------------------------------
# agora serve
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default: AGORA_HOST)")
@click.option("--port", default=None, type=int, help="Port (default: AGORA_PORT)")
@click.option("--reload", is_flag=True, help="Restart on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API and live-update WebSocket server."""
    import uvicorn

    from agora.config import settings

    uvicorn.run(
        "agora.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# agora questions / show
# ---------------------------------------------------------------------------


@main.command()
@click.option("--recent", is_flag=True, help="Only the newest questions")
@click.option("--search", "keyword", help="Keyword in title or description")
@click.option("--tag", help="Questions whose tags contain TAG")
def questions(recent: bool, keyword: Optional[str], tag: Optional[str]):
    """List questions."""
    _run(_questions_impl(recent, keyword, tag))


async def _questions_impl(recent: bool, keyword: Optional[str], tag: Optional[str]):
    async with _client() as c:
        if keyword:
            r = await c.get("/api/questions/search", params={"keyword": keyword})
        elif tag:
            r = await c.get(f"/api/questions/tag/{tag}")
        elif recent:
            r = await c.get("/api/questions/recent")
        else:
            r = await c.get("/api/questions")
        rows = _check(r).json()

    if not rows:
        click.echo("No questions found.")
        return
    _print_table(rows, QUESTION_COLUMNS)


@main.command()
@click.argument("question_id", type=int)
def show(question_id: int):
    """Show a question and its answers."""
    _run(_show_impl(question_id))


async def _show_impl(question_id: int):
    async with _client() as c:
        question = _check(await c.get(f"/api/questions/{question_id}")).json()
        answers = _check(await c.get(f"/api/questions/{question_id}/answers")).json()

    click.secho(f"#{question['id']} {question['title']}", bold=True)
    if question.get("tags"):
        click.secho(f"  [{question['tags']}]", fg="cyan")
    click.echo(f"  asked {question['created_at']}")
    click.echo()
    click.echo(question["description"])
    click.echo()
    click.secho(f"{len(answers)} answer(s)", bold=True)
    for a in answers:
        click.echo("-" * 60)
        likes = click.style(f"♥ {a['likes']}", fg="magenta")
        click.echo(f"Answer #{a['id']}  {likes}")
        click.echo(a["answer_text"])


# ---------------------------------------------------------------------------
# agora ask / answer / like / delete-answer
# ---------------------------------------------------------------------------


@main.command()
@click.argument("title")
@click.argument("description")
@click.option("--tags", help="Comma-separated tags")
def ask(title: str, description: str, tags: Optional[str]):
    """Post a new question."""
    _run(_ask_impl(title, description, tags))


async def _ask_impl(title: str, description: str, tags: Optional[str]):
    body: dict = {"title": title, "description": description}
    if tags is not None:
        body["tags"] = tags
    async with _client() as c:
        question = _check(await c.post("/api/questions", json=body)).json()
    click.secho(f"Question #{question['id']} created", fg="green")


@main.command()
@click.argument("question_id", type=int)
@click.argument("text")
def answer(question_id: int, text: str):
    """Answer a question."""
    _run(_answer_impl(question_id, text))


async def _answer_impl(question_id: int, text: str):
    async with _client() as c:
        r = await c.post(
            f"/api/questions/{question_id}/answers", json={"answer_text": text}
        )
        created = _check(r).json()
    click.secho(
        f"Answer #{created['id']} added to question #{question_id}", fg="green"
    )


@main.command()
@click.argument("answer_id", type=int)
def like(answer_id: int):
    """Like an answer."""
    _run(_like_impl(answer_id))


async def _like_impl(answer_id: int):
    async with _client() as c:
        updated = _check(await c.put(f"/api/answers/{answer_id}/reaction")).json()
    click.echo(f"Answer #{answer_id} now has {updated['likes']} like(s)")


@main.command("delete-answer")
@click.argument("answer_id", type=int)
def delete_answer(answer_id: int):
    """Delete an answer."""
    _run(_delete_answer_impl(answer_id))


async def _delete_answer_impl(answer_id: int):
    async with _client() as c:
        _check(await c.delete(f"/api/answers/{answer_id}"))
    click.secho(f"Answer #{answer_id} deleted", fg="yellow")


# ---------------------------------------------------------------------------
# agora tags
# ---------------------------------------------------------------------------


@main.command()
@click.option("--limit", default=10, show_default=True, type=int)
def tags(limit: int):
    """Show the most used tags."""
    _run(_tags_impl(limit))


async def _tags_impl(limit: int):
    async with _client() as c:
        rows = _check(await c.get("/api/tags/popular", params={"limit": limit})).json()
    if not rows:
        click.echo("No tags yet.")
        return
    _print_table(rows, [("TAG", "tag", 30), ("QUESTIONS", "count", 9)])


# ---------------------------------------------------------------------------
# agora seed
# ---------------------------------------------------------------------------


@main.command()
def seed():
    """Post the demo questions and answers through the API.

    Unlike AGORA_SEED_SAMPLE_DATA (which writes at startup), this goes
    through the public endpoints, so connected clients see every item
    arrive live.
    """
    _run(_seed_impl())


async def _seed_impl():
    from agora.sample_data import SAMPLE_QUESTIONS

    async with _client() as c:
        for item in SAMPLE_QUESTIONS:
            r = await c.post("/api/questions", json={
                "title": item["title"],
                "description": item["description"],
                "tags": item["tags"],
            })
            question = _check(r).json()
            for text in item["answers"]:
                _check(await c.post(
                    f"/api/questions/{question['id']}/answers",
                    json={"answer_text": text},
                ))
            click.echo(
                f"  #{question['id']} {question['title'][:60]} "
                f"({len(item['answers'])} answers)"
            )
    click.secho(f"Seeded {len(SAMPLE_QUESTIONS)} questions", fg="green")


if __name__ == "__main__":
    main()
