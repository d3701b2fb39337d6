"""CLI entrypoint for Semantic Recall."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

import requests
import typer

app = typer.Typer(name="recall", help="Semantic Recall command-line interface")

DEFAULT_HOST = "http://127.0.0.1:8765"


def _resolve_host(override: Optional[str]) -> str:
    if override:
        return override.rstrip("/")
    env_host = os.environ.get("RECALL_HOST")
    if env_host:
        return env_host.rstrip("/")
    return DEFAULT_HOST


def _resolve_user(override: Optional[str]) -> str:
    user = override or os.environ.get("RECALL_USER")
    if not user:
        typer.echo("No user given; pass --user or set RECALL_USER", err=True)
        raise typer.Exit(code=2)
    return user


def _request(
    method: str,
    path: str,
    host: Optional[str] = None,
    user: Optional[str] = None,
    **kwargs,
) -> requests.Response:
    base = _resolve_host(host)
    url = f"{base}{path}"
    headers = {"X-User-Id": user} if user else {}
    try:
        resp = requests.request(method, url, timeout=60, headers=headers, **kwargs)
    except requests.ConnectionError as exc:
        typer.echo(f"Cannot reach {base}: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    if not resp.ok:
        try:
            detail = resp.json().get("detail", resp.text)
        except ValueError:
            detail = resp.text
        typer.echo(f"Request failed ({resp.status_code}): {detail}", err=True)
        raise typer.Exit(code=1)
    return resp


def _echo_json(resp: requests.Response) -> None:
    typer.echo(json.dumps(resp.json(), indent=2))


@app.command()
def save(
    text: Optional[str] = typer.Argument(None, help="Text to save; omit to read --file"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Read the content from this file"),
    content_type: str = typer.Option("selection", "--type", help="page, selection or youtube"),
    title: str = typer.Option("", "--title", help="Title shown in search results"),
    url: str = typer.Option("", "--url", help="Source URL"),
    tag: list[str] = typer.Option([], "--tag", help="Tag to attach; repeatable"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
    user: Optional[str] = typer.Option(None, "--user", help="Caller identity (X-User-Id)"),
) -> None:
    """Save content and queue it for indexing."""
    if file is not None:
        body_text = file.expanduser().read_text(encoding="utf-8")
    elif text is not None:
        body_text = text
    else:
        typer.echo("Provide TEXT or --file", err=True)
        raise typer.Exit(code=2)
    payload = {
        "content_type": content_type,
        "content": body_text,
        "title": title or (file.name if file is not None else ""),
        "url": url,
        "tags": tag,
    }
    _echo_json(_request("POST", "/content", host=host, user=_resolve_user(user), json=payload))


@app.command()
def index(
    content_id: str = typer.Argument(..., help="Saved content identifier"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
    user: Optional[str] = typer.Option(None, "--user", help="Caller identity (X-User-Id)"),
) -> None:
    """Index saved content now and wait for the result."""
    _echo_json(_request("POST", f"/content/{content_id}/index", host=host, user=_resolve_user(user)))


@app.command()
def delete(
    content_id: str = typer.Argument(..., help="Saved content identifier"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
    user: Optional[str] = typer.Option(None, "--user", help="Caller identity (X-User-Id)"),
) -> None:
    """Delete saved content together with its embedding."""
    _echo_json(_request("DELETE", f"/content/{content_id}", host=host, user=_resolve_user(user)))


@app.command()
def query(
    q: str = typer.Argument(..., help="Query text"),
    k: Optional[int] = typer.Option(None, "--k", help="Number of results to return"),
    answer: bool = typer.Option(False, "--answer/--no-answer", help="Synthesize an answer from the results"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
    user: Optional[str] = typer.Option(None, "--user", help="Caller identity (X-User-Id)"),
) -> None:
    """Search saved content by meaning."""
    payload: dict[str, object] = {"query": q, "synthesize_answer": answer}
    if k is not None:
        payload["k"] = k
    _echo_json(_request("POST", "/query", host=host, user=_resolve_user(user), json=payload))


@app.command()
def stats(
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Show corpus and queue statistics."""
    _echo_json(_request("GET", "/stats", host=host))


@app.command()
def serve(
    bind: str = typer.Option("127.0.0.1", "--bind", help="Interface to listen on"),
    port: int = typer.Option(8765, "--port", help="Port to listen on"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("semantic_recall.app:app", host=bind, port=port, reload=reload, log_config=None)


if __name__ == "__main__":
    app()
