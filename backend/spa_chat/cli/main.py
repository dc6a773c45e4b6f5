"""CLI entrypoint for the spa chat backend."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

import requests
import typer

from spa_chat.core.config import Settings, get_settings
from spa_chat.core.logging import configure_logging
from spa_chat.db.catalog import CatalogRepository
from spa_chat.db.knowledge import KnowledgeRepository
from spa_chat.db.sqlite import SQLiteDatabase
from spa_chat.ingest.catalog import load_catalog
from spa_chat.ingest.pipeline import EMBED_BATCH, KnowledgeIngestor
from spa_chat.ingest.types import IngestError
from spa_chat.matching.answers import answer_locally
from spa_chat.matching.intents import DEFAULT_INTENT_RULES, load_intent_rules
from spa_chat.rag.embeddings import build_embedding_client

app = typer.Typer(name="spa-chat", help="Spa chat backend command-line interface")
kb_app = typer.Typer(name="kb", help="Knowledge base maintenance")
catalog_app = typer.Typer(name="catalog", help="Service catalog and business config")
app.add_typer(kb_app, name="kb")
app.add_typer(catalog_app, name="catalog")

DEFAULT_HOST = "http://127.0.0.1:8000"
DEFAULT_REEMBED_MINUTES = 15.0


def _resolve_host(override: Optional[str]) -> str:
    if override:
        return override.rstrip('/')
    env_host = os.environ.get("SPA_HOST")
    if env_host:
        return env_host.rstrip('/')
    return DEFAULT_HOST


def _request(method: str, path: str, host: Optional[str] = None, **kwargs) -> requests.Response:
    base = _resolve_host(host)
    url = f"{base}{path}"
    resp = requests.request(method, url, timeout=60, **kwargs)
    if not resp.ok:
        try:
            detail = resp.json()
        except ValueError:
            detail = resp.text
        typer.echo(f"Request failed ({resp.status_code}): {detail}", err=True)
        raise typer.Exit(code=1)
    return resp


def _open_database(settings: Settings) -> SQLiteDatabase:
    db = SQLiteDatabase(settings.db_path)
    db.ensure_schema()
    return db


def _ingestor(settings: Settings) -> KnowledgeIngestor:
    db = _open_database(settings)
    return KnowledgeIngestor(KnowledgeRepository(db), build_embedding_client(settings), settings)


def _default_reembed_minutes() -> float:
    raw = os.environ.get("REEMBED_MINUTES")
    if not raw:
        return DEFAULT_REEMBED_MINUTES
    try:
        return float(raw)
    except ValueError:
        typer.echo(f"Ignoring invalid REEMBED_MINUTES={raw!r}", err=True)
        return DEFAULT_REEMBED_MINUTES


@kb_app.command("seed")
def kb_seed(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Markdown knowledge base file"),
    embed: bool = typer.Option(True, "--embed/--no-embed", help="Embed chunks while inserting"),
) -> None:
    """Chunk a markdown knowledge base and insert it."""
    configure_logging()
    stats = _ingestor(get_settings()).seed(path, embed=embed)
    typer.echo(json.dumps(stats.to_dict(), indent=2))


@kb_app.command("backfill")
def kb_backfill(
    batch: int = typer.Option(EMBED_BATCH, "--batch", min=1, help="Rows per embedding request"),
) -> None:
    """Embed every chunk that has no embedding yet."""
    configure_logging()
    try:
        stats = _ingestor(get_settings()).backfill(batch_size=batch)
    except IngestError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(stats.to_dict(), indent=2))


@kb_app.command("reembed")
def kb_reembed(
    minutes: Optional[float] = typer.Argument(None, help="Window in minutes (default REEMBED_MINUTES or 15)"),
) -> None:
    """Re-embed chunks changed recently or missing an embedding."""
    configure_logging()
    window = minutes if minutes is not None else _default_reembed_minutes()
    try:
        stats = _ingestor(get_settings()).reembed_recent(window)
    except IngestError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(stats.to_dict(), indent=2))


@catalog_app.command("load")
def catalog_load(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Catalog YAML file"),
) -> None:
    """Replace services, aliases and business config from YAML."""
    configure_logging()
    catalog = CatalogRepository(_open_database(get_settings()))
    try:
        document = load_catalog(path, catalog)
    except ValueError as exc:
        typer.echo(f"Invalid catalog: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(
        json.dumps(
            {
                "services": len(document.services),
                "aliases": len(document.aliases),
                "business": document.business.name if document.business else None,
            },
            indent=2,
        )
    )


@app.command()
def match(text: str = typer.Argument(..., help="Visitor message")) -> None:
    """Run the local intent/service matcher against the stored catalog."""
    settings = get_settings()
    catalog = CatalogRepository(_open_database(settings))
    rules = load_intent_rules(settings.intent_table_path) if settings.intent_table_path else DEFAULT_INTENT_RULES
    result = answer_locally(
        text,
        catalog.get_business_config(),
        catalog.list_services(),
        catalog.list_aliases(),
        rules,
    )
    typer.echo(
        json.dumps(
            {
                "intent": result.intent.value,
                "service": result.service.id if result.service else None,
                "answer": result.answer,
            },
            indent=2,
        )
    )


@app.command()
def ask(
    text: str = typer.Argument(..., help="Question for the assistant"),
    conversation: Optional[str] = typer.Option(None, "--conversation", help="Continue a conversation"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Send one message to a running server's /chat endpoint."""
    payload: dict[str, object] = {"messages": [{"role": "user", "content": text}]}
    if conversation:
        payload["conversation_id"] = conversation
    resp = _request("POST", "/chat", host=host, json=payload)
    typer.echo(json.dumps(resp.json(), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    app()
