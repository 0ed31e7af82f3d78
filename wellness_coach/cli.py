"""
Wellness Coach — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Build the record store selected by ``[store] backend``.
  4. Run the async operation with ``asyncio.run``.
  5. Report the result to stdout (errors to stderr, exit code 1).

With ``backend = "memory"`` every invocation starts from the mock data in
``[data] seed_file``; nothing written survives the process.

Install and run::

    pip install -e .
    wellness-coach --help
    wellness-coach init-db
    wellness-coach seed
    wellness-coach generate --client-id 1
    wellness-coach list --status pending --sort score
    wellness-coach bulk-accept --client-id 1
    wellness-coach export --format json
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, TypeVar

import typer

T = TypeVar("T")

app = typer.Typer(
    name="wellness-coach",
    help="Wellness coaching recommendations: score, generate and review content for clients.",
    add_completion=False,
)

_CONFIG_HELP = "Path to TOML config file (default: config/default.toml)."
_DB_PATH_HELP = "Override DB path from config (sqlite backend only)."
_PAST_TENSE = {"accept": "accepted", "decline": "declined"}


# ── Helpers ───────────────────────────────────────────────────────────────────

def _fail(message: str) -> typer.Exit:
    typer.echo(f"[ERROR] {message}", err=True)
    return typer.Exit(code=1)


def _load_config_or_exit(config_path: Optional[str] = None):
    """Return the ``AppConfig`` or exit 1 with the reason on stderr."""
    from wellness_coach.config import load_config

    try:
        return load_config(Path(config_path) if config_path else None)
    except FileNotFoundError as exc:
        raise _fail(str(exc))
    except ValueError as exc:
        # pydantic and tomllib errors are both ValueErrors.
        raise _fail(f"Config validation failed: {exc}")


def _run_with_store(
    config,
    work: Callable[[Any], Awaitable[T]],
    db_path: Optional[str] = None,
    seed_memory: bool = True,
) -> T:
    """Open the configured store, await ``work(store)``, close the store.

    Any ``CoachError`` becomes ``[ERROR] ...`` on stderr and exit code 1.
    """
    from wellness_coach.errors import CoachError
    from wellness_coach.seed.seed_loader import load_seed_file, seed_store
    from wellness_coach.store.factory import build_store

    async def _main() -> T:
        async with build_store(config, db_path=db_path) as store:
            if seed_memory and config.store.backend == "memory":
                await seed_store(store, load_seed_file(Path(config.data.seed_file)))
            return await work(store)

    try:
        return asyncio.run(_main())
    except (CoachError, FileNotFoundError) as exc:
        raise _fail(str(exc))


def _bootstrap(config_path: Optional[str]):
    """Load config and install logging handlers; every store-backed command starts here."""
    from wellness_coach.utils.logging import configure_logging

    config = _load_config_or_exit(config_path)
    configure_logging(config.logging)
    return config


# ── Setup commands ────────────────────────────────────────────────────────────

@app.command("init-db")
def init_db(
    db_path: Optional[str] = typer.Option(None, "--db-path", help=_DB_PATH_HELP),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Initialize the SQLite database and apply the full schema.

    Safe to run multiple times: all DDL uses IF NOT EXISTS.
    """
    from wellness_coach.db.connection import get_connection
    from wellness_coach.db.schema import ALL_TABLE_NAMES, apply_schema

    config = _bootstrap(config_path)

    target_path = db_path or config.database.db_path
    typer.echo(f"Initializing database at: {target_path}")

    with get_connection(
        target_path,
        wal_mode=config.database.wal_mode,
        busy_timeout_ms=config.database.busy_timeout_ms,
    ) as conn:
        apply_schema(conn)

    typer.echo(f"  Tables: {len(ALL_TABLE_NAMES)} created/verified.")
    typer.echo("[OK] Database ready.")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Store backend:     {config.store.backend}")
    if config.store.backend == "remote":
        typer.echo(f"  API URL:           {config.store.api_url}")
        typer.echo(f"  Credentials set:   {bool(config.store.project_id and config.store.public_key)}")
    else:
        typer.echo(f"  Database path:     {config.database.db_path}")
    typer.echo(f"  Default limit:     {config.recommendations.default_limit}")
    typer.echo(f"  All-clients limit: {config.recommendations.all_clients_limit}")
    typer.echo(f"  Score threshold:   > {config.recommendations.threshold}")
    typer.echo(f"  Score cap:         {config.recommendations.max_score}")
    typer.echo(f"  Log level:         {config.logging.level}")
    typer.echo(f"  Debug mode:        {config.debug}")

    if show_full:
        # Credentials are never echoed.
        dumped = config.model_dump()
        dumped["store"]["public_key"] = "***" if config.store.public_key else None
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(dumped, indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config is valid.")


@app.command("seed")
def seed(
    seed_file: Optional[str] = typer.Option(
        None,
        "--file",
        help="Seed JSON path (default: [data] seed_file).",
    ),
    db_path: Optional[str] = typer.Option(None, "--db-path", help=_DB_PATH_HELP),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Load mock clients, resources, goals and interactions into the store."""
    from wellness_coach.seed.seed_loader import load_seed_file, seed_store

    config = _bootstrap(config_path)
    path = Path(seed_file or config.data.seed_file)

    async def _work(store):
        return await seed_store(store, load_seed_file(path))

    counts = _run_with_store(config, _work, db_path=db_path, seed_memory=False)

    for kind, n in counts.items():
        typer.echo(f"  {kind:<12} {n:>4} created")
    if config.store.backend == "memory":
        typer.echo("  (memory backend: records are discarded when the command exits)")
    typer.echo(f"[OK] Seeded {sum(counts.values())} record(s) from {path}.")


# ── Generation commands ───────────────────────────────────────────────────────

@app.command("generate")
def generate(
    client_id: int = typer.Option(..., "--client-id", help="Client to generate for."),
    limit: Optional[int] = typer.Option(
        None, "--limit", min=1, help="Max recommendations (default: [recommendations] default_limit)."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Score and rank without saving anything."
    ),
    db_path: Optional[str] = typer.Option(None, "--db-path", help=_DB_PATH_HELP),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Score the catalog for one client and save the top-ranked resources."""
    from wellness_coach.recommendations.formatters import (
        format_ranked_preview,
        format_recommendation_table,
    )
    from wellness_coach.recommendations.generator import RecommendationGenerator

    config = _bootstrap(config_path)

    if dry_run:
        async def _preview(store):
            return await RecommendationGenerator(store, config.recommendations).preview(
                client_id, limit=limit
            )

        ranked = _run_with_store(config, _preview, db_path=db_path)
        typer.echo(format_ranked_preview(client_id, ranked))
        typer.echo("")
        typer.echo(f"[OK] Dry run: {len(ranked)} resource(s) would be recommended.")
        return

    async def _generate(store):
        generator = RecommendationGenerator(store, config.recommendations)
        created = await generator.generate(client_id, limit=limit)
        return await _views(store, created)

    views = _run_with_store(config, _generate, db_path=db_path)
    typer.echo(format_recommendation_table(views, title=f"New recommendations for client {client_id}"))
    typer.echo("")
    typer.echo(f"[OK] {len(views)} recommendation(s) created.")


@app.command("generate-all")
def generate_all(
    limit: Optional[int] = typer.Option(
        None, "--limit", min=1, help="Max per client (default: [recommendations] all_clients_limit)."
    ),
    db_path: Optional[str] = typer.Option(None, "--db-path", help=_DB_PATH_HELP),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Generate recommendations for every client, one client at a time."""
    from wellness_coach.recommendations.formatters import format_generation_summary
    from wellness_coach.recommendations.generator import RecommendationGenerator

    config = _bootstrap(config_path)

    async def _work(store):
        generator = RecommendationGenerator(store, config.recommendations)
        return await generator.generate_for_all_clients(limit=limit)

    summary = _run_with_store(config, _work, db_path=db_path)
    typer.echo(format_generation_summary(summary))
    typer.echo("")
    if summary.failures:
        typer.echo(f"[WARN] {len(summary.failures)} client(s) failed; see log for details.")
    typer.echo(f"[OK] {summary.total_created} recommendation(s) created.")


# ── Review commands ───────────────────────────────────────────────────────────

@app.command("list")
def list_recommendations(
    client_id: Optional[int] = typer.Option(None, "--client-id", help="Only this client."),
    status: str = typer.Option("all", "--status", help="all | pending | accepted | declined."),
    search: Optional[str] = typer.Option(None, "--search", help="Match client name or resource title."),
    sort_by: str = typer.Option("date", "--sort", help="date | score | client | resource."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help=_DB_PATH_HELP),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """List stored recommendations with optional filters."""
    from wellness_coach.recommendations.formatters import format_recommendation_table

    config = _bootstrap(config_path)
    views = _run_with_store(
        config,
        lambda store: _query_views(store, client_id, status, search, sort_by),
        db_path=db_path,
    )
    typer.echo(format_recommendation_table(views))


@app.command("accept")
def accept(
    recommendation_id: int = typer.Argument(..., help="Recommendation id."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help=_DB_PATH_HELP),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Mark a recommendation accepted."""
    from wellness_coach.recommendations.lifecycle import RecommendationLifecycle

    config = _bootstrap(config_path)
    rec = _run_with_store(
        config, lambda store: RecommendationLifecycle(store).accept(recommendation_id), db_path
    )
    typer.echo(f"[OK] Recommendation {rec.id} accepted.")


@app.command("decline")
def decline(
    recommendation_id: int = typer.Argument(..., help="Recommendation id."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help=_DB_PATH_HELP),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Mark a recommendation declined."""
    from wellness_coach.recommendations.lifecycle import RecommendationLifecycle

    config = _bootstrap(config_path)
    rec = _run_with_store(
        config, lambda store: RecommendationLifecycle(store).decline(recommendation_id), db_path
    )
    typer.echo(f"[OK] Recommendation {rec.id} declined.")


@app.command("delete")
def delete(
    recommendation_id: int = typer.Argument(..., help="Recommendation id."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help=_DB_PATH_HELP),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Delete a recommendation permanently."""
    from wellness_coach.recommendations.lifecycle import RecommendationLifecycle

    config = _bootstrap(config_path)
    _run_with_store(
        config, lambda store: RecommendationLifecycle(store).delete(recommendation_id), db_path
    )
    typer.echo(f"[OK] Recommendation {recommendation_id} deleted.")


@app.command("bulk-accept")
def bulk_accept(
    client_id: Optional[int] = typer.Option(None, "--client-id", help="Only this client's pending recommendations."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help=_DB_PATH_HELP),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Accept every pending recommendation (optionally for one client)."""
    _bulk_command("accept", client_id, db_path, config_path)


@app.command("bulk-decline")
def bulk_decline(
    client_id: Optional[int] = typer.Option(None, "--client-id", help="Only this client's pending recommendations."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help=_DB_PATH_HELP),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Decline every pending recommendation (optionally for one client)."""
    _bulk_command("decline", client_id, db_path, config_path)


@app.command("export")
def export(
    fmt: str = typer.Option("csv", "--format", help="csv | json."),
    output_dir: Optional[str] = typer.Option(
        None, "--output-dir", help="Target directory (default: [data] export_dir)."
    ),
    client_id: Optional[int] = typer.Option(None, "--client-id", help="Only this client."),
    status: str = typer.Option("all", "--status", help="all | pending | accepted | declined."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help=_DB_PATH_HELP),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Export stored recommendations to CSV or JSON."""
    from wellness_coach.recommendations.reporter import (
        write_recommendations_csv,
        write_recommendations_json,
    )

    if fmt not in ("csv", "json"):
        raise _fail(f"--format must be 'csv' or 'json', got '{fmt}'.")

    config = _bootstrap(config_path)
    views = _run_with_store(
        config,
        lambda store: _query_views(store, client_id, status, None, "date"),
        db_path=db_path,
    )

    target = Path(output_dir or config.data.export_dir)
    if fmt == "csv":
        path = write_recommendations_csv(views, target)
    else:
        path = write_recommendations_json(views, target)
    typer.echo(f"[OK] Exported {len(views)} recommendation(s) to {path}")


# ── Shared command bodies ─────────────────────────────────────────────────────

async def _views(store, recommendations):
    from wellness_coach.recommendations.query import build_views
    from wellness_coach.services.registries import ClientRegistry, ResourceCatalog

    clients = await ClientRegistry(store).list()
    resources = await ResourceCatalog(store).list()
    return build_views(recommendations, clients, resources)


async def _query_views(store, client_id, status, search, sort_by):
    from wellness_coach.errors import ValidationError
    from wellness_coach.recommendations.query import (
        filter_recommendations,
        sort_recommendations,
    )
    from wellness_coach.services.registries import RecommendationRepository

    recommendations = await RecommendationRepository(store).list_all()
    views = await _views(store, recommendations)
    try:
        views = filter_recommendations(views, client_id=client_id, status=status, search=search)
        return sort_recommendations(views, sort_by=sort_by)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc


def _bulk_command(action: str, client_id, db_path, config_path) -> None:
    from wellness_coach.recommendations.formatters import format_bulk_result
    from wellness_coach.recommendations.lifecycle import RecommendationLifecycle

    config = _bootstrap(config_path)

    async def _work(store):
        lifecycle = RecommendationLifecycle(store)
        ids = [r.id for r in await lifecycle.pending(client_id) if r.id is not None]
        if action == "accept":
            return await lifecycle.bulk_accept(ids)
        return await lifecycle.bulk_decline(ids)

    result = _run_with_store(config, _work, db_path=db_path)
    typer.echo(format_bulk_result(f"bulk-{action}", result))
    if result.failures:
        raise _fail(f"{result.failed_count} recommendation(s) could not be updated.")
    typer.echo(f"[OK] {result.succeeded_count} recommendation(s) {_PAST_TENSE[action]}.")


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
