"""
ASCII terminal formatters for the recommendation CLI commands.

All formatters accept in-memory views / results and return plain multi-line
strings suitable for ``typer.echo()``. No third-party dependencies.
"""

from __future__ import annotations

from wellness_coach.recommendations.generator import GenerationSummary
from wellness_coach.recommendations.lifecycle import BulkResult
from wellness_coach.recommendations.query import RecommendationView
from wellness_coach.recommendations.ranker import RankedResource


# ── Stored recommendations ────────────────────────────────────────────────────


def format_recommendation_table(views: list[RecommendationView], title: str = "Recommendations") -> str:
    """Format stored recommendations as an ASCII table, one row per record::

          ID  Client                Resource                         Score  Status    Date
        ----------------------------------------------------------------------------------
          12  Sarah Mitchell        Box Breathing for Acute Stress      57  pending   2024-06-10
    """
    lines: list[str] = ["", f"=== {title} ({len(views)}) ==="]
    if not views:
        lines.append("  (no recommendations match; run 'generate' first)")
        return "\n".join(lines)

    header = (
        f"  {'ID':>4}  {'Client':<20}  {'Resource':<32}  "
        f"{'Score':>5}  {'Status':<8}  {'Date':<10}"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for view in views:
        rec = view.recommendation
        lines.append(
            f"  {rec.id if rec.id is not None else '-':>4}  {view.client_name[:20]:<20}  "
            f"{view.resource_title[:32]:<32}  {rec.score:>5}  "
            f"{view.disposition.value:<8}  {rec.recommendation_date.date().isoformat():<10}"
        )
    return "\n".join(lines)


# ── Dry-run preview ───────────────────────────────────────────────────────────


def format_ranked_preview(client_id: int, ranked: list[RankedResource]) -> str:
    """Format a dry-run ranking with each resource's reasoning string."""
    lines: list[str] = ["", f"=== Preview for client {client_id} (not saved) ==="]
    if not ranked:
        lines.append("  (no resource scores above the threshold)")
        return "\n".join(lines)

    header = f"  {'Rank':>4}  {'Resource':<32}  {'Type':<9}  {'Score':>5}  {'Raw':>4}"
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for rank, item in enumerate(ranked, start=1):
        lines.append(
            f"  {rank:>4}  {item.resource.title[:32]:<32}  {item.resource.type.value:<9}  "
            f"{item.score:>5}  {item.raw_score:>4}"
        )
        lines.append(f"        {item.reasoning}")
    return "\n".join(lines)


# ── Batch outcomes ────────────────────────────────────────────────────────────


def format_generation_summary(summary: GenerationSummary) -> str:
    lines: list[str] = ["", "=== Generation Summary ==="]
    for client_id, created in sorted(summary.created.items()):
        lines.append(f"  client {client_id:>4}: {len(created)} created")
    for client_id, message in sorted(summary.failures.items()):
        lines.append(f"  client {client_id:>4}: FAILED: {message}")
    lines.append(
        f"  Total: {summary.total_created} recommendation(s) for "
        f"{summary.clients_processed} client(s), {len(summary.failures)} failed."
    )
    return "\n".join(lines)


def format_bulk_result(action: str, result: BulkResult) -> str:
    lines: list[str] = [f"  {action}: {result.succeeded_count} succeeded, {result.failed_count} failed."]
    for rec_id, message in sorted(result.failures.items()):
        lines.append(f"    id {rec_id}: {message}")
    return "\n".join(lines)
