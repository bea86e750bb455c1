"""Record CLI commands (list/show/stats/evaluate/export)."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from regintel.config import config
from regintel.services import get_approval_service, get_db

logger = logging.getLogger(__name__)

PRIORITY_COLORS = {"critical": "red", "high": "yellow", "medium": "cyan", "low": "white"}

EXPORT_KINDS = ["update", "case", "article", "historical"]


def register_record_commands(cli: click.Group) -> None:
    """Register record commands on the main CLI group."""
    cli.add_command(list_updates)
    cli.add_command(show)
    cli.add_command(stats)
    cli.add_command(evaluate)
    cli.add_command(export)


def _warn_invalid(result: tuple[bool, str]) -> None:
    is_valid, error = result
    if not is_valid:
        click.echo(click.style(f"Warning: {error}", fg="yellow"))


@click.command("list")
@click.option("-r", "--region", help="Filter by region")
@click.option("-p", "--priority", help="Filter by priority")
@click.option("-t", "--type", "update_type", help="Filter by update type")
@click.option(
    "-n", "--limit", default=20, type=click.IntRange(1, 1000), help="Maximum results (1-1000)"
)
def list_updates(region: Optional[str], priority: Optional[str], update_type: Optional[str], limit: int) -> None:
    """List regulatory updates, newest first."""
    # Valid filters are normalized to the stored case; invalid ones only warn
    if region:
        is_valid, error = config.validate_region(region)
        _warn_invalid((is_valid, error))
        if is_valid:
            region = config.normalize_region(region)
    if priority:
        is_valid, error = config.validate_priority(priority)
        _warn_invalid((is_valid, error))
        if is_valid:
            priority = config.normalize_priority(priority)
    if update_type:
        is_valid, error = config.validate_update_type(update_type)
        _warn_invalid((is_valid, error))
        if is_valid:
            update_type = config.normalize_update_type(update_type)

    updates = get_db().list_regulatory_updates(
        region=region, priority=priority, update_type=update_type, limit=limit
    )
    if not updates:
        click.echo("No regulatory updates found.")
        return

    click.echo(f"Found {len(updates)} updates:\n")
    for update in updates:
        tag = click.style(f"[{update.priority.upper()}]", fg=PRIORITY_COLORS.get(update.priority, "white"))
        click.echo(f"[{update.id}] {tag} {update.title}")
        click.echo(f"     Region: {update.region} | Type: {update.update_type} | Published: {update.published_at or 'N/A'}")


@click.command()
@click.argument("update_id", type=int)
def show(update_id: int) -> None:
    """Show detailed information about a regulatory update."""
    update = get_db().get_regulatory_update(update_id)
    if not update:
        click.echo(click.style(f"Regulatory update not found: {update_id}", fg="red"))
        sys.exit(1)

    click.echo(click.style(f"\n{update.title}", fg="bright_white", bold=True))
    click.echo("-" * 60)
    click.echo(f"ID:           {update.id}")
    click.echo(f"Region:       {update.region}")
    click.echo(f"Type:         {update.update_type}")
    click.echo(f"Priority:     {update.priority}")
    click.echo(f"Source:       {update.source_id or 'N/A'}")
    click.echo(f"Source URL:   {update.source_url or 'N/A'}")
    click.echo(f"Published:    {update.published_at or 'N/A'}")
    click.echo(f"Device type:  {update.device_type or 'N/A'}")
    click.echo(f"Categories:   {', '.join(update.categories) or 'N/A'}")
    click.echo(f"Keywords:     {', '.join(update.keywords) or 'N/A'}")

    if update.description:
        click.echo(f"\nDescription:\n{update.description}")


@click.command()
def stats() -> None:
    """Show database statistics."""
    stats_data = get_db().get_statistics()

    click.echo(click.style("\nRegulatory Intelligence Statistics", fg="bright_white", bold=True))
    click.echo("=" * 40)
    click.echo(f"Regulatory updates: {stats_data['total_updates']}")
    click.echo(f"  last 7 days:      {stats_data['recent_updates']}")
    click.echo(f"  enhanced:         {stats_data['enhanced_updates']}")
    click.echo(f"Legal cases:        {stats_data['total_legal_cases']}")
    click.echo(f"Articles:           {stats_data['total_articles']}")
    click.echo(f"Historical records: {stats_data['total_historical']}")
    click.echo(f"Collection runs:    {stats_data['collection_runs']}")

    for label, key in (("Region", "by_region"), ("Priority", "by_priority"), ("Update Type", "by_type")):
        if stats_data.get(key):
            click.echo(f"\nBy {label}:")
            for name, count in sorted(stats_data[key].items()):
                click.echo(f"  {name}: {count}")


@click.command()
@click.argument("update_id", type=int)
def evaluate(update_id: int) -> None:
    """Run the approval evaluation for a regulatory update."""
    update = get_db().get_regulatory_update(update_id)
    if not update:
        click.echo(click.style(f"Regulatory update not found: {update_id}", fg="red"))
        sys.exit(1)

    decision = get_approval_service().evaluate_regulatory_update(update)
    verdict = click.style("APPROVED", fg="green") if decision.approved else click.style("REVIEW", fg="yellow")
    click.echo(f"{verdict} confidence={decision.confidence:.2f} review_level={decision.review_level}")
    for label, values in (
        ("Reasoning", decision.reasoning),
        ("Required actions", decision.required_actions),
        ("Risk factors", decision.risk_factors),
        ("Compliance issues", decision.compliance_issues),
    ):
        if values:
            click.echo(f"\n{label}:")
            for value in values:
                click.echo(f"  - {value}")


@click.command()
@click.argument("kind", type=click.Choice(EXPORT_KINDS))
@click.argument("record_id", type=int)
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output PDF path")
def export(kind: str, record_id: int, output: Optional[Path]) -> None:
    """
    Export a record as PDF.

    KIND is one of update, case, article or historical.
    """
    from regintel.export import pdf

    db = get_db()
    loaders = {
        "update": (db.get_regulatory_update, pdf.regulatory_update_pdf),
        "case": (db.get_legal_case, pdf.legal_decision_pdf),
        "article": (db.get_knowledge_article, pdf.knowledge_article_pdf),
        "historical": (db.get_historical_record, pdf.historical_document_pdf),
    }
    load, render = loaders[kind]

    record = load(record_id)
    if record is None:
        click.echo(click.style(f"{kind.capitalize()} not found: {record_id}", fg="red"))
        sys.exit(1)

    if output is None:
        output = config.exports_dir / f"{kind}_{record_id}.pdf"
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(render(record))
    click.echo(click.style(f"Exported to {output}", fg="green"))
