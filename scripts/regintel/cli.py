"""
Command-line interface for the regulatory intelligence service.

Provides commands for collecting, enriching, exporting and serving regulatory data.
"""

import logging
from typing import Optional

import click
from dotenv import load_dotenv

# Load environment variables from .env file (if it exists)
load_dotenv()

from . import __version__  # noqa: E402
from .commands.records import register_record_commands  # noqa: E402
from .config import config  # noqa: E402
from .services import get_db, get_pipeline, get_scraper  # noqa: E402

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure console logging, plus a log file if enabled."""
    level = logging.DEBUG if verbose else getattr(logging, str(config.get("logging.level", "INFO")).upper(), logging.INFO)
    log_format = config.get("logging.format")
    logging.basicConfig(level=level, format=log_format, handlers=[logging.StreamHandler()])
    logging.getLogger().setLevel(level)

    if config.get("logging.file_enabled", True):
        log_file = config.logs_dir / "regintel.log"
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(log_format))
        logging.getLogger().addHandler(file_handler)


@click.group()
@click.version_option(version=__version__, prog_name="regintel")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def cli(verbose: bool) -> None:
    """Regulatory Intelligence - collect and analyze medical device regulatory updates."""
    setup_logging(verbose)


register_record_commands(cli)


@cli.command()
@click.option("--no-rss", is_flag=True, help="Skip agency RSS feeds")
@click.option("--dry-run", is_flag=True, help="Scrape and classify without saving")
def collect(no_rss: bool, dry_run: bool) -> None:
    """Scrape all active sources and store new regulatory updates."""
    click.echo("Collecting regulatory data...")
    result = get_pipeline().run(include_rss=False if no_rss else None, dry_run=dry_run)

    click.echo()
    click.echo(click.style(str(result), fg="green" if not result.errors else "yellow"))

    if result.errors:
        click.echo(click.style("\nErrors:", fg="red"))
        for error in result.errors[:5]:
            click.echo(f"  - {error}")
        if len(result.errors) > 5:
            click.echo(f"  ... and {len(result.errors) - 5} more errors")


@cli.command()
@click.option("--all", "show_all", is_flag=True, help="Include configured (inactive) sources")
def sources(show_all: bool) -> None:
    """List regulatory data sources."""
    scraper = get_scraper()
    source_list = scraper.get_sources() if show_all else [s for s in scraper.get_sources() if s.is_active]

    for source in source_list:
        auth = " [auth required]" if source.requires_auth else ""
        click.echo(click.style(f"{source.id}", fg="bright_white", bold=True) + f" ({source.status}){auth}")
        click.echo(f"     {source.name} | {source.region} | {source.category}")
        click.echo(f"     {source.url}")

    stats = scraper.get_stats()
    click.echo(
        f"\n{stats['active_sources']} active, {stats['configured_sources']} configured, "
        f"{stats['total_sources']} total"
    )


@cli.command()
@click.argument("update_id", type=int, required=False)
def enhance(update_id: Optional[int]) -> None:
    """
    Expand regulatory update content with structured analysis sections.

    Enhances UPDATE_ID only, or every update not yet enhanced when omitted.
    """
    from .enrichment.enhancer import ContentEnhancer, mass_enhance_all

    db = get_db()
    if update_id is not None:
        if ContentEnhancer().enhance_update(db, update_id):
            click.echo(click.style(f"Update {update_id} enhanced", fg="green"))
        else:
            click.echo(click.style(f"Update {update_id} not found or already enhanced", fg="yellow"))
        return

    counts = mass_enhance_all(db)
    click.echo(
        click.style(
            f"Enhanced {counts['enhanced']}, skipped {counts['skipped']}, errors {counts['errors']}",
            fg="green" if counts["errors"] == 0 else "yellow",
        )
    )


@cli.command()
def seed() -> None:
    """Load demo records into empty tables."""
    from .sample_data import seed_sample_data

    counts = seed_sample_data(get_db())
    total = sum(counts.values())
    if total == 0:
        click.echo("Database already contains data; nothing seeded.")
        return
    for table, count in counts.items():
        click.echo(f"  {table}: {count}")
    click.echo(click.style(f"Seeded {total} records", fg="green"))


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind")
@click.option("--port", default=8000, type=int, help="Port to bind")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
def serve(host: str, port: int, reload: bool) -> None:
    """Start the JSON API server."""
    import uvicorn

    click.echo(click.style(f"Starting API server at http://{host}:{port}", fg="green"))
    uvicorn.run("regintel.web.main:app", host=host, port=port, reload=reload)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
