"""CLI interface for classdojo-downloader.

Commands:
    setup   - Store ClassDojo credentials and student IDs
    fetch   - Download attachments from the students' story feeds
    status  - Show configuration and what is already on disk
"""

import sys
from pathlib import Path

import click

from .config import (
    CONFIG_FILE,
    AppConfig,
    Credentials,
    config_exists,
    load_config,
    parse_students,
    save_config,
)
from .errors import AuthError, ConfigError
from .logging_config import setup_logging


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--config", type=click.Path(), default=None, help="Config file path")
@click.option(
    "--log-file", type=click.Path(), default=None, help="Also write a debug log here"
)
@click.pass_context
def main(ctx, verbose, config, log_file):
    """ClassDojo Downloader — Save your students' story feed photos and videos."""
    setup_logging(debug=verbose, log_file=Path(log_file) if log_file else None)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config) if config else CONFIG_FILE


def _load(config_path: Path) -> AppConfig:
    try:
        return load_config(config_path)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.pass_context
def setup(ctx):
    """Configure ClassDojo credentials and student IDs."""
    config_path = ctx.obj["config_path"]

    click.echo("ClassDojo Downloader — Setup")
    click.echo("=" * 40)
    click.echo()
    click.echo("Use the email and password you sign in to ClassDojo with.")
    click.echo("Student IDs appear in the storyFeed request made by the web app")
    click.echo("(DevTools -> Network -> filter 'storyFeed', parameter studentId).")
    click.echo()

    email = click.prompt("email")
    password = click.prompt("password", hide_input=True)
    students = click.prompt("student IDs (comma-separated)", default="", show_default=False)

    config = AppConfig(
        credentials=Credentials(email=email, password=password),
        students=parse_students(students),
    )

    save_config(config, config_path)
    click.echo(f"\nConfig saved to {config_path}")
    click.echo("Run 'classdojo-downloader fetch' to download attachments.")


@main.command()
@click.option("--max-pages", type=int, default=None, help="Feed page budget for the run")
@click.option(
    "--concurrency", type=int, default=None, help="Maximum simultaneous downloads"
)
@click.option(
    "-o", "--output", type=click.Path(), default=None, help="Images directory"
)
@click.option(
    "--student",
    "students",
    multiple=True,
    help="Student ID to process (repeatable, overrides config)",
)
@click.pass_context
def fetch(ctx, max_pages, concurrency, output, students):
    """Download attachments from the configured students' feeds."""
    from .archiver import archive

    config = _load(ctx.obj["config_path"])

    if max_pages is not None:
        config.max_pages = max_pages
    if concurrency is not None:
        config.concurrency = concurrency
    if output:
        config.images_dir = Path(output)
    if students:
        config.students = list(students)

    if config.max_pages < 1 or config.concurrency < 1:
        click.echo("Error: --max-pages and --concurrency must be at least 1.", err=True)
        sys.exit(1)

    if not config.students:
        click.echo("No students configured; nothing to do.")
        return

    try:
        stats = archive(config)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except AuthError as e:
        click.echo(
            f"Error: Failed to login to ClassDojo: {e}", err=True
        )
        sys.exit(1)

    click.echo(
        f"Downloaded {stats.downloaded} files, "
        f"{stats.skipped} already present, {stats.failed} failed."
    )


@main.command()
@click.pass_context
def status(ctx):
    """Show configuration and download status."""
    config_path = ctx.obj["config_path"]
    has_config = config_exists(config_path)

    click.echo("ClassDojo Downloader — Status")
    click.echo("=" * 40)
    click.echo(f"Config: {'Found' if has_config else 'Not configured'} ({config_path})")

    config = _load(config_path)

    if not has_config and not config.credentials.email:
        click.echo("\nRun 'classdojo-downloader setup' to get started.")
        return

    from .ledger import summarize

    click.echo(f"Students: {', '.join(config.students) or 'none'}")
    click.echo(f"Images directory: {config.images_dir}")

    counts = summarize(config.images_dir)
    if not counts:
        click.echo("Downloaded files: none yet")
        return
    for student_id, count in counts.items():
        click.echo(f"  {student_id}: {count:,} files")
