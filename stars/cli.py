"""Command-line interface to YOUR GitHub stars."""

import logging
import shutil
import webbrowser
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import click

from stars import __version__
from stars.config import DEFAULT_CONCURRENCY, DEFAULT_MONTHS
from stars.exceptions import StarsError
from stars.logging import LOG_LEVELS, configure_logging, get_logger, parse_level
from stars.manager import StarManager
from stars.store import StarStore
from stars.types.stars import BatchResult, StarRecord

logger = get_logger("cli")


@dataclass
class CliState:
    """Options shared by every subcommand, plus how to build collaborators."""

    concurrency: int = DEFAULT_CONCURRENCY
    cache: Path | None = None
    manager_factory: Callable[[Path | None], StarManager] = field(
        default=lambda cache: StarManager.create(cache_path=cache)
    )
    store_factory: Callable[[Path | None], StarStore] = StarStore


pass_state = click.make_pass_decorator(CliState, ensure=True)


def open_manager(state: CliState) -> StarManager:
    """Build the StarManager, turning setup failures into a CLI error."""
    try:
        manager = state.manager_factory(state.cache)
    except StarsError as e:
        raise click.ClickException(str(e)) from e
    click.get_current_context().call_on_close(manager.close)
    return manager


def warm_cache(manager: StarManager, concurrency: int) -> None:
    try:
        result = manager.save_if_empty(concurrency)
    except StarsError as e:
        raise click.ClickException(str(e)) from e
    if result is not None:
        report(result, "Saved {count} stars")


def report(result: BatchResult, message: str) -> None:
    """Print a summary; partial failure is logged, never fatal."""
    click.echo(message.format(count=result.count))
    if result.error is not None:
        logger.warning("%s", result.error)
        click.echo(
            f"{len(result.errors)} operation(s) failed; use --log-level debug for details",
            err=True,
        )


def truncate(line: str, width: int) -> str:
    """Cut a line to width characters, marking the cut with '...'."""
    if width > 3 and len(line) > width:
        return line[: width - 3] + "..."
    return line


def format_table(header: Sequence[str], rows: Sequence[Sequence[str]], width: int = 0) -> str:
    """Left-aligned columns separated by two spaces, lines cut to width."""
    table = [list(header)] + [[str(cell) for cell in row] for row in rows]
    widths = [max(len(row[i]) for row in table) for i in range(len(header))]

    lines = []
    for row in table:
        cells = [cell.ljust(widths[i]) for i, cell in enumerate(row[:-1])]
        cells.append(row[-1])
        lines.append(truncate("  ".join(cells).rstrip(), width))
    return "\n".join(lines)


def star_rows(stars: list[StarRecord], with_language: bool) -> list[list[str]]:
    rows = []
    for star in stars:
        row = [
            star.pushed_at.isoformat(timespec="seconds"),
            star.starred_at.isoformat(timespec="seconds"),
            str(star.stargazers),
        ]
        if with_language:
            row.append(star.language)
        row.extend([star.url, star.description])
        rows.append(row)
    return rows


@click.group()
@click.option(
    "--log-level",
    "-o",
    default="info",
    show_default=True,
    type=click.Choice(sorted(LOG_LEVELS), case_sensitive=False),
    help="Log level",
)
@click.option(
    "--concurrency",
    "-w",
    default=DEFAULT_CONCURRENCY,
    show_default=True,
    type=click.IntRange(min=0),
    help="Limit worker threads for network I/O operations (0 = unbounded)",
)
@click.option(
    "--cache",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="STARS_CACHE_PATH",
    help="Path to the local cache database",
)
@pass_state
def main(state: CliState, log_level: str, concurrency: int, cache: Path | None) -> None:
    """Stars is a command-line GitHub Stars manager.

    Facilitates efficient management of a user's GitHub starred
    projects / repositories, a.k.a. "Stars".
    """
    configure_logging(
        level=parse_level(log_level),
        http_level=logging.DEBUG if log_level.lower() == "trace" else None,
    )
    state.concurrency = concurrency
    state.cache = cache


@main.command()
def version() -> None:
    """Show version of stars."""
    click.echo(f"stars version {__version__}")


@main.command()
@pass_state
def save(state: CliState) -> None:
    """Fetch all of the current user's starred projects to the local cache."""
    manager = open_manager(state)
    try:
        result = manager.save_all(state.concurrency)
    except StarsError as e:
        raise click.ClickException(str(e)) from e
    report(result, "Saved {count} stars")


@main.command()
@click.option("--months", "-m", default=DEFAULT_MONTHS, show_default=True, type=click.IntRange(min=0),
              help="Only star repositories pushed to within this many months")
@click.option("--from-url", "-u", "from_url", help="URL to crawl to add new stars from")
@click.option("--from-org", "-r", "from_org", help="Organization to add new stars from")
@click.option("--from-user", "-s", "from_user", help="User to add new stars from")
@pass_state
def add(
    state: CliState,
    months: int,
    from_url: str | None,
    from_org: str | None,
    from_user: str | None,
) -> None:
    """Add (star) repositories, specified in various ways."""
    if sum(1 for source in (from_url, from_org, from_user) if source) != 1:
        raise click.UsageError(
            "Can only pass one of: -u/--from-url, -r/--from-org, -s/--from-user"
        )

    manager = open_manager(state)
    try:
        if from_url:
            result = manager.star_from_url(from_url, months, state.concurrency)
        elif from_org:
            logger.info("Attempting to star repositories from %s", from_org)
            result = manager.star_from_org(from_org, months, state.concurrency)
        else:
            logger.info("Attempting to star repositories from %s", from_user)
            result = manager.star_from_user(from_user, months, state.concurrency)
    except StarsError as e:
        raise click.ClickException(str(e)) from e

    report(result, "Starred {count} repositories")


@main.command()
@pass_state
def topics(state: CliState) -> None:
    """List all topics of all stars, sorted by occurrence count."""
    manager = open_manager(state)
    warm_cache(manager, state.concurrency)

    pairs = manager.topics()
    if pairs:
        click.echo(format_table(["TOPIC", "OCCURRENCES"], [[t, str(n)] for t, n in pairs]))


@main.command()
@click.option("--count", "-c", default=6, show_default=True, type=click.IntRange(min=0),
              help="Number of stars to show")
@click.option("--language", "-l", default="", help="Limit to projects written only in this language")
@click.option("--topic", "-t", default="", help="Limit to projects with this topic")
@click.option("--random", "-r", "random_order", is_flag=True, help="Randomize results")
@click.option("--browse", "-b", is_flag=True,
              help="Open stars in browser instead of writing them to stdout")
@click.option("--width", "-d", default=0, type=click.IntRange(min=0),
              help="Maximum width (as descriptions can sometimes get lengthy)")
@pass_state
def show(
    state: CliState,
    count: int,
    language: str,
    topic: str,
    random_order: bool,
    browse: bool,
    width: int,
) -> None:
    """Display a tabulated list of stars given project filters."""
    manager = open_manager(state)
    warm_cache(manager, state.concurrency)

    try:
        stars = manager.query(count, language.lower(), topic, random_order)
    except StarsError as e:
        raise click.ClickException(str(e)) from e

    if browse:
        for star in stars:
            webbrowser.open(star.url)
        return

    max_width = width or shutil.get_terminal_size().columns
    header = ["PUSHED", "STARRED", "STARS"]
    if not language:
        header.append("LANGUAGE")
    header.extend(["URL", "DESCRIPTION"])

    click.echo(format_table(header, star_rows(stars, not language), max_width - 1))


@main.command()
@pass_state
def clear(state: CliState) -> None:
    """Wipe the local file containing the fetched results of all stars."""
    try:
        state.store_factory(state.cache).clear()
    except StarsError as e:
        raise click.ClickException(str(e)) from e


@main.command()
@click.option("--months", "-m", default=DEFAULT_MONTHS, show_default=True, type=click.IntRange(min=0),
              help="Number of months to delete projects older than")
@click.option("--include-archived", "-a", is_flag=True, help="Include archived stars")
@pass_state
def cleanup(state: CliState, months: int, include_archived: bool) -> None:
    """Un-star projects older than n months, optionally also archived ones."""
    manager = open_manager(state)
    warm_cache(manager, state.concurrency)

    try:
        result = manager.cleanup(months, include_archived, state.concurrency)
    except StarsError as e:
        raise click.ClickException(str(e)) from e

    report(result, "Removed {count} stars")


if __name__ == "__main__":
    main()
