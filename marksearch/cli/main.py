"""Main CLI entry point and application setup."""

import asyncio
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

import click
from click.exceptions import Exit
from rich.console import Console

from marksearch import __version__
from marksearch.cli.commands import bookmark, search
from marksearch.cli.output import print_json
from marksearch.config import SearchOptions, load_options
from marksearch.data.providers import JsonFileProvider
from marksearch.reporting import ErrorReporter
from marksearch.search import SearchOrchestrator


@dataclass
class Context:
    """CLI context that holds shared resources."""

    orchestrator: SearchOrchestrator
    options: SearchOptions
    console: Console
    reporter: ErrorReporter
    data_path: Path
    debug: bool = False


LOG_FORMAT = "%(levelname)s: %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(
    verbose: bool = False, quiet: bool = False, debug: bool = False
) -> None:
    """Route library logging to stderr at the level the flags ask for."""
    if quiet:
        level = logging.ERROR
    elif verbose or debug:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format=DEBUG_LOG_FORMAT if debug else LOG_FORMAT,
        datefmt="%H:%M:%S",
    )


def create_console(no_color: bool = False) -> Console:
    """Rich console for result tables and messages."""
    if no_color:
        return Console(width=120, no_color=True, highlight=False, color_system=None)
    return Console(width=120)


def get_data_path(data_file: Path | None = None) -> Path:
    """Get the path of the platform data snapshot."""
    if data_file:
        return data_file

    if env_file := os.environ.get("MARKSEARCH_DATA"):
        return Path(env_file)

    data_home = os.environ.get("XDG_DATA_HOME") or Path.home() / ".local" / "share"
    return Path(data_home) / "marksearch" / "data.json"


class MarkSearchGroup(click.Group):
    """Group that turns unexpected errors into a one-line message and exit 1."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except KeyboardInterrupt:
            if state := _cli_state(ctx):
                state.console.print("[yellow]Interrupted[/yellow]")
            ctx.exit(130)
        except (click.ClickException, click.Abort, Exit, SystemExit):
            raise
        except Exception as e:
            state = _cli_state(ctx)
            if state is None:
                click.echo(f"marksearch: {e}", err=True)
                ctx.exit(1)
            if state.debug:
                raise
            state.reporter.report(e, ctx.invoked_subcommand or "")
            state.console.print(f"[red]Failed:[/red] {e}")
            ctx.exit(1)


def _cli_state(ctx: click.Context) -> Context | None:
    return ctx.obj if isinstance(ctx.obj, Context) else None


@click.group(cls=MarkSearchGroup)
@click.option("--verbose", "-v", is_flag=True, help="Show debug log lines")
@click.option("--quiet", "-q", is_flag=True, help="Only show errors")
@click.option("--no-color", is_flag=True, help="Plain output without colors")
@click.option("--debug", is_flag=True, help="Show tracebacks instead of short errors")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="YAML file replacing the default config locations",
)
@click.option(
    "--data",
    "-d",
    "data_file",
    type=click.Path(path_type=Path),
    help="JSON snapshot of bookmarks, tabs and history",
)
@click.version_option(
    version=__version__,
    prog_name="marksearch",
    message="marksearch version %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    debug: bool,
    config: Path | None,
    data_file: Path | None,
) -> None:
    """Search bookmarks, open tabs and browsing history.

    Results are ranked by match quality, usage and recency.
    """
    setup_logging(verbose=verbose, quiet=quiet, debug=debug)
    console = create_console(no_color=no_color)

    try:
        options = load_options(config)
        data_path = get_data_path(data_file)
        orchestrator = asyncio.run(
            SearchOrchestrator.create(JsonFileProvider(data_path), options)
        )
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted[/yellow]")
        ctx.exit(130)
    except Exception as e:
        if debug:
            raise
        console.print(f"[red]Cannot load search data:[/red] {e}")
        ctx.exit(1)

    ctx.obj = Context(
        orchestrator=orchestrator,
        options=options,
        console=console,
        reporter=ErrorReporter(),
        data_path=data_path,
        debug=debug,
    )


@cli.command(name="config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Show the effective configuration."""
    print_json(ctx.obj.options.to_dict())


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show record counts."""
    console = ctx.obj.console
    data = ctx.obj.orchestrator.context.data

    console.print("\n[bold]Search data[/bold]\n")
    console.print(f"Data file: {ctx.obj.data_path}")
    console.print(f"Bookmarks: {len(data.bookmarks)}")
    console.print(f"Tabs: {len(data.tabs)}")
    console.print(f"History: {len(data.history)}")
    dupes = sum(1 for b in data.bookmarks if b.dupe)
    if dupes:
        console.print(f"[yellow]Duplicate bookmarks: {dupes}[/yellow]")


cli.add_command(search.search)
cli.add_command(search.tags)
cli.add_command(search.folders)
cli.add_command(bookmark.edit)
cli.add_command(bookmark.delete)


def main() -> None:
    """Console script entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception as e:
        if "--debug" in sys.argv:
            raise
        click.echo(f"marksearch: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
