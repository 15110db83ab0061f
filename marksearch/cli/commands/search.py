"""Search and taxonomy listing commands."""

import click

from marksearch.cli.output import (
    display_results,
    display_taxonomy,
    print_json,
    result_to_dict,
)


def get_orchestrator(ctx):
    """Get the search orchestrator from context."""
    return ctx.obj.orchestrator


@click.command()
@click.argument("query", nargs=-1)
@click.option(
    "--strategy",
    "-s",
    type=click.Choice(["precise", "fuzzy"]),
    help="Matching strategy (default from configuration)",
)
@click.option("--limit", "-n", type=int, help="Maximum results to show")
@click.option("--active-url", help="URL of the current page, for empty queries")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@click.option("--no-highlight", is_flag=True, help="Disable match highlighting")
@click.pass_context
def search(
    ctx: click.Context,
    query: tuple[str, ...],
    strategy: str | None,
    limit: int | None,
    active_url: str | None,
    output_format: str,
    no_highlight: bool,
) -> None:
    """Search bookmarks, tabs and history.

    Prefix the query to narrow it down:

    \b
    - "b ..." bookmarks, "t ..." tabs, "h ..." history and tabs
    - "s ..." search engines only
    - "#tag" tags, "~folder" folders
    """
    console = ctx.obj.console
    orchestrator = get_orchestrator(ctx)
    raw_query = " ".join(query)

    if active_url:
        orchestrator.context.active_url = active_url

    results = orchestrator.search(raw_query, strategy)
    if limit is not None:
        results = results[:limit]

    if output_format == "json":
        print_json([result_to_dict(r) for r in results])
    else:
        display_results(console, results, raw_query, highlight=not no_highlight)


@click.command()
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
)
@click.pass_context
def tags(ctx: click.Context, output_format: str) -> None:
    """List all bookmark tags."""
    counts = get_orchestrator(ctx).list_tags()
    if output_format == "json":
        print_json(counts)
    else:
        display_taxonomy(ctx.obj.console, counts, "Tags")


@click.command()
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
)
@click.pass_context
def folders(ctx: click.Context, output_format: str) -> None:
    """List all bookmark folders."""
    counts = get_orchestrator(ctx).list_folders()
    if output_format == "json":
        print_json(counts)
    else:
        display_taxonomy(ctx.obj.console, counts, "Folders")
