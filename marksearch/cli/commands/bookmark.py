"""Bookmark edit and delete commands."""

import asyncio

import click
from rich.prompt import Confirm

from marksearch.core.exceptions import RecordNotFoundError


def get_orchestrator(ctx):
    """Get the search orchestrator from context."""
    return ctx.obj.orchestrator


@click.command()
@click.argument("bookmark_id")
@click.option("--title", "-t", help="New title")
@click.option("--tag", "tags", multiple=True, help="Tag (repeat for several)")
@click.option("--clear-tags", is_flag=True, help="Remove all tags")
@click.option("--url", "-u", help="New URL")
@click.pass_context
def edit(
    ctx: click.Context,
    bookmark_id: str,
    title: str | None,
    tags: tuple[str, ...],
    clear_tags: bool,
    url: str | None,
) -> None:
    """Edit the title, tags or URL of a bookmark.

    Without any option, the bookmark's current state is shown.
    """
    console = ctx.obj.console
    orchestrator = get_orchestrator(ctx)

    try:
        view = orchestrator.edit_bookmark(bookmark_id)
    except RecordNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        ctx.exit(1)

    if title is None and not tags and not clear_tags and url is None:
        console.print(f"\n[bold]Bookmark {view.bookmark_id}[/bold]")
        console.print(f"  Title: {view.title}")
        console.print(f"  URL: {view.url}")
        console.print(f"  Tags: {', '.join(view.tags) or '-'}")
        if view.custom_bonus is not None:
            console.print(f"  Custom bonus: +{view.custom_bonus}")
        return

    new_tags = [] if clear_tags else list(tags or view.tags)
    record = asyncio.run(
        orchestrator.update_bookmark(
            bookmark_id,
            title if title is not None else view.title,
            new_tags,
            url=url,
        )
    )
    console.print(
        f"[green]✓[/green] Updated bookmark {record.source_id}: {record.title} "
        f"{record.tags_text}".rstrip()
    )


@click.command()
@click.argument("bookmark_id")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete(ctx: click.Context, bookmark_id: str, force: bool) -> None:
    """Delete a bookmark."""
    console = ctx.obj.console
    orchestrator = get_orchestrator(ctx)

    try:
        view = orchestrator.edit_bookmark(bookmark_id)
    except RecordNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        ctx.exit(1)

    if not force:
        console.print("\n[bold]Bookmark to delete:[/bold]")
        console.print(f"  Title: {view.title}")
        console.print(f"  URL: {view.url}")
        if not Confirm.ask("Are you sure you want to delete this bookmark?"):
            console.print("[yellow]Cancelled.[/yellow]")
            return

    asyncio.run(orchestrator.delete_bookmark(bookmark_id))
    console.print(f"[green]✓[/green] Deleted bookmark {bookmark_id}")
