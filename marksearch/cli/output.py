"""Rendering of search results for the terminal."""

from typing import Any

import click
import msgspec
from rich.console import Console
from rich.table import Table
from rich.text import Text

from marksearch.core.models import Field, RankedResult, RecordKind
from marksearch.search.highlighting import Highlighter

KIND_STYLES = {
    RecordKind.BOOKMARK: "cyan",
    RecordKind.TAB: "green",
    RecordKind.HISTORY: "magenta",
    RecordKind.SEARCH_ENGINE: "blue",
    RecordKind.CUSTOM_SEARCH: "blue",
    RecordKind.DIRECT_URL: "yellow",
}

HIGHLIGHT_STYLE = "bold yellow"


def highlighted_text(
    text: str, result: RankedResult, text_field: Field, highlighter: Highlighter
) -> Text:
    """Rich text with the result's matched spans emphasized."""
    rendered = Text(text)
    spans = result.highlights.get(text_field, [])
    for highlight in highlighter.highlights(text, spans):
        rendered.stylize(HIGHLIGHT_STYLE, highlight.start_offset, highlight.end_offset)
    return rendered


def display_results(
    console: Console,
    results: list[RankedResult],
    query: str,
    highlight: bool = True,
) -> None:
    """Print results as a table."""
    if not results:
        console.print(f"[yellow]No results for '{query}'[/yellow]")
        return

    highlighter = Highlighter()
    table = Table(title=f"Results for '{query}'" if query else "Results")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Kind")
    table.add_column("Title", overflow="fold")
    table.add_column("URL", overflow="fold")
    table.add_column("Tags")
    table.add_column("Score", justify="right")

    for position, result in enumerate(results, 1):
        record = result.record
        if highlight:
            title = highlighted_text(record.title, result, Field.TITLE, highlighter)
            url = highlighted_text(record.display_url, result, Field.URL, highlighter)
        else:
            title, url = Text(record.title), Text(record.display_url)
        kind = Text(record.kind.value, style=KIND_STYLES[record.kind])
        if record.dupe:
            kind.append(" dupe", style="red")
        table.add_row(
            str(position), kind, title, url, record.tags_text, f"{result.score:.1f}"
        )

    console.print(table)
    console.print(f"[dim]{len(results)} results[/dim]")


def result_to_dict(result: RankedResult) -> dict[str, Any]:
    record = result.record
    return {
        "kind": record.kind.value,
        "id": record.source_id,
        "title": record.title,
        "url": record.url,
        "tags": list(record.tags),
        "folder": list(record.folder_path),
        "score": round(result.score, 3),
        "match_quality": round(result.match_quality, 3),
        "highlights": {
            f.value: [[s.start, s.end] for s in spans]
            for f, spans in result.highlights.items()
        },
    }


def print_json(data: Any) -> None:
    """Print data as indented JSON."""
    click.echo(msgspec.json.format(msgspec.json.encode(data), indent=2).decode())


def display_taxonomy(console: Console, counts: dict[str, int], title: str) -> None:
    """Print tag or folder names with their bookmark counts."""
    if not counts:
        console.print(f"[yellow]No {title.lower()} found[/yellow]")
        return

    table = Table(title=title)
    table.add_column("Name")
    table.add_column("Bookmarks", justify="right")
    for name, count in counts.items():
        table.add_row(name, str(count))
    console.print(table)
