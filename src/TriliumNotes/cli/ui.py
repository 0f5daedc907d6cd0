"""Click CLI interface definitions.

Defines the command-line interface structure and routes commands
to the command runner.
"""

from __future__ import annotations

from pathlib import Path

import click
from dotenv import load_dotenv

from TriliumNotes.cli.commands import (
    DeleteCommand,
    GetCommand,
    PingCommand,
    SearchCommand,
    parse_criteria_option,
)
from TriliumNotes.cli.runner import CommandRunner
from TriliumNotes.config import DEFAULT_CONFIG_PATH, load_config_with_defaults
from TriliumNotes.core.errors import ValidationError
from TriliumNotes.core.query import HierarchyKind, HierarchySpec, SearchRequest


@click.group(help="TriliumNotes: search and manage Trilium notes, or serve them as tools.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to YAML config file (merged over the defaults).",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path) -> None:
    """CLI entry group.

    Loads environment variables from .env file before processing config.

    Args:
        ctx: Click context.
        config_path: Path to YAML config file.
    """
    load_dotenv()

    ctx.obj = CommandRunner(load_config_with_defaults(config_path))


@cli.command("search")
@click.argument("text", required=False)
@click.option("--label", "labels", multiple=True, metavar="NAME[:OP[:VALUE[:LOGIC]]]", help="Label criteria.")
@click.option("--relation", "relations", multiple=True, metavar="NAME[:OP[:VALUE[:LOGIC]]]", help="Relation criteria.")
@click.option("--prop", "props", multiple=True, metavar="NAME[:OP[:VALUE[:LOGIC]]]", help="Note property criteria.")
@click.option("--children", "children_of", metavar="NOTE_ID", help="Only direct children of this note.")
@click.option("--descendants", "descendants_of", metavar="NOTE_ID", help="All notes below this note.")
@click.option("--limit", type=click.IntRange(min=1), help="Maximum number of results.")
@click.option("--order-by", "order_by", help="Ordering, e.g. 'note.dateModified desc'.")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON.")
@click.pass_context
def search_cmd(
    ctx: click.Context,
    text: str | None,
    labels: tuple[str, ...],
    relations: tuple[str, ...],
    props: tuple[str, ...],
    children_of: str | None,
    descendants_of: str | None,
    limit: int | None,
    order_by: str | None,
    as_json: bool,
) -> None:
    """Search notes and print an ls-like listing.

    Criteria are combined in the order labels, relations, properties.

    Raises:
        click.UsageError: On malformed criteria or conflicting hierarchy options.
        click.Abort: When the search fails.
    """
    if children_of and descendants_of:
        raise click.UsageError("--children and --descendants are mutually exclusive")

    try:
        criteria = (
            [parse_criteria_option("label", raw) for raw in labels]
            + [parse_criteria_option("relation", raw) for raw in relations]
            + [parse_criteria_option("noteProperty", raw) for raw in props]
        )
    except ValidationError as e:
        raise click.UsageError(str(e)) from e

    hierarchy = None
    if children_of:
        hierarchy = HierarchySpec(HierarchyKind.CHILDREN, children_of)
    elif descendants_of:
        hierarchy = HierarchySpec(HierarchyKind.DESCENDANTS, descendants_of)

    request = SearchRequest(
        text=text,
        criteria=tuple(criteria),
        hierarchy=hierarchy,
        limit=limit,
        order_by=order_by,
    )
    ctx.obj.run(SearchCommand(request=request, as_json=as_json), action=ctx.command.name)


@cli.command("get")
@click.argument("note_id")
@click.option("--no-content", is_flag=True, help="Only print metadata.")
@click.pass_context
def get_cmd(ctx: click.Context, note_id: str, no_content: bool) -> None:
    """Print one note as JSON."""
    ctx.obj.run(GetCommand(note_id=note_id, include_content=not no_content), action=ctx.command.name)


@cli.command("delete")
@click.argument("note_ids", nargs=-1, required=True)
@click.confirmation_option(prompt="Delete these notes permanently?")
@click.pass_context
def delete_cmd(ctx: click.Context, note_ids: tuple[str, ...]) -> None:
    """Delete one or more notes."""
    ctx.obj.run(DeleteCommand(note_ids=note_ids), action=ctx.command.name)


@cli.command("ping")
@click.pass_context
def ping_cmd(ctx: click.Context) -> None:
    """Check the ETAPI URL and token."""
    ctx.obj.run(PingCommand(), action=ctx.command.name)


@cli.command("serve")
@click.pass_context
def serve_cmd(ctx: click.Context) -> None:
    """Serve note tools over stdio for tool-calling clients."""
    ctx.obj.run_server(action=ctx.command.name)
