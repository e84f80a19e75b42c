"""preview command — inspect what a local diff would send for review."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from hunkwise_core.config import load_config
from hunkwise_core.diff import parse_diff
from hunkwise_core.errors import ConfigError
from hunkwise_core.filters import filter_files
from hunkwise_core.models import PRContext
from hunkwise_core.prompt import build_prompt

console = Console()


@click.command("preview")
@click.argument("diff_file", type=click.File("r"))
@click.option("--exclude", default=None, help="Comma-separated glob patterns to skip. Overrides config file.")
@click.option("--prompts", "show_prompts", is_flag=True, help="Print the full prompt rendered for each chunk.")
@click.option("--title", default="", help="PR title to embed in rendered prompts.")
@click.option("--description", default="", help="PR description to embed in rendered prompts.")
@click.pass_context
def preview_cmd(ctx, diff_file, exclude: str | None, show_prompts: bool, title: str, description: str):
    """Parse DIFF_FILE offline and list the chunks that would be reviewed.

    Nothing is sent anywhere: this is for checking exclude patterns and the
    line numbers the model will see. Use `-` to read the diff from stdin.
    """
    config_path = ctx.obj["config_path"] if ctx.obj else ".hunkwise.yml"
    try:
        config = load_config(config_path, cli_overrides={"exclude": exclude})
    except ConfigError as e:
        raise click.UsageError(e.message)

    files = parse_diff(diff_file.read())
    kept = filter_files(files, config["exclude"])

    if not kept:
        console.print("[yellow]Nothing to review.[/yellow]")
        return

    table = Table(title="Chunks to review", show_header=True, header_style="bold cyan")
    table.add_column("File")
    table.add_column("Hunk")
    table.add_column("Lines", justify="right")
    for file in kept:
        for chunk in file.chunks:
            table.add_row(escape(file.target_path), escape(chunk.header), str(len(chunk.changes)))
    console.print(table)
    console.print(f"{len(kept)} of {len(files)} file(s) kept.")

    if show_prompts:
        pr = PRContext(owner="", repo="", pull_number=0, title=title, description=description)
        for file in kept:
            for chunk in file.chunks:
                # click.echo, not rich: prompts contain [brackets] rich would read as markup.
                click.echo(build_prompt(file.target_path, chunk, pr, config.get("max_chars_per_chunk")))
