"""CLI entry point for hunkwise.

Commands:
  review   — review a pull request from a GitHub pull_request event payload
  preview  — show which files and chunks of a local diff would be reviewed
  init     — write .hunkwise.yml and a GitHub Actions workflow
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.logging import RichHandler

from hunkwise_cli.commands.init import init_cmd
from hunkwise_cli.commands.preview import preview_cmd
from hunkwise_cli.commands.review import review_cmd


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
    # Keep HTTP client chatter out of normal runs.
    for noisy in ("urllib3", "httpx", "openai", "anthropic", "github"):
        logging.getLogger(noisy).setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.group()
@click.version_option(
    version=importlib.metadata.version("hunkwise"),
    prog_name="hunkwise",
)
@click.option(
    "--config",
    "config_path",
    default=".hunkwise.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="HUNKWISE_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log prompts, raw model output and HTTP calls.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """AI review of pull request diffs, one chunk at a time."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(review_cmd)
main.add_command(preview_cmd)
main.add_command(init_cmd)
