"""review command — run AI review for a pull_request event."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape

from hunkwise_core.config import PROVIDERS, load_config, validate_config
from hunkwise_core.errors import ConfigError, ReviewError
from hunkwise_core.events import read_event
from hunkwise_core.gh.pull_request import GitHubPlatform
from hunkwise_core.reviewer import ReviewSummary, get_reviewer, run_review

console = Console()


def _print_summary(summary: ReviewSummary) -> None:
    console.print(
        f"\n[bold]{escape(summary.repo)}#{summary.pr_number}[/bold] ({summary.event}): "
        f"{len(summary.reviewed_files)} file(s) reviewed, {summary.skipped_files} skipped · "
        f"{summary.chunks_reviewed} chunk(s), {summary.chunks_failed} failed · "
        f"{len(summary.comments)} comment(s)"
        + (" posted" if summary.submitted else "")
    )


@click.command("review")
@click.option(
    "--event-path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Path to the pull_request event JSON. Defaults to $GITHUB_EVENT_PATH.",
)
@click.option(
    "--provider",
    type=click.Choice(PROVIDERS),
    default=None,
    help="AI model provider. Overrides config file.",
)
@click.option("--model", default=None, help="Model identifier. Defaults to the provider's default model.")
@click.option("--exclude", default=None, help='Comma-separated glob patterns to skip, e.g. "*.md,dist/**".')
@click.option("--max-workers", type=int, default=None, help="Chunks reviewed concurrently (default 1).")
@click.option(
    "--shadow",
    "-s",
    is_flag=True,
    help="Dry-run mode: print review comments without posting to GitHub.",
)
@click.pass_context
def review_cmd(
    ctx,
    event_path: str | None,
    provider: str | None,
    model: str | None,
    exclude: str | None,
    max_workers: int | None,
    shadow: bool,
):
    """Review the pull request described by a GitHub event payload.

    Handles `opened` (whole PR) and `synchronize` (only the pushed commits)
    actions; any other action is a no-op.

    \b
    Required environment variables:
      GITHUB_TOKEN         GitHub token (or use gh CLI)
      OPENAI_API_KEY       Required when using --provider openai
      ANTHROPIC_API_KEY    Required when using --provider anthropic
    """
    from hunkwise_cli.auth import resolve_github_token

    config_path = ctx.obj["config_path"] if ctx.obj else ".hunkwise.yml"
    try:
        config = load_config(
            config_path,
            cli_overrides={"provider": provider, "model": model, "exclude": exclude, "max_workers": max_workers},
        )
        if not config.get("github_token"):
            config["github_token"] = resolve_github_token()
        validate_config(config)

        payload = read_event(event_path)
        platform = GitHubPlatform(config["github_token"], base_url=config["github_api_url"])
        reviewer = get_reviewer(config)
        summary = run_review(payload, platform, reviewer, config, shadow=shadow)
    except ConfigError as e:
        raise click.UsageError(e.message)
    except ReviewError as e:
        raise click.ClickException(f"{e.kind.value} error: {e.message}")

    if summary is not None:
        _print_summary(summary)
