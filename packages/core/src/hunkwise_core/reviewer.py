"""Core PR review orchestration."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from rich.console import Console
from rich.markup import escape

from hunkwise_core.diff import parse_diff
from hunkwise_core.errors import ConfigError
from hunkwise_core.events import parse_event, resolve_diff
from hunkwise_core.filters import filter_files
from hunkwise_core.mapper import map_findings
from hunkwise_core.models import ChunkDiff, FileDiff, PRContext, ReviewCommentRecord
from hunkwise_core.prompt import build_prompt
from hunkwise_core.providers.anthropic import AnthropicReviewer
from hunkwise_core.providers.base import BaseReviewer
from hunkwise_core.providers.openai import OpenAIReviewer

console = Console()
logger = logging.getLogger(__name__)


@dataclass
class ChunkResult:
    path: str
    header: str
    comments: list[ReviewCommentRecord] = field(default_factory=list)
    failed: bool = False  # the model call or its validation failed


@dataclass
class ReviewSummary:
    """What one run did, returned by run_review for the CLI to report."""

    repo: str
    pr_number: int
    event: str  # "created" | "updated"
    reviewed_files: list[str] = field(default_factory=list)
    skipped_files: int = 0
    chunks_reviewed: int = 0
    chunks_failed: int = 0
    comments: list[ReviewCommentRecord] = field(default_factory=list)
    submitted: bool = False


def get_reviewer(config: dict) -> BaseReviewer:
    provider = config["provider"]
    if provider == "openai":
        return OpenAIReviewer(api_key=config["openai_api_key"], model=config.get("model"))
    if provider == "anthropic":
        try:
            return AnthropicReviewer(api_key=config["anthropic_api_key"], model=config.get("model"))
        except ImportError as e:
            raise ConfigError(str(e)) from e
    raise ConfigError(f"Unknown model provider: {provider!r}. Choose 'openai' or 'anthropic'.")


def review_chunk(
    reviewer: BaseReviewer,
    target_path: str,
    chunk: ChunkDiff,
    pr: PRContext,
    max_chars: int | None = None,
    restrict_to_chunk: bool = False,
) -> ChunkResult:
    prompt = build_prompt(target_path, chunk, pr, max_chars)
    findings = reviewer.review(prompt)
    if findings is None:
        logger.warning("No usable review for %s %s; skipping chunk", target_path, chunk.header)
        return ChunkResult(path=target_path, header=chunk.header, failed=True)
    comments = map_findings(target_path, findings, chunk, restrict_to_chunk)
    return ChunkResult(path=target_path, header=chunk.header, comments=comments)


def analyze_files(
    reviewer: BaseReviewer,
    files: list[FileDiff],
    pr: PRContext,
    max_chars: int | None = None,
    max_workers: int = 1,
    restrict_to_chunk: bool = False,
) -> list[ChunkResult]:
    """Review every chunk of every file; results come back in file then chunk order.

    With max_workers > 1 up to that many model requests are in flight at
    once. Executor.map yields in submission order, so the result order does
    not depend on which request finishes first.
    """
    tasks = [(file.target_path, chunk) for file in files if not file.is_deleted for chunk in file.chunks]
    if not tasks:
        return []

    def _run(task: tuple[str, ChunkDiff]) -> ChunkResult:
        path, chunk = task
        return review_chunk(reviewer, path, chunk, pr, max_chars, restrict_to_chunk)

    if max_workers <= 1:
        results = []
        for i, task in enumerate(tasks, 1):
            console.print(f"[[{i}/{len(tasks)}]] Reviewing: {escape(task[0])} {escape(task[1].header)}")
            results.append(_run(task))
        return results

    console.print(f"Reviewing {len(tasks)} chunk(s) with {max_workers} worker(s)")
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(_run, tasks))


def submit_review(platform, pr: PRContext, comments: list[ReviewCommentRecord]) -> bool:
    """Post all comments as one COMMENT review. Returns False (and posts nothing) if empty.

    Platform failures propagate as SubmissionError: a half-posted review is
    worse than none, so there is no partial fallback.
    """
    if not comments:
        console.print("[yellow]No comments to create.[/yellow]")
        return False
    platform.create_review(pr.owner, pr.repo, pr.pull_number, comments)
    console.print(f"[green]Review posted: {len(comments)} comment(s).[/green]")
    return True


def print_shadow_comments(comments: list[ReviewCommentRecord]) -> None:
    """Print review comments to the terminal without posting to GitHub."""
    if not comments:
        console.print("[yellow]Shadow mode: no comments generated.[/yellow]")
        return
    console.print(f"\n[bold]Shadow review — {len(comments)} comment(s) (not posted)[/bold]\n")
    for c in comments:
        console.print(f"[bold cyan]{escape(c.path)}[/bold cyan]  line [bold]{c.line}[/bold]")
        console.print(f"  {escape(c.body)}")
        console.print()


def run_review(
    payload: dict,
    platform,
    reviewer: BaseReviewer,
    config: dict,
    shadow: bool = False,
) -> ReviewSummary | None:
    """Run the full pipeline for one pull_request event payload.

    Returns None when the event action is not one we review. Fatal errors
    (bad payload, fetch or submission failures) propagate as ReviewError.
    """
    event = parse_event(payload)
    if event is None:
        action = escape(repr(payload.get("action")))
        console.print(f"[yellow]Unsupported event action: {action}. Nothing to do.[/yellow]")
        return None

    pr = platform.get_pr_context(event.owner, event.repo, event.pull_number)
    logger.info("Reviewing %s#%d: %s", event.full_name, pr.pull_number, pr.title)
    summary = ReviewSummary(repo=event.full_name, pr_number=event.pull_number, event=event.kind.value)

    diff = resolve_diff(platform, event)
    files = parse_diff(diff)
    if not files:
        console.print("[yellow]No diff found.[/yellow]")
        return summary

    kept = filter_files(files, config.get("exclude", []))
    summary.skipped_files = len(files) - len(kept)
    summary.reviewed_files = [f.target_path for f in kept]
    logger.info("%d file(s) to review, %d skipped", len(kept), summary.skipped_files)

    results = analyze_files(
        reviewer,
        kept,
        pr,
        max_chars=config.get("max_chars_per_chunk"),
        max_workers=config.get("max_workers", 1),
        restrict_to_chunk=config.get("restrict_to_chunk", False),
    )
    summary.chunks_reviewed = len(results)
    summary.chunks_failed = sum(1 for r in results if r.failed)
    summary.comments = [c for r in results for c in r.comments]

    if shadow:
        print_shadow_comments(summary.comments)
        return summary

    summary.submitted = submit_review(platform, pr, summary.comments)
    return summary
