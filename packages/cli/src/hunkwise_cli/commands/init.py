"""init command — write .hunkwise.yml and a GitHub Actions workflow."""

from __future__ import annotations

from pathlib import Path

import click
import yaml
from rich.console import Console

from hunkwise_core.config import PROVIDERS
from hunkwise_core.filters import parse_patterns

console = Console()

_WORKFLOW_TEMPLATE = """\
name: hunkwise review

on:
  pull_request:
    types: [opened, synchronize]

jobs:
  review:
    runs-on: ubuntu-latest
    permissions:
      contents: read
      pull-requests: write

    steps:
      - name: Set up Python
        uses: actions/setup-python@v5
        with:
          python-version: "3.12"

      - name: Install hunkwise
        run: pip install "{requirement}"

      - name: Review pull request
        env:
          GITHUB_TOKEN: ${{{{ secrets.GITHUB_TOKEN }}}}
          {api_key_env}: ${{{{ secrets.{api_key_env} }}}}
        run: hunkwise review
"""

_API_KEY_ENV = {"openai": "OPENAI_API_KEY", "anthropic": "ANTHROPIC_API_KEY"}


@click.command("init")
def init_cmd():
    """Set up hunkwise for a repository.

    Creates .hunkwise.yml and, optionally, .github/workflows/hunkwise.yml so
    every opened or updated pull request is reviewed automatically.
    """
    console.print("\n[bold cyan]hunkwise init[/bold cyan]\n")

    provider = click.prompt("AI provider", type=click.Choice(PROVIDERS), default="openai")
    exclude = click.prompt("Exclude patterns (comma-separated, blank for none)", default="", show_default=False)

    config: dict = {"provider": provider}
    patterns = parse_patterns(exclude)
    if patterns:
        config["exclude"] = patterns

    _write_config(config)
    console.print("[green]Created .hunkwise.yml[/green]")

    api_key_env = _API_KEY_ENV[provider]
    if click.confirm("\nGenerate .github/workflows/hunkwise.yml for GitHub Actions?", default=True):
        _write_workflow(provider, api_key_env)
        console.print("[green]Created .github/workflows/hunkwise.yml[/green]")
        console.print(
            f"\n[yellow]Remember to add [bold]{api_key_env}[/bold] to your "
            "GitHub repository secrets (Settings → Secrets → Actions).[/yellow]"
        )

    console.print("\n[bold green]Setup complete![/bold green]")


def _write_config(config: dict) -> None:
    """Write or update .hunkwise.yml, preserving any existing keys."""
    path = Path(".hunkwise.yml")
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text()) or {}
    existing.update(config)
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False))


def _write_workflow(provider: str, api_key_env: str) -> None:
    workflow_dir = Path(".github/workflows")
    workflow_dir.mkdir(parents=True, exist_ok=True)
    requirement = "hunkwise[anthropic]" if provider == "anthropic" else "hunkwise"
    (workflow_dir / "hunkwise.yml").write_text(
        _WORKFLOW_TEMPLATE.format(requirement=requirement, api_key_env=api_key_env)
    )
