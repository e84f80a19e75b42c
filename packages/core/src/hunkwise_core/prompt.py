"""Render the per-chunk review prompt.

The prompt is the only thing the model sees: no repository context and no
memory of earlier chunks, so everything it needs is embedded here.
"""

from __future__ import annotations

from hunkwise_core.models import ChunkDiff, PRContext

_TRUNCATION_MARKER = "... [diff truncated]"

_INSTRUCTIONS = """Your task is to review pull requests. Instructions:
- Do not give positive comments or compliments.
- Provide comments and suggestions ONLY if there is something to improve, otherwise "reviews" should be an empty array.
- Write the comment in GitHub Markdown format.
- Use the given description only for the overall context and only comment the code.
- IMPORTANT: NEVER suggest adding comments to the code."""


def render_changes(chunk: ChunkDiff, max_chars: int | None = None) -> str:
    """Render the hunk header and every change line prefixed with its line number.

    When ``max_chars`` is set the listing is cut at a line boundary so a
    single huge hunk cannot blow the request size.
    """
    lines = [chunk.header]
    size = len(chunk.header)
    for change in chunk.changes:
        number = change.line_number
        rendered = f"{number if number is not None else ''} {change.content}"
        if max_chars is not None and size + 1 + len(rendered) > max_chars:
            lines.append(_TRUNCATION_MARKER)
            break
        lines.append(rendered)
        size += 1 + len(rendered)
    return "\n".join(lines)


def build_prompt(target_path: str, chunk: ChunkDiff, pr: PRContext, max_chars: int | None = None) -> str:
    return f"""{_INSTRUCTIONS}

Review the following code diff in the file "{target_path}" and take the pull request title and description into account when writing the response.

Pull request title: {pr.title}
Pull request description:

---
{pr.description}
---

Git diff to review:

```diff
{render_changes(chunk, max_chars)}
```
"""
