"""Utilities for generating and rendering code diffs."""

import difflib

from rich.text import Text

ADDED_STYLE = "green"
REMOVED_STYLE = "red"


def generate_unified_diff(
    file_path: str,
    original_content: str,
    modified_content: str,
) -> str:
    """Generate a git-compatible unified diff.

    Args:
        file_path: Relative path from repo root (e.g. "src/app.py").
        original_content: File content before the fix.
        modified_content: File content after the fix.

    Returns:
        Unified diff string with a/ b/ prefixes. Empty string if no changes.
    """
    if original_content == modified_content:
        return ""

    diff_gen = difflib.unified_diff(
        original_content.splitlines(keepends=True),
        modified_content.splitlines(keepends=True),
        fromfile=f"a/{file_path}",
        tofile=f"b/{file_path}",
        lineterm="",
    )

    # keepends=True leaves the newline on content lines; headers have none
    return "\n".join(line[:-1] if line.endswith("\n") else line for line in diff_gen)


def highlight_changes(original_content: str, modified_content: str) -> Text:
    """Render the hunk lines of a diff with removals in red and additions in green.

    File headers and @@ hunk headers are left out; context lines are unstyled.
    """
    diff_text = generate_unified_diff("file", original_content, modified_content)
    rendered = Text()
    # The first two lines are the ---/+++ file headers
    for line in diff_text.splitlines()[2:]:
        if line.startswith("@@"):
            continue
        if line.startswith("-"):
            rendered.append(line, style=REMOVED_STYLE)
        elif line.startswith("+"):
            rendered.append(line, style=ADDED_STYLE)
        else:
            rendered.append(line)
        rendered.append("\n")
    rendered.rstrip()
    return rendered
