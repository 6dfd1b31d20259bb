"""Locate the test files a test run's output refers to."""

import logging
import os
import re
from pathlib import Path

logger = logging.getLogger(__name__)

EXCLUDED_DIRS = frozenset({"node_modules", ".git"})

# One character of a path segment as it appears inside test output. Quotes,
# brackets, colons and commas usually delimit paths in stack traces.
_SEGMENT_CHAR = r"""[^/\s:()\[\]'"`,]"""
_BRACE_RE = re.compile(r"\{([^{}]*)\}")


def expand_braces(pattern: str) -> list[str]:
    """Expand {a,b} alternatives: "*.{test,spec}.*" -> ["*.test.*", "*.spec.*"]."""
    match = _BRACE_RE.search(pattern)
    if not match:
        return [pattern]
    head, tail = pattern[: match.start()], pattern[match.end():]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(head + option + tail))
    return expanded


def glob_to_regex(pattern: str) -> str:
    """Translate a brace-free glob into an unanchored regex source.

    fnmatch.translate does not fit here: it treats ** like *, knows no
    {a,b} alternatives and anchors the whole string, while paths have to
    be found inside arbitrary lines of test output.
    """
    parts: list[str] = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            parts.append(f"(?:{_SEGMENT_CHAR}*/)*")
            i += 3
            continue
        if pattern.startswith("**", i):
            parts.append(r"\S*")
            i += 2
            continue
        char = pattern[i]
        if char == "*":
            parts.append(f"{_SEGMENT_CHAR}*")
        elif char == "?":
            parts.append(_SEGMENT_CHAR)
        else:
            parts.append(re.escape(char))
        i += 1
    return "".join(parts)


def compile_patterns(patterns: list[str]) -> list[re.Pattern[str]]:
    """Compile globs into case-insensitive regexes, skipping negated ones."""
    compiled = []
    for pattern in patterns:
        if pattern.startswith("!"):
            continue
        for expanded in expand_braces(pattern):
            compiled.append(re.compile(glob_to_regex(expanded), re.IGNORECASE))
    return compiled


def _relative_if_inside(path: Path, root: Path) -> str | None:
    resolved = path.resolve()
    if not resolved.is_file() or not resolved.is_relative_to(root):
        return None
    return Path(os.path.relpath(resolved, root)).as_posix()


def _glob_files(root: Path, patterns: list[str]) -> list[str]:
    found: dict[str, None] = {}
    for pattern in patterns:
        if pattern.startswith("!"):
            continue
        for expanded in expand_braces(pattern):
            for path in root.glob(expanded):
                if EXCLUDED_DIRS.intersection(path.relative_to(root).parts):
                    continue
                if path.is_file():
                    found.setdefault(path.relative_to(root).as_posix())
    return list(found)


def find_test_files(output: str, patterns: list[str], cwd: str) -> list[str]:
    """Return paths (relative to cwd) of existing test files named in output.

    Every output line is scanned for substrings matching the patterns. If
    none of them is an existing file, fall back to globbing the tree and
    keeping the files whose relative path occurs anywhere in the output.
    """
    root = Path(cwd).resolve()
    regexes = compile_patterns(patterns)
    matched: dict[str, None] = {}
    lines = output.splitlines()

    for line in lines:
        for regex in regexes:
            for match in regex.finditer(line):
                candidate = match.group(0)
                if not candidate:
                    continue
                path = Path(candidate)
                relative = _relative_if_inside(path if path.is_absolute() else root / path, root)
                if relative is not None:
                    matched.setdefault(relative)

    if not matched:
        for relative in _glob_files(root, patterns):
            if relative in output:
                matched.setdefault(relative)

    logger.debug(
        "Test file detection results:\n- Output lines scanned: %d\n- Patterns used: %s\n- Matched files: %s",
        len(lines),
        ", ".join(patterns),
        ", ".join(matched) or "none",
    )
    return list(matched)
