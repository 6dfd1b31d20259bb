"""Parsing of tagged model responses into fix records and updated code."""

from fixloop.constants import (
    FILE_PATH_TAG,
    FIX_END_TAG,
    FIX_START_TAG,
    UPDATED_CODE_END_TAG,
    UPDATED_CODE_START_TAG,
)
from fixloop.models import FixRecord

PATH_SEPARATORS = "/\\"


def normalize_fix_path(raw_path: str) -> str:
    """Strip whitespace and leading separators so the path is repo-relative."""
    return raw_path.strip().lstrip(PATH_SEPARATORS)


def _split_joined_tags(line: str) -> list[str]:
    # Models often emit the end tag and the next path tag without a newline
    # in between: "<<<FIX_END>>><<<FILE_PATH>>>next/file".
    if FIX_END_TAG in line and FILE_PATH_TAG in line:
        return line.replace(FIX_END_TAG, FIX_END_TAG + "\n", 1).split("\n")
    return [line]


def parse_fix_records(analysis: str | None) -> list[FixRecord]:
    """Extract the complete per-file fix records from an analysis response.

    Walks the response line by line. A path tag line opens a new record
    (abandoning an unfinished one), a start tag clears the open record's
    body, an end tag completes it, and any other line is appended to the
    open record's body. Lines outside an open record are commentary.

    Body lines are trimmed and concatenated without a separator, the same
    way the response format has always been read.

    Args:
        analysis: Raw response text from the analysis stage.

    Returns:
        Complete records with non-empty paths, in the order they appear.
    """
    if not analysis:
        return []

    records: list[FixRecord] = []
    current: FixRecord | None = None

    for raw_line in analysis.split("\n"):
        for piece in _split_joined_tags(raw_line):
            line = piece.strip()

            if line.startswith(FILE_PATH_TAG):
                current = FixRecord(file_path=normalize_fix_path(line[len(FILE_PATH_TAG):]))
                records.append(current)
                continue

            if current is None or current.is_complete:
                continue

            if line.startswith(FIX_START_TAG):
                current.patch_body = ""
            elif line.startswith(FIX_END_TAG):
                current.is_complete = True
            else:
                current.patch_body += line

    return [record for record in records if record.is_complete and record.file_path]


def extract_fixed_code(response: str) -> str | None:
    """Return the trimmed text between the updated-code sentinels.

    Returns None when either sentinel is missing, which means the model
    produced no usable fix.
    """
    start = response.find(UPDATED_CODE_START_TAG)
    if start == -1:
        return None
    body_start = start + len(UPDATED_CODE_START_TAG)
    end = response.find(UPDATED_CODE_END_TAG, body_start)
    if end == -1:
        return None
    return response[body_start:end].strip()
