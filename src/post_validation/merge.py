"""Chunking of long documents and merging of per-chunk results."""

from collections.abc import Iterable, Iterator
from dataclasses import replace

from common.constants import MAX_CHUNK_CHARS

from .models import Issue

PARAGRAPH_SEPARATOR = "\n\n"


def _paragraph_spans(content: str) -> Iterator[tuple[int, int]]:
    start = 0
    for paragraph in content.split(PARAGRAPH_SEPARATOR):
        yield start, start + len(paragraph)
        start += len(paragraph) + len(PARAGRAPH_SEPARATOR)


def chunk_content(content: str, max_chars: int = MAX_CHUNK_CHARS) -> list[tuple[str, int]]:
    """Split a document into paragraph-aligned chunks.

    Paragraphs are packed into a chunk until adding the next one would exceed
    ``max_chars``; a single paragraph longer than that becomes its own chunk.
    Chunks are slices of the document, so joining them with a blank line
    restores it, blank paragraphs included.

    Returns:
        List of (chunk text, number of document lines before the chunk)

    Example:
        >>> chunk_content("aaa\\n\\nbbb\\n\\nccc", max_chars=8)
        [('aaa\\n\\nbbb', 0), ('ccc', 4)]
    """
    spans = []
    chunk_start = chunk_end = None

    for start, end in _paragraph_spans(content):
        if chunk_start is None:
            chunk_start = start
        elif end - chunk_start > max_chars and chunk_end > chunk_start:
            spans.append((chunk_start, chunk_end))
            chunk_start = start
        chunk_end = end

    spans.append((chunk_start, chunk_end))
    return [(content[start:end], content.count("\n", 0, start)) for start, end in spans]


def shift_issue(issue: Issue, line_offset: int) -> Issue:
    """Move an issue found in a chunk to its line in the whole document."""
    if not line_offset or issue.location is None:
        return issue
    return replace(issue, location=replace(issue.location, line=issue.location.line + line_offset))


def deduplicate_issues(issues: Iterable[Issue]) -> list[Issue]:
    """Keep the first issue for each message, compared case-insensitively."""
    unique: dict[str, Issue] = {}
    for issue in issues:
        unique.setdefault(issue.message.lower(), issue)
    return list(unique.values())


def combine_results(results: list[list[Issue]], line_offsets: list[int]) -> list[Issue]:
    """Merge per-chunk issue lists into one de-duplicated document list."""
    merged = [
        shift_issue(issue, offset)
        for chunk_issues, offset in zip(results, line_offsets)
        for issue in chunk_issues
    ]
    return deduplicate_issues(merged)
