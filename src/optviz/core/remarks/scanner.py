from __future__ import annotations

from collections.abc import Iterable, Iterator

from optviz.core.remarks.patterns import DOC_END_PATTERN, DOC_START_PATTERN


def _strip_line_ending(line: str) -> str:
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith("\n") or line.endswith("\r"):
        return line[:-1]
    return line


def iter_document_spans(lines: Iterable[str]) -> Iterator[str]:
    """
    Group a line stream into YAML document spans.

    Args:
        lines: Text lines, with or without trailing newlines. Consumed once, forward only.

    Yields:
        str: One document per span, joined with ``\\n``. The ``---`` marker line is
        kept at the head of its span so the tag on it can be recovered later.

    Notes:
        A ``...`` line closes the current span. Lines outside a document (before the
        first marker or between an end marker and the next start) are dropped.
    """
    buffer: list[str] = []
    in_document = False

    for raw_line in lines:
        line = _strip_line_ending(raw_line)

        if DOC_START_PATTERN.match(line):
            if in_document and buffer:
                yield "\n".join(buffer)
            buffer = [line]
            in_document = True
            continue

        if DOC_END_PATTERN.match(line):
            if in_document and buffer:
                yield "\n".join(buffer)
            buffer = []
            in_document = False
            continue

        if in_document:
            buffer.append(line)

    if buffer:
        yield "\n".join(buffer)


__all__ = ["iter_document_spans"]
