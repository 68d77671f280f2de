from __future__ import annotations

from optviz.core.remarks.scanner import iter_document_spans


def test_spans_keep_marker_line_and_normalize_line_endings() -> None:
    lines = [
        "--- !Missed\r\n",
        "Pass: inline\r\n",
        "Function: foo\r\n",
        "...\r\n",
    ]
    assert list(iter_document_spans(lines)) == ["--- !Missed\nPass: inline\nFunction: foo"]


def test_lines_outside_documents_are_dropped() -> None:
    lines = [
        "junk before any document\n",
        "--- !Passed\n",
        "Pass: licm\n",
        "...\n",
        "noise between documents\n",
        "--- !Analysis\n",
        "Pass: size-info\n",
    ]
    assert list(iter_document_spans(lines)) == [
        "--- !Passed\nPass: licm",
        "--- !Analysis\nPass: size-info",
    ]


def test_start_marker_closes_previous_span_without_end_marker() -> None:
    lines = ["--- !Missed", "Pass: a", "--- !Passed", "Pass: b"]
    assert list(iter_document_spans(lines)) == ["--- !Missed\nPass: a", "--- !Passed\nPass: b"]


def test_marker_only_span_is_still_forwarded() -> None:
    lines = ["---\n", "--- !Passed\n", "Pass: b\n"]
    assert list(iter_document_spans(lines)) == ["---", "--- !Passed\nPass: b"]


def test_end_marker_tolerates_surrounding_whitespace() -> None:
    lines = ["--- !Missed", "Pass: a", "  ...  ", "Pass: ignored"]
    assert list(iter_document_spans(lines)) == ["--- !Missed\nPass: a"]


def test_dashes_inside_values_are_not_markers() -> None:
    lines = ["--- !Missed", "Pass: a", "----", "  - String: '--- not a marker'"]
    assert list(iter_document_spans(lines)) == [
        "--- !Missed\nPass: a\n----\n  - String: '--- not a marker'"
    ]


def test_empty_input_yields_nothing() -> None:
    assert list(iter_document_spans([])) == []
    assert list(iter_document_spans(["...", "text"])) == []


def test_scanner_is_lazy() -> None:
    consumed: list[str] = []

    def _lines():
        for line in ["--- !Missed", "Pass: a", "--- !Passed", "Pass: b", "--- !Analysis", "Pass: c"]:
            consumed.append(line)
            yield line

    spans = iter_document_spans(_lines())
    assert next(spans) == "--- !Missed\nPass: a"
    assert consumed == ["--- !Missed", "Pass: a", "--- !Passed"]
