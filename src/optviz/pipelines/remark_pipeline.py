from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import polars as pl

from optviz.core.remarks.contracts import ParseConfig, ParseStats, _validate_max_results
from optviz.core.remarks.correlation import RemarkCallback, RemarkCorrelator
from optviz.core.remarks.decoder import decode_document
from optviz.core.remarks.model import Remark
from optviz.core.remarks.scanner import iter_document_spans
from optviz.core.remarks.summaries import (
    build_dashboard_payload,
    function_metrics_snapshot,
    pass_kind_counts,
)


logger = logging.getLogger(__name__)


class ParseCancelledError(RuntimeError):
    """Raised when a parse is cancelled through its CancellationToken."""


class CancellationToken:
    """Thread-safe cancellation flag polled between documents."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def _iter_lines(lines: Iterable[str], label: str) -> Iterator[str]:
    it = iter(lines)
    while True:
        try:
            line = next(it)
        except StopIteration:
            return
        except (OSError, UnicodeDecodeError) as exc:
            raise OSError(f"Failed while reading remark log {label}") from exc
        yield line


def _run_pipeline(
    lines: Iterable[str],
    label: str,
    *,
    on_remark: RemarkCallback | None,
    max_results: int | None,
    cancel_token: CancellationToken | None,
    stats: ParseStats,
) -> list[Remark]:
    correlator = RemarkCorrelator(stats=stats)
    for span in iter_document_spans(_iter_lines(lines, label)):
        if cancel_token is not None and cancel_token.cancelled:
            raise ParseCancelledError(
                f"Parsing of {label} cancelled after {stats.documents} documents"
            )

        stats.documents += 1
        document = decode_document(span)
        if document is None:
            stats.skipped_documents += 1
            continue

        correlator.consume(document, on_remark=on_remark)

        if max_results is not None and len(correlator.results) >= max_results:
            stats.truncated = True
            break

    return correlator.results


def parse_remarks_stream(
    source: str | Path | Iterable[str],
    *,
    on_remark: RemarkCallback | None = None,
    max_results: int | None = None,
    cancel_token: CancellationToken | None = None,
    encoding: str = "utf-8",
    stats: ParseStats | None = None,
) -> list[Remark]:
    """
    Stream a YAML optimization-remark log into an ordered list of remarks.

    Args:
        source: Path to the log, or an open text handle / iterable of lines.
        on_remark: Called once per remark, in stream order, before the next
            document is read.
        max_results: Stop reading once this many remarks were collected.
        cancel_token: Checked before each document; cancelling aborts the call.
        encoding: Text encoding used when ``source`` is a path.
        stats: Optional counters object filled in while parsing.

    Returns:
        list[Remark]: Remarks in stream order, truncated to ``max_results``.

    Raises:
        ParseCancelledError: The token was cancelled; no partial result is returned.
        OSError: The source could not be opened or read.
        ValueError: ``max_results`` is not a positive integer.

    Notes:
        Malformed or unrecognized documents are skipped. Metrics documents may
        appear before or after the remarks of their function; remarks already
        delivered are backfilled in place when their metrics arrive later.
    """
    _validate_max_results(max_results)
    stats = stats if stats is not None else ParseStats()
    started = time.perf_counter()

    if isinstance(source, (str, Path)):
        path = Path(source)
        label = str(path)
        with path.open("r", encoding=encoding, newline="") as fh:
            remarks = _run_pipeline(
                fh,
                label,
                on_remark=on_remark,
                max_results=max_results,
                cancel_token=cancel_token,
                stats=stats,
            )
    else:
        label = str(getattr(source, "name", "<stream>"))
        remarks = _run_pipeline(
            source,
            label,
            on_remark=on_remark,
            max_results=max_results,
            cancel_token=cancel_token,
            stats=stats,
        )

    logger.info(
        "Parsed %d remarks from %s (%d documents, %d skipped, %d backfilled%s) in %.2fs",
        len(remarks),
        label,
        stats.documents,
        stats.skipped_documents,
        stats.backfilled,
        ", truncated" if stats.truncated else "",
        time.perf_counter() - started,
    )
    return remarks


@dataclass
class LoadedRemarks:
    """Result of one completed parse, with its derived aggregates."""

    source: Path
    remarks: list[Remark]
    stats: ParseStats
    elapsed_seconds: float = 0.0

    def pass_counts(self) -> pl.DataFrame:
        return pass_kind_counts(self.remarks)

    def metrics_snapshot(self) -> pl.DataFrame:
        return function_metrics_snapshot(self.remarks)

    def dashboard_payload(self) -> dict:
        return build_dashboard_payload(self.remarks)


@dataclass
class RemarkSession:
    """
    Caller-owned handle remembering the most recently loaded remark log.

    A failed or cancelled load leaves ``last_loaded`` untouched.
    """

    config: ParseConfig = field(default_factory=ParseConfig)
    last_loaded: LoadedRemarks | None = None

    def load(
        self,
        path: str | Path,
        *,
        on_remark: RemarkCallback | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> LoadedRemarks:
        path = Path(path)
        stats = ParseStats()
        started = time.perf_counter()
        remarks = parse_remarks_stream(
            path,
            on_remark=on_remark,
            max_results=self.config.max_results,
            cancel_token=cancel_token,
            encoding=self.config.encoding,
            stats=stats,
        )
        loaded = LoadedRemarks(
            source=path,
            remarks=remarks,
            stats=stats,
            elapsed_seconds=time.perf_counter() - started,
        )
        self.last_loaded = loaded
        return loaded


class ProgressPrinter:
    """
    Remark callback printing throttled progress lines.

    A line is printed every ``every_n`` remarks, or when at least
    ``every_seconds`` elapsed since the previous line.
    """

    def __init__(
        self,
        *,
        every_n: int = 2_000,
        every_seconds: float = 1.0,
        clock: Callable[[], float] = time.perf_counter,
        emit: Callable[[str], Any] = print,
    ) -> None:
        self.every_n = every_n
        self.every_seconds = every_seconds
        self._clock = clock
        self._emit = emit
        self.count = 0
        self._start = clock()
        self._last_at = self._start
        self._last_count = 0

    def __call__(self, remark: Remark) -> None:
        self.count += 1
        now = self._clock()
        since_last = now - self._last_at
        if self.count % self.every_n != 0 and since_last < self.every_seconds:
            return

        elapsed = now - self._start
        inst_rate = (self.count - self._last_count) / (since_last or 1)
        avg_rate = self.count / (elapsed or 1)
        self._emit(
            f"[parse] parsed={self.count:,} | inst={inst_rate:.0f}/s | avg={avg_rate:.0f}/s"
        )
        self._last_at = now
        self._last_count = self.count


__all__ = [
    "CancellationToken",
    "LoadedRemarks",
    "ParseCancelledError",
    "ProgressPrinter",
    "RemarkSession",
    "parse_remarks_stream",
]
