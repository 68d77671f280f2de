from __future__ import annotations

from optviz.core.remarks.contracts import ParseConfig, ParseStats
from optviz.core.remarks.correlation import RemarkCorrelator, classify_document
from optviz.core.remarks.decoder import decode_document
from optviz.core.remarks.model import FunctionMetrics, Remark, RemarkKind, SourceLocation
from optviz.core.remarks.scanner import iter_document_spans
from optviz.core.remarks.summaries import (
    build_dashboard_payload,
    function_metrics_snapshot,
    pass_kind_counts,
    remarks_to_frame,
)
from optviz.core.remarks.tags import classify_tag, resolve_kind
from optviz.io.parquet import write_remarks_parquet
from optviz.pipelines.remark_pipeline import (
    CancellationToken,
    LoadedRemarks,
    ParseCancelledError,
    ProgressPrinter,
    RemarkSession,
    parse_remarks_stream,
)


__all__ = [
    "CancellationToken",
    "FunctionMetrics",
    "LoadedRemarks",
    "ParseCancelledError",
    "ParseConfig",
    "ParseStats",
    "ProgressPrinter",
    "Remark",
    "RemarkCorrelator",
    "RemarkKind",
    "RemarkSession",
    "SourceLocation",
    "build_dashboard_payload",
    "classify_document",
    "classify_tag",
    "decode_document",
    "function_metrics_snapshot",
    "iter_document_spans",
    "parse_remarks_stream",
    "pass_kind_counts",
    "remarks_to_frame",
    "resolve_kind",
    "write_remarks_parquet",
]
