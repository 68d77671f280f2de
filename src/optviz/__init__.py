from .api import (
    CancellationToken,
    ParseCancelledError,
    ParseConfig,
    Remark,
    RemarkKind,
    RemarkSession,
    parse_remarks_stream,
    pass_kind_counts,
    function_metrics_snapshot,
)

__all__ = [
    "CancellationToken",
    "ParseCancelledError",
    "ParseConfig",
    "Remark",
    "RemarkKind",
    "RemarkSession",
    "parse_remarks_stream",
    "pass_kind_counts",
    "function_metrics_snapshot",
]
