from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import polars as pl

from optviz.core.remarks.model import Remark, RemarkKind


@dataclass
class RemarkSchema:
    schema = {
        "kind": pl.Utf8,
        "pass": pl.Utf8,
        "function": pl.Utf8,
        "file": pl.Utf8,
        "line": pl.Int64,
        "column": pl.Int64,
        "message": pl.Utf8,
        "instruction_count": pl.Float64,
        "stack_bytes": pl.Float64,
    }


KIND_COLUMNS = tuple(kind.value for kind in RemarkKind)


def _as_float(value: int | float | None) -> float | None:
    return None if value is None else float(value)


def remarks_to_frame(remarks: Sequence[Remark]) -> pl.DataFrame:
    """Project remarks into a DataFrame following ``RemarkSchema``."""
    records = []
    for remark in remarks:
        row = remark.to_dict()
        row["instruction_count"] = _as_float(row["instruction_count"])
        row["stack_bytes"] = _as_float(row["stack_bytes"])
        records.append(row)
    return pl.DataFrame(records, schema=RemarkSchema.schema)


def pass_kind_counts(remarks: Sequence[Remark]) -> pl.DataFrame:
    """
    Count remarks per pass, broken down by kind.

    Returns:
        pl.DataFrame: Columns ``pass``, ``Passed``, ``Missed``, ``Analysis`` and
        ``total``, sorted by ``total`` descending, then ``pass``.
    """
    empty = pl.DataFrame(
        schema={"pass": pl.Utf8, **{k: pl.UInt32 for k in KIND_COLUMNS}, "total": pl.UInt32}
    )
    if not remarks:
        return empty

    df = remarks_to_frame(remarks)
    counts = df.group_by("pass").agg(
        *[(pl.col("kind") == k).sum().cast(pl.UInt32).alias(k) for k in KIND_COLUMNS],
        pl.len().cast(pl.UInt32).alias("total"),
    )
    return counts.sort(["total", "pass"], descending=[True, False])


def function_metrics_snapshot(remarks: Sequence[Remark]) -> pl.DataFrame:
    """
    Latest known metrics per function, one row per function that has any.

    Functions are listed in order of first appearance.
    """
    seen: dict[str, tuple[float | None, float | None]] = {}
    for remark in remarks:
        if remark.metrics is None:
            continue
        seen[remark.function] = (
            _as_float(remark.metrics.instruction_count),
            _as_float(remark.metrics.stack_bytes),
        )
    return pl.DataFrame(
        {
            "function": list(seen),
            "instruction_count": [v[0] for v in seen.values()],
            "stack_bytes": [v[1] for v in seen.values()],
        },
        schema={"function": pl.Utf8, "instruction_count": pl.Float64, "stack_bytes": pl.Float64},
    )


def build_dashboard_payload(remarks: Sequence[Remark]) -> dict:
    """
    Build the JSON-ready payload consumed by the chart dashboard.

    ``chartData`` maps pass -> kind -> count. ``metricsData`` maps function ->
    ``instructionsCount`` / ``stackSize`` for functions with known metrics.
    """
    chart_data: dict[str, dict[str, int]] = {}
    metrics_data: dict[str, dict[str, int | float]] = {}
    for remark in remarks:
        per_pass = chart_data.setdefault(remark.pass_name, {})
        per_pass[remark.kind.value] = per_pass.get(remark.kind.value, 0) + 1

        if remark.metrics is None:
            continue
        entry = metrics_data.setdefault(remark.function, {})
        if remark.metrics.instruction_count is not None:
            entry["instructionsCount"] = remark.metrics.instruction_count
        if remark.metrics.stack_bytes is not None:
            entry["stackSize"] = remark.metrics.stack_bytes

    return {
        "totalRemarks": len(remarks),
        "chartData": chart_data,
        "metricsData": metrics_data,
    }


__all__ = [
    "KIND_COLUMNS",
    "RemarkSchema",
    "build_dashboard_payload",
    "function_metrics_snapshot",
    "pass_kind_counts",
    "remarks_to_frame",
]
