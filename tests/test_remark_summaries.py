from __future__ import annotations

import json
from pathlib import Path

import polars as pl
import pytest

from optviz.core.remarks.model import FunctionMetrics, Remark, RemarkKind, SourceLocation
from optviz.core.remarks.summaries import (
    RemarkSchema,
    build_dashboard_payload,
    function_metrics_snapshot,
    pass_kind_counts,
    remarks_to_frame,
)
from optviz.io.parquet import PARQUET_MAGIC, write_remarks_parquet


def _remark(
    kind: RemarkKind,
    pass_name: str,
    function: str,
    metrics: FunctionMetrics | None = None,
) -> Remark:
    return Remark(
        kind=kind,
        pass_name=pass_name,
        function=function,
        location=SourceLocation("a.c", 1, 2),
        message=f"{pass_name} on {function}",
        metrics=metrics,
    )


def _sample_remarks() -> list[Remark]:
    foo_metrics = FunctionMetrics(instruction_count=42, stack_bytes=16)
    return [
        _remark(RemarkKind.MISSED, "inline", "foo", foo_metrics),
        _remark(RemarkKind.PASSED, "inline", "bar"),
        _remark(RemarkKind.MISSED, "inline", "baz", FunctionMetrics(stack_bytes=8)),
        _remark(RemarkKind.ANALYSIS, "licm", "foo", foo_metrics),
        _remark(RemarkKind.PASSED, "gvn", "bar"),
    ]


def test_remarks_to_frame_follows_schema() -> None:
    df = remarks_to_frame(_sample_remarks())

    assert df.columns == list(RemarkSchema.schema)
    assert df.schema["line"] == pl.Int64
    assert df.schema["instruction_count"] == pl.Float64
    assert df.height == 5
    first = df.row(0, named=True)
    assert first["kind"] == "Missed"
    assert first["pass"] == "inline"
    assert first["line"] == 1 and first["column"] == 2
    assert first["instruction_count"] == 42.0
    assert df.row(1, named=True)["instruction_count"] is None


def test_remarks_to_frame_handles_empty_input() -> None:
    df = remarks_to_frame([])
    assert df.height == 0
    assert df.columns == list(RemarkSchema.schema)


def test_pass_kind_counts_breaks_down_by_kind() -> None:
    counts = pass_kind_counts(_sample_remarks())

    assert counts.to_dicts() == [
        {"pass": "inline", "Passed": 1, "Missed": 2, "Analysis": 0, "total": 3},
        {"pass": "gvn", "Passed": 1, "Missed": 0, "Analysis": 0, "total": 1},
        {"pass": "licm", "Passed": 0, "Missed": 0, "Analysis": 1, "total": 1},
    ]


def test_pass_kind_counts_empty() -> None:
    counts = pass_kind_counts([])
    assert counts.height == 0
    assert counts.columns == ["pass", "Passed", "Missed", "Analysis", "total"]


def test_function_metrics_snapshot_lists_functions_with_metrics() -> None:
    snapshot = function_metrics_snapshot(_sample_remarks())

    assert snapshot.to_dicts() == [
        {"function": "foo", "instruction_count": 42.0, "stack_bytes": 16.0},
        {"function": "baz", "instruction_count": None, "stack_bytes": 8.0},
    ]


def test_dashboard_payload_matches_chart_shapes() -> None:
    payload = build_dashboard_payload(_sample_remarks())

    assert payload["totalRemarks"] == 5
    assert payload["chartData"] == {
        "inline": {"Missed": 2, "Passed": 1},
        "licm": {"Analysis": 1},
        "gvn": {"Passed": 1},
    }
    assert payload["metricsData"] == {
        "foo": {"instructionsCount": 42, "stackSize": 16},
        "baz": {"stackSize": 8},
    }
    assert json.loads(json.dumps(payload)) == payload


def test_write_remarks_parquet_round_trips_rows(tmp_path: Path) -> None:
    out = write_remarks_parquet(_sample_remarks(), tmp_path / "out" / "remarks.parquet")

    assert out == tmp_path / "out" / "remarks.parquet"
    assert out.read_bytes()[:4] == PARQUET_MAGIC
    assert not (tmp_path / "out" / "remarks.parquet.tmp").exists()

    df = pl.read_parquet(out)
    assert df.height == 5
    assert df.get_column("function").to_list() == ["foo", "bar", "baz", "foo", "bar"]


def test_write_remarks_parquet_accepts_empty_input(tmp_path: Path) -> None:
    out = write_remarks_parquet([], tmp_path / "empty.parquet")
    assert pl.read_parquet(out).height == 0


def test_write_remarks_parquet_cleans_up_on_failure(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    import optviz.io.parquet as parquet_mod

    def _broken_validate(path: Path) -> None:
        raise OSError(f"Parquet magic footer missing for {path}")

    monkeypatch.setattr(parquet_mod, "_validate_parquet_quick", _broken_validate)

    target = tmp_path / "remarks.parquet"
    with pytest.raises(OSError, match="magic footer"):
        write_remarks_parquet(_sample_remarks(), target)

    assert not target.exists()
    assert not (tmp_path / "remarks.parquet.tmp").exists()
