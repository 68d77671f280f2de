from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from optviz.core.remarks.contracts import ParseStats
from optviz.core.remarks.model import (
    FunctionMetrics,
    Remark,
    RemarkKind,
    SourceLocation,
    build_message,
    parse_location,
)
from optviz.core.remarks.patterns import (
    ARGS_FIELD,
    DEBUG_LOC_FIELD,
    FUNCTION_FIELD,
    INSTRUCTION_COUNT_NAME,
    NAME_FIELD,
    NUM_INSTRUCTIONS_ARG,
    NUM_STACK_BYTES_ARG,
    PASS_FIELD,
    REMARK_TYPE_FIELD,
    STACK_SIZE_NAME,
)
from optviz.core.remarks.tags import resolve_kind


RemarkCallback = Callable[[Remark], Any]


@dataclass(frozen=True)
class MetricsUpdate:
    function: str
    instruction_count: int | float | None = None
    stack_bytes: int | float | None = None


@dataclass(frozen=True)
class RemarkFields:
    kind: RemarkKind
    pass_name: str
    function: str
    location: SourceLocation
    message: str


@dataclass(frozen=True)
class ClassifiedDocument:
    """
    Typed view of a decoded document.

    A document may be a metrics update, a remark, both, or neither.
    """

    function: str | None
    metrics_update: MetricsUpdate | None = None
    remark: RemarkFields | None = None


def _present(document: dict, key: str) -> bool:
    value = document.get(key)
    return value is not None and value != ""


def _coerce_number(value: Any) -> int | float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return int(number) if number.is_integer() else number


def _first_arg_value(args: Any, key: str) -> Any:
    if not isinstance(args, list):
        return None
    for arg in args:
        if isinstance(arg, dict) and key in arg:
            return arg[key]
    return None


def _classify_metrics(document: dict, function: str) -> MetricsUpdate | None:
    if not (_present(document, ARGS_FIELD) and _present(document, NAME_FIELD)):
        return None
    name = document.get(NAME_FIELD)
    args = document.get(ARGS_FIELD)
    if name == INSTRUCTION_COUNT_NAME:
        value = _coerce_number(_first_arg_value(args, NUM_INSTRUCTIONS_ARG))
        return MetricsUpdate(function=function, instruction_count=value)
    if name == STACK_SIZE_NAME:
        value = _coerce_number(_first_arg_value(args, NUM_STACK_BYTES_ARG))
        return MetricsUpdate(function=function, stack_bytes=value)
    return None


def classify_document(document: dict) -> ClassifiedDocument:
    """Run the metrics and remark shape checks independently on one decoded mapping."""
    function = str(document[FUNCTION_FIELD]) if _present(document, FUNCTION_FIELD) else None
    if function is None:
        return ClassifiedDocument(function=None)

    metrics_update = _classify_metrics(document, function)

    remark: RemarkFields | None = None
    if _present(document, PASS_FIELD) and _present(document, DEBUG_LOC_FIELD):
        remark = RemarkFields(
            kind=resolve_kind(document.get(REMARK_TYPE_FIELD)),
            pass_name=str(document[PASS_FIELD]),
            function=function,
            location=parse_location(document.get(DEBUG_LOC_FIELD)),
            message=build_message(document.get(ARGS_FIELD)),
        )

    return ClassifiedDocument(function=function, metrics_update=metrics_update, remark=remark)


class RemarkCorrelator:
    """
    Attach per-function metrics to remarks while streaming.

    Metrics seen before a remark are attached when the remark is built. Remarks
    that arrive first are parked in a per-function pending list and backfilled as
    soon as metrics for that function become known. All state lives for one parse.
    """

    def __init__(self, stats: ParseStats | None = None) -> None:
        self.results: list[Remark] = []
        self.stats = stats if stats is not None else ParseStats()
        self._metrics: dict[str, FunctionMetrics] = {}
        self._pending: dict[str, list[int]] = {}

    def metrics_for(self, function: str) -> FunctionMetrics | None:
        return self._metrics.get(function)

    def pending_indices(self, function: str) -> list[int]:
        return list(self._pending.get(function, ()))

    def consume(self, document: dict, on_remark: RemarkCallback | None = None) -> Remark | None:
        """
        Process one decoded document in stream order.

        Args:
            document: Mapping returned by ``decode_document``.
            on_remark: Called with a newly built remark before this method returns.

        Returns:
            Remark | None: The remark built from this document, if it had remark shape.
        """
        classified = classify_document(document)
        if classified.function is None:
            return None

        if classified.metrics_update is not None:
            self._apply_metrics(classified.metrics_update)

        remark: Remark | None = None
        if classified.remark is not None:
            remark = self._emit(classified.remark)
            if on_remark is not None:
                on_remark(remark)

        self._backfill(classified.function)
        return remark

    def _apply_metrics(self, update: MetricsUpdate) -> None:
        if update.instruction_count is None and update.stack_bytes is None:
            return
        metrics = self._metrics.setdefault(update.function, FunctionMetrics())
        if update.instruction_count is not None:
            metrics.instruction_count = update.instruction_count
        if update.stack_bytes is not None:
            metrics.stack_bytes = update.stack_bytes
        self.stats.metrics_updates += 1

    def _emit(self, fields: RemarkFields) -> Remark:
        metrics = self._metrics.get(fields.function)
        remark = Remark(
            kind=fields.kind,
            pass_name=fields.pass_name,
            function=fields.function,
            location=fields.location,
            message=fields.message,
            metrics=metrics,
        )
        self.results.append(remark)
        self.stats.remarks += 1
        if metrics is None:
            self._pending.setdefault(fields.function, []).append(len(self.results) - 1)
        return remark

    def _backfill(self, function: str) -> None:
        metrics = self._metrics.get(function)
        if metrics is None:
            return
        pending = self._pending.pop(function, None)
        if not pending:
            return
        for idx in pending:
            remark = self.results[idx]
            if remark.metrics is None:
                remark.metrics = metrics
                self.stats.backfilled += 1


__all__ = [
    "ClassifiedDocument",
    "MetricsUpdate",
    "RemarkCallback",
    "RemarkCorrelator",
    "RemarkFields",
    "classify_document",
]
