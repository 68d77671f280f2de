from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class RemarkKind(str, Enum):
    """Outcome of an optimization decision as tagged by the compiler."""

    PASSED = "Passed"
    MISSED = "Missed"
    ANALYSIS = "Analysis"


@dataclass(frozen=True)
class SourceLocation:
    file: str = ""
    line: int = 0
    column: int = 0


@dataclass
class FunctionMetrics:
    """
    Per-function code metrics accumulated while streaming a remark log.

    Each field is overwritten by the most recent metrics document that supplies it.
    A single instance is shared by every remark of the same function.
    """

    instruction_count: int | float | None = None
    stack_bytes: int | float | None = None


@dataclass
class Remark:
    """One compiler optimization remark with its lazily attached function metrics."""

    kind: RemarkKind
    pass_name: str
    function: str
    location: SourceLocation = field(default_factory=SourceLocation)
    message: str = ""
    metrics: FunctionMetrics | None = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "pass": self.pass_name,
            "function": self.function,
            "file": self.location.file,
            "line": self.location.line,
            "column": self.location.column,
            "message": self.message,
            "instruction_count": self.metrics.instruction_count if self.metrics else None,
            "stack_bytes": self.metrics.stack_bytes if self.metrics else None,
        }


def _fragment_text(fragment: Any) -> str:
    if isinstance(fragment, str):
        return fragment
    if isinstance(fragment, dict) and isinstance(fragment.get("String"), str):
        return fragment["String"]
    return json.dumps(fragment, default=str, separators=(",", ":"))


def build_message(args: Any) -> str:
    """
    Join remark ``Args`` fragments into a single message.

    Bare strings are used as-is, mappings contribute their ``String`` field, and
    anything else falls back to its JSON text. Fragments are joined by one space.
    """
    if not isinstance(args, list):
        return ""
    return " ".join(_fragment_text(fragment) for fragment in args)


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    try:
        return max(int(str(value).strip()), 0)
    except (TypeError, ValueError):
        return 0


def parse_location(debug_loc: Any) -> SourceLocation:
    """Build a SourceLocation from a ``DebugLoc`` mapping, defaulting missing parts."""
    if not isinstance(debug_loc, dict):
        return SourceLocation()
    file_value = debug_loc.get("File")
    return SourceLocation(
        file=str(file_value) if file_value is not None else "",
        line=_as_int(debug_loc.get("Line")),
        column=_as_int(debug_loc.get("Column")),
    )
