from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path


ENV_MAX_RESULTS = "OPTVIZ_MAX_RESULTS"
ENV_ENCODING = "OPTVIZ_ENCODING"


def _validate_max_results(max_results: int | None) -> None:
    if max_results is None:
        return
    if isinstance(max_results, bool) or not isinstance(max_results, int) or max_results < 1:
        raise ValueError(f"max_results must be a positive integer or None; got: {max_results!r}")


@dataclass(frozen=True)
class ParseConfig:
    """Settings for one remark-log parse run."""

    max_results: int | None = None
    encoding: str = "utf-8"
    progress_every_n: int = 2_000
    progress_every_seconds: float = 1.0

    def __post_init__(self) -> None:
        _validate_max_results(self.max_results)
        if self.progress_every_n < 1:
            raise ValueError(f"progress_every_n must be >= 1; got: {self.progress_every_n!r}")
        if self.progress_every_seconds < 0:
            raise ValueError(
                f"progress_every_seconds must be >= 0; got: {self.progress_every_seconds!r}"
            )

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> ParseConfig:
        """Build a config, overriding defaults from ``OPTVIZ_*`` environment variables."""
        env = os.environ if environ is None else environ
        raw_limit = (env.get(ENV_MAX_RESULTS) or "").strip()
        max_results: int | None = None
        if raw_limit:
            try:
                max_results = int(raw_limit)
            except ValueError as exc:
                raise ValueError(f"{ENV_MAX_RESULTS} must be an integer; got: {raw_limit!r}") from exc
        encoding = (env.get(ENV_ENCODING) or "").strip() or "utf-8"
        return cls(max_results=max_results, encoding=encoding)

    def to_dict(self) -> dict:
        return asdict(self)

    def write_json(self, out_path: Path) -> Path:
        out_path = Path(out_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(json.dumps(self.to_dict(), indent=2, sort_keys=True), encoding="utf-8")
        return out_path


@dataclass
class ParseStats:
    """Counters collected while streaming one remark log."""

    documents: int = 0
    skipped_documents: int = 0
    remarks: int = 0
    metrics_updates: int = 0
    backfilled: int = 0
    truncated: bool = False


__all__ = ["ENV_ENCODING", "ENV_MAX_RESULTS", "ParseConfig", "ParseStats"]
