from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

# Make local `src` importable when running from repo checkout
ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if SRC.exists():
    sys.path.insert(0, str(SRC))

from optviz.core.remarks.contracts import ParseConfig  # noqa: E402
from optviz.io.parquet import write_remarks_parquet  # noqa: E402
from optviz.pipelines.remark_pipeline import ProgressPrinter, RemarkSession  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Parse a YAML optimization-remark log and summarize remarks per pass and function metrics.",
    )
    parser.add_argument(
        "remarks_path",
        nargs="?",
        type=Path,
        default=os.environ.get("OPTVIZ_REMARKS_PATH"),
        help="Remark log (.yaml/.yml/.opt.yaml). Can set OPTVIZ_REMARKS_PATH env var.",
    )
    parser.add_argument(
        "--max-results",
        type=int,
        default=None,
        help="Stop after this many remarks (default: OPTVIZ_MAX_RESULTS or unlimited).",
    )
    parser.add_argument("--encoding", type=str, default=None)
    parser.add_argument("--progress-every-n", type=int, default=2_000)
    parser.add_argument("--progress-every-seconds", type=float, default=1.0)
    parser.add_argument("--parquet-out", type=Path, help="Write all remarks to this parquet file.")
    parser.add_argument("--json-out", type=Path, help="Write the dashboard payload to this JSON file.")
    parser.add_argument("--top", type=int, default=20, help="Number of passes to print in the summary.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    if not args.remarks_path:
        raise SystemExit("remarks path is required (arg or OPTVIZ_REMARKS_PATH env var).")

    remarks_path = Path(args.remarks_path)
    if not remarks_path.exists():
        raise SystemExit(f"remarks file not found: {remarks_path}")

    try:
        env_config = ParseConfig.from_env()
        config = ParseConfig(
            max_results=args.max_results if args.max_results is not None else env_config.max_results,
            encoding=args.encoding or env_config.encoding,
            progress_every_n=args.progress_every_n,
            progress_every_seconds=args.progress_every_seconds,
        )
    except ValueError as exc:
        raise SystemExit(f"invalid configuration: {exc}") from exc

    size_mb = remarks_path.stat().st_size / (1024 * 1024)
    print(f"[parse] started: {remarks_path} ({size_mb:.1f} MB)")

    session = RemarkSession(config=config)
    progress = ProgressPrinter(
        every_n=config.progress_every_n,
        every_seconds=config.progress_every_seconds,
    )
    try:
        loaded = session.load(remarks_path, on_remark=progress)
    except OSError as exc:
        raise SystemExit(f"failed to parse {remarks_path}: {exc}") from exc

    stats = loaded.stats
    rate = len(loaded.remarks) / (loaded.elapsed_seconds or 1)
    print(
        f"[parse] finished: {len(loaded.remarks):,} remarks in {loaded.elapsed_seconds:.1f}s "
        f"({rate:.0f}/s); documents={stats.documents:,} skipped={stats.skipped_documents:,} "
        f"backfilled={stats.backfilled:,}{' (truncated)' if stats.truncated else ''}"
    )

    counts = loaded.pass_counts()
    print("[summary] pass Passed Missed Analysis total")
    for row in counts.head(args.top).iter_rows(named=True):
        print(f"  {row['pass']}: {row['Passed']} {row['Missed']} {row['Analysis']} {row['total']}")

    metrics = loaded.metrics_snapshot()
    print(f"[summary] functions with metrics: {metrics.height:,}")

    if args.parquet_out:
        out = write_remarks_parquet(loaded.remarks, args.parquet_out)
        print(f"[write] {len(loaded.remarks):,} rows -> {out}")

    if args.json_out:
        json_out = Path(args.json_out)
        json_out.parent.mkdir(parents=True, exist_ok=True)
        json_out.write_text(json.dumps(loaded.dashboard_payload(), indent=2), encoding="utf-8")
        print(f"[write] dashboard payload -> {json_out}")


if __name__ == "__main__":
    main()
