from __future__ import annotations

import io
import os
from collections.abc import Sequence
from pathlib import Path
from typing import Literal

import pyarrow.parquet as pq

from optviz.core.remarks.model import Remark
from optviz.core.remarks.summaries import remarks_to_frame


PARQUET_MAGIC = b"PAR1"


def _assert_parquet_magic(path: Path) -> None:
    """
    Quick integrity check for common truncation/corruption cases:
    parquet files must start and end with the magic bytes PAR1.
    """
    try:
        size = path.stat().st_size
    except FileNotFoundError as exc:
        raise OSError(f"Parquet file not found: {path}") from exc

    if size < 8:
        raise OSError(f"Parquet file too small to be valid ({size} bytes): {path}")

    with path.open("rb") as f:
        start = f.read(4)
        if start != PARQUET_MAGIC:
            raise OSError(f"Parquet magic header missing for {path} (got {start!r})")
        f.seek(-4, io.SEEK_END)
        end = f.read(4)
        if end != PARQUET_MAGIC:
            raise OSError(f"Parquet magic footer missing for {path} (got {end!r})")


def _validate_parquet_quick(path: Path) -> None:
    """
    Minimal integrity check: ensure footer/row-group headers are readable.
    """
    _assert_parquet_magic(path)
    pf = pq.ParquetFile(path)
    try:
        _ = pf.metadata
        for _ in pf.iter_batches(batch_size=1):
            break
    finally:
        pf.close()


def write_remarks_parquet(
    remarks: Sequence[Remark],
    out_path: Path,
    compression: Literal["zstd", "snappy", "gzip", "uncompressed"] = "zstd",
) -> Path:
    """
    Persist remarks as a parquet file, replacing ``out_path`` atomically.

    The file is written to a sibling ``.tmp`` path, validated, then moved into place.
    An empty remark list still produces a valid, zero-row file.
    """
    out_path = Path(out_path)
    df = remarks_to_frame(remarks)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = out_path.with_name(out_path.name + ".tmp")
    try:
        tmp_path.unlink(missing_ok=True)
        df.write_parquet(tmp_path, compression=compression)
        _validate_parquet_quick(tmp_path)
        os.replace(tmp_path, out_path)
    finally:
        tmp_path.unlink(missing_ok=True)
    return out_path


__all__ = ["PARQUET_MAGIC", "write_remarks_parquet"]
