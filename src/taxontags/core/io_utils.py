"""
I/O utilities for the tab-delimited store files.

Provides consistent reading and writing of headed TSV files across the
taxonomy and tag directories, plus the staging helper used to write a
group of files before any of them replace the old ones.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from collections.abc import Generator, Sequence
from contextlib import contextmanager
from pathlib import Path

import polars as pl

from taxontags.core.exceptions import MalformedStoreError, StoreLocationError

logger = logging.getLogger(__name__)


def read_tsv(
    path: Path,
    columns: Sequence[str],
    int_columns: Sequence[str] = (),
    required: Sequence[str] = (),
) -> pl.DataFrame:
    """
    Read a headed TSV store file with a fixed column layout.

    Every column is read as a string and integer columns are then cast
    strictly, so a non-numeric ID fails the whole load instead of being
    silently dropped. Each data line must have exactly one field per
    header column; polars would otherwise pad a short row with nulls.

    Args:
        path: File to read.
        columns: Expected header, in order.
        int_columns: Columns that must hold integers.
        required: Further columns that must not be empty.

    Returns:
        DataFrame with the expected columns; integer columns as Int64.

    Raises:
        MalformedStoreError: If the header, column count or a value is wrong.
    """
    try:
        df = pl.read_csv(
            path,
            separator="\t",
            has_header=True,
            infer_schema_length=0,
            quote_char=None,
        )
    except pl.exceptions.NoDataError:
        msg = "file is empty (missing header row)"
        raise MalformedStoreError(path, msg) from None
    except pl.exceptions.PolarsError as e:
        raise MalformedStoreError(path, str(e).splitlines()[0]) from None

    if tuple(df.columns) != tuple(columns):
        msg = (
            f"expected columns {', '.join(columns)} "
            f"but found {', '.join(df.columns)}"
        )
        raise MalformedStoreError(path, msg)

    _check_field_counts(path, len(columns))

    non_empty = [c for c in columns if c in int_columns or c in required]
    if non_empty:
        nulls = df.select(pl.col(non_empty).null_count()).row(0)
        for name, n_null in zip(non_empty, nulls, strict=True):
            if n_null:
                msg = f"{n_null} row(s) missing a value in column '{name}'"
                raise MalformedStoreError(path, msg)

    int_cols = [c for c in columns if c in int_columns]
    if int_cols:
        try:
            df = df.with_columns([
                pl.col(c).str.strip_chars().cast(pl.Int64, strict=True)
                for c in int_cols
            ])
        except pl.exceptions.PolarsError:
            bad = _first_non_integer(df, int_cols)
            raise MalformedStoreError(path, f"non-numeric value {bad}") from None

    return df


def _check_field_counts(path: Path, expected: int) -> None:
    """Reject any data line whose field count differs from the header."""
    with path.open(encoding="utf-8") as f:
        next(f, None)
        for lineno, line in enumerate(f, start=2):
            line = line.rstrip("\r\n")
            if not line:
                continue
            n_fields = line.count("\t") + 1
            if n_fields != expected:
                msg = f"line {lineno} has {n_fields} field(s), expected {expected}"
                raise MalformedStoreError(path, msg)


def _first_non_integer(df: pl.DataFrame, int_columns: Sequence[str]) -> str:
    """Describe the first value that cannot be parsed as an integer."""
    for name in int_columns:
        for i, value in enumerate(df[name].to_list(), start=2):
            try:
                int(value)
            except ValueError:
                return f"'{value}' in column '{name}' at line {i}"
    return "in an integer column"


def write_tsv(df: pl.DataFrame, path: Path) -> None:
    """
    Write a DataFrame as a headed, unquoted TSV file.

    Args:
        df: DataFrame to write; an empty frame still writes the header.
        path: Output file path (overwritten).
    """
    df.write_csv(path, separator="\t", quote_style="never")


@contextmanager
def staged_directory(
    target: Path, last: Sequence[str] = ()
) -> Generator[Path, None, None]:
    """
    Stage a set of files and move them into ``target`` once all are written.

    Files written into the yielded directory are moved over their
    namesakes in ``target`` only after the block finishes without error.
    If the block raises, nothing in ``target`` is touched and the staging
    area is removed. Each file is replaced atomically, but the files are
    moved one at a time, so a crash during the moves can leave a mix of
    new and old files. Files are moved in name order, except that the
    names in ``last`` are moved after all others, in the order given.

    Args:
        target: Directory that receives the staged files.
        last: File names to move after every other staged file.

    Yields:
        Path of the staging directory (a hidden sibling inside ``target``).

    Example:
        >>> with staged_directory(tax_dir) as stage:
        ...     store.save(stage / "genus.tax")
        ...     tree.save(stage / "tree.links")
    """
    stage = Path(tempfile.mkdtemp(prefix=".staging-", dir=target))
    try:
        yield stage
        order = {name: i for i, name in enumerate(last, start=1)}
        staged = sorted(stage.iterdir(), key=lambda p: (order.get(p.name, 0), p.name))
        for path in staged:
            os.replace(path, target / path.name)
        logger.debug("Moved %d staged files into %s", len(staged), target)
    finally:
        shutil.rmtree(stage, ignore_errors=True)


def ensure_directory(path: Path) -> bool:
    """
    Create a directory (and parents) if it does not exist.

    Returns:
        True if the directory was created, False if it already existed.

    Raises:
        StoreLocationError: If the path exists but is not a directory or
            cannot be created.
    """
    if path.is_dir():
        return False
    if path.exists():
        raise StoreLocationError(path, "path exists and is not a directory")
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StoreLocationError(path, e.strerror or str(e)) from e
    return True


def clear_directory(path: Path) -> None:
    """
    Remove every file and subdirectory inside ``path``, keeping ``path``.

    A missing directory is left alone.
    """
    if not path.is_dir():
        return
    for child in path.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()
    logger.info("Erased contents of %s", path)


def read_id_set(path: Path) -> set[str]:
    """
    Read the IDs in the first column of a headed TSV file.

    Blank IDs are skipped.

    Raises:
        StoreLocationError: If the file does not exist.
        MalformedStoreError: If the file cannot be parsed.
    """
    if not path.is_file():
        raise StoreLocationError(path, "ID list file not found")
    try:
        df = pl.read_csv(
            path,
            separator="\t",
            has_header=True,
            infer_schema_length=0,
            quote_char=None,
            truncate_ragged_lines=True,
        )
    except pl.exceptions.NoDataError:
        return set()
    except pl.exceptions.PolarsError as e:
        raise MalformedStoreError(path, str(e).splitlines()[0]) from None
    if df.width == 0:
        return set()
    ids = df.get_column(df.columns[0]).drop_nulls().str.strip_chars()
    return {i for i in ids.to_list() if i}
