from __future__ import annotations

import fnmatch
import logging
import re
import warnings
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pandas as pd

from hklab.errors import AllReadsFailedError, CombineError, NoMatchError, PerFileReadError
from hklab.pipeline.readers import ReaderCapability, resolve_reader
from hklab.pipeline.validate import check_row_compatible

logger = logging.getLogger(__name__)


def find_files(pattern: str, path: str | Path = ".", regex: bool = False) -> list[Path]:
    """List regular files in ``path`` whose names match ``pattern``, sorted by name.

    ``pattern`` is a shell glob (``*.csv``) unless ``regex`` is set, in which case
    it is searched in each name like ``re.search``.
    """
    if not isinstance(pattern, str) or not pattern:
        raise ValueError("pattern must be a non-empty string.")
    base = Path(path)
    if not base.is_dir():
        raise FileNotFoundError(f"Missing directory: {base}")

    if regex:
        compiled = re.compile(pattern)

        def matches(name: str) -> bool:
            return compiled.search(name) is not None

    else:

        def matches(name: str) -> bool:
            return fnmatch.fnmatch(name, pattern)

    files = sorted(
        (p for p in base.iterdir() if p.is_file() and matches(p.name)),
        key=lambda p: p.name,
    )
    if not files:
        raise NoMatchError(pattern, base)
    return files


def read_each(
    files: list[Path], reader: ReaderCapability, options: dict[str, Any]
) -> list[pd.DataFrame | PerFileReadError]:
    """Read every file, turning a failure into a PerFileReadError in its slot."""
    results: list[pd.DataFrame | PerFileReadError] = []
    for file in files:
        logger.info("Reading file: %s", file)
        try:
            results.append(reader.read(file, options))
        except Exception as e:
            failure = PerFileReadError(file, str(e))
            logger.warning("Error reading file: %s (%s)", file, e)
            warnings.warn(failure, stacklevel=3)
            results.append(failure)
    return results


def combine_tables(frames: list[pd.DataFrame]) -> pd.DataFrame:
    result = check_row_compatible(frames)
    if not result.ok:
        raise CombineError(
            "Error combining files. Ensure structures are compatible.\nDetails: "
            + "\n".join(result.errors)
        )
    try:
        return pd.concat(frames, ignore_index=True)
    except (TypeError, ValueError) as e:
        raise CombineError(
            f"Error combining files. Ensure structures are compatible.\nDetails: {e}"
        ) from e


def batch_read(
    pattern: str,
    path: str | Path = ".",
    bind: bool = True,
    reader: ReaderCapability | Callable[..., pd.DataFrame] | str | None = None,
    header: bool = True,
    encoding: str = "UTF-8",
    *,
    regex: bool = False,
    source_col: str | None = None,
    **reader_options: Any,
) -> pd.DataFrame | list[pd.DataFrame]:
    """Read every file matching ``pattern`` in ``path`` and optionally stack them.

    When no ``reader`` is given it is picked from the pattern suffix (``.csv`` or
    ``.xlsx``). Files that fail to read are reported with a ``PerFileReadError``
    warning and skipped; the call only fails if none could be read.

    Returns one DataFrame when ``bind`` is true, otherwise the list of frames in
    file-name order.
    """
    files = find_files(pattern, path, regex=regex)
    capability = resolve_reader(pattern, reader, header=header, encoding=encoding)

    results = read_each(files, capability, reader_options)
    frames: list[pd.DataFrame] = []
    for file, result in zip(files, results):
        if isinstance(result, PerFileReadError):
            continue
        if source_col is not None:
            if source_col in result.columns:
                raise ValueError(
                    f"source_col {source_col!r} already exists in {file.name}; pick another name."
                )
            result = result.copy()
            result[source_col] = file.name
        frames.append(result)

    if not frames:
        raise AllReadsFailedError(
            f"No files were successfully read ({len(files)} matched {pattern!r})."
        )

    if bind:
        return combine_tables(frames)
    return frames
