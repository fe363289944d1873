from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import pandas as pd


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    errors: list[str]


def dtype_group(series: pd.Series) -> str | None:
    """Coarse type family of a column; None for an all-null column."""
    if series.isna().all():
        return None
    dtype = series.dtype
    if pd.api.types.is_bool_dtype(dtype):
        return "boolean"
    if pd.api.types.is_object_dtype(dtype):
        # bool column with blanks, as read_csv returns it
        if pd.api.types.infer_dtype(series, skipna=True) == "boolean":
            return "boolean"
    if pd.api.types.is_datetime64_any_dtype(dtype):
        return "datetime"
    if pd.api.types.is_timedelta64_dtype(dtype):
        return "timedelta"
    if pd.api.types.is_numeric_dtype(dtype):
        return "numeric"
    return "text"


def _family(group: str) -> str:
    # booleans stack onto numbers as 0/1
    return "numeric" if group == "boolean" else group


def check_row_compatible(frames: Sequence[pd.DataFrame]) -> ValidationResult:
    """Check that frames can be stacked row-wise without reshaping."""
    if not frames:
        return ValidationResult(ok=True, errors=[])

    errors: list[str] = []
    first = frames[0]
    expected = set(first.columns)
    groups: dict[str, str] = {}
    for col in first.columns:
        group = dtype_group(first[col])
        if group is not None:
            groups[col] = group

    for idx, df in enumerate(frames[1:], start=1):
        cols = set(df.columns)
        missing = sorted(map(str, expected - cols))
        extra = sorted(map(str, cols - expected))
        if missing or extra:
            errors.append(
                f"Table {idx}: column mismatch (missing {missing}, unexpected {extra})"
            )
            continue
        for col in df.columns:
            group = dtype_group(df[col])
            if group is None:
                continue
            known = groups.setdefault(col, group)
            if _family(known) != _family(group):
                errors.append(
                    f"Table {idx}: can't combine column {col!r} of type {group} with {known}"
                )

    return ValidationResult(ok=not errors, errors=errors)
