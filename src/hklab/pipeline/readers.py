from __future__ import annotations

import importlib.util
import inspect
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import pandas as pd

from hklab.errors import MissingCapabilityError, UnsupportedFormatError

# Checked once at import; pandas needs openpyxl to read .xlsx.
EXCEL_AVAILABLE = importlib.util.find_spec("openpyxl") is not None


@runtime_checkable
class ReaderCapability(Protocol):
    def read(self, path: Path, options: Mapping[str, Any]) -> pd.DataFrame: ...


class CsvReader:
    """Comma-separated values via pandas.read_csv."""

    def __init__(self, header: bool = True, encoding: str = "UTF-8") -> None:
        self.header = header
        self.encoding = encoding

    def read(self, path: Path, options: Mapping[str, Any]) -> pd.DataFrame:
        kwargs: dict[str, Any] = {
            "header": 0 if self.header else None,
            "encoding": self.encoding,
        }
        kwargs.update(options)
        return pd.read_csv(path, **kwargs)


class ExcelReader:
    """First sheet (or ``sheet_name``) of an .xlsx workbook.

    Header and encoding are not injected; the workbook format carries both.
    """

    def __init__(self) -> None:
        if not EXCEL_AVAILABLE:
            raise MissingCapabilityError(
                "The 'openpyxl' package is required for reading Excel files. "
                "Install it with `pip install openpyxl`."
            )

    def read(self, path: Path, options: Mapping[str, Any]) -> pd.DataFrame:
        return pd.read_excel(path, **options)


class CallableReader:
    """Adapt a plain ``func(path, **kwargs)`` to ReaderCapability.

    The keyword names used for header and encoding are worked out once here
    from the callable's signature.
    """

    def __init__(
        self,
        func: Callable[..., pd.DataFrame],
        header: bool = True,
        encoding: str = "UTF-8",
    ) -> None:
        self.func = func
        self.fixed_kwargs = _normalized_kwargs(func, header, encoding)

    def read(self, path: Path, options: Mapping[str, Any]) -> pd.DataFrame:
        kwargs = {**self.fixed_kwargs, **options}
        return self.func(path, **kwargs)


def _accepted_params(func: Callable[..., Any]) -> set[str]:
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return set()
    return {
        name
        for name, param in sig.parameters.items()
        if param.kind in (param.POSITIONAL_OR_KEYWORD, param.KEYWORD_ONLY)
    }


def _normalized_kwargs(
    func: Callable[..., Any], header: bool, encoding: str
) -> dict[str, Any]:
    params = _accepted_params(func)
    if "has_header" in params:
        # polars-style readers
        kwargs: dict[str, Any] = {"has_header": header}
        if "encoding" in params:
            kwargs["encoding"] = encoding
        return kwargs
    if "header" in params:
        # pandas-style readers
        kwargs = {"header": 0 if header else None}
        if "encoding" in params:
            kwargs["encoding"] = encoding
        return kwargs
    return {}


READERS: dict[str, Callable[[bool, str], ReaderCapability]] = {
    "csv": lambda header, encoding: CsvReader(header=header, encoding=encoding),
    "xlsx": lambda header, encoding: ExcelReader(),
}


def default_reader_for(
    pattern: str, header: bool = True, encoding: str = "UTF-8"
) -> ReaderCapability:
    """Pick a reader from the pattern text itself, not the matched files."""
    suffix_text = pattern.rstrip("$").lower()
    if suffix_text.endswith(".csv"):
        return READERS["csv"](header, encoding)
    if suffix_text.endswith(".xlsx"):
        return READERS["xlsx"](header, encoding)
    raise UnsupportedFormatError(
        f"Unsupported file type for pattern {pattern!r}. Supported: .csv, .xlsx. "
        "Please specify a suitable `reader`."
    )


def resolve_reader(
    pattern: str,
    reader: ReaderCapability | Callable[..., pd.DataFrame] | str | None = None,
    header: bool = True,
    encoding: str = "UTF-8",
) -> ReaderCapability:
    if reader is None:
        return default_reader_for(pattern, header=header, encoding=encoding)
    if isinstance(reader, str):
        key = reader.lower().lstrip(".")
        if key not in READERS:
            raise UnsupportedFormatError(
                f"Unknown reader: {reader!r}. Registered: {sorted(READERS)}"
            )
        return READERS[key](header, encoding)
    if callable(getattr(reader, "read", None)):
        return reader
    if reader is pd.read_excel:
        return ExcelReader()
    if callable(reader):
        return CallableReader(reader, header=header, encoding=encoding)
    raise TypeError(
        f"reader must be a ReaderCapability, a callable or a name, got {type(reader)!r}"
    )
