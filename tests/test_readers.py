from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from hklab.errors import MissingCapabilityError, UnsupportedFormatError
from hklab.pipeline import readers
from hklab.pipeline.ingest import batch_read
from hklab.pipeline.readers import (
    CallableReader,
    CsvReader,
    ExcelReader,
    ReaderCapability,
    default_reader_for,
    resolve_reader,
)


def test_default_reader_for_csv_patterns() -> None:
    assert isinstance(default_reader_for("*.csv"), CsvReader)
    assert isinstance(default_reader_for("*.CsV"), CsvReader)
    assert isinstance(default_reader_for(r"^data_.*\.csv$"), CsvReader)


def test_default_reader_for_xlsx_pattern() -> None:
    pytest.importorskip("openpyxl")
    assert isinstance(default_reader_for("*.xlsx"), ExcelReader)
    assert isinstance(default_reader_for("REPORT*.XLSX"), ExcelReader)


@pytest.mark.parametrize("pattern", ["*.txt", "*.xls", "*.csv.gz", "data*"])
def test_default_reader_for_unknown_pattern(pattern: str) -> None:
    with pytest.raises(UnsupportedFormatError):
        default_reader_for(pattern)


def test_xlsx_without_engine_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(readers, "EXCEL_AVAILABLE", False)
    with pytest.raises(MissingCapabilityError, match="openpyxl"):
        default_reader_for("*.xlsx")


def test_resolve_reader_by_name() -> None:
    assert isinstance(resolve_reader("*.dat", "csv"), CsvReader)
    with pytest.raises(UnsupportedFormatError, match="Unknown reader"):
        resolve_reader("*.dat", "parquet")


def test_resolve_reader_keeps_capability_objects() -> None:
    reader = CsvReader(header=False)
    assert resolve_reader("*.dat", reader) is reader
    assert isinstance(reader, ReaderCapability)


def test_resolve_reader_rejects_non_callables() -> None:
    with pytest.raises(TypeError):
        resolve_reader("*.csv", 42)


def test_callable_with_has_header_gets_bool_and_encoding() -> None:
    seen = {}

    def read_polars_style(path, has_header=True, encoding="utf8", **kwargs):
        seen.update(has_header=has_header, encoding=encoding, **kwargs)
        return pd.DataFrame({"x": [1]})

    reader = CallableReader(read_polars_style, header=False, encoding="latin-1")
    reader.read(Path("a.csv"), {"skip_rows": 1})

    assert seen == {"has_header": False, "encoding": "latin-1", "skip_rows": 1}


def test_callable_with_header_gets_pandas_convention() -> None:
    seen = {}

    def read_pandas_style(path, header="infer", encoding=None):
        seen.update(header=header, encoding=encoding)
        return pd.DataFrame({"x": [1]})

    CallableReader(read_pandas_style, header=True).read(Path("a.csv"), {})
    assert seen == {"header": 0, "encoding": "UTF-8"}

    CallableReader(read_pandas_style, header=False).read(Path("a.csv"), {})
    assert seen["header"] is None


def test_callable_without_known_params_gets_options_only() -> None:
    seen = {}

    def read_plain(path, **kwargs):
        seen.update(kwargs)
        return pd.DataFrame({"x": [1]})

    CallableReader(read_plain, header=False, encoding="latin-1").read(Path("a"), {"k": 1})
    assert seen == {"k": 1}


def test_pass_through_options_win_over_normalized_ones() -> None:
    seen = {}

    def read_pandas_style(path, header="infer", encoding=None):
        seen.update(header=header, encoding=encoding)
        return pd.DataFrame()

    CallableReader(read_pandas_style).read(Path("a.csv"), {"header": 2})
    assert seen["header"] == 2


def test_read_excel_callable_is_treated_as_spreadsheet_reader() -> None:
    pytest.importorskip("openpyxl")
    assert isinstance(resolve_reader("*.dat", pd.read_excel), ExcelReader)


def test_pandas_read_csv_callable_uses_header_and_encoding(tmp_path: Path) -> None:
    (tmp_path / "a.dat").write_text("1,2\n3,4\n", encoding="utf-8")

    df = batch_read("*.dat", path=tmp_path, reader=pd.read_csv, header=False)

    assert len(df) == 2


def test_xlsx_files_are_combined(tmp_path: Path) -> None:
    pytest.importorskip("openpyxl")
    pd.DataFrame({"x": [1, 2], "y": ["a", "b"]}).to_excel(tmp_path / "a.xlsx", index=False)
    pd.DataFrame({"x": [3], "y": ["c"]}).to_excel(tmp_path / "b.xlsx", index=False)

    df = batch_read("*.xlsx", path=tmp_path, encoding="ignored")

    assert df["x"].tolist() == [1, 2, 3]
    assert df["y"].tolist() == ["a", "b", "c"]
