from __future__ import annotations

import argparse
import logging
from pathlib import Path

import pandas as pd

from hklab.pipeline.readers import READERS
from hklab.pipeline.run import run_batch


def write_table(df: pd.DataFrame, output_path: Path) -> Path:
    suffix = output_path.suffix.lower()
    if suffix == ".csv":
        df.to_csv(output_path, index=False)
    elif suffix in {".parquet", ".pq"}:
        df.to_parquet(output_path, index=False)
    else:
        raise ValueError(f"Unsupported output type: {suffix}. Supported: .csv, .parquet")
    return output_path


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Read and combine many tabular files.")
    parser.add_argument("pattern", nargs="?", help="File name pattern, e.g. '*.csv'.")
    parser.add_argument("--path", help="Directory to search. Defaults to the current one.")
    parser.add_argument("--config", help="Path to an ingest config.yml.")
    parser.add_argument(
        "--reader",
        choices=sorted(READERS),
        help="Reader to use instead of guessing from the pattern suffix.",
    )
    parser.add_argument(
        "--no-bind",
        dest="bind",
        action="store_const",
        const=False,
        help="Keep one table per file instead of stacking them.",
    )
    parser.add_argument(
        "--no-header",
        dest="header",
        action="store_const",
        const=False,
        help="Files have no header row.",
    )
    parser.add_argument("--encoding", help="Text encoding of the files (default UTF-8).")
    parser.add_argument(
        "--regex",
        action="store_const",
        const=True,
        help="Treat pattern as a regular expression instead of a glob.",
    )
    parser.add_argument("--source-col", help="Add a column holding each row's file name.")
    parser.add_argument(
        "--output-path",
        help="Write the combined table here (.csv or .parquet).",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.output_path and args.bind is False:
        raise SystemExit("--output-path needs a combined table; drop --no-bind.")
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    result = run_batch(
        args.config,
        pattern=args.pattern,
        path=args.path,
        bind=args.bind,
        reader=args.reader,
        header=args.header,
        encoding=args.encoding,
        regex=args.regex,
        source_col=args.source_col,
    )

    if isinstance(result, list):
        print({"tables": len(result), "rows": [len(df) for df in result]})
        return 0

    print({"rows": len(result), "columns": list(result.columns)})
    if args.output_path:
        output_path = write_table(result, Path(args.output_path))
        print(f"Wrote combined table: {output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
