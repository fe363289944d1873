from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd
import yaml

from hklab.pipeline.ingest import batch_read

BATCH_KEYS = ("path", "bind", "reader", "header", "encoding", "regex", "source_col")


def load_ingest_config(path: str | Path) -> dict:
    path = Path(path)
    return yaml.safe_load(path.read_text(encoding="utf-8")) or {}


def run_batch(
    config_path: str | Path | None = None, **overrides: Any
) -> pd.DataFrame | list[pd.DataFrame]:
    """Run batch_read from a YAML config; keyword overrides win over the file."""
    cfg = load_ingest_config(config_path) if config_path is not None else {}
    cfg.update({k: v for k, v in overrides.items() if v is not None})

    pattern = cfg.get("pattern")
    if not pattern:
        raise ValueError("Config must include pattern.")

    kwargs = {key: cfg[key] for key in BATCH_KEYS if key in cfg}
    reader_options = dict(cfg.get("reader_options") or {})
    return batch_read(pattern, **kwargs, **reader_options)
