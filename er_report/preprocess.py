import re
from dataclasses import dataclass, asdict
from pathlib import Path

import numpy as np
import pandas as pd
from sklearn.impute import SimpleImputer

from .config import Config
from .data import check_columns, load_raw_csv
from .io_utils import save_csv, save_json


class ParseError(ValueError):
    """Raised when a raw value cannot be converted to its column type."""


@dataclass
class CleaningSummary:
    rows_in: int
    duplicates_removed: int
    rows_out: int
    satisfaction_imputed: int
    satisfaction_median: float


def normalize_column_name(name) -> str:
    s = str(name).strip()
    s = re.sub(r'([a-z0-9])([A-Z])', r'\1_\2', s)
    s = re.sub(r'[^0-9a-zA-Z]+', '_', s)
    return s.strip('_').lower()


def canonicalize_columns(df: pd.DataFrame, aliases: dict) -> pd.DataFrame:
    """Normalize every header, then map accepted spellings onto canonical keys."""
    lookup = {}
    for canonical, spellings in aliases.items():
        for spelling in [canonical, *spellings]:
            lookup[normalize_column_name(spelling)] = canonical

    renamed = [lookup.get(normalize_column_name(c), normalize_column_name(c)) for c in df.columns]
    clashes = sorted({c for c in renamed if renamed.count(c) > 1})
    if clashes:
        raise ValueError(f"Several raw headers map to the same column: {clashes} (raw: {list(df.columns)})")

    out = df.copy()
    out.columns = renamed
    return out


def parse_timestamps(df: pd.DataFrame, column: str, fmt: str | None = None) -> pd.DataFrame:
    out = df.copy()
    parsed = pd.to_datetime(out[column], format=fmt, errors='coerce')
    bad = parsed.isna()
    if bad.any():
        rows = list(out.index[bad][:5])
        sample = out.loc[bad, column].head(5).tolist()
        raise ParseError(
            f"{int(bad.sum())} unparseable value(s) in '{column}', first rows {rows}: {sample}"
        )
    out[column] = parsed
    return out


def coerce_numeric(df: pd.DataFrame, columns) -> pd.DataFrame:
    out = df.copy()
    for col in columns:
        converted = pd.to_numeric(out[col], errors='coerce')
        bad = converted.isna() & out[col].notna()
        if bad.any():
            sample = out.loc[bad, col].head(5).tolist()
            raise ParseError(f"{int(bad.sum())} non-numeric value(s) in '{col}': {sample}")
        out[col] = converted
    return out


def require_values(df: pd.DataFrame, columns) -> None:
    for col in columns:
        missing = df[col].isna()
        if missing.any():
            rows = list(df.index[missing][:5])
            raise ParseError(f"{int(missing.sum())} missing value(s) in required column '{col}', first rows {rows}")


def check_range(df: pd.DataFrame, column: str, lo: float | None = None, hi: float | None = None) -> None:
    """Raise ParseError for observed values outside ``[lo, hi]``; nulls are skipped."""
    s = df[column]
    bad = pd.Series(False, index=df.index)
    if lo is not None:
        bad |= s < lo
    if hi is not None:
        bad |= s > hi
    if bad.any():
        sample = s[bad].head(5).tolist()
        raise ParseError(f"{int(bad.sum())} value(s) in '{column}' outside [{lo}, {hi}]: {sample}")


def drop_duplicate_rows(df: pd.DataFrame) -> pd.DataFrame:
    return df.drop_duplicates(keep='first').reset_index(drop=True)


def impute_median(df: pd.DataFrame, column: str) -> tuple[pd.DataFrame, float]:
    """Fill nulls in ``column`` with the median of its observed values.

    The median is computed once, over the non-null values present before
    any replacement, and every null receives that same scalar.
    """
    if df[column].notna().sum() == 0:
        raise ValueError(f"Column '{column}' has no observed values to take a median from")

    out = df.copy()
    imputer = SimpleImputer(strategy='median')
    filled = imputer.fit_transform(out[[column]].astype(float))
    out[column] = filled[:, 0]
    return out, float(imputer.statistics_[0])


def clean_dataset(df: pd.DataFrame, cfg: Config) -> tuple[pd.DataFrame, CleaningSummary]:
    rows_in = len(df)

    df = canonicalize_columns(df, cfg.column_aliases)
    check_columns(df, cfg.required_columns)
    df = parse_timestamps(df, cfg.timestamp_col, fmt=cfg.timestamp_format)
    df = coerce_numeric(df, [cfg.wait_col, cfg.satisfaction_col, cfg.age_col])

    # only satisfaction may be null
    require_values(df, [cfg.wait_col, cfg.race_col, cfg.age_col, cfg.gender_col])
    check_range(df, cfg.wait_col, lo=0)
    check_range(df, cfg.age_col, lo=0)
    check_range(df, cfg.satisfaction_col, lo=cfg.satisfaction_min, hi=cfg.satisfaction_max)

    # median is taken over the deduplicated rows
    deduped = drop_duplicate_rows(df)
    n_missing = int(deduped[cfg.satisfaction_col].isna().sum())
    cleaned, median = impute_median(deduped, cfg.satisfaction_col)

    summary = CleaningSummary(
        rows_in=rows_in,
        duplicates_removed=rows_in - len(deduped),
        rows_out=len(cleaned),
        satisfaction_imputed=n_missing,
        satisfaction_median=median,
    )
    return cleaned, summary


def run_cleaner(raw_path, out_path, cfg: Config) -> CleaningSummary:
    """Read the raw file, clean it and overwrite ``out_path``.

    A sidecar ``<stem>.summary.json`` with the cleaning counts is written
    next to the cleaned CSV.
    """
    out_path = Path(out_path)
    print(f"[clean] loading {raw_path}")
    raw = load_raw_csv(raw_path)

    cleaned, summary = clean_dataset(raw, cfg)
    print(f"[clean] rows: raw={summary.rows_in} -> dedup={summary.rows_out} "
          f"(duplicates removed: {summary.duplicates_removed})")
    print(f"[clean] imputed {summary.satisfaction_imputed} missing {cfg.satisfaction_col} "
          f"with median={summary.satisfaction_median:.2f}")

    save_csv(out_path, cleaned)
    save_json(out_path.with_suffix('.summary.json'), asdict(summary))
    print(f"[clean] saved: {out_path}")
    return summary


def engineer_features(df: pd.DataFrame, cfg: Config) -> pd.DataFrame:
    """Attach grouping columns used only by the report (never written back)."""
    df = df.copy()

    age = df[cfg.age_col]
    df['age_category'] = np.select(
        [age < cfg.child_max_age, age > cfg.adult_max_age],
        ['child', 'senior'],
        default='adult',
    )

    ts = df[cfg.timestamp_col]
    df['weekday'] = ts.dt.day_name()
    df['hour_of_day'] = ts.dt.hour.astype(int)
    df['month'] = ts.dt.to_period('M').dt.to_timestamp()
    return df
