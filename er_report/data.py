import os
import pandas as pd

from .config import Config


def load_raw_csv(path='data/raw/Hospital_ER.csv'):
    if not os.path.exists(path):
        raise FileNotFoundError(f"Raw ER visits file not found: {path}")
    return pd.read_csv(path, low_memory=False)


def check_columns(df: pd.DataFrame, columns) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"Missing expected columns: {missing} (found: {list(df.columns)})")


def load_cleaned_csv(path, cfg: Config):
    """Load the cleaned table and restore the timestamp dtype (written as ISO 8601)."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Cleaned ER visits file not found: {path} (run `clean` first)")
    df = pd.read_csv(path, low_memory=False)
    check_columns(df, cfg.required_columns)
    df[cfg.timestamp_col] = pd.to_datetime(df[cfg.timestamp_col], format="ISO8601")
    return df


def profile_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Per-column overview: type, missingness, cardinality and numeric spread."""
    rows = []
    for col in df.columns:
        s = df[col]
        row = {
            'column': col,
            'dtype': str(s.dtype),
            'n_missing': int(s.isna().sum()),
            'complete_rate': float(s.notna().mean()) if len(s) else 0.0,
            'n_unique': int(s.nunique()),
        }
        if pd.api.types.is_numeric_dtype(s):
            row.update(mean=s.mean(), sd=s.std(), min=s.min(), median=s.median(), max=s.max())
        rows.append(row)
    return pd.DataFrame(rows)
