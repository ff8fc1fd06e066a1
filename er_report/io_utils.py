from __future__ import annotations
from dataclasses import asdict
from pathlib import Path
import json, hashlib, math, numpy as np, pandas as pd

ART_ROOT = Path("artifacts")

def run_id_from_cfg(cfg, tag: str | None = None) -> str:
    """Stable report id derived from the configuration (plus an optional tag)."""
    blob = json.dumps(asdict(cfg), sort_keys=True)
    h = hashlib.md5(blob.encode()).hexdigest()[:8]
    return f"{h}{('-' + tag) if tag else ''}"

def artdir(run_id: str, root: Path | str = ART_ROOT) -> Path:
    p = Path(root) / run_id
    p.mkdir(parents=True, exist_ok=True)
    return p

def _nan_to_none(obj):
    if isinstance(obj, float) and math.isnan(obj):
        return None
    if isinstance(obj, dict):
        return {k: _nan_to_none(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_nan_to_none(v) for v in obj]
    return obj

def _to_builtin(value):
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    if isinstance(value, pd.Series):
        return _nan_to_none(value.to_dict())
    if isinstance(value, pd.DataFrame):
        return _nan_to_none(value.to_dict(orient="records"))
    if isinstance(value, np.ndarray):
        return _nan_to_none(value.tolist())
    if hasattr(value, "item"):
        return _nan_to_none(value.item())  # np.float32, np.int64, np.bool_
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")

def save_json(path: Path, obj):
    """Write ``obj`` as strict JSON; NaN becomes null."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(_nan_to_none(obj), indent=2, default=_to_builtin, allow_nan=False))

def save_csv(path: Path, df: pd.DataFrame, index: bool = False):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=index)
