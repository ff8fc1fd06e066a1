import argparse
from dataclasses import replace
from pathlib import Path

import pandas as pd

from er_report.config import Config
from er_report.data import load_raw_csv, profile_frame
from er_report.io_utils import artdir, run_id_from_cfg
from er_report.preprocess import canonicalize_columns, run_cleaner
from er_report.report import run_report


def _config_from_args(args) -> Config:
    cfg = Config()
    overrides = {}
    if getattr(args, "raw_path", None):
        overrides["raw_path"] = str(args.raw_path)
    if getattr(args, "cleaned_path", None):
        overrides["cleaned_path"] = str(args.cleaned_path)
    if getattr(args, "timestamp_format", None):
        overrides["timestamp_format"] = args.timestamp_format
    return replace(cfg, **overrides) if overrides else cfg


def _report_dir(args, cfg: Config) -> Path:
    if getattr(args, "out_dir", None):
        return Path(args.out_dir)
    return artdir(run_id_from_cfg(cfg, tag=args.tag), root=cfg.out_dir)


def cmd_clean(args):
    cfg = _config_from_args(args)
    run_cleaner(cfg.raw_path, cfg.cleaned_path, cfg)


def cmd_report(args):
    cfg = _config_from_args(args)
    out_dir = _report_dir(args, cfg)
    run_report(cfg.cleaned_path, out_dir, cfg)
    print(f"[report] done. Files saved to: {out_dir}")


def cmd_all(args):
    cmd_clean(args)
    cmd_report(args)


def cmd_quicklook(args):
    cfg = _config_from_args(args)
    df = load_raw_csv(cfg.raw_path)
    print(f"[quicklook] {cfg.raw_path}: {df.shape[0]} rows x {df.shape[1]} columns")
    print("[quicklook] columns as normalized:", list(canonicalize_columns(df, cfg.column_aliases).columns))
    with pd.option_context("display.width", 160, "display.max_columns", None):
        print(profile_frame(df).to_string(index=False, float_format=lambda v: f"{v:.2f}"))
    print(f"[quicklook] exact duplicate rows: {int(df.duplicated().sum())}")


def main():
    p = argparse.ArgumentParser(description="Hospital ER wait-time cleaning and report CLI")
    sub = p.add_subparsers(dest="cmd", required=True)

    def _add_clean_args(sp):
        sp.add_argument("--in", dest="raw_path", help="Raw CSV (default data/raw/Hospital_ER.csv)")
        sp.add_argument("--out", dest="cleaned_path", help="Cleaned CSV (default data/cleaned/Hospital_ER_Cleaned.csv)")
        sp.add_argument("--timestamp-format", help="strftime format of the raw date column (inferred if omitted)")

    def _add_report_args(sp):
        sp.add_argument("--out-dir", help="Report directory (default artifacts/<run id>)")
        sp.add_argument("--tag", default=None, help="Optional run tag")

    sp = sub.add_parser("clean", help="Normalize, dedup and impute the raw visits file")
    _add_clean_args(sp)
    sp.set_defaults(fn=cmd_clean)

    sp = sub.add_parser("report", help="Statistics, tables and charts from the cleaned file")
    sp.add_argument("--in", dest="cleaned_path", help="Cleaned CSV (default data/cleaned/Hospital_ER_Cleaned.csv)")
    _add_report_args(sp)
    sp.set_defaults(fn=cmd_report)

    sp = sub.add_parser("all", help="Run clean then report")
    _add_clean_args(sp)
    _add_report_args(sp)
    sp.set_defaults(fn=cmd_all)

    sp = sub.add_parser("quicklook", help="Profile the raw file (types, missing values, duplicates)")
    sp.add_argument("--in", dest="raw_path", help="Raw CSV (default data/raw/Hospital_ER.csv)")
    sp.set_defaults(fn=cmd_quicklook)

    args = p.parse_args()
    args.fn(args)

if __name__ == "__main__":
    main()
