"""Assemble the wait-time report: aggregate tables, summary JSON and charts."""

from __future__ import annotations

from pathlib import Path

from .config import Config
from .data import load_cleaned_csv
from .io_utils import save_csv, save_json
from .plotting import (
    mean_wait_bar,
    monthly_wait_line,
    satisfaction_scatter,
    wait_box_plot,
    wait_time_density,
    wait_time_histogram,
    weekday_hour_heatmap,
)
from .preprocess import engineer_features
from .summary import WEEKDAY_ORDER, ReportTables, build_report

AGE_ORDER = ["child", "adult", "senior"]


def save_tables(tables: ReportTables, out_dir: Path) -> list[Path]:
    paths = []
    for name, table in [
        ("wait_by_weekday", tables.by_weekday),
        ("wait_by_race", tables.by_race),
        ("wait_by_age_category", tables.by_age_category),
        ("wait_by_gender", tables.by_gender),
        ("wait_by_month", tables.by_month),
    ]:
        path = out_dir / f"{name}.csv"
        save_csv(path, table)
        paths.append(path)
    path = out_dir / "wait_by_weekday_hour.csv"
    save_csv(path, tables.weekday_hour, index=True)
    paths.append(path)
    return paths


def render_charts(df_eng, tables: ReportTables, out_dir: Path, cfg: Config) -> list[Path]:
    wait, dpi = cfg.wait_col, cfg.dpi
    age_order = [a for a in AGE_ORDER if a in set(df_eng["age_category"])]
    return [
        wait_time_histogram(df_eng, out_dir / "wait_histogram.png", wait, bins=cfg.hist_bins, dpi=dpi),
        wait_time_density(df_eng, out_dir / "wait_density.png", wait, dpi=dpi),
        satisfaction_scatter(
            df_eng, out_dir / "wait_vs_satisfaction.png", wait, cfg.satisfaction_col,
            r=tables.correlation["r"], dpi=dpi,
        ),
        mean_wait_bar(tables.by_weekday, "weekday", out_dir / "bar_weekday.png", dpi=dpi),
        mean_wait_bar(tables.by_age_category.set_index("age_category").reindex(age_order).reset_index(),
                      "age_category", out_dir / "bar_age_category.png", dpi=dpi),
        mean_wait_bar(tables.by_gender, cfg.gender_col, out_dir / "bar_gender.png", dpi=dpi),
        wait_box_plot(df_eng, cfg.race_col, out_dir / "box_race.png", wait,
                      order=list(tables.by_race[cfg.race_col]), dpi=dpi),
        wait_box_plot(df_eng, "age_category", out_dir / "box_age_category.png", wait, order=age_order, dpi=dpi),
        wait_box_plot(df_eng, cfg.gender_col, out_dir / "box_gender.png", wait, dpi=dpi),
        weekday_hour_heatmap(tables.weekday_hour, out_dir / "heatmap_weekday_hour.png", dpi=dpi),
        monthly_wait_line(tables.by_month, out_dir / "wait_by_month.png", dpi=dpi),
    ]


def print_headline(tables: ReportTables) -> None:
    stats, corr = tables.wait_stats, tables.correlation
    print(f"[report] wait time: n={stats['count']} mean={stats['mean']:.2f} median={stats['median']:.2f} "
          f"std={stats['std']:.2f} min={stats['min']:.0f} max={stats['max']:.0f}")
    print(f"[report] wait vs satisfaction: r={corr['r']:.3f} p={corr['p_value']:.4f} (n={corr['n']})")
    print("[report] mean wait by race (longest first):")
    print(tables.by_race.to_string(index=False, float_format=lambda v: f"{v:.2f}"))
    weekdays = tables.by_weekday.set_index("weekday").reindex(WEEKDAY_ORDER).dropna()
    print("[report] mean wait by weekday: " + ", ".join(
        f"{day[:3]}={row.mean_wait:.1f}" for day, row in weekdays.iterrows()
    ))


def run_report(cleaned_path, out_dir, cfg: Config) -> ReportTables:
    """Load the cleaned visits and write every table and chart into ``out_dir``."""

    out_dir = Path(out_dir)
    print(f"[report] loading {cleaned_path}")
    df = load_cleaned_csv(cleaned_path, cfg)
    df_eng = engineer_features(df, cfg)

    tables = build_report(df_eng, cfg)
    print_headline(tables)

    out_dir.mkdir(parents=True, exist_ok=True)
    save_json(out_dir / "summary.json", tables.headline())
    outputs = save_tables(tables, out_dir)
    outputs.extend(render_charts(df_eng, tables, out_dir, cfg))
    print("[report] saved: " + ", ".join(str(p) for p in outputs))
    return tables
