"""Seaborn charts for the ER wait-time report.

Every helper takes the feature-engineered visits frame (or an aggregate
table from :mod:`er_report.summary`), saves one PNG and returns its path.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

sns.set_style("whitegrid")
sns.set_context("notebook")

PathLike = Union[str, Path]


def _ensure_output_path(out_path: PathLike) -> Path:
    path = Path(out_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def _ensure_columns(df: pd.DataFrame, columns) -> None:
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise ValueError(f"Missing columns in dataframe: {missing}")


def _save(fig, out_path: PathLike, dpi: int) -> Path:
    out_file = _ensure_output_path(out_path)
    fig.tight_layout()
    fig.savefig(out_file, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return out_file


def wait_time_histogram(
    df: pd.DataFrame,
    out_path: PathLike,
    wait_col: str = "wait_time_minutes",
    bins: int = 30,
    dpi: int = 200,
) -> Path:
    _ensure_columns(df, [wait_col])
    fig, ax = plt.subplots(figsize=(8, 4.5))
    sns.histplot(data=df, x=wait_col, bins=bins, color="steelblue", ax=ax)
    ax.axvline(df[wait_col].mean(), color="crimson", linestyle="--", label="mean")
    ax.axvline(df[wait_col].median(), color="black", linestyle=":", label="median")
    ax.set_xlabel("Wait time (minutes)")
    ax.set_ylabel("Visits")
    ax.set_title("Distribution of ER wait times")
    ax.legend()
    return _save(fig, out_path, dpi)


def wait_time_density(
    df: pd.DataFrame,
    out_path: PathLike,
    wait_col: str = "wait_time_minutes",
    hue: str | None = None,
    dpi: int = 200,
) -> Path:
    """Kernel density of wait times, optionally split by a categorical column."""

    _ensure_columns(df, [wait_col] + ([hue] if hue else []))
    fig, ax = plt.subplots(figsize=(8, 4.5))
    sns.kdeplot(data=df, x=wait_col, hue=hue, fill=True, common_norm=False, alpha=0.4, ax=ax, warn_singular=False)
    ax.set_xlabel("Wait time (minutes)")
    ax.set_title("Wait time density" + (f" by {hue}" if hue else ""))
    return _save(fig, out_path, dpi)


def satisfaction_scatter(
    df: pd.DataFrame,
    out_path: PathLike,
    wait_col: str = "wait_time_minutes",
    sat_col: str = "satisfaction_score",
    r: float | None = None,
    dpi: int = 200,
) -> Path:
    """Satisfaction vs wait time with a fitted regression line."""

    _ensure_columns(df, [wait_col, sat_col])
    fig, ax = plt.subplots(figsize=(7, 5))
    sns.regplot(
        data=df,
        x=wait_col,
        y=sat_col,
        scatter_kws={"alpha": 0.3, "s": 12},
        line_kws={"color": "crimson"},
        ax=ax,
    )
    ax.set_xlabel("Wait time (minutes)")
    ax.set_ylabel("Satisfaction score")
    title = "Satisfaction vs wait time"
    if r is not None and r == r:
        title += f" (r = {r:.2f})"
    ax.set_title(title)
    return _save(fig, out_path, dpi)


def mean_wait_bar(
    table: pd.DataFrame,
    group_col: str,
    out_path: PathLike,
    title: str | None = None,
    palette: str = "crest",
    dpi: int = 200,
) -> Path:
    """Bar chart of a ``mean_wait_by`` table, bars kept in table order."""

    _ensure_columns(table, [group_col, "mean_wait"])
    labels = table[group_col].astype(str)
    fig, ax = plt.subplots(figsize=(8, 4.5))
    sns.barplot(x=labels, y=table["mean_wait"], hue=labels, order=list(labels), palette=palette, legend=False, ax=ax)
    ax.set_xlabel(group_col.replace("_", " ").capitalize())
    ax.set_ylabel("Mean wait (minutes)")
    ax.set_title(title or f"Mean wait time by {group_col.replace('_', ' ')}")
    for idx, v in enumerate(table["mean_wait"].values):
        ax.text(idx, v, f"{v:.1f}", ha="center", va="bottom", fontsize=9)
    for label in ax.get_xticklabels():
        label.set_rotation(15)
        label.set_horizontalalignment("right")
    return _save(fig, out_path, dpi)


def wait_box_plot(
    df: pd.DataFrame,
    group_col: str,
    out_path: PathLike,
    wait_col: str = "wait_time_minutes",
    order=None,
    dpi: int = 200,
) -> Path:
    _ensure_columns(df, [group_col, wait_col])
    fig, ax = plt.subplots(figsize=(9, 4.5))
    sns.boxplot(data=df, x=group_col, y=wait_col, hue=group_col, order=order, palette="pastel", legend=False, ax=ax)
    ax.set_xlabel(group_col.replace("_", " ").capitalize())
    ax.set_ylabel("Wait time (minutes)")
    ax.set_title(f"Wait time distribution by {group_col.replace('_', ' ')}")
    for label in ax.get_xticklabels():
        label.set_rotation(15)
        label.set_horizontalalignment("right")
    return _save(fig, out_path, dpi)


def weekday_hour_heatmap(matrix: pd.DataFrame, out_path: PathLike, dpi: int = 200) -> Path:
    """Heatmap of the weekday x hour mean-wait matrix (empty cells left blank)."""

    fig, ax = plt.subplots(figsize=(14, 4.5))
    sns.heatmap(
        matrix,
        cmap="rocket_r",
        cbar_kws={"label": "Mean wait (minutes)"},
        linewidths=0.3,
        ax=ax,
    )
    ax.set_xlabel("Hour of day")
    ax.set_ylabel("Weekday")
    ax.set_title("Mean wait time by weekday and hour")
    return _save(fig, out_path, dpi)


def monthly_wait_line(table: pd.DataFrame, out_path: PathLike, dpi: int = 200) -> Path:
    _ensure_columns(table, ["month", "mean_wait"])
    fig, ax = plt.subplots(figsize=(10, 4.5))
    sns.lineplot(data=table, x="month", y="mean_wait", marker="o", ax=ax)
    ax.set_xlabel("Month")
    ax.set_ylabel("Mean wait (minutes)")
    ax.set_title("Mean wait time per month")
    fig.autofmt_xdate()
    return _save(fig, out_path, dpi)
