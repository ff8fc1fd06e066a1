from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy.stats import pearsonr

from .config import Config

WEEKDAY_ORDER = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday']


def wait_time_stats(df: pd.DataFrame, wait_col: str = 'wait_time_minutes') -> dict:
    s = df[wait_col].dropna()
    return {
        'count': int(s.count()),
        'mean': float(s.mean()),
        'median': float(s.median()),
        'std': float(s.std()),
        'min': float(s.min()),
        'max': float(s.max()),
    }


def wait_satisfaction_correlation(
    df: pd.DataFrame,
    wait_col: str = 'wait_time_minutes',
    sat_col: str = 'satisfaction_score',
) -> dict:
    """Pearson r between wait time and satisfaction.

    Returns NaN for r and p when there are fewer than two rows or either
    column is constant.
    """
    pair = df[[wait_col, sat_col]].dropna()
    if len(pair) < 2 or pair[wait_col].nunique() < 2 or pair[sat_col].nunique() < 2:
        return {'r': float('nan'), 'p_value': float('nan'), 'n': int(len(pair))}
    r, p = pearsonr(pair[wait_col], pair[sat_col])
    return {'r': float(np.clip(r, -1.0, 1.0)), 'p_value': float(p), 'n': int(len(pair))}


def mean_wait_by(
    df: pd.DataFrame,
    key,
    wait_col: str = 'wait_time_minutes',
    sort_desc: bool = False,
) -> pd.DataFrame:
    """Mean wait (and visit count) per group.

    Groups come out in label order; with ``sort_desc`` they are reordered by
    descending mean, equal means keeping label order.
    """
    keys = [key] if isinstance(key, str) else list(key)
    missing = [k for k in keys + [wait_col] if k not in df.columns]
    if missing:
        raise ValueError(f"Missing grouping columns: {missing}")

    out = (
        df.groupby(keys, observed=True)
          .agg(visits=(wait_col, 'count'), mean_wait=(wait_col, 'mean'))
          .reset_index()
    )
    if sort_desc:
        out = out.sort_values('mean_wait', ascending=False, kind='mergesort').reset_index(drop=True)
    return out


def weekday_hour_matrix(df: pd.DataFrame, wait_col: str = 'wait_time_minutes') -> pd.DataFrame:
    """Weekday x hour table of mean wait, Monday first and hours 0-23."""
    table = df.pivot_table(index='weekday', columns='hour_of_day', values=wait_col, aggfunc='mean')
    return table.reindex(index=WEEKDAY_ORDER, columns=range(24))


def monthly_wait(df: pd.DataFrame, wait_col: str = 'wait_time_minutes') -> pd.DataFrame:
    return mean_wait_by(df, 'month', wait_col=wait_col).sort_values('month').reset_index(drop=True)


@dataclass
class ReportTables:
    wait_stats: dict
    correlation: dict
    by_weekday: pd.DataFrame
    by_race: pd.DataFrame
    by_age_category: pd.DataFrame
    by_gender: pd.DataFrame
    weekday_hour: pd.DataFrame
    by_month: pd.DataFrame

    def headline(self) -> dict:
        return {
            'wait_time': self.wait_stats,
            'wait_vs_satisfaction': self.correlation,
            'longest_wait_weekday': self.by_weekday['weekday'].iloc[0] if len(self.by_weekday) else None,
            'longest_wait_race': self.by_race.iloc[0, 0] if len(self.by_race) else None,
        }


def build_report(df_eng: pd.DataFrame, cfg: Config) -> ReportTables:
    wait = cfg.wait_col
    return ReportTables(
        wait_stats=wait_time_stats(df_eng, wait),
        correlation=wait_satisfaction_correlation(df_eng, wait, cfg.satisfaction_col),
        by_weekday=mean_wait_by(df_eng, 'weekday', wait, sort_desc=True),
        by_race=mean_wait_by(df_eng, cfg.race_col, wait, sort_desc=True),
        by_age_category=mean_wait_by(df_eng, 'age_category', wait),
        by_gender=mean_wait_by(df_eng, cfg.gender_col, wait),
        weekday_hour=weekday_hour_matrix(df_eng, wait),
        by_month=monthly_wait(df_eng, wait),
    )
