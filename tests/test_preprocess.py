import numpy as np
import pandas as pd
import pytest

from er_report.preprocess import (
    ParseError,
    canonicalize_columns,
    clean_dataset,
    drop_duplicate_rows,
    engineer_features,
    impute_median,
    normalize_column_name,
    parse_timestamps,
    run_cleaner,
)


@pytest.mark.parametrize("raw,expected", [
    ("Patient Sat Score", "patient_sat_score"),
    ("  Wait Time (minutes) ", "wait_time_minutes"),
    ("patientWaittime", "patient_waittime"),
    ("AGE", "age"),
    ("race", "race"),
])
def test_normalize_column_name(raw, expected):
    assert normalize_column_name(raw) == expected


def test_canonicalize_maps_aliases_and_keeps_extra_columns(raw_df, cfg):
    out = canonicalize_columns(raw_df, cfg.column_aliases)
    assert set(cfg.required_columns) <= set(out.columns)
    assert "department_referral" in out.columns
    assert list(raw_df.columns)[0] == "Patient Waittime"  # input untouched


def test_canonicalize_rejects_clashing_headers(cfg):
    df = pd.DataFrame({"Age": [1], "Patient Age": [2]})
    with pytest.raises(ValueError, match="age_years"):
        canonicalize_columns(df, cfg.column_aliases)


def test_missing_required_column_is_fatal(raw_df, cfg):
    with pytest.raises(ValueError, match="gender"):
        clean_dataset(raw_df.drop(columns=["Patient Gender"]), cfg)


def test_unparseable_timestamp_raises_parse_error(raw_df, cfg):
    raw_df.loc[3, "Date"] = "not a date"
    with pytest.raises(ParseError, match="not a date"):
        clean_dataset(raw_df, cfg)


def test_parse_error_is_value_error():
    df = pd.DataFrame({"ts": ["2020-01-01 10:00:00", None]})
    with pytest.raises(ValueError):
        parse_timestamps(df, "ts")


def test_non_numeric_wait_raises_parse_error(raw_df, cfg):
    raw_df["Patient Waittime"] = raw_df["Patient Waittime"].astype(object)
    raw_df.loc[0, "Patient Waittime"] = "half an hour"
    with pytest.raises(ParseError):
        clean_dataset(raw_df, cfg)


def test_drop_duplicate_rows_keeps_one_copy():
    df = pd.DataFrame({"a": [1, 1, 2], "b": ["x", "x", "x"]})
    out = drop_duplicate_rows(df)
    assert len(out) == 2
    assert list(out.index) == [0, 1]


def test_impute_median_uses_pre_imputation_median():
    df = pd.DataFrame({"s": [1.0, np.nan, 3.0, np.nan, 10.0]})
    out, median = impute_median(df, "s")
    assert median == 3.0
    assert out["s"].tolist() == [1.0, 3.0, 3.0, 3.0, 10.0]
    assert df["s"].isna().sum() == 2


def test_impute_median_requires_observed_values():
    df = pd.DataFrame({"s": [np.nan, np.nan]})
    with pytest.raises(ValueError):
        impute_median(df, "s")


def test_clean_dataset_invariants(raw_df, cfg):
    cleaned, summary = clean_dataset(raw_df, cfg)

    assert not cleaned.duplicated().any()
    assert cleaned[cfg.satisfaction_col].notna().all()
    assert pd.api.types.is_numeric_dtype(cleaned[cfg.satisfaction_col])
    assert pd.api.types.is_datetime64_any_dtype(cleaned[cfg.timestamp_col])

    assert summary.rows_in == 6
    assert summary.duplicates_removed == 1
    assert summary.rows_out == 5
    assert summary.satisfaction_imputed == 2
    assert summary.satisfaction_median == 5.0


def test_child_row_with_missing_score_gets_median(raw_df, cfg):
    cleaned, _ = clean_dataset(raw_df, cfg)
    row = cleaned[cleaned[cfg.wait_col] == 999].iloc[0]
    assert row[cfg.satisfaction_col] == 5.0

    eng = engineer_features(cleaned, cfg)
    assert eng.loc[eng[cfg.wait_col] == 999, "age_category"].iloc[0] == "child"


def test_date_only_timestamps_parse(cfg):
    df = pd.DataFrame({
        "wait": [999, 10], "sat": [np.nan, 5.0], "date": ["2020-01-15", "2020-01-16"],
        "race": ["X", "Y"], "age": [10, 30], "gender": ["F", "M"],
    })
    cleaned, _ = clean_dataset(df, cfg)
    assert cleaned[cfg.timestamp_col].iloc[0] == pd.Timestamp("2020-01-15")
    assert cleaned[cfg.satisfaction_col].tolist() == [5.0, 5.0]


def test_run_cleaner_is_idempotent(raw_csv, tmp_path, cfg):
    first = tmp_path / "cleaned" / "a.csv"
    second = tmp_path / "cleaned" / "b.csv"
    run_cleaner(raw_csv, first, cfg)
    run_cleaner(raw_csv, second, cfg)
    assert first.read_bytes() == second.read_bytes()

    # rerunning onto the same destination overwrites it with the same bytes
    before = first.read_bytes()
    run_cleaner(raw_csv, first, cfg)
    assert first.read_bytes() == before


def test_run_cleaner_writes_header_without_index(raw_csv, tmp_path, cfg):
    out = tmp_path / "cleaned.csv"
    summary = run_cleaner(raw_csv, out, cfg)
    header = out.read_text().splitlines()[0].split(",")
    assert header[:6] == [
        "wait_time_minutes", "satisfaction_score", "visit_timestamp", "race", "age_years", "gender",
    ]
    assert "Unnamed: 0" not in pd.read_csv(out).columns
    assert (tmp_path / "cleaned.summary.json").exists()
    assert summary.rows_out == len(pd.read_csv(out))


def test_run_cleaner_missing_file(tmp_path, cfg):
    out = tmp_path / "cleaned.csv"
    with pytest.raises(FileNotFoundError):
        run_cleaner(tmp_path / "nope.csv", out, cfg)
    assert not out.exists()


def test_age_buckets_follow_inclusive_bounds(cfg):
    ages = np.arange(0, 101)
    df = pd.DataFrame({
        cfg.age_col: ages,
        cfg.timestamp_col: pd.Timestamp("2020-03-01 12:00:00"),
    })
    cats = engineer_features(df, cfg)["age_category"]
    for age, cat in zip(ages, cats):
        if age < 18:
            assert cat == "child"
        elif age > 55:
            assert cat == "senior"
        else:
            assert cat == "adult"


def test_engineer_features_derives_grouping_columns(raw_df, cfg):
    cleaned, _ = clean_dataset(raw_df, cfg)
    eng = engineer_features(cleaned, cfg)

    assert "age_category" not in cleaned.columns
    first = eng.iloc[0]
    assert first["weekday"] == "Monday"
    assert first["hour_of_day"] == 8
    assert first["month"] == pd.Timestamp("2020-01-01")
    assert eng["hour_of_day"].between(0, 23).all()


@pytest.mark.parametrize("column", ["Patient Age", "Patient Race", "Patient Gender", "Patient Waittime"])
def test_null_in_required_column_raises_parse_error(raw_df, cfg, column):
    raw_df.loc[4, column] = np.nan
    with pytest.raises(ParseError, match="missing value"):
        clean_dataset(raw_df, cfg)


@pytest.mark.parametrize("column,value", [
    ("Patient Sat Score", 11.0),
    ("Patient Sat Score", -0.5),
    ("Patient Waittime", -5),
    ("Patient Age", -1),
])
def test_out_of_range_value_raises_parse_error(raw_df, cfg, column, value):
    raw_df.loc[0, column] = value
    with pytest.raises(ParseError, match="outside"):
        clean_dataset(raw_df, cfg)


def test_range_bounds_are_inclusive(raw_df, cfg):
    raw_df.loc[0, "Patient Sat Score"] = 10.0
    raw_df.loc[4, "Patient Sat Score"] = 0.0
    raw_df.loc[0, "Patient Waittime"] = 0
    raw_df.loc[0, "Patient Age"] = 0
    cleaned, _ = clean_dataset(raw_df, cfg)
    assert cleaned[cfg.satisfaction_col].between(0, 10).all()


def test_run_cleaner_empty_file_writes_nothing(tmp_path, cfg):
    raw = tmp_path / "empty.csv"
    raw.write_text("")
    out = tmp_path / "cleaned.csv"
    with pytest.raises(pd.errors.EmptyDataError):
        run_cleaner(raw, out, cfg)
    assert not out.exists()
    assert not (tmp_path / "cleaned.summary.json").exists()
