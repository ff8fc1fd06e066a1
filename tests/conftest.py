import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from er_report.config import Config


@pytest.fixture
def cfg():
    return Config()


@pytest.fixture
def raw_df():
    # rows 1 and 2 are exact duplicates; observed satisfaction median is 5.0
    return pd.DataFrame({
        "Patient Waittime": [30, 45, 45, 999, 20, 60],
        "Patient Sat Score": [8.0, np.nan, np.nan, np.nan, 2.0, 5.0],
        "Date": [
            "2020-01-13 08:15:00",
            "2020-01-14 14:30:00",
            "2020-01-14 14:30:00",
            "2020-01-15 09:00:00",
            "2020-02-03 22:45:00",
            "2020-02-04 11:05:00",
        ],
        "Patient Race": ["White", "Black", "Black", "X", "White", "Asian"],
        "Patient Age": [10, 40, 40, 10, 70, 55],
        "Patient Gender": ["F", "M", "M", "F", "M", "F"],
        "Department Referral": ["General Practice", "Orthopedics", "Orthopedics",
                                "General Practice", "Cardiology", "Orthopedics"],
    })


@pytest.fixture
def raw_csv(tmp_path, raw_df):
    path = tmp_path / "raw" / "Hospital_ER.csv"
    path.parent.mkdir(parents=True)
    raw_df.to_csv(path, index=False)
    return path
