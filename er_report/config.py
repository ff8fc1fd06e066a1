from dataclasses import dataclass, field

@dataclass
class Config:
    # Paths (same layout as the original cleaning script)
    raw_path: str = 'data/raw/Hospital_ER.csv'
    cleaned_path: str = 'data/cleaned/Hospital_ER_Cleaned.csv'
    out_dir: str = 'artifacts'

    # Canonical columns
    wait_col: str = 'wait_time_minutes'
    satisfaction_col: str = 'satisfaction_score'
    timestamp_col: str = 'visit_timestamp'
    race_col: str = 'race'
    age_col: str = 'age_years'
    gender_col: str = 'gender'

    # Accepted (already normalized) header spellings per canonical column
    column_aliases: dict = field(default_factory=lambda: {
        'wait_time_minutes': ['wait', 'wait_time', 'waittime', 'patient_waittime', 'patient_wait_time', 'wait_minutes'],
        'satisfaction_score': ['sat', 'sat_score', 'patient_sat_score', 'satisfaction', 'patient_satisfaction_score'],
        'visit_timestamp': ['date', 'timestamp', 'visit_date', 'admission_date', 'patient_admission_date'],
        'race': ['patient_race', 'ethnicity'],
        'age_years': ['age', 'patient_age'],
        'gender': ['sex', 'patient_gender', 'patient_sex'],
    })

    # None -> let pandas infer the timestamp format
    timestamp_format: str | None = None

    # Accepted value ranges (inclusive)
    satisfaction_min: float = 0.0
    satisfaction_max: float = 10.0

    # Age buckets: < child_max_age -> child, > adult_max_age -> senior
    child_max_age: int = 18
    adult_max_age: int = 55

    # Plots
    dpi: int = 200
    hist_bins: int = 30

    @property
    def required_columns(self) -> list[str]:
        return [
            self.wait_col,
            self.satisfaction_col,
            self.timestamp_col,
            self.race_col,
            self.age_col,
            self.gender_col,
        ]
