# Quick EDA of the cleaned visits (console prints only, no plots)
from er_report.config import Config
from er_report.data import load_cleaned_csv, profile_frame
from er_report.preprocess import engineer_features

if __name__ == "__main__":
    cfg = Config()
    df = load_cleaned_csv(cfg.cleaned_path, cfg)
    print("Shape:", df.shape)
    print("Columns:", list(df.columns))
    print(df.head(3))

    df = engineer_features(df, cfg)
    print("\nColumn profile:")
    print(profile_frame(df).to_string(index=False))

    print("\nVisits per age category:")
    print(df['age_category'].value_counts())
