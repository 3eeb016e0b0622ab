import pandas as pd
import numpy as np
from sklearn.model_selection import train_test_split
from logger import Logger
from config import (
    LATE_THRESHOLD_SECONDS, HOUR_BUCKETS, NIGHT_BUCKET,
    INTERNATIONAL_CODES, PEAK_EXTRA_CODES, INTERCITY_MARKER,
    CATEGORICAL_FEATURES, NUMERIC_FEATURES, TARGET,
)

TRAIN_TYPES = ['International', 'Peak/Extra', 'InterCity', 'Local']


def classify_train_type(relation):
    if pd.isna(relation):
        return 'Local'
    code = str(relation).strip().upper()
    prefix = code.split()[0] if code else ''
    if prefix in INTERNATIONAL_CODES:
        return 'International'
    if prefix in PEAK_EXTRA_CODES or code.startswith('EXTRA'):
        return 'Peak/Extra'
    if INTERCITY_MARKER in code:
        return 'InterCity'
    return 'Local'


def bucket_departure_hour(hour):
    for label, first, last in HOUR_BUCKETS:
        if first <= hour <= last:
            return label
    return NIGHT_BUCKET


class FeatureEngineer:
    def __init__(self, random_state=42, test_size=0.25, logger=None):
        self.random_state = random_state
        self.test_size = test_size
        self.logger = logger or Logger()

    def engineer(self, df):
        self.logger.section("FEATURE ENGINEERING")
        df = df.copy()
        # origin station: no planned arrival recorded at all
        df['delay_in'] = df['delay_in'].where(df['PLANNED_TIME_ARR'].notna(), 0)
        before = len(df)
        df = df[df['delay_out'].notna() & df['planned_dep'].notna()].copy()
        self.logger.rows_filtered("Dropped destination stops (no departure)", before, len(df))
        before = len(df)
        df = df[df['delay_in'].notna()].copy()
        self.logger.rows_filtered("Dropped stops with a planned arrival but no arrival delay", before, len(df))

        df['accrued_delay'] = df['delay_out'] - df['delay_in']
        df['type'] = df['relation'].apply(classify_train_type)
        df['planned_dep_hour'] = df['planned_dep'].dt.hour.astype(int)
        df['time_of_day'] = df['planned_dep_hour'].apply(bucket_departure_hour)

        self.logger.features_engineered({
            'type categories': sorted(df['type'].unique()),
            'planned_dep_hour range': f"{df['planned_dep_hour'].min()}-{df['planned_dep_hour'].max()}",
            'time_of_day categories': sorted(df['time_of_day'].unique()),
            'delay_in range': f"{df['delay_in'].min():.0f}-{df['delay_in'].max():.0f}",
            'accrued_delay range': f"{df['accrued_delay'].min():.0f}-{df['accrued_delay'].max():.0f}",
        })
        return df

    def describe(self, df):
        quantiles = df['accrued_delay'].quantile([0.05, 0.25, 0.5, 0.75, 0.95])
        summary = {
            'rows': len(df),
            'trains': df['id'].nunique(),
            'stations': df['station'].nunique(),
        }
        for q, value in quantiles.items():
            summary[f'q{int(round(q * 100)):02d}'] = float(value)
        self.logger.delay_summary(summary)
        return summary

    def create_target(self, df):
        df = df.copy()
        df[TARGET] = (df['accrued_delay'] > LATE_THRESHOLD_SECONDS).astype(int)
        self.logger.class_distribution(LATE_THRESHOLD_SECONDS, int(df[TARGET].sum()), len(df))
        return df

    def add_station_stops(self, df):
        counts = df.groupby('station').size().rename('station_stops').reset_index()
        return df.merge(counts, on='station', how='left')

    def select_model_features(self, df):
        return df[CATEGORICAL_FEATURES + NUMERIC_FEATURES + [TARGET]].reset_index(drop=True)

    def build_modeling_table(self, df):
        df = self.create_target(df)
        df = self.add_station_stops(df)
        return self.select_model_features(df)

    def late_share_by_type(self, df):
        share = (
            df.groupby('type')[TARGET].mean()
            .reindex(TRAIN_TYPES)
            .dropna()
            .mul(100)
        )
        self.logger.features_engineered({f'% late ({t})': f'{v:.1f}%' for t, v in share.items()})
        return share

    def split(self, df):
        self.logger.section("TRAIN/TEST SPLIT")
        train_df, test_df = train_test_split(
            df,
            test_size=self.test_size,
            stratify=df[TARGET],
            random_state=self.random_state,
        )
        self.logger.split_sizes(
            len(train_df), len(test_df),
            100 * train_df[TARGET].mean(),
            100 * test_df[TARGET].mean(),
        )
        return train_df.copy(), test_df.copy()


def feature_target(df):
    X = df[CATEGORICAL_FEATURES + NUMERIC_FEATURES]
    y = df[TARGET].to_numpy(dtype=np.int64)
    return X, y
