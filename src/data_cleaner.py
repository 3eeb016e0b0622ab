import pandas as pd
from logger import Logger

RENAME_MAP = {
    'TRAIN_NO': 'id',
    'TRAIN_SERV': 'operator',
    'RELATION': 'relation',
    'PTCAR_LG_NM_NL': 'station',
    'DELAY_ARR': 'delay_in',
    'DELAY_DEP': 'delay_out',
}

# parsed column -> (raw time column, actual timestamp, delay column)
REPAIRS = {
    'planned_dep': ('PLANNED_TIME_DEP', 'real_dep', 'DELAY_DEP'),
    'planned_arr': ('PLANNED_TIME_ARR', 'real_arr', 'DELAY_ARR'),
}


class DataCleaner:
    def __init__(self, logger=None):
        self.logger = logger or Logger()

    def clean(self, typed, text):
        self.logger.section("CLEANING DATA")
        df = self.repair_planned_departure(typed, text)
        df = self.repair_planned_arrival(df, text)
        df = self.filter_stops(df)
        return self.rename_columns(df)

    def find_repair_targets(self, typed, text, column='planned_dep'):
        """Rows whose planned time failed to parse although a value was recorded."""
        time_col = REPAIRS[column][0]
        return typed[column].isna() & text[time_col].notna()

    def repair_planned_departure(self, typed, text):
        return self.repair(typed, text, 'planned_dep')

    def repair_planned_arrival(self, typed, text):
        return self.repair(typed, text, 'planned_arr')

    def repair(self, typed, text, column):
        _, actual_col, delay_col = REPAIRS[column]
        df = typed.copy()
        targets = self.find_repair_targets(typed, text, column)
        df.loc[targets, column] = (
            df.loc[targets, actual_col] - pd.to_timedelta(df.loc[targets, delay_col], unit='s')
        )
        repaired = df.loc[targets, column].dropna()
        self.logger.rows_repaired(column, len(repaired), sorted(repaired.astype(str).unique()))
        unrepaired = int(targets.sum()) - len(repaired)
        if unrepaired:
            self.logger.info(f"⚠️  {unrepaired:,} {column} value(s) lack an actual time and stay unrepaired")
        return df

    def filter_stops(self, df):
        """Drop pass-through records; terminal stations (no planned arrival or departure) are kept."""
        absent = df['PLANNED_TIME_ARR'].isna() | df['PLANNED_TIME_DEP'].isna()
        raw_arr = df['PLANNED_DATE_ARR'].astype('string') + ' ' + df['PLANNED_TIME_ARR'].astype('string')
        raw_dep = df['PLANNED_DATE_DEP'].astype('string') + ' ' + df['PLANNED_TIME_DEP'].astype('string')
        same = (df['planned_arr'] == df['planned_dep']) | (raw_arr == raw_dep).fillna(False).astype(bool)
        kept = df[absent | ~same].copy()
        self.logger.rows_filtered("Stopping records only", len(df), len(kept))
        return kept

    def rename_columns(self, df):
        return df.rename(columns=RENAME_MAP)
