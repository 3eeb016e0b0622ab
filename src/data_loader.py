import pandas as pd
from logger import Logger

RAW_COLUMNS = [
    'TRAIN_NO', 'RELATION', 'TRAIN_SERV', 'PTCAR_LG_NM_NL',
    'PLANNED_DATE_ARR', 'PLANNED_TIME_ARR', 'PLANNED_DATE_DEP', 'PLANNED_TIME_DEP',
    'REAL_DATE_ARR', 'REAL_TIME_ARR', 'REAL_DATE_DEP', 'REAL_TIME_DEP',
    'DELAY_ARR', 'DELAY_DEP',
]

# timestamp column -> (date column, time column)
TIMESTAMP_COLUMNS = {
    'planned_arr': ('PLANNED_DATE_ARR', 'PLANNED_TIME_ARR'),
    'planned_dep': ('PLANNED_DATE_DEP', 'PLANNED_TIME_DEP'),
    'real_arr': ('REAL_DATE_ARR', 'REAL_TIME_ARR'),
    'real_dep': ('REAL_DATE_DEP', 'REAL_TIME_DEP'),
}

TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'
SEPARATOR = ';'


class DataLoader:
    """Reads the punctuality export twice: once typed, once as plain text.

    The typed read turns date/time pairs into timestamps and silently leaves
    values it cannot parse as NaT; the text read keeps the original strings so
    those rows can be found and repaired later.
    """

    def __init__(self, source, logger=None):
        self.source = source
        self.logger = logger or Logger()

    def load(self):
        self.logger.section("LOADING DATA")
        typed = self.load_typed()
        text = self.load_text()
        if len(typed) != len(text):
            raise ValueError(f"Typed read has {len(typed):,} rows but text read has {len(text):,}")
        self.logger.success(f"Typed and text copies agree on {len(typed):,} rows")
        return typed, text

    def load_typed(self):
        df = pd.read_csv(self.source, sep=SEPARATOR)
        self.validate_columns(df)
        df = infer_types(df)
        self.logger.source_loaded(self.source, 'typed', len(df), len(df.columns))
        for column, (_, time_col) in TIMESTAMP_COLUMNS.items():
            failed = int((df[column].isna() & df[time_col].notna()).sum())
            if failed:
                self.logger.parse_failures(column, failed)
        return df

    def load_text(self):
        df = pd.read_csv(self.source, sep=SEPARATOR, dtype=str)
        self.validate_columns(df)
        self.logger.source_loaded(self.source, 'text', len(df), len(df.columns))
        return df

    def validate_columns(self, df):
        missing = [col for col in RAW_COLUMNS if col not in df.columns]
        if missing:
            raise ValueError(f"Source is missing required columns: {missing}")


def infer_types(df):
    df = df.copy()
    for column, (date_col, time_col) in TIMESTAMP_COLUMNS.items():
        combined = df[date_col].astype('string') + ' ' + df[time_col].astype('string')
        df[column] = pd.to_datetime(combined, format=TIMESTAMP_FORMAT, errors='coerce')
    for col in ['DELAY_ARR', 'DELAY_DEP']:
        df[col] = pd.to_numeric(df[col], errors='coerce')
    return df
