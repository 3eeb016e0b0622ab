import numpy as np
import pandas as pd
import pytest
from unittest.mock import MagicMock

from logger import Logger

HEADER = [
    'DATDEP', 'TRAIN_NO', 'RELATION', 'TRAIN_SERV', 'PTCAR_NO', 'LINE_NO_DEP',
    'REAL_TIME_ARR', 'REAL_TIME_DEP', 'PLANNED_TIME_ARR', 'PLANNED_TIME_DEP',
    'DELAY_ARR', 'DELAY_DEP', 'RELATION_DIRECTION', 'PTCAR_LG_NM_NL', 'LINE_NO_ARR',
    'PLANNED_DATE_ARR', 'PLANNED_DATE_DEP', 'REAL_DATE_ARR', 'REAL_DATE_DEP',
]

DAY = '2023-01-09'
NEXT_DAY = '2023-01-10'


def _row(train, relation, station, planned_arr, planned_dep, real_arr, real_dep,
         delay_arr, delay_dep, planned_dep_date=DAY, real_dep_date=DAY, real_arr_date=DAY):
    return {
        'DATDEP': DAY,
        'TRAIN_NO': train,
        'RELATION': relation,
        'TRAIN_SERV': 'SNCB/NMBS',
        'PTCAR_NO': 1,
        'LINE_NO_DEP': '50A',
        'REAL_TIME_ARR': real_arr,
        'REAL_TIME_DEP': real_dep,
        'PLANNED_TIME_ARR': planned_arr,
        'PLANNED_TIME_DEP': planned_dep,
        'DELAY_ARR': delay_arr,
        'DELAY_DEP': delay_dep,
        'RELATION_DIRECTION': f'{relation}: A -> B',
        'PTCAR_LG_NM_NL': station,
        'LINE_NO_ARR': '50A',
        'PLANNED_DATE_ARR': DAY if planned_arr else '',
        'PLANNED_DATE_DEP': planned_dep_date if planned_dep else '',
        'REAL_DATE_ARR': real_arr_date if real_arr else '',
        'REAL_DATE_DEP': real_dep_date if real_dep else '',
    }


RAW_ROWS = [
    # origin
    _row(100, 'IC 01', 'GENT-SINT-PIETERS', '', '08:00:00', '', '08:00:30', '', 30),
    # pass-through, no stop
    _row(100, 'IC 01', 'AALST', '08:20:00', '08:20:00', '08:20:40', '08:20:40', 40, 40),
    # regular stop, late by 90 s
    _row(100, 'IC 01', 'BRUSSEL-CENTRAAL', '08:30:00', '08:32:00', '08:30:30', '08:34:00', 30, 120),
    # destination
    _row(100, 'IC 01', 'ANTWERPEN-CENTRAAL', '09:00:00', '', '09:01:40', '', 100, ''),
    # planned departure written past midnight
    _row(200, 'L 26', 'HALLE', '23:58:00', '24:00:30', '23:58:20', '00:01:10', 20, 40,
         planned_dep_date=DAY, real_dep_date=NEXT_DAY),
    _row(300, 'EURST', 'BRUSSEL-ZUID', '10:00:00', '10:05:00', '10:00:00', '10:05:00', 0, 0),
    _row(400, 'P 7001', 'BRUSSEL-CENTRAAL', '17:10:00', '17:12:00', '17:11:00', '17:13:10', 60, 70),
]


@pytest.fixture
def logger():
    return MagicMock(spec=Logger)


@pytest.fixture
def raw_csv(tmp_path):
    path = tmp_path / 'punctuality.csv'
    pd.DataFrame(RAW_ROWS, columns=HEADER).to_csv(path, sep=';', index=False)
    return path


@pytest.fixture
def modeling_df():
    """Four-predictor table where trains that arrive early tend to wait and turn late."""
    rng = np.random.default_rng(0)
    n = 400
    delay_in = rng.normal(60, 90, n).round()
    df = pd.DataFrame({
        'type': rng.choice(['International', 'Peak/Extra', 'InterCity', 'Local'], n, p=[0.1, 0.1, 0.4, 0.4]),
        'delay_in': delay_in,
        'planned_dep_hour': rng.integers(0, 24, n),
        'station_stops': rng.integers(1, 60, n),
    })
    df['is_late'] = ((delay_in < 0) | (rng.random(n) < 0.1)).astype(int)
    return df


def write_rows(path, rows):
    pd.DataFrame(rows, columns=HEADER).to_csv(path, sep=';', index=False)
    return path
