import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_DATA_URL = (
    "https://opendata.infrabel.be/api/explore/v2.1/catalog/datasets/"
    "ruwe-gegevens-van-stiptheid-d-1/exports/csv?delimiter=%3B"
)

LATE_THRESHOLD_SECONDS = 60

# (label, first hour, last hour); anything outside is Night
HOUR_BUCKETS = [
    ('Morning', 4, 10),
    ('Mid-day', 11, 15),
    ('Afternoon', 16, 20),
]
NIGHT_BUCKET = 'Night'

INTERNATIONAL_CODES = ('EURST', 'ESTAR', 'THAL', 'TGV', 'ICE', 'IZY', 'EC', 'INT')
PEAK_EXTRA_CODES = ('P', 'EXTRA', 'EXTRA TRAIN')
INTERCITY_MARKER = 'IC'

CATEGORICAL_FEATURES = ['type']
NUMERIC_FEATURES = ['delay_in', 'planned_dep_hour', 'station_stops']
TARGET = 'is_late'

ERROR_ANALYSIS_RANGE = (-100, 60)


@dataclass(frozen=True)
class AnalysisConfig:
    data_url: str
    output_dir: Path
    random_state: int
    test_size: float
    cv_folds: int
    grid_size: int
    leaderboard_size: int
    n_jobs: int

    @property
    def figures_dir(self):
        return self.output_dir / 'figures'

    @property
    def artifacts_dir(self):
        return self.output_dir / 'artifacts'

    @property
    def cache_dir(self):
        return self.output_dir / 'tuning_cache'

    @classmethod
    def from_env(cls, root=None):
        root = Path(root) if root is not None else Path(__file__).parent.parent
        return cls(
            data_url=os.environ.get('TRAIN_DATA_URL', DEFAULT_DATA_URL),
            output_dir=Path(os.environ.get('OUTPUT_DIR', root)),
            random_state=int(os.environ.get('RANDOM_STATE', '42')),
            test_size=float(os.environ.get('TEST_SIZE', '0.25')),
            cv_folds=int(os.environ.get('CV_FOLDS', '10')),
            grid_size=int(os.environ.get('GRID_SIZE', '100')),
            leaderboard_size=int(os.environ.get('LEADERBOARD_SIZE', '5')),
            n_jobs=int(os.environ.get('N_JOBS', default_n_jobs())),
        )


def default_n_jobs():
    # all cores but one
    return max((os.cpu_count() or 1) - 1, 1)
