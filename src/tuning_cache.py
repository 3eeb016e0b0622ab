import pandas as pd
from pathlib import Path
from logger import Logger
from model_pipeline import TuningResult

ARTIFACTS = ('best_params', 'roc', 'leaderboard')


class TuningCache:
    """Three CSVs per model so an expensive search only runs once."""

    def __init__(self, cache_dir, logger=None):
        self.cache_dir = Path(cache_dir)
        self.logger = logger or Logger()

    def path(self, name, artifact):
        return self.cache_dir / f'{name}_{artifact}.csv'

    def exists(self, name):
        return all(self.path(name, artifact).exists() for artifact in ARTIFACTS)

    def save(self, result):
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        result.best.to_csv(self.path(result.name, 'best_params'), index=False)
        result.roc.to_csv(self.path(result.name, 'roc'), index=False)
        result.leaderboard.to_csv(self.path(result.name, 'leaderboard'), index=False)
        self.logger.info(f"Cached {result.name} tuning results in {self.cache_dir}/")

    def load(self, name):
        if not self.exists(name):
            raise KeyError(f"No cached tuning results for '{name}' in {self.cache_dir}")
        return TuningResult(
            name=name,
            best=pd.read_csv(self.path(name, 'best_params')),
            roc=pd.read_csv(self.path(name, 'roc')),
            leaderboard=pd.read_csv(self.path(name, 'leaderboard')),
        )
