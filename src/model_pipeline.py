from dataclasses import dataclass, field

import numpy as np
import pandas as pd
from scipy.stats import qmc
from sklearn.compose import ColumnTransformer
from sklearn.ensemble import RandomForestClassifier
from sklearn.metrics import roc_curve
from sklearn.model_selection import GridSearchCV, StratifiedKFold, cross_val_predict
from sklearn.neighbors import KNeighborsClassifier
from sklearn.neural_network import MLPClassifier
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder, OrdinalEncoder, StandardScaler
from xgboost import XGBClassifier

from config import CATEGORICAL_FEATURES, NUMERIC_FEATURES
from logger import Logger

METRIC_COLUMNS = ['mean', 'std_err', 'n']


class Hyperparameter:
    """One tunable value: a numeric range (linear or log10) or a list of choices."""

    def __init__(self, name, target, low=None, high=None, log=False, integer=False,
                 choices=None, transform=None):
        self.name = name
        self.target = target
        self.low = low
        self.high = high
        self.log = log
        self.integer = integer
        self.choices = choices
        self.transform = transform

    def from_unit(self, u):
        if self.choices is not None:
            return self.choices[min(int(u * len(self.choices)), len(self.choices) - 1)]
        if self.integer:
            value = np.floor(self.low + u * (self.high - self.low + 1))
            return int(min(max(value, self.low), self.high))
        value = self.low + u * (self.high - self.low)
        return float(10 ** value) if self.log else float(value)

    def estimator_value(self, value):
        value = _native(value)
        if self.integer:
            value = int(value)
        return self.transform(value) if self.transform else value


@dataclass
class TrainerSpec:
    name: str
    steps: list
    build: object
    space: list = field(default_factory=list)

    @property
    def param_names(self):
        return [p.name for p in self.space]

    def estimator_params(self, params):
        return {f'model__{p.target}': p.estimator_value(params[p.name]) for p in self.space}

    def pipeline(self, params=None, random_state=42):
        pipe = self.build(random_state)
        if params:
            pipe.set_params(**self.estimator_params(params))
        return pipe


@dataclass
class TuningResult:
    name: str
    best: pd.DataFrame
    roc: pd.DataFrame
    leaderboard: pd.DataFrame

    @property
    def params(self):
        return {
            col: _native(self.best[col].iloc[0])
            for col in self.best.columns if col not in METRIC_COLUMNS
        }

    @property
    def cv_auc(self):
        return float(self.best['mean'].iloc[0])

    @property
    def std_err(self):
        return float(self.best['std_err'].iloc[0])


def _native(value):
    return value.item() if hasattr(value, 'item') else value


def _one_hot_preprocessor(scale_numeric):
    numeric = StandardScaler() if scale_numeric else 'passthrough'
    return ColumnTransformer(
        transformers=[
            ('cat', OneHotEncoder(handle_unknown='ignore', sparse_output=False), CATEGORICAL_FEATURES),
            ('num', numeric, NUMERIC_FEATURES),
        ],
        verbose_feature_names_out=False,
    )


def _build_random_forest(random_state):
    preprocessor = ColumnTransformer(
        transformers=[
            ('cat', OrdinalEncoder(handle_unknown='use_encoded_value', unknown_value=-1), CATEGORICAL_FEATURES),
            ('num', 'passthrough', NUMERIC_FEATURES),
        ],
        verbose_feature_names_out=False,
    )
    model = RandomForestClassifier(random_state=random_state, n_jobs=1)
    return Pipeline([('prep', preprocessor), ('model', model)])


def _build_boosted_trees(random_state):
    model = XGBClassifier(eval_metric='logloss', random_state=random_state, n_jobs=1)
    return Pipeline([('prep', _one_hot_preprocessor(scale_numeric=False)), ('model', model)])


def _build_knn(random_state):
    return Pipeline([('prep', _one_hot_preprocessor(scale_numeric=True)), ('model', KNeighborsClassifier())])


def _build_neural_network(random_state):
    model = MLPClassifier(random_state=random_state)
    return Pipeline([('prep', _one_hot_preprocessor(scale_numeric=True)), ('model', model)])


TRAINERS = {
    'random_forest': TrainerSpec(
        name='random_forest',
        steps=['ordinal(type)', 'random forest'],
        build=_build_random_forest,
        space=[
            Hyperparameter('trees', 'n_estimators', 50, 1000, integer=True),
            Hyperparameter('min_n', 'min_samples_split', 2, 40, integer=True),
            Hyperparameter('mtry', 'max_features', 1, len(CATEGORICAL_FEATURES + NUMERIC_FEATURES), integer=True),
        ],
    ),
    'boosted_trees': TrainerSpec(
        name='boosted_trees',
        steps=['dummy(type)', 'xgboost'],
        build=_build_boosted_trees,
        space=[
            Hyperparameter('tree_depth', 'max_depth', 1, 15, integer=True),
            Hyperparameter('learn_rate', 'learning_rate', -3.0, -0.5, log=True),
            Hyperparameter('loss_reduction', 'gamma', -10.0, 1.5, log=True),
            Hyperparameter('min_n', 'min_child_weight', 2, 40, integer=True),
            Hyperparameter('sample_size', 'subsample', 0.1, 1.0),
            Hyperparameter('trees', 'n_estimators', 50, 1000, integer=True),
        ],
    ),
    'knn': TrainerSpec(
        name='knn',
        steps=['dummy(type)', 'normalize(numeric)', 'k-nearest neighbors'],
        build=_build_knn,
        space=[
            Hyperparameter('neighbors', 'n_neighbors', 1, 50, integer=True),
            Hyperparameter('dist_power', 'p', 1.0, 2.0),
            Hyperparameter('weight_func', 'weights', choices=['uniform', 'distance']),
        ],
    ),
    'neural_network': TrainerSpec(
        name='neural_network',
        steps=['dummy(type)', 'normalize(numeric)', 'single-layer perceptron'],
        build=_build_neural_network,
        space=[
            Hyperparameter('hidden_units', 'hidden_layer_sizes', 1, 10, integer=True, transform=lambda h: (h,)),
            Hyperparameter('penalty', 'alpha', -10.0, 0.0, log=True),
            Hyperparameter('epochs', 'max_iter', 10, 1000, integer=True),
        ],
    ),
}


def get_trainer(name):
    if name not in TRAINERS:
        raise KeyError(f"Unknown model '{name}'. Available: {sorted(TRAINERS)}")
    return TRAINERS[name]


def space_filling_grid(space, size=100, random_state=42):
    """Latin hypercube design over the search space, one row per candidate."""
    sampler = qmc.LatinHypercube(d=len(space), seed=random_state)
    unit = sampler.random(n=size)
    rows = [{p.name: p.from_unit(u) for p, u in zip(space, point)} for point in unit]
    return pd.DataFrame(rows, columns=[p.name for p in space]).drop_duplicates().reset_index(drop=True)


class ModelPipeline:
    def __init__(self, random_state=42, n_folds=10, grid_size=100, leaderboard_size=5,
                 n_jobs=1, cache=None, logger=None):
        self.random_state = random_state
        self.n_folds = n_folds
        self.grid_size = grid_size
        self.leaderboard_size = leaderboard_size
        self.n_jobs = n_jobs
        self.cache = cache
        self.logger = logger or Logger()

    def make_folds(self, X, y):
        skf = StratifiedKFold(n_splits=self.n_folds, shuffle=True, random_state=self.random_state)
        folds = list(skf.split(X, y))
        self.logger.folds_created(len(folds), len(folds[0][1]))
        return folds

    def tune(self, spec, X, y, folds):
        candidates = space_filling_grid(spec.space, self.grid_size, self.random_state)
        self.logger.pipeline_built(spec.name, spec.steps)
        self.logger.tuning_info(spec.name, len(candidates), len(folds), self.n_jobs)

        param_grid = [
            {key: [value] for key, value in spec.estimator_params(row).items()}
            for row in candidates.to_dict('records')
        ]
        search = GridSearchCV(
            spec.pipeline(random_state=self.random_state),
            param_grid=param_grid,
            scoring='roc_auc',
            cv=folds,
            n_jobs=self.n_jobs,
            refit=False,
        )
        search.fit(X, y)

        scores = candidates.copy()
        scores['mean'] = search.cv_results_['mean_test_score']
        scores['std_err'] = search.cv_results_['std_test_score'] / np.sqrt(len(folds))
        scores['n'] = len(folds)
        scores = scores.sort_values('mean', ascending=False, kind='stable').reset_index(drop=True)

        best = scores.head(1).reset_index(drop=True)
        leaderboard = scores.head(self.leaderboard_size).reset_index(drop=True)
        roc = self.cross_validated_roc(spec, best.iloc[0].to_dict(), X, y, folds)
        return TuningResult(spec.name, best, roc, leaderboard)

    def cross_validated_roc(self, spec, params, X, y, folds):
        proba = cross_val_predict(
            spec.pipeline(params, self.random_state), X, y,
            cv=folds, method='predict_proba', n_jobs=self.n_jobs,
        )[:, 1]
        fpr, tpr, thresholds = roc_curve(y, proba)
        return pd.DataFrame({'threshold': thresholds, 'sensitivity': tpr, 'specificity': 1 - fpr})

    def tune_or_load(self, name, X, y, folds):
        self.logger.section(f"HYPERPARAMETER TUNING: {name}")
        spec = get_trainer(name)
        if self.cache is not None and self.cache.exists(name):
            self.logger.tuning_cached(name, self.cache.cache_dir)
            result = self.cache.load(name)
        else:
            result = self.tune(spec, X, y, folds)
            if self.cache is not None:
                # reload so fresh and cached runs share one schema
                self.cache.save(result)
                result = self.cache.load(name)
        self.logger.tuning_result(name, result.params, result.cv_auc, result.std_err)
        return result

    def tune_all(self, X, y, folds, names=None):
        return {name: self.tune_or_load(name, X, y, folds) for name in (names or TRAINERS)}
