from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.inspection import permutation_importance
from sklearn.metrics import confusion_matrix, recall_score, roc_auc_score

from config import CATEGORICAL_FEATURES, NUMERIC_FEATURES, ERROR_ANALYSIS_RANGE
from logger import Logger
from model_pipeline import get_trainer


@dataclass
class FinalModel:
    name: str
    params: dict
    pipeline: object
    y_test_proba: np.ndarray
    y_test_pred: np.ndarray
    metrics: dict


class Evaluator:
    def __init__(self, random_state=42, decision_threshold=0.5, logger=None):
        self.random_state = random_state
        self.decision_threshold = decision_threshold
        self.logger = logger or Logger()

    def compare(self, results):
        self.logger.section("MODEL COMPARISON")
        comparison = pd.DataFrame([
            {'model': name, 'roc_auc': result.cv_auc, 'std_err': result.std_err}
            for name, result in results.items()
        ]).sort_values('roc_auc', ascending=False, kind='stable').reset_index(drop=True)
        self.logger.model_comparison(comparison)
        return comparison

    def select_best(self, comparison):
        best = comparison.iloc[0]
        self.logger.best_model(best['model'], best['roc_auc'])
        return best['model']

    def finalize(self, name, params, X_train, y_train, X_test, y_test):
        """Refit on the whole training partition and score the test partition once."""
        self.logger.section(f"FINAL FIT: {name}")
        pipeline = get_trainer(name).pipeline(params, self.random_state)
        pipeline.fit(X_train, y_train)
        y_test_proba = pipeline.predict_proba(X_test)[:, 1]
        y_test_pred = (y_test_proba >= self.decision_threshold).astype(int)
        cm = confusion_matrix(y_test, y_test_pred, labels=[0, 1])

        metrics = {
            'ROC_AUC': roc_auc_score(y_test, y_test_proba),
            'Sensitivity': recall_score(y_test, y_test_pred, pos_label=1, zero_division=0),
            'Specificity': recall_score(y_test, y_test_pred, pos_label=0, zero_division=0),
            'Decision_Threshold': self.decision_threshold,
            'Confusion_Matrix': cm,
        }
        self.logger.test_metrics(metrics)
        self.logger.confusion_matrix(cm)
        return FinalModel(name, params, pipeline, y_test_proba, y_test_pred, metrics)

    def overfit_gap(self, cv_auc, test_auc):
        self.logger.overfit_check(cv_auc, test_auc)
        return abs(test_auc - cv_auc)

    def feature_importance(self, final, X_test=None, y_test=None):
        model = final.pipeline.named_steps['model']
        if hasattr(model, 'feature_importances_'):
            names = final.pipeline.named_steps['prep'].get_feature_names_out()
            raw = pd.Series(model.feature_importances_, index=names)
            importance = pd.Series({
                feature: raw[[n for n in names if n == feature or n.startswith(f'{feature}_')]].sum()
                for feature in CATEGORICAL_FEATURES + NUMERIC_FEATURES
            })
        else:
            if X_test is None or y_test is None:
                raise ValueError(f"{final.name} has no built-in importances; pass test data for permutation importance")
            result = permutation_importance(
                final.pipeline, X_test, y_test,
                scoring='roc_auc', n_repeats=5, random_state=self.random_state,
            )
            importance = pd.Series(result.importances_mean, index=X_test.columns).clip(lower=0)

        total = importance.sum()
        if total > 0:
            importance = importance / total
        importance = importance.sort_values(ascending=False)
        self.logger.feature_importance(importance)
        return importance

    def false_negatives(self, test_df, y_test_pred):
        """Test rows that were late but predicted on time."""
        frame = test_df.copy()
        frame['predicted'] = y_test_pred
        frame['is_false_negative'] = (frame['is_late'] == 1) & (frame['predicted'] == 0)
        return frame

    def compare_delay_in(self, frame, value_range=ERROR_ANALYSIS_RANGE):
        self.logger.section("ERROR ANALYSIS")
        low, high = value_range
        window = frame[frame['delay_in'].between(low, high)]
        groups = window['is_false_negative'].map({True: 'False negative', False: 'Other'})
        summary = window.groupby(groups)['delay_in'].describe()
        summary['share_arrived_early'] = window.groupby(groups)['delay_in'].apply(lambda s: (s < 0).mean())
        self.logger.error_analysis(summary)
        return summary
