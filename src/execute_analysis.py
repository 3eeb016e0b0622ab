import warnings
import numpy as np
from sklearn.exceptions import ConvergenceWarning

from config import AnalysisConfig, CATEGORICAL_FEATURES, NUMERIC_FEATURES
from logger import Logger
from data_loader import DataLoader
from data_cleaner import DataCleaner
from feature_engineering import FeatureEngineer, feature_target
from model_pipeline import ModelPipeline
from tuning_cache import TuningCache
from evaluator import Evaluator
from visualizations import Visualizations

def main(config=None):
    config = config or AnalysisConfig.from_env()
    with warnings.catch_warnings():
        # small epoch counts in the neural network search never converge
        warnings.filterwarnings('ignore', category=ConvergenceWarning)
        return run_analysis(config)


def run_analysis(config):
    np.random.seed(config.random_state)
    logger = Logger()
    logger.section("BELGIAN TRAIN DELAY ANALYSIS\nWhich stops add more than a minute of delay?")

    loader = DataLoader(config.data_url, logger)
    typed, text = loader.load()

    cleaner = DataCleaner(logger)
    df = cleaner.clean(typed, text)

    fe = FeatureEngineer(random_state=config.random_state, test_size=config.test_size, logger=logger)
    df = fe.engineer(df)
    fe.describe(df)
    model_df = fe.build_modeling_table(df)
    fe.late_share_by_type(model_df)
    train_df, test_df = fe.split(model_df)
    X_train, y_train = feature_target(train_df)
    X_test, y_test = feature_target(test_df)

    viz = Visualizations(config.figures_dir, config.artifacts_dir, logger)
    viz.generate_eda_figures(df)

    pipeline = ModelPipeline(
        random_state=config.random_state,
        n_folds=config.cv_folds,
        grid_size=config.grid_size,
        leaderboard_size=config.leaderboard_size,
        n_jobs=config.n_jobs,
        cache=TuningCache(config.cache_dir, logger),
        logger=logger,
    )
    folds = pipeline.make_folds(X_train, y_train)
    results = pipeline.tune_all(X_train, y_train, folds)

    evaluator = Evaluator(random_state=config.random_state, logger=logger)
    comparison = evaluator.compare(results)
    best_name = evaluator.select_best(comparison)
    best = results[best_name]
    final = evaluator.finalize(best_name, best.params, X_train, y_train, X_test, y_test)
    evaluator.overfit_gap(best.cv_auc, final.metrics['ROC_AUC'])
    importance = evaluator.feature_importance(final, X_test, y_test)
    error_frame = evaluator.false_negatives(test_df, final.y_test_pred)
    evaluator.compare_delay_in(error_frame)

    viz.generate_model_figures(results, importance, error_frame)
    viz.save_artifacts(final, comparison, best.cv_auc, train_df, test_df)
    viz.print_summary(final, best.cv_auc, CATEGORICAL_FEATURES, NUMERIC_FEATURES)

    logger.completion(config.figures_dir, config.artifacts_dir)
    return final


if __name__ == '__main__':
    main()
