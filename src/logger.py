class Logger:
    def __init__(self, width=70):
        self.width = width

    def section(self, title):
        print("\n" + "=" * self.width)
        print(title)
        print("=" * self.width)

    def info(self, message):
        print(f"   {message}")

    def success(self, message):
        print(f"✅ {message}")

    def source_loaded(self, source, mode, row_count, col_count):
        print(f"  Loaded {source} ({mode}): {row_count:,} rows, {col_count} columns")

    def parse_failures(self, column, count):
        print(f"⚠️  {column}: {count:,} value(s) could not be parsed")

    def rows_repaired(self, column, count, timestamps):
        print(f"✅ Repaired {column} on {count:,} row(s)")
        for ts in timestamps:
            print(f"   - {ts}")

    def rows_filtered(self, reason, before, after):
        print(f"✅ {reason}: {before:,} → {after:,} rows ({before - after:,} dropped)")

    def features_engineered(self, features_dict):
        print("✅ Features engineered:")
        for key, value in features_dict.items():
            print(f"   - {key}: {value}")

    def delay_summary(self, summary):
        print("\n📊 Accrued delay (seconds):")
        for key, value in summary.items():
            print(f"   - {key}: {value}")

    def class_distribution(self, threshold, n_late, n_total):
        pct_late = 100 * n_late / n_total if n_total else 0.0
        print(f"\n📊 Class Distribution:")
        print(f"   - Late (>{threshold} s): {n_late:,} ({pct_late:.1f}%)")
        print(f"   - On time (≤{threshold} s): {n_total - n_late:,} ({100 - pct_late:.1f}%)")

    def split_sizes(self, train_size, test_size, train_pct, test_pct):
        print(f"\n📊 Split sizes:")
        print(f"   - Train: {train_size:,} rows ({train_pct:.1f}% late)")
        print(f"   - Test: {test_size:,} rows ({test_pct:.1f}% late)")

    def folds_created(self, n_folds, fold_size):
        print(f"✅ {n_folds} cross-validation folds (~{fold_size:,} rows assessed per fold)")

    def pipeline_built(self, name, steps):
        print(f"✅ {name} pipeline: {' → '.join(steps)}")

    def tuning_info(self, name, n_candidates, n_folds, n_jobs):
        print(f"Tuning {name}: {n_candidates} candidates × {n_folds} folds on {n_jobs} worker(s), metric ROC-AUC")

    def tuning_cached(self, name, cache_dir):
        print(f"♻️  {name}: loaded cached tuning results from {cache_dir}/")

    def tuning_result(self, name, params, mean, std):
        formatted = ", ".join(f"{k}={v}" for k, v in params.items())
        print(f"   {name}: ROC-AUC={mean:.4f} (±{std:.4f}) with {formatted}")

    def model_comparison(self, comparison):
        print(f"\n📊 Cross-validated ROC-AUC:")
        for row in comparison.itertuples(index=False):
            print(f"   - {row.model:<20} {row.roc_auc:.4f} (±{row.std_err:.4f})")

    def best_model(self, name, roc_auc):
        print(f"\n✅ Best model: {name} (CV ROC-AUC: {roc_auc:.4f})")

    def test_metrics(self, metrics):
        print(f"\n📊 Test Set Metrics:")
        print(f"   - ROC-AUC: {metrics['ROC_AUC']:.4f}")
        print(f"   - Sensitivity: {metrics['Sensitivity']:.4f}")
        print(f"   - Specificity: {metrics['Specificity']:.4f}")

    def overfit_check(self, cv_auc, test_auc):
        gap = test_auc - cv_auc
        print(f"\n🔍 CV ROC-AUC {cv_auc:.4f} vs test ROC-AUC {test_auc:.4f} (difference {gap:+.4f})")

    def confusion_matrix(self, cm):
        print(f"\n📋 Confusion Matrix:")
        print(f"   True Negatives:  {cm[0, 0]:,}")
        print(f"   False Positives: {cm[0, 1]:,}")
        print(f"   False Negatives: {cm[1, 0]:,}")
        print(f"   True Positives:  {cm[1, 1]:,}")

    def feature_importance(self, importance):
        print(f"\n📊 Feature importance:")
        for feature, value in importance.items():
            print(f"   - {feature:<18} {value:.3f}")

    def error_analysis(self, summary):
        print(f"\n🔍 delay_in for false negatives vs other test rows:")
        print(summary.to_string())

    def figure_generated(self, figure_name, path):
        print(f"\n📊 Generating {figure_name}...")
        print(f"   ✅ Saved to {path}")

    def artifacts_saved(self, metrics_path, comparison_path):
        print(f"✅ Saved metrics to {metrics_path}")
        print(f"✅ Saved model comparison to {comparison_path}")

    def model_summary(self, config, features, performance, interpretation):
        print(f"\n📋 Model Configuration:")
        for key, value in config.items():
            print(f"   - {key}: {value}")
        print(f"\n📊 Features Used:")
        print(f"   - Categorical: {', '.join(features['categorical'])}")
        print(f"   - Numeric: {', '.join(features['numeric'])}")
        print(f"\n📈 Performance (Test Set):")
        for key, value in performance.items():
            print(f"   - {key}: {value:.4f}")
        print(f"\n💡 Interpretation:")
        print(interpretation)

    def completion(self, figures_dir, artifacts_dir):
        print("\n" + "=" * self.width)
        print("ANALYSIS COMPLETE ✅")
        print("=" * self.width)
        print(f"\n📁 Output files:")
        print(f"   Figures: {figures_dir}/")
        print(f"   Artifacts: {artifacts_dir}/")
        print("=" * self.width)
