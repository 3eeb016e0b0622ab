import pandas as pd
import numpy as np
import matplotlib.pyplot as plt
from pathlib import Path
from logger import Logger
from config import ERROR_ANALYSIS_RANGE, LATE_THRESHOLD_SECONDS
from feature_engineering import TRAIN_TYPES

TIME_OF_DAY_ORDER = ['Morning', 'Mid-day', 'Afternoon', 'Night']


class Visualizations:
    def __init__(self, figures_dir, artifacts_dir, logger=None):
        self.figures_dir = Path(figures_dir)
        self.artifacts_dir = Path(artifacts_dir)
        self.logger = logger or Logger()
        self.figures_dir.mkdir(parents=True, exist_ok=True)
        self.artifacts_dir.mkdir(parents=True, exist_ok=True)

    def generate_eda_figures(self, df):
        self.logger.section("GENERATING FIGURES")
        self.plot_delay_density(df, self.figures_dir / 'fig1_accrued_delay_by_type.png')
        self.plot_delay_scatter(df, self.figures_dir / 'fig2_delay_in_vs_accrued.png')
        self.plot_time_of_day(df, self.figures_dir / 'fig3_accrued_by_time_of_day.png')

    def generate_model_figures(self, results, importance, error_frame):
        self.plot_roc_overlay(results, self.figures_dir / 'fig4_cv_roc_curves.png')
        self.plot_feature_importance(importance, self.figures_dir / 'fig5_feature_importance.png')
        self.plot_false_negatives(error_frame, self.figures_dir / 'fig6_false_negative_delay_in.png')

    def save_artifacts(self, final, comparison, cv_auc, train_df, test_df):
        self.logger.section("SAVING ARTIFACTS")
        metrics = final.metrics
        metrics_df = pd.DataFrame({
            'Metric': [
                'Model', 'CV_ROC_AUC', 'Test_ROC_AUC', 'Sensitivity', 'Specificity',
                'Decision_Threshold', 'Late_Threshold_Seconds',
                'Train_Pct_Late', 'Test_Pct_Late', 'Train_Size', 'Test_Size',
            ],
            'Value': [
                final.name,
                cv_auc,
                metrics['ROC_AUC'],
                metrics['Sensitivity'],
                metrics['Specificity'],
                metrics['Decision_Threshold'],
                LATE_THRESHOLD_SECONDS,
                100 * train_df['is_late'].mean(),
                100 * test_df['is_late'].mean(),
                len(train_df),
                len(test_df),
            ],
        })
        metrics_path = self.artifacts_dir / 'metrics_test.csv'
        metrics_df.to_csv(metrics_path, index=False)
        comparison_path = self.artifacts_dir / 'model_comparison.csv'
        comparison.to_csv(comparison_path, index=False)
        self.logger.artifacts_saved(metrics_path, comparison_path)
        return metrics_path, comparison_path

    def print_summary(self, final, cv_auc, cat_features, num_features):
        self.logger.section("MODEL SUMMARY")
        test_auc = final.metrics['ROC_AUC']
        if abs(test_auc - cv_auc) <= 0.02:
            fit = "generalizes as cross-validation predicted"
        elif test_auc < cv_auc:
            fit = "scores noticeably lower on the test set than in cross-validation, a sign of overfitting"
        else:
            fit = "scores higher on the test set than in cross-validation"

        interpretation = (
            f"   The {final.name} model reaches a test ROC-AUC of {test_auc:.3f} and\n"
            f"   {fit}. At a {final.metrics['Decision_Threshold']:.1f} probability cut-off it finds\n"
            f"   {100 * final.metrics['Sensitivity']:.1f}% of trains that lose more than {LATE_THRESHOLD_SECONDS} s at a stop."
        )

        self.logger.model_summary(
            config={'Algorithm': final.name, **final.params},
            features={'categorical': cat_features, 'numeric': num_features},
            performance={
                'ROC-AUC (CV)': cv_auc,
                'ROC-AUC (test)': test_auc,
                'Sensitivity': final.metrics['Sensitivity'],
                'Specificity': final.metrics['Specificity'],
            },
            interpretation=interpretation,
        )

    def plot_delay_density(self, df, output_path):
        low, high = df['accrued_delay'].quantile([0.01, 0.99])
        bins = np.linspace(low, high, 60)
        fig, ax = plt.subplots(figsize=(10, 6))
        for train_type in [t for t in TRAIN_TYPES if t in set(df['type'])]:
            values = df.loc[df['type'] == train_type, 'accrued_delay'].clip(low, high)
            ax.hist(values, bins=bins, density=True, histtype='step', linewidth=2, label=train_type)
        ax.axvline(LATE_THRESHOLD_SECONDS, linestyle='--', color='gray', label=f'{LATE_THRESHOLD_SECONDS} s threshold')
        ax.set_xlabel('Accrued delay (seconds)', fontsize=12)
        ax.set_ylabel('Density', fontsize=12)
        ax.set_title('Accrued delay at a stop by train type', fontsize=14, fontweight='bold')
        ax.legend(loc='best')
        ax.grid(True, alpha=0.3)
        plt.tight_layout()
        plt.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close()
        self.logger.figure_generated("Figure 1: Accrued Delay by Train Type", output_path)

    def plot_delay_scatter(self, df, output_path):
        fig, ax = plt.subplots(figsize=(10, 8))
        ax.scatter(df['delay_in'], df['accrued_delay'], s=4, alpha=0.2, color='steelblue')
        ax.axhline(LATE_THRESHOLD_SECONDS, linestyle='--', color='gray')
        ax.set_xlabel('Delay at arrival (seconds)', fontsize=12)
        ax.set_ylabel('Accrued delay (seconds)', fontsize=12)
        ax.set_title('Arrival delay vs delay accrued at the stop', fontsize=14, fontweight='bold')
        ax.grid(True, alpha=0.3)
        plt.tight_layout()
        plt.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close()
        self.logger.figure_generated("Figure 2: Arrival vs Accrued Delay", output_path)

    def plot_time_of_day(self, df, output_path):
        p99 = df['accrued_delay'].quantile(0.99)
        order = [b for b in TIME_OF_DAY_ORDER if b in set(df['time_of_day'])]
        data = [df.loc[df['time_of_day'] == b, 'accrued_delay'].clip(upper=p99).values for b in order]
        fig, ax = plt.subplots(figsize=(10, 6))
        bp = ax.boxplot(data, tick_labels=order, patch_artist=True)
        for patch in bp['boxes']:
            patch.set_facecolor('lightblue')
            patch.set_alpha(0.7)
        ax.set_xlabel('Planned departure', fontsize=12)
        ax.set_ylabel('Accrued delay (seconds)', fontsize=12)
        ax.set_title('Accrued delay by time of day', fontsize=14, fontweight='bold')
        ax.grid(True, axis='y', alpha=0.3)
        plt.tight_layout()
        plt.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close()
        self.logger.figure_generated("Figure 3: Accrued Delay by Time of Day", output_path)

    def plot_roc_overlay(self, results, output_path):
        fig, ax = plt.subplots(figsize=(8, 8))
        for name, result in results.items():
            roc = result.roc.sort_values(['specificity', 'sensitivity'], ascending=[False, True])
            ax.plot(1 - roc['specificity'], roc['sensitivity'], linewidth=2,
                    label=f'{name} (AUC = {result.cv_auc:.3f})')
        ax.plot([0, 1], [0, 1], linestyle='--', color='gray', linewidth=1)
        ax.set_xlabel('1 - Specificity', fontsize=12)
        ax.set_ylabel('Sensitivity', fontsize=12)
        ax.set_title('Cross-validated ROC curves', fontsize=14, fontweight='bold')
        ax.legend(loc='lower right')
        ax.grid(True, alpha=0.3)
        ax.set_xlim([0, 1])
        ax.set_ylim([0, 1])
        plt.tight_layout()
        plt.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close()
        self.logger.figure_generated("Figure 4: ROC Curves (cross-validation)", output_path)

    def plot_feature_importance(self, importance, output_path):
        importance = importance.sort_values(ascending=True)
        fig, ax = plt.subplots(figsize=(10, 5))
        ax.barh(range(len(importance)), importance.values, color='steelblue', alpha=0.7)
        ax.set_yticks(range(len(importance)))
        ax.set_yticklabels(importance.index)
        ax.set_xlabel('Relative importance', fontsize=12)
        ax.set_title('Feature importance (final model)', fontsize=14, fontweight='bold')
        ax.grid(True, axis='x', alpha=0.3)
        for i, v in enumerate(importance.values):
            ax.text(v + 0.005, i, f'{v:.2f}', va='center', fontsize=9)
        plt.tight_layout()
        plt.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close()
        self.logger.figure_generated("Figure 5: Feature Importance", output_path)

    def plot_false_negatives(self, frame, output_path, value_range=ERROR_ANALYSIS_RANGE):
        low, high = value_range
        window = frame[frame['delay_in'].between(low, high)]
        bins = np.linspace(low, high, 33)
        fig, ax = plt.subplots(figsize=(10, 6))
        groups = [
            (~window['is_false_negative'], 'steelblue', 'Other test rows'),
            (window['is_false_negative'], 'darkorange', 'False negatives'),
        ]
        for mask, color, label in groups:
            values = window.loc[mask, 'delay_in']
            if len(values):
                ax.hist(values, bins=bins, density=True, alpha=0.5, color=color, label=label)
        ax.set_xlabel('Delay at arrival (seconds)', fontsize=12)
        ax.set_ylabel('Density', fontsize=12)
        ax.set_title('Arrival delay of missed late departures', fontsize=14, fontweight='bold')
        ax.legend(loc='upper left')
        ax.grid(True, alpha=0.3)
        plt.tight_layout()
        plt.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close()
        self.logger.figure_generated("Figure 6: False Negatives by Arrival Delay", output_path)
