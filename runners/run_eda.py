"""
EDA Runner for the clinical dataset.
Computes class balance, normality tests, target correlations and z-score
outliers, and writes tables and figures next to the benchmark runs.
"""

import os
import sys
import argparse
import json
from datetime import datetime

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import matplotlib.pyplot as plt

from benchmark.io import load_config
from benchmark.data import load_dataset, preprocess_data
from analysis.exploration import (
    class_balance,
    continuous_columns,
    detect_outliers,
    normality_tests,
    summarize_features,
    target_correlations,
)
from analysis.plots import plot_class_balance, plot_correlation_matrix


def create_eda_directories(output_dir: str) -> dict:
    """Create EDA output directory structure."""
    subdirs = {
        'tables': os.path.join(output_dir, 'tables'),
        'figures': os.path.join(output_dir, 'figures'),
    }
    for d in subdirs.values():
        os.makedirs(d, exist_ok=True)
    return subdirs


def run_eda(config_path: str, dataset_path: str = None, output_dir: str = None,
            outlier_threshold: float = 3.0) -> str:
    """
    Run exploratory analysis on the configured dataset.

    Returns:
        Path to the EDA output directory
    """
    config = load_config(config_path)
    target = config['data']['target_column']

    base_dir = output_dir or config['experiment'].get('output_dir', 'runs')
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    eda_dir = os.path.join(base_dir, f"eda_{config['experiment']['name']}_{timestamp}")
    dirs = create_eda_directories(eda_dir)

    print("=" * 60)
    print("EXPLORATORY DATA ANALYSIS")
    print("=" * 60)

    df, actual_path = load_dataset(config, dataset_path)
    X, y = preprocess_data(df, config)
    data = X.assign(**{target: y})

    print(f"Dataset: {len(X)} samples, {len(X.columns)} features")

    # Class balance
    balance = class_balance(y)
    balance.to_csv(os.path.join(dirs['tables'], 'class_balance.csv'), index=False)
    for cls, count, prop in zip(balance['class'], balance['count'], balance['proportion']):
        print(f"  {target}={cls}: {count} ({prop * 100:.1f}%)")

    # Distribution checks on continuous features
    continuous = continuous_columns(X)
    print(f"Continuous features: {len(continuous)}")

    summary = summarize_features(X, continuous)
    summary.to_csv(os.path.join(dirs['tables'], 'feature_summary.csv'))

    normality = normality_tests(X, continuous)
    normality.to_csv(os.path.join(dirs['tables'], 'normality_tests.csv'), index=False)
    n_normal = int(normality['normal'].sum()) if len(normality) else 0
    print(f"  Shapiro-Wilk: {n_normal}/{len(normality)} features consistent with normality")

    # Correlation with the target
    correlations = target_correlations(data, target)
    correlations.to_csv(os.path.join(dirs['tables'], 'target_correlations.csv'), index=False)
    print("  Top Spearman correlations with target:")
    for _, row in correlations.head(5).iterrows():
        print(f"    {row['feature']:30s} rho={row['rho']:+.3f} (p={row['p_value']:.3g})")

    # Outliers
    outliers = detect_outliers(X, continuous, threshold=outlier_threshold)
    outliers.to_csv(os.path.join(dirs['tables'], 'outliers.csv'), index=False)
    print(f"  Outliers (|z| > {outlier_threshold}): {int(outliers['n_outliers'].sum()) if len(outliers) else 0}")

    fig = plot_class_balance(balance, target, save_path=os.path.join(dirs['figures'], 'class_balance.png'))
    plt.close(fig)
    fig = plot_correlation_matrix(data, save_path=os.path.join(dirs['figures'], 'correlation_matrix.png'))
    plt.close(fig)

    info = {
        'dataset_path': str(actual_path),
        'n_samples': int(len(X)),
        'n_features': int(len(X.columns)),
        'n_continuous': len(continuous),
        'class_balance': {str(cls): float(prop) for cls, prop in zip(balance['class'], balance['proportion'])},
        'timestamp': datetime.now().isoformat(),
    }
    with open(os.path.join(eda_dir, 'dataset_info.json'), 'w') as f:
        json.dump(info, f, indent=2)

    print(f"\nEDA saved to: {eda_dir}")
    return eda_dir


def main():
    parser = argparse.ArgumentParser(description='Exploratory analysis of the diagnosis dataset')
    parser.add_argument('--config', '-c', type=str, default='configs/diagnosis.yaml',
                        help='Path to config YAML file')
    parser.add_argument('--dataset', '-d', type=str, default=None,
                        help='Path to dataset CSV (overrides config)')
    parser.add_argument('--output-dir', '-o', type=str, default=None,
                        help='Output directory (overrides config)')
    parser.add_argument('--outlier-threshold', type=float, default=3.0,
                        help='|z| above which a value counts as an outlier')
    args = parser.parse_args()

    run_eda(args.config, args.dataset, args.output_dir, args.outlier_threshold)


if __name__ == "__main__":
    main()
