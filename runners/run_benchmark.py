# Benchmark runner
# Loads a clinical dataset, runs every configured model through the harness
# and saves reports, metrics and fitted pipelines to a run directory.

import argparse
import os
import random
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np

from benchmark.config_schema import validate_config, ConfigurationError
from benchmark.io import load_config, save_results, create_run_dir, save_data_profile
from benchmark.data import load_dataset, preprocess_data, validate_data_integrity, resolve_positive_label
from benchmark.specs import model_specs_from_config, resampling_from_config
from benchmark import harness
from analysis.exploration import class_balance
from analysis.reporting import format_classification_report, generate_model_comparison_table


def set_seeds(seed):
    """Set all random seeds for reproducibility."""
    random.seed(seed)
    np.random.seed(seed)


def save_plots(run_dir, config, reports):
    """Confusion matrices, comparison chart and score-vs-parameter curves."""
    from analysis.plots import plot_confusion_matrix, plot_model_comparison, plot_score_vs_param
    import matplotlib.pyplot as plt

    plots_dir = os.path.join(run_dir, 'plots')
    plot_params = config.get('metrics', {}).get('plot_param', {}) or {}

    fig = plot_model_comparison(reports, save_path=os.path.join(plots_dir, 'model_comparison.png'))
    plt.close(fig)

    for name, report in reports.items():
        if not report.ok:
            continue
        fig = plot_confusion_matrix(report, save_path=os.path.join(plots_dir, f'{name}_confusion.png'))
        plt.close(fig)

        param = plot_params.get(name)
        if param:
            fig = plot_score_vs_param(report, param,
                                      save_path=os.path.join(plots_dir, f'{name}_{param}.png'))
            plt.close(fig)


def run_benchmark(config_path, dataset_path=None, output_dir=None):
    """
    Run the multi-model benchmark.

    Args:
        config_path: Path to YAML config file
        dataset_path: Optional path to dataset CSV (overrides config)
        output_dir: Optional output directory (overrides config)

    Returns:
        run_dir: Path to experiment output directory
    """
    config = load_config(config_path)

    if output_dir:
        config['experiment']['output_dir'] = output_dir

    try:
        validate_config(config)
    except ConfigurationError as e:
        print(f"\nCONFIG ERROR:\n{e}")
        raise

    seed = config['experiment']['seed']
    set_seeds(seed)

    target = config['data']['target_column']
    train_fraction = config.get('split', {}).get('train_fraction', 0.8)
    model_specs = model_specs_from_config(config)
    resampling = resampling_from_config(config)

    print("=" * 60)
    print("DIAGNOSIS MODEL BENCHMARK")
    print("=" * 60)
    print(f"Experiment: {config['experiment']['name']}")
    print(f"Target: {target}")
    print(f"Seed: {seed}")
    print(f"Models: {list(model_specs)}")
    print(f"CV: {resampling.n_splits}-fold x {resampling.n_repeats} repeats, scoring={resampling.scoring}")
    print("=" * 60)

    df, actual_path = load_dataset(config, dataset_path)
    X, y = preprocess_data(df, config)
    validate_data_integrity(X, y)

    print(f"\nDataset shape: {X.shape}")
    print(f"Features: {len(X.columns)}")
    balance = class_balance(y)
    print("Class distribution: " + ", ".join(
        f"{cls}={count} ({prop * 100:.1f}%)"
        for cls, count, prop in zip(balance['class'], balance['count'], balance['proportion'])
    ))

    dataset = X.assign(**{target: y})
    reports, trained_models = harness.run(
        dataset,
        target,
        model_specs,
        resampling,
        train_fraction=train_fraction,
        seed=seed,
        positive_label=config['data'].get('positive_label'),
        return_models=True,
    )
    positive_label = resolve_positive_label(y, config['data'].get('positive_label'))

    print("\n" + "=" * 60)
    print("CLASSIFICATION REPORTS (held-out test subset)")
    print("=" * 60)
    for report in reports.values():
        print("\n" + format_classification_report(report))

    comparison = generate_model_comparison_table(reports, format_type='markdown')
    print("\n" + comparison)

    run_dir = create_run_dir(config)
    save_data_profile(run_dir, df, X, y, actual_path)
    save_results(run_dir, config, reports, trained_models, positive_label)

    with open(os.path.join(run_dir, 'comparison.md'), 'w') as f:
        f.write(comparison + "\n")

    if config.get('metrics', {}).get('save_plots', True):
        save_plots(run_dir, config, reports)

    failed = [name for name, report in reports.items() if not report.ok]
    print("\n" + "=" * 60)
    if failed:
        print(f"Benchmark complete with {len(failed)} failed model(s): {failed}")
    else:
        print("Benchmark complete!")
    print("=" * 60)

    return run_dir


def main():
    parser = argparse.ArgumentParser(
        description='Benchmark classifiers on a binary diagnosis dataset',
        epilog='For exploratory statistics only, use: python -m runners.run_eda'
    )
    parser.add_argument('--config', '-c', type=str, default='configs/diagnosis.yaml',
                        help='Path to config YAML file')
    parser.add_argument('--dataset', '-d', type=str, default=None,
                        help='Path to dataset CSV (overrides config)')
    parser.add_argument('--output-dir', '-o', type=str, default=None,
                        help='Output directory for run artifacts (overrides config)')
    args = parser.parse_args()

    run_benchmark(args.config, args.dataset, args.output_dir)


if __name__ == "__main__":
    main()
