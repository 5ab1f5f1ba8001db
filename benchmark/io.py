# I/O utilities for the benchmark pipeline
# Config loading, result saving, run directory management

import os
import json
import hashlib
from datetime import datetime

import yaml


def load_config(config_path):
    """Load YAML configuration file."""
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)

    if config is None:
        raise ValueError(f"Config file is empty or invalid: {config_path}")

    return config


def config_hash(config):
    """Generate deterministic hash of config for run naming."""
    config_str = json.dumps(config, sort_keys=True, default=str)
    return hashlib.md5(config_str.encode()).hexdigest()[:8]


def dataset_hash(df):
    """Generate hash of dataset content for fingerprinting."""
    # Hash based on shape and sample of data
    content = f"{df.shape}_{df.columns.tolist()}_{df.head(10).to_json()}_{df.tail(10).to_json()}"
    return hashlib.md5(content.encode()).hexdigest()[:12]


def create_run_dir(config, output_dir=None):
    """Create unique run directory for experiment outputs."""
    output_dir = output_dir or config['experiment'].get('output_dir', 'runs')
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    cfg_hash = config_hash(config)
    run_name = f"{config['experiment']['name']}_{timestamp}_{cfg_hash}"
    run_dir = os.path.join(output_dir, run_name)
    os.makedirs(run_dir, exist_ok=True)
    return run_dir


def save_results(run_dir, config, reports, trained_models, positive_label):
    """Save all benchmark artifacts to run directory."""
    import joblib

    # Save config
    with open(os.path.join(run_dir, 'config.yaml'), 'w') as f:
        yaml.dump(config, f, default_flow_style=False)

    results_json = {
        'experiment_name': config['experiment']['name'],
        'seed': config['experiment']['seed'],
        'target_column': config['data']['target_column'],
        'positive_label': _json_label(positive_label),
        'train_fraction': config.get('split', {}).get('train_fraction', 0.8),
        'cross_validation': config['cross_validation'],
        'models': {name: report.to_dict() for name, report in reports.items()},
    }

    with open(os.path.join(run_dir, 'metrics.json'), 'w') as f:
        json.dump(results_json, f, indent=2, default=str)

    # Fitted pipelines (scaler + model), one file per successful model
    for name, trained in trained_models.items():
        model_path = os.path.join(run_dir, f'{name}.joblib')
        joblib.dump(trained.pipeline, model_path)
        print(f"Model saved to: {model_path}")

    print(f"Results saved to: {run_dir}")
    return run_dir


def save_data_profile(run_dir, df, X, y, dataset_path):
    """Save dataset fingerprint/profile for reproducibility tracking."""
    counts = y.value_counts()
    profile = {
        'dataset_path': str(dataset_path) if dataset_path else None,
        'dataset_hash': dataset_hash(df),
        'total_rows': len(df),
        'total_columns': len(df.columns),
        'feature_count': len(X.columns),
        'features_used': list(X.columns),
        'target_column': y.name,
        'target_stats': {
            'unique_values': int(y.nunique()),
            'value_counts': {str(k): int(v) for k, v in counts.items()},
            'proportions': {str(k): float(v / len(y)) for k, v in counts.items()},
        },
        'missing_values': int(X.isnull().sum().sum()),
        'timestamp': datetime.now().isoformat()
    }

    with open(os.path.join(run_dir, 'data_profile.json'), 'w') as f:
        json.dump(profile, f, indent=2)

    return profile


def _json_label(label):
    """Cast numpy scalars to plain Python for JSON output."""
    return label.item() if hasattr(label, 'item') else label
