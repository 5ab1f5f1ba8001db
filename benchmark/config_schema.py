# Config schema validation
# Validates config structure, types, model definitions and hyperparameter grids

from sklearn.metrics import get_scorer_names

from .models import SUPPORTED_MODELS

REQUIRED_KEYS = {
    'experiment': ['name', 'seed'],
    'data': ['target_column'],
    'preprocessing': [],
    'cross_validation': ['n_splits'],
    'models': [],
}

DEFAULT_SCORING = 'roc_auc'


class ConfigurationError(Exception):
    """Raised when the experiment or model configuration is invalid."""
    pass


def validate_config(config):
    """
    Validate experiment configuration.

    Args:
        config: dict - Configuration dictionary

    Raises:
        ConfigurationError if validation fails
    """
    errors = []

    # Check required top-level keys
    for section, required_keys in REQUIRED_KEYS.items():
        if section not in config:
            errors.append(f"Missing required section: '{section}'")
            continue

        for key in required_keys:
            if key not in config[section]:
                errors.append(f"Missing required key: '{section}.{key}'")

    if errors:
        raise ConfigurationError("Config validation failed:\n  - " + "\n  - ".join(errors))

    if not isinstance(config['experiment'].get('seed'), int):
        errors.append("experiment.seed must be an integer")

    errors.extend(_resampling_errors(config['cross_validation']))

    train_fraction = config.get('split', {}).get('train_fraction', 0.8)
    errors.extend(_train_fraction_errors(train_fraction))

    errors.extend(_models_errors(config['models']))

    if errors:
        raise ConfigurationError("Config validation failed:\n  - " + "\n  - ".join(errors))

    return True


def validate_model_specs(model_specs):
    """Validate a mapping of ModelSpec objects before any fitting starts."""
    if not model_specs:
        raise ConfigurationError("At least one model spec is required")

    errors = []
    for name, spec in model_specs.items():
        if spec.algorithm not in SUPPORTED_MODELS:
            errors.append(
                f"Model '{name}': unsupported algorithm '{spec.algorithm}'. "
                f"Allowed: {sorted(SUPPORTED_MODELS)}"
            )
        errors.extend(f"Model '{name}': {e}" for e in _grid_errors(spec.param_grid))

    if errors:
        raise ConfigurationError("Model spec validation failed:\n  - " + "\n  - ".join(errors))

    return True


def validate_resampling(resampling, train_fraction):
    """Validate a ResamplingConfig and the train fraction it will be used with."""
    errors = _resampling_errors({
        'n_splits': resampling.n_splits,
        'n_repeats': resampling.n_repeats,
        'scoring': resampling.scoring,
        'n_jobs': resampling.n_jobs,
    })
    errors.extend(_train_fraction_errors(train_fraction))

    if errors:
        raise ConfigurationError("Resampling validation failed:\n  - " + "\n  - ".join(errors))

    return True


def _resampling_errors(cv_config):
    errors = []

    n_splits = cv_config.get('n_splits', 5)
    if not isinstance(n_splits, int) or isinstance(n_splits, bool):
        errors.append("cross_validation.n_splits must be an integer")
    elif n_splits < 2:
        errors.append("cross_validation.n_splits must be >= 2")

    n_repeats = cv_config.get('n_repeats', 1)
    if not isinstance(n_repeats, int) or isinstance(n_repeats, bool):
        errors.append("cross_validation.n_repeats must be an integer")
    elif n_repeats < 1:
        errors.append("cross_validation.n_repeats must be >= 1")

    scoring = cv_config.get('scoring', DEFAULT_SCORING)
    if scoring not in get_scorer_names():
        errors.append(f"Unknown scoring metric '{scoring}'")

    n_jobs = cv_config.get('n_jobs', 1)
    if n_jobs is not None and (not isinstance(n_jobs, int) or n_jobs == 0):
        errors.append("cross_validation.n_jobs must be a non-zero integer or null")

    return errors


def _train_fraction_errors(train_fraction):
    if isinstance(train_fraction, bool) or not isinstance(train_fraction, (int, float)):
        return [f"split.train_fraction must be a number, got {train_fraction!r}"]
    if not 0 < train_fraction < 1:
        return [f"split.train_fraction must be in (0, 1), got {train_fraction}"]
    return []


def _models_errors(models):
    if not isinstance(models, dict) or not models:
        return ["models must be a non-empty mapping of model name to definition"]

    errors = []
    for name, definition in models.items():
        if not isinstance(definition, dict):
            errors.append(f"models.{name} must be a mapping")
            continue

        model_type = definition.get('type')
        if model_type not in SUPPORTED_MODELS:
            errors.append(
                f"Invalid model type '{model_type}' for models.{name}. "
                f"Allowed: {sorted(SUPPORTED_MODELS)}"
            )

        if 'param_grid' not in definition:
            errors.append(f"Missing required key: 'models.{name}.param_grid'")
            continue

        errors.extend(f"models.{name}: {e}" for e in _grid_errors(definition['param_grid']))

    return errors


def _grid_errors(param_grid):
    """Check a grid (dict or list of dicts) enumerates at least one candidate."""
    grids = param_grid if isinstance(param_grid, list) else [param_grid]
    if not grids:
        return ["hyperparameter grid is empty"]

    errors = []
    for grid in grids:
        if not isinstance(grid, dict):
            errors.append(f"hyperparameter grid must be a mapping, got {type(grid).__name__}")
            continue
        if not grid:
            errors.append("hyperparameter grid is empty")
            continue
        for param, values in grid.items():
            if not isinstance(values, (list, tuple)):
                errors.append(f"grid values for '{param}' must be a list")
            elif len(values) == 0:
                errors.append(f"grid values for '{param}' are empty")
    return errors
