# Configuration and result containers for the experiment harness

import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Union

import numpy as np
import pandas as pd

from .config_schema import DEFAULT_SCORING, ConfigurationError

ParamGrid = Union[Dict[str, List[Any]], List[Dict[str, List[Any]]]]


@dataclass(frozen=True)
class ModelSpec:
    name: str
    algorithm: str
    param_grid: ParamGrid
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ResamplingConfig:
    n_splits: int = 10
    n_repeats: int = 3
    scoring: str = DEFAULT_SCORING
    n_jobs: Optional[int] = 1


@dataclass
class Split:
    X_train: pd.DataFrame
    X_test: pd.DataFrame
    y_train: pd.Series
    y_test: pd.Series

    @property
    def train_index(self):
        return self.X_train.index

    @property
    def test_index(self):
        return self.X_test.index


@dataclass
class TrainedModel:
    """A pipeline refit on the full training subset with its selected hyperparameters."""
    name: str
    algorithm: str
    best_params: Dict[str, Any]
    best_score: float
    best_score_std: float
    cv_results: List[Dict[str, Any]]
    pipeline: Any

    def predict(self, X):
        return self.pipeline.predict(X)

    def ranking_scores(self, X):
        """Continuous scores for the positive class, for ROC analysis."""
        if hasattr(self.pipeline, 'predict_proba'):
            try:
                return self.pipeline.predict_proba(X)[:, 1]
            except AttributeError:
                # SVC exposes predict_proba only when probability=True
                pass
        return self.pipeline.decision_function(X)


@dataclass(frozen=True)
class ConfusionCounts:
    tp: int
    tn: int
    fp: int
    fn: int

    @property
    def total(self):
        return self.tp + self.tn + self.fp + self.fn

    def as_matrix(self):
        """2x2 matrix with rows = actual (negative, positive), columns = predicted."""
        return np.array([[self.tn, self.fp], [self.fn, self.tp]])


@dataclass
class EvaluationReport:
    model_name: str
    best_params: Optional[Dict[str, Any]] = None
    predictions: Optional[np.ndarray] = None
    confusion: Optional[ConfusionCounts] = None
    accuracy: float = math.nan
    sensitivity: float = math.nan
    specificity: float = math.nan
    roc_auc: float = math.nan
    cv_score: float = math.nan
    cv_score_std: float = math.nan
    scoring: str = DEFAULT_SCORING
    cv_results: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self):
        return self.error is None

    def to_dict(self):
        """JSON-friendly summary (predictions omitted)."""
        summary = {
            'model_name': self.model_name,
            'ok': self.ok,
            'error': str(self.error) if self.error is not None else None,
            'best_params': self.best_params,
            'scoring': self.scoring,
            'cv_score': {'mean': _json_float(self.cv_score), 'std': _json_float(self.cv_score_std)},
            'accuracy': _json_float(self.accuracy),
            'sensitivity': _json_float(self.sensitivity),
            'specificity': _json_float(self.specificity),
            'roc_auc': _json_float(self.roc_auc),
            'confusion_matrix': None,
            'cv_results': [
                {
                    'params': row['params'],
                    'mean': _json_float(row['mean']),
                    'std': _json_float(row['std']),
                    'all': [_json_float(v) for v in row['all']],
                }
                for row in self.cv_results
            ],
        }
        if self.confusion is not None:
            summary['confusion_matrix'] = {
                'tp': self.confusion.tp, 'tn': self.confusion.tn,
                'fp': self.confusion.fp, 'fn': self.confusion.fn,
            }
        return summary


def _json_float(value):
    value = float(value)
    return None if math.isnan(value) else value


def model_specs_from_config(config):
    """Build ModelSpec objects from the 'models' config section, keeping its order."""
    specs = {}
    for name, definition in config['models'].items():
        specs[name] = ModelSpec(
            name=name,
            algorithm=definition['type'],
            param_grid=definition['param_grid'],
            params=definition.get('params', {}) or {},
        )
    return specs


def resampling_from_config(config):
    cv_config = config.get('cross_validation', {})
    return ResamplingConfig(
        n_splits=cv_config.get('n_splits', 10),
        n_repeats=cv_config.get('n_repeats', 3),
        scoring=cv_config.get('scoring', DEFAULT_SCORING),
        n_jobs=cv_config.get('n_jobs', 1),
    )


def coerce_model_specs(model_specs):
    """
    Accept ModelSpec values or (algorithm, grid) pairs keyed by model name.

    The mapping key is the model's name everywhere downstream.
    """
    coerced = {}
    for name, spec in model_specs.items():
        if isinstance(spec, ModelSpec):
            coerced[name] = spec if spec.name == name else replace(spec, name=name)
        elif isinstance(spec, (tuple, list)) and len(spec) == 2:
            algorithm, param_grid = spec
            coerced[name] = ModelSpec(name=name, algorithm=algorithm, param_grid=param_grid)
        else:
            raise ConfigurationError(
                f"Model '{name}': expected a ModelSpec or an (algorithm, param_grid) pair, "
                f"got {spec!r}"
            )
    return coerced
