# Benchmark package
# Multi-model training/evaluation harness for binary diagnosis prediction

from .config_schema import validate_config, ConfigurationError
from .io import load_config, save_results, create_run_dir, save_data_profile
from .data import (
    DataError,
    load_dataset,
    preprocess_data,
    validate_data_integrity,
    validate_binary_target,
    stratified_split,
)
from .models import build_model, build_pipeline, SUPPORTED_MODELS
from .cv import grid_search_cv
from .metrics import confusion_counts, binary_metrics
from .specs import (
    ModelSpec,
    ResamplingConfig,
    Split,
    TrainedModel,
    ConfusionCounts,
    EvaluationReport,
    model_specs_from_config,
    resampling_from_config,
)
from .harness import run, train_model, evaluate_model, FitError

__all__ = [
    'validate_config',
    'ConfigurationError',
    'load_config',
    'save_results',
    'create_run_dir',
    'save_data_profile',
    'DataError',
    'load_dataset',
    'preprocess_data',
    'validate_data_integrity',
    'validate_binary_target',
    'stratified_split',
    'build_model',
    'build_pipeline',
    'SUPPORTED_MODELS',
    'grid_search_cv',
    'confusion_counts',
    'binary_metrics',
    'ModelSpec',
    'ResamplingConfig',
    'Split',
    'TrainedModel',
    'ConfusionCounts',
    'EvaluationReport',
    'model_specs_from_config',
    'resampling_from_config',
    'run',
    'train_model',
    'evaluate_model',
    'FitError',
]
