# Experiment harness
# Trains every model spec on a shared stratified split and resampling config,
# and evaluates each refit model on the held-out test subset.

import pandas as pd

from .config_schema import validate_model_specs, validate_resampling
from .cv import grid_search_cv
from .data import (
    DataError,
    class_counts,
    encode_features,
    resolve_positive_label,
    stratified_split,
    validate_binary_target,
    validate_data_integrity,
)
from .metrics import binary_metrics
from .models import build_pipeline, pipeline_params
from .specs import EvaluationReport, TrainedModel, coerce_model_specs


class FitError(RuntimeError):
    """Raised when fitting or predicting one model fails."""

    def __init__(self, model_name, message):
        super().__init__(f"Model '{model_name}' failed: {message}")
        self.model_name = model_name


def train_model(spec, X_train, y_train, resampling, seed):
    """
    Select hyperparameters for one spec by repeated CV, then refit on all of X_train.

    y_train must already be binary (1 = positive class).
    """
    pipeline = build_pipeline(spec.algorithm, seed, spec.params)
    search = grid_search_cv(pipeline, X_train, y_train, spec.param_grid, resampling, seed)

    final = pipeline.set_params(**pipeline_params(search['best_params']))
    final.fit(X_train, y_train)

    return TrainedModel(
        name=spec.name,
        algorithm=spec.algorithm,
        best_params=search['best_params'],
        best_score=search['best_score'],
        best_score_std=search['best_score_std'],
        cv_results=search['candidates'],
        pipeline=final,
    )


def evaluate_model(trained, X_test, y_test, positive_label, negative_label, scoring):
    """Predict the test subset and build the EvaluationReport for one trained model."""
    predicted = trained.predict(X_test)
    scores = trained.ranking_scores(X_test)

    # Map 1/0 predictions back into the dataset's label space
    predictions = pd.Series(predicted, index=X_test.index).map({1: positive_label, 0: negative_label})

    metrics = binary_metrics(y_test, predictions.to_numpy(), positive_label, scores=scores)

    return EvaluationReport(
        model_name=trained.name,
        best_params=trained.best_params,
        predictions=predictions.to_numpy(),
        confusion=metrics['confusion'],
        accuracy=metrics['accuracy'],
        sensitivity=metrics['sensitivity'],
        specificity=metrics['specificity'],
        roc_auc=metrics['roc_auc'],
        cv_score=trained.best_score,
        cv_score_std=trained.best_score_std,
        scoring=scoring,
        cv_results=trained.cv_results,
    )


def _check_fold_feasibility(y_train, n_splits):
    counts = class_counts(y_train)
    if (counts < n_splits).any():
        raise DataError(
            f"Training subset has a class with fewer than n_splits={n_splits} rows: {counts.to_dict()}"
        )


def run(dataset, target_column, model_specs, resampling_config, train_fraction=0.8, seed=42,
        positive_label=None, return_models=False):
    """
    Benchmark every model spec on one stratified train/test split.

    Args:
        dataset: DataFrame of features plus target_column; boolean and
            categorical columns are encoded before the integrity checks
        target_column: name of the binary label column
        model_specs: mapping name -> ModelSpec or (algorithm, param_grid)
        resampling_config: ResamplingConfig for hyperparameter selection
        train_fraction: share of rows used for training, in (0, 1)
        seed: drives the split, the CV folds and every estimator
        positive_label: label of the diagnosed class (default: larger class value)
        return_models: also return the TrainedModel per successful spec

    Returns:
        dict model name -> EvaluationReport (in spec order). A model whose fit
        failed has report.error set to a FitError and no metrics.
        With return_models=True, a (reports, trained_models) tuple.
    """
    specs = coerce_model_specs(model_specs or {})
    validate_model_specs(specs)
    validate_resampling(resampling_config, train_fraction)

    if target_column not in dataset.columns:
        raise DataError(f"Target column '{target_column}' not found in dataset")

    X = encode_features(dataset.drop(columns=[target_column]))
    y = dataset[target_column]
    validate_data_integrity(X, y)
    validate_binary_target(y)

    positive_label = resolve_positive_label(y, positive_label)
    negative_label = next(c for c in pd.unique(y) if c != positive_label)

    split = stratified_split(X, y, train_fraction, seed)
    _check_fold_feasibility(split.y_train, resampling_config.n_splits)

    y_train_binary = (split.y_train == positive_label).astype(int)

    reports = {}
    trained_models = {}
    for name, spec in specs.items():
        print(f"\nModel: {name} ({spec.algorithm})")
        try:
            trained = train_model(spec, split.X_train, y_train_binary, resampling_config, seed)
            report = evaluate_model(
                trained, split.X_test, split.y_test,
                positive_label, negative_label, resampling_config.scoring,
            )
        except Exception as e:
            error = FitError(name, f"{type(e).__name__}: {e}")
            error.__cause__ = e
            print(f"  FIT ERROR: {error}")
            reports[name] = EvaluationReport(
                model_name=name, scoring=resampling_config.scoring, error=error,
            )
            continue

        print(f"  Best params: {trained.best_params} "
              f"(CV {resampling_config.scoring}={trained.best_score:.4f} ± {trained.best_score_std:.4f})")
        print(f"  Test: accuracy={report.accuracy:.4f}, sensitivity={report.sensitivity:.4f}, "
              f"specificity={report.specificity:.4f}, roc_auc={report.roc_auc:.4f}")

        reports[name] = report
        trained_models[name] = trained

    if return_models:
        return reports, trained_models
    return reports
