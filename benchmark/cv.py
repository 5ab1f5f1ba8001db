# Cross-validation utilities
# Repeated stratified K-fold grid search over one model's hyperparameter grid

import numpy as np
from joblib import Parallel, delayed
from sklearn.base import clone
from sklearn.metrics import get_scorer
from sklearn.model_selection import ParameterGrid, RepeatedStratifiedKFold

from .models import pipeline_params


def _validate_cv_split(train_idx, val_idx, X, y):
    """
    Validate CV split integrity.

    Assertions:
    - Train/val indices are disjoint
    - No NaN/infinite values in split data
    - Both classes present in the training fold
    """
    train_set = set(train_idx)
    val_set = set(val_idx)
    if not train_set.isdisjoint(val_set):
        overlap = train_set.intersection(val_set)
        raise ValueError(f"CV LEAK: Train/val indices overlap! {len(overlap)} shared indices")

    X_train = X.iloc[train_idx]
    X_val = X.iloc[val_idx]

    if X_train.isnull().any().any():
        raise ValueError("CV split contains NaN in X_train")
    if X_val.isnull().any().any():
        raise ValueError("CV split contains NaN in X_val")

    numeric_train = X_train.select_dtypes(include=[np.number])
    numeric_val = X_val.select_dtypes(include=[np.number])

    if not np.isfinite(numeric_train.values).all():
        raise ValueError("CV split contains infinite values in X_train")
    if not np.isfinite(numeric_val.values).all():
        raise ValueError("CV split contains infinite values in X_val")

    if y.iloc[train_idx].nunique() < 2:
        raise ValueError("CV split has a single class in y_train")

    return True


def _fit_and_score(pipeline, params, X, y, train_idx, val_idx, scorer):
    model = clone(pipeline).set_params(**pipeline_params(params))
    model.fit(X.iloc[train_idx], y.iloc[train_idx])
    return scorer(model, X.iloc[val_idx], y.iloc[val_idx])


def grid_search_cv(pipeline, X, y, param_grid, resampling, seed):
    """
    Score every grid candidate with repeated stratified K-fold CV.

    Every candidate is evaluated on the same folds. The best candidate is the
    one with the highest mean score; ties keep the earliest candidate in
    ParameterGrid order.

    Args:
        pipeline: unfitted scaler + model pipeline (cloned per fold)
        X: training features (DataFrame)
        y: binary training target (Series, 1 = positive)
        param_grid: dict or list of dicts of candidate values
        resampling: ResamplingConfig
        seed: random_state for the fold generator

    Returns dict with:
        candidates: list of {params, mean, std, all}
        best_index, best_params, best_score, best_score_std
    """
    cv = RepeatedStratifiedKFold(
        n_splits=resampling.n_splits,
        n_repeats=resampling.n_repeats,
        random_state=seed,
    )
    folds = list(cv.split(X, y))
    for train_idx, val_idx in folds:
        _validate_cv_split(train_idx, val_idx, X, y)

    scorer = get_scorer(resampling.scoring)
    grid = list(ParameterGrid(param_grid))

    print(f"  {len(grid)} candidate(s) x {resampling.n_splits}-fold x {resampling.n_repeats} repeats "
          f"(scoring={resampling.scoring})")

    candidates = []
    best_index = 0
    for idx, params in enumerate(grid):
        if resampling.n_jobs == 1:
            scores = [
                _fit_and_score(pipeline, params, X, y, train_idx, val_idx, scorer)
                for train_idx, val_idx in folds
            ]
        else:
            scores = Parallel(n_jobs=resampling.n_jobs)(
                delayed(_fit_and_score)(pipeline, params, X, y, train_idx, val_idx, scorer)
                for train_idx, val_idx in folds
            )

        scores = [float(s) for s in scores]
        candidates.append({
            'params': dict(params),
            'mean': float(np.mean(scores)),
            'std': float(np.std(scores)),
            'all': scores,
        })

        # Strict comparison keeps the first candidate on ties; NaN never wins
        current = candidates[idx]['mean']
        best = candidates[best_index]['mean']
        if not np.isnan(current) and (np.isnan(best) or current > best):
            best_index = idx

    best = candidates[best_index]
    return {
        'candidates': candidates,
        'best_index': best_index,
        'best_params': best['params'],
        'best_score': best['mean'],
        'best_score_std': best['std'],
    }
