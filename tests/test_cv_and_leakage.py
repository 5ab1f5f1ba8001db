import numpy as np
import pytest
from sklearn.model_selection import RepeatedStratifiedKFold

from benchmark.cv import grid_search_cv, _validate_cv_split
from benchmark.models import build_pipeline, SCALER_STEP
from benchmark.specs import ResamplingConfig


def _xy(model_df):
    X = model_df.drop(columns=["Diagnosis"])
    y = model_df["Diagnosis"]
    return X, y


def test_grid_search_returns_every_candidate(model_df, resampling, seed):
    X, y = _xy(model_df)
    pipeline = build_pipeline("decision_tree", seed)
    grid = {"max_depth": [1, 2, 3], "min_samples_leaf": [1, 5]}

    res = grid_search_cv(pipeline, X, y, grid, resampling, seed)

    assert len(res["candidates"]) == 6
    expected_folds = resampling.n_splits * resampling.n_repeats
    for row in res["candidates"]:
        assert len(row["all"]) == expected_folds
        assert row["mean"] == pytest.approx(np.mean(row["all"]))
        assert 0.0 <= row["mean"] <= 1.0

    best = max(row["mean"] for row in res["candidates"])
    assert res["best_score"] == best
    assert res["best_params"] == res["candidates"][res["best_index"]]["params"]


def test_grid_search_tie_keeps_first_candidate(model_df, resampling, seed):
    X, y = _xy(model_df)
    pipeline = build_pipeline("decision_tree", seed)
    # Both depths grow the same full tree, so every fold scores identically
    grid = {"max_depth": [None, 1000]}

    res = grid_search_cv(pipeline, X, y, grid, resampling, seed)

    assert res["candidates"][0]["all"] == res["candidates"][1]["all"]
    assert res["best_index"] == 0
    assert res["best_params"] == {"max_depth": None}


def test_grid_search_accepts_list_of_grids(model_df, resampling, seed):
    X, y = _xy(model_df)
    pipeline = build_pipeline("svm", seed)
    grid = [{"kernel": ["linear"], "C": [0.5]}, {"kernel": ["rbf"], "C": [0.5, 1.0]}]

    res = grid_search_cv(pipeline, X, y, grid, resampling, seed)
    assert len(res["candidates"]) == 3


def test_grid_search_is_deterministic(model_df, resampling, seed):
    X, y = _xy(model_df)
    grid = {"n_estimators": [10], "max_features": [2, 4]}

    a = grid_search_cv(build_pipeline("random_forest", seed), X, y, grid, resampling, seed)
    b = grid_search_cv(build_pipeline("random_forest", seed), X, y, grid, resampling, seed)

    assert a["best_params"] == b["best_params"]
    assert [r["all"] for r in a["candidates"]] == [r["all"] for r in b["candidates"]]


def test_parallel_folds_match_sequential(model_df, seed):
    X, y = _xy(model_df)
    grid = {"n_neighbors": [3, 9]}
    sequential = ResamplingConfig(n_splits=3, n_repeats=1, n_jobs=1)
    parallel = ResamplingConfig(n_splits=3, n_repeats=1, n_jobs=2)

    a = grid_search_cv(build_pipeline("knn", seed), X, y, grid, sequential, seed)
    b = grid_search_cv(build_pipeline("knn", seed), X, y, grid, parallel, seed)

    assert [r["all"] for r in a["candidates"]] == [r["all"] for r in b["candidates"]]


def test_grid_search_leaves_input_pipeline_unfitted(model_df, resampling, seed):
    X, y = _xy(model_df)
    pipeline = build_pipeline("knn", seed)
    grid_search_cv(pipeline, X, y, {"n_neighbors": [5]}, resampling, seed)

    assert not hasattr(pipeline.named_steps[SCALER_STEP], "mean_")


def test_cv_split_indices_disjoint(model_df, seed):
    X, y = _xy(model_df)
    cv = RepeatedStratifiedKFold(n_splits=3, n_repeats=2, random_state=seed)

    for train_idx, val_idx in cv.split(X, y):
        assert set(train_idx).isdisjoint(set(val_idx))
        assert _validate_cv_split(train_idx, val_idx, X, y)


def test_validate_cv_split_detects_overlap(model_df):
    X, y = _xy(model_df)
    with pytest.raises(ValueError, match="CV LEAK"):
        _validate_cv_split(np.arange(0, 60), np.arange(50, 70), X, y)


def test_validate_cv_split_detects_nan(model_df):
    X, y = _xy(model_df)
    X = X.copy()
    X.loc[X.index[2], "BMI"] = np.nan
    with pytest.raises(ValueError, match="NaN in X_train"):
        _validate_cv_split(np.arange(0, 60), np.arange(60, 120), X, y)


def test_scaler_is_fit_on_training_rows_only(model_df, seed):
    """Scaling statistics of a fitted pipeline come from the rows it was fit on."""
    X, y = _xy(model_df)
    train = X.iloc[:80]
    pipeline = build_pipeline("knn", seed).fit(train, y.iloc[:80])

    scaler = pipeline.named_steps[SCALER_STEP]
    np.testing.assert_allclose(scaler.mean_, train.mean().to_numpy())
    assert not np.allclose(scaler.mean_, X.mean().to_numpy())
