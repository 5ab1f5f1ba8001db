# Data loading and preprocessing utilities

import os

import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split

from .specs import Split


class DataError(ValueError):
    """Raised when the dataset is malformed or cannot support a binary benchmark."""
    pass


def load_dataset(config, dataset_path=None):
    """Load the dataset CSV from an explicit path or the config."""
    path = dataset_path or config['data'].get('dataset_path')

    if path is None:
        raise DataError("No dataset path given (pass --dataset or set data.dataset_path)")
    if not os.path.exists(path):
        raise DataError(f"Dataset file not found: {path}")

    print(f"Loading dataset: {path}")
    df = pd.read_csv(path, sep=config['data'].get('separator', ','))

    return df, path


def preprocess_data(df, config):
    """
    Preprocess dataset: drop identifier columns, extract features and target.

    Returns:
        X: DataFrame of numeric features (categoricals one-hot encoded)
        y: Series of target values
    """
    target = config['data']['target_column']

    # Drop identifier and administrative columns
    cols_to_drop = config['preprocessing'].get('columns_to_drop', []) or []
    dropped = [c for c in cols_to_drop if c in df.columns]
    df = df.drop(columns=dropped)

    if target in cols_to_drop:
        raise DataError(f"Target column '{target}' is listed in preprocessing.columns_to_drop")

    if target not in df.columns:
        raise DataError(f"Target column '{target}' not found in dataset. Available: {list(df.columns)}")

    if dropped:
        print(f"DROPPED columns (not used in training): {dropped}")

    feature_cols = [c for c in df.columns if c != target]
    X = encode_features(df[feature_cols])
    y = df[target].copy()

    return X, y


def encode_features(X):
    """One-hot encode non-numeric columns and cast booleans to 0/1."""
    X = X.copy()

    bool_cols = X.select_dtypes(include=['bool']).columns
    X[bool_cols] = X[bool_cols].astype(int)

    categorical = X.select_dtypes(exclude=[np.number]).columns.tolist()
    if categorical:
        print(f"ENCODED categorical columns: {categorical}")
        X = pd.get_dummies(X, columns=categorical, drop_first=True, dtype=int)

    return X


def validate_data_integrity(X, y):
    """
    Validate data integrity before training.

    Checks:
    - Features and target are aligned
    - No NaN/infinite values
    """
    errors = []

    if len(X) != len(y):
        errors.append(f"Feature rows ({len(X)}) and target rows ({len(y)}) differ")

    nan_cols = X.columns[X.isnull().any()].tolist()
    if nan_cols:
        errors.append(f"NaN values found in features: {nan_cols}")

    if y.isnull().any():
        errors.append(f"NaN values found in target ({y.name}): {y.isnull().sum()} missing")

    numeric_cols = X.select_dtypes(include=[np.number]).columns
    for col in numeric_cols:
        if not np.isfinite(X[col].dropna().to_numpy(dtype=float)).all():
            errors.append(f"Infinite values found in feature: {col}")

    non_numeric = X.select_dtypes(exclude=[np.number]).columns.tolist()
    if non_numeric:
        errors.append(f"Non-numeric features remain after encoding: {non_numeric}")

    if errors:
        raise DataError("Data integrity check failed:\n  - " + "\n  - ".join(errors))

    return True


def validate_binary_target(y):
    """Require exactly two distinct target values."""
    classes = pd.unique(y.dropna())
    if len(classes) != 2:
        raise DataError(
            f"Target '{y.name}' must have exactly two classes, found {len(classes)}: {sorted(classes.tolist())}"
        )
    return True


def resolve_positive_label(y, positive_label=None):
    """
    Pick the label treated as the positive (diagnosed) class.

    Defaults to the larger of the two sorted class values, i.e. 1 for 0/1
    targets and True for boolean targets.
    """
    classes = sorted(pd.unique(y.dropna()).tolist())
    if positive_label is None:
        return classes[-1]
    if positive_label not in classes:
        raise DataError(
            f"positive_label {positive_label!r} is not a value of target '{y.name}': {classes}"
        )
    return positive_label


def class_counts(y):
    return y.value_counts().sort_index()


def stratified_split(X, y, train_fraction, seed):
    """
    Split into train/test preserving class proportions.

    Raises DataError when either subset would miss a class.
    """
    counts = class_counts(y)
    n_total = len(y)
    n_train = int(np.floor(train_fraction * n_total))
    n_test = n_total - n_train

    if (counts < 2).any():
        raise DataError(
            f"Cannot stratify: every class needs at least 2 rows, got {counts.to_dict()}"
        )
    if n_train < len(counts) or n_test < len(counts):
        raise DataError(
            f"Cannot stratify {n_total} rows with train_fraction={train_fraction}: "
            f"{n_train} train / {n_test} test rows for {len(counts)} classes"
        )

    try:
        X_train, X_test, y_train, y_test = train_test_split(
            X, y,
            train_size=train_fraction,
            random_state=seed,
            stratify=y,
        )
    except ValueError as e:
        raise DataError(f"Stratified split failed: {e}") from e

    for name, subset in (('train', y_train), ('test', y_test)):
        missing = set(counts.index) - set(pd.unique(subset))
        if missing:
            raise DataError(f"Stratified split left no {sorted(missing)} rows in the {name} subset")

    print(f"Split: {len(X_train)} train / {len(X_test)} test (stratified on '{y.name}', seed={seed})")

    return Split(X_train=X_train, X_test=X_test, y_train=y_train, y_test=y_test)
