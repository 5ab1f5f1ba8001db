# Exploratory Analysis Module
# Distribution checks, target correlations and outlier detection for the
# clinical features, all delegated to scipy.stats / pandas

import numpy as np
import pandas as pd
from typing import List, Optional
from scipy import stats


def continuous_columns(
    df: pd.DataFrame,
    max_categories: int = 10,
    exclude: Optional[List[str]] = None
) -> List[str]:
    """
    Numeric columns with more than max_categories distinct values.

    Binary flags and small ordinal codes are treated as categorical.
    """
    exclude = set(exclude or [])
    numeric_cols = df.select_dtypes(include=[np.number]).columns
    return [
        c for c in numeric_cols
        if c not in exclude and df[c].nunique() > max_categories
    ]


def class_balance(y: pd.Series) -> pd.DataFrame:
    """
    Count and proportion of each target class.

    Proportion is count / total over the whole column.
    """
    counts = y.value_counts().sort_index()
    return pd.DataFrame({
        'class': counts.index,
        'count': counts.values,
        'proportion': counts.values / counts.sum(),
    })


def normality_tests(
    df: pd.DataFrame,
    columns: Optional[List[str]] = None,
    alpha: float = 0.05,
    max_samples: int = 5000
) -> pd.DataFrame:
    """
    Shapiro-Wilk test per continuous column.

    Args:
        df: Feature DataFrame
        columns: Columns to test (default: continuous_columns(df))
        alpha: Significance level for the 'normal' flag
        max_samples: Columns longer than this are subsampled (fixed random_state)

    Returns:
        DataFrame with feature, statistic, p_value, normal
    """
    if columns is None:
        columns = continuous_columns(df)

    rows = []
    for col in columns:
        values = df[col].dropna()
        if len(values) < 3:
            continue
        if len(values) > max_samples:
            values = values.sample(max_samples, random_state=0)

        statistic, p_value = stats.shapiro(values)
        rows.append({
            'feature': col,
            'statistic': float(statistic),
            'p_value': float(p_value),
            'normal': bool(p_value > alpha),
        })

    return pd.DataFrame(rows, columns=['feature', 'statistic', 'p_value', 'normal'])


def target_correlations(
    df: pd.DataFrame,
    target_column: str,
    columns: Optional[List[str]] = None
) -> pd.DataFrame:
    """
    Spearman rank correlation of each numeric feature with the target.

    Returns:
        DataFrame with feature, rho, p_value; sorted by |rho| descending
    """
    if columns is None:
        columns = [c for c in df.select_dtypes(include=[np.number]).columns if c != target_column]

    target = df[target_column]
    rows = []
    for col in columns:
        values = df[col]
        # Constant columns have no defined rank correlation
        if values.nunique() < 2:
            rho, p_value = np.nan, np.nan
        else:
            rho, p_value = stats.spearmanr(values, target)
        rows.append({'feature': col, 'rho': float(rho), 'p_value': float(p_value)})

    result = pd.DataFrame(rows, columns=['feature', 'rho', 'p_value'])
    order = result['rho'].abs().sort_values(ascending=False, na_position='last').index
    return result.loc[order].reset_index(drop=True)


def detect_outliers(
    df: pd.DataFrame,
    columns: Optional[List[str]] = None,
    threshold: float = 3.0
) -> pd.DataFrame:
    """
    Flag values whose z-score magnitude exceeds threshold.

    Returns:
        DataFrame with feature, n_outliers, proportion, min_z, max_z
    """
    if columns is None:
        columns = continuous_columns(df)

    rows = []
    for col in columns:
        values = df[col].dropna().to_numpy(dtype=float)
        if len(values) == 0 or np.std(values) == 0:
            z = np.zeros(len(values))
        else:
            z = stats.zscore(values)
        n_outliers = int((np.abs(z) > threshold).sum())
        rows.append({
            'feature': col,
            'n_outliers': n_outliers,
            'proportion': n_outliers / len(values) if len(values) else 0.0,
            'min_z': float(z.min()) if len(z) else 0.0,
            'max_z': float(z.max()) if len(z) else 0.0,
        })

    return pd.DataFrame(rows, columns=['feature', 'n_outliers', 'proportion', 'min_z', 'max_z'])


def summarize_features(df: pd.DataFrame, columns: Optional[List[str]] = None) -> pd.DataFrame:
    """describe() of the continuous columns, one row per feature."""
    if columns is None:
        columns = continuous_columns(df)
    if not columns:
        return pd.DataFrame()
    return df[columns].describe().T
