# Plotting Module
# Hyperparameter curves, confusion matrices and EDA figures

import os

import numpy as np
import pandas as pd
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import seaborn as sns
from typing import Dict, Optional, Tuple

sns.set_theme(style="whitegrid")


def _save(fig: plt.Figure, save_path: Optional[str]) -> None:
    if save_path:
        os.makedirs(os.path.dirname(save_path) or '.', exist_ok=True)
        fig.savefig(save_path, dpi=150, bbox_inches='tight')


def score_by_param(cv_results, param: str) -> pd.DataFrame:
    """
    Mean CV score per value of one hyperparameter.

    Candidates sharing a value are averaged over the other grid dimensions;
    the std column is the mean of their fold-level stds.
    """
    rows = [
        {'value': row['params'][param], 'mean': row['mean'], 'std': row['std']}
        for row in cv_results
        if param in row['params']
    ]
    if not rows:
        raise ValueError(f"Hyperparameter '{param}' not found in CV results")

    df = pd.DataFrame(rows)
    # Keep grid order rather than sorting mixed-type values
    df['value'] = df['value'].astype(str)
    order = list(dict.fromkeys(df['value']))
    return df.groupby('value', sort=False)[['mean', 'std']].mean().loc[order].reset_index()


def plot_score_vs_param(
    report,
    param: str,
    title: Optional[str] = None,
    figsize: Tuple[int, int] = (8, 5),
    save_path: Optional[str] = None
) -> plt.Figure:
    """Plot the CV scoring metric against one hyperparameter of a model."""
    table = score_by_param(report.cv_results, param)

    fig, ax = plt.subplots(figsize=figsize)
    x = np.arange(len(table))
    ax.errorbar(x, table['mean'], yerr=table['std'], marker='o', capsize=4,
                color='#2E86AB', linewidth=2)
    ax.set_xticks(x)
    ax.set_xticklabels(table['value'])
    ax.set_xlabel(param)
    ax.set_ylabel(f"CV {report.scoring}")
    ax.set_title(title or f"{report.model_name}: {report.scoring} vs {param}")
    ax.grid(alpha=0.3)

    if report.best_params and param in report.best_params:
        best = str(report.best_params[param])
        if best in list(table['value']):
            ax.axvline(list(table['value']).index(best), color='red', linestyle='--',
                       alpha=0.6, label=f"selected: {best}")
            ax.legend()

    plt.tight_layout()
    _save(fig, save_path)
    return fig


def plot_confusion_matrix(
    report,
    labels: Tuple[str, str] = ('negative', 'positive'),
    figsize: Tuple[int, int] = (5, 4),
    save_path: Optional[str] = None
) -> plt.Figure:
    """Heatmap of the test-set confusion matrix of one report."""
    if report.confusion is None:
        raise ValueError(f"Report for '{report.model_name}' has no confusion matrix")

    fig, ax = plt.subplots(figsize=figsize)
    sns.heatmap(report.confusion.as_matrix(), annot=True, fmt='d', cmap='Blues',
                xticklabels=labels, yticklabels=labels, cbar=False, ax=ax)
    ax.set_xlabel('Predicted')
    ax.set_ylabel('Actual')
    ax.set_title(f"{report.model_name} - Confusion Matrix")

    plt.tight_layout()
    _save(fig, save_path)
    return fig


def plot_model_comparison(
    reports: Dict[str, object],
    metrics: Tuple[str, ...] = ('accuracy', 'sensitivity', 'specificity', 'roc_auc'),
    figsize: Tuple[int, int] = (10, 5),
    save_path: Optional[str] = None
) -> plt.Figure:
    """Grouped bar chart of test-set metrics for every successful model."""
    rows = []
    for name, report in reports.items():
        if not report.ok:
            continue
        for metric in metrics:
            rows.append({'model': name, 'metric': metric, 'value': getattr(report, metric)})

    fig, ax = plt.subplots(figsize=figsize)
    if rows:
        sns.barplot(data=pd.DataFrame(rows), x='model', y='value', hue='metric', ax=ax)
    ax.set_ylim(0, 1)
    ax.set_xlabel('')
    ax.set_ylabel('Score')
    ax.set_title('Test-set Metrics by Model')

    plt.tight_layout()
    _save(fig, save_path)
    return fig


def plot_correlation_matrix(
    df: pd.DataFrame,
    method: str = 'spearman',
    save_path: Optional[str] = None
) -> plt.Figure:
    """Lower-triangle correlation heatmap of the numeric columns."""
    numeric = df.select_dtypes(include=[np.number])
    corr = numeric.corr(method=method)

    size = max(8, len(corr.columns) * 0.45)
    fig, ax = plt.subplots(figsize=(size, size * 0.85))
    mask = np.triu(np.ones_like(corr, dtype=bool))
    sns.heatmap(corr, mask=mask, annot=len(corr.columns) <= 15, fmt='.2f',
                cmap='RdBu_r', center=0, ax=ax, cbar_kws={'shrink': 0.8},
                annot_kws={'size': 8})
    ax.set_title(f'Feature Correlation Matrix ({method})', fontsize=14)
    plt.xticks(rotation=45, ha='right', fontsize=8)
    plt.yticks(fontsize=8)

    plt.tight_layout()
    _save(fig, save_path)
    return fig


def plot_class_balance(
    balance: pd.DataFrame,
    target_column: str,
    figsize: Tuple[int, int] = (6, 4),
    save_path: Optional[str] = None
) -> plt.Figure:
    """Bar chart of the class_balance() table with percentage labels."""
    fig, ax = plt.subplots(figsize=figsize)
    bars = ax.bar(balance['class'].astype(str), balance['count'],
                  color=['#2E86AB', '#C73E1D'][:len(balance)], alpha=0.8, edgecolor='black')
    for bar, prop in zip(bars, balance['proportion']):
        ax.text(bar.get_x() + bar.get_width() / 2, bar.get_height(),
                f'{prop * 100:.1f}%', ha='center', va='bottom', fontsize=10)
    ax.set_xlabel(target_column)
    ax.set_ylabel('Count')
    ax.set_title(f'{target_column} Class Balance')

    plt.tight_layout()
    _save(fig, save_path)
    return fig
