# Reporting Module
# Text classification reports and model comparison tables

import math

import pandas as pd
from typing import Dict


def _fmt(value: float) -> str:
    return 'NaN' if value is None or math.isnan(value) else f"{value:.4f}"


def format_classification_report(report) -> str:
    """
    Render one EvaluationReport as a plain-text block.

    Failed reports render their error instead of metrics.
    """
    lines = [f"Model: {report.model_name}", "-" * 50]

    if not report.ok:
        lines.append(f"ERROR: {report.error}")
        return "\n".join(lines)

    c = report.confusion
    lines.extend([
        f"Best params: {report.best_params}",
        f"CV {report.scoring}: {_fmt(report.cv_score)} ± {_fmt(report.cv_score_std)}",
        "",
        "Confusion matrix (rows = actual, cols = predicted):",
        f"{'':>12}{'negative':>10}{'positive':>10}",
        f"{'negative':>12}{c.tn:>10}{c.fp:>10}",
        f"{'positive':>12}{c.fn:>10}{c.tp:>10}",
        "",
        f"Accuracy:    {_fmt(report.accuracy)}",
        f"Sensitivity: {_fmt(report.sensitivity)}",
        f"Specificity: {_fmt(report.specificity)}",
        f"ROC AUC:     {_fmt(report.roc_auc)}",
    ])
    return "\n".join(lines)


def model_comparison_frame(reports: Dict[str, object]) -> pd.DataFrame:
    """One row per model with CV and test-set metrics; failed models keep their error."""
    rows = []
    for name, report in reports.items():
        rows.append({
            'Model': name,
            'CV score': report.cv_score,
            'CV std': report.cv_score_std,
            'Accuracy': report.accuracy,
            'Sensitivity': report.sensitivity,
            'Specificity': report.specificity,
            'ROC AUC': report.roc_auc,
            'Error': '' if report.ok else str(report.error),
        })
    return pd.DataFrame(rows)


def generate_model_comparison_table(
    reports: Dict[str, object],
    format_type: str = 'markdown'
) -> str:
    """
    Generate model comparison table.

    Args:
        reports: Dict mapping model name to EvaluationReport
        format_type: 'markdown', 'latex', or 'html'

    Returns:
        Formatted table string
    """
    df = model_comparison_frame(reports)

    if format_type == 'markdown':
        return _format_markdown_table(df)
    elif format_type == 'latex':
        return _format_latex_table(df)
    elif format_type == 'html':
        return df.to_html(index=False, float_format=_fmt, na_rep="NaN")
    else:
        raise ValueError(f"Unknown format_type: '{format_type}'")


def _format_markdown_table(df: pd.DataFrame) -> str:
    """Format DataFrame as Markdown table."""
    header = "| " + " | ".join(df.columns) + " |"
    separator = "| " + " | ".join(["---"] * len(df.columns)) + " |"

    body = []
    for _, row in df.iterrows():
        cells = [_fmt(v) if isinstance(v, float) else str(v) for v in row.values]
        body.append("| " + " | ".join(cells) + " |")

    return "\n".join([header, separator] + body)


def _format_latex_table(df: pd.DataFrame, highlight: str = 'ROC AUC') -> str:
    """Format DataFrame as LaTeX table, bolding the best value of one column."""
    best_idx = df[highlight].idxmax() if df[highlight].notna().any() else None

    lines = []
    lines.append('\\begin{table}[htbp]')
    lines.append('\\centering')
    lines.append('\\caption{Model Comparison}')
    lines.append('\\label{tab:model_comparison}')

    col_format = 'l' + 'c' * (len(df.columns) - 1)
    lines.append(f'\\begin{{tabular}}{{{col_format}}}')
    lines.append('\\toprule')

    header = ' & '.join([f'\\textbf{{{col}}}' for col in df.columns])
    lines.append(header + ' \\\\')
    lines.append('\\midrule')

    for idx, row in df.iterrows():
        row_vals = []
        for col, val in row.items():
            cell = _fmt(val) if isinstance(val, float) else str(val).replace('_', '\\_')
            if col == highlight and idx == best_idx:
                cell = f'\\textbf{{{cell}}}'
            row_vals.append(cell)
        lines.append(' & '.join(row_vals) + ' \\\\')

    lines.append('\\bottomrule')
    lines.append('\\end{tabular}')
    lines.append('\\end{table}')

    return '\n'.join(lines)
