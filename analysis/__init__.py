# Analysis Module
# Exploratory statistics, reports and figures around the benchmark harness

from .exploration import (
    continuous_columns,
    class_balance,
    normality_tests,
    target_correlations,
    detect_outliers,
    summarize_features
)

from .reporting import (
    format_classification_report,
    model_comparison_frame,
    generate_model_comparison_table
)

from .plots import (
    score_by_param,
    plot_score_vs_param,
    plot_confusion_matrix,
    plot_model_comparison,
    plot_correlation_matrix,
    plot_class_balance
)

__all__ = [
    'continuous_columns',
    'class_balance',
    'normality_tests',
    'target_correlations',
    'detect_outliers',
    'summarize_features',
    'format_classification_report',
    'model_comparison_frame',
    'generate_model_comparison_table',
    'score_by_param',
    'plot_score_vs_param',
    'plot_confusion_matrix',
    'plot_model_comparison',
    'plot_correlation_matrix',
    'plot_class_balance'
]
