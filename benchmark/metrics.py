# Confusion-matrix metrics for binary classifiers

import math

import numpy as np
from sklearn.metrics import confusion_matrix, roc_auc_score

from .specs import ConfusionCounts


def confusion_counts(y_true, y_pred, positive_label=1):
    """
    Tabulate TP/TN/FP/FN for one positive label.

    Labels are reduced to positive / not positive before counting, so the
    matrix is always 2x2 even when a class is absent from both arrays.
    """
    actual = np.asarray(y_true) == positive_label
    predicted = np.asarray(y_pred) == positive_label

    if actual.shape != predicted.shape:
        raise ValueError(
            f"y_true and y_pred have different lengths: {actual.shape[0]} vs {predicted.shape[0]}"
        )

    tn, fp, fn, tp = confusion_matrix(actual, predicted, labels=[False, True]).ravel()
    return ConfusionCounts(tp=int(tp), tn=int(tn), fp=int(fp), fn=int(fn))


def _ratio(numerator, denominator):
    if denominator == 0:
        return math.nan
    return numerator / denominator


def accuracy(counts):
    return _ratio(counts.tp + counts.tn, counts.total)


def sensitivity(counts):
    """True-positive rate; NaN when there are no actual positives."""
    return _ratio(counts.tp, counts.tp + counts.fn)


def specificity(counts):
    """True-negative rate; NaN when there are no actual negatives."""
    return _ratio(counts.tn, counts.tn + counts.fp)


def roc_auc(y_true, scores, positive_label=1):
    """Area under the ROC curve, NaN when y_true holds a single class."""
    actual = (np.asarray(y_true) == positive_label).astype(int)
    if len(np.unique(actual)) < 2:
        return math.nan
    return float(roc_auc_score(actual, scores))


def binary_metrics(y_true, y_pred, positive_label=1, scores=None):
    """
    Compute confusion counts and the derived metrics in one call.

    Returns dict with: confusion, accuracy, sensitivity, specificity, roc_auc
    """
    counts = confusion_counts(y_true, y_pred, positive_label)
    return {
        'confusion': counts,
        'accuracy': accuracy(counts),
        'sensitivity': sensitivity(counts),
        'specificity': specificity(counts),
        'roc_auc': roc_auc(y_true, scores, positive_label) if scores is not None else math.nan,
    }
