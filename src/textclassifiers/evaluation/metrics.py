# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2026 muffydu37
from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Any

import numpy as np
from sklearn.metrics import (
    accuracy_score,
    confusion_matrix,
    f1_score,
    log_loss,
    precision_score,
    recall_score,
    roc_auc_score,
)

from ..dataview import DataView
from ..schemas import ColumnKind
from ..training.pipeline import TransformerChain, input_column

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MulticlassMetrics:
    micro_accuracy: float = 0.0
    macro_accuracy: float = 0.0
    log_loss: float = 0.0
    log_loss_reduction: float = 0.0
    per_class_log_loss: dict[Any, float] = field(default_factory=dict)
    confusion_matrix: list[list[int]] = field(default_factory=list)
    rows: int = 0

    def as_dict(self) -> dict[str, float]:
        return {
            "micro_accuracy": self.micro_accuracy,
            "macro_accuracy": self.macro_accuracy,
            "log_loss": self.log_loss,
            "log_loss_reduction": self.log_loss_reduction,
        }


@dataclass(frozen=True)
class BinaryMetrics:
    accuracy: float = 0.0
    auc: float = 0.0
    f1: float = 0.0
    precision: float = 0.0
    recall: float = 0.0
    log_loss: float = 0.0
    log_loss_reduction: float = 0.0
    tn: int = 0
    fp: int = 0
    fn: int = 0
    tp: int = 0
    threshold: float = 0.5

    def as_dict(self) -> dict[str, float]:
        return {key: float(value) for key, value in asdict(self).items()}


def _prior_log_loss(y_true: np.ndarray) -> float:
    """Log-loss of always predicting the class distribution of ``y_true``."""
    _values, counts = np.unique(y_true, return_counts=True)
    priors = counts / counts.sum()
    return float(-(priors * np.log(priors)).sum())


def _reduction(prior: float, value: float) -> float:
    if prior <= 0.0:
        return 0.0
    return (prior - value) / prior


def _safe_auc(y_true: np.ndarray, y_prob: np.ndarray) -> float:
    if len(np.unique(y_true)) < 2:
        return 0.0
    value = float(roc_auc_score(y_true, y_prob))
    if math.isnan(value):
        return 0.0
    return value


def evaluate_multiclass(
    scored: DataView,
    *,
    label_column_name: str = "Label",
    score_column_name: str = "Score",
) -> MulticlassMetrics:
    """Compare class probabilities with key labels of an already transformed view."""
    label = input_column(scored, label_column_name, {ColumnKind.KEY}, "evaluate_multiclass")
    input_column(scored, score_column_name, {ColumnKind.VECTOR}, "evaluate_multiclass")
    y_all = np.asarray(scored.column(label_column_name), dtype=np.int64)
    scores_all = np.asarray(scored.column(score_column_name), dtype=float)
    known = y_all >= 0
    if not known.any():
        logger.warning("No labelled rows to evaluate")
        return MulticlassMetrics()

    y_true = y_all[known]
    scores = scores_all[known]
    classes = list(range(scores.shape[1]))
    y_pred = np.argmax(scores, axis=1)
    present = np.unique(y_true)

    micro = float(accuracy_score(y_true, y_pred))
    macro = float(recall_score(y_true, y_pred, labels=present, average="macro", zero_division=0))
    loss = float(log_loss(y_true, scores, labels=classes))
    names = label.key_values or tuple(classes)
    per_class = {
        names[cls]: float(log_loss(y_true[y_true == cls], scores[y_true == cls], labels=classes)) for cls in present
    }
    return MulticlassMetrics(
        micro_accuracy=micro,
        macro_accuracy=macro,
        log_loss=loss,
        log_loss_reduction=_reduction(_prior_log_loss(y_true), loss),
        per_class_log_loss=per_class,
        confusion_matrix=confusion_matrix(y_true, y_pred, labels=classes).tolist(),
        rows=int(known.sum()),
    )


def evaluate_binary(
    scored: DataView,
    *,
    label_column_name: str = "Label",
    probability_column_name: str = "Probability",
    threshold: float = 0.5,
) -> BinaryMetrics:
    """Score calibrated probabilities against boolean labels with a fixed decision threshold."""
    input_column(scored, label_column_name, {ColumnKind.BOOL}, "evaluate_binary")
    input_column(scored, probability_column_name, {ColumnKind.FLOAT}, "evaluate_binary")
    y_true = np.asarray(scored.column(label_column_name), dtype=bool).astype(int)
    y_prob = np.asarray(scored.column(probability_column_name), dtype=float)
    if len(y_true) == 0:
        logger.warning("No rows to evaluate")
        return BinaryMetrics(threshold=threshold)

    y_pred = (y_prob > threshold).astype(int)
    tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=[0, 1]).ravel()
    loss = float(log_loss(y_true, y_prob, labels=[0, 1]))
    return BinaryMetrics(
        accuracy=float(accuracy_score(y_true, y_pred)),
        auc=_safe_auc(y_true, y_prob),
        f1=float(f1_score(y_true, y_pred, zero_division=0)),
        precision=float(precision_score(y_true, y_pred, zero_division=0)),
        recall=float(recall_score(y_true, y_pred, zero_division=0)),
        log_loss=loss,
        log_loss_reduction=_reduction(_prior_log_loss(y_true), loss),
        tn=int(tn),
        fp=int(fp),
        fn=int(fn),
        tp=int(tp),
        threshold=float(threshold),
    )


def evaluate(model: TransformerChain, test_view: DataView) -> MulticlassMetrics | BinaryMetrics:
    """Transform ``test_view`` with ``model`` and compute the metrics of its classifier."""
    classifier = model.classifier
    if classifier is None:
        raise ValueError("The model has no classifier step to evaluate")
    scored = model.transform(test_view)
    if classifier.task == "multiclass":
        return evaluate_multiclass(scored, label_column_name=classifier.label_column_name)
    return evaluate_binary(scored, label_column_name=classifier.label_column_name)
