# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2026 muffydu37
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

import numpy as np
from scipy import sparse
from sklearn.linear_model import LogisticRegression

from ..config import TrainingContext
from ..dataview import DataView
from ..errors import SchemaMismatch, TrainingError
from ..schemas import Column, ColumnKind, Schema
from .pipeline import EstimatorChain, EstimatorStep, FittedStep, TransformerChain, input_column, require_column

logger = logging.getLogger(__name__)

SCORE_COLUMN = "Score"
PROBABILITY_COLUMN = "Probability"
PREDICTED_LABEL_COLUMN = "PredictedLabel"


@dataclass(frozen=True)
class TrainerOptions:
    regularization: float = 1.0
    max_iterations: int = 1000
    tolerance: float = 1e-4


def _build_model(options: TrainerOptions, seed: int | None) -> LogisticRegression:
    return LogisticRegression(
        C=options.regularization,
        solver="saga",
        max_iter=options.max_iterations,
        tol=options.tolerance,
        random_state=seed,
    )


def _features(view: DataView, name: str, step: str) -> sparse.csr_matrix:
    input_column(view, name, {ColumnKind.VECTOR}, step)
    return sparse.csr_matrix(view.column(name))


def _fit_model(model: LogisticRegression, x: Any, y: np.ndarray, step: str) -> LogisticRegression:
    if len(np.unique(y)) < 2:
        raise TrainingError(f"{step}: training labels hold a single class")
    started = time.perf_counter()
    try:
        model.fit(x, y)
    except ValueError as exc:
        raise TrainingError(f"{step}: {exc}") from exc
    logger.info("%s fitted on %d rows x %d features in %.2fs", step, x.shape[0], x.shape[1], time.perf_counter() - started)
    return model


class _LogisticTrainer(EstimatorStep):
    is_trainer = True
    name = "Trainer"

    def __init__(
        self,
        context: TrainingContext,
        label_column_name: str = "Label",
        feature_column_name: str = "Features",
        options: TrainerOptions | None = None,
    ) -> None:
        self.context = context
        self.label_column_name = label_column_name
        self.feature_column_name = feature_column_name
        self.options = options or TrainerOptions()

    def __repr__(self) -> str:
        return f"{self.name}(label={self.label_column_name!r}, features={self.feature_column_name!r})"


class MaximumEntropyTrainer(_LogisticTrainer):
    """Multiclass logistic regression over a key label column."""

    name = "MaximumEntropyTrainer"

    def output_columns(self, schema: Schema) -> list[Column]:
        label = require_column(schema, self.label_column_name, {ColumnKind.KEY}, self.name)
        require_column(schema, self.feature_column_name, {ColumnKind.VECTOR}, self.name)
        return [
            Column(SCORE_COLUMN, ColumnKind.VECTOR),
            Column(PREDICTED_LABEL_COLUMN, ColumnKind.KEY, value_kind=label.value_kind),
        ]

    def fit(self, view: DataView) -> "FittedMulticlassClassifier":
        label = input_column(view, self.label_column_name, {ColumnKind.KEY}, self.name)
        if label.key_values is None:
            raise TrainingError(f"{self.name}: label column {label.name!r} carries no key values")
        x = _features(view, self.feature_column_name, self.name)
        y = np.asarray(view.column(self.label_column_name), dtype=np.int64)
        known = y >= 0
        if not known.any():
            raise TrainingError(f"{self.name}: no row has a label")
        model = _fit_model(_build_model(self.options, self.context.seed), x[known], y[known], self.name)
        return FittedMulticlassClassifier(
            label_column_name=self.label_column_name,
            feature_column_name=self.feature_column_name,
            model=model,
            key_values=label.key_values,
            value_kind=label.value_kind or ColumnKind.TEXT,
        )


class LogisticRegressionTrainer(_LogisticTrainer):
    """Binary logistic regression over a boolean label column."""

    name = "LogisticRegressionTrainer"

    def output_columns(self, schema: Schema) -> list[Column]:
        require_column(schema, self.label_column_name, {ColumnKind.BOOL}, self.name)
        require_column(schema, self.feature_column_name, {ColumnKind.VECTOR}, self.name)
        return [
            Column(SCORE_COLUMN, ColumnKind.FLOAT),
            Column(PROBABILITY_COLUMN, ColumnKind.FLOAT),
            Column(PREDICTED_LABEL_COLUMN, ColumnKind.BOOL),
        ]

    def fit(self, view: DataView) -> "FittedBinaryClassifier":
        input_column(view, self.label_column_name, {ColumnKind.BOOL}, self.name)
        x = _features(view, self.feature_column_name, self.name)
        y = np.asarray(view.column(self.label_column_name), dtype=bool).astype(np.int64)
        model = _fit_model(_build_model(self.options, self.context.seed), x, y, self.name)
        return FittedBinaryClassifier(
            label_column_name=self.label_column_name,
            feature_column_name=self.feature_column_name,
            model=model,
        )


def _check_width(model: LogisticRegression, x: Any, step: str) -> None:
    if x.shape[1] != model.n_features_in_:
        raise SchemaMismatch(f"{step}: expected {model.n_features_in_} features, got {x.shape[1]}")


@dataclass(frozen=True)
class FittedMulticlassClassifier(FittedStep):
    label_column_name: str
    feature_column_name: str
    model: LogisticRegression
    key_values: tuple[Any, ...]
    value_kind: ColumnKind
    task = "multiclass"

    @property
    def coefficients(self) -> np.ndarray:
        return self.model.coef_.copy()

    def transform(self, view: DataView) -> DataView:
        x = _features(view, self.feature_column_name, "MaximumEntropyTrainer")
        scores = np.zeros((x.shape[0], len(self.key_values)), dtype=float)
        if x.shape[0]:
            _check_width(self.model, x, "MaximumEntropyTrainer")
            scores[:, self.model.classes_] = self.model.predict_proba(x)
        predicted = np.argmax(scores, axis=1).astype(np.int64) if x.shape[0] else np.zeros(0, dtype=np.int64)
        return view.with_columns(
            [
                (Column(SCORE_COLUMN, ColumnKind.VECTOR), scores),
                (
                    Column(
                        PREDICTED_LABEL_COLUMN,
                        ColumnKind.KEY,
                        key_values=self.key_values,
                        value_kind=self.value_kind,
                    ),
                    predicted,
                ),
            ]
        )


@dataclass(frozen=True)
class FittedBinaryClassifier(FittedStep):
    label_column_name: str
    feature_column_name: str
    model: LogisticRegression
    task = "binary"

    @property
    def coefficients(self) -> np.ndarray:
        return self.model.coef_.copy()

    def transform(self, view: DataView) -> DataView:
        x = _features(view, self.feature_column_name, "LogisticRegressionTrainer")
        if x.shape[0]:
            _check_width(self.model, x, "LogisticRegressionTrainer")
            score = self.model.decision_function(x).astype(float)
            probability = self.model.predict_proba(x)[:, 1].astype(float)
        else:
            score = np.zeros(0, dtype=float)
            probability = np.zeros(0, dtype=float)
        return view.with_columns(
            [
                (Column(SCORE_COLUMN, ColumnKind.FLOAT), score),
                (Column(PROBABILITY_COLUMN, ColumnKind.FLOAT), probability),
                (Column(PREDICTED_LABEL_COLUMN, ColumnKind.BOOL), probability > 0.5),
            ]
        )


def fit(pipeline: EstimatorChain, training_view: DataView) -> TransformerChain:
    """Fit ``pipeline`` on ``training_view`` and return the trained chain."""
    started = time.perf_counter()
    model = pipeline.fit(training_view)
    logger.info("Trained %d-step chain on %d rows in %.2fs", len(model.steps), len(training_view), time.perf_counter() - started)
    return model
