# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2026 muffydu37
"""Composable estimator chains.

An :class:`EstimatorChain` is an ordered list of steps. Each step reads
columns produced by the source data or by an earlier step and adds its own
output columns. Fitting the chain fits every step in order and yields a
:class:`TransformerChain`, the trained model used for evaluation, prediction
and persistence.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Collection, Sequence

import numpy as np
import pandas as pd
from scipy import sparse

from ..dataview import DataView
from ..errors import PipelineConfigurationError, SchemaMismatch, TrainingError
from ..schemas import SCALAR_KINDS, Column, ColumnKind, Schema

logger = logging.getLogger(__name__)


def _check_name(step: str, name: str | None, role: str) -> None:
    if not isinstance(name, str) or not name.strip():
        raise PipelineConfigurationError(f"{step}: {role} column name must be a non-empty string")


def _kinds(kinds: Collection[ColumnKind]) -> str:
    return ", ".join(sorted(kind.value for kind in kinds))


def require_column(schema: Schema, name: str, kinds: Collection[ColumnKind], step: str) -> Column:
    """Look up a step's input column while validating a chain."""
    column = schema.get(name)
    if column is None:
        raise PipelineConfigurationError(f"{step}: input column {name!r} is not defined; available: {schema.names}")
    if column.kind not in kinds:
        raise PipelineConfigurationError(
            f"{step}: column {name!r} is {column.kind.value}, expected {_kinds(kinds)}"
        )
    return column


def input_column(view: DataView, name: str, kinds: Collection[ColumnKind], step: str) -> Column:
    """Look up a fitted step's input column in the view being transformed."""
    column = view.schema.get(name)
    if column is None:
        raise SchemaMismatch(f"{step}: input column {name!r} is missing; available: {view.schema.names}")
    if column.kind not in kinds:
        raise SchemaMismatch(f"{step}: column {name!r} is {column.kind.value}, expected {_kinds(kinds)}")
    return column


class EstimatorStep:
    """A step that can be fitted on a view to produce a :class:`FittedStep`."""

    is_trainer = False

    def output_columns(self, schema: Schema) -> list[Column]:
        raise NotImplementedError

    def fit(self, view: DataView) -> "FittedStep":
        raise NotImplementedError


class FittedStep:
    def transform(self, view: DataView) -> DataView:
        raise NotImplementedError


@dataclass(frozen=True)
class MapValueToKey(EstimatorStep):
    """Map a categorical column to dense integer keys, in order of first appearance."""

    output_column_name: str
    input_column_name: str | None = None

    def __post_init__(self) -> None:
        _check_name("MapValueToKey", self.output_column_name, "output")
        if self.input_column_name is None:
            object.__setattr__(self, "input_column_name", self.output_column_name)
        _check_name("MapValueToKey", self.input_column_name, "input")

    def output_columns(self, schema: Schema) -> list[Column]:
        source = require_column(schema, self.input_column_name, SCALAR_KINDS, "MapValueToKey")
        return [Column(self.output_column_name, ColumnKind.KEY, value_kind=source.kind)]

    def fit(self, view: DataView) -> "FittedValueToKey":
        source = input_column(view, self.input_column_name, SCALAR_KINDS, "MapValueToKey")
        vocabulary = tuple(value for value in pd.unique(view.column(self.input_column_name)) if not _is_missing(value))
        logger.debug("MapValueToKey(%s): %d distinct values", self.input_column_name, len(vocabulary))
        return FittedValueToKey(
            input_column_name=self.input_column_name,
            output_column_name=self.output_column_name,
            key_values=vocabulary,
            value_kind=source.kind,
        )


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return isinstance(value, float) and np.isnan(value)


@dataclass(frozen=True)
class FittedValueToKey(FittedStep):
    input_column_name: str
    output_column_name: str
    key_values: tuple[Any, ...]
    value_kind: ColumnKind

    def transform(self, view: DataView) -> DataView:
        input_column(view, self.input_column_name, SCALAR_KINDS, "MapValueToKey")
        lookup = {value: key for key, value in enumerate(self.key_values)}
        values = view.column(self.input_column_name)
        keys = np.fromiter(
            (-1 if _is_missing(value) else lookup.get(value, -1) for value in values),
            dtype=np.int64,
            count=len(values),
        )
        column = Column(
            self.output_column_name,
            ColumnKind.KEY,
            key_values=self.key_values,
            value_kind=self.value_kind,
        )
        return view.with_columns([(column, keys)])


@dataclass(frozen=True)
class MapKeyToValue(EstimatorStep):
    """Turn keys back into the values recorded by the step that produced them."""

    output_column_name: str
    input_column_name: str | None = None

    def __post_init__(self) -> None:
        _check_name("MapKeyToValue", self.output_column_name, "output")
        if self.input_column_name is None:
            object.__setattr__(self, "input_column_name", self.output_column_name)
        _check_name("MapKeyToValue", self.input_column_name, "input")

    def output_columns(self, schema: Schema) -> list[Column]:
        source = require_column(schema, self.input_column_name, {ColumnKind.KEY}, "MapKeyToValue")
        return [Column(self.output_column_name, source.value_kind or ColumnKind.TEXT)]

    def fit(self, view: DataView) -> "FittedKeyToValue":
        source = input_column(view, self.input_column_name, {ColumnKind.KEY}, "MapKeyToValue")
        if source.key_values is None:
            raise TrainingError(f"MapKeyToValue: column {source.name!r} carries no key values")
        return FittedKeyToValue(
            input_column_name=self.input_column_name,
            output_column_name=self.output_column_name,
            key_values=source.key_values,
            value_kind=source.value_kind or ColumnKind.TEXT,
        )


@dataclass(frozen=True)
class FittedKeyToValue(FittedStep):
    input_column_name: str
    output_column_name: str
    key_values: tuple[Any, ...]
    value_kind: ColumnKind

    def transform(self, view: DataView) -> DataView:
        input_column(view, self.input_column_name, {ColumnKind.KEY}, "MapKeyToValue")
        size = len(self.key_values)
        values = np.empty(len(view), dtype=object)
        for position, key in enumerate(view.column(self.input_column_name)):
            values[position] = self.key_values[key] if 0 <= key < size else None
        return view.with_columns([(Column(self.output_column_name, self.value_kind), values)])


class Concatenate(EstimatorStep):
    """Stack vector (or numeric) columns side by side into one vector column."""

    def __init__(self, output_column_name: str, *input_column_names: str) -> None:
        _check_name("Concatenate", output_column_name, "output")
        if not input_column_names:
            raise PipelineConfigurationError("Concatenate: at least one input column is required")
        for name in input_column_names:
            _check_name("Concatenate", name, "input")
        self.output_column_name = output_column_name
        self.input_column_names = tuple(input_column_names)

    def __repr__(self) -> str:
        return f"Concatenate({self.output_column_name!r}, {', '.join(map(repr, self.input_column_names))})"

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, Concatenate)
            and other.output_column_name == self.output_column_name
            and other.input_column_names == self.input_column_names
        )

    def __hash__(self) -> int:
        return hash((self.output_column_name, self.input_column_names))

    def output_columns(self, schema: Schema) -> list[Column]:
        for name in self.input_column_names:
            require_column(schema, name, {ColumnKind.VECTOR, ColumnKind.FLOAT}, "Concatenate")
        return [Column(self.output_column_name, ColumnKind.VECTOR)]

    def fit(self, view: DataView) -> "FittedConcatenate":
        return FittedConcatenate(self.output_column_name, self.input_column_names)


@dataclass(frozen=True)
class FittedConcatenate(FittedStep):
    output_column_name: str
    input_column_names: tuple[str, ...]

    def transform(self, view: DataView) -> DataView:
        blocks = []
        for name in self.input_column_names:
            column = input_column(view, name, {ColumnKind.VECTOR, ColumnKind.FLOAT}, "Concatenate")
            values = view.column(name)
            if column.kind is ColumnKind.FLOAT:
                values = np.asarray(values, dtype=float).reshape(-1, 1)
            blocks.append(sparse.csr_matrix(values))
        combined = sparse.hstack(blocks, format="csr")
        return view.with_columns([(Column(self.output_column_name, ColumnKind.VECTOR), combined)])


@dataclass(frozen=True)
class TransformerChain:
    """A fitted chain: the trained model.

    ``input_schema`` is the schema of the data the chain was fitted on and
    ``output_schema`` the schema of what :meth:`transform` returns for it.
    """

    steps: tuple[FittedStep, ...]
    input_schema: Schema
    output_schema: Schema

    def transform(self, view: DataView) -> DataView:
        for step in self.steps:
            view = step.transform(view)
        return view

    @property
    def classifier(self) -> Any:
        for step in self.steps:
            if getattr(step, "task", None) is not None:
                return step
        return None

    @property
    def task(self) -> str | None:
        classifier = self.classifier
        return classifier.task if classifier is not None else None


@dataclass(frozen=True)
class EstimatorChain:
    steps: tuple[EstimatorStep, ...] = ()

    def append(self, step: EstimatorStep) -> "EstimatorChain":
        if not isinstance(step, EstimatorStep):
            raise PipelineConfigurationError(f"Not a pipeline step: {step!r}")
        if step.is_trainer and any(existing.is_trainer for existing in self.steps):
            raise PipelineConfigurationError("A chain can hold a single trainer")
        return EstimatorChain(self.steps + (step,))

    def validate(self, schema: Schema) -> Schema:
        """Check every step against ``schema`` and return the resulting output schema."""
        if not self.steps:
            raise PipelineConfigurationError("The chain has no steps")
        for step in self.steps:
            for column in step.output_columns(schema):
                schema = schema.with_column(column)
        return schema

    get_output_schema = validate

    def fit(self, view: DataView) -> TransformerChain:
        try:
            self.validate(view.schema)
        except PipelineConfigurationError as exc:
            raise TrainingError(f"Training data does not fit the pipeline: {exc}") from exc
        if len(view) == 0:
            raise TrainingError("Training data is empty")

        fitted: list[FittedStep] = []
        current = view
        for position, step in enumerate(self.steps):
            logger.debug("Fitting step %d: %r", position, step)
            fitted_step = step.fit(current)
            fitted.append(fitted_step)
            if position < len(self.steps) - 1:
                current = fitted_step.transform(current)
            else:
                # Only the schema of the last output is needed.
                current = fitted_step.transform(current.take([0]))
        return TransformerChain(steps=tuple(fitted), input_schema=view.schema, output_schema=current.schema)


def make_chain(steps: Sequence[EstimatorStep]) -> EstimatorChain:
    chain = EstimatorChain()
    for step in steps:
        chain = chain.append(step)
    return chain
