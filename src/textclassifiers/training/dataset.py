# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2026 muffydu37
from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Any, Iterable, NamedTuple

import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split as _sk_train_test_split

from ..dataview import DataView
from ..errors import SchemaMismatch, StorageError
from ..schemas import Column, ColumnKind, Schema, record_columns, schema_from_record_type

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true"}
_FALSE_VALUES = {"0", "false"}


class TrainTestData(NamedTuple):
    train_set: DataView
    test_set: DataView


def _resolve_schema(source: Schema | type) -> Schema:
    if isinstance(source, Schema):
        return source
    return schema_from_record_type(source)


def _convert(column: Column, values: pd.Series, path: Path) -> pd.Series:
    if column.kind is ColumnKind.TEXT:
        return values.astype(object)
    if column.kind is ColumnKind.BOOL:
        lowered = values.str.strip().str.lower()
        bad = ~lowered.isin(_TRUE_VALUES | _FALSE_VALUES)
        if bad.any():
            row = int(bad.to_numpy().nonzero()[0][0])
            raise SchemaMismatch(
                f"{path}: column {column.name!r} (index {column.index}) row {row} is not a boolean: {values.iat[row]!r}"
            )
        return lowered.isin(_TRUE_VALUES)
    if column.kind is ColumnKind.FLOAT:
        try:
            return pd.to_numeric(values.str.strip(), errors="raise").astype(float)
        except ValueError as exc:
            raise SchemaMismatch(f"{path}: column {column.name!r} (index {column.index}) is not numeric") from exc
    raise SchemaMismatch(f"Column {column.name!r} of kind {column.kind.value} cannot be loaded from text")


def load_from_text_file(
    path: Path | str,
    source: Schema | type,
    *,
    has_header: bool = False,
    separator: str = "\t",
) -> DataView:
    """Read a delimited text file into a view, picking columns by their declared index.

    A header line is skipped, never used to infer the column layout.
    """
    path = Path(path)
    schema = _resolve_schema(source)
    columns = schema.loadable_columns()
    if not columns:
        raise SchemaMismatch("Schema declares no column with a load index")
    if not path.is_file():
        raise StorageError(f"Data file not found: {path}")

    try:
        raw = pd.read_csv(
            path,
            sep=separator,
            header=None,
            skiprows=1 if has_header else 0,
            dtype=str,
            keep_default_na=False,
            quoting=csv.QUOTE_NONE,
            encoding="utf-8",
        )
    except pd.errors.EmptyDataError as exc:
        raise SchemaMismatch(f"{path}: file has no rows") from exc
    except pd.errors.ParserError as exc:
        raise SchemaMismatch(f"{path}: rows do not share one column layout ({exc})") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise StorageError(f"Cannot read data file {path}: {exc}") from exc

    width = raw.shape[1]
    data: dict[str, Any] = {}
    for column in columns:
        if column.index >= width:
            raise SchemaMismatch(
                f"{path}: column {column.name!r} declares index {column.index} but the file has {width} columns"
            )
        values = raw.iloc[:, column.index]
        short = values.isna()
        if short.any():
            row = int(short.to_numpy().nonzero()[0][0])
            raise SchemaMismatch(f"{path}: row {row} has fewer than {column.index + 1} columns")
        data[column.name] = _convert(column, values, path).to_numpy()

    loaded = Schema(tuple(columns))
    logger.debug("Loaded %d rows from %s", len(raw), path)
    return DataView(loaded, pd.DataFrame(data, index=pd.RangeIndex(len(raw))))


def load_from_records(records: Iterable[Any], record_type: type | None = None) -> DataView:
    """Build a view from in-memory record dataclasses without touching storage."""
    rows = list(records)
    if record_type is None:
        if not rows:
            raise ValueError("record_type is required when no records are given")
        record_type = type(rows[0])
    for row in rows:
        if not isinstance(row, record_type):
            raise SchemaMismatch(f"Expected {record_type.__name__} records, got {type(row).__name__}")

    pairs = record_columns(record_type)
    frame_data: dict[str, Any] = {}
    vectors: dict[str, Any] = {}
    for field_name, column in pairs:
        values = [getattr(row, field_name) for row in rows]
        if column.kind is ColumnKind.VECTOR:
            try:
                matrix = np.asarray(values, dtype=float)
            except ValueError as exc:
                raise SchemaMismatch(f"Vector field {field_name!r} has rows of different lengths") from exc
            vectors[column.name] = matrix.reshape(len(rows), -1) if rows else np.zeros((0, 0))
        elif column.kind is ColumnKind.TEXT:
            frame_data[column.name] = pd.Series(values, dtype=object)
        else:
            frame_data[column.name] = pd.Series(values)

    schema = Schema(tuple(column for _field_name, column in pairs))
    return DataView(schema, pd.DataFrame(frame_data, index=pd.RangeIndex(len(rows))), vectors)


def train_test_split(view: DataView, *, test_fraction: float = 0.1, seed: int | None = None) -> TrainTestData:
    """Split a view into disjoint train and test views.

    Both partitions keep the source row order.
    """
    if not 0.0 < test_fraction < 1.0:
        raise ValueError(f"test_fraction must be between 0 and 1, got {test_fraction}")
    total = len(view)
    if total < 2:
        return TrainTestData(view, view.take([]))

    positions = np.arange(total)
    train_idx, test_idx = _sk_train_test_split(positions, test_size=test_fraction, random_state=seed, shuffle=True)
    logger.debug("Split %d rows into %d train / %d test", total, len(train_idx), len(test_idx))
    return TrainTestData(view.take(np.sort(train_idx)), view.take(np.sort(test_idx)))
