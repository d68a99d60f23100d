# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2026 muffydu37
from __future__ import annotations

from typing import Any, Iterable, Iterator, Sequence

import numpy as np
import pandas as pd
from scipy import sparse

from .errors import SchemaMismatch
from .schemas import Column, ColumnKind, Schema


class DataView:
    """Immutable table of rows described by a :class:`Schema`.

    Scalar and key columns are held in a pandas frame; vector columns are
    SciPy sparse matrices or 2-d NumPy arrays with one row per record.
    Accessors hand out copies so a view never changes once built.
    """

    def __init__(self, schema: Schema, frame: pd.DataFrame, vectors: dict[str, Any] | None = None) -> None:
        vectors = dict(vectors or {})
        rows = len(frame)
        for col in schema:
            if col.kind is ColumnKind.VECTOR:
                if col.name not in vectors:
                    raise SchemaMismatch(f"Vector column {col.name!r} has no values")
                if vectors[col.name].shape[0] != rows:
                    raise SchemaMismatch(
                        f"Vector column {col.name!r} has {vectors[col.name].shape[0]} rows, expected {rows}"
                    )
            elif col.name not in frame.columns:
                raise SchemaMismatch(f"Column {col.name!r} has no values")
        scalar_names = [col.name for col in schema if col.kind is not ColumnKind.VECTOR]
        self._schema = schema
        self._frame = frame[scalar_names].reset_index(drop=True).copy()
        self._vectors = {col.name: vectors[col.name] for col in schema if col.kind is ColumnKind.VECTOR}

    @property
    def schema(self) -> Schema:
        return self._schema

    def __len__(self) -> int:
        return len(self._frame)

    def __repr__(self) -> str:
        return f"DataView(rows={len(self)}, columns={self._schema.names})"

    def column(self, name: str) -> Any:
        col = self._schema.get(name)
        if col is None:
            raise SchemaMismatch(f"Column {name!r} not found; available: {self._schema.names}")
        if col.kind is ColumnKind.VECTOR:
            return self._vectors[name].copy()
        return self._frame[name].to_numpy(copy=True)

    def to_frame(self) -> pd.DataFrame:
        """Scalar and key columns as a DataFrame copy (vector columns are left out)."""
        return self._frame.copy()

    def with_columns(self, columns: Iterable[tuple[Column, Any]]) -> "DataView":
        schema = self._schema
        frame = self._frame.copy()
        vectors = dict(self._vectors)
        for col, values in columns:
            schema = schema.with_column(col)
            vectors.pop(col.name, None)
            if col.name in frame.columns:
                frame = frame.drop(columns=[col.name])
            if col.kind is ColumnKind.VECTOR:
                vectors[col.name] = values
            else:
                frame[col.name] = np.asarray(values)
        return DataView(schema, frame, vectors)

    def take(self, positions: Sequence[int]) -> "DataView":
        index = np.asarray(positions, dtype=int)
        frame = self._frame.iloc[index]
        vectors = {name: matrix[index] for name, matrix in self._vectors.items()}
        return DataView(self._schema, frame, vectors)

    def iter_rows(self, names: Sequence[str] | None = None) -> Iterator[dict[str, Any]]:
        """Yield one ``{column: python value}`` dict per row."""
        wanted = [self._schema[name] for name in names] if names is not None else list(self._schema)
        for position in range(len(self)):
            row: dict[str, Any] = {}
            for col in wanted:
                if col.kind is ColumnKind.VECTOR:
                    row[col.name] = _vector_row(self._vectors[col.name], position)
                else:
                    row[col.name] = _python_value(self._frame[col.name].iat[position])
            yield row


def _vector_row(matrix: Any, position: int) -> list[float]:
    if sparse.issparse(matrix):
        return [float(value) for value in matrix[position].toarray().ravel()]
    return [float(value) for value in np.asarray(matrix[position]).ravel()]


def _python_value(value: Any) -> Any:
    if isinstance(value, np.generic):
        return value.item()
    return value
