# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2026 muffydu37
from __future__ import annotations

import types
import typing
from dataclasses import MISSING, dataclass, field, fields
from enum import Enum
from functools import lru_cache
from typing import Any, Iterator

from .errors import SchemaMismatch


class ColumnKind(str, Enum):
    TEXT = "text"
    BOOL = "bool"
    FLOAT = "float"
    KEY = "key"
    VECTOR = "vector"


SCALAR_KINDS = frozenset({ColumnKind.TEXT, ColumnKind.BOOL, ColumnKind.FLOAT})


@dataclass(frozen=True)
class Column:
    name: str
    kind: ColumnKind
    index: int | None = None
    # Key columns only: the original values, position i is key i.
    key_values: tuple[Any, ...] | None = None
    value_kind: ColumnKind | None = None


@dataclass(frozen=True)
class Schema:
    columns: tuple[Column, ...] = ()

    def __post_init__(self) -> None:
        names = [column.name for column in self.columns]
        if len(names) != len(set(names)):
            raise SchemaMismatch(f"Duplicate column names in schema: {names}")

    def __iter__(self) -> Iterator[Column]:
        return iter(self.columns)

    def __len__(self) -> int:
        return len(self.columns)

    def __contains__(self, name: object) -> bool:
        return any(column.name == name for column in self.columns)

    def __getitem__(self, name: str) -> Column:
        for column in self.columns:
            if column.name == name:
                return column
        raise KeyError(name)

    def get(self, name: str) -> Column | None:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    @property
    def names(self) -> list[str]:
        return [column.name for column in self.columns]

    def with_column(self, column: Column) -> "Schema":
        """Return a schema where ``column`` replaces any column of the same name."""
        kept = tuple(existing for existing in self.columns if existing.name != column.name)
        return Schema(kept + (column,))

    def loadable_columns(self) -> list[Column]:
        return [column for column in self.columns if column.index is not None]


def column(
    name: str,
    *,
    index: int | None = None,
    default: Any = MISSING,
    default_factory: Any = MISSING,
) -> Any:
    """Declare a record field bound to column ``name`` (and to file column ``index``)."""
    return field(
        default=default,
        default_factory=default_factory,
        metadata={"column": name, "index": index},
    )


def _kind_for_annotation(annotation: Any) -> ColumnKind:
    if isinstance(annotation, types.UnionType) or typing.get_origin(annotation) is typing.Union:
        members = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(members) != 1:
            raise SchemaMismatch(f"Unsupported union annotation: {annotation!r}")
        annotation = members[0]
    if typing.get_origin(annotation) in (list, tuple):
        return ColumnKind.VECTOR
    if annotation is bool:
        return ColumnKind.BOOL
    if annotation in (int, float):
        return ColumnKind.FLOAT
    if annotation is str:
        return ColumnKind.TEXT
    raise SchemaMismatch(f"Unsupported field annotation: {annotation!r}")


@lru_cache(maxsize=None)
def record_columns(record_type: type) -> tuple[tuple[str, Column], ...]:
    """Map each field of a record dataclass to the column it is bound to."""
    hints = typing.get_type_hints(record_type)
    pairs: list[tuple[str, Column]] = []
    for item in fields(record_type):
        name = item.metadata.get("column", item.name)
        kind = _kind_for_annotation(hints[item.name])
        pairs.append((item.name, Column(name=name, kind=kind, index=item.metadata.get("index"))))
    return tuple(pairs)


def schema_from_record_type(record_type: type) -> Schema:
    return Schema(tuple(col for _field_name, col in record_columns(record_type)))


@dataclass(slots=True)
class GitHubIssue:
    id: str | None = column("ID", index=0, default=None)
    area: str | None = column("Area", index=1, default=None)
    title: str = column("Title", index=2, default="")
    description: str = column("Description", index=3, default="")


@dataclass(slots=True)
class IssuePrediction:
    area: str | None = column("PredictedLabel", default=None)
    score: list[float] = column("Score", default_factory=list)

    @property
    def probability(self) -> float:
        return max(self.score) if self.score else 0.0


@dataclass(slots=True)
class SentimentData:
    sentiment_text: str = column("SentimentText", index=0, default="")
    sentiment: bool = column("Label", index=1, default=False)


@dataclass(slots=True)
class SentimentPrediction:
    sentiment_text: str = column("SentimentText", default="")
    prediction: bool = column("PredictedLabel", default=False)
    probability: float = column("Probability", default=0.0)
    score: float = column("Score", default=0.0)

    @property
    def label(self) -> str:
        return "Positive" if self.prediction else "Negative"
