# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2026 muffydu37
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from scipy import sparse
from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.pipeline import FeatureUnion, Pipeline
from sklearn.preprocessing import Normalizer

from .dataview import DataView
from .errors import TrainingError
from .schemas import Column, ColumnKind, Schema
from .training.pipeline import EstimatorStep, FittedStep, input_column, require_column


def _safe_text(value: object) -> str:
    return str(value or "")


def _texts(values: Iterable[Any]) -> list[str]:
    return [_safe_text(value) for value in values]


@dataclass(frozen=True)
class TextFeaturizerOptions:
    word_ngram_range: tuple[int, int] = (1, 2)
    char_ngram_range: tuple[int, int] = (3, 3)
    lowercase: bool = True
    strip_accents: str | None = "unicode"
    max_features: int | None = None
    min_df: int = 1


def _build_vectorizer(options: TextFeaturizerOptions) -> Pipeline:
    return Pipeline(
        steps=[
            (
                "ngrams",
                FeatureUnion(
                    transformer_list=[
                        (
                            "word_tfidf",
                            TfidfVectorizer(
                                analyzer="word",
                                ngram_range=options.word_ngram_range,
                                lowercase=options.lowercase,
                                strip_accents=options.strip_accents,
                                max_features=options.max_features,
                                min_df=options.min_df,
                            ),
                        ),
                        (
                            "char_tfidf",
                            TfidfVectorizer(
                                analyzer="char_wb",
                                ngram_range=options.char_ngram_range,
                                lowercase=options.lowercase,
                                strip_accents=options.strip_accents,
                                max_features=options.max_features,
                                min_df=options.min_df,
                            ),
                        ),
                    ]
                ),
            ),
            ("l2", Normalizer(norm="l2")),
        ]
    )


@dataclass(frozen=True)
class FeaturizeText(EstimatorStep):
    """Turn a text column into an L2-normalized vector of word and character n-grams."""

    output_column_name: str
    input_column_name: str | None = None
    options: TextFeaturizerOptions = field(default_factory=TextFeaturizerOptions)

    def __post_init__(self) -> None:
        if self.input_column_name is None:
            object.__setattr__(self, "input_column_name", self.output_column_name)

    def output_columns(self, schema: Schema) -> list[Column]:
        require_column(schema, self.input_column_name, {ColumnKind.TEXT}, "FeaturizeText")
        return [Column(self.output_column_name, ColumnKind.VECTOR)]

    def fit(self, view: DataView) -> "FittedTextFeaturizer":
        input_column(view, self.input_column_name, {ColumnKind.TEXT}, "FeaturizeText")
        vectorizer = _build_vectorizer(self.options)
        try:
            vectorizer.fit(_texts(view.column(self.input_column_name)))
        except ValueError as exc:
            raise TrainingError(f"FeaturizeText({self.input_column_name}): {exc}") from exc
        dimension = sum(len(step.vocabulary_) for _name, step in vectorizer.named_steps["ngrams"].transformer_list)
        return FittedTextFeaturizer(
            input_column_name=self.input_column_name,
            output_column_name=self.output_column_name,
            vectorizer=vectorizer,
            dimension=dimension,
        )


@dataclass(frozen=True)
class FittedTextFeaturizer(FittedStep):
    input_column_name: str
    output_column_name: str
    vectorizer: Pipeline
    dimension: int

    def transform(self, view: DataView) -> DataView:
        input_column(view, self.input_column_name, {ColumnKind.TEXT}, "FeaturizeText")
        if len(view) == 0:
            matrix = sparse.csr_matrix((0, self.dimension))
        else:
            matrix = sparse.csr_matrix(self.vectorizer.transform(_texts(view.column(self.input_column_name))))
        return view.with_columns([(Column(self.output_column_name, ColumnKind.VECTOR), matrix)])
