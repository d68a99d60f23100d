# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2026 muffydu37
from __future__ import annotations

import itertools
import logging
from typing import Generic, Iterable, Iterator, TypeVar

from ..config import TrainingContext
from ..dataview import DataView
from ..errors import SchemaMismatch
from ..schemas import record_columns, schema_from_record_type
from ..training.dataset import load_from_records
from ..training.pipeline import TransformerChain

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class PredictionEngine(Generic[InputT, OutputT]):
    """Run a trained chain over input records and build output records.

    An engine holds no lock: share it between threads only under an
    external lock, or give each thread its own engine.
    """

    def __init__(
        self,
        model: TransformerChain,
        input_type: type[InputT],
        output_type: type[OutputT],
        *,
        batch_size: int = 256,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.model = model
        self.input_type = input_type
        self.output_type = output_type
        self.batch_size = batch_size
        self._check_input_schema()
        self._output_fields = record_columns(output_type)
        missing = [column.name for _name, column in self._output_fields if column.name not in model.output_schema]
        if missing:
            raise SchemaMismatch(
                f"{output_type.__name__} reads columns {missing} that the model does not produce; "
                f"available: {model.output_schema.names}"
            )

    def _check_input_schema(self) -> None:
        given = schema_from_record_type(self.input_type)
        for expected in self.model.input_schema:
            column = given.get(expected.name)
            if column is None:
                raise SchemaMismatch(f"{self.input_type.__name__} has no column {expected.name!r}")
            if column.kind is not expected.kind:
                raise SchemaMismatch(
                    f"{self.input_type.__name__}.{expected.name} is {column.kind.value}, "
                    f"the model expects {expected.kind.value}"
                )

    def _to_outputs(self, scored: DataView) -> Iterator[OutputT]:
        names = [column.name for _name, column in self._output_fields]
        for row in scored.iter_rows(names):
            yield self.output_type(**{field_name: row[column.name] for field_name, column in self._output_fields})

    def predict(self, record: InputT) -> OutputT:
        scored = self.model.transform(load_from_records([record], self.input_type))
        return next(self._to_outputs(scored))

    def predict_batch(self, records: Iterable[InputT]) -> Iterator[OutputT]:
        """Lazily predict ``records`` in input order, ``batch_size`` rows per transform."""
        iterator = iter(records)
        while True:
            chunk = list(itertools.islice(iterator, self.batch_size))
            if not chunk:
                return
            logger.debug("Predicting a batch of %d records", len(chunk))
            yield from self._to_outputs(self.model.transform(load_from_records(chunk, self.input_type)))


def create_prediction_engine(
    model: TransformerChain,
    input_type: type[InputT],
    output_type: type[OutputT],
    context: TrainingContext | None = None,
) -> PredictionEngine[InputT, OutputT]:
    batch_size = context.batch_size if context is not None else 256
    return PredictionEngine(model, input_type, output_type, batch_size=batch_size)

