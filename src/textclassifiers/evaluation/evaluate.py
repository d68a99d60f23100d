# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2026 muffydu37
from __future__ import annotations

from pathlib import Path

from ..persistence import load_model
from ..training.dataset import load_from_text_file
from .metrics import BinaryMetrics, MulticlassMetrics, evaluate


def evaluate_saved_model(
    *,
    model_path: Path,
    data_path: Path,
    has_header: bool = False,
    separator: str = "\t",
) -> MulticlassMetrics | BinaryMetrics:
    """Score a labelled file with a persisted model, read with the schema the model was saved with."""
    model, schema = load_model(model_path)
    view = load_from_text_file(data_path, schema, has_header=has_header, separator=separator)
    return evaluate(model, view)


__all__ = ["evaluate_saved_model"]
