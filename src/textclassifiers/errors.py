# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2026 muffydu37
"""Error kinds raised by the loading, training, evaluation and persistence stages."""

from __future__ import annotations


class TextClassifierError(Exception):
    """Base class for every error surfaced to the caller of a program run."""


class StorageError(TextClassifierError, OSError):
    """A data file or model artifact is missing, unreadable or unwritable."""


class SchemaMismatch(TextClassifierError):
    """Declared columns do not match the shape of a file, a record or a data view."""


class PipelineConfigurationError(TextClassifierError):
    """A pipeline step references a column that is undefined or of the wrong kind."""


class TrainingError(TextClassifierError):
    """The training data cannot satisfy the requirements of the pipeline."""


class FormatError(TextClassifierError):
    """A persisted model artifact is corrupt or from an incompatible format version."""


__all__ = [
    "TextClassifierError",
    "StorageError",
    "SchemaMismatch",
    "PipelineConfigurationError",
    "TrainingError",
    "FormatError",
]
