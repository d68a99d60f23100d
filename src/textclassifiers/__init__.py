# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2026 muffydu37
"""Text classifiers: GitHub issue Area labelling and review sentiment."""

from .config import ProgramPaths, TrainingContext
from .dataview import DataView
from .errors import (
    FormatError,
    PipelineConfigurationError,
    SchemaMismatch,
    StorageError,
    TextClassifierError,
    TrainingError,
)
from .inference.predictor import PredictionEngine, create_prediction_engine
from .persistence import load_model, save_model
from .schemas import GitHubIssue, IssuePrediction, SentimentData, SentimentPrediction

__all__ = [
    "DataView",
    "FormatError",
    "GitHubIssue",
    "IssuePrediction",
    "PipelineConfigurationError",
    "PredictionEngine",
    "ProgramPaths",
    "SchemaMismatch",
    "SentimentData",
    "SentimentPrediction",
    "StorageError",
    "TextClassifierError",
    "TrainingContext",
    "TrainingError",
    "create_prediction_engine",
    "load_model",
    "save_model",
]
