# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2026 muffydu37
"""Label GitHub issues with their Area from title and description."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Sequence

from ..config import ProgramPaths, TrainingContext
from ..console import MLConsole, configure_logging
from ..errors import TextClassifierError
from ..evaluation.metrics import evaluate_multiclass
from ..features import FeaturizeText
from ..inference.predictor import create_prediction_engine
from ..persistence import load_model, save_model
from ..schemas import GitHubIssue, IssuePrediction
from ..training.dataset import load_from_text_file
from ..training.pipeline import Concatenate, EstimatorChain, MapKeyToValue, MapValueToKey, make_chain
from ..training.trainer import MaximumEntropyTrainer, TrainerOptions, fit

logger = logging.getLogger(__name__)

TRAIN_FILE = "issues_train.tsv"
TEST_FILE = "issues_test.tsv"
MODEL_FILE = "model.joblib"

SAMPLE_ISSUE = GitHubIssue(
    title="WebSockets communication is slow in my machine",
    description="The WebSockets communication used under the covers by SignalR looks like is going slow in my development machine..",
)
SAMPLE_ISSUE_AFTER_RELOAD = GitHubIssue(
    title="Entity Framework crashes",
    description="When connecting to the database, EF is crashing",
)


def build_pipeline(context: TrainingContext, options: TrainerOptions | None = None) -> EstimatorChain:
    return make_chain(
        [
            MapValueToKey("Label", "Area"),
            FeaturizeText("TitleFeaturized", "Title"),
            FeaturizeText("DescriptionFeaturized", "Description"),
            Concatenate("Features", "TitleFeaturized", "DescriptionFeaturized"),
            MaximumEntropyTrainer(context, "Label", "Features", options),
            MapKeyToValue("PredictedLabel"),
        ]
    )


def run(
    *,
    paths: ProgramPaths,
    context: TrainingContext,
    console: MLConsole,
    train_path: Path | None = None,
    test_path: Path | None = None,
    model_path: Path | None = None,
) -> dict[str, Any]:
    train_path = train_path or paths.data_file(TRAIN_FILE)
    test_path = test_path or paths.data_file(TEST_FILE)
    model_path = model_path or paths.model_file(MODEL_FILE)

    console.banner("GitHub issue classification")
    training_view = load_from_text_file(train_path, GitHubIssue, has_header=True)
    console.info(f"Loaded {len(training_view)} training issues from {train_path}")

    model = fit(build_pipeline(context), training_view)
    engine = create_prediction_engine(model, GitHubIssue, IssuePrediction, context)

    first = engine.predict(SAMPLE_ISSUE)
    console.success(f"Single prediction just-trained-model - Result: {first.area}")
    console.info(f"Probability {first.probability:.3f}")

    test_view = load_from_text_file(test_path, GitHubIssue, has_header=True)
    metrics = evaluate_multiclass(model.transform(test_view))
    console.metrics_table(
        {
            "MicroAccuracy": f"{metrics.micro_accuracy:.3f}",
            "MacroAccuracy": f"{metrics.macro_accuracy:.3f}",
            "LogLoss": f"{metrics.log_loss:.3f}",
            "LogLossReduction": f"{metrics.log_loss_reduction:.3f}",
        },
        title="Metrics for Multi-class Classification model - Test Data",
    )

    save_model(model, training_view.schema, model_path, metadata={"program": "github_issues", "rows": len(training_view)})
    console.success(f"Saved model on: {model_path}")

    loaded_model, _schema = load_model(model_path)
    loaded_engine = create_prediction_engine(loaded_model, GitHubIssue, IssuePrediction, context)
    second = loaded_engine.predict(SAMPLE_ISSUE_AFTER_RELOAD)
    console.success(f"Single prediction - Result: {second.area}")

    return {
        "metrics": metrics.as_dict(),
        "predictions": {"just_trained": first.area, "loaded": second.area},
        "paths": {"train": str(train_path), "test": str(test_path), "model": str(model_path)},
    }


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Train, evaluate and save the GitHub issue Area classifier.")
    parser.add_argument("--train", type=Path, default=None, help=f"Training TSV (default: <data dir>/{TRAIN_FILE})")
    parser.add_argument("--test", type=Path, default=None, help=f"Test TSV (default: <data dir>/{TEST_FILE})")
    parser.add_argument("--model", type=Path, default=None, help=f"Model output (default: <model dir>/{MODEL_FILE})")
    parser.add_argument("--seed", type=int, default=None, help="Training seed (default: TEXTCLASSIFIERS_SEED or 0)")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level.upper())
    console = MLConsole()
    context = TrainingContext.from_env()
    if args.seed is not None:
        context = TrainingContext(seed=args.seed, batch_size=context.batch_size)
    try:
        run(
            paths=ProgramPaths.from_env(),
            context=context,
            console=console,
            train_path=args.train,
            test_path=args.test,
            model_path=args.model,
        )
    except TextClassifierError as exc:
        logger.debug("Run failed", exc_info=True)
        console.error(str(exc))
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
