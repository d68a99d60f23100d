# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2026 muffydu37
"""Binary sentiment classification of short restaurant reviews."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Sequence

from ..config import ProgramPaths, TrainingContext
from ..console import MLConsole, configure_logging
from ..dataview import DataView
from ..errors import TextClassifierError
from ..evaluation.metrics import BinaryMetrics, evaluate_binary
from ..features import FeaturizeText
from ..inference.predictor import create_prediction_engine
from ..persistence import save_model
from ..schemas import SentimentData, SentimentPrediction
from ..training.dataset import TrainTestData, load_from_text_file, train_test_split
from ..training.pipeline import EstimatorChain, TransformerChain, make_chain
from ..training.trainer import LogisticRegressionTrainer, TrainerOptions, fit

logger = logging.getLogger(__name__)

DATA_FILE = "yelp_labelled.txt"
MODEL_FILE = "sentiment_model.joblib"
TEST_FRACTION = 0.2

SINGLE_SAMPLE = SentimentData(sentiment_text="This was a very bad steak")
BATCH_SAMPLES = (
    SentimentData(sentiment_text="This was a horrible meal"),
    SentimentData(sentiment_text="I love this spaghetti."),
)


def load_data(path: Path, context: TrainingContext, *, test_fraction: float = TEST_FRACTION) -> TrainTestData:
    view = load_from_text_file(path, SentimentData, has_header=False)
    return train_test_split(view, test_fraction=test_fraction, seed=context.seed)


def build_pipeline(context: TrainingContext, options: TrainerOptions | None = None) -> EstimatorChain:
    return make_chain(
        [
            FeaturizeText("Features", "SentimentText"),
            LogisticRegressionTrainer(context, "Label", "Features", options),
        ]
    )


def evaluate_model(model: TransformerChain, test_set: DataView, console: MLConsole) -> BinaryMetrics:
    metrics = evaluate_binary(model.transform(test_set))
    console.metrics_table(
        {
            "Accuracy": f"{metrics.accuracy:.2%}",
            "Auc": f"{metrics.auc:.2%}",
            "F1Score": f"{metrics.f1:.2%}",
        },
        title="Model quality metrics evaluation",
    )
    return metrics


def _prediction_rows(predictions: Sequence[SentimentPrediction]) -> list[dict[str, Any]]:
    return [
        {
            "Sentiment": item.sentiment_text,
            "Prediction": item.label,
            "Probability": item.probability,
        }
        for item in predictions
    ]


def run(
    *,
    paths: ProgramPaths,
    context: TrainingContext,
    console: MLConsole,
    data_path: Path | None = None,
    model_path: Path | None = None,
    save: bool = False,
    test_fraction: float = TEST_FRACTION,
) -> dict[str, Any]:
    data_path = data_path or paths.data_file(DATA_FILE)
    console.banner("Sentiment analysis")

    split = load_data(data_path, context, test_fraction=test_fraction)
    console.info(f"Loaded {len(split.train_set)} training and {len(split.test_set)} test reviews from {data_path}")

    model = fit(build_pipeline(context), split.train_set)
    console.success("End of training")

    metrics = evaluate_model(model, split.test_set, console)

    engine = create_prediction_engine(model, SentimentData, SentimentPrediction, context)
    single = engine.predict(SINGLE_SAMPLE)
    console.predictions_table(_prediction_rows([single]), title="Prediction with a single sample")

    batch = list(engine.predict_batch(BATCH_SAMPLES))
    console.predictions_table(_prediction_rows(batch), title="Prediction with multiple samples")

    summary: dict[str, Any] = {
        "metrics": metrics.as_dict(),
        "predictions": [
            {"text": item.sentiment_text, "prediction": item.prediction, "probability": item.probability}
            for item in [single, *batch]
        ],
        "paths": {"data": str(data_path)},
    }
    if save:
        model_path = model_path or paths.model_file(MODEL_FILE)
        save_model(model, split.train_set.schema, model_path, metadata={"program": "sentiment_analysis"})
        console.success(f"Saved model on: {model_path}")
        summary["paths"]["model"] = str(model_path)
    return summary


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Train and evaluate the review sentiment classifier.")
    parser.add_argument("--data", type=Path, default=None, help=f"Labelled reviews (default: <data dir>/{DATA_FILE})")
    parser.add_argument("--test-fraction", type=float, default=TEST_FRACTION, help="Share of rows held out for evaluation")
    parser.add_argument("--save", action="store_true", help="Save the trained model")
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
            data_path=args.data,
            model_path=args.model,
            save=args.save,
            test_fraction=args.test_fraction,
        )
    except TextClassifierError as exc:
        logger.debug("Run failed", exc_info=True)
        console.error(str(exc))
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
