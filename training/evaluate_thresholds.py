#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
from pathlib import Path

import numpy as np
from sklearn.metrics import f1_score, precision_score, recall_score

from textclassifiers.persistence import load_model
from textclassifiers.training.dataset import load_from_text_file


def _metrics(y_true: np.ndarray, probs: np.ndarray, threshold: float) -> dict[str, float]:
    y_pred = (probs > threshold).astype(int)
    return {
        "threshold": float(threshold),
        "precision": float(precision_score(y_true, y_pred, zero_division=0)),
        "recall": float(recall_score(y_true, y_pred, zero_division=0)),
        "f1": float(f1_score(y_true, y_pred, zero_division=0)),
    }


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sweep precision/recall/F1 of a saved sentiment model over thresholds.")
    parser.add_argument("--model", default="models/sentiment_model.joblib", help="Saved sentiment model")
    parser.add_argument("--eval", default="data/yelp_labelled.txt", help="Labelled reviews (tab separated)")
    parser.add_argument("--has-header", action="store_true", help="The evaluation file starts with a header row")
    parser.add_argument("--output", default="models/threshold_eval.json", help="JSON report")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    output_path = Path(args.output)

    model, schema = load_model(Path(args.model))
    classifier = model.classifier
    if classifier is None or classifier.task != "binary":
        raise SystemExit(f"{args.model} is not a binary classifier")
    view = load_from_text_file(Path(args.eval), schema, has_header=args.has_header)
    scored = model.transform(view)

    y_true = np.asarray(scored.column(classifier.label_column_name), dtype=bool).astype(int)
    probs = np.asarray(scored.column("Probability"), dtype=float)

    rows = [_metrics(y_true, probs, raw / 100.0) for raw in range(5, 96, 5)]
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(rows, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")

    print(f"[OK] report: {output_path}")
    for row in rows:
        print(
            f"thr={row['threshold']:.2f} "
            f"prec={row['precision']:.3f} rec={row['recall']:.3f} f1={row['f1']:.3f}"
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
