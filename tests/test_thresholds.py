import json
import runpy
import sys
from pathlib import Path

import pytest

from textclassifiers.persistence import save_model
from textclassifiers.programs.github_issues import build_pipeline as build_issue_pipeline
from textclassifiers.programs.sentiment_analysis import build_pipeline as build_sentiment_pipeline
from textclassifiers.training.trainer import fit

SCRIPT = Path(__file__).resolve().parents[1] / "training" / "evaluate_thresholds.py"


def _run_script(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", [str(SCRIPT), *map(str, args)])
    with pytest.raises(SystemExit) as info:
        runpy.run_path(str(SCRIPT), run_name="__main__")
    return info.value.code


def test_threshold_sweep_writes_report(tmp_path, monkeypatch, context, reviews_view, reviews_file):
    model_path = save_model(fit(build_sentiment_pipeline(context), reviews_view), reviews_view.schema, tmp_path / "m.joblib")
    output = tmp_path / "reports" / "thresholds.json"

    code = _run_script(monkeypatch, "--model", model_path, "--eval", reviews_file, "--output", output)

    assert code == 0
    rows = json.loads(output.read_text(encoding="utf-8"))
    assert [row["threshold"] for row in rows] == pytest.approx([step / 100 for step in range(5, 96, 5)])
    assert set(rows[0]) == {"threshold", "precision", "recall", "f1"}
    assert rows[0]["recall"] >= rows[-1]["recall"]


def test_threshold_sweep_rejects_multiclass_model(tmp_path, monkeypatch, context, issues_view, issues_train_file):
    model_path = save_model(fit(build_issue_pipeline(context), issues_view), issues_view.schema, tmp_path / "m.joblib")

    code = _run_script(monkeypatch, "--model", model_path, "--eval", issues_train_file, "--output", tmp_path / "r.json")

    assert code != 0
    assert not (tmp_path / "r.json").exists()
