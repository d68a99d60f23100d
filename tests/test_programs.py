import pytest

from textclassifiers.persistence import load_model, load_model_metadata
from textclassifiers.programs import github_issues, sentiment_analysis


def test_github_issues_run(program_paths, context, console, issues_train_file, issues_test_file):
    summary = github_issues.run(paths=program_paths, context=context, console=console)

    model_path = program_paths.model_file(github_issues.MODEL_FILE)
    assert model_path.is_file()
    assert summary["paths"]["model"] == str(model_path)
    assert set(summary["metrics"]) == {"micro_accuracy", "macro_accuracy", "log_loss", "log_loss_reduction"}
    assert summary["predictions"]["just_trained"] in {"area-signalr", "area-entityframework", "area-mvc"}
    assert summary["predictions"]["loaded"] in {"area-signalr", "area-entityframework", "area-mvc"}

    model, schema = load_model(model_path)
    assert model.task == "multiclass"
    assert schema.names == ["ID", "Area", "Title", "Description"]
    assert load_model_metadata(model_path)["program"] == "github_issues"


def test_sentiment_run_without_save(program_paths, context, console, reviews_file):
    summary = sentiment_analysis.run(paths=program_paths, context=context, console=console)

    assert set(summary["metrics"]) >= {"accuracy", "auc", "f1"}
    texts = [item["text"] for item in summary["predictions"]]
    assert texts == ["This was a very bad steak", "This was a horrible meal", "I love this spaghetti."]
    assert "model" not in summary["paths"]
    assert not program_paths.model_dir.exists()


def test_sentiment_run_with_save(program_paths, context, console, reviews_file):
    summary = sentiment_analysis.run(paths=program_paths, context=context, console=console, save=True)

    model_path = program_paths.model_file(sentiment_analysis.MODEL_FILE)
    assert summary["paths"]["model"] == str(model_path)
    model, _schema = load_model(model_path)
    assert model.task == "binary"


def test_sentiment_load_data_split(reviews_file, context):
    split = sentiment_analysis.load_data(reviews_file, context, test_fraction=0.25)
    assert len(split.test_set) == 12
    assert len(split.train_set) == 36


def test_github_issues_main_reports_missing_data(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert github_issues.main(["--train", str(tmp_path / "missing.tsv")]) == 1


def test_sentiment_main_reports_missing_data(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert sentiment_analysis.main(["--data", str(tmp_path / "missing.txt")]) == 1


def test_sentiment_main_with_explicit_paths(tmp_path, monkeypatch, reviews_file):
    monkeypatch.chdir(tmp_path)
    model_path = tmp_path / "out" / "sentiment.joblib"
    exit_code = sentiment_analysis.main(
        ["--data", str(reviews_file), "--save", "--model", str(model_path), "--seed", "3", "--log-level", "warning"]
    )
    assert exit_code == 0
    assert model_path.is_file()


@pytest.mark.parametrize("argv", [["--seed", "x"], ["--test-fraction", "half"]])
def test_sentiment_main_rejects_bad_arguments(argv):
    with pytest.raises(SystemExit):
        sentiment_analysis.main(argv)
