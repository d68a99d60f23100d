from dataclasses import dataclass

import pytest

from textclassifiers.errors import SchemaMismatch
from textclassifiers.inference.predictor import PredictionEngine, create_prediction_engine
from textclassifiers.programs.github_issues import SAMPLE_ISSUE, build_pipeline as build_issue_pipeline
from textclassifiers.programs.sentiment_analysis import build_pipeline as build_sentiment_pipeline
from textclassifiers.schemas import (
    GitHubIssue,
    IssuePrediction,
    SentimentData,
    SentimentPrediction,
    column,
)
from textclassifiers.training.trainer import fit


@pytest.fixture
def sentiment_model(context, reviews_view):
    return fit(build_sentiment_pipeline(context), reviews_view)


@pytest.fixture
def issue_model(context, issues_view):
    return fit(build_issue_pipeline(context), issues_view)


def test_sentiment_scenarios(context, sentiment_model):
    engine = create_prediction_engine(sentiment_model, SentimentData, SentimentPrediction, context)

    negative = engine.predict(SentimentData(sentiment_text="This was a horrible meal"))
    positive = engine.predict(SentimentData(sentiment_text="I love this spaghetti."))

    assert negative.prediction is False
    assert negative.probability < 0.5
    assert negative.score < 0.0
    assert negative.sentiment_text == "This was a horrible meal"
    assert positive.prediction is True
    assert positive.probability > 0.5
    assert positive.label == "Positive"


def test_issue_prediction_scores_sum_to_one(context, issue_model):
    engine = create_prediction_engine(issue_model, GitHubIssue, IssuePrediction, context)
    prediction = engine.predict(SAMPLE_ISSUE)

    assert prediction.area
    assert prediction.area == "area-signalr"
    assert len(prediction.score) == 3
    assert sum(prediction.score) == pytest.approx(1.0)
    assert prediction.probability == max(prediction.score)


@pytest.mark.parametrize("size", [0, 1, 2, 5])
def test_batch_prediction_preserves_order(context, sentiment_model, size):
    texts = ["I love it", "Horrible food", "Great staff", "Bad service", "The soup was perfect"][:size]
    engine = create_prediction_engine(sentiment_model, SentimentData, SentimentPrediction, context)

    results = list(engine.predict_batch(SentimentData(sentiment_text=text) for text in texts))

    assert [item.sentiment_text for item in results] == texts
    singles = [engine.predict(SentimentData(sentiment_text=text)) for text in texts]
    assert [item.probability for item in results] == pytest.approx([item.probability for item in singles])


def test_batch_prediction_is_lazy(sentiment_model):
    engine = PredictionEngine(sentiment_model, SentimentData, SentimentPrediction, batch_size=1)
    consumed = []

    def records():
        for text in ["good", "bad", "great"]:
            consumed.append(text)
            yield SentimentData(sentiment_text=text)

    results = engine.predict_batch(records())
    assert consumed == []
    next(results)
    assert consumed == ["good"]


def test_input_type_must_match_model_schema(sentiment_model):
    with pytest.raises(SchemaMismatch):
        PredictionEngine(sentiment_model, GitHubIssue, SentimentPrediction)


@dataclass
class _Explained:
    probability: float = column("Probability", default=0.0)
    reasons: str = column("Reasons", default="")


def test_output_type_must_read_produced_columns(sentiment_model):
    with pytest.raises(SchemaMismatch):
        PredictionEngine(sentiment_model, SentimentData, _Explained)


def test_batch_size_must_be_positive(sentiment_model):
    with pytest.raises(ValueError):
        PredictionEngine(sentiment_model, SentimentData, SentimentPrediction, batch_size=0)
