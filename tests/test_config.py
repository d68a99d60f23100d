from pathlib import Path

import pytest

from textclassifiers.config import (
    BATCH_SIZE_ENV,
    DATA_DIR_ENV,
    MODEL_DIR_ENV,
    SEED_ENV,
    ProgramPaths,
    TrainingContext,
)
from textclassifiers.env import get_env, get_int_env


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (SEED_ENV, BATCH_SIZE_ENV, DATA_DIR_ENV, MODEL_DIR_ENV):
        monkeypatch.delenv(name, raising=False)


def test_get_env_treats_blank_as_missing(monkeypatch):
    monkeypatch.setenv("TEXTCLASSIFIERS_TEST_VALUE", "   ")
    assert get_env("TEXTCLASSIFIERS_TEST_VALUE", "fallback") == "fallback"
    monkeypatch.setenv("TEXTCLASSIFIERS_TEST_VALUE", " value ")
    assert get_env("TEXTCLASSIFIERS_TEST_VALUE") == "value"


def test_get_int_env(monkeypatch):
    assert get_int_env("TEXTCLASSIFIERS_TEST_INT", 4) == 4
    monkeypatch.setenv("TEXTCLASSIFIERS_TEST_INT", "12")
    assert get_int_env("TEXTCLASSIFIERS_TEST_INT", 4) == 12
    monkeypatch.setenv("TEXTCLASSIFIERS_TEST_INT", "twelve")
    with pytest.raises(ValueError):
        get_int_env("TEXTCLASSIFIERS_TEST_INT", 4)


def test_training_context_defaults():
    context = TrainingContext.from_env()
    assert context.seed == 0
    assert context.batch_size == 256


def test_training_context_from_env(monkeypatch):
    monkeypatch.setenv(SEED_ENV, "42")
    monkeypatch.setenv(BATCH_SIZE_ENV, "8")
    assert TrainingContext.from_env() == TrainingContext(seed=42, batch_size=8)

    monkeypatch.setenv(SEED_ENV, "None")
    assert TrainingContext.from_env().seed is None


def test_training_context_rejects_bad_batch_size():
    with pytest.raises(ValueError):
        TrainingContext(batch_size=0)


def test_program_paths_default_to_working_directory(tmp_path):
    paths = ProgramPaths.from_env(tmp_path)
    assert paths.data_file("a.tsv") == tmp_path / "data" / "a.tsv"
    assert paths.model_file("m.joblib") == tmp_path / "models" / "m.joblib"


def test_program_paths_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv(DATA_DIR_ENV, str(tmp_path / "in"))
    monkeypatch.setenv(MODEL_DIR_ENV, str(tmp_path / "out"))
    paths = ProgramPaths.from_env()
    assert paths.data_dir == Path(tmp_path / "in")
    assert paths.model_dir == Path(tmp_path / "out")
