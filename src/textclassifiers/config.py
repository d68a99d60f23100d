# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2026 muffydu37
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .env import get_env, get_int_env

SEED_ENV = "TEXTCLASSIFIERS_SEED"
BATCH_SIZE_ENV = "TEXTCLASSIFIERS_BATCH_SIZE"
DATA_DIR_ENV = "TEXTCLASSIFIERS_DATA_DIR"
MODEL_DIR_ENV = "TEXTCLASSIFIERS_MODEL_DIR"


@dataclass(frozen=True)
class TrainingContext:
    """Settings shared by every stage of a run.

    Passed explicitly to the trainers and prediction engines that need it.
    ``seed=None`` lets the solver draw its own randomness.
    """

    seed: int | None = 0
    batch_size: int = 256

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")

    @classmethod
    def from_env(cls, *, seed: int | None = 0) -> "TrainingContext":
        raw_seed = get_env(SEED_ENV)
        if raw_seed is not None:
            seed = None if raw_seed.lower() == "none" else get_int_env(SEED_ENV, 0)
        return cls(seed=seed, batch_size=get_int_env(BATCH_SIZE_ENV, 256))


@dataclass(frozen=True)
class ProgramPaths:
    data_dir: Path
    model_dir: Path

    @classmethod
    def from_env(cls, base_dir: Path | None = None) -> "ProgramPaths":
        root = base_dir or Path.cwd()
        data_dir = Path(get_env(DATA_DIR_ENV, str(root / "data")) or root / "data")
        model_dir = Path(get_env(MODEL_DIR_ENV, str(root / "models")) or root / "models")
        return cls(data_dir=data_dir, model_dir=model_dir)

    def data_file(self, name: str) -> Path:
        return self.data_dir / name

    def model_file(self, name: str) -> Path:
        return self.model_dir / name
