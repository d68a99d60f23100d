# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2026 muffydu37
from __future__ import annotations

import logging
import os
import pickle
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import joblib

from .errors import FormatError, StorageError
from .schemas import Schema
from .training.pipeline import TransformerChain

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


def _timestamp_key() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def save_model(
    model: TransformerChain,
    schema: Schema,
    path: Path | str,
    *,
    metadata: dict[str, Any] | None = None,
) -> Path:
    """Write ``model`` and the input ``schema`` it expects to ``path``.

    The artifact is written next to its destination and renamed into place,
    so a failed save never leaves a partial file behind.
    """
    path = Path(path)
    info = {"model_version": _timestamp_key(), "created_at_utc": _iso_now()}
    info.update(metadata or {})
    payload = {"format_version": FORMAT_VERSION, "schema": schema, "model": model, "metadata": info}

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handle, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    except OSError as exc:
        raise StorageError(f"Cannot write model to {path}: {exc}") from exc
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(handle, "wb") as stream:
            joblib.dump(payload, stream)
        os.replace(tmp_path, path)
    except OSError as exc:
        raise StorageError(f"Cannot write model to {path}: {exc}") from exc
    finally:
        # Still present only when the dump or the rename failed.
        tmp_path.unlink(missing_ok=True)
    logger.info("Saved model %s to %s", info["model_version"], path)
    return path


def _read_payload(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise StorageError(f"Model file not found: {path}")
    try:
        payload = joblib.load(path)
    except OSError as exc:
        raise StorageError(f"Cannot read model file {path}: {exc}") from exc
    except (pickle.UnpicklingError, EOFError, ValueError, KeyError, IndexError, AttributeError, ImportError, TypeError) as exc:
        raise FormatError(f"{path} is not a readable model artifact: {exc}") from exc

    if not isinstance(payload, dict) or "format_version" not in payload:
        raise FormatError(f"{path} is not a model artifact")
    if payload["format_version"] != FORMAT_VERSION:
        raise FormatError(
            f"{path} has format version {payload['format_version']!r}, expected {FORMAT_VERSION}"
        )
    if not isinstance(payload.get("model"), TransformerChain) or not isinstance(payload.get("schema"), Schema):
        raise FormatError(f"{path} does not hold a trained model and its schema")
    return payload


def load_model(path: Path | str) -> tuple[TransformerChain, Schema]:
    """Read back a model saved with :func:`save_model` with the schema it expects."""
    payload = _read_payload(Path(path))
    logger.info("Loaded model %s from %s", payload.get("metadata", {}).get("model_version", "unknown"), path)
    return payload["model"], payload["schema"]


def load_model_metadata(path: Path | str) -> dict[str, Any]:
    return dict(_read_payload(Path(path)).get("metadata") or {})
