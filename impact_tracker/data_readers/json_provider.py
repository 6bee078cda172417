"""JSON data provider for static datasets in the data/ directory.

Caches files in-memory to minimize I/O. The rubric dataset is turned into a
RubricTaxonomy once per process and handed out through get_rubric_taxonomy(),
which routers declare as a FastAPI dependency.

PySecure-4-Minimal:
- Validate input filename to prevent path traversal.
- Handle errors with structured exceptions (no stack leaks).
"""
from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

from fastapi import HTTPException

from impact_tracker.core.config import get_settings
from impact_tracker.rubric.taxonomy import RubricTaxonomy

logger = logging.getLogger(__name__)

DATA_EXT = ".json"


def _data_dir() -> Path:
    settings = get_settings()
    return Path(settings.data_dir).resolve()


def _validate_filename(name: str) -> str:
    if "/" in name or "\\" in name or ".." in name:
        raise HTTPException(status_code=400, detail="Invalid dataset name")
    if not name.endswith(DATA_EXT):
        raise HTTPException(status_code=400, detail="Dataset must be a .json file")
    return name


@lru_cache(maxsize=32)
def _load(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise HTTPException(status_code=404, detail=f"Dataset not found: {path.name}")
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError:
        logger.error("Dataset parse error: %s", path.name)
        raise HTTPException(status_code=500, detail=f"Dataset parse error: {path.name}")


def load_dataset(name: str) -> Dict[str, Any]:
    """Load a JSON dataset by filename from the configured data directory."""
    fname = _validate_filename(name)
    return _load(_data_dir() / fname)


@lru_cache(maxsize=4)
def _build_taxonomy(path: Path) -> RubricTaxonomy:
    taxonomy = RubricTaxonomy.from_dataset(_load(path))
    logger.info(
        "Loaded rubric taxonomy from %s: %d expectations",
        path.name,
        taxonomy.expectation_count,
    )
    return taxonomy


# PUBLIC_INTERFACE
def get_rubric_taxonomy() -> RubricTaxonomy:
    """Return the process-wide rubric taxonomy built from RUBRIC_DATASET.

    Raises:
        HTTPException: 404/500 if the dataset is missing or not JSON.
        RubricDataError: If the dataset content is malformed.
    """
    settings = get_settings()
    fname = _validate_filename(settings.rubric_dataset)
    return _build_taxonomy(_data_dir() / fname)


# PUBLIC_INTERFACE
def reset_dataset_cache() -> None:
    """Drop cached datasets and taxonomies (tests switch DATA_DIR between runs)."""
    _load.cache_clear()
    _build_taxonomy.cache_clear()
