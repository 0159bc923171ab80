"""Load and validate interview question catalogs."""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path

from pydantic import ValidationError

from interview_catalog.catalog_models import QuestionCatalog


DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "catalogs" / "fullstack.json"


def resolve_catalog_path(catalog_path: str | None = None) -> Path:
    """Resolve explicit path, then INTERVIEW_CATALOG_PATH, then the packaged default."""
    raw_path = (catalog_path or os.environ.get("INTERVIEW_CATALOG_PATH") or "").strip()
    if not raw_path:
        return DEFAULT_CATALOG_PATH
    return Path(raw_path).expanduser()


def load_catalog(catalog_path: str | None = None) -> QuestionCatalog:
    """Load a question catalog JSON from disk with strict validation."""
    resolved_path = resolve_catalog_path(catalog_path).resolve()
    if not resolved_path.exists():
        raise RuntimeError(
            f"Question catalog not found at '{resolved_path}'. "
            "Set INTERVIEW_CATALOG_PATH or provide a valid --catalog path."
        )

    try:
        with open(resolved_path, "r", encoding="utf-8") as catalog_file:
            raw_catalog = json.load(catalog_file)
    except OSError as exc:
        raise RuntimeError(
            f"Failed to read question catalog '{resolved_path}': {exc}"
        ) from exc
    except json.JSONDecodeError as exc:
        raise RuntimeError(
            f"Question catalog at '{resolved_path}' is not valid JSON: {exc}"
        ) from exc

    try:
        return QuestionCatalog.model_validate(raw_catalog)
    except ValidationError as exc:
        raise RuntimeError(
            f"Question catalog validation failed for '{resolved_path}': {exc}"
        ) from exc


@lru_cache(maxsize=1)
def default_catalog() -> QuestionCatalog:
    """The packaged catalog, parsed once per process."""
    return load_catalog(str(DEFAULT_CATALOG_PATH))
