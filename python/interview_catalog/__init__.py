"""Interview question catalog package."""

from interview_catalog.catalog_loader import (
    DEFAULT_CATALOG_PATH,
    default_catalog,
    load_catalog,
)
from interview_catalog.catalog_models import (
    DIFFICULTY_LEVELS,
    QuestionCatalog,
)

__all__ = [
    "DEFAULT_CATALOG_PATH",
    "DIFFICULTY_LEVELS",
    "QuestionCatalog",
    "default_catalog",
    "load_catalog",
]
