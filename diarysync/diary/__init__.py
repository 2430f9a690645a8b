"""Daily document resolution and relocation."""

from .locator import DiaryLocator, block_url
from .notebooks import HIDDEN_NOTEBOOKS, load_notebooks_with_retry, select_notebooks
from .paths import DEFAULT_SPRIG, PathResolver, default_daily_path
from .relocate import SubtreeRelocator

__all__ = [
    "DiaryLocator",
    "block_url",
    "HIDDEN_NOTEBOOKS",
    "load_notebooks_with_retry",
    "select_notebooks",
    "DEFAULT_SPRIG",
    "PathResolver",
    "default_daily_path",
    "SubtreeRelocator",
]
