"""
Notebook discovery.

The store may not be ready when discovery first runs, so startup polls a
fixed number of times with a fixed delay and then gives up.
"""

import logging
import time
from typing import Callable, Iterable, List, Optional

from ..config import DiarySettings, NotebookSort
from ..errors import ExternalStoreError
from ..models import DEFAULT_NOTEBOOK_ICON, Notebook
from ..store import BaseDocumentStore
from .paths import PathResolver


HIDDEN_NOTEBOOKS = frozenset(["思源笔记用户指南", "SiYuan User Guide"])


def select_notebooks(store: BaseDocumentStore, resolver: PathResolver, settings: DiarySettings,
                     hidden: Iterable[str] = ()) -> Optional[List[Notebook]]:
    """
    List the notebooks to offer, with today's daily path resolved.

    Closed and hidden notebooks are dropped; with the custom-sort setting the
    notebooks are ordered by their sort key, otherwise store order is kept.

    Returns:
        The notebooks, or None if the store could not be queried
    """
    hidden_names = HIDDEN_NOTEBOOKS.union(hidden)
    try:
        notebooks = [
            notebook for notebook in store.list_notebooks()
            if not notebook.closed and notebook.name not in hidden_names
        ]
        if settings.notebook_sort == NotebookSort.CUSTOM_SORT:
            notebooks.sort(key=lambda notebook: notebook.sort)

        for notebook in notebooks:
            if not notebook.icon:
                notebook.icon = DEFAULT_NOTEBOOK_ICON
            resolver.resolve_notebook(notebook)

    except ExternalStoreError as e:
        logging.error(f"Failed to read notebooks: {e}")
        return None

    logging.info(f"Read all notebooks: {[notebook.name for notebook in notebooks]}")
    return notebooks


def load_notebooks_with_retry(load: Callable[[], Optional[List[Notebook]]], max_retries: int = 5,
                              retry_delay: float = 1.0,
                              sleep: Callable[[float], None] = time.sleep) -> List[Notebook]:
    """
    Call `load` until it returns notebooks, at most `max_retries` times.

    Returns:
        The loaded notebooks, or an empty list when every attempt failed
    """
    for attempt in range(1, max_retries + 1):
        notebooks = load()
        if notebooks is not None:
            return notebooks
        logging.warning(f"Notebook discovery attempt {attempt}/{max_retries} failed")
        if attempt < max_retries:
            sleep(retry_delay)

    logging.error(f"Giving up notebook discovery after {max_retries} attempts")
    return []
