"""
Daily note path resolution.

Renders a notebook's daily note path template through the store, falling
back to the default template so callers always get a usable path.
"""

import logging
from datetime import date
from typing import Callable, Optional, Tuple

from ..models import Notebook
from ..store import BaseDocumentStore


DEFAULT_SPRIG = '/daily note/{{now | date "2006/01"}}/{{now | date "2006-01-02"}}'


def default_daily_path(day: date) -> str:
    """Local expansion of DEFAULT_SPRIG."""
    return f"/daily note/{day:%Y}/{day:%m}/{day:%Y-%m-%d}"


class PathResolver:
    """
    Turns path templates into concrete hpaths. Never returns an empty path.
    """

    def __init__(self, store: BaseDocumentStore, today: Optional[Callable[[], date]] = None):
        self.store = store
        self.today = today or date.today

    def resolve(self, template: str) -> str:
        """
        Render a path template.

        Args:
            template: The notebook's template; may be empty

        Returns:
            A non-empty hierarchical path
        """
        return self._render(template)[1]

    def _render(self, template: str) -> Tuple[str, str]:
        """Returns the template actually used and its rendered path."""
        if template:
            path = self.store.render_path_template(template)
            if path:
                return template, path
            logging.warning(f"Invalid daily note template {template!r}, using the default")

        path = self.store.render_path_template(DEFAULT_SPRIG)
        if not path:
            logging.warning("Store rendered the default daily note template empty, expanding locally")
            path = default_daily_path(self.today())
        return DEFAULT_SPRIG, path

    def resolve_notebook(self, notebook: Notebook) -> Notebook:
        """Fill in the notebook's daily note template and today's path."""
        template = self.store.get_notebook_config(notebook.id).get("path_template", "")
        notebook.daily_note_sprig, notebook.daily_note_path = self._render(template)
        logging.info(f"{notebook.name}: {notebook.daily_note_sprig} - {notebook.daily_note_path}")
        return notebook
