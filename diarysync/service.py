"""
Caller-facing operations for diarysync.

DiaryContext bundles the store, the configuration and the cached notebook
list. Front ends create one at startup and call its methods; there is no
module-level state.
"""

import logging
import time
from typing import Callable, Dict, List, Optional, Union

from .config import ConfigManager, ListItemPolicy
from .diary import DiaryLocator, PathResolver, SubtreeRelocator, load_notebooks_with_retry, select_notebooks
from .errors import NotFoundError
from .models import InsertPosition, Notebook, RenderVariant, SyncRequest
from .reservation import ReservationRenderer, ReservationSelector, SyncEngine, TimeWindow, parse_variant
from .store import BaseDocumentStore


class DiaryContext:
    """
    Explicit context for every daily-note operation.
    """

    def __init__(self, store: BaseDocumentStore, config: ConfigManager,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize the context.

        Args:
            store: Document store to operate on
            config: Loaded configuration; mutations are saved by the manager
            sleep: Sleep function used by the startup poll
        """
        self.store = store
        self.config = config
        self.sleep = sleep
        self.notebooks: List[Notebook] = []

        self.resolver = PathResolver(store)
        self.locator = DiaryLocator(store)
        self.relocator = SubtreeRelocator(store)
        self.selector = ReservationSelector(store, attribute=config.reservation_attribute)
        self.sync_engine = SyncEngine(store, marker=config.reservation_marker)

    # Notebooks

    def select_notebooks(self) -> Optional[List[Notebook]]:
        """Visible notebooks in configured order, or None if the store failed."""
        return select_notebooks(self.store, self.resolver, self.config.settings,
                                hidden=self.config.hidden_notebooks)

    def load_notebooks(self) -> List[Notebook]:
        """Initial discovery with the bounded startup poll."""
        self.notebooks = load_notebooks_with_retry(
            self.select_notebooks,
            max_retries=self.config.startup_max_retries,
            retry_delay=self.config.startup_retry_delay,
            sleep=self.sleep,
        )
        return self.notebooks

    def refresh_notebooks(self) -> List[Notebook]:
        result = self.select_notebooks()
        self.notebooks = result if result is not None else []
        return self.notebooks

    def get_notebook(self, key: str) -> Notebook:
        """
        Find a cached notebook by id or name.

        Raises:
            NotFoundError: If no notebook matches
        """
        for notebook in self.notebooks:
            if key in (notebook.id, notebook.name):
                return notebook
        raise NotFoundError(f"Notebook {key} not found")

    def default_notebook(self) -> Optional[Notebook]:
        """The configured default notebook, else the first one."""
        default_id = self.config.settings.default_notebook
        if default_id:
            try:
                return self.get_notebook(default_id)
            except NotFoundError:
                logging.warning(f"Default notebook {default_id} not found, using the first notebook")
        return self.notebooks[0] if self.notebooks else None

    # Diaries

    def resolve_diary(self, notebook: Notebook) -> str:
        """Id of today's diary of a notebook, created if needed."""
        if not notebook.daily_note_path:
            self.resolver.resolve_notebook(notebook)
        return self.locator.resolve(notebook)

    def diary_status(self) -> Dict[str, bool]:
        return self.locator.diary_status(self.notebooks)

    def open_on_start(self) -> Optional[str]:
        """Resolve the default notebook's diary if open-on-start is enabled."""
        if not self.config.settings.open_on_start:
            return None
        notebook = self.default_notebook()
        if notebook is None:
            logging.info("No notebook to open on start")
            return None
        logging.info(f"Auto open daily note of {notebook.name}")
        return self.resolve_diary(notebook)

    def relocate_into_diary(self, source_block_id: str, notebook: Notebook,
                            list_item_policy: Optional[Union[str, ListItemPolicy]] = None) -> str:
        """
        Move a block (with its heading children) into today's diary.

        Args:
            source_block_id: Block to move
            notebook: Notebook whose diary receives the block
            list_item_policy: Overrides the configured list-item policy

        Returns:
            Id of the moved root block

        Raises:
            NotFoundError: If the block does not exist
            PolicyViolation: If a list item is moved while the policy is disabled
        """
        policy = ListItemPolicy(list_item_policy or self.config.settings.move_list_item_policy)
        block = self.store.get_block_by_id(source_block_id)
        if block is None:
            raise NotFoundError(f"Block {source_block_id} not found")

        # Rejected list items must not create a diary either
        self.relocator.check_policy(block, policy)

        document_id = self.resolve_diary(notebook)
        return self.relocator.relocate(block, document_id, policy)

    # Reservations

    def sync_reservations(self, variant: Union[str, RenderVariant], position: Union[str, InsertPosition],
                          window: TimeWindow, target_document_id: str) -> str:
        """
        Render the reservations in `window` into the target document.

        Returns:
            Id of the marked reservation block
        """
        # Invalid variants and positions fail before any store call
        variant = parse_variant(variant)
        position = InsertPosition(position)

        items = self.selector.select(window)
        request = SyncRequest(
            variant=variant,
            position=position,
            item_ids=[item.id for item in items],
            target_document_id=target_document_id,
        )
        return self.sync_engine.sync(ReservationRenderer.from_request(request, self.store.get_block_by_id))
