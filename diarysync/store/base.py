"""
Base document store interface for diarysync.

This module defines the abstract boundary between the core and the external
hierarchical document store. Every call is a blocking request/response.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..models import BlockQuery, ContentBlock, InsertPosition, Notebook


class BaseDocumentStore(ABC):
    """
    Abstract base class for document stores.

    Implementations raise ExternalStoreError when the store rejects or fails
    a call. The only relocation primitive is `move_block`; there is no
    subtree move.
    """

    @abstractmethod
    def query(self, query: BlockQuery) -> List[ContentBlock]:
        """
        Run a read-only structured query.

        Args:
            query: The filter to apply

        Returns:
            Matching blocks in store order (or attribute order when requested)
        """
        pass

    @abstractmethod
    def get_block_by_id(self, block_id: str) -> Optional[ContentBlock]:
        """Return the block with the given id, or None when it does not exist."""
        pass

    @abstractmethod
    def get_child_blocks(self, block_id: str) -> List[ContentBlock]:
        """
        Return the logical children of a block, in document order.

        For headings these are the sibling blocks nested under the heading.
        """
        pass

    @abstractmethod
    def create_document(self, notebook_id: str, path: str, markdown: str = "") -> str:
        """Create a document at `path` inside a notebook and return its id."""
        pass

    @abstractmethod
    def move_block(self, block_id: str, previous_id: Optional[str] = None,
                   parent_id: Optional[str] = None) -> None:
        """
        Move a block after `previous_id`, or into `parent_id`.

        Exactly one of `previous_id` / `parent_id` must be given.
        """
        pass

    @abstractmethod
    def insert_block(self, document_id: str, markdown: str,
                     position: InsertPosition = InsertPosition.BOTTOM) -> str:
        """Insert markdown at the top or bottom of a document; return the new block id."""
        pass

    @abstractmethod
    def update_block(self, block_id: str, markdown: str) -> None:
        """Overwrite the content of an existing block."""
        pass

    @abstractmethod
    def set_block_attributes(self, block_id: str, attributes: Dict[str, str]) -> None:
        """Set (merge) attributes on a block."""
        pass

    @abstractmethod
    def render_path_template(self, template: str) -> str:
        """Expand a path template; may return an empty string."""
        pass

    @abstractmethod
    def get_notebook_config(self, notebook_id: str) -> Dict[str, str]:
        """Return the notebook configuration; `path_template` holds the daily note sprig."""
        pass

    @abstractmethod
    def list_notebooks(self) -> List[Notebook]:
        """List every notebook in store order."""
        pass

    @staticmethod
    def _check_move_target(previous_id: Optional[str], parent_id: Optional[str]) -> None:
        if (previous_id is None) == (parent_id is None):
            raise ValueError("Exactly one of previous_id or parent_id must be set")
