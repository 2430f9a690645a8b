"""
Reservation block upsert.

Each target document holds at most one block named "Reservation". A sync
looks that block up inside the document and rewrites it, or inserts a new
one when there is none.
"""

import logging
from typing import Dict, Optional

from ..models import BlockQuery, ContentBlock
from ..store import BaseDocumentStore
from .renderers import ReservationRenderer


class SyncEngine:
    """
    Keeps the rendered reservation block of a document up to date.
    """

    def __init__(self, store: BaseDocumentStore, marker: str = "Reservation"):
        self.store = store
        self.marker = marker

    @property
    def marker_attributes(self) -> Dict[str, str]:
        return {"name": self.marker, "breadcrumb": "true"}

    def locate(self, document_id: str) -> Optional[ContentBlock]:
        """Find the marked block inside a document."""
        blocks = self.store.query(BlockQuery(root_id=document_id, name=self.marker))
        if len(blocks) > 1:
            logging.warning(f"Found {len(blocks)} {self.marker} blocks in {document_id}, updating the first")
        return blocks[0] if blocks else None

    def sync(self, renderer: ReservationRenderer) -> str:
        """
        Write the renderer's content into its target document.

        Args:
            renderer: Renderer bound to the target document

        Returns:
            Id of the marked block
        """
        document_id = renderer.target_document_id
        existing = self.locate(document_id)
        content = renderer.create_content()

        if existing is not None:
            block_id = existing.id
            self.store.update_block(block_id, content)
            logging.info(f"Updated {self.marker} block {block_id} in {document_id}")
        else:
            block_id = self.store.insert_block(document_id, content, renderer.position)
            logging.info(f"Inserted {self.marker} block {block_id} at {renderer.position.value} of {document_id}")

        # Attributes are re-asserted after every write
        self.store.set_block_attributes(block_id, self.marker_attributes)
        return block_id
