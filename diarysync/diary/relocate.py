"""
Moving content into a daily document.

The store can only place one block at a time, either into a parent or after
a given sibling. Headings are not containers: the blocks under a heading are
its following siblings, so they are moved one by one, each placed after the
block moved before it.

A failure part-way leaves the blocks moved so far in place.
"""

import logging
from typing import List

from ..config import ListItemPolicy
from ..errors import PolicyViolation
from ..models import BlockKind, ContentBlock, InsertPosition
from ..store import BaseDocumentStore


EMPTY_LIST_MARKDOWN = "* \u200b"


class SubtreeRelocator:

    def __init__(self, store: BaseDocumentStore):
        self.store = store

    def relocate(self, source_block: ContentBlock, target_document_id: str,
                 list_item_policy: ListItemPolicy = ListItemPolicy.DIRECT) -> str:
        """
        Move a block, and the blocks under it if it is a heading, into a document.

        Args:
            source_block: Block to move
            target_document_id: Destination document
            list_item_policy: How list items are handled

        Returns:
            Id of the moved root block

        Raises:
            PolicyViolation: A list item was given while the policy is disabled
        """
        is_list_item = source_block.kind == BlockKind.LIST_ITEM
        if is_list_item:
            self.check_policy(source_block, list_item_policy)

        logging.info(f"Move block: {source_block.id} --> {target_document_id}")
        children: List[ContentBlock] = []
        if source_block.kind == BlockKind.HEADING:
            children = self.store.get_child_blocks(source_block.id)

        parent_id = target_document_id
        if is_list_item and list_item_policy == ListItemPolicy.WRAP_IN_LIST:
            parent_id = self.store.insert_block(target_document_id, EMPTY_LIST_MARKDOWN, InsertPosition.TOP)
            logging.info(f"Created list {parent_id} to hold list item {source_block.id}")

        self.store.move_block(source_block.id, parent_id=parent_id)

        previous_id = source_block.id
        for child in children:
            self.store.move_block(child.id, previous_id=previous_id)
            previous_id = child.id

        logging.info(f"Moved {source_block.id} with {len(children)} child blocks")
        return source_block.id

    @staticmethod
    def check_policy(block: ContentBlock, list_item_policy: ListItemPolicy) -> None:
        if block.kind == BlockKind.LIST_ITEM and list_item_policy == ListItemPolicy.DISABLED:
            raise PolicyViolation(f"Moving list item {block.id} is disabled")
