"""
Mock document store for testing diarysync.

This module provides an in-memory store with notebooks, documents and
ordered blocks, so the core can be exercised without a running SiYuan
kernel.
"""

import logging
import re
import uuid
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from ..errors import ExternalStoreError
from ..models import BlockKind, BlockQuery, ContentBlock, InsertPosition, Notebook
from .base import BaseDocumentStore


# Go reference-time tokens understood by the sprig `date` filter, longest first
GO_DATE_TOKENS = [
    ("January", "%B"),
    ("Monday", "%A"),
    ("2006", "%Y"),
    ("Jan", "%b"),
    ("Mon", "%a"),
    ("01", "%m"),
    ("02", "%d"),
    ("06", "%y"),
    ("15", "%H"),
    ("04", "%M"),
    ("05", "%S"),
]

SPRIG_DATE_PATTERN = re.compile(r'\{\{\s*now\s*\|\s*date\s+"([^"]*)"\s*\}\}')


def go_date_format(layout: str, moment: datetime) -> str:
    """Format `moment` using a Go reference-time layout such as "2006-01-02"."""
    out = []
    i = 0
    while i < len(layout):
        for token, directive in GO_DATE_TOKENS:
            if layout.startswith(token, i):
                out.append(moment.strftime(directive))
                i += len(token)
                break
        else:
            out.append(layout[i])
            i += 1
    return "".join(out)


class MockDocumentStore(BaseDocumentStore):
    """
    In-memory document store.

    Documents are blocks of kind DOCUMENT; every block keeps an ordered list
    of children. Headings own the siblings that follow them up to the next
    heading of the same or a higher level, like in SiYuan.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize an empty mock store.

        Args:
            clock: Source of "now" for path template rendering
        """
        self.clock = clock or datetime.now
        self._notebooks: List[Notebook] = []
        self._path_templates: Dict[str, str] = {}
        self._blocks: Dict[str, ContentBlock] = {}
        self._children: Dict[str, List[str]] = {}
        self._order: List[str] = []

    @classmethod
    def with_sample_data(cls, clock: Optional[Callable[[], datetime]] = None) -> "MockDocumentStore":
        """
        Create a store holding two notebooks, an inbox document and a few reservations.

        Used by the command line `--store mock` mode for trying things out.
        """
        store = cls(clock=clock)
        store.add_notebook("SiYuan User Guide", sort=0)
        work = store.add_notebook("Work", sort=2, path_template='/daily/{{now | date "2006-01-02"}}')
        personal = store.add_notebook("Personal", sort=1)

        today = store.clock()
        inbox = store.create_document(personal.id, "/Inbox")
        store.add_block(inbox, "Groceries", BlockKind.HEADING, subtype="h2")
        store.add_block(inbox, "Buy milk", attributes={"custom-reservation": today.strftime("%Y%m%d")})
        store.add_block(inbox, "Call the bakery about Saturday")
        store.add_block(inbox, "Reading", BlockKind.HEADING, subtype="h2")
        store.add_block(inbox, "Finish chapter three",
                        attributes={"custom-reservation": (today.replace(day=1)).strftime("%Y%m%d")})

        projects = store.create_document(work.id, "/Projects")
        store.add_block(projects, "Send the quarterly report",
                        attributes={"custom-reservation": today.strftime("%Y%m%d")})
        return store

    # Seeding helpers

    def add_notebook(self, name: str, notebook_id: Optional[str] = None, sort: int = 0,
                     icon: str = "", closed: bool = False, path_template: str = "") -> Notebook:
        notebook = Notebook(
            id=notebook_id or self._new_id(),
            name=name,
            sort=sort,
            icon=icon,
            closed=closed,
        )
        self._notebooks.append(notebook)
        self._path_templates[notebook.id] = path_template
        return notebook

    def add_block(self, parent_id: str, content: str, kind: BlockKind = BlockKind.PARAGRAPH,
                  subtype: str = "", attributes: Optional[Dict[str, str]] = None) -> str:
        """Append a block to `parent_id` and return its id."""
        parent = self._require(parent_id)
        block = ContentBlock(
            id=self._new_id(),
            kind=kind,
            subtype=subtype,
            content=content,
            markdown=content,
            attributes=dict(attributes or {}),
        )
        self._register(block)
        self._attach(block.id, parent, len(self._children[parent.id]))
        return block.id

    def document_blocks(self, document_id: str) -> List[str]:
        """Ids of the top-level blocks of a document, in order."""
        return list(self._children.get(document_id, []))

    # BaseDocumentStore

    def query(self, query: BlockQuery) -> List[ContentBlock]:
        matches: List[Tuple[str, ContentBlock]] = []
        for block_id in self._order:
            block = self._blocks[block_id]
            if query.block_type is not None and block.kind != query.block_type:
                continue
            if query.hpath is not None and block.hpath != query.hpath:
                continue
            if query.box is not None and block.box != query.box:
                continue
            if query.root_id is not None and block.root_id != query.root_id:
                continue
            if query.name is not None and block.name != query.name:
                continue
            if query.ids is not None and block.id not in query.ids:
                continue
            value = ""
            if query.attribute is not None:
                value = block.attributes.get(query.attribute.name)
                if not query.attribute.matches(value):
                    continue
            matches.append((value, block))

        if query.order_by_attribute:
            matches.sort(key=lambda match: match[0])
        blocks = [block.model_copy(deep=True) for _, block in matches]
        if query.limit is not None:
            blocks = blocks[:query.limit]
        return blocks

    def get_block_by_id(self, block_id: str) -> Optional[ContentBlock]:
        block = self._blocks.get(block_id)
        return block.model_copy(deep=True) if block else None

    def get_child_blocks(self, block_id: str) -> List[ContentBlock]:
        block = self._require(block_id)
        if block.kind != BlockKind.HEADING:
            return [self._blocks[child].model_copy(deep=True) for child in self._children[block_id]]

        siblings = self._children[block.parent_id] if block.parent_id else []
        children = []
        for sibling_id in siblings[siblings.index(block_id) + 1:]:
            sibling = self._blocks[sibling_id]
            if sibling.kind == BlockKind.HEADING and sibling.heading_level <= block.heading_level:
                break
            children.append(sibling.model_copy(deep=True))
        return children

    def create_document(self, notebook_id: str, path: str, markdown: str = "") -> str:
        if notebook_id not in self._path_templates:
            raise ExternalStoreError(f"Notebook {notebook_id} not found", endpoint="createDocument")
        document = ContentBlock(
            id=self._new_id(),
            kind=BlockKind.DOCUMENT,
            content=path.rstrip("/").split("/")[-1],
            box=notebook_id,
            hpath=path,
        )
        document.root_id = document.id
        self._register(document)
        logging.info(f"Mock store created document {document.id} at {path}")
        if markdown:
            self.insert_block(document.id, markdown, InsertPosition.BOTTOM)
        return document.id

    def move_block(self, block_id: str, previous_id: Optional[str] = None,
                   parent_id: Optional[str] = None) -> None:
        self._check_move_target(previous_id, parent_id)
        block = self._require(block_id)
        if previous_id is not None:
            previous = self._require(previous_id)
            if previous.parent_id is None:
                raise ExternalStoreError(f"Cannot place a block after document {previous_id}", endpoint="moveBlock")
            self._detach(block)
            parent = self._blocks[previous.parent_id]
            self._attach(block.id, parent, self._children[parent.id].index(previous_id) + 1)
        else:
            parent = self._require(parent_id)
            self._detach(block)
            self._attach(block.id, parent, 0)

    def insert_block(self, document_id: str, markdown: str,
                     position: InsertPosition = InsertPosition.BOTTOM) -> str:
        document = self._require(document_id)
        index = 0 if position == InsertPosition.TOP else len(self._children[document.id])
        kind, subtype, content = self._parse_markdown(markdown)
        block = ContentBlock(id=self._new_id(), kind=kind, subtype=subtype,
                             content=content, markdown=markdown)
        self._register(block)
        self._attach(block.id, document, index)
        if kind == BlockKind.LIST:
            for line in markdown.splitlines():
                self.add_block(block.id, line[2:].strip(), BlockKind.LIST_ITEM)
        return block.id

    def update_block(self, block_id: str, markdown: str) -> None:
        block = self._require(block_id)
        block.kind, block.subtype, block.content = self._parse_markdown(markdown)
        block.markdown = markdown

    def set_block_attributes(self, block_id: str, attributes: Dict[str, str]) -> None:
        block = self._require(block_id)
        for key, value in attributes.items():
            if value == "":
                block.attributes.pop(key, None)
            else:
                block.attributes[key] = value

    def render_path_template(self, template: str) -> str:
        now = self.clock()
        rendered = SPRIG_DATE_PATTERN.sub(lambda m: go_date_format(m.group(1), now), template)
        if "{{" in rendered or "}}" in rendered:
            # SiYuan renders unparseable templates as an empty string
            return ""
        return rendered

    def get_notebook_config(self, notebook_id: str) -> Dict[str, str]:
        if notebook_id not in self._path_templates:
            raise ExternalStoreError(f"Notebook {notebook_id} not found", endpoint="getNotebookConf")
        return {"path_template": self._path_templates[notebook_id]}

    def list_notebooks(self) -> List[Notebook]:
        return [notebook.model_copy() for notebook in self._notebooks]

    # Internals

    def _new_id(self) -> str:
        return f"{self.clock().strftime('%Y%m%d%H%M%S')}-{uuid.uuid4().hex[:7]}"

    def _require(self, block_id: Optional[str]) -> ContentBlock:
        block = self._blocks.get(block_id or "")
        if block is None:
            raise ExternalStoreError(f"Block {block_id} not found", endpoint="block")
        return block

    def _register(self, block: ContentBlock) -> None:
        self._blocks[block.id] = block
        self._children[block.id] = []
        self._order.append(block.id)

    def _detach(self, block: ContentBlock) -> None:
        if block.parent_id is not None:
            self._children[block.parent_id].remove(block.id)
            block.parent_id = None

    def _attach(self, block_id: str, parent: ContentBlock, index: int) -> None:
        self._children[parent.id].insert(index, block_id)
        self._blocks[block_id].parent_id = parent.id
        self._relocate_tree(block_id, parent)

    def _relocate_tree(self, block_id: str, parent: ContentBlock) -> None:
        block = self._blocks[block_id]
        block.root_id = parent.root_id
        block.box = parent.box
        block.hpath = parent.hpath
        for child_id in self._children[block_id]:
            self._relocate_tree(child_id, block)

    @staticmethod
    def _parse_markdown(markdown: str) -> Tuple[BlockKind, str, str]:
        text = markdown.strip()
        heading = re.match(r"^(#{1,6})\s+(.*)$", text)
        if heading:
            return BlockKind.HEADING, f"h{len(heading.group(1))}", heading.group(2)
        if text.startswith(("* ", "- ")) or text in ("*", "-"):
            return BlockKind.LIST, "u", text
        if text.startswith("{{") and text.endswith("}}"):
            return BlockKind.EMBED, "", text
        return BlockKind.PARAGRAPH, "", text
