"""
Canonical data models for diarysync.

This module defines the structures the core uses to talk about the external
document store: notebooks and the content blocks inside their documents.
"""

from enum import Enum
from typing import Dict, Optional
from pydantic import BaseModel, Field


DEFAULT_NOTEBOOK_ICON = "1f5c3"


class BlockKind(str, Enum):
    """Block types as reported by the store (SiYuan type codes)."""

    DOCUMENT = "d"
    HEADING = "h"
    LIST = "l"
    LIST_ITEM = "i"
    PARAGRAPH = "p"
    BLOCKQUOTE = "b"
    SUPER_BLOCK = "s"
    CODE = "c"
    TABLE = "t"
    EMBED = "query_embed"
    OTHER = "other"

    @classmethod
    def from_code(cls, code: Optional[str]) -> "BlockKind":
        for kind in cls:
            if kind.value == code:
                return kind
        return cls.OTHER

    @property
    def is_container(self) -> bool:
        """Whether nested content is reachable as children of this block."""
        return self in (
            BlockKind.DOCUMENT,
            BlockKind.LIST,
            BlockKind.LIST_ITEM,
            BlockKind.BLOCKQUOTE,
            BlockKind.SUPER_BLOCK,
        )


class ContentBlock(BaseModel):
    """
    Any node of a document tree in the external store.

    The core never owns blocks; it reads them, moves them and creates new
    ones through the store interface.
    """

    id: str = Field(
        ...,
        description="The store-assigned block identifier"
    )

    kind: BlockKind = Field(
        BlockKind.OTHER,
        description="Block type (heading, list item, container, ...)"
    )

    subtype: str = Field(
        "",
        description="Store subtype, e.g. 'h2' for a level-two heading"
    )

    content: str = Field(
        "",
        description="Plain text content of the block"
    )

    markdown: str = Field(
        "",
        description="Markdown source of the block"
    )

    root_id: str = Field(
        "",
        description="Id of the document containing this block"
    )

    parent_id: Optional[str] = Field(
        None,
        description="Id of the structural parent block"
    )

    box: str = Field(
        "",
        description="Id of the notebook containing this block"
    )

    hpath: str = Field(
        "",
        description="Human-readable hierarchical path of the containing document"
    )

    attributes: Dict[str, str] = Field(
        default_factory=dict,
        description="Block attributes (name, custom-* attributes, ...)"
    )

    @property
    def name(self) -> str:
        return self.attributes.get("name", "")

    @property
    def heading_level(self) -> int:
        """Heading level parsed from the subtype; 0 for non-headings."""
        if self.kind != BlockKind.HEADING:
            return 0
        try:
            return int(self.subtype.lstrip("h"))
        except ValueError:
            return 1


class Notebook(BaseModel):
    """
    A top-level container of documents in the store.

    The daily note fields are filled in by the path resolver after the
    notebook has been listed.
    """

    id: str = Field(..., description="Notebook identifier")
    name: str = Field(..., description="Display name")
    sort: int = Field(0, description="Custom sort key")
    icon: str = Field(DEFAULT_NOTEBOOK_ICON, description="Emoji code point used as icon")
    closed: bool = Field(False, description="Whether the notebook is closed")

    daily_note_sprig: str = Field(
        "",
        description="Path template for the daily note"
    )

    daily_note_path: str = Field(
        "",
        description="Today's rendered daily note hpath"
    )
