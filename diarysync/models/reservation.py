"""
Reservation models for diarysync.

A reservation is a block carrying a due-date attribute; its rendering inside
a daily document is described by a SyncRequest.
"""

from enum import Enum
from typing import List
from pydantic import BaseModel, Field


SNIPPET_LENGTH = 50


def clip_text(text: str, length: int = SNIPPET_LENGTH) -> str:
    """Clip text to `length` characters, marking the cut with an ellipsis."""
    if len(text) > length:
        return text[:length] + "..."
    return text


class RenderVariant(str, Enum):
    EMBED = "embed"
    LINK = "link"
    REFERENCE = "reference"


class InsertPosition(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"


class ReservationItem(BaseModel):
    """A block scheduled for a given day."""

    id: str = Field(..., description="Source block id")
    content: str = Field("", description="Text content of the source block")
    date: str = Field(..., description="Due date as a YYYYMMDD string")


class SyncRequest(BaseModel):
    """Describes one reservation sync into a target document."""

    variant: RenderVariant = Field(RenderVariant.EMBED, description="How items are rendered")
    position: InsertPosition = Field(InsertPosition.TOP, description="Where a new block goes")
    item_ids: List[str] = Field(default_factory=list, description="Reservation block ids")
    target_document_id: str = Field(..., description="Daily document receiving the block")
