"""Data models for diarysync."""

from .canonical import BlockKind, ContentBlock, Notebook, DEFAULT_NOTEBOOK_ICON
from .query import AttributeFilter, BlockQuery, Comparison
from .reservation import (
    InsertPosition,
    RenderVariant,
    ReservationItem,
    SyncRequest,
    clip_text,
)

__all__ = [
    "BlockKind",
    "ContentBlock",
    "Notebook",
    "DEFAULT_NOTEBOOK_ICON",
    "AttributeFilter",
    "BlockQuery",
    "Comparison",
    "InsertPosition",
    "RenderVariant",
    "ReservationItem",
    "SyncRequest",
    "clip_text",
]
