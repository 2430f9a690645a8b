"""Reservation selection, rendering and sync."""

from .renderers import (
    RENDERERS,
    ReservationRenderer,
    create_renderer,
    parse_variant,
    render_embed,
    render_link,
    render_reference,
)
from .selector import ReservationSelector, TimeWindow, WindowKind, apply_modifier
from .sync import SyncEngine

__all__ = [
    "RENDERERS",
    "ReservationRenderer",
    "create_renderer",
    "parse_variant",
    "render_embed",
    "render_link",
    "render_reference",
    "ReservationSelector",
    "TimeWindow",
    "WindowKind",
    "apply_modifier",
    "SyncEngine",
]
