"""
Rendering of reservations into markdown.

Each variant is a plain function taking the reservation block ids and a
lookup function and returning the markdown of the reservation block. New
variants are added by registering a function in RENDERERS.
"""

from typing import Callable, Dict, List, Optional, Sequence, Union

from ..errors import UnknownVariant
from ..models import ContentBlock, InsertPosition, RenderVariant, SyncRequest, clip_text
from ..diary.locator import block_url


Lookup = Callable[[str], Optional[ContentBlock]]
RenderFunction = Callable[[Sequence[str], Lookup], str]

EMPTY_SELECTION = "* [x] No reservations"


def not_found_entry(block_id: str) -> str:
    return f"* [x] `{block_id}` not found"


def render_embed(item_ids: Sequence[str], lookup: Lookup) -> str:
    """A single embed block querying every reservation; no lookups needed."""
    id_list = ",".join(f'"{block_id}"' for block_id in item_ids) or '""'
    return f"{{{{select * from blocks where id in ({id_list})}}}}"


def _render_entries(item_ids: Sequence[str], lookup: Lookup,
                    entry: Callable[[ContentBlock, str], str]) -> str:
    if not item_ids:
        return EMPTY_SELECTION
    lines = []
    for block_id in item_ids:
        block = lookup(block_id)
        if block is None or not block.content:
            lines.append(not_found_entry(block_id))
        else:
            lines.append(entry(block, clip_text(block.content)))
    return "\n".join(lines)


def render_link(item_ids: Sequence[str], lookup: Lookup) -> str:
    return _render_entries(item_ids, lookup, lambda block, text: f"* [ ] [{text}]({block_url(block.id)})")


def render_reference(item_ids: Sequence[str], lookup: Lookup) -> str:
    return _render_entries(item_ids, lookup, lambda block, text: f'* [ ] (({block.id} "{text}"))')


RENDERERS: Dict[RenderVariant, RenderFunction] = {
    RenderVariant.EMBED: render_embed,
    RenderVariant.LINK: render_link,
    RenderVariant.REFERENCE: render_reference,
}

VARIANT_ALIASES = {"ref": RenderVariant.REFERENCE}


def parse_variant(variant: Union[str, RenderVariant]) -> RenderVariant:
    """
    Normalize a variant name.

    Raises:
        UnknownVariant: If the name is not registered
    """
    if isinstance(variant, RenderVariant):
        return variant
    name = str(variant).strip().lower()
    if name in VARIANT_ALIASES:
        return VARIANT_ALIASES[name]
    try:
        return RenderVariant(name)
    except ValueError:
        raise UnknownVariant(f"Unknown reservation variant: {variant!r}") from None


class ReservationRenderer:
    """
    Renders a set of reservations for one target document.
    """

    def __init__(self, variant: RenderVariant, position: InsertPosition, item_ids: List[str],
                 target_document_id: str, lookup: Lookup):
        if variant not in RENDERERS:
            raise UnknownVariant(f"No renderer registered for {variant!r}")
        self.variant = variant
        self.position = position
        self.item_ids = list(item_ids)
        self.target_document_id = target_document_id
        self.lookup = lookup

    @classmethod
    def from_request(cls, request: SyncRequest, lookup: Lookup) -> "ReservationRenderer":
        return cls(request.variant, request.position, request.item_ids, request.target_document_id, lookup)

    def create_content(self) -> str:
        return RENDERERS[self.variant](self.item_ids, self.lookup)


def create_renderer(variant: Union[str, RenderVariant], position: Union[str, InsertPosition],
                    item_ids: List[str], target_document_id: str, lookup: Lookup) -> ReservationRenderer:
    """
    Build a renderer for a variant name.

    Raises:
        UnknownVariant: Before any store call, if the variant is unknown
    """
    return ReservationRenderer(parse_variant(variant), InsertPosition(position), item_ids,
                               target_document_id, lookup)
