"""
Tests for reservation selection, rendering and sync.
"""

import unittest
from datetime import datetime
from unittest.mock import MagicMock

from diarysync.errors import UnknownVariant
from diarysync.models import BlockKind, BlockQuery, ContentBlock, InsertPosition, RenderVariant, SyncRequest
from diarysync.reservation import (
    RENDERERS,
    ReservationRenderer,
    ReservationSelector,
    SyncEngine,
    TimeWindow,
    apply_modifier,
    create_renderer,
    parse_variant,
    render_embed,
    render_link,
    render_reference,
)
from diarysync.store import MockDocumentStore


NOW = datetime(2026, 10, 19, 9, 30)


def lookup_from(blocks):
    """Build a lookup function over a dict of id -> content."""
    def lookup(block_id):
        if blocks.get(block_id) is None:
            return None
        return ContentBlock(id=block_id, content=blocks[block_id])
    return lookup


class TestDateModifiers(unittest.TestCase):
    """Test SQLite-style date modifiers."""

    def test_day_offsets(self):
        """Test day and hour offsets."""
        self.assertEqual(apply_modifier(NOW, "-7 days"), datetime(2026, 10, 12, 9, 30))
        self.assertEqual(apply_modifier(NOW, "+1 day"), datetime(2026, 10, 20, 9, 30))
        self.assertEqual(apply_modifier(NOW, "15 hours"), datetime(2026, 10, 20, 0, 30))

    def test_month_offsets_roll_over(self):
        """Test month arithmetic overflows like SQLite."""
        self.assertEqual(apply_modifier(datetime(2026, 1, 31), "+1 month"), datetime(2026, 3, 3))
        self.assertEqual(apply_modifier(datetime(2026, 3, 15), "-3 months"), datetime(2025, 12, 15))
        self.assertEqual(apply_modifier(datetime(2024, 2, 29), "+1 year"), datetime(2025, 3, 1))

    def test_start_of(self):
        """Test start of day, month and year."""
        self.assertEqual(apply_modifier(NOW, "start of day"), datetime(2026, 10, 19))
        self.assertEqual(apply_modifier(NOW, "start of month"), datetime(2026, 10, 1))
        self.assertEqual(apply_modifier(NOW, "start of year"), datetime(2026, 1, 1))

    def test_weekday(self):
        """Test weekday N advances to the next such day (0 is Sunday)."""
        # 2026-10-19 is a Monday
        self.assertEqual(apply_modifier(NOW, "weekday 1"), NOW)
        self.assertEqual(apply_modifier(NOW, "weekday 0"), datetime(2026, 10, 25, 9, 30))

    def test_localtime_is_ignored(self):
        """Test the localtime modifier leaves the date unchanged."""
        self.assertEqual(apply_modifier(NOW, "localtime"), NOW)

    def test_unknown_modifier(self):
        """Test unknown modifiers are rejected."""
        with self.assertRaises(ValueError):
            apply_modifier(NOW, "next tuesday")
        with self.assertRaises(ValueError):
            apply_modifier(NOW, "+1.5 months")


class TestReservationSelector(unittest.TestCase):
    """Test time-windowed reservation queries."""

    def setUp(self):
        """Set up reservations around 2026-10-19."""
        self.store = MockDocumentStore(clock=lambda: NOW)
        notebook = self.store.add_notebook("Work")
        doc = self.store.create_document(notebook.id, "/Tasks")

        def reserve(content, day):
            return self.store.add_block(doc, content, attributes={"custom-reservation": day})

        self.later = reserve("Later", "20261020")
        self.today_a = reserve("Today A", "20261019")
        self.past = reserve("Past", "20261018")
        self.today_b = reserve("Today B", "20261019")
        self.store.add_block(doc, "Not reserved")

        self.spy = MagicMock(wraps=self.store)
        self.selector = ReservationSelector(self.spy, now=lambda: NOW)

    def test_today(self):
        """Test only reservations due today are returned."""
        items = self.selector.select(TimeWindow.today())

        self.assertEqual([item.id for item in items], [self.today_a, self.today_b])
        self.assertTrue(all(item.date == "20261019" for item in items))

    def test_future(self):
        """Test reservations from today on, ascending by date."""
        items = self.selector.select(TimeWindow.future())

        self.assertEqual([item.id for item in items], [self.today_a, self.today_b, self.later])

    def test_date_offset(self):
        """Test reservations from a shifted date on."""
        items = self.selector.select(TimeWindow.date_offset("-1 day"))

        self.assertEqual([item.date for item in items], ["20261018", "20261019", "20261019", "20261020"])

    def test_select_requeries(self):
        """Test every selection goes back to the store."""
        self.selector.select(TimeWindow.today())
        self.selector.select(TimeWindow.today())

        self.assertEqual(self.spy.query.call_count, 2)

    def test_query_shape(self):
        """Test the selector asks for attribute-ordered results."""
        self.selector.select(TimeWindow.future())

        query = self.spy.query.call_args[0][0]
        self.assertIsInstance(query, BlockQuery)
        self.assertTrue(query.order_by_attribute)
        self.assertEqual(query.attribute.name, "custom-reservation")
        self.assertEqual(query.attribute.value, "20261019")

    def test_bad_modifier_makes_no_store_call(self):
        """Test an invalid offset fails before querying."""
        with self.assertRaises(ValueError):
            self.selector.select(TimeWindow.date_offset("whenever"))
        self.spy.query.assert_not_called()


class TestRenderers(unittest.TestCase):
    """Test reservation rendering variants."""

    def setUp(self):
        """Set up a lookup with one existing and one missing block."""
        self.lookup = lookup_from({"A": "Buy milk", "B": None})

    def test_link_renderer(self):
        """Test links for found blocks and not-found entries, in order."""
        text = render_link(["A", "B"], self.lookup)

        self.assertEqual(text, "* [ ] [Buy milk](siyuan://blocks/A)\n* [x] `B` not found")

    def test_reference_renderer(self):
        """Test block references instead of links."""
        text = render_reference(["A", "B"], self.lookup)

        self.assertEqual(text, '* [ ] ((A "Buy milk"))\n* [x] `B` not found')

    def test_empty_content_is_not_found(self):
        """Test a block without content renders as a not-found entry."""
        lookup = lookup_from({"E": ""})

        self.assertEqual(render_link(["E"], lookup), "* [x] `E` not found")
        self.assertEqual(render_reference(["E"], lookup), "* [x] `E` not found")

    def test_link_snippet_is_clipped(self):
        """Test long block content is clipped in the link text."""
        lookup = lookup_from({"L": "a" * 70})
        text = render_link(["L"], lookup)

        self.assertEqual(text, f"* [ ] [{'a' * 50}...](siyuan://blocks/L)")

    def test_embed_renderer_needs_no_lookup(self):
        """Test the embed variant builds one query without lookups."""
        lookup = MagicMock()
        text = render_embed(["A", "B"], lookup)

        self.assertEqual(text, '{{select * from blocks where id in ("A","B")}}')
        lookup.assert_not_called()

    def test_empty_selection(self):
        """Test every variant renders valid content for no reservations."""
        self.assertEqual(render_embed([], self.lookup), '{{select * from blocks where id in ("")}}')
        self.assertEqual(render_link([], self.lookup), "* [x] No reservations")
        self.assertEqual(render_reference([], self.lookup), "* [x] No reservations")

    def test_variant_table(self):
        """Test every variant has a renderer."""
        self.assertEqual(set(RENDERERS), set(RenderVariant))

    def test_parse_variant(self):
        """Test variant names and aliases."""
        self.assertEqual(parse_variant("embed"), RenderVariant.EMBED)
        self.assertEqual(parse_variant("LINK"), RenderVariant.LINK)
        self.assertEqual(parse_variant("ref"), RenderVariant.REFERENCE)
        self.assertEqual(parse_variant(RenderVariant.REFERENCE), RenderVariant.REFERENCE)
        with self.assertRaises(UnknownVariant):
            parse_variant("table")

    def test_factory(self):
        """Test the factory binds position, ids and document."""
        renderer = create_renderer("link", "bottom", ["A"], "doc", self.lookup)

        self.assertEqual(renderer.position, InsertPosition.BOTTOM)
        self.assertEqual(renderer.target_document_id, "doc")
        self.assertEqual(renderer.create_content(), "* [ ] [Buy milk](siyuan://blocks/A)")

    def test_factory_rejects_unknown_variant_before_lookup(self):
        """Test an unknown variant fails without touching the store."""
        lookup = MagicMock()
        with self.assertRaises(UnknownVariant):
            create_renderer("gallery", "top", ["A"], "doc", lookup)
        lookup.assert_not_called()

    def test_from_request(self):
        """Test building a renderer from a SyncRequest."""
        request = SyncRequest(variant="reference", item_ids=["A"], target_document_id="doc")
        renderer = ReservationRenderer.from_request(request, self.lookup)

        self.assertEqual(renderer.create_content(), '* [ ] ((A "Buy milk"))')


class TestSyncEngine(unittest.TestCase):
    """Test the reservation block upsert."""

    def setUp(self):
        """Set up a diary and a reservation source."""
        self.store = MockDocumentStore(clock=lambda: NOW)
        notebook = self.store.add_notebook("Work")
        self.diary = self.store.create_document(notebook.id, "/daily note/2026/10/2026-10-19")
        self.store.add_block(self.diary, "Existing entry")
        other = self.store.create_document(notebook.id, "/Tasks")
        self.task = self.store.add_block(other, "Buy milk")
        self.spy = MagicMock(wraps=self.store)
        self.engine = SyncEngine(self.spy)

    def renderer(self, variant="link", position="top", ids=None, document=None):
        return create_renderer(variant, position, ids if ids is not None else [self.task],
                               document or self.diary, self.store.get_block_by_id)

    def marked_blocks(self, document):
        return self.store.query(BlockQuery(root_id=document, name="Reservation"))

    def test_first_sync_inserts_marked_block(self):
        """Test the first sync inserts and tags a new block."""
        block_id = self.engine.sync(self.renderer())

        self.assertEqual(self.store.document_blocks(self.diary)[0], block_id)
        block = self.store.get_block_by_id(block_id)
        self.assertEqual(block.attributes, {"name": "Reservation", "breadcrumb": "true"})
        self.assertIn("Buy milk", block.markdown)

    def test_bottom_position(self):
        """Test insertion at the bottom of the document."""
        block_id = self.engine.sync(self.renderer(position="bottom"))

        self.assertEqual(self.store.document_blocks(self.diary)[-1], block_id)

    def test_sync_is_idempotent(self):
        """Test a second sync updates the same block."""
        first = self.engine.sync(self.renderer())
        second = self.engine.sync(self.renderer())

        self.assertEqual(first, second)
        self.assertEqual(len(self.marked_blocks(self.diary)), 1)
        self.assertEqual(self.spy.insert_block.call_count, 1)
        self.assertEqual(self.spy.update_block.call_count, 1)
        self.assertEqual(self.spy.set_block_attributes.call_count, 2)

    def test_update_replaces_content(self):
        """Test the update writes the new rendering and re-asserts the marker."""
        block_id = self.engine.sync(self.renderer())
        # Simulate the marker being lost on an edit elsewhere
        self.store.set_block_attributes(block_id, {"breadcrumb": ""})

        self.engine.sync(self.renderer(variant="embed"))

        block = self.store.get_block_by_id(block_id)
        self.assertEqual(block.kind, BlockKind.EMBED)
        self.assertEqual(block.attributes["breadcrumb"], "true")

    def test_lookup_is_scoped_to_document(self):
        """Test a marked block in another document is left alone."""
        notebook = self.store.list_notebooks()[0]
        other_diary = self.store.create_document(notebook.id, "/daily note/2026/10/2026-10-18")

        first = self.engine.sync(self.renderer(document=other_diary))
        second = self.engine.sync(self.renderer())

        self.assertNotEqual(first, second)
        self.assertEqual(len(self.marked_blocks(other_diary)), 1)
        self.assertEqual(len(self.marked_blocks(self.diary)), 1)


if __name__ == '__main__':
    unittest.main()
