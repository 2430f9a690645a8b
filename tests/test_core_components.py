"""
Unit tests for core diarysync components.

Tests configuration management and the data models shared by the diary and
reservation modules.
"""

import os
import tempfile
import unittest
from pathlib import Path

import yaml

from diarysync.config import ConfigManager, ListItemPolicy, NotebookSort
from diarysync.models import (
    AttributeFilter,
    BlockKind,
    Comparison,
    ContentBlock,
    Notebook,
    SyncRequest,
    clip_text,
)


class TestConfigManager(unittest.TestCase):
    """Test configuration management functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.config_path = Path(self.temp_dir) / "test_config.yaml"

    def tearDown(self):
        """Clean up test fixtures."""
        if self.config_path.exists():
            self.config_path.unlink()
        os.rmdir(self.temp_dir)

    def test_config_creation_with_defaults(self):
        """Test config manager falls back to defaults when file missing."""
        config = ConfigManager(str(self.config_path))

        self.assertEqual(config.store_host, "http://127.0.0.1:6806")
        self.assertEqual(config.reservation_attribute, "custom-reservation")
        self.assertEqual(config.reservation_marker, "Reservation")
        self.assertEqual(config.startup_max_retries, 5)
        self.assertEqual(config.startup_retry_delay, 1.0)
        self.assertFalse(self.config_path.exists())

    def test_config_loading_from_file(self):
        """Test loading configuration from YAML file."""
        test_config = """
store:
  host: "http://siyuan.local:6806"
  token: "secret"

notebooks:
  sort: doc-tree
  hidden: ["Archive"]

move:
  list_item_policy: wrap-in-list
"""
        with open(self.config_path, 'w') as f:
            f.write(test_config)

        config = ConfigManager(str(self.config_path))

        self.assertEqual(config.store_host, "http://siyuan.local:6806")
        self.assertEqual(config.store_token, "secret")
        self.assertEqual(config.hidden_notebooks, ["Archive"])
        # Missing keys keep their defaults
        self.assertEqual(config.store_timeout, 10.0)
        self.assertTrue(config.settings.open_on_start)

        settings = config.settings
        self.assertEqual(settings.notebook_sort, NotebookSort.DOC_TREE)
        self.assertEqual(settings.move_list_item_policy, ListItemPolicy.WRAP_IN_LIST)

    def test_invalid_file_falls_back_to_defaults(self):
        """Test a broken YAML file does not prevent startup."""
        with open(self.config_path, 'w') as f:
            f.write("store: [unclosed")

        config = ConfigManager(str(self.config_path))
        self.assertEqual(config.store_host, "http://127.0.0.1:6806")

    def test_dot_notation_access(self):
        """Test accessing config values with dot notation."""
        config = ConfigManager(str(self.config_path))

        self.assertEqual(config.get("move.list_item_policy"), "direct")
        self.assertEqual(config.get("notebooks.sort"), "custom-sort")
        self.assertEqual(config.get("nonexistent.key", "default"), "default")

    def test_set_saves_configuration(self):
        """Test every accepted mutation is written to disk."""
        config = ConfigManager(str(self.config_path))

        self.assertTrue(config.set("move.list_item_policy", "disabled"))
        self.assertTrue(self.config_path.exists())

        with open(self.config_path) as f:
            saved = yaml.safe_load(f)
        self.assertEqual(saved["move"]["list_item_policy"], "disabled")

        reloaded = ConfigManager(str(self.config_path))
        self.assertEqual(reloaded.settings.move_list_item_policy, ListItemPolicy.DISABLED)

    def test_set_rejects_unknown_keys(self):
        """Test unknown settings are refused and nothing is written."""
        config = ConfigManager(str(self.config_path))

        self.assertFalse(config.set("move.unknown_option", True))
        self.assertFalse(config.set("nosection.key", 1))
        self.assertFalse(self.config_path.exists())

    def test_set_rejects_invalid_values(self):
        """Test invalid setting values are refused and the file is left unchanged."""
        config = ConfigManager(str(self.config_path))
        self.assertTrue(config.set("move.list_item_policy", "wrap-in-list"))
        with open(self.config_path) as f:
            before = f.read()

        self.assertFalse(config.set("move.list_item_policy", "bogus"))
        self.assertFalse(config.set("notebooks.sort", "alphabetical"))

        with open(self.config_path) as f:
            self.assertEqual(f.read(), before)
        self.assertEqual(config.get("move.list_item_policy"), "wrap-in-list")
        reloaded = ConfigManager(str(self.config_path))
        self.assertEqual(reloaded.settings.move_list_item_policy, ListItemPolicy.WRAP_IN_LIST)

    def test_config_reload(self):
        """Test configuration reloading."""
        with open(self.config_path, 'w') as f:
            f.write("notebooks:\n  default: 'nb-1'")

        config = ConfigManager(str(self.config_path))
        self.assertEqual(config.settings.default_notebook, "nb-1")

        with open(self.config_path, 'w') as f:
            f.write("notebooks:\n  default: 'nb-2'")

        config.reload()
        self.assertEqual(config.settings.default_notebook, "nb-2")


class TestDataModels(unittest.TestCase):
    """Test data model validation and functionality."""

    def test_block_kind_from_code(self):
        """Test store type codes map to block kinds."""
        self.assertEqual(BlockKind.from_code("h"), BlockKind.HEADING)
        self.assertEqual(BlockKind.from_code("i"), BlockKind.LIST_ITEM)
        self.assertEqual(BlockKind.from_code("d"), BlockKind.DOCUMENT)
        self.assertEqual(BlockKind.from_code("zz"), BlockKind.OTHER)
        self.assertEqual(BlockKind.from_code(None), BlockKind.OTHER)

    def test_containers(self):
        """Test headings are not containers while lists are."""
        self.assertFalse(BlockKind.HEADING.is_container)
        self.assertFalse(BlockKind.PARAGRAPH.is_container)
        self.assertTrue(BlockKind.LIST.is_container)
        self.assertTrue(BlockKind.LIST_ITEM.is_container)
        self.assertTrue(BlockKind.DOCUMENT.is_container)

    def test_content_block_creation(self):
        """Test ContentBlock model creation."""
        block = ContentBlock(
            id="20240101120000-abcdefg",
            kind=BlockKind.HEADING,
            subtype="h3",
            content="Plans",
            attributes={"name": "Reservation"},
        )

        self.assertEqual(block.heading_level, 3)
        self.assertEqual(block.name, "Reservation")
        self.assertIsNone(block.parent_id)

        paragraph = ContentBlock(id="p", content="text")
        self.assertEqual(paragraph.heading_level, 0)
        self.assertEqual(paragraph.name, "")

    def test_notebook_defaults(self):
        """Test Notebook default icon and empty daily path."""
        notebook = Notebook(id="nb", name="Work")

        self.assertEqual(notebook.icon, "1f5c3")
        self.assertEqual(notebook.daily_note_path, "")
        self.assertFalse(notebook.closed)

    def test_clip_text(self):
        """Test snippets are clipped to 50 characters plus an ellipsis."""
        self.assertEqual(clip_text("Buy milk"), "Buy milk")
        self.assertEqual(clip_text("x" * 50), "x" * 50)
        self.assertEqual(clip_text("y" * 60), "y" * 50 + "...")

    def test_sync_request_defaults(self):
        """Test SyncRequest defaults to an embed at the top."""
        request = SyncRequest(target_document_id="doc")
        self.assertEqual(request.variant.value, "embed")
        self.assertEqual(request.position.value, "top")
        self.assertEqual(request.item_ids, [])

    def test_attribute_filter(self):
        """Test attribute comparisons on YYYYMMDD strings."""
        today = AttributeFilter(name="custom-reservation", value="20261019")
        future = AttributeFilter(name="custom-reservation", op=Comparison.GE, value="20261019")

        self.assertTrue(today.matches("20261019"))
        self.assertFalse(today.matches("20261020"))
        self.assertFalse(today.matches(None))
        self.assertTrue(future.matches("20261020"))
        self.assertFalse(future.matches("20261018"))


if __name__ == '__main__':
    unittest.main()
