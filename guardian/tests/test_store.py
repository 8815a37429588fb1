"""
Tests for the contact store: persistence, validation and defaults.
"""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from guardian.const import NAME_KEY
from guardian.errors import InvalidContact
from guardian.models import ContactKind
from guardian.store import ContactStore


class TestContactStore(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "contacts.json"

    def tearDown(self):
        self._tmp.cleanup()

    def test_missing_key_reads_empty(self):
        store = ContactStore()
        self.assertEqual(store.get("nope"), "")
        self.assertEqual(store.phone_number(ContactKind.POLICE), "")

    def test_values_survive_reload(self):
        store = ContactStore(self.path)
        store.save_contacts(police="112", fire="", family="+1 555")
        store.save_name("  Ann  ")

        reloaded = ContactStore(self.path)
        self.assertEqual(reloaded.phone_number(ContactKind.POLICE), "112")
        self.assertEqual(reloaded.phone_number(ContactKind.FAMILY), "+1 555")
        self.assertEqual(reloaded.display_name(), "Ann")

    def test_save_contacts_trims_numbers(self):
        store = ContactStore()
        saved = store.save_contacts(police="  112 ", fire=" 113", family="")
        self.assertEqual(saved[ContactKind.POLICE.store_key], "112")
        self.assertEqual(store.phone_number(ContactKind.FIRE), "113")

    def test_invalid_number_rejected(self):
        store = ContactStore()
        with self.assertRaises(InvalidContact):
            store.save_contacts(police="call me maybe")
        self.assertEqual(store.phone_number(ContactKind.POLICE), "")

    def test_display_name_default(self):
        store = ContactStore()
        self.assertEqual(store.display_name(), "Unknown")
        store.set(NAME_KEY, "")
        self.assertEqual(store.display_name(), "Unknown")

    def test_category_read_fresh(self):
        store = ContactStore()
        store.set(ContactKind.FIRE.store_key, "113")
        first = store.category(ContactKind.FIRE)
        store.set(ContactKind.FIRE.store_key, "114")

        self.assertEqual(first.phone_number, "113")
        self.assertEqual(store.category(ContactKind.FIRE).phone_number, "114")

    def test_delete(self):
        store = ContactStore(self.path)
        store.set("k", "v")
        store.delete("k")
        self.assertEqual(ContactStore(self.path).get("k"), "")

    def test_corrupt_file_ignored(self):
        self.path.write_text("{not json", encoding="utf-8")
        with self.assertLogs("guardian.store", level="WARNING"):
            store = ContactStore(self.path)
        self.assertEqual(store.get(NAME_KEY), "")

    def test_file_is_plain_json(self):
        store = ContactStore(self.path)
        store.set("guardian_police", "112")
        self.assertEqual(json.loads(self.path.read_text(encoding="utf-8")), {"guardian_police": "112"})
