import json
import os
import shutil
import sys
import tempfile
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from git_manager import DEFAULT_HISTORY_LIMIT
from settings import Settings


class TestSettings(unittest.TestCase):
    def setUp(self):
        self.config_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.config_dir)

    def test_defaults(self):
        s = Settings(self.config_dir)
        self.assertEqual(s.get_history_limit(), DEFAULT_HISTORY_LIMIT)
        self.assertIsNone(s.get_base_ref())
        self.assertEqual(s.get_recent_folders(), [])
        self.assertIsNone(s.get_last_folder())

    def test_creates_missing_config_dir(self):
        nested = os.path.join(self.config_dir, "nested")
        Settings(nested)
        self.assertTrue(os.path.isdir(nested))

    def test_values_persist_between_instances(self):
        s = Settings(self.config_dir)
        s.set_history_limit(50)
        s.set_base_ref("origin/main")

        reloaded = Settings(self.config_dir)
        self.assertEqual(reloaded.get_history_limit(), 50)
        self.assertEqual(reloaded.get_base_ref(), "origin/main")

    def test_rejects_non_positive_history_limit(self):
        s = Settings(self.config_dir)
        with self.assertRaises(ValueError):
            s.set_history_limit(0)
        self.assertEqual(s.get_history_limit(), DEFAULT_HISTORY_LIMIT)

    def test_empty_base_ref_clears_it(self):
        s = Settings(self.config_dir)
        s.set_base_ref("main")
        s.set_base_ref("")
        self.assertIsNone(s.get_base_ref())

    def test_recent_folders_are_deduplicated_and_capped(self):
        s = Settings(self.config_dir)
        s.settings["max_recent"] = 2
        s.add_recent_folder("/a")
        s.add_recent_folder("/b")
        s.add_recent_folder("/a")
        self.assertEqual(s.get_recent_folders(), ["/a", "/b"])
        s.add_recent_folder("/c")
        self.assertEqual(s.get_recent_folders(), ["/c", "/a"])
        self.assertEqual(s.get_last_folder(), "/c")

    def test_corrupt_file_keeps_defaults(self):
        with open(os.path.join(self.config_dir, "settings.json"), "w", encoding="utf-8") as f:
            f.write("{not json")
        with self.assertLogs(level="WARNING"):
            s = Settings(self.config_dir)
        self.assertEqual(s.get_history_limit(), DEFAULT_HISTORY_LIMIT)

    def test_saved_file_is_json(self):
        s = Settings(self.config_dir)
        s.set_history_limit(7)
        with open(s.config_file, encoding="utf-8") as f:
            self.assertEqual(json.load(f)["history_limit"], 7)


if __name__ == "__main__":
    unittest.main()
