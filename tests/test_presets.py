import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from presets import PresetsStore, get_config_dir
from req_struct import HttpMethod, KeyValue, SavedRequest


class TestPresetsStore(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name, "postui", "requests.json")
        self.store = PresetsStore(self.path)

    def tearDown(self):
        self.tmp.cleanup()

    def test_missing_file_is_empty(self):
        self.assertEqual(self.store.load(), [])

    def test_save_creates_directory_and_reloads(self):
        saved = SavedRequest(
            name="Demo", method=HttpMethod.PATCH, url="http://x/y",
            body='{"a": 1}', headers=[KeyValue("X", "1")],
            params=[KeyValue("q", "ü")]
        )
        self.store.save([saved])

        self.assertEqual(PresetsStore(self.path).load(), [saved])

    def test_file_format(self):
        self.store.save([SavedRequest(name="Demo", method=HttpMethod.PUT,
                                      headers=[KeyValue("X", "1")])])

        text = self.path.read_text(encoding="utf-8")
        self.assertTrue(text.startswith('[\n  {\n    "name": "Demo"'))
        self.assertEqual(json.loads(text), [{
            "name": "Demo",
            "method": 2,
            "url": "",
            "body": "",
            "headers": [{"key": "X", "value": "1"}],
            "params": [],
        }])

    def test_null_lists_read_as_empty(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text(json.dumps([{
            "name": "Old", "method": 1, "url": "http://x",
            "body": "", "headers": None, "params": None
        }]), encoding="utf-8")

        loaded = self.store.load()
        self.assertEqual(loaded, [SavedRequest(name="Old",
                                               method=HttpMethod.POST,
                                               url="http://x")])

    def test_unreadable_file_is_empty(self):
        self.path.parent.mkdir(parents=True)
        for content in ("{not json", '{"name": "x"}', '[{"method": 42}]'):
            with self.subTest(content=content):
                self.path.write_text(content, encoding="utf-8")
                with self.assertLogs("presets", level="WARNING"):
                    self.assertEqual(self.store.load(), [])

    def test_bad_record_skipped_others_kept(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text(json.dumps([
            {"name": "Negative", "method": -1},
            {"name": "Good", "method": 6, "url": "http://x"},
            {"name": "Large", "method": 7},
            "not an object",
        ]), encoding="utf-8")

        with self.assertLogs("presets", level="WARNING") as logs:
            loaded = self.store.load()

        self.assertEqual(loaded, [SavedRequest(name="Good",
                                               method=HttpMethod.OPTIONS,
                                               url="http://x")])
        self.assertEqual(len(logs.records), 3)

    def test_method_index_bounds(self):
        self.assertEqual(HttpMethod.from_index(0), HttpMethod.GET)
        for index in (-1, 7):
            with self.subTest(index=index):
                with self.assertRaises(ValueError):
                    HttpMethod.from_index(index)

    def test_full_overwrite(self):
        self.store.save([SavedRequest(name="a"), SavedRequest(name="b")])
        self.store.save([SavedRequest(name="b")])
        self.assertEqual([r.name for r in self.store.load()], ["b"])

    def test_unwritable_path_raises(self):
        blocker = Path(self.tmp.name, "file")
        blocker.write_text("", encoding="utf-8")
        store = PresetsStore(blocker / "requests.json")
        with self.assertRaises(OSError):
            store.save([SavedRequest(name="a")])


class TestConfigDir(unittest.TestCase):

    @patch("presets.sys.platform", "linux")
    def test_xdg_config_home(self):
        with patch.dict("os.environ", {"XDG_CONFIG_HOME": "/tmp/cfg"}):
            self.assertEqual(get_config_dir(), Path("/tmp/cfg/postui"))

    @patch("presets.sys.platform", "win32")
    def test_appdata(self):
        with patch.dict("os.environ", {"APPDATA": "/tmp/appdata"}):
            self.assertEqual(get_config_dir(), Path("/tmp/appdata/postui"))


if __name__ == '__main__':
    unittest.main()
