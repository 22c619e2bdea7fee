import os
import unittest
from unittest import mock

from companion.config import get_settings

_REQUIRED = {"TELEGRAM_BOT_TOKEN": "123:abc", "OPENROUTER_API_KEY": "sk-test"}


class SettingsTests(unittest.TestCase):
    def test_defaults(self):
        with mock.patch.dict(os.environ, _REQUIRED, clear=True):
            settings = get_settings()
        self.assertEqual(settings.db_path, "data/companion.db")
        self.assertEqual(settings.max_context_turns, 100)
        self.assertEqual(settings.max_context_items, 20)
        self.assertEqual(settings.summary_days, 7)

    def test_overrides(self):
        env = dict(_REQUIRED, MAX_CONTEXT_ITEMS="8", MODEL="some/model", DB_PATH="/tmp/x.db")
        with mock.patch.dict(os.environ, env, clear=True):
            settings = get_settings()
        self.assertEqual(settings.max_context_items, 8)
        self.assertEqual(settings.model, "some/model")
        self.assertEqual(settings.db_path, "/tmp/x.db")

    def test_missing_token_is_an_error(self):
        with mock.patch.dict(os.environ, {"OPENROUTER_API_KEY": "sk-test"}, clear=True):
            with self.assertRaises(ValueError):
                get_settings()

    def test_negative_context_caps_are_an_error(self):
        for name in ("MAX_CONTEXT_TURNS", "MAX_CONTEXT_ITEMS"):
            with self.subTest(name=name):
                with mock.patch.dict(os.environ, dict(_REQUIRED, **{name: "-1"}), clear=True):
                    with self.assertRaises(ValueError):
                        get_settings()

    def test_bad_integer_is_an_error(self):
        with mock.patch.dict(os.environ, dict(_REQUIRED, SUMMARY_DAYS="seven"), clear=True):
            with self.assertRaises(ValueError):
                get_settings()


if __name__ == "__main__":
    unittest.main()
