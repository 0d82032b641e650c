import os
import tempfile
import unittest
from pathlib import Path

from metastock.config.app_config import (
    AppConfig, ReaderConfig, load_app_config, load_config_data, resolve_config_path
)


class TestLoadConfig(unittest.TestCase):

    def test_nested_mapping(self):
        """YAML dictionaries map onto nested dataclasses."""
        config = load_config_data(AppConfig, {
            "reader": {
                "index": "/data/EMASTER",
                "max_workers": 4,
                "extensions": {"dat": "dat", "threshold": 100},
            },
            "export": {"output_dir": "out"},
            "unknown": {"ignored": True},
        })

        self.assertEqual(config.reader.index, "/data/EMASTER")
        self.assertEqual(config.reader.max_workers, 4)
        self.assertEqual(config.reader.extensions.dat, "dat")
        self.assertEqual(config.reader.extensions.mwd, "MWD")
        self.assertEqual(config.reader.extensions.threshold, 100)
        self.assertEqual(config.export.output_dir, "out")

    def test_primitive_values_pass_through(self):
        """Non-dataclass fields keep the YAML value as is."""
        config = load_config_data(ReaderConfig, {"index": "MASTER", "case_insensitive": False})
        self.assertEqual(config.index, "MASTER")
        self.assertFalse(config.case_insensitive)
        self.assertEqual(config.extensions.threshold, 255)

    def test_empty_yaml_gives_defaults(self):
        self.assertEqual(load_config_data(AppConfig, None), AppConfig())

    def test_missing_file_gives_defaults(self):
        self.assertEqual(load_app_config("/nonexistent/config.yaml"), AppConfig())

    def test_load_from_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.yaml"
            path.write_text("reader:\n  case_insensitive: false\n  max_workers: 2\n")
            config = load_app_config(str(path))
        self.assertIsInstance(config.reader, ReaderConfig)
        self.assertFalse(config.reader.case_insensitive)
        self.assertEqual(config.reader.max_workers, 2)

    def test_resolve_config_path(self):
        self.assertEqual(resolve_config_path("custom.yaml"), "custom.yaml")

        cwd = os.getcwd()
        with tempfile.TemporaryDirectory() as tmp:
            os.chdir(tmp)
            try:
                self.assertEqual(resolve_config_path(), "config.yaml")
                Path("config.user.yaml").write_text("reader: {}\n")
                self.assertEqual(resolve_config_path(), "config.user.yaml")
            finally:
                os.chdir(cwd)


if __name__ == "__main__":
    unittest.main()
