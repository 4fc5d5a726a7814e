import json
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))

from qrstudio_core.config import AppConfig, load_config, save_config


class ConfigTests(unittest.TestCase):
    def test_load_default_when_missing(self):
        with tempfile.TemporaryDirectory() as tmp:
            cfg = load_config(Path(tmp) / "missing.json")
            self.assertIsInstance(cfg, AppConfig)
            self.assertEqual(cfg.render.default_size, 256)
            self.assertEqual(cfg.export.svg_mode, "embedded")
            self.assertEqual(cfg.export.base_name, "qrcode")

    def test_corrupt_file_falls_back_to_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("{not json", encoding="utf-8")
            self.assertEqual(load_config(path), AppConfig())

    def test_save_and_reload(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            cfg = load_config(path)
            cfg.render.pattern = "dots"
            cfg.export.svg_mode = "vector"
            save_config(cfg, path)
            reloaded = load_config(path)
            self.assertEqual(reloaded.render.pattern, "dots")
            self.assertEqual(reloaded.export.svg_mode, "vector")

    def test_normalization_clamps_values(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text(
                json.dumps(
                    {
                        "config_version": 2,
                        "render": {"default_size": 5, "foreground": "nope", "background": "#FFFFFF80", "error_correction": "z"},
                        "export": {"svg_mode": "trace", "base_name": ""},
                        "diagnostics": {"keep_log_files": 0, "log_level": "loud"},
                    }
                ),
                encoding="utf-8",
            )
            cfg = load_config(path)
            self.assertEqual(cfg.render.default_size, 64)
            self.assertEqual(cfg.render.foreground, "#000000")
            self.assertEqual(cfg.render.background, "#FFFFFF")
            self.assertEqual(cfg.render.error_correction, "M")
            self.assertEqual(cfg.export.svg_mode, "embedded")
            self.assertEqual(cfg.export.base_name, "qrcode")
            self.assertEqual(cfg.diagnostics.keep_log_files, 2)
            self.assertEqual(cfg.diagnostics.log_level, "INFO")

    def test_migrate_v1_shape(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            old = {"defaults": {"size": 512, "pattern": "classy", "foreground": "#123456"}}
            path.write_text(json.dumps(old), encoding="utf-8")
            cfg = load_config(path)
            self.assertEqual(cfg.config_version, 2)
            self.assertEqual(cfg.render.default_size, 512)
            self.assertEqual(cfg.render.pattern, "classy")
            self.assertEqual(cfg.render.foreground, "#123456")
            self.assertEqual(cfg.export.svg_mode, "embedded")


if __name__ == "__main__":
    unittest.main()
