"""Configuration loading tests."""

import json
import tempfile
import unittest
from pathlib import Path

from pydantic import ValidationError

from notion_carousel.config import load_config, load_style_file
from notion_carousel.models.config import Config


class TestConfigLoading(unittest.TestCase):
    def test_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            config = load_config(root, environ={})
            self.assertEqual(config.project_root, str(root))
            self.assertEqual(config.runs_dir, str(root / "runs"))
            self.assertIsNone(config.notion_token)
            self.assertEqual(config.notion_api_base, "https://api.notion.com/v1")
            self.assertEqual(config.notion_version, "2022-06-28")
            self.assertEqual(config.page_size, 100)
            self.assertEqual(config.request_timeout, 30.0)
            self.assertEqual(config.export_quality, 92)
            self.assertEqual(config.preview_width, 400)

    def test_environment_overrides(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            style_path = root / "style.json"
            style_path.write_text("{}", encoding="utf-8")
            config = load_config(
                root,
                environ={
                    "NOTION_TOKEN": "secret",
                    "NOTION_API_BASE": "http://localhost:9000/v1",
                    "NOTION_TIMEOUT": "5",
                    "CAROUSEL_RUNS_DIR": str(root / "elsewhere"),
                    "CAROUSEL_STYLE_PATH": str(style_path),
                },
            )
            self.assertEqual(config.notion_token, "secret")
            self.assertEqual(config.notion_api_base, "http://localhost:9000/v1")
            self.assertEqual(config.request_timeout, 5.0)
            self.assertEqual(config.runs_dir, str(root / "elsewhere"))
            self.assertEqual(config.style_path, str(style_path))

    def test_missing_style_file(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            with self.assertRaises(FileNotFoundError):
                load_config(Path(temp_dir), environ={"CAROUSEL_STYLE_PATH": str(Path(temp_dir) / "nope.json")})

    def test_config_model_rejects_unknown_fields(self) -> None:
        with self.assertRaises(ValidationError):
            Config(project_root="/x", runs_dir="/x/runs", template_path="/x/t.pptx")


class TestStyleFile(unittest.TestCase):
    def test_reads_mapping(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "style.json"
            path.write_text(json.dumps({"bodySize": 40, "bg_color": "#000"}), encoding="utf-8")
            self.assertEqual(load_style_file(path), {"bodySize": 40, "bg_color": "#000"})

    def test_rejects_non_object(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "style.json"
            path.write_text("[1, 2]", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_style_file(path)


if __name__ == "__main__":
    unittest.main()
