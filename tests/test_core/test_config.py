"""Tests for config loading."""

from __future__ import annotations

from pathlib import Path

from recap.capture.storage import CaptureStorage
from recap.core.config import RecapConfig, load_config


class TestLoadConfig:
    def test_defaults_when_no_config_file(self, tmp_path: Path):
        """Without a recap.toml, load_config should return defaults."""
        config = load_config(tmp_path)

        assert isinstance(config, RecapConfig)
        assert config.storage.root == tmp_path / "captures"
        assert config.storage.indent == 2
        assert config.storage.max_name_length == 100
        assert config.capture.max_depth == 32
        assert config.capture.redact_sensitive is False

    def test_loads_storage_section(self, tmp_path: Path):
        toml_content = """\
[storage]
root = "snapshots"
indent = 4
max_name_length = 40
"""
        (tmp_path / "recap.toml").write_text(toml_content)
        config = load_config(tmp_path)

        assert config.storage.root == tmp_path / "snapshots"
        assert config.storage.indent == 4
        assert config.storage.max_name_length == 40

    def test_absolute_root_kept(self, tmp_path: Path):
        target = tmp_path / "elsewhere"
        (tmp_path / "recap.toml").write_text(f'[storage]\nroot = "{target.as_posix()}"\n')

        assert load_config(tmp_path).storage.root == target

    def test_loads_capture_section(self, tmp_path: Path):
        (tmp_path / "recap.toml").write_text(
            "[capture]\nmax_depth = 3\nredact_sensitive = true\n"
        )
        config = load_config(tmp_path)

        assert config.capture.max_depth == 3
        assert config.capture.redact_sensitive is True

    def test_storage_uses_config(self, tmp_path: Path):
        (tmp_path / "recap.toml").write_text('[storage]\nroot = "snapshots"\nindent = 0\n')
        storage = CaptureStorage(project_path=tmp_path)

        path = storage.save("User", 1, {"model": "User", "record_id": 1, "attributes": {}})

        assert path.parent == tmp_path / "snapshots" / "user"
        assert path.read_text().startswith('{\n"model"')
