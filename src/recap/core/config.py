"""Configuration management for recap (recap.toml parsing + defaults)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib
except ImportError:
    try:
        import tomli as tomllib  # type: ignore[no-redef]
    except ImportError:
        tomllib = None  # type: ignore[assignment]

CONFIG_FILENAME = "recap.toml"


@dataclass
class StorageConfig:
    root: Path = field(default_factory=lambda: Path("captures"))
    indent: int = 2
    max_name_length: int = 100


@dataclass
class CaptureConfig:
    max_depth: int = 32
    redact_sensitive: bool = False


@dataclass
class RecapConfig:
    """Complete recap configuration."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    capture: CaptureConfig = field(default_factory=CaptureConfig)


def load_config(project_path: Path | None = None) -> RecapConfig:
    """Load configuration from recap.toml if present, otherwise return defaults.

    A relative ``storage.root`` is resolved against *project_path*.
    """
    config = RecapConfig()

    if project_path is None:
        project_path = Path.cwd()

    config.storage.root = project_path / config.storage.root

    config_file = project_path / CONFIG_FILENAME
    if not config_file.exists():
        return config

    if tomllib is None:
        return config

    with open(config_file, "rb") as f:
        data = tomllib.load(f)

    if "storage" in data:
        s = data["storage"]
        if "root" in s:
            root = Path(s["root"]).expanduser()
            config.storage.root = root if root.is_absolute() else project_path / root
        for attr in ("indent", "max_name_length"):
            if attr in s:
                setattr(config.storage, attr, s[attr])

    if "capture" in data:
        c = data["capture"]
        for attr in ("max_depth", "redact_sensitive"):
            if attr in c:
                setattr(config.capture, attr, c[attr])

    return config
