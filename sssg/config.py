"""Project configuration for sssg.

Settings come from built-in defaults, optionally overridden by an
``sssg.yaml`` file in the project root. Command-line options override both.

Key items:
- DEFAULT_CONFIG: Built-in defaults.
- SiteConfig: Resolved configuration for one project root.
- load_config: Read sssg.yaml and merge it over the defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError, FileError

CONFIG_FILENAME = "sssg.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "htdocs_dir": "htdocs",
    "templates_dir": "templates",
    "host": "0.0.0.0",
    "port": 1337,
    "index_file": "index.html",
}


@dataclass
class SiteConfig:
    """Resolved configuration for a project.

    Attributes:
        project_root: Directory the relative paths are resolved against.
        htdocs_dir: Source tree, which is also the output tree.
        templates_dir: Directory holding templates named by ``config.template``.
        host: Default bind address for the preview server.
        port: Default port for the preview server.
        index_file: File served for request paths ending in ``/``.
    """

    project_root: Path
    htdocs_dir: str = DEFAULT_CONFIG["htdocs_dir"]
    templates_dir: str = DEFAULT_CONFIG["templates_dir"]
    host: str = DEFAULT_CONFIG["host"]
    port: int = DEFAULT_CONFIG["port"]
    index_file: str = DEFAULT_CONFIG["index_file"]

    @property
    def htdocs_path(self) -> Path:
        return self.project_root / self.htdocs_dir

    @property
    def templates_path(self) -> Path:
        return self.project_root / self.templates_dir


def load_config(project_root: Path) -> SiteConfig:
    """Load project configuration from sssg.yaml.

    Unknown keys are ignored, and a file whose top level is not a mapping is
    treated as empty.

    Args:
        project_root: Root directory of the project.

    Returns:
        SiteConfig with defaults applied.

    Raises:
        FileError: If sssg.yaml exists but cannot be read.
        ConfigError: If sssg.yaml is not valid YAML or a value has the
            wrong type.
    """
    config_path = project_root / CONFIG_FILENAME
    config = DEFAULT_CONFIG.copy()
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            # PyYAML messages span several lines; diagnostics are one line.
            detail = " ".join(str(exc).split())
            raise ConfigError(config_path, f"Invalid configuration ({detail})", exc) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise FileError(config_path, f"Error reading file ({exc})", exc) from exc
        if isinstance(loaded, dict):
            config.update(
                {key: value for key, value in loaded.items() if key in DEFAULT_CONFIG}
            )
    try:
        site_config = SiteConfig(
            project_root=project_root,
            htdocs_dir=str(config["htdocs_dir"]),
            templates_dir=str(config["templates_dir"]),
            host=str(config["host"]),
            port=int(config["port"]),
            index_file=str(config["index_file"]),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(config_path, f"Invalid configuration ({exc})", exc) from exc
    if not 0 <= site_config.port <= 65535:
        raise ConfigError(
            config_path, f"Invalid configuration (port {site_config.port} out of range)"
        )
    return site_config
