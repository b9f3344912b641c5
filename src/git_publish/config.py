"""Per-package defaults loaded from .git-publish.toml or .git-publish.json.

Priority order:
1. Explicit command-line flags
2. .git-publish.toml next to package.json (preferred)
3. .git-publish.json next to package.json (fallback)
4. Built-in defaults
"""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from git_publish.errors import ConfigError
from git_publish.types import PACKAGE_MANAGERS, PackageManager, PublishRequest

TOML_CONFIG = ".git-publish.toml"
JSON_CONFIG = ".git-publish.json"


@dataclass(frozen=True)
class PublishConfig:
    """Defaults a package can pin for its publishes."""

    remote: str | None = None
    branch: str | None = None
    fresh: bool | None = None
    package_manager: PackageManager | None = None
    source: Path | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, source: Path | None = None) -> PublishConfig:
        """Parse and validate a config mapping."""
        unknown = sorted(set(data) - {"remote", "branch", "fresh", "package_manager"})
        if unknown:
            raise ValueError(f"unknown key(s): {', '.join(unknown)}")

        for key in ("remote", "branch"):
            value = data.get(key)
            if value is not None and (not isinstance(value, str) or not value.strip()):
                raise TypeError(f"{key} must be a non-empty string")

        fresh = data.get("fresh")
        if fresh is not None and not isinstance(fresh, bool):
            raise TypeError("fresh must be a boolean")

        manager = data.get("package_manager")
        if manager is not None and manager not in PACKAGE_MANAGERS:
            raise ValueError(f"package_manager must be one of {', '.join(PACKAGE_MANAGERS)}")

        return cls(
            remote=data.get("remote"),
            branch=data.get("branch"),
            fresh=fresh,
            package_manager=manager,
            source=source,
        )

    def apply(
        self,
        *,
        branch: str | None,
        remote: str | None,
        fresh: bool | None,
        dry: bool,
        force: bool,
    ) -> PublishRequest:
        """Merge flags over config values into the run's request."""
        return PublishRequest(
            branch=branch or self.branch,
            remote=remote or self.remote or "origin",
            fresh=fresh if fresh is not None else bool(self.fresh),
            dry=dry,
            force=force,
        )


def load_publish_config(package_dir: Path) -> PublishConfig:
    """Load config from the package directory, or return empty defaults.

    Raises:
        ConfigError: If a config file is malformed or has invalid values
    """
    toml_path = package_dir / TOML_CONFIG
    if toml_path.exists():
        try:
            with open(toml_path, "rb") as f:
                data = tomllib.load(f)
            return PublishConfig.from_dict(data, source=toml_path)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Malformed TOML config at {toml_path}: {e}") from e
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid config in {toml_path}: {e}") from e

    json_path = package_dir / JSON_CONFIG
    if json_path.exists():
        try:
            with open(json_path, encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise TypeError("expected a JSON object")
            return PublishConfig.from_dict(data, source=json_path)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Malformed JSON config at {json_path}: {e}") from e
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid config in {json_path}: {e}") from e

    return PublishConfig()
