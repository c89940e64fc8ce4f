"""
Configuration loader — reads aixpkg.yml and package manifests.

Reads YAML, validates against Pydantic schemas, and returns typed
objects. A missing aixpkg.yml is not an error: defaults describe a
stock AIX system.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from aixpkg.core.models.package import PackageSpec, Verb

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "aixpkg.yml"

_NUMBER_TAGS = ("tag:yaml.org,2002:int", "tag:yaml.org,2002:float")


class _ManifestLoader(yaml.SafeLoader):
    """SafeLoader that keeps numeric scalars as text.

    Package levels look like numbers (``1.10``, ``7``) and must survive
    unchanged; a float would turn ``1.10`` into ``1.1``.
    """


_ManifestLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in _NUMBER_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class ConfigError(Exception):
    """Raised when configuration or a manifest is invalid or missing."""


class Settings(BaseModel):
    """Runtime settings."""

    commands: dict[str, str] = Field(default_factory=dict)  # tool path overrides
    verify_ssl: bool = False        # HTTPS certificate checks for downloads
    download_dir: str | None = None
    command_timeout: float | None = None
    check_platform: bool = True


class ManifestEntry(PackageSpec):
    """A package in a manifest, optionally with its own action."""

    action: Verb | None = None


class Manifest(BaseModel):
    """A list of packages reconciled one by one, in file order."""

    action: Verb = Verb.INSTALL
    packages: list[ManifestEntry] = Field(default_factory=list)

    def entries(self) -> list[tuple[PackageSpec, Verb]]:
        """(spec, verb) per package, the entry's action overriding the default."""
        return [
            (PackageSpec(**entry.model_dump(exclude={"action"})), entry.action or self.action)
            for entry in self.packages
        ]


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for aixpkg.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to aixpkg.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def _read_yaml(path: Path, loader: type[yaml.SafeLoader] = yaml.SafeLoader) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.load(raw, Loader=loader)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    return data


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from an explicit path, or search upward for aixpkg.yml.

    Raises:
        ConfigError: If an explicit file is missing or any file is invalid.
    """
    if path is None:
        path = find_config_file()
        if path is None:
            logger.debug("No %s found, using defaults", CONFIG_FILE)
            return Settings()

    logger.debug("Loading settings from %s", path)
    data = _read_yaml(path)

    # Settings may sit under an "aixpkg" key or be flat
    settings_data = data.get("aixpkg", data)

    try:
        return Settings.model_validate(settings_data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e


def load_manifest(path: Path) -> Manifest:
    """Load and validate a package manifest.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    data = _read_yaml(path, _ManifestLoader)
    try:
        manifest = Manifest.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid manifest {path}: {e}") from e

    logger.info("Loaded manifest %s with %d packages", path, len(manifest.packages))
    return manifest
