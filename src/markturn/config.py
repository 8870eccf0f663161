#  Copyright (c) 2025 Tom Villani, Ph.D.

"""Options file discovery and loading.

Style options can live in a dedicated file (``.markturn.toml``,
``.markturn.yaml``, ``.markturn.yml``, ``.markturn.json``) or in the
``[tool.markturn]`` table of ``pyproject.toml``. The loaded mapping is passed
through ``resolve_options`` so the same key spellings and numeric selectors
work in every format.
"""

import json
import logging
import sys
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found,unused-ignore]
from typing import Any, Dict, Optional, Union

import yaml

from markturn.exceptions import ConfigError
from markturn.options import ConversionOptions, resolve_options

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = [".markturn.toml", ".markturn.yaml", ".markturn.yml", ".markturn.json"]


def _load_pyproject_section(pyproject_path: Path) -> Dict[str, Any]:
    """Load the [tool.markturn] section from a pyproject.toml file.

    Parameters
    ----------
    pyproject_path : Path
        Path to pyproject.toml file

    Returns
    -------
    dict
        Configuration from [tool.markturn], or empty dict if not present

    Raises
    ------
    ConfigError
        If pyproject.toml cannot be parsed or the section is not a table

    """
    try:
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {pyproject_path}: {e}", config_path=str(pyproject_path), original_error=e) from e
    except OSError as e:
        raise ConfigError(f"Error reading {pyproject_path}: {e}", config_path=str(pyproject_path), original_error=e) from e

    section = data.get("tool", {}).get("markturn", {})
    if not isinstance(section, dict):
        raise ConfigError(
            f"[tool.markturn] section in {pyproject_path} must be a table, got {type(section).__name__}",
            config_path=str(pyproject_path),
        )
    return section


def find_config_in_parents(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Find an options file by walking up from ``start_dir``.

    Each directory is checked for the dedicated file names in priority order,
    then for a ``pyproject.toml`` that has a ``[tool.markturn]`` table.

    Parameters
    ----------
    start_dir : Path, optional
        Starting directory, defaults to the current working directory

    Returns
    -------
    Path or None
        First options file found, or None

    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        pyproject_path = current / "pyproject.toml"
        if pyproject_path.is_file():
            try:
                if _load_pyproject_section(pyproject_path):
                    return pyproject_path
            except ConfigError:
                logger.debug(f"Skipping unreadable {pyproject_path}")

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_config_file(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Read a raw option mapping from a TOML, YAML or JSON file.

    Parameters
    ----------
    config_path : str or Path
        Path to the file. ``pyproject.toml`` is read from its
        ``[tool.markturn]`` table.

    Returns
    -------
    dict
        Raw option mapping (not yet resolved)

    Raises
    ------
    ConfigError
        If the file does not exist, cannot be parsed, or is not a mapping

    """
    path = Path(config_path)
    if not path.is_file():
        raise ConfigError(f"Options file not found: {path}", config_path=str(path))

    if path.name == "pyproject.toml":
        return _load_pyproject_section(path)

    suffix = path.suffix.lower()
    try:
        if suffix == ".toml":
            with open(path, "rb") as f:
                data: Any = tomllib.load(f)
        elif suffix in (".yaml", ".yml"):
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        elif suffix == ".json":
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        else:
            raise ConfigError(f"Unsupported options file format: {path.suffix}", config_path=str(path))
    except (tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"Invalid options file {path}: {e}", config_path=str(path), original_error=e) from e
    except OSError as e:
        raise ConfigError(f"Error reading options file {path}: {e}", config_path=str(path), original_error=e) from e

    if not isinstance(data, dict):
        raise ConfigError(
            f"Options file {path} must contain a mapping, got {type(data).__name__}", config_path=str(path)
        )
    logger.debug(f"Loaded {len(data)} option(s) from {path}")
    return data


def load_options(config_path: Union[str, Path, None] = None, start_dir: Optional[Path] = None) -> ConversionOptions:
    """Load and resolve conversion options from a file.

    Parameters
    ----------
    config_path : str or Path, optional
        Explicit options file. When omitted, ``find_config_in_parents`` is
        used and defaults are returned if nothing is found.
    start_dir : Path, optional
        Directory to start the search from

    Returns
    -------
    ConversionOptions
        Resolved options

    """
    if config_path is None:
        found = find_config_in_parents(start_dir)
        if found is None:
            return ConversionOptions()
        config_path = found

    logger.info("Using options file: %s", config_path)
    return resolve_options(load_config_file(config_path))


__all__ = [
    "CONFIG_FILENAMES",
    "find_config_in_parents",
    "load_config_file",
    "load_options",
]
