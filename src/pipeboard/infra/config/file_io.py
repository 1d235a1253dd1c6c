from __future__ import annotations

import json
import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from pipeboard.infra.paths import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_CONFIG_FILENAME,
    SETTING_PATH,
)

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PIPEBOARD_CONFIG"
LOCAL_CONFIG_NAMES = ["settings.toml", "settings.json"]


def _resolve_file_path(
    user_path: str | Path | None,
    local_filename: list[str],
    fallback_path: Path,
) -> Path | None:
    """
    Resolve the file path to use based on a prioritized lookup order.

    Lookup order:
        1. User-specified path (if provided and exists)
        2. Path named by the ``PIPEBOARD_CONFIG`` environment variable
        3. A file in the current working directory matching any of `local_filename`
        4. A globally registered fallback path

    Args:
        user_path: Optional file path explicitly provided by the user.
        local_filename: List of file names to check in the current working directory.
        fallback_path: Fallback path to use if no other match is found.

    Returns:
        A resolved `Path` instance if found, otherwise None.
    """
    for candidate in (user_path, os.environ.get(CONFIG_ENV_VAR)):
        if not candidate:
            continue
        path = Path(candidate).expanduser().resolve()
        if path.is_file():
            return path
        logger.warning("Specified file not found: %s", path)

    for name in local_filename:
        local_path = (Path.cwd() / name).resolve()
        if local_path.is_file():
            logger.debug("Using local file: %s", local_path)
            return local_path

    if fallback_path.is_file():
        return fallback_path.resolve()

    return None


def _load_by_extension(path: Path) -> dict[str, Any]:
    """
    Load a configuration file by its file extension.

    Supports `.json` and `.toml` files.

    Raises:
        ValueError: If the file extension is unsupported, if parsing fails, or
            if the root element is not a table.
    """
    ext = path.suffix.lower()

    if ext == ".json":
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e

    elif ext == ".toml":
        try:
            with path.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {path}: {e}") from e

    else:
        raise ValueError(f"Unsupported config file extension: {ext}")

    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a dict, got {type(data)} in {path}")

    return data


def load_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """
    Load configuration data from a TOML or JSON file.

    Resolution order:
        - Explicit `config_path` (if provided)
        - The ``PIPEBOARD_CONFIG`` environment variable
        - `settings.toml` or `settings.json` in the working directory
        - `SETTING_PATH` fallback path

    Args:
        config_path: Optional explicit configuration file path.

    Returns:
        Parsed configuration as a dictionary.

    Raises:
        FileNotFoundError: If no valid configuration file is found.
        ValueError: If the file cannot be parsed or contains invalid structure.
    """
    path = _resolve_file_path(
        user_path=config_path,
        local_filename=LOCAL_CONFIG_NAMES,
        fallback_path=SETTING_PATH,
    )

    if not path:
        raise FileNotFoundError("No valid config file found.")

    logger.debug("Loading configuration from: %s", path)
    return _load_by_extension(path)


def copy_default_config(target: Path | None = None) -> Path:
    """
    Copy the bundled sample config to the given target path.

    Args:
        target: Destination path; defaults to ``./settings.toml``.

    Returns:
        The path the sample was written to.
    """
    target = target or Path.cwd() / DEFAULT_CONFIG_FILENAME
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(DEFAULT_CONFIG_FILE.read_bytes())
    logger.info("Sample configuration written to: %s", target)
    return target


def save_config_file(
    source_path: str | Path,
    output_path: str | Path | None = None,
) -> Path:
    """
    Load a TOML/JSON configuration file and install it as user-wide JSON.

    Args:
        source_path: Path to the source TOML/JSON file.
        output_path: Destination JSON file; defaults to `SETTING_PATH`.

    Returns:
        The path the configuration was written to.

    Raises:
        FileNotFoundError: If the source file does not exist.
        ValueError: If the source file is invalid or cannot be parsed.
    """
    source = Path(source_path).expanduser().resolve()
    if not source.is_file():
        raise FileNotFoundError(f"Source file not found: {source}")

    data = _load_by_extension(source)
    output = Path(output_path) if output_path is not None else SETTING_PATH
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("Configuration saved to: %s", output)
    return output
