"""
TOML File I/O Handler.

This module provides TOML parsing and writing for loader configuration files.

Key features:
- Parse TOML files using tomllib (Python 3.11+)
- Write TOML files using tomlkit (preserves comments and formatting)
"""

import tomllib
from pathlib import Path
from typing import Any

import tomlkit

from plugkit.config.schema import ConfigError


class TOMLError(ConfigError):
    """Base exception for TOML-related errors."""

    pass


def read_toml(file_path: Path) -> dict[str, Any]:
    """
    Read and parse a TOML file.

    Args:
        file_path: Path to the TOML file

    Returns:
        Parsed TOML data as dictionary

    Raises:
        TOMLError: If file cannot be read or parsed
    """
    try:
        with open(file_path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError as e:
        raise TOMLError(f"TOML file not found: {file_path}") from e
    except tomllib.TOMLDecodeError as e:
        raise TOMLError(f"Failed to parse TOML file {file_path}: {e}") from e
    except OSError as e:
        raise TOMLError(f"Failed to read TOML file {file_path}: {e}") from e


def render_toml(data: dict[str, Any], header: str | None = None) -> str:
    """
    Render a loader configuration document.

    Each plugin becomes a ``[[plugins]]`` table with its options in a nested
    ``[plugins.options]`` table.
    """
    doc = tomlkit.document()

    if header:
        for line in header.splitlines():
            doc.add(tomlkit.comment(line))
        doc.add(tomlkit.nl())

    plugins = tomlkit.aot()
    for entry in data.get("plugins", []):
        table = tomlkit.table()
        table.add("identifier", entry["identifier"])
        if entry.get("options") is not None:
            options = tomlkit.table()
            for key, value in entry["options"].items():
                options.add(key, value)
            table.add("options", options)
        plugins.append(table)

    doc.add("plugins", plugins)
    return tomlkit.dumps(doc)


def write_toml(file_path: Path, data: dict[str, Any], header: str | None = None) -> None:
    """
    Write a loader configuration document to a TOML file.

    Args:
        file_path: Path to the TOML file
        data: Document with a ``plugins`` list
        header: Optional comment placed at the top of the file

    Raises:
        TOMLError: If file cannot be written
    """
    try:
        content = render_toml(data, header)

        # Ensure parent directory exists
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
    except (OSError, TypeError, ValueError) as e:
        raise TOMLError(f"Failed to write TOML file {file_path}: {e}") from e
