"""
plugkit Configuration - declarative plugin lists.

This module provides:
- PluginSpec / LoaderConfig records
- Loading a plugin list from a TOML file
- Writing a plugin list back to TOML

Example file:
    [[plugins]]
    identifier = "plugkit.plugins.logger"

    [plugins.options]
    level = "info"

Example usage:
    import plugkit.config

    config = plugkit.config.load_config(Path("plugins.toml"))
    loader = PluginLoader(config)
"""

from pathlib import Path

from plugkit.config.schema import (
    ConfigError,
    LoaderConfig,
    PluginSpec,
    ValidationError,
    parse_spec,
)
from plugkit.config.toml_handler import TOMLError, read_toml, write_toml

DEFAULT_HEADER = "Plugins are loaded in the order listed below."


def load_config(file_path: Path | str) -> LoaderConfig:
    """
    Load a loader configuration from a TOML file.

    Args:
        file_path: Path to the TOML file

    Returns:
        LoaderConfig with specs in file order

    Raises:
        ConfigError: If the file is missing, unparsable or malformed
    """
    file_path = Path(file_path)
    data = read_toml(file_path)

    try:
        return LoaderConfig.from_dict(data)
    except ValidationError as e:
        raise ValidationError(f"{file_path}: {e}") from e


def dump_config(
    config: LoaderConfig, file_path: Path | str, header: str | None = DEFAULT_HEADER
) -> None:
    """
    Write a loader configuration to a TOML file.

    Args:
        config: Configuration to write
        file_path: Destination path (parent directories are created)
        header: Comment placed at the top of the file

    Raises:
        ConfigError: If the file cannot be written
    """
    write_toml(Path(file_path), config.to_dict(), header)


__all__ = [
    "ConfigError",
    "LoaderConfig",
    "PluginSpec",
    "TOMLError",
    "ValidationError",
    "dump_config",
    "load_config",
    "parse_spec",
]
