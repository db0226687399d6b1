"""Configuration file management for billbook."""

import os
import tomllib
from pathlib import Path
from typing import Any

import tomli_w

from billbook.domain.bill_numbers import DEFAULT_MODES, NumberingMode
from billbook.domain.models import BillCategory

DEFAULT_MAX_NUMBER_ATTEMPTS = 3


def get_xdg_config_home() -> Path:
    """Get XDG config directory, with fallback to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_config_path() -> Path:
    """Get the config file path (XDG compliant).

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "billbook" / "config.toml"


def default_config() -> dict[str, Any]:
    """Build the configuration written by 'billbook init'."""
    return {
        "max_number_attempts": DEFAULT_MAX_NUMBER_ATTEMPTS,
        "numbering": {category.value: mode.value for category, mode in DEFAULT_MODES.items()},
        "company": {
            "name": "",
            "address": "",
            "gst": "",
            "jurisdiction": "",
        },
    }


def create_default_config(config_path: Path | None = None) -> None:
    """Create default config file with secure permissions.

    Args:
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "wb") as f:
        tomli_w.dump(default_config(), f)

    os.chmod(config_path, 0o600)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary (defaults if the file doesn't exist).

    Raises:
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        return default_config()

    with open(config_path, "rb") as f:
        return tomllib.load(f)


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Save configuration to TOML file.

    Args:
        config: Configuration dictionary.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)

    os.chmod(config_path, 0o600)


def get_numbering_modes(config: dict[str, Any]) -> dict[BillCategory, NumberingMode]:
    """Read the numbering mode of each bill category.

    Args:
        config: Configuration dictionary.

    Returns:
        Mode per category; categories missing from config use the defaults.

    Raises:
        ValueError: If a configured mode or category is unknown.
    """
    modes = dict(DEFAULT_MODES)
    for name, mode in config.get("numbering", {}).items():
        modes[BillCategory.parse(name)] = NumberingMode(mode)
    return modes


def get_max_number_attempts(config: dict[str, Any]) -> int:
    """Number of bill numbers to try before giving up on a conflict."""
    attempts = int(config.get("max_number_attempts", DEFAULT_MAX_NUMBER_ATTEMPTS))
    if attempts < 1:
        raise ValueError("max_number_attempts must be at least 1")
    return attempts


def set_numbering_mode(category: BillCategory, mode: NumberingMode, config_path: Path | None = None) -> None:
    """Set the numbering mode of one category.

    Args:
        category: Bill category.
        mode: Numbering mode.
        config_path: Path to config file. If None, uses default location.
    """
    config = load_config(config_path)
    numbering = config.get("numbering", {})
    numbering[category.value] = mode.value
    config["numbering"] = numbering
    save_config(config, config_path)


def get_company(config: dict[str, Any]) -> dict[str, str]:
    """Read the company details printed on bills and reports.

    Args:
        config: Configuration dictionary.

    Returns:
        Dictionary with name, address, gst and jurisdiction (empty strings if unset).
    """
    company = config.get("company", {})
    return {key: str(company.get(key, "")).strip() for key in ("name", "address", "gst", "jurisdiction")}
