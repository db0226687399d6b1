"""Tests for billbook.config."""

import stat
from pathlib import Path

import pytest

from billbook.config import (
    create_default_config,
    get_company,
    get_max_number_attempts,
    get_numbering_modes,
    load_config,
    save_config,
    set_numbering_mode,
)
from billbook.domain.bill_numbers import NumberingMode
from billbook.domain.models import BillCategory


class TestDefaultConfig:
    """Tests for creating and loading config files."""

    def test_creates_private_file(self, tmp_path: Path) -> None:
        """Should write the defaults readable only by the owner."""
        config_path = tmp_path / "billbook" / "config.toml"
        create_default_config(config_path)

        assert stat.S_IMODE(config_path.stat().st_mode) == 0o600
        config = load_config(config_path)
        assert config["numbering"] == {"kacchi": "global", "pakki": "financial-year"}
        assert config["max_number_attempts"] == 3
        assert "name" in config["company"]

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        """Should fall back to the defaults without a file."""
        config = load_config(tmp_path / "missing.toml")
        assert get_numbering_modes(config)[BillCategory.CREDIT] is NumberingMode.FINANCIAL_YEAR


class TestNumberingModes:
    """Tests for numbering mode settings."""

    def test_partial_config_uses_defaults(self) -> None:
        """Should fill in categories missing from the config."""
        modes = get_numbering_modes({"numbering": {"pakki": "global"}})
        assert modes[BillCategory.CASH] is NumberingMode.GLOBAL
        assert modes[BillCategory.CREDIT] is NumberingMode.GLOBAL

    def test_unknown_mode_raises(self) -> None:
        """Should reject unknown modes and categories."""
        with pytest.raises(ValueError):
            get_numbering_modes({"numbering": {"kacchi": "monthly"}})
        with pytest.raises(ValueError):
            get_numbering_modes({"numbering": {"udhar": "global"}})

    def test_set_numbering_mode(self, tmp_path: Path) -> None:
        """Should persist a changed mode and keep the other settings."""
        config_path = tmp_path / "config.toml"
        create_default_config(config_path)

        set_numbering_mode(BillCategory.CASH, NumberingMode.FINANCIAL_YEAR, config_path)

        config = load_config(config_path)
        assert get_numbering_modes(config)[BillCategory.CASH] is NumberingMode.FINANCIAL_YEAR
        assert config["max_number_attempts"] == 3


class TestMaxNumberAttempts:
    """Tests for get_max_number_attempts."""

    def test_default(self) -> None:
        """Should default to three attempts."""
        assert get_max_number_attempts({}) == 3

    def test_invalid(self) -> None:
        """Should require at least one attempt."""
        with pytest.raises(ValueError):
            get_max_number_attempts({"max_number_attempts": 0})


class TestCompany:
    """Tests for the company block."""

    def test_defaults_are_blank(self, tmp_path: Path) -> None:
        """Should give empty strings when nothing is set."""
        company = get_company(load_config(tmp_path / "missing.toml"))
        assert company == {"name": "", "address": "", "gst": "", "jurisdiction": ""}

    def test_reads_saved_values(self, tmp_path: Path) -> None:
        """Should read and strip the saved company details."""
        config_path = tmp_path / "config.toml"
        create_default_config(config_path)
        config = load_config(config_path)
        config["company"]["name"] = "  Shree Traders "
        config["company"]["jurisdiction"] = "Nagpur"
        save_config(config, config_path)

        company = get_company(load_config(config_path))

        assert company["name"] == "Shree Traders"
        assert company["jurisdiction"] == "Nagpur"
        assert company["gst"] == ""
