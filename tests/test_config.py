"""Config validation and display."""

import pytest

from lifesim.config import Config


def test_defaults_validate():
    Config.validate()


def test_office_age_bounds_must_be_ordered(monkeypatch):
    monkeypatch.setattr(Config, "MIN_OFFICE_AGE", 80)
    monkeypatch.setattr(Config, "MAX_OFFICE_AGE", 75)
    with pytest.raises(ValueError, match="MIN_OFFICE_AGE"):
        Config.validate()


def test_unknown_log_level_rejected(monkeypatch):
    monkeypatch.setattr(Config, "LOG_LEVEL", "CHATTY")
    with pytest.raises(ValueError, match="LOG_LEVEL"):
        Config.validate()


def test_display_lists_settings(monkeypatch):
    monkeypatch.setattr(Config, "SEED", None)
    text = Config.display()
    assert text.startswith("Lifesim Configuration:")
    assert "Seed: random" in text
    assert f"Office ages: {Config.MIN_OFFICE_AGE}-{Config.MAX_OFFICE_AGE}" in text
