"""Tests for StoreConfig presets and validation."""

from lazyforest import MoveFallback, StoreConfig
from lazyforest.core import new_node_id


def test_defaults():
    """The default config matches an interactive tree view."""
    config = StoreConfig()
    assert config.move_fallback is MoveFallback.RESTORE
    assert config.expand_parent_on_add is True
    assert config.validate_fetched_ids is True
    assert config.id_factory is new_node_id
    assert config.validate() == []


def test_strict_preset():
    """strict() never auto-expands and validates fetched data."""
    config = StoreConfig.strict()
    assert config.expand_parent_on_add is False
    assert config.validate_fetched_ids is True
    assert config.move_fallback is MoveFallback.RESTORE


def test_lenient_preset():
    """lenient() re-homes orphaned moves and trusts the source."""
    config = StoreConfig.lenient()
    assert config.move_fallback is MoveFallback.APPEND_ROOT
    assert config.validate_fetched_ids is False
    assert config.validate() == []


def test_validate_reports_all_problems():
    """Every invalid field is reported."""
    config = StoreConfig(move_fallback='restore', id_factory=42)
    errors = config.validate()
    assert len(errors) == 2
    assert any('move_fallback' in error for error in errors)
    assert any('id_factory' in error for error in errors)


def test_fallback_values():
    """Fallbacks can be looked up by their string value."""
    assert MoveFallback('append_root') is MoveFallback.APPEND_ROOT
