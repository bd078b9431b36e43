"""
Tests for Settings
==================
Tests the app.yaml loader in lexaccess/settings.py.
"""

import pytest
import sys
from pathlib import Path

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from lexaccess.settings import (
    APP_CONFIG_PATH,
    get_setting,
    load_app_config,
    require_setting,
    resolve_path,
)


class TestSettings:
    """Tests for dotted-path lookups."""

    def test_config_exists(self):
        assert APP_CONFIG_PATH.exists()
        assert isinstance(load_app_config(), dict)

    def test_nested(self):
        assert get_setting("scoring.base_correct") == 10
        assert get_setting("norms.brackets.60+.mean") == 49

    def test_missing_returns_default(self):
        assert get_setting("scoring.nope") is None
        assert get_setting("nope.deeper", 7) == 7

    def test_require_setting(self):
        assert require_setting("session.practice_rounds") == 3
        with pytest.raises(ValueError, match="must be set in app.yaml"):
            require_setting("storage.nope")


class TestResolvePath:
    """Tests for path resolution."""

    def test_absolute(self, tmp_path):
        assert resolve_path(str(tmp_path)) == tmp_path

    def test_relative_to_base(self, tmp_path):
        assert resolve_path("a/b.db", base=tmp_path) == (tmp_path / "a" / "b.db").resolve()

    def test_home(self):
        assert resolve_path("~/x.db") == Path.home() / "x.db"

    def test_none(self):
        with pytest.raises(ValueError):
            resolve_path(None)
