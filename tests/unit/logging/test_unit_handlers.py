# tests/unit/logging/test_unit_handlers.py — v1
"""Tests for logging/handlers.py — size parsing and rotating handler."""

from __future__ import annotations

import pytest

from classboard.logging.handlers import create_rotating_handler, parse_size


class TestParseSize:
    @pytest.mark.parametrize(
        "value,expected",
        [("10MB", 10 * 1024**2), ("512kb", 512 * 1024), ("1GB", 1024**3), ("2048", 2048)],
    )
    def test_units(self, value, expected):
        assert parse_size(value) == expected

    def test_invalid(self):
        with pytest.raises(ValueError, match="Invalid size"):
            parse_size("ten megs")


class TestRotatingHandler:
    def test_creates_parent_dir(self, tmp_path):
        target = tmp_path / "nested" / "app.log"
        handler = create_rotating_handler(target, rotation="1KB", retention=2)
        try:
            assert target.parent.is_dir()
            assert handler.maxBytes == 1024
            assert handler.backupCount == 2
        finally:
            handler.close()
