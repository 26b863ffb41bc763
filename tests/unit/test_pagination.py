"""Unit tests for fundscope.engines.pagination."""

from __future__ import annotations

import pytest

from fundscope.engines import DisplayWindow


class TestDisplayWindow:
    def test_defaults(self):
        window = DisplayWindow(total=1200)
        assert window.display_limit == 500
        assert window.step == 200

    @pytest.mark.parametrize("total", [0, 10, 500, 1200])
    def test_displayed_length(self, total):
        items = list(range(total))
        window = DisplayWindow(total=total)
        assert len(window.displayed(items)) == min(500, total)

    def test_load_more_adds_exactly_one_step(self):
        window = DisplayWindow(total=1200)
        assert window.load_more() == 700
        assert len(window.displayed(list(range(1200)))) == 700

    def test_load_more_capped_at_total(self):
        window = DisplayWindow(total=620)
        window.load_more()
        assert window.display_limit == 620
        assert not window.has_more
        assert window.remaining == 0

    def test_load_more_noop_when_everything_shown(self):
        window = DisplayWindow(total=100)
        assert window.load_more() == 500
        assert window.shown == 100

    def test_remaining(self):
        window = DisplayWindow(total=900, display_limit=500)
        assert window.has_more
        assert window.remaining == 400

    def test_set_total(self):
        window = DisplayWindow(total=900)
        window.set_total(-3)
        assert window.total == 0
        assert not window.has_more

    def test_invalid_step(self):
        with pytest.raises(ValueError):
            DisplayWindow(total=10, step=0)
