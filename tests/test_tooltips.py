"""TooltipCoordinator tests
Feature: dom-trainer teaching layer
"""

import pytest

from dom_trainer.ui.tooltips import TOOLTIP_KEYS, TOOLTIPS, TooltipCoordinator, cell_shade


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def coordinator(clock):
    return TooltipCoordinator(highlight_sec=3.0, clock=clock)


class TestTooltipCoordinator:

    def test_keys(self):
        assert TOOLTIP_KEYS == ("ask", "bid", "spread", "liquidity", "clusters", "tape")
        assert all(TOOLTIPS[k].target == k for k in TOOLTIP_KEYS)

    def test_toggle_opens_and_closes(self, coordinator):
        assert coordinator.toggle("spread") == "spread"
        assert coordinator.active_tooltip is TOOLTIPS["spread"]
        assert coordinator.toggle("spread") is None
        assert coordinator.active_tooltip is None

    def test_switching_keys(self, coordinator):
        coordinator.toggle("ask")
        assert coordinator.toggle("tape") == "tape"
        assert coordinator.active_key == "tape"

    def test_highlight_expires(self, coordinator, clock):
        coordinator.toggle("clusters")
        assert coordinator.highlighted_area == "clusters"
        assert coordinator.is_highlighted("clusters")

        clock.now += 2.9
        assert coordinator.highlighted_area == "clusters"

        clock.now += 0.2
        assert coordinator.highlighted_area is None
        # Tooltip text stays open after the pulse ends
        assert coordinator.active_key == "clusters"

    def test_new_click_restarts_highlight(self, coordinator, clock):
        coordinator.toggle("bid")
        clock.now += 2.5
        coordinator.toggle("ask")
        clock.now += 2.5
        assert coordinator.highlighted_area == "ask"

    def test_unknown_key(self, coordinator):
        with pytest.raises(KeyError):
            coordinator.toggle("volume")

    def test_clear(self, coordinator):
        coordinator.toggle("liquidity")
        coordinator.clear()
        assert coordinator.active_key is None
        assert coordinator.highlighted_area is None


class TestCellShade:

    @pytest.mark.parametrize(
        "intensity, high, expected",
        [
            (99.0, True, "wall"),
            (10.0, True, "wall"),
            (70.1, False, "strong"),
            (70.0, False, "medium"),
            (40.1, False, "medium"),
            (40.0, False, "weak"),
            (0.0, False, "weak"),
        ],
    )
    def test_buckets(self, intensity, high, expected):
        assert cell_shade(intensity, high) == expected
