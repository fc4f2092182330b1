"""Unit tests for the interval controller."""

import pytest
from autoplug.engine.interval import IntervalController
from autoplug.engine.policy import Decision
from autoplug.engine.tables import ThresholdTables


@pytest.fixture
def tables():
    return ThresholdTables.defaults(4)


class TestIntervalController:
    """Test next-delay computation."""
    
    def test_table_interval(self, tables):
        controller = IntervalController()
        
        assert controller.next_interval(tables, 1, 1) == 50
        assert controller.next_interval(tables, 3, 1) == 150
    
    def test_multiplier_scales_interval(self, tables):
        assert IntervalController().next_interval(tables, 2, 2) == 200
    
    def test_zero_entry_uses_floor(self, tables):
        tables.sample_interval_ms[2] = 0
        assert IntervalController(floor_ms=30).next_interval(tables, 2, 1) == 30
    
    def test_never_below_floor(self, tables):
        tables.sample_interval_ms[1] = 5
        assert IntervalController(floor_ms=20).next_interval(tables, 1, 1) == 20
    
    def test_scale_up_shortens_interval(self, tables):
        controller = IntervalController(scale_up_interval_ms=25)
        
        assert controller.next_interval(tables, 3, 1, Decision.SCALE_UP_ONE) == 75
        assert controller.next_interval(tables, 3, 1, Decision.HOLD) == 150
        # only ever shorter than the table
        assert controller.next_interval(tables, 1, 1, Decision.SCALE_UP_ONE) == 25
        assert IntervalController(scale_up_interval_ms=100).next_interval(
            tables, 1, 1, Decision.SCALE_UP_ONE
        ) == 50
    
    def test_past_table_end(self, tables):
        tables.sample_interval_ms = [0, 50, 100]
        assert IntervalController().next_interval(tables, 4, 1) == 100
    
    def test_invalid_floor(self):
        with pytest.raises(ValueError):
            IntervalController(floor_ms=0)
