"""Unit tests for the threshold policy."""

import pytest
from autoplug.engine.policy import Decision, evaluate
from autoplug.engine.tables import ThresholdTables


@pytest.fixture
def tables():
    return ThresholdTables(
        enable_all_load=700,
        enable_load=[0, 200, 235, 300],
        disable_load=[0, 70, 70, 70, 70],
        sample_interval_ms=[0, 50, 100, 150, 100],
        online_hysteresis=[0, 3, 3, 3, 3],
        offline_hysteresis=[0, 5, 5, 5, 5],
    )


class TestThresholdPolicy:
    """Test decision priority and thresholds."""
    
    def test_scale_all_up(self, tables):
        assert evaluate(700, 1, 1, 4, 1, tables) is Decision.SCALE_ALL_UP
    
    def test_no_scale_up_when_full(self, tables):
        assert evaluate(5000, 4, 1, 4, 1, tables) is Decision.HOLD
    
    def test_scale_up_one(self, tables):
        assert evaluate(250, 1, 1, 4, 1, tables) is Decision.SCALE_UP_ONE
        assert evaluate(200, 1, 1, 4, 1, tables) is Decision.SCALE_UP_ONE
        assert evaluate(234, 2, 1, 4, 1, tables) is Decision.HOLD
    
    def test_suspend_multiplier_raises_scale_up_bar(self, tables):
        """350 is enough in normal mode but not against 200 x 2."""
        assert evaluate(350, 1, 1, 4, 1, tables) is Decision.SCALE_UP_ONE
        assert evaluate(350, 1, 1, 4, 2, tables) is Decision.HOLD
    
    def test_multiplier_does_not_touch_scale_down(self, tables):
        assert evaluate(70, 2, 1, 4, 2, tables) is Decision.SCALE_DOWN_ONE
        assert evaluate(71, 2, 1, 4, 2, tables) is Decision.HOLD
    
    def test_scale_down_respects_floor(self, tables):
        assert evaluate(0, 1, 1, 4, 1, tables) is Decision.HOLD
        assert evaluate(0, 2, 2, 4, 1, tables) is Decision.HOLD
        assert evaluate(0, 3, 2, 4, 1, tables) is Decision.SCALE_DOWN_ONE
    
    def test_scale_all_up_beats_contradictory_disable(self, tables):
        """Hostile tables where the load also satisfies scale-down."""
        tables.disable_load = [0, 1000, 1000, 1000, 1000]
        tables.enable_all_load = 500
        
        assert evaluate(600, 2, 1, 4, 1, tables) is Decision.SCALE_ALL_UP
    
    def test_scale_up_beats_contradictory_disable(self, tables):
        tables.disable_load = [0, 1000, 1000, 1000, 1000]
        assert evaluate(250, 2, 1, 4, 1, tables) is Decision.SCALE_UP_ONE
    
    def test_zero_disable_entry_never_scales_down(self, tables):
        tables.disable_load = [0, 70, 0, 70, 70]
        
        assert evaluate(0, 2, 1, 4, 1, tables) is Decision.HOLD
        assert evaluate(0, 3, 1, 4, 1, tables) is Decision.SCALE_DOWN_ONE
    
    def test_zero_enable_entry_never_scales_up(self, tables):
        tables.enable_load = [0, 0, 235, 300]
        tables.enable_all_load = 0
        
        assert evaluate(5000, 1, 1, 4, 1, tables) is Decision.HOLD
        assert evaluate(5000, 2, 1, 4, 1, tables) is Decision.SCALE_UP_ONE
    
    def test_short_table_clamps_to_last_entry(self, tables):
        """enable_load has no entry for 4 online; disable_load is used past its end."""
        tables.disable_load = [0, 70]
        assert evaluate(60, 4, 1, 4, 1, tables) is Decision.SCALE_DOWN_ONE
