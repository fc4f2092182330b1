"""Unit tests for the hysteresis gate."""

from autoplug.engine.hysteresis import HysteresisGate
from autoplug.engine.policy import Decision

UP = Decision.SCALE_UP_ONE
DOWN = Decision.SCALE_DOWN_ONE
HOLD = Decision.HOLD


def feed(gate, decisions, online=3, offline=5, vetoed=False):
    return [gate.observe(d, online, offline, vetoed=vetoed) for d in decisions]


class TestHysteresisGate:
    """Test streak counting."""
    
    def test_scale_up_fires_on_third_sample(self):
        gate = HysteresisGate()
        assert feed(gate, [UP, UP, UP]) == [HOLD, HOLD, UP]
        assert gate.online_streak == 1
    
    def test_needs_a_fresh_streak_after_firing(self):
        gate = HysteresisGate()
        assert feed(gate, [UP] * 6) == [HOLD, HOLD, UP, HOLD, HOLD, UP]
    
    def test_hold_resets_both_streaks(self):
        gate = HysteresisGate()
        feed(gate, [UP, UP, HOLD])
        
        assert gate.online_streak == 1
        assert gate.offline_streak == 1
        assert feed(gate, [UP, UP, UP]) == [HOLD, HOLD, UP]
    
    def test_opposite_decision_resets_streak(self):
        gate = HysteresisGate()
        feed(gate, [DOWN] * 4)
        assert gate.offline_streak == 5
        
        feed(gate, [UP])
        assert gate.offline_streak == 1
        assert gate.online_streak == 2
        
        assert feed(gate, [DOWN] * 5) == [HOLD] * 4 + [DOWN]
        assert gate.online_streak == 1
    
    def test_scale_all_up_is_immediate(self):
        gate = HysteresisGate()
        feed(gate, [UP, UP])
        
        assert gate.observe(Decision.SCALE_ALL_UP, 3, 5) is Decision.SCALE_ALL_UP
        assert gate.online_streak == 1
        assert gate.offline_streak == 1
    
    def test_veto_holds_without_losing_streak(self):
        """Scale-down waits for the veto to clear, then fires at once."""
        gate = HysteresisGate()
        
        assert feed(gate, [DOWN] * 10, offline=2, vetoed=True) == [HOLD] * 10
        assert gate.offline_streak == 2
        
        assert gate.observe(DOWN, 3, 2, vetoed=False) is DOWN
        assert gate.offline_streak == 1
    
    def test_streaks_never_drop_below_one(self):
        gate = HysteresisGate()
        feed(gate, [HOLD, HOLD])
        gate.reset()
        
        assert gate.online_streak == 1
        assert gate.offline_streak == 1
