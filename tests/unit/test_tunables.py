"""Unit tests for the live tunable store."""

import pytest
from autoplug.control.tunables import TunableStore
from autoplug.engine import Mode, run_tick
from autoplug.utils.validation import ValidationError


@pytest.fixture
def tunables(state):
    return TunableStore(state)


class TestTunableStore:
    """Test reading and writing live thresholds."""
    
    def test_snapshot(self, tunables):
        snapshot = tunables.snapshot()
        
        assert snapshot["enable_all_load"] == 700
        assert snapshot["enable_load"] == [0, 200, 235, 300, 4000]
        assert snapshot["disable_load"] == [0, 70, 70, 70, 70]
        assert snapshot["min_online"] == 1
        assert set(snapshot) == set(tunables.names())
    
    def test_get_returns_copy(self, tunables, state):
        table = tunables.get("disable_load")
        table[1] = 999
        assert state.tables.disable_load[1] == 70
    
    def test_unknown_name(self, tunables):
        with pytest.raises(KeyError):
            tunables.get("nope")
        with pytest.raises(KeyError):
            tunables.set("nope", 1)
    
    def test_set_scalar(self, tunables, state):
        tunables.set("enable_all_load", 0)
        assert state.tables.enable_all_load == 0
        
        with pytest.raises(ValidationError):
            tunables.set("enable_all_load", -1)
        with pytest.raises(ValidationError):
            tunables.set("enable_all_load", "high")
    
    def test_set_table(self, tunables, state):
        tunables.set("enable_load", [0, 100, 200, 300, 400])
        assert state.tables.enable_load == [0, 100, 200, 300, 400]
        
        with pytest.raises(ValidationError):
            tunables.set("enable_load", [0, 100])
        with pytest.raises(ValidationError):
            tunables.set("sample_interval_ms", [0, 50, 0, 50, 50])
        with pytest.raises(ValidationError):
            tunables.set("offline_hysteresis", 5)
    
    def test_set_entry(self, tunables, state):
        tunables.set_entry("disable_load", 2, 0)
        assert state.tables.disable_load == [0, 70, 0, 70, 70]
        
        with pytest.raises(ValidationError):
            tunables.set_entry("disable_load", 0, 10)
        with pytest.raises(ValidationError):
            tunables.set_entry("disable_load", 5, 10)
        with pytest.raises(ValidationError):
            tunables.set_entry("online_hysteresis", 1, 0)
        with pytest.raises(KeyError):
            tunables.set_entry("enable_all_load", 1, 10)
    
    def test_edit_takes_effect_next_tick(self, tunables, state, intervals, load_source):
        load_source.load = 150
        tunables.set_entry("online_hysteresis", 1, 1)
        
        run_tick(state, intervals)
        assert state.pool.online_count == 1
        
        tunables.set_entry("enable_load", 1, 100)
        run_tick(state, intervals)
        assert state.pool.online_count == 2
    
    def test_min_online(self, tunables, state, intervals):
        tunables.set("min_online", 3)
        assert state.min_online == 3
        
        run_tick(state, intervals)
        assert state.pool.online_count == 3
        
        with pytest.raises(ValidationError):
            tunables.set("min_online", 5)
        with pytest.raises(ValidationError):
            tunables.set("min_online", 0)
    
    def test_min_online_while_suspended(self, tunables, state):
        state.mode = Mode.SUSPENDED
        state.min_online = 1
        
        tunables.set("min_online", 2)
        
        assert state.min_online == 1
        assert state.base_min_online == 2
        assert tunables.get("min_online") == 2
