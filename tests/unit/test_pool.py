"""Unit tests for unit pool selection and mutation."""

import pytest
from autoplug.engine.pool import SelectionPolicy, UnitPool, UnitState
from autoplug.sources.units import SimulatedUnitDriver
from tests.fixtures.mock_services import MockLoadSource


def assert_consistent(pool, driver):
    assert pool.online_count == len(pool.online_units())
    assert set(pool.online_units()) == driver.online_units()
    assert pool.is_online(0)


class TestUnitPool:
    """Test selection policies and failure handling."""
    
    def test_initial_state_from_driver(self):
        driver = SimulatedUnitDriver(4, online=[0, 2])
        pool = UnitPool(driver)
        
        assert pool.capacity == 4
        assert pool.online_count == 2
        assert pool.state(1) is UnitState.OFFLINE
        assert pool.state(2) is UnitState.ONLINE
    
    def test_bring_one_online_picks_lowest_offline(self):
        driver = SimulatedUnitDriver(4, online=[0, 2])
        pool = UnitPool(driver)
        
        assert pool.bring_one_online() == 1
        assert pool.bring_one_online() == 3
        assert pool.bring_one_online() is None
        assert_consistent(pool, driver)
    
    def test_fixed_policy_takes_highest_online(self):
        driver = SimulatedUnitDriver(4, online=range(4))
        pool = UnitPool(driver, selection=SelectionPolicy.FIXED)
        
        assert pool.take_one_offline() == 3
        assert pool.take_one_offline() == 2
        assert_consistent(pool, driver)
    
    def test_idlest_policy_takes_least_utilized(self):
        metrics = MockLoadSource(utilization={0: 0, 1: 40, 2: 10, 3: 70})
        driver = SimulatedUnitDriver(4, online=range(4))
        pool = UnitPool(driver, selection=SelectionPolicy.IDLEST, metrics=metrics)
        
        assert pool.take_one_offline() == 2
        assert pool.is_online(0)
        assert_consistent(pool, driver)
    
    def test_idlest_ties_go_to_lower_ordinal(self):
        metrics = MockLoadSource(utilization={1: 5, 2: 5, 3: 5})
        pool = UnitPool(SimulatedUnitDriver(4, online=range(4)), selection=SelectionPolicy.IDLEST, metrics=metrics)
        
        assert pool.take_one_offline() == 1
    
    def test_idlest_skips_unreadable_units(self):
        metrics = MockLoadSource(utilization={1: 90, 3: 20})
        pool = UnitPool(SimulatedUnitDriver(4, online=range(4)), selection=SelectionPolicy.IDLEST, metrics=metrics)
        
        assert pool.take_one_offline() == 3
    
    def test_idlest_falls_back_to_highest(self):
        pool = UnitPool(
            SimulatedUnitDriver(4, online=range(4)),
            selection=SelectionPolicy.IDLEST,
            metrics=MockLoadSource(),
        )
        assert pool.take_one_offline() == 3
    
    def test_idlest_requires_metrics(self):
        with pytest.raises(ValueError):
            UnitPool(SimulatedUnitDriver(4), selection=SelectionPolicy.IDLEST)
    
    def test_floor_is_respected(self):
        driver = SimulatedUnitDriver(4, online=[0, 1])
        pool = UnitPool(driver)
        
        assert pool.take_one_offline(min_online=2) is None
        assert pool.take_one_offline(min_online=1) == 1
        assert pool.take_one_offline(min_online=1) is None
        assert driver.calls == [("down", 1)]
    
    def test_failed_activation_leaves_state(self):
        driver = SimulatedUnitDriver(4, refuse_online=[1])
        pool = UnitPool(driver)
        
        assert pool.bring_one_online() is None
        assert pool.online_count == 1
        assert pool.state(1) is UnitState.OFFLINE
        
        failures = pool.pop_failures()
        assert len(failures) == 1
        assert failures[0].unit == 1
        assert failures[0].target_online is True
        assert pool.pop_failures() == []
    
    def test_failed_deactivation_leaves_state(self):
        driver = SimulatedUnitDriver(4, online=range(4), refuse_offline=[3])
        pool = UnitPool(driver)
        
        assert pool.take_one_offline() is None
        assert pool.online_count == 4
        assert_consistent(pool, driver)
    
    def test_bring_all_online_skips_failures(self):
        driver = SimulatedUnitDriver(4, refuse_online=[2])
        pool = UnitPool(driver)
        
        assert pool.bring_all_online() == [1, 3]
        assert pool.online_count == 3
        assert_consistent(pool, driver)
    
    def test_take_all_offline_keeps_unit_zero(self):
        driver = SimulatedUnitDriver(4, online=range(4))
        pool = UnitPool(driver)
        
        assert pool.take_all_offline() == [3, 2, 1]
        assert pool.online_units() == [0]
        assert_consistent(pool, driver)
    
    def test_take_all_offline_honors_keep(self):
        pool = UnitPool(SimulatedUnitDriver(4, online=range(4)))
        
        assert pool.take_all_offline(keep=2) == [3, 2]
        assert pool.online_count == 2
