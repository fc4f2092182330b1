"""Pytest configuration and fixtures."""

import pytest
from pathlib import Path
import tempfile
import shutil

from autoplug.core.config import SystemConfig
from autoplug.core.events import EventBus
from autoplug.engine import IntervalController, build_state
from autoplug.sources.units import SimulatedUnitDriver
from tests.fixtures.mock_services import MockLoadSource


@pytest.fixture
def temp_data_dir():
    """Create temporary data directory."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture
def test_config(temp_data_dir):
    """Create test configuration: four units, no smoothing, fast ticks."""
    config = SystemConfig()
    config.debug_mode = True
    config.log_level = "DEBUG"
    config.log_dir = str(temp_data_dir / "logs")
    
    config.pool.capacity = 4
    config.pool.driver = "simulated"
    config.pool.online_all_on_stop = False
    
    config.sampler.smoothing = False
    
    config.thresholds.enable_all_load = 700
    config.thresholds.enable_load = [0, 200, 235, 300, 4000]
    config.thresholds.disable_load = 70
    config.thresholds.sample_interval_ms = [0, 5, 5, 5, 5]
    config.thresholds.online_hysteresis = 3
    config.thresholds.offline_hysteresis = 5
    
    config.control.startup_delay_ms = 0
    config.control.interval_floor_ms = 1
    
    return config


@pytest.fixture
def driver():
    """Four-unit simulated pool with only unit 0 online."""
    return SimulatedUnitDriver(4)


@pytest.fixture
def load_source():
    return MockLoadSource(load=0)


@pytest.fixture
def state(test_config, driver, load_source):
    return build_state(test_config, driver, load_source)


@pytest.fixture
def intervals(test_config):
    return IntervalController(floor_ms=test_config.control.interval_floor_ms)


@pytest.fixture
async def event_bus():
    """Create and start event bus."""
    bus = EventBus()
    await bus.start()
    yield bus
    await bus.stop()
