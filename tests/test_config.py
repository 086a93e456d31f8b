"""
Tests for configuration management.
"""

import pytest
import tempfile
import yaml
from pathlib import Path
import sys

# Add the heat_scheduler package to the path
sys.path.append(str(Path(__file__).parent.parent))

from heat_scheduler.config import (
    SchedulerConfig,
    ScheduleOptions,
    load_config,
    save_config,
    resolve_options,
)


def test_basic_config_creation():
    """Test creating a basic configuration."""
    config_data = {
        "lane_count": 6,
        "options": {"speed_matching": False},
        "columns": {
            "car_number": "Car",
            "name": "Scout"
        }
    }

    config = SchedulerConfig(**config_data)

    assert config.lane_count == 6
    assert config.options.speed_matching is False
    assert config.columns.car_number == "Car"
    assert config.columns.name == "Scout"
    assert config.excel.include_summaries is True


def test_config_defaults():
    """Test default values."""
    config = SchedulerConfig()

    assert config.lane_count == 4
    assert config.options.speed_matching is True
    assert config.columns.car_number == "Car Number"
    assert config.excel.sheets["heats"] == "Heats"


def test_config_validation():
    """Test configuration validation."""
    # Lane count must be at least 2
    with pytest.raises(ValueError):
        SchedulerConfig(lane_count=0)
    with pytest.raises(ValueError):
        SchedulerConfig(lane_count=1)

    # Roster columns must be distinct
    with pytest.raises(ValueError, match="must differ"):
        SchedulerConfig(columns={"car_number": "Name", "name": "Name"})


def test_config_load_save():
    """Test loading and saving configuration."""
    config_data = {
        "lane_count": 3,
        "options": {"speed_matching": False},
        "columns": {"car_number": "Car #", "name": "Racer"}
    }

    # Create temporary file
    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        yaml.dump(config_data, f)
        temp_path = f.name

    save_path = temp_path.replace('.yaml', '_saved.yaml')

    try:
        # Load configuration
        loaded_config = load_config(temp_path)

        assert loaded_config.lane_count == 3
        assert loaded_config.options.speed_matching is False
        assert loaded_config.columns.car_number == "Car #"

        # Test saving configuration
        save_config(loaded_config, save_path)

        # Load saved configuration
        saved_config = load_config(save_path)
        assert saved_config == loaded_config

    finally:
        # Clean up
        import os
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        if os.path.exists(save_path):
            os.unlink(save_path)


def test_empty_config_file(tmp_path):
    """An empty YAML file yields the defaults."""
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert load_config(str(path)) == SchedulerConfig()


def test_resolve_options():
    """Test normalising scheduling options."""
    assert resolve_options(None).speed_matching is True
    assert resolve_options({"speed_matching": False}).speed_matching is False

    options = ScheduleOptions(speed_matching=False)
    assert resolve_options(options) is options

    # Unrecognised keys are ignored
    assert resolve_options({"algorithm_preference": "circle_method"}).speed_matching is True
