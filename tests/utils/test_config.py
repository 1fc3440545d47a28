# Tests for T2DPharmSim.utils.config

import pytest
import yaml
import json
from T2DPharmSim.utils.config import (
    ConfigManager, DEFAULT_CONFIG_FILENAME, get_config_value, level_overrides, load_config,
    physiology_constants,
)
from T2DPharmSim.physiology.constants import DEFAULT_CONSTANTS

@pytest.fixture
def dummy_yaml_config_file(tmp_path):
    content = {
        "simulation": {"seed": 42},
        "physiology": {"egfr_decay_per_sec": 0.1, "hypo_hit_risk": 30},
        "levels": {2: {"win_seconds": 15.0}},
        "debrief": {"url": "http://localhost:3000/api/debrief", "timeout_seconds": 20},
    }
    file_path = tmp_path / "test_config.yaml"
    with open(file_path, "w") as f:
        yaml.dump(content, f)
    return file_path

@pytest.fixture
def dummy_json_config_file(tmp_path):
    content = {
        "simulation": {"seed": 7},
        "levels": {"4": {"win_seconds": 30.0}},
    }
    file_path = tmp_path / "test_config.json"
    with open(file_path, "w") as f:
        json.dump(content, f)
    return file_path

def test_load_config_yaml(dummy_yaml_config_file):
    """Test loading from a YAML file."""
    config = load_config(str(dummy_yaml_config_file))
    assert config["simulation"]["seed"] == 42
    assert config["physiology"]["egfr_decay_per_sec"] == 0.1
    print("test_load_config_yaml: PASSED")

def test_load_config_json(dummy_json_config_file):
    """Test loading from a JSON file."""
    config = load_config(str(dummy_json_config_file))
    assert config["simulation"]["seed"] == 7
    print("test_load_config_json: PASSED")

def test_load_config_non_existent_file():
    """Test loading a non-existent file returns empty dict."""
    assert load_config("non_existent_config_file.yaml") == {}

def test_load_config_unknown_format(tmp_path):
    """Test loading an unknown file format."""
    file_path = tmp_path / "test_config.txt"
    with open(file_path, "w") as f:
        f.write("some_setting = value")
    assert load_config(str(file_path)) == {}

def test_load_config_malformed_yaml(tmp_path):
    file_path = tmp_path / "broken.yaml"
    with open(file_path, "w") as f:
        f.write("physiology: [unclosed")
    assert load_config(str(file_path)) == {}

def test_load_config_non_mapping(tmp_path):
    file_path = tmp_path / "list.yaml"
    with open(file_path, "w") as f:
        yaml.dump([1, 2, 3], f)
    assert load_config(str(file_path)) == {}

def test_load_config_default_file(tmp_path, monkeypatch):
    """Test loading default config file if no path is provided."""
    default_file_path = tmp_path / DEFAULT_CONFIG_FILENAME
    with open(default_file_path, "w") as f:
        yaml.dump({"simulation": {"seed": 3}}, f)

    monkeypatch.chdir(tmp_path)
    config = load_config()  # No path, should find default
    assert config["simulation"]["seed"] == 3

def test_get_config_value():
    """Test retrieving values using dot-separated keys."""
    config = {
        "debrief": {"url": "http://x", "nested": {"item": "value"}},
        "levels": {2: {"win_seconds": 15.0}},
        "top_item": "value3"
    }
    assert get_config_value(config, "top_item") == "value3"
    assert get_config_value(config, "debrief.url") == "http://x"
    assert get_config_value(config, "debrief.nested.item") == "value"
    assert get_config_value(config, "levels.2.win_seconds") == 15.0
    assert get_config_value(config, "debrief.non_existent", "default") == "default"
    assert get_config_value(config, "non.existent.path", "another_default") == "another_default"
    assert get_config_value(config, "top_item.deeper") is None
    print("test_get_config_value: PASSED")

def test_physiology_constants_from_config(caplog):
    constants = physiology_constants({"physiology": {"egfr_decay_per_sec": 0.1,
                                                     "hypo_hit_risk": 30,
                                                     "not_a_constant": 1}})
    assert constants.egfr_decay_per_sec == 0.1
    assert constants.hypo_hit_risk == 30.0
    assert constants.glucose_hit_hba1c == DEFAULT_CONSTANTS.glucose_hit_hba1c
    assert "not_a_constant" in caplog.text
    assert physiology_constants({}) is DEFAULT_CONSTANTS
    assert physiology_constants(None) is DEFAULT_CONSTANTS

def test_level_overrides_accept_int_and_str_keys(dummy_yaml_config_file, dummy_json_config_file):
    yaml_config = load_config(str(dummy_yaml_config_file))
    json_config = load_config(str(dummy_json_config_file))
    assert level_overrides(yaml_config, 2) == {"win_seconds": 15.0}
    assert level_overrides(json_config, 4) == {"win_seconds": 30.0}
    assert level_overrides(json_config, 1) == {}

def test_config_manager_initialization(dummy_yaml_config_file, tmp_path, monkeypatch):
    """Test ConfigManager initialization."""
    manager = ConfigManager(str(dummy_yaml_config_file))
    assert manager.config_data["simulation"]["seed"] == 42

    monkeypatch.chdir(tmp_path)
    manager_no_file = ConfigManager()  # No file provided
    assert manager_no_file.config_data == {}  # Expects empty if default not found
    print("test_config_manager_initialization: PASSED")

def test_config_manager_accessors(dummy_yaml_config_file):
    """Test ConfigManager.get(), get_section() and the typed accessors."""
    manager = ConfigManager(str(dummy_yaml_config_file))
    assert manager.get("simulation.seed") == 42
    assert manager.get("non.existent.key", "default_val") == "default_val"
    assert manager.get_section("debrief")["timeout_seconds"] == 20
    assert manager.get_section("debrief.url") == {}
    assert manager.seed == 42
    assert manager.debrief_url == "http://localhost:3000/api/debrief"
    assert manager.debrief_timeout == 20
    assert manager.constants.egfr_decay_per_sec == 0.1

def test_config_manager_reload(dummy_yaml_config_file, dummy_json_config_file):
    """Test ConfigManager.reload() method."""
    manager = ConfigManager(str(dummy_yaml_config_file))
    assert manager.seed == 42

    manager.reload(str(dummy_json_config_file))
    assert manager.seed == 7
    assert manager.debrief_url is None

    manager.reload()  # Reloads the last path
    assert manager.seed == 7
    print("test_config_manager_reload: PASSED")
