# T2DPharmSim Configuration Management
# Handles loading and accessing configuration parameters for the simulation.

import yaml
import json
import logging
from typing import Dict, Any, Optional
import os

from T2DPharmSim.physiology.constants import DEFAULT_CONSTANTS, PhysiologyConstants

DEFAULT_CONFIG_FILENAME = "t2dpharmsim_config.yaml"  # Default config filename to look for

logger = logging.getLogger(__name__)


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Loads configuration parameters from a YAML or JSON file.

    If `config_path` is not provided, this function will attempt to load
    from a file named `DEFAULT_CONFIG_FILENAME` in the current working
    directory. If the specified file (or default) is not found, or if
    an error occurs during loading (e.g., malformed file), an empty
    dictionary is returned and a warning is logged.

    Args:
        config_path (Optional[str]): The full path to the configuration
            file. Supports `.yaml`, `.yml`, and `.json` extensions. If
            None, attempts to load `DEFAULT_CONFIG_FILENAME` from the
            current directory.

    Returns:
        Dict[str, Any]: A dictionary containing the loaded configuration
            parameters. Returns an empty dictionary if loading fails or
            no file is found.
    """
    resolved_path = config_path
    if resolved_path is None:
        if os.path.exists(DEFAULT_CONFIG_FILENAME):
            resolved_path = DEFAULT_CONFIG_FILENAME
            logger.info(f"No config path provided, using default '{DEFAULT_CONFIG_FILENAME}'.")
        else:
            logger.debug(
                f"No config path provided and default '{DEFAULT_CONFIG_FILENAME}' "
                f"not found in CWD. Using built-in defaults."
            )
            return {}

    if not os.path.exists(resolved_path):
        logger.warning(f"Configuration file not found at '{resolved_path}'. Returning empty config.")
        return {}

    try:
        with open(resolved_path, 'r', encoding='utf-8') as f:
            if resolved_path.endswith((".yaml", ".yml")):
                config_data = yaml.safe_load(f)
            elif resolved_path.endswith(".json"):
                config_data = json.load(f)
            else:
                logger.warning(
                    f"Unknown config file format for '{resolved_path}'. "
                    f"Supported: .yaml, .yml, .json. Returning empty config."
                )
                return {}
    except yaml.YAMLError as ye:
        logger.error(f"Error parsing YAML configuration from '{resolved_path}': {ye}")
        return {}
    except json.JSONDecodeError as je:
        logger.error(f"Error parsing JSON configuration from '{resolved_path}': {je}")
        return {}
    except OSError as e:
        logger.error(f"Could not read configuration from '{resolved_path}': {e}")
        return {}

    if config_data is not None and not isinstance(config_data, dict):
        logger.warning(f"Configuration in '{resolved_path}' is not a mapping. Ignoring it.")
        return {}
    logger.info(f"Configuration loaded from '{resolved_path}'.")
    return config_data if config_data is not None else {}


def get_config_value(config: Dict[str, Any], key_path: str,
                     default: Optional[Any] = None) -> Any:
    """Retrieves a value from a nested config dict using a dot-separated key.

    Example:
        `get_config_value(config, "debrief.timeout_seconds", None)`
        This would look for `config['debrief']['timeout_seconds']`.

    Integer-looking path segments also match integer keys, since YAML
    parses `levels: {2: ...}` with an int key.

    Args:
        config (Dict[str, Any]): The configuration dictionary to search
            within.
        key_path (str): A dot-separated string representing the path to
            the desired key.
        default (Optional[Any]): The value to return if the key path is
            not found. Defaults to None.

    Returns:
        Any: The configuration value found at the `key_path`, or the
            `default` value if the path is not found or invalid.
    """
    current_level = config
    for key in key_path.split('.'):
        if not isinstance(current_level, dict):
            return default
        if key in current_level:
            current_level = current_level[key]
        elif key.lstrip('-').isdigit() and int(key) in current_level:
            current_level = current_level[int(key)]
        else:
            return default  # Key not found or path is invalid
    return current_level


def physiology_constants(config: Optional[Dict[str, Any]]) -> PhysiologyConstants:
    """Builds the model parameters from the `physiology` section."""
    overrides = get_config_value(config or {}, "physiology", {})
    return DEFAULT_CONSTANTS.with_overrides(overrides if isinstance(overrides, dict) else {})


def level_overrides(config: Optional[Dict[str, Any]], level: int) -> Dict[str, Any]:
    """Returns the `levels.<level>` section, or an empty dict."""
    section = get_config_value(config or {}, f"levels.{level}", {})
    return section if isinstance(section, dict) else {}


class ConfigManager:
    """A manager class for handling simulation configurations.

    This class provides a convenient way to load configuration settings
    from a file (YAML or JSON) and access them using dot-separated key
    paths.

    Attributes:
        config_data (Dict[str, Any]): The dictionary holding all loaded
            configuration parameters.
        _config_file_path (Optional[str]): The path to the configuration
            file that was last loaded. Stored for reloading.
    """
    def __init__(self, config_file_path: Optional[str] = None):
        """Initializes the ConfigManager and loads configuration.

        Args:
            config_file_path (Optional[str]): The path to the
                configuration file (YAML or JSON). Defaults to None, which
                looks for `DEFAULT_CONFIG_FILENAME` in the CWD.
        """
        self._config_file_path: Optional[str] = config_file_path  # Store initial path for reload
        self.config_data: Dict[str, Any] = load_config(config_file_path)

    def get(self, key_path: str, default: Optional[Any] = None) -> Any:
        """Retrieves a configuration value using a dot-separated key path."""
        return get_config_value(self.config_data, key_path, default)

    def get_section(self, section_key_path: str) -> Dict[str, Any]:
        """Retrieves an entire section of the configuration as a dictionary.

        Returns an empty dictionary if the section is not found or if the
        item at the path is not a dictionary.
        """
        section = self.get(section_key_path, default={})
        return section if isinstance(section, dict) else {}

    @property
    def constants(self) -> PhysiologyConstants:
        return physiology_constants(self.config_data)

    @property
    def seed(self) -> Optional[int]:
        return self.get("simulation.seed")

    @property
    def debrief_url(self) -> Optional[str]:
        return self.get("debrief.url")

    @property
    def debrief_timeout(self) -> Optional[float]:
        return self.get("debrief.timeout_seconds")

    def reload(self, new_config_file_path: Optional[str] = None):
        """Reloads the configuration.

        If `new_config_file_path` is provided, it attempts to load from
        this new path and updates the internal path for future reloads.
        Otherwise it reloads from the last known path (or the default
        file).

        Args:
            new_config_file_path (Optional[str]): The path to a new
                configuration file to load. If None, reloads from the
                last known path.
        """
        if new_config_file_path is not None:
            self._config_file_path = new_config_file_path  # Update stored path
        logger.info(
            f"Reloading configuration from "
            f"'{self._config_file_path or DEFAULT_CONFIG_FILENAME}'."
        )
        self.config_data = load_config(self._config_file_path)
        if not self.config_data:
            logger.warning("Reload produced an empty configuration.")
