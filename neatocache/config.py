"""
NeatoCache - Configuration

This module contains all the configuration settings for the application.
"""

import copy
import json
import logging
import os

logger = logging.getLogger(__name__)

# Default configuration
DEFAULT_CONFIG = {
    # Application settings
    "app_name": "NeatoCache",
    "debug_mode": False,

    # NFC settings
    "nfc": {
        "i2c_address": 0x24,  # PN532 HAT default
        "poll_timeout": 0.1,  # seconds per read_passive_target call
        "session_timeout": 60,  # seconds before an idle scan session gives up
    },

    # API settings
    "api": {
        "host": "0.0.0.0",  # Listen on all interfaces
        "port": 5000,
        "action_timeout": 75,  # seconds a request waits for the tag interaction
    },

    # Logging settings
    "logging": {
        "level": "INFO",
        "file": "",  # Empty logs to console only
    },
}

# Path to user configuration file
CONFIG_PATH = os.environ.get(
    "NEATOCACHE_CONFIG",
    os.path.expanduser("~/.neatocache/config.json")
)

# Global CONFIG object
CONFIG = {}


def load_config(path=None):
    """
    Load configuration from file, falling back to defaults.

    Args:
        path (str, optional): Config file to read, defaults to CONFIG_PATH

    Returns:
        dict: The merged configuration
    """
    global CONFIG

    path = path or CONFIG_PATH
    config = copy.deepcopy(DEFAULT_CONFIG)

    if os.path.exists(path):
        try:
            with open(path, 'r') as f:
                user_config = json.load(f)

            # Merge user config with defaults (shallow update for each section)
            for section, values in user_config.items():
                if section in config and isinstance(config[section], dict) and isinstance(values, dict):
                    config[section].update(values)
                else:
                    config[section] = values

        except (OSError, ValueError) as e:
            logger.error(f"Error loading config from {path}: {e}")
            # Continue with default config

    CONFIG.clear()
    CONFIG.update(config)
    return CONFIG


def save_config(path=None):
    """
    Save current configuration to file.

    Returns:
        bool: True if the file was written
    """
    path = path or CONFIG_PATH
    try:
        config_dir = os.path.dirname(path)
        if config_dir:
            os.makedirs(config_dir, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(CONFIG, f, indent=4)
        return True
    except OSError as e:
        logger.error(f"Error saving config: {e}")
        return False


# Load configuration at module import
load_config()
