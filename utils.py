# utils.py
"""
Utility functions for the effect's framework.

This module provides logging setup and configuration loading. The
configuration only carries ambient settings (logging, run control, the
window); the simulation parameters are fixed in `constants.py`.
"""
import logging
import logging.handlers
import json
import os
import copy
from typing import Dict, Any

# --- Data Contracts ---
#
# load_config(path: str) -> Dict[str, Any]:
#   - Outputs: The parsed config with every missing section or key filled
#     from DEFAULT_CONFIG.
#   - Raises FileNotFoundError, json.JSONDecodeError, or ValueError if a
#     section is not a JSON object.
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Side Effects: Configures the root logger with a console handler and,
#     when "log_file" is set, a rotating file handler. Creates the log
#     directory if needed.

DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(levelname)s - %(message)s",
        "log_file": "logs/lorenz_background.log",
    },
    "run_control": {
        "seed": None,
        "max_frames": 0,
        "log_throttle_frames": 300,
        "profile": False,
    },
    "visualization": {
        "fullscreen": False,
        "window_width": 1600,
        "window_height": 900,
        "driver_fps": 60,
    },
}


def merge_with_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """Returns a copy of `config` with defaults filled in per section."""
    merged = copy.deepcopy(DEFAULT_CONFIG)
    for section, values in config.items():
        if section not in merged:
            logging.warning(f"Ignoring unknown configuration section '{section}'.")
            continue
        if not isinstance(values, dict):
            raise ValueError(f"Configuration section '{section}' must be an object, got {type(values).__name__}.")
        merged[section].update(values)
    return merged


def load_config(path: str) -> Dict[str, Any]:
    """Loads a JSON configuration file and fills in defaults."""
    logging.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            config = json.load(f)
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError:
        logging.error(f"Error decoding JSON from {path}.")
        raise
    if not isinstance(config, dict):
        raise ValueError(f"Configuration root in {path} must be an object.")
    logging.info("Configuration loaded successfully.")
    return merge_with_defaults(config)


def setup_logging(config: Dict[str, Any]) -> None:
    """
    Configures the root logger from the "logging" section of `config`.
    """
    log_config = config.get('logging', DEFAULT_CONFIG['logging'])
    log_level = str(log_config.get('level', 'INFO')).upper()
    log_format = log_config.get('format', DEFAULT_CONFIG['logging']['format'])
    log_file_path = log_config.get('log_file')

    logger = logging.getLogger()
    logger.setLevel(log_level)

    # Replace handlers from an earlier setup
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file_path:
        log_dir = os.path.dirname(log_file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        # 1MB per file, 5 backups
        file_handler = logging.handlers.RotatingFileHandler(
            log_file_path, maxBytes=1024*1024, backupCount=5
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logging.info("Logging system initialized.")
    logging.debug(f"Log level set to {log_level}. Log file: {log_file_path or 'none'}")
