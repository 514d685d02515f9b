import collections.abc
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from config.loader import load_config
from config.credentials import Credentials
from config.models import Config, ModelConfig
from utils.errors import ConfigError
from utils.logger import logger

DEFAULT_CONFIG_PATH = Path(__file__).parent / "default.yaml"
USER_CONFIG_DIR = Path.home() / ".gait"
USER_CONFIG_PATH = USER_CONFIG_DIR / "config.yaml"
PROJECT_CONFIG_FILENAME = ".gait.yaml"
CONFIG_ENV_VAR = "GAIT_CONFIG"


def deep_merge(target: Dict[str, Any], source: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merges two dictionaries.
    Arrays are replaced, not merged.
    """
    for key, value in source.items():
        if isinstance(value, collections.abc.Mapping) and key in target and isinstance(target[key], collections.abc.Mapping):
            target[key] = deep_merge(target[key], value)
        else:
            target[key] = value
    return target


def find_project_root(start_dir: Path = Path(".")) -> Optional[Path]:
    """
    Finds the repository root by searching upwards for a .git entry.
    """
    d = start_dir.resolve()
    while d != d.parent:
        if (d / ".git").exists():
            return d
        d = d.parent
    return None


def find_project_config(start_dir: Path = Path(".")) -> Optional[Path]:
    """
    Finds the project-specific settings file (.gait.yaml) in the repository root.
    """
    project_root = find_project_root(start_dir)
    if project_root:
        project_config_path = project_root / PROJECT_CONFIG_FILENAME
        if project_config_path.is_file():
            return project_config_path
    return None


def load_and_merge_configs(custom_config_path: Optional[str] = None) -> Config:
    """
    Loads all settings layers (default, user, project) and merges them.
    A custom path, given directly or through GAIT_CONFIG, overrides all others.
    """
    config_paths: List[Path] = []

    # 1. Default config
    if DEFAULT_CONFIG_PATH.is_file():
        config_paths.append(DEFAULT_CONFIG_PATH)
    else:
        raise ConfigError("Default configuration file not found.")

    # 2. User config
    if USER_CONFIG_PATH.is_file():
        config_paths.append(USER_CONFIG_PATH)

    # 3. Project config
    project_config_path = find_project_config()
    if project_config_path:
        config_paths.append(project_config_path)

    custom_config_path = custom_config_path or os.getenv(CONFIG_ENV_VAR)
    if custom_config_path:
        path = Path(custom_config_path).expanduser()
        if not path.is_file():
            raise ConfigError(f"Custom config file not found at: {custom_config_path}")
        config_paths = [path]  # It overrides all others
        logger.info(f"Using custom configuration from: {custom_config_path}")

    merged_config: Dict[str, Any] = {}
    for path in config_paths:
        logger.debug(f"Loading configuration from: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                config_data = load_config(f)
        except OSError as e:
            raise ConfigError(f"Could not read config at {path}: {e}") from e
        merged_config = deep_merge(merged_config, config_data)

    try:
        final_config = Config(**merged_config)
    except ValidationError as e:
        raise ConfigError(f"Configuration validation failed: {e}") from e
    logger.debug(f"Final merged config: {final_config.model_dump_json(indent=2)}")
    return final_config


def resolve_model_config(config: Config, selected_model: Optional[str], credentials: Credentials) -> ModelConfig:
    """
    Fills in the model name and API key chosen during `gait setup`.

    The model saved in user state wins over the credentials file, which wins
    over the settings; an API key in the settings wins over the credentials file.
    """
    return config.model.model_copy(update={
        "name": selected_model or credentials.selected_model or config.model.name,
        "api_key": config.model.api_key or credentials.api_key,
    })
