"""Configuration schema and defaults for the grade sheet tools."""

from typing import Any
import copy
import json
import os
from pathlib import Path

DEFAULT_CONFIG: dict[str, Any] = {
    "api": {
        "base_url": "http://localhost:3000",
        "timeout": 30
    },
    "templates_dir": "public/grading-templates",
    "text_max_length": 500,
    "session_key": "gradeEditorState",
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    }
}

API_URL_ENV = "GRADESHEET_API_URL"


def get_default_config() -> dict[str, Any]:
    """Return a deep copy of the default configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)


def merge_config(user_config: dict[str, Any]) -> dict[str, Any]:
    """
    Merge user configuration with defaults.
    
    User config values override defaults. Missing keys use default values.
    """
    result = get_default_config()
    
    if "api" in user_config:
        result["api"].update(user_config["api"])
    
    if "logging" in user_config:
        result["logging"].update(user_config["logging"])
    
    for key in ("templates_dir", "text_max_length", "session_key"):
        if key in user_config:
            result[key] = user_config[key]
    
    env_url = os.environ.get(API_URL_ENV)
    if env_url:
        result["api"]["base_url"] = env_url
    
    return result


def load_config(config_path: str | Path = "config.json") -> dict[str, Any]:
    """
    Load configuration from a JSON file and merge it with the defaults.
    
    A missing file is not an error; the defaults are used instead.
    """
    path = Path(config_path)
    if not path.exists():
        return merge_config({})
    
    with open(path, "r", encoding="utf-8") as f:
        return merge_config(json.load(f))
