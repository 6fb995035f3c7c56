"""
Configuration Loader
Reads JSON config files and required environment values
"""

import os
import json
from typing import Dict
from loguru import logger
from dotenv import load_dotenv

load_dotenv()


def load_config(path: str) -> Dict:
    """
    Load a JSON configuration file
    
    Args:
        path: Path to the config file (e.g. config/networks.json)
        
    Returns:
        Parsed configuration dict
    """
    if not os.path.exists(path):
        logger.error(f"Config file not found: {path}")
        raise FileNotFoundError(path)
    
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def get_required_env(name: str) -> str:
    """Return an environment variable, raising if it is unset or empty"""
    value = os.getenv(name)
    
    if not value:
        raise ValueError(f"{name} must be set in the environment or .env")
    
    return value
