"""
Utilities Package
Config loading, logging setup, artifact reading and export files
"""

from .config import load_config, get_required_env
from .logger import setup_logging
from .artifacts import artifact_path, load_artifact, load_abi, get_bytecode
from .export import export_deployment, write_json

__all__ = [
    'load_config',
    'get_required_env',
    'setup_logging',
    'artifact_path',
    'load_artifact',
    'load_abi',
    'get_bytecode',
    'export_deployment',
    'write_json'
]
