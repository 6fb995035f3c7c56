"""
Artifact Loader
Reads compiled contract artifacts (ABI + bytecode) produced by the Solidity toolchain
"""

import os
import json
from typing import Dict, List, Optional
from loguru import logger


def artifact_path(
    contract_name: str,
    artifacts_dir: str = "artifacts",
    source_name: Optional[str] = None
) -> str:
    """
    Build the artifact path for a contract
    
    Args:
        contract_name: Contract name, e.g. "BrainDance"
        artifacts_dir: Root of the compiled artifacts
        source_name: Solidity file stem when it differs from the contract name
        
    Returns:
        <artifacts_dir>/contracts/<Source>.sol/<Name>.json
    """
    source = source_name or contract_name
    return os.path.join(artifacts_dir, "contracts", f"{source}.sol", f"{contract_name}.json")


def read_artifact_file(path: str) -> Dict:
    """Read a single artifact JSON file"""
    if not os.path.exists(path):
        logger.error(f"Contract artifact not found: {path}")
        logger.info("Compile the contracts first (npx hardhat compile)")
        raise FileNotFoundError(path)
    
    with open(path, 'r', encoding='utf-8') as f:
        artifact = json.load(f)
    
    if 'abi' not in artifact:
        raise ValueError(f"ABI not found in artifact: {path}")
    
    return artifact


def load_artifact(
    contract_name: str,
    artifacts_dir: str = "artifacts",
    source_name: Optional[str] = None
) -> Dict:
    """Load the compiled artifact for a contract"""
    path = artifact_path(contract_name, artifacts_dir, source_name)
    artifact = read_artifact_file(path)
    
    logger.debug(f"Loaded artifact {contract_name} from {path}")
    return artifact


def load_abi(path: str) -> List:
    """Return the abi field of the artifact at path, unmodified"""
    return read_artifact_file(path)['abi']


def get_bytecode(artifact: Dict) -> str:
    """
    Get creation bytecode from an artifact
    
    Raises:
        ValueError: abstract contracts and interfaces have no bytecode
    """
    bytecode = artifact.get('bytecode')
    
    # Older solc-js style artifacts nest it under "object"
    if isinstance(bytecode, dict):
        bytecode = bytecode.get('object')
    
    if not bytecode or not isinstance(bytecode, str) or bytecode in ('0x', ''):
        name = artifact.get('contractName', '<unknown>')
        raise ValueError(f"No deployable bytecode in artifact for {name}")
    
    if not bytecode.startswith('0x'):
        bytecode = '0x' + bytecode
    
    return bytecode
