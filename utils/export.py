"""
Deployment Export
Writes the contract address and ABI files consumed by the frontend
"""

import os
import json
from typing import Any, Dict
from loguru import logger

from utils.artifacts import load_abi

DEFAULT_EXPORT_DIR = os.path.join("export", "contracts")


def write_json(path: str, data: Any):
    """Write data as 2-space indented JSON, replacing any existing file"""
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def export_deployment(
    contract_address: str,
    deployer: str,
    contract_name: str,
    artifact_file: str,
    export_dir: str = DEFAULT_EXPORT_DIR
) -> Dict:
    """
    Export deployment data and contract ABI
    
    config.json is written before the artifact is read, so a missing
    artifact leaves config.json in place and no ABI file.
    
    Args:
        contract_address: Deployed contract address
        deployer: Address that sent the deployment
        contract_name: Used for the ABI file name
        artifact_file: Compiled artifact holding the ABI
        export_dir: Output directory
        
    Returns:
        Deploy data dict {contractAddress, deployer}
    """
    os.makedirs(export_dir, exist_ok=True)
    
    deploy_data = {
        'contractAddress': contract_address,
        'deployer': deployer
    }
    config_path = os.path.join(export_dir, 'config.json')
    write_json(config_path, deploy_data)
    logger.info(f"Wrote {config_path}")
    
    abi = load_abi(artifact_file)
    abi_path = os.path.join(export_dir, f"{contract_name}.json")
    write_json(abi_path, abi)
    logger.info(f"Wrote {abi_path} ({len(abi)} ABI entries)")
    
    return deploy_data
