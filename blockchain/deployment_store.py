"""
Deployment Store
Per-network JSON records of deployed contracts
"""

import os
import json
from typing import Dict, Optional
from loguru import logger


class DeploymentStore:
    """
    Keeps one JSON record per contract under <deployments_dir>/<network>/
    """
    
    def __init__(self, deployments_dir: str, network_name: str):
        self.network_dir = os.path.join(deployments_dir, network_name)
    
    def _record_path(self, name: str) -> str:
        return os.path.join(self.network_dir, f"{name}.json")
    
    def get(self, name: str) -> Optional[Dict]:
        """Return the stored record for a contract, or None"""
        path = self._record_path(name)
        
        if not os.path.exists(path):
            return None
        
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    
    def save(self, name: str, record: Dict) -> Dict:
        """
        Write a deployment record
        
        Args:
            name: Contract name
            record: Deployment data (address, abi, args, ...)
            
        Returns:
            The stored record, with numDeployments updated
        """
        os.makedirs(self.network_dir, exist_ok=True)
        
        previous = self.get(name)
        record = dict(record)
        record['numDeployments'] = (previous or {}).get('numDeployments', 0) + 1
        
        path = self._record_path(name)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(record, f, indent=2)
        
        logger.debug(f"Saved deployment record {path}")
        return record
    
    def save_chain_id(self, chain_id: int):
        os.makedirs(self.network_dir, exist_ok=True)
        
        with open(os.path.join(self.network_dir, '.chainId'), 'w') as f:
            f.write(str(chain_id))
