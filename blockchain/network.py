"""
Network Context
Selects the target network from config and connects a Web3 instance to it
"""

import os
from typing import Dict, Optional
from web3 import Web3
from loguru import logger
from dotenv import load_dotenv

from utils.config import load_config

load_dotenv()

DEFAULT_NETWORKS_PATH = "config/networks.json"


class NetworkContext:
    """
    Connected network the deployment runs against
    
    Mirrors the deployment framework's network object: a name, its
    configured settings and a live provider.
    """
    
    def __init__(self, name: str, config: Dict, w3: Optional[Web3] = None):
        """
        Initialize network context
        
        Args:
            name: Network name from config/networks.json
            config: Settings for this network
            w3: Pre-built Web3 instance (a provider is created from config otherwise)
        """
        self.name = name
        self.config = config
        self.w3 = w3 if w3 is not None else self._connect()
        
        self._check_chain_id()
        
        logger.info(f"Connected to network: {self.name}")
    
    @property
    def rpc_url(self) -> Optional[str]:
        """RPC URL from config, directly or via the named env var"""
        if self.config.get('rpc_url'):
            return self.config['rpc_url']
        
        env_name = self.config.get('rpc_url_env')
        return os.getenv(env_name) if env_name else None
    
    @property
    def is_live(self) -> bool:
        return bool(self.config.get('live', False))
    
    @property
    def save_deployments(self) -> bool:
        return bool(self.config.get('save_deployments', self.is_live))
    
    @property
    def gas_multiplier(self) -> float:
        return float(self.config.get('gas_multiplier', 1.2))
    
    @property
    def chain_id(self) -> int:
        return self.w3.eth.chain_id
    
    def _connect(self) -> Web3:
        """Create a Web3 HTTP connection"""
        url = self.rpc_url
        
        if not url:
            env_name = self.config.get('rpc_url_env', 'rpc_url')
            raise ValueError(f"No RPC URL for network {self.name}: set {env_name}")
        
        w3 = Web3(Web3.HTTPProvider(url))
        
        if not w3.is_connected():
            logger.error(f"Failed to connect to {self.name} at {url}")
            raise ConnectionError(f"Cannot reach RPC node for network {self.name}")
        
        return w3
    
    def _check_chain_id(self):
        """Refuse to continue if the node is on a different chain than configured"""
        expected = self.config.get('chain_id')
        
        if expected is None:
            return
        
        actual = self.w3.eth.chain_id
        if actual != expected:
            raise ValueError(
                f"Network {self.name} expects chain id {expected}, node reports {actual}"
            )


def load_network(
    name: Optional[str] = None,
    config_path: str = DEFAULT_NETWORKS_PATH,
    default_network: Optional[str] = None
) -> NetworkContext:
    """
    Resolve and connect the target network
    
    Precedence: explicit name, NETWORK env var, default_network.
    
    Args:
        name: Network name
        config_path: Path to networks config
        default_network: Fallback network name
        
    Returns:
        Connected NetworkContext
    """
    networks = load_config(config_path)['networks']
    network_name = name or os.getenv('NETWORK') or default_network
    
    if not network_name:
        raise ValueError("No network selected: pass --network or set NETWORK")
    
    if network_name not in networks:
        known = ', '.join(sorted(networks))
        raise ValueError(f"Unknown network '{network_name}' (known: {known})")
    
    return NetworkContext(network_name, networks[network_name])
