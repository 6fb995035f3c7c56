"""
Named Accounts
Resolves named deployer accounts (e.g. account0) per network
"""

import os
from typing import Dict, List, Union
from web3 import Web3
from eth_account import Account
from loguru import logger
from dotenv import load_dotenv

load_dotenv()


class NamedAccounts:
    """
    Maps account names to addresses for the active network
    
    A named entry is either a single value or a dict keyed by network
    name with a "default" fallback. Integer values index the available
    accounts, string values are addresses.
    
    Available accounts come from the private keys in the network's
    accounts_env variable, or from the node's unlocked accounts when
    the network defines none.
    """
    
    def __init__(self, network, named_config: Dict):
        """
        Initialize named accounts
        
        Args:
            network: NetworkContext
            named_config: named_accounts section of the deploy config
        """
        self.network = network
        self.named_config = named_config
        
        # Local signers, keyed by checksum address
        self.local_accounts = {}
        self._load_local_accounts()
        
        self._available = None
    
    def _load_local_accounts(self):
        """Create signers from the network's private key env var"""
        env_name = self.network.config.get('accounts_env')
        
        if not env_name:
            return
        
        raw_keys = os.getenv(env_name)
        if not raw_keys:
            raise ValueError(f"{env_name} must be set for network {self.network.name}")
        
        for key in raw_keys.split(','):
            key = key.strip()
            if not key:
                continue
            if not key.startswith('0x'):
                key = '0x' + key
            
            account = Account.from_key(key)
            # Duplicates would shift the index of every later key
            if account.address in self.local_accounts:
                raise ValueError(f"Duplicate private key in {env_name} for {account.address}")
            self.local_accounts[account.address] = account
        
        logger.debug(f"Loaded {len(self.local_accounts)} local account(s) from {env_name}")
    
    @property
    def available(self) -> List[str]:
        """Ordered list of usable account addresses"""
        if self._available is None:
            if self.local_accounts:
                self._available = list(self.local_accounts.keys())
            else:
                self._available = [
                    Web3.to_checksum_address(a) for a in self.network.w3.eth.accounts
                ]
        
        return self._available
    
    def _entry_for_network(self, name: str) -> Union[int, str]:
        if name not in self.named_config:
            raise ValueError(f"Named account '{name}' is not configured")
        
        entry = self.named_config[name]
        
        if not isinstance(entry, dict):
            return entry
        
        if self.network.name in entry:
            return entry[self.network.name]
        if 'default' in entry:
            return entry['default']
        
        raise ValueError(
            f"Named account '{name}' has no entry for network {self.network.name} and no default"
        )
    
    def get(self, name: str) -> str:
        """
        Resolve one named account
        
        Args:
            name: Account name, e.g. "account0"
            
        Returns:
            Checksum address
        """
        entry = self._entry_for_network(name)
        
        if isinstance(entry, bool):
            raise ValueError(f"Invalid value for named account '{name}': {entry}")
        
        if isinstance(entry, int):
            accounts = self.available
            if entry < 0 or entry >= len(accounts):
                raise ValueError(
                    f"Named account '{name}' uses index {entry} but only "
                    f"{len(accounts)} account(s) are available on {self.network.name}"
                )
            return accounts[entry]
        
        return Web3.to_checksum_address(entry)
    
    def get_named_accounts(self) -> Dict[str, str]:
        """Resolve every configured name"""
        return {name: self.get(name) for name in self.named_config}
    
    def has_local_key(self, address: str) -> bool:
        return Web3.to_checksum_address(address) in self.local_accounts
    
    def sign_transaction(self, transaction: Dict, address: str):
        """
        Sign a transaction with the local key for address
        
        Args:
            transaction: Transaction dict
            address: Sender address
            
        Returns:
            Signed transaction
        """
        checksum = Web3.to_checksum_address(address)
        
        if checksum not in self.local_accounts:
            raise ValueError(f"No local key for {checksum}")
        
        try:
            return self.local_accounts[checksum].sign_transaction(transaction)
        except Exception as e:
            logger.error(f"Error signing transaction: {e}")
            raise
