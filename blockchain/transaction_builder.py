"""
Transaction Builder
Constructs contract deployment transactions with gas and fee settings
"""

from typing import Dict, List
from web3 import Web3
from loguru import logger

DEFAULT_GAS_LIMIT = 3000000


class TransactionBuilder:
    """
    Builds constructor (contract creation) transactions
    """
    
    def __init__(self, w3: Web3, gas_multiplier: float = 1.2):
        """
        Initialize Transaction Builder
        
        Args:
            w3: Web3 instance
            gas_multiplier: Buffer applied to the gas estimate
        """
        self.w3 = w3
        self.gas_multiplier = gas_multiplier
    
    def get_fee_params(self) -> Dict[str, int]:
        """
        Get fee fields for the next transaction
        
        Returns:
            EIP-1559 maxFeePerGas/maxPriorityFeePerGas when the chain has a
            base fee, otherwise legacy gasPrice
        """
        latest_block = self.w3.eth.get_block('latest')
        base_fee_wei = latest_block.get('baseFeePerGas')
        
        if base_fee_wei is None:
            return {'gasPrice': int(self.w3.eth.gas_price)}
        
        priority_fee_wei = int(self.w3.eth.max_priority_fee)
        
        # Max fee = base fee * 2 + priority fee (buffer for fluctuations)
        return {
            'maxFeePerGas': int(base_fee_wei) * 2 + priority_fee_wei,
            'maxPriorityFeePerGas': priority_fee_wei
        }
    
    def estimate_gas_limit(self, constructor, sender: str) -> int:
        """Estimate constructor gas with buffer, falling back to the default limit"""
        try:
            gas_estimate = constructor.estimate_gas({'from': sender})
            return int(gas_estimate * self.gas_multiplier)
        except Exception as e:
            logger.warning(f"Gas estimation failed: {e}, using default")
            return DEFAULT_GAS_LIMIT
    
    def build_deployment_tx(self, factory, args: List, sender: str) -> Dict:
        """
        Build a deployment transaction
        
        Args:
            factory: Contract factory from w3.eth.contract(abi=..., bytecode=...)
            args: Constructor arguments
            sender: Deployer address
            
        Returns:
            Transaction dict ready for signing
        """
        sender = Web3.to_checksum_address(sender)
        constructor = factory.constructor(*args)
        
        gas_limit = self.estimate_gas_limit(constructor, sender)
        fee_params = self.get_fee_params()
        
        tx_params = {
            'from': sender,
            'nonce': self.w3.eth.get_transaction_count(sender, 'pending'),
            'gas': gas_limit,
            'chainId': self.w3.eth.chain_id
        }
        tx_params.update(fee_params)
        
        logger.debug(f"Gas limit: {gas_limit}, fees: {fee_params}")
        
        return constructor.build_transaction(tx_params)
