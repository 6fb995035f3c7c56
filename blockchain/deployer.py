"""
Contract Deployer
Deploys compiled contracts and tracks them per network
"""

from typing import Dict, List, Optional
from web3 import Web3
from eth_abi import encode
from loguru import logger

from blockchain.transaction_builder import TransactionBuilder
from utils.artifacts import load_artifact, get_bytecode

RECEIPT_TIMEOUT = 300


class DeploymentError(Exception):
    """Deployment transaction was mined but reverted"""
    
    def __init__(self, name: str, tx_hash: str):
        super().__init__(f"Deployment of {name} failed (tx: {tx_hash})")
        self.name = name
        self.tx_hash = tx_hash


def _abi_type(param: Dict) -> str:
    """Canonical ABI type string, expanding tuples"""
    abi_type = param['type']
    
    if abi_type.startswith('tuple'):
        components = ','.join(_abi_type(c) for c in param['components'])
        return f"({components}){abi_type[len('tuple'):]}"
    
    return abi_type


def encode_constructor_args(abi: List[Dict], args: List) -> str:
    """
    ABI-encode constructor arguments
    
    Args:
        abi: Contract ABI
        args: Constructor arguments
        
    Returns:
        0x-prefixed hex of the encoded arguments
    """
    constructor = next((e for e in abi if e.get('type') == 'constructor'), None)
    inputs = constructor.get('inputs', []) if constructor else []
    
    if len(inputs) != len(args):
        raise ValueError(
            f"Constructor expects {len(inputs)} argument(s), got {len(args)}"
        )
    
    types = [_abi_type(i) for i in inputs]
    return Web3.to_hex(encode(types, list(args)))


class ContractDeployer:
    """
    Deploys contracts from compiled artifacts
    
    Skips redeploying when the stored record for the network has the same
    bytecode and constructor arguments and the contract still has code.
    """
    
    def __init__(
        self,
        network,
        accounts,
        artifacts_dir: str = "artifacts",
        store=None,
        reset: bool = False
    ):
        """
        Initialize Contract Deployer
        
        Args:
            network: NetworkContext
            accounts: NamedAccounts used for signing
            artifacts_dir: Root of compiled artifacts
            store: DeploymentStore (None disables reuse and records)
            reset: Ignore stored deployments
        """
        self.network = network
        self.w3 = network.w3
        self.accounts = accounts
        self.artifacts_dir = artifacts_dir
        self.store = store
        self.reset = reset
        
        self.tx_builder = TransactionBuilder(self.w3, network.gas_multiplier)
    
    def _find_reusable(self, name: str, bytecode: str, encoded_args: str, abi: List) -> Optional[Dict]:
        """Return the stored deployment if nothing changed since it was made"""
        if self.store is None or self.reset:
            return None
        
        record = self.store.get(name)
        if not record:
            return None
        
        if record.get('bytecode') != bytecode:
            return None
        
        try:
            if encode_constructor_args(abi, record.get('args', [])) != encoded_args:
                return None
        except Exception as e:
            logger.debug(f"Stored args for {name} not comparable: {e}")
            return None
        
        address = record.get('address')
        if not address:
            logger.warning(f"Stored record for {name} has no address, redeploying")
            return None

        code = self.w3.eth.get_code(Web3.to_checksum_address(address))
        if not code or code in (b'', '0x'):
            logger.warning(f"Stored {name} at {address} has no code, redeploying")
            return None
        
        return record
    
    def _send(self, transaction: Dict, sender: str):
        """Sign locally when we hold the key, otherwise let the node sign"""
        if self.accounts.has_local_key(sender):
            signed_tx = self.accounts.sign_transaction(transaction, sender)
            return self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        
        return self.w3.eth.send_transaction(transaction)
    
    def deploy(
        self,
        name: str,
        from_: str,
        args: Optional[List] = None,
        log: bool = False,
        source_name: Optional[str] = None
    ) -> Dict:
        """
        Deploy a contract
        
        Args:
            name: Contract name (artifact name)
            from_: Deployer address
            args: Constructor arguments
            log: Log deployment progress
            source_name: Solidity file stem if it differs from name
            
        Returns:
            Result dict: address, transaction_hash, receipt, abi, args, newly_deployed
        """
        args = list(args or [])
        sender = Web3.to_checksum_address(from_)
        
        artifact = load_artifact(name, self.artifacts_dir, source_name)
        abi = artifact['abi']
        bytecode = get_bytecode(artifact)
        encoded_args = encode_constructor_args(abi, args)
        
        existing = self._find_reusable(name, bytecode, encoded_args, abi)
        if existing:
            if log:
                logger.info(f'reusing "{name}" at {existing["address"]}')
            return {
                'address': Web3.to_checksum_address(existing['address']),
                'transaction_hash': existing.get('transactionHash'),
                'receipt': existing.get('receipt'),
                'abi': abi,
                'args': args,
                'newly_deployed': False
            }
        
        factory = self.w3.eth.contract(abi=abi, bytecode=bytecode)
        transaction = self.tx_builder.build_deployment_tx(factory, args, sender)
        
        tx_hash = Web3.to_hex(self._send(transaction, sender))
        if log:
            logger.info(f'deploying "{name}" (tx: {tx_hash})...')
        
        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=RECEIPT_TIMEOUT)
        
        if receipt['status'] != 1:
            logger.error(f"Deployment of {name} reverted (tx: {tx_hash})")
            raise DeploymentError(name, tx_hash)
        
        address = Web3.to_checksum_address(receipt['contractAddress'])
        receipt_data = {
            'blockNumber': receipt['blockNumber'],
            'gasUsed': receipt['gasUsed'],
            'from': sender,
            'status': receipt['status']
        }
        
        if log:
            logger.success(
                f'deploying "{name}" (tx: {tx_hash})...: deployed at {address} '
                f'with {receipt["gasUsed"]} gas'
            )
        
        if self.store is not None and self.network.save_deployments:
            self.store.save(name, {
                'address': address,
                'abi': abi,
                'args': args,
                'bytecode': bytecode,
                'transactionHash': tx_hash,
                'receipt': receipt_data,
                'deployer': sender
            })
            self.store.save_chain_id(self.network.chain_id)
        
        return {
            'address': address,
            'transaction_hash': tx_hash,
            'receipt': receipt_data,
            'abi': abi,
            'args': args,
            'newly_deployed': True
        }
