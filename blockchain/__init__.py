"""
Blockchain Interaction Package
Handles network selection, named accounts, deployment transactions and records
"""

from .network import NetworkContext, load_network
from .named_accounts import NamedAccounts
from .transaction_builder import TransactionBuilder
from .deployment_store import DeploymentStore
from .deployer import ContractDeployer, DeploymentError

__all__ = [
    'NetworkContext',
    'load_network',
    'NamedAccounts',
    'TransactionBuilder',
    'DeploymentStore',
    'ContractDeployer',
    'DeploymentError'
]
