"""
Unit Tests for Contract Deployment
"""

import json
import pytest
from unittest.mock import MagicMock, Mock
from web3 import Web3

from blockchain.deployer import ContractDeployer, DeploymentError, encode_constructor_args
from blockchain.deployment_store import DeploymentStore
from blockchain.transaction_builder import TransactionBuilder, DEFAULT_GAS_LIMIT


DEPLOYER = '0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf'
CONTRACT = '0x2B5AD5c4795c026514f8317c7a215E218DcCD6cF'
TX_HASH = b'\x11' * 32
ARGS = ["Brain Dance", "BrainDance", "https://example.com/meta/"]

ABI = [
    {
        "type": "constructor",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "name_", "type": "string"},
            {"name": "symbol_", "type": "string"},
            {"name": "baseURI_", "type": "string"}
        ]
    }
]
BYTECODE = "0x6080604052"


@pytest.fixture
def artifacts_dir(tmp_path):
    contract_dir = tmp_path / "artifacts" / "contracts" / "BrainDance.sol"
    contract_dir.mkdir(parents=True)
    (contract_dir / "BrainDance.json").write_text(json.dumps({
        "contractName": "BrainDance",
        "abi": ABI,
        "bytecode": BYTECODE
    }))
    return str(tmp_path / "artifacts")


@pytest.fixture
def w3():
    """Mock Web3 for a legacy-fee local chain"""
    w3 = MagicMock()
    w3.eth.chain_id = 31337
    w3.eth.gas_price = 1000000000
    w3.eth.get_block.return_value = {}
    w3.eth.get_transaction_count.return_value = 3
    w3.eth.send_raw_transaction.return_value = TX_HASH
    w3.eth.send_transaction.return_value = TX_HASH
    w3.eth.wait_for_transaction_receipt.return_value = {
        'status': 1,
        'contractAddress': CONTRACT.lower(),
        'gasUsed': 2345678,
        'blockNumber': 12
    }
    
    constructor = w3.eth.contract.return_value.constructor.return_value
    constructor.estimate_gas.return_value = 1000000
    constructor.build_transaction.side_effect = lambda params: dict(params, data=BYTECODE, value=0)
    return w3


@pytest.fixture
def network(w3):
    network = Mock()
    network.name = 'localhost'
    network.w3 = w3
    network.gas_multiplier = 1.2
    network.save_deployments = True
    network.chain_id = 31337
    return network


@pytest.fixture
def accounts():
    """Named accounts holding a local key for DEPLOYER"""
    accounts = Mock()
    accounts.has_local_key.return_value = True
    accounts.sign_transaction.return_value = Mock(raw_transaction=b'\x02signed')
    return accounts


@pytest.fixture
def store(tmp_path):
    return DeploymentStore(str(tmp_path / "deployments"), 'localhost')


class TestTransactionBuilder:
    """Test deployment transaction building"""
    
    def test_legacy_fees(self, w3):
        builder = TransactionBuilder(w3)
        assert builder.get_fee_params() == {'gasPrice': 1000000000}
    
    def test_eip1559_fees(self, w3):
        w3.eth.get_block.return_value = {'baseFeePerGas': 100}
        w3.eth.max_priority_fee = 2
        
        builder = TransactionBuilder(w3)
        
        assert builder.get_fee_params() == {'maxFeePerGas': 202, 'maxPriorityFeePerGas': 2}
    
    def test_build_deployment_tx(self, w3):
        factory = w3.eth.contract(abi=ABI, bytecode=BYTECODE)
        tx = TransactionBuilder(w3, gas_multiplier=1.5).build_deployment_tx(factory, ARGS, DEPLOYER)
        
        factory.constructor.assert_called_with(*ARGS)
        assert tx['from'] == DEPLOYER
        assert tx['gas'] == 1500000
        assert tx['nonce'] == 3
        assert tx['chainId'] == 31337
        assert tx['gasPrice'] == 1000000000
        w3.eth.get_transaction_count.assert_called_with(DEPLOYER, 'pending')
    
    def test_gas_estimation_fallback(self, w3):
        factory = w3.eth.contract(abi=ABI, bytecode=BYTECODE)
        factory.constructor.return_value.estimate_gas.side_effect = Exception("execution reverted")
        
        tx = TransactionBuilder(w3).build_deployment_tx(factory, ARGS, DEPLOYER)
        
        assert tx['gas'] == DEFAULT_GAS_LIMIT


class TestConstructorEncoding:
    """Test constructor argument encoding"""
    
    def test_encodes_strings(self):
        encoded = encode_constructor_args(ABI, ARGS)
        
        assert encoded.startswith('0x')
        # three dynamic offsets + three length/data pairs
        assert len(encoded) > 2 + 64 * 6
    
    def test_no_constructor(self):
        assert encode_constructor_args([], []) == '0x'
    
    def test_arity_mismatch(self):
        with pytest.raises(ValueError):
            encode_constructor_args(ABI, ARGS[:2])
    
    def test_tuple_argument(self):
        abi = [{
            "type": "constructor",
            "inputs": [{
                "name": "cfg",
                "type": "tuple",
                "components": [{"name": "a", "type": "uint256"}, {"name": "b", "type": "address"}]
            }]
        }]
        encoded = encode_constructor_args(abi, [(1, DEPLOYER)])
        
        assert len(encoded) == 2 + 64 * 2


class TestContractDeployer:
    """Test ContractDeployer.deploy"""
    
    def test_deploy_with_local_key(self, network, accounts, artifacts_dir, store, w3):
        deployer = ContractDeployer(network, accounts, artifacts_dir, store)
        
        result = deployer.deploy('BrainDance', from_=DEPLOYER, args=ARGS, log=True)
        
        assert result['address'] == CONTRACT
        assert result['newly_deployed'] is True
        assert result['transaction_hash'] == '0x' + '11' * 32
        assert result['args'] == ARGS
        assert result['abi'] == ABI
        
        w3.eth.contract.assert_called_with(abi=ABI, bytecode=BYTECODE)
        w3.eth.send_raw_transaction.assert_called_once_with(b'\x02signed')
        w3.eth.send_transaction.assert_not_called()
        
        signed_tx = accounts.sign_transaction.call_args[0][0]
        assert signed_tx['from'] == DEPLOYER
        assert signed_tx['data'] == BYTECODE
    
    def test_deploy_through_node(self, network, accounts, artifacts_dir, w3):
        accounts.has_local_key.return_value = False
        deployer = ContractDeployer(network, accounts, artifacts_dir)
        
        deployer.deploy('BrainDance', from_=DEPLOYER, args=ARGS)
        
        w3.eth.send_transaction.assert_called_once()
        w3.eth.send_raw_transaction.assert_not_called()
    
    def test_saves_record(self, network, accounts, artifacts_dir, store):
        ContractDeployer(network, accounts, artifacts_dir, store).deploy('BrainDance', DEPLOYER, ARGS)
        
        record = store.get('BrainDance')
        assert record['address'] == CONTRACT
        assert record['args'] == ARGS
        assert record['bytecode'] == BYTECODE
        assert record['deployer'] == DEPLOYER
        assert record['receipt']['gasUsed'] == 2345678
        assert record['numDeployments'] == 1
    
    def test_no_record_when_saving_disabled(self, network, accounts, artifacts_dir, store):
        network.save_deployments = False
        
        ContractDeployer(network, accounts, artifacts_dir, store).deploy('BrainDance', DEPLOYER, ARGS)
        
        assert store.get('BrainDance') is None
    
    def test_reuses_unchanged_deployment(self, network, accounts, artifacts_dir, store, w3):
        deployer = ContractDeployer(network, accounts, artifacts_dir, store)
        deployer.deploy('BrainDance', DEPLOYER, ARGS)
        w3.eth.send_raw_transaction.reset_mock()
        w3.eth.get_code.return_value = b'\x60\x80'
        
        result = deployer.deploy('BrainDance', DEPLOYER, ARGS, log=True)
        
        assert result['newly_deployed'] is False
        assert result['address'] == CONTRACT
        w3.eth.send_raw_transaction.assert_not_called()
    
    def test_redeploys_when_args_change(self, network, accounts, artifacts_dir, store, w3):
        deployer = ContractDeployer(network, accounts, artifacts_dir, store)
        deployer.deploy('BrainDance', DEPLOYER, ARGS)
        w3.eth.get_code.return_value = b'\x60\x80'
        
        result = deployer.deploy('BrainDance', DEPLOYER, ARGS[:2] + ["ipfs://new/"])
        
        assert result['newly_deployed'] is True
        assert store.get('BrainDance')['numDeployments'] == 2
    
    def test_redeploys_when_code_missing(self, network, accounts, artifacts_dir, store, w3):
        deployer = ContractDeployer(network, accounts, artifacts_dir, store)
        deployer.deploy('BrainDance', DEPLOYER, ARGS)
        w3.eth.get_code.return_value = b''
        
        assert deployer.deploy('BrainDance', DEPLOYER, ARGS)['newly_deployed'] is True
    
    def test_record_without_address_is_redeployed(self, network, accounts, artifacts_dir, store, w3):
        deployer = ContractDeployer(network, accounts, artifacts_dir, store)
        store.save('BrainDance', {'args': ARGS, 'bytecode': BYTECODE})
        w3.eth.get_code.return_value = b'\x60\x80'

        result = deployer.deploy('BrainDance', DEPLOYER, ARGS)

        assert result['newly_deployed'] is True
        w3.eth.get_code.assert_not_called()
        assert store.get('BrainDance')['address'] == CONTRACT

    def test_reset_ignores_record(self, network, accounts, artifacts_dir, store, w3):
        ContractDeployer(network, accounts, artifacts_dir, store).deploy('BrainDance', DEPLOYER, ARGS)
        w3.eth.get_code.return_value = b'\x60\x80'
        
        deployer = ContractDeployer(network, accounts, artifacts_dir, store, reset=True)
        
        assert deployer.deploy('BrainDance', DEPLOYER, ARGS)['newly_deployed'] is True
    
    def test_reverted_deployment(self, network, accounts, artifacts_dir, store, w3):
        w3.eth.wait_for_transaction_receipt.return_value = {
            'status': 0,
            'contractAddress': None,
            'gasUsed': 3000000,
            'blockNumber': 12
        }
        deployer = ContractDeployer(network, accounts, artifacts_dir, store)
        
        with pytest.raises(DeploymentError) as exc_info:
            deployer.deploy('BrainDance', DEPLOYER, ARGS)
        
        assert exc_info.value.tx_hash == Web3.to_hex(TX_HASH)
        assert store.get('BrainDance') is None
    
    def test_missing_artifact(self, network, accounts, tmp_path, w3):
        deployer = ContractDeployer(network, accounts, str(tmp_path / "nowhere"))
        
        with pytest.raises(FileNotFoundError):
            deployer.deploy('BrainDance', DEPLOYER, ARGS)
        
        w3.eth.contract.assert_not_called()
