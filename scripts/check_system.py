"""
System Check Script
Verifies configuration, artifacts and network access before deploying
"""

import os
import sys
import json
import argparse
from web3 import Web3
from loguru import logger
from dotenv import load_dotenv

from blockchain.network import load_network
from blockchain.named_accounts import NamedAccounts
from blockchain.deployment_store import DeploymentStore
from utils.artifacts import artifact_path, read_artifact_file, get_bytecode
from utils.config import load_config
from utils.logger import setup_logging

load_dotenv()

CONTRACT_NAME = "BrainDance"
DEPLOY_CONFIG_PATH = "config/deploy_config.json"
NETWORKS_CONFIG_PATH = "config/networks.json"


def check_configuration_files(state: dict) -> bool:
    """Check that the config files exist and parse"""
    logger.info("Checking configuration files...")
    
    ok = True
    for file_path in (DEPLOY_CONFIG_PATH, NETWORKS_CONFIG_PATH):
        try:
            config = load_config(file_path)
            state[file_path] = config
            logger.success(f"  ✓ {file_path}")
        except (FileNotFoundError, json.JSONDecodeError) as e:
            logger.error(f"  ✗ {file_path}: {e}")
            ok = False
    
    return ok


def check_environment_variables(state: dict) -> bool:
    """Check BASE_URI and the selected network's env vars"""
    logger.info("Checking environment variables...")
    
    required_vars = ['BASE_URI']

    if not state['network_name']:
        state['network_name'] = state.get(DEPLOY_CONFIG_PATH, {}).get('default_network')

    networks = state.get(NETWORKS_CONFIG_PATH, {}).get('networks', {})
    network_config = networks.get(state['network_name'], {})
    for key in ('rpc_url_env', 'accounts_env'):
        if network_config.get(key):
            required_vars.append(network_config[key])
    
    missing = [var for var in required_vars if not os.getenv(var)]
    
    if missing:
        logger.error(f"Missing environment variables: {', '.join(missing)}")
        return False
    
    logger.success("✓ All environment variables set")
    return True


def check_artifact(state: dict) -> bool:
    """Check the compiled artifact is present and deployable"""
    logger.info("Checking contract artifact...")
    
    path = artifact_path(CONTRACT_NAME, state['artifacts_dir'])
    try:
        artifact = read_artifact_file(path)
        get_bytecode(artifact)
    except (FileNotFoundError, ValueError, json.JSONDecodeError) as e:
        logger.error(f"  ✗ {path}: {e}")
        return False
    
    logger.success(f"  ✓ {path} ({len(artifact['abi'])} ABI entries)")
    return True


def check_network_connection(state: dict) -> bool:
    """Connect to the selected network"""
    logger.info("Checking network connection...")
    
    try:
        network = load_network(state['network_name'], NETWORKS_CONFIG_PATH)
    except (ValueError, ConnectionError) as e:
        logger.error(f"  ✗ {e}")
        return False
    
    state['network'] = network
    logger.success(
        f"  ✓ {network.name}: chain {network.chain_id}, block {network.w3.eth.block_number}"
    )
    return True


def check_deployer_balance(state: dict) -> bool:
    """Resolve account0 and check it can pay for gas"""
    logger.info("Checking deployer balance...")
    
    network = state.get('network')
    if network is None:
        logger.warning("  No network connection - skipping balance check")
        return False
    
    try:
        named = state[DEPLOY_CONFIG_PATH]['named_accounts']
        account0 = NamedAccounts(network, named).get('account0')
    except (KeyError, ValueError) as e:
        logger.error(f"  ✗ Cannot resolve account0: {e}")
        return False
    
    balance = network.w3.eth.get_balance(account0)
    balance_eth = network.w3.from_wei(balance, 'ether')
    logger.info(f"  account0 {account0}: {balance_eth:.4f} ETH")
    
    if balance == 0:
        logger.warning("  ⚠ Deployer has zero balance")
    else:
        logger.success("  ✓ Deployer funded")
    
    return True


def check_existing_deployment(state: dict) -> bool:
    """Report a stored deployment and whether it still has code"""
    logger.info("Checking stored deployment...")
    
    network = state.get('network')
    if network is None:
        return True
    
    record = DeploymentStore(state['deployments_dir'], network.name).get(CONTRACT_NAME)
    if not record:
        logger.info(f"  No stored {CONTRACT_NAME} deployment on {network.name}")
        return True
    
    code = network.w3.eth.get_code(Web3.to_checksum_address(record['address']))
    if not code or code in (b'', '0x'):
        logger.warning(f"  ⚠ No contract at stored address {record['address']} (will redeploy)")
    else:
        logger.success(f"  ✓ {CONTRACT_NAME} deployed at {record['address']}")
    
    return True


def main(argv=None):
    """Run all system checks"""
    parser = argparse.ArgumentParser(description="Pre-deployment checks")
    parser.add_argument('--network', default=None)
    parser.add_argument('--artifacts-dir', default='artifacts')
    parser.add_argument('--deployments-dir', default='deployments')
    args = parser.parse_args(argv)
    
    setup_logging()
    
    logger.info("=" * 70)
    logger.info("BrainDance Deployment Check")
    logger.info("=" * 70)
    
    state = {
        'artifacts_dir': args.artifacts_dir,
        'deployments_dir': args.deployments_dir,
        'network_name': args.network or os.getenv('NETWORK')
    }
    
    checks = [
        ("Configuration Files", check_configuration_files),
        ("Environment Variables", check_environment_variables),
        ("Contract Artifact", check_artifact),
        ("Network Connection", check_network_connection),
        ("Deployer Balance", check_deployer_balance),
        ("Stored Deployment", check_existing_deployment)
    ]
    
    results = []
    
    for name, check_func in checks:
        logger.info("")
        try:
            result = check_func(state)
        except Exception as e:
            logger.error(f"Error in {name}: {e}")
            result = False
        results.append((name, result))
    
    # Summary
    logger.info("")
    logger.info("=" * 70)
    logger.info("Summary")
    logger.info("=" * 70)
    
    passed = sum(1 for _, result in results if result)
    total = len(results)
    
    for name, result in results:
        status = "✓ PASS" if result else "✗ FAIL"
        logger.info(f"  {status}: {name}")
    
    logger.info("")
    logger.info(f"Total: {passed}/{total} checks passed")
    
    if passed == total:
        logger.success("✅ Ready to deploy: python deploy.py")
        return 0
    
    logger.error("❌ Not ready - fix issues above")
    return 1


if __name__ == "__main__":
    sys.exit(main())
