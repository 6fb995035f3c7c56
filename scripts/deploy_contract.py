"""
Smart Contract Deployment Script
Deploys the BrainDance NFT contract and exports its address and ABI
"""

import sys
import argparse
from typing import Dict, List, Optional
from loguru import logger
from dotenv import load_dotenv

from blockchain.network import load_network
from blockchain.named_accounts import NamedAccounts
from blockchain.deployer import ContractDeployer
from blockchain.deployment_store import DeploymentStore
from utils.artifacts import artifact_path
from utils.config import load_config, get_required_env
from utils.export import export_deployment, DEFAULT_EXPORT_DIR
from utils.logger import setup_logging

load_dotenv()

CONTRACT_NAME = "BrainDance"
TOKEN_NAME = "Brain Dance"
TOKEN_SYMBOL = "BrainDance"
TAGS = ["BrainDance"]

DEPLOY_CONFIG_PATH = "config/deploy_config.json"
NETWORKS_CONFIG_PATH = "config/networks.json"


def deploy_brain_dance(
    network,
    accounts: NamedAccounts,
    deployer: ContractDeployer,
    export_dir: str = DEFAULT_EXPORT_DIR,
    artifacts_dir: str = "artifacts"
) -> Dict:
    """
    Deploy BrainDance and write the export files
    
    Args:
        network: NetworkContext
        accounts: Named accounts for the network
        deployer: ContractDeployer
        export_dir: Where config.json and BrainDance.json go
        artifacts_dir: Root of compiled artifacts
        
    Returns:
        Deploy data {contractAddress, deployer}
    """
    account0 = accounts.get('account0')
    
    logger.info(f"Deploying contracts with the account: {account0}")
    
    logger.info("------")
    logger.info(f"network name: {network.name}")
    logger.info(f"Deployer: {account0}")
    logger.info("------")
    
    base_uri = get_required_env('BASE_URI')
    token = deployer.deploy(
        CONTRACT_NAME,
        from_=account0,
        args=[TOKEN_NAME, TOKEN_SYMBOL, base_uri],
        log=True
    )
    
    deploy_data = export_deployment(
        token['address'],
        account0,
        CONTRACT_NAME,
        artifact_path(CONTRACT_NAME, artifacts_dir),
        export_dir
    )
    
    logger.info(f"deployData: {deploy_data}")
    return deploy_data


def confirm_live_deployment(network) -> bool:
    """Ask before sending a transaction to a live network"""
    confirm = input(f"\nDeploy {CONTRACT_NAME} to live network '{network.name}'? (yes/no): ")
    return confirm.strip().lower() == 'yes'


def parse_args(argv: Optional[List[str]] = None, paths: Optional[Dict] = None) -> argparse.Namespace:
    """
    Parse command line arguments

    Args:
        argv: Arguments (sys.argv[1:] when None)
        paths: paths section of the deploy config, used for directory defaults
    """
    paths = paths or {}

    parser = argparse.ArgumentParser(description=f"Deploy the {CONTRACT_NAME} contract")
    parser.add_argument('--network', default=None,
                        help="Network name from config/networks.json (default: $NETWORK)")
    parser.add_argument('--tags', default=None,
                        help="Comma-separated deploy tags; runs only when one matches")
    parser.add_argument('--export-dir', default=paths.get('export', DEFAULT_EXPORT_DIR))
    parser.add_argument('--artifacts-dir', default=paths.get('artifacts', 'artifacts'))
    parser.add_argument('--deployments-dir', default=paths.get('deployments', 'deployments'))
    parser.add_argument('--reset', action='store_true',
                        help="Ignore stored deployments and deploy again")
    parser.add_argument('--yes', action='store_true',
                        help="Skip the confirmation prompt on live networks")
    parser.add_argument('--log-level', default='INFO')
    parser.add_argument('--log-file', default=None)
    
    return parser.parse_args(argv)


def tags_match(requested: Optional[str]) -> bool:
    if not requested:
        return True
    
    wanted = {t.strip() for t in requested.split(',') if t.strip()}
    return bool(wanted & set(TAGS))


def main(argv: Optional[List[str]] = None) -> int:
    """Command line entry point"""
    deploy_config = load_config(DEPLOY_CONFIG_PATH)
    args = parse_args(argv, deploy_config.get('paths'))
    setup_logging(args.log_level, args.log_file)

    if not tags_match(args.tags):
        logger.info(f"Skipping {CONTRACT_NAME}: tags {args.tags} not in {TAGS}")
        return 0

    network = load_network(
        args.network,
        NETWORKS_CONFIG_PATH,
        deploy_config.get('default_network')
    )
    accounts = NamedAccounts(network, deploy_config['named_accounts'])
    store = DeploymentStore(args.deployments_dir, network.name)
    deployer = ContractDeployer(
        network,
        accounts,
        artifacts_dir=args.artifacts_dir,
        store=store,
        reset=args.reset
    )
    
    if network.is_live and not args.yes and not confirm_live_deployment(network):
        logger.info("Deployment cancelled")
        return 1
    
    deploy_brain_dance(network, accounts, deployer, args.export_dir, args.artifacts_dir)
    return 0


if __name__ == "__main__":
    sys.exit(main())
