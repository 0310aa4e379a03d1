import json
import os
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from ape import accounts, networks
from ape.api import AccountAPI
from ape.contracts import ContractInstance
from ape_accounts import KeyfileAccount

from allo_deploy.constants import ARTIFACTS_DIR, LOCAL_NETWORKS


def _load_yaml(filepath: Path) -> dict:
    """Loads a YAML file."""
    with open(filepath, "r") as file:
        return yaml.safe_load(file)


def _load_json(filepath: Path) -> dict:
    """Loads a JSON file."""
    with open(filepath, "r") as file:
        return json.load(file)


def is_local_network() -> bool:
    """Returns True if the connected network is a local development network."""
    return networks.provider.network.name in LOCAL_NETWORKS


def get_artifact_filepath(config: Dict) -> Optional[Path]:
    """Returns the registry filepath configured in a params file, if any."""
    artifact_config = config.get("artifacts")
    if not artifact_config:
        return None
    artifact_dir = Path(artifact_config.get("dir", ARTIFACTS_DIR))
    filename = artifact_config.get("filename")
    if not filename:
        raise ValueError("artifact filename is not set in params file.")
    return artifact_dir / filename


def validate_config(config: Dict) -> None:
    """
    Checks that a params file lists contracts and, for live deployments,
    that it targets the chain the provider is connected to.
    """
    print("Validating parameters YAML...")

    contracts = config.get("contracts")
    if not contracts:
        raise ValueError("Constructor parameters file missing 'contracts' field.")

    deployment = config.get("deployment") or dict()
    config_chain_id = deployment.get("chain_id")
    if config_chain_id is None:
        return

    chain_id = networks.provider.network.chain_id
    if int(config_chain_id) != chain_id and not is_local_network():
        raise ValueError(
            f"chain_id in params file ({config_chain_id}) does not match "
            f"chain_id of current network ({chain_id})."
        )


def get_account(alias: Optional[str], autosign: bool = False) -> AccountAPI:
    """Returns the signer for the connected network."""
    if is_local_network():
        if alias is None:
            return accounts.test_accounts[0]
        return accounts.load(alias)

    if alias is None:
        raise ValueError("Must specify account alias when deploying to live networks")

    account = accounts.load(alias)
    if autosign and isinstance(account, KeyfileAccount):
        print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        account.set_autosign(True)
    return account


def check_etherscan_plugin() -> None:
    """
    Checks that the ape-etherscan plugin is installed and that
    the appropriate API key environment variable is set.
    """
    if is_local_network():
        # unnecessary for local deployment
        return
    try:
        from ape_etherscan.utils import API_KEY_ENV_KEY_MAP
    except ImportError:
        raise ImportError("Please install the ape-etherscan plugin to verify contracts.")
    ecosystem_name = networks.provider.network.ecosystem.name
    explorer_envvar = API_KEY_ENV_KEY_MAP.get(ecosystem_name)
    api_key = os.environ.get(explorer_envvar) if explorer_envvar else None
    if not api_key:
        raise ValueError(f"{explorer_envvar or 'Explorer API key'} is not set.")


def verify_contracts(contracts: List[ContractInstance]) -> None:
    explorer = networks.provider.network.explorer
    for instance in contracts:
        print(f"(i) Verifying {instance.contract_type.name}...")
        explorer.publish_contract(instance.address)
