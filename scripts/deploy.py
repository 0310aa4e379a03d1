#!/usr/bin/python3
"""
Deploys RFPSimpleStrategy followed by Allo.

    python scripts/deploy.py --network https://rpc.sepolia.org --account deployer
    ape run deploy
"""
from allo_deploy.cli import cli

if __name__ == "__main__":
    cli()
