import sys
import traceback
from pathlib import Path

import click

from allo_deploy.constants import DEFAULT_NETWORK
from allo_deploy.driver import run_deployment
from allo_deploy.params import DeploymentConfig


def _report_error(error: BaseException) -> None:
    detail = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    click.echo(detail, err=True, nl=False)


@click.command()
@click.option(
    "--network",
    "-n",
    help="ape network choice (ecosystem:network:provider) or RPC endpoint URI",
    default=DEFAULT_NETWORK,
    show_default=True,
)
@click.option(
    "--account",
    "-a",
    help="Alias of the ape account signing the deployments",
    required=False,
)
@click.option(
    "--params-filepath",
    "-p",
    help="Deployment params YAML listing contracts and constructor parameters",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=False,
)
@click.option(
    "--registry-filepath",
    "-r",
    help="Write deployed contracts to this registry file",
    type=click.Path(dir_okay=False, path_type=Path),
    required=False,
)
@click.option("--verify", help="Publish contract sources to the block explorer", is_flag=True)
@click.option("--autosign", help="Sign transactions without prompting", is_flag=True)
def cli(network, account, params_filepath, registry_filepath, verify, autosign):
    """Deploy the RFPSimpleStrategy and Allo contracts."""
    config = DeploymentConfig(
        network=network,
        account=account,
        params_filepath=params_filepath,
        registry_filepath=registry_filepath,
        verify=verify,
        autosign=autosign,
    )
    try:
        result = run_deployment(config)
    except Exception as e:
        _report_error(e)
        sys.exit(1)

    if not result.ok:
        _report_error(result.error)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    cli()
