#!/usr/bin/env python3
"""
GateDAO CLI

Command-line interface for running DAO scenarios and serving the node.

Scenarios run against an in-process DAO on a simulated clock, so a full
governance cycle (propose, vote, wait out the window, execute) completes
immediately.

Usage:
    gatedao setup [--output FILE]
    gatedao governance [--title TITLE] [--description TEXT] [--against]
    gatedao members [--address ADDRESS] [--role ROLE ...]
    gatedao show-config
    gatedao serve [--host HOST] [--port PORT]
"""

import json
import time
from typing import Optional, Tuple

import click

from .. import __version__
from ..automation import DAOAutomation, DAOScenarios, ProposalData
from ..clock import ManualClock
from ..config import DAOConfig, load_config
from ..exceptions import GateDAOException
from ..governance import GovernanceError, describe_error
from ..logger import configure_logging


def echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2))


def build_scenarios(config: DAOConfig) -> DAOScenarios:
    """In-process DAO on a simulated clock starting at the current time."""
    dao = DAOAutomation(config, clock=ManualClock(start=int(time.time())))
    return DAOScenarios(dao)


def raise_click_error(e: Exception) -> None:
    if isinstance(e, GovernanceError):
        raise click.ClickException(f"{e.condition}: {e} ({describe_error(e)})")
    raise click.ClickException(str(e))


@click.group()
@click.version_option(version=__version__, prog_name="gatedao")
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to config.toml (default: $GATEDAO_CONFIG or ./config.toml)"
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str]):
    """GateDAO Command Line Interface

    Token-gated DAO governance: membership NFTs, time-bound roles,
    weighted voting.
    """
    try:
        config = load_config(config_path)
    except GateDAOException as e:
        raise click.ClickException(f"Invalid configuration: {e}")
    configure_logging(config.node.log_level)
    ctx.obj = config


@cli.command("setup")
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False),
    help="Write deployment info JSON to this file"
)
@click.pass_obj
def setup_cmd(config: DAOConfig, output: Optional[str]):
    """Deploy a DAO and onboard the default members.

    Examples:

        gatedao setup

        gatedao setup --output deployments/dao.json
    """
    scenarios = build_scenarios(config)
    try:
        members = scenarios.setup_complete_dao()
    except (GateDAOException, ValueError) as e:
        raise_click_error(e)

    echo_json(members)
    if output:
        path = scenarios.dao.save_deployment_info(output)
        click.echo(f"Deployment info saved to {path}")


@cli.command("governance")
@click.option("--title", "-t", default=None, help="Proposal title")
@click.option("--description", "-d", default=None, help="Proposal description")
@click.option("--against", is_flag=True, help="Every voter votes against")
@click.pass_obj
def governance_cmd(config: DAOConfig, title: Optional[str], description: Optional[str], against: bool):
    """Run a full governance cycle: propose, vote, close the window, execute."""
    scenarios = build_scenarios(config)
    proposal = None
    if title or description:
        proposal = ProposalData(title=title or "Untitled", description=description or "")
    try:
        scenarios.setup_complete_dao()
        result = scenarios.run_governance_cycle(proposal, support=not against)
    except (GateDAOException, ValueError) as e:
        raise_click_error(e)

    echo_json(result)


@cli.command("members")
@click.option(
    "--address", "-a",
    default="0x1234567890123456789012345678901234567890",
    help="Address of the member to onboard"
)
@click.option(
    "--role", "-r",
    "roles",
    multiple=True,
    default=("VOTER_ROLE",),
    help="Role to grant (repeatable)"
)
@click.pass_obj
def members_cmd(config: DAOConfig, address: str, roles: Tuple[str, ...]):
    """Onboard a new member and print every member's info."""
    scenarios = build_scenarios(config)
    try:
        members = scenarios.setup_complete_dao()
        members.append(scenarios.manage_membership(address, list(roles)))
    except (GateDAOException, ValueError) as e:
        raise_click_error(e)

    echo_json(members)


@cli.command("show-config")
@click.pass_obj
def show_config_cmd(config: DAOConfig):
    """Print the resolved configuration."""
    echo_json(config.to_dict())


@cli.command("serve")
@click.option("--host", "-h", default=None, help="Bind host (default: [node] host)")
@click.option("--port", "-p", type=int, default=None, help="Bind port (default: [node] port)")
@click.pass_obj
def serve_cmd(config: DAOConfig, host: Optional[str], port: Optional[int]):
    """Serve the JSON-RPC node over HTTP."""
    import uvicorn

    from ..node import create_app

    app = create_app(config)
    uvicorn.run(
        app,
        host=host or config.node.host,
        port=port or config.node.port,
        access_log=False,
        log_config=None,
    )


def main():
    cli()


if __name__ == "__main__":
    main()
