"""Command line interface for contract-deployer library."""

import argparse
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

from .config import load_config
from .constants import DEFAULT_CONTRACT, DEPLOYER_VARIABLE
from .deployments import build_orchestrator
from .exceptions import DeployerError
from .paths import get_project_paths
from .profiles import ProfileRegistry
from .types import DeploymentSpec, VerificationStatus

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contract-deployer",
        description="Deploy a compiled contract and submit it for source verification.",
    )
    parser.add_argument("--config", help="Path to deployer JSON config (default: ./deployer.json if present)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    deploy = subparsers.add_parser("deploy", help="Deploy a contract to one or more networks")
    deploy.add_argument(
        "--network",
        action="append",
        required=True,
        help="Network profile name; repeat to deploy to several networks in order",
    )
    deploy.add_argument("--no-verify", action="store_true", help="Skip source verification")
    deploy.add_argument("--artifacts", help="Hardhat artifacts directory (default: ./artifacts)")
    deploy.add_argument("--contract", default=DEFAULT_CONTRACT, help="Contract name to deploy")
    deploy.add_argument(
        "--arg",
        dest="args",
        action="append",
        help=f"Constructor argument; repeatable. '{DEPLOYER_VARIABLE}' is the signing address",
    )
    deploy.add_argument("--confirmations", type=int, help="Blocks to wait for (default: 1)")
    deploy.add_argument("--timeout", type=float, help="Seconds to wait for confirmation")

    subparsers.add_parser("networks", help="List configured network profiles")
    return parser


def _parse_arg(value: str):
    # Decimal integers are passed as int so uint/int constructor params type-check
    if not value.isascii():
        return value
    try:
        return int(value, 10)
    except ValueError:
        return value


def _deploy(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    orchestrator = build_orchestrator(
        config,
        artifacts_dir=args.artifacts,
        confirmations=args.confirmations,
        timeout=args.timeout,
    )

    # Default constructor call: GameScores(deployer)
    raw_args = args.args if args.args is not None else [DEPLOYER_VARIABLE]
    spec = DeploymentSpec(args.contract, tuple(_parse_arg(a) for a in raw_args))

    results = orchestrator.run_many(args.network, spec, verify=not args.no_verify)

    for result in results:
        print(f"{result.contract_name} deployed to: {result.address} ({result.profile_name})")
        print(f"  transaction: {result.tx_hash}")
        for outcome in result.verifications:
            line = f"  verification [{outcome.kind.value}]: {outcome.status.value}"
            if outcome.status == VerificationStatus.SUBMITTED and outcome.url:
                line += f" {outcome.url}"
            elif outcome.status != VerificationStatus.SUBMITTED:
                line += f" ({outcome.detail})"
            print(line)
    return 0


def _networks(args: argparse.Namespace) -> int:
    registry = ProfileRegistry(load_config(args.config).networks)
    for name in registry.names():
        print(name)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the CLI.

    Returns:
        0 on successful deployment (whatever the verification outcome),
        1 on any deployment-path failure
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config_path, _, dotenv_path = get_project_paths()
    load_dotenv(dotenv_path)
    if args.config is None and config_path.exists():
        args.config = str(config_path)

    try:
        if args.command == "deploy":
            return _deploy(args)
        return _networks(args)
    except DeployerError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
