"""Configuration loading for contract-deployer library."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .constants import DEPLOYMENT_CONFIG, NETWORK_CONFIG, SOURCIFY_CONFIG, VERIFIER_CONFIG
from .exceptions import ConfigNotFoundError, ConfigurationError
from .types import VerifierBinding
from .verifiers import parse_verifier_binding

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeployerConfig:
    """Static configuration, loaded once per process."""

    networks: Dict[str, Dict[str, Any]]
    verifiers: List[VerifierBinding]
    sourcify: Dict[str, Any] = field(default_factory=lambda: dict(SOURCIFY_CONFIG))
    deployment: Dict[str, Any] = field(default_factory=lambda: dict(DEPLOYMENT_CONFIG))

    @property
    def registry_chain_ids(self) -> List[int]:
        if not self.sourcify.get("enabled", False):
            return []
        return [int(c) for c in self.sourcify.get("chain_ids", [])]


def _check_deployment_section(deployment: Dict[str, Any]) -> None:
    # bool is an int subclass but never a valid count or duration
    confirmations = deployment["confirmations"]
    if not isinstance(confirmations, int) or isinstance(confirmations, bool) or confirmations < 1:
        raise ConfigurationError(
            f"'deployment.confirmations' must be a positive integer, got {confirmations!r}"
        )

    for key in ("timeout", "poll_interval"):
        value = deployment[key]
        if not isinstance(value, (int, float)) or isinstance(value, bool) or value < 0:
            raise ConfigurationError(
                f"'deployment.{key}' must be a non-negative number of seconds, got {value!r}"
            )


def parse_config(data: Dict[str, Any]) -> DeployerConfig:
    """
    Build a DeployerConfig from parsed JSON data.

    Sections missing from data fall back to the built-in defaults.

    Args:
        data: Parsed configuration document

    Returns:
        DeployerConfig object

    Raises:
        ConfigurationError: If a section has the wrong shape
    """
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration must be a JSON object")

    networks = data.get("networks", NETWORK_CONFIG)
    if not isinstance(networks, dict) or not all(isinstance(v, dict) for v in networks.values()):
        raise ConfigurationError("'networks' must map profile names to objects")

    verifier_entries = data.get("verifiers", VERIFIER_CONFIG)
    if not isinstance(verifier_entries, dict):
        raise ConfigurationError("'verifiers' must map chain ids to objects")

    verifiers: List[VerifierBinding] = []
    for chain_key, entry in verifier_entries.items():
        # JSON object keys are always strings
        try:
            chain_id = int(chain_key)
        except ValueError as e:
            raise ConfigurationError(f"Verifier key {chain_key!r} is not a chain id") from e
        verifiers.append(parse_verifier_binding(chain_id, entry))

    for section in ("sourcify", "deployment"):
        if not isinstance(data.get(section, {}), dict):
            raise ConfigurationError(f"'{section}' must be an object")

    sourcify = {**SOURCIFY_CONFIG, **data.get("sourcify", {})}
    deployment = {**DEPLOYMENT_CONFIG, **data.get("deployment", {})}
    _check_deployment_section(deployment)

    return DeployerConfig(
        networks={name: dict(profile) for name, profile in networks.items()},
        verifiers=verifiers,
        sourcify=sourcify,
        deployment=deployment,
    )


def load_config(config_path: Optional[Union[Path, str]] = None) -> DeployerConfig:
    """
    Load deployer configuration from a JSON file.

    Args:
        config_path: Path to the configuration file
                     If None, the built-in network configuration is used

    Returns:
        DeployerConfig object

    Raises:
        ConfigNotFoundError: If config_path does not exist
        ConfigurationError: If the file is not valid configuration
    """
    if config_path is None:
        return parse_config({})

    path = Path(config_path)
    if not path.exists():
        raise ConfigNotFoundError(f"Configuration file not found at {path}")

    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e

    logger.debug("Loaded configuration from %s", path)
    return parse_config(data)
