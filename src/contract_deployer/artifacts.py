"""Compiled artifact lookup for contract-deployer library."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .exceptions import ArtifactNotFoundError, ConfigurationError
from .types import ContractArtifact

logger = logging.getLogger(__name__)


def parse_hardhat_artifact(file_path: Path) -> Dict[str, Any]:
    """
    Parse a hardhat artifact JSON file.

    Args:
        file_path: Path to artifacts/<source>/<Contract>.json

    Returns:
        Dictionary with canonical field names:
        - Required: contract_name, source_name, abi, bytecode

    Raises:
        ArtifactNotFoundError: If the file has no creation bytecode
            (interfaces and abstract contracts cannot be deployed)
    """
    with open(file_path) as f:
        data = json.load(f)

    bytecode = data.get("bytecode") or ""
    if bytecode in ("", "0x"):
        raise ArtifactNotFoundError(f"No deployable bytecode in artifact: {file_path}")

    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode

    return {
        "contract_name": data["contractName"],
        "source_name": data["sourceName"],
        "abi": data["abi"],
        "bytecode": bytecode,
    }


def load_build_info(artifact_path: Path) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """
    Load compiler input and version for an artifact via its .dbg.json sibling.

    Args:
        artifact_path: Path to the artifact JSON file

    Returns:
        Tuple of (compiler_input, compiler_version), (None, None) when
        the debug file or the build-info it points to is missing
    """
    dbg_path = artifact_path.with_name(f"{artifact_path.stem}.dbg.json")
    try:
        with open(dbg_path) as f:
            build_info_path = (dbg_path.parent / json.load(f)["buildInfo"]).resolve()
        with open(build_info_path) as f:
            build_info = json.load(f)
    except (FileNotFoundError, KeyError, json.JSONDecodeError):
        logger.debug("No build info for %s", artifact_path)
        return None, None

    version = build_info.get("solcLongVersion") or build_info.get("solcVersion")
    return build_info.get("input"), version


class HardhatArtifactStore:
    """Looks up contract artifacts in a hardhat artifacts directory."""

    def __init__(self, artifacts_dir: Union[Path, str]):
        self.artifacts_dir = Path(artifacts_dir)

    def _candidates(self, contract_name: str) -> List[Path]:
        # Fully qualified name: "contracts/GameScores.sol:GameScores"
        if ":" in contract_name:
            source_name, name = contract_name.rsplit(":", 1)
            path = self.artifacts_dir / source_name / f"{name}.json"
            return [path] if path.exists() else []

        return sorted(
            path
            for path in self.artifacts_dir.rglob(f"{contract_name}.json")
            if "build-info" not in path.parts
        )

    def load(self, contract_name: str) -> ContractArtifact:
        """
        Load the compiled artifact for a contract.

        Args:
            contract_name: Contract name or fully qualified "source:Name"

        Returns:
            ContractArtifact object

        Raises:
            ArtifactNotFoundError: If no artifact exists for the name
            ConfigurationError: If a bare name matches several sources
        """
        candidates = self._candidates(contract_name)
        if not candidates:
            raise ArtifactNotFoundError(
                f"Artifact for contract '{contract_name}' not found in {self.artifacts_dir}. "
                "Compile the project first."
            )
        if len(candidates) > 1:
            sources = ", ".join(str(p.parent.relative_to(self.artifacts_dir)) for p in candidates)
            raise ConfigurationError(
                f"Contract name '{contract_name}' is ambiguous ({sources}); "
                "use a fully qualified name"
            )

        artifact_path = candidates[0]
        data = parse_hardhat_artifact(artifact_path)
        compiler_input, compiler_version = load_build_info(artifact_path)

        return ContractArtifact(
            contract_name=data["contract_name"],
            source_name=data["source_name"],
            abi=data["abi"],
            bytecode=data["bytecode"],
            compiler_input=compiler_input,
            compiler_version=compiler_version,
        )
