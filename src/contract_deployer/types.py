"""Data types and dataclasses for contract-deployer library."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple


class VerifierKind(Enum):
    """
    Verification backend types.

    Value strings are the ones used in configuration files.
    """

    EXPLORER_API = "explorer-api"
    DECENTRALIZED_REGISTRY = "decentralized-registry"
    NONE = "none"


class VerificationStatus(Enum):
    """Outcome of a single verification submission."""

    SKIPPED = "skipped"
    SUBMITTED = "submitted"
    FAILED = "failed"


@dataclass(frozen=True)
class NetworkProfile:
    """A named deployment target."""

    name: str
    chain_id: int
    rpc_url: str
    credential: Optional[str] = None  # Secret reference, e.g. "env:PRIVATE_KEY"

    @property
    def read_only(self) -> bool:
        return self.credential is None


@dataclass(frozen=True)
class VerifierBinding:
    """Verification backend configured for one chain id."""

    chain_id: int
    kind: VerifierKind
    endpoints: Mapping[str, str] = field(default_factory=dict)  # "submit", "browse"
    api_key_ref: Optional[str] = None
    network: Optional[str] = None

    def __post_init__(self) -> None:
        # Endpoints are read-only
        object.__setattr__(self, "endpoints", MappingProxyType(dict(self.endpoints)))

    @classmethod
    def none(cls, chain_id: int) -> "VerifierBinding":
        return cls(chain_id=chain_id, kind=VerifierKind.NONE)


@dataclass(frozen=True)
class DeploymentSpec:
    """The contract to deploy and its constructor arguments."""

    contract_name: str
    constructor_args: Tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "constructor_args", tuple(self.constructor_args))


@dataclass(frozen=True)
class ContractArtifact:
    """Compiled contract output read from the build directory."""

    # Required fields
    contract_name: str  # e.g., "GameScores"
    source_name: str  # e.g., "contracts/GameScores.sol"
    abi: List[Dict[str, Any]]
    bytecode: str  # 0x-prefixed creation bytecode

    # Optional fields (from hardhat build-info)
    compiler_input: Optional[Dict[str, Any]] = None  # solc standard-JSON input
    compiler_version: Optional[str] = None  # e.g., "0.8.28+commit.7893614a"

    @property
    def fully_qualified_name(self) -> str:
        return f"{self.source_name}:{self.contract_name}"


@dataclass(frozen=True)
class VerificationOutcome:
    """Result of submitting a deployed contract to one verification backend."""

    status: VerificationStatus
    kind: VerifierKind
    chain_id: int
    detail: str = ""
    url: Optional[str] = None  # Browse URL of the verified address


@dataclass(frozen=True)
class DeploymentResult:
    """Outcome of one confirmed deployment."""

    # Required fields
    address: str  # Checksummed address
    tx_hash: str  # 0x-prefixed transaction hash
    profile_name: str
    chain_id: int

    # Optional fields
    contract_name: Optional[str] = None
    block_number: Optional[int] = None
    constructor_args: str = ""  # ABI-encoded hex without 0x prefix
    verifications: Tuple[VerificationOutcome, ...] = ()
