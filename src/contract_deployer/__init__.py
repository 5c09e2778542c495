"""
contract-deployer: Python library for deploying smart contracts and routing source verification
"""

from importlib.metadata import PackageNotFoundError, version

from .config import DeployerConfig, load_config
from .deployments import DeploymentOrchestrator, build_orchestrator
from .exceptions import (
    ArgumentMismatchError,
    ArtifactNotFoundError,
    ChainIdMismatchError,
    ConfigNotFoundError,
    ConfigurationError,
    ConfirmationTimeoutError,
    DeployerError,
    NoSigningCredentialError,
    ProfileInvalidError,
    ProfileNotFoundError,
    SubmissionFailedError,
)
from .executor import DeploymentExecutor
from .profiles import ProfileRegistry
from .types import (
    ContractArtifact,
    DeploymentResult,
    DeploymentSpec,
    NetworkProfile,
    VerificationOutcome,
    VerificationStatus,
    VerifierBinding,
    VerifierKind,
)
from .verifiers import VerifierRouter

try:
    __version__ = version("contract-deployer")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "DeploymentOrchestrator",
    "build_orchestrator",
    "DeploymentExecutor",
    "ProfileRegistry",
    "VerifierRouter",
    "DeployerConfig",
    "load_config",
    "NetworkProfile",
    "VerifierBinding",
    "VerifierKind",
    "DeploymentSpec",
    "DeploymentResult",
    "ContractArtifact",
    "VerificationOutcome",
    "VerificationStatus",
    "DeployerError",
    "ConfigurationError",
    "ConfigNotFoundError",
    "ProfileNotFoundError",
    "ProfileInvalidError",
    "ArtifactNotFoundError",
    "NoSigningCredentialError",
    "ArgumentMismatchError",
    "ChainIdMismatchError",
    "SubmissionFailedError",
    "ConfirmationTimeoutError",
]
