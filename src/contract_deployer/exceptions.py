"""Custom exception classes for contract-deployer library."""

from typing import Any, Optional, Tuple


class DeployerError(Exception):
    """Base exception for deployment-related errors."""

    # Deployments confirmed before a multi-network run failed
    completed_results: Tuple[Any, ...] = ()


class ConfigurationError(DeployerError, ValueError):
    """Raised when deployer configuration is malformed."""

    pass


class ConfigNotFoundError(ConfigurationError, FileNotFoundError):
    """Raised when an explicitly requested configuration file is missing."""

    pass


class ProfileNotFoundError(ConfigurationError):
    """Raised when requested network profile is not configured."""

    pass


class ProfileInvalidError(ConfigurationError):
    """Raised when a network profile has a bad chain id or empty RPC URL."""

    pass


class ArtifactNotFoundError(DeployerError, FileNotFoundError):
    """Raised when no compiled artifact exists for a contract name."""

    pass


class NoSigningCredentialError(DeployerError, ValueError):
    """Raised when a profile has no usable signing credential."""

    pass


class ArgumentMismatchError(DeployerError, TypeError):
    """Raised when constructor arguments do not match the contract ABI."""

    pass


class ChainIdMismatchError(DeployerError, ValueError):
    """Raised when the RPC endpoint reports a different chain than configured."""

    def __init__(self, message: str, expected: Optional[int] = None, actual: Optional[int] = None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class SubmissionFailedError(DeployerError, RuntimeError):
    """Raised when the RPC endpoint rejects or fails a deployment transaction."""

    pass


class ConfirmationTimeoutError(DeployerError, TimeoutError):
    """
    Raised when a sent transaction is not confirmed in time.

    The transaction may still be mined later. Check ``tx_hash`` before
    resubmitting to avoid a duplicate deployment.
    """

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        super().__init__(message)
        self.tx_hash = tx_hash
