"""Network profile registry for contract-deployer library."""

from types import MappingProxyType
from typing import Any, Dict, List, Mapping

from .exceptions import ProfileInvalidError, ProfileNotFoundError
from .types import NetworkProfile


class ProfileRegistry:
    """Immutable set of named network profiles, loaded once at startup."""

    def __init__(self, profiles: Mapping[str, Mapping[str, Any]]):
        """
        Initialize the registry.

        Profiles are validated lazily by resolve(), so one broken entry does
        not prevent deploying to the others.

        Args:
            profiles: Maps profile name -> {"chain_id", "rpc_url", "credential"}
        """
        self._profiles: Mapping[str, Dict[str, Any]] = MappingProxyType(
            {name: dict(data) for name, data in profiles.items()}
        )

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "ProfileRegistry":
        """Build a registry from the "networks" section of a config file."""
        return cls(config.get("networks", {}))

    def has_profile(self, name: str) -> bool:
        """
        Check if a profile name is configured.

        Args:
            name: Profile name to check

        Returns:
            True if profile exists, False otherwise
        """
        return name in self._profiles

    def names(self) -> List[str]:
        """Get all configured profile names, sorted."""
        return sorted(self._profiles.keys())

    def resolve(self, name: str) -> NetworkProfile:
        """
        Resolve a profile name to a validated network profile.

        Args:
            name: Profile name (e.g., "skale-nebula-testnet")

        Returns:
            NetworkProfile object

        Raises:
            ProfileNotFoundError: If name is not configured
            ProfileInvalidError: If chain id is not positive, RPC URL is empty
                or credential is not a string
        """
        if name not in self._profiles:
            raise ProfileNotFoundError(
                f"Network profile '{name}' not found. "
                f"Configured profiles: {', '.join(self.names()) or 'none'}"
            )

        data = self._profiles[name]

        chain_id = data.get("chain_id")
        # bool is an int subclass but never a valid chain id
        if not isinstance(chain_id, int) or isinstance(chain_id, bool) or chain_id <= 0:
            raise ProfileInvalidError(
                f"Network profile '{name}' has invalid chain_id {chain_id!r}: "
                "must be a positive integer"
            )

        rpc_url = data.get("rpc_url")
        if not isinstance(rpc_url, str) or not rpc_url.strip():
            raise ProfileInvalidError(f"Network profile '{name}' has empty rpc_url")

        credential = data.get("credential") or None
        if credential is not None and not isinstance(credential, str):
            raise ProfileInvalidError(
                f"Network profile '{name}' has invalid credential: must be a secret reference string"
            )

        return NetworkProfile(
            name=name,
            chain_id=chain_id,
            rpc_url=rpc_url,
            credential=credential,
        )
