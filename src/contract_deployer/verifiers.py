"""Verification backend routing for contract-deployer library."""

import json
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

import requests

from .constants import SOURCIFY_CONFIG, VERIFY_REQUEST_TIMEOUT
from .credentials import EnvSecretProvider
from .exceptions import ConfigurationError
from .types import (
    ContractArtifact,
    DeploymentResult,
    VerificationOutcome,
    VerificationStatus,
    VerifierBinding,
    VerifierKind,
)

logger = logging.getLogger(__name__)


def registry_binding(chain_id: int, server_url: str, repository_url: str) -> VerifierBinding:
    """
    Build a decentralized registry binding for a chain.

    Args:
        chain_id: Chain id the registry should verify on
        server_url: Registry server base URL (e.g., "https://sourcify.dev/server")
        repository_url: Registry repository base URL for browsing

    Returns:
        VerifierBinding with kind DECENTRALIZED_REGISTRY
    """
    return VerifierBinding(
        chain_id=chain_id,
        kind=VerifierKind.DECENTRALIZED_REGISTRY,
        endpoints={
            "submit": f"{server_url.rstrip('/')}/verify/solc-json",
            "browse": repository_url.rstrip("/"),
        },
    )


class VerifierRouter:
    """Maps chain ids to verification backends and submits verification requests."""

    def __init__(
        self,
        bindings: Iterable[VerifierBinding] = (),
        registry_chain_ids: Iterable[int] = (),
        registry_server_url: str = SOURCIFY_CONFIG["server_url"],
        registry_repository_url: str = SOURCIFY_CONFIG["repository_url"],
        secrets: Optional[EnvSecretProvider] = None,
        session: Optional[requests.Session] = None,
        timeout: float = VERIFY_REQUEST_TIMEOUT,
    ):
        """
        Initialize the router.

        Args:
            bindings: Declared bindings, at most one per chain id
            registry_chain_ids: Chains also verified on the decentralized registry
            registry_server_url: Registry server base URL
            registry_repository_url: Registry repository base URL
            secrets: Resolves API key references (defaults to environment)
            session: HTTP session for verification requests
            timeout: HTTP timeout per request, in seconds

        Raises:
            ConfigurationError: If a chain id is declared twice
        """
        self._bindings: Dict[int, VerifierBinding] = {}
        for binding in bindings:
            if binding.chain_id in self._bindings:
                raise ConfigurationError(
                    f"Duplicate verifier binding for chain id {binding.chain_id}"
                )
            self._bindings[binding.chain_id] = binding

        self._registry: Dict[int, VerifierBinding] = {
            chain_id: registry_binding(chain_id, registry_server_url, registry_repository_url)
            for chain_id in registry_chain_ids
        }
        self._secrets = secrets or EnvSecretProvider()
        self._session = session or requests.Session()
        self.timeout = timeout

    def route(self, chain_id: int) -> VerifierBinding:
        """
        Get the verification backend for a chain.

        Never fails: chains without any backend get a NONE binding and
        their verification is skipped.

        Args:
            chain_id: Chain id of the deployment

        Returns:
            Declared binding, else registry binding, else NONE binding
        """
        if chain_id in self._bindings:
            return self._bindings[chain_id]
        if chain_id in self._registry:
            return self._registry[chain_id]
        return VerifierBinding.none(chain_id)

    def routes(self, chain_id: int) -> List[VerifierBinding]:
        """
        Get every verification backend for a chain.

        Returns:
            Declared binding and registry binding when both apply,
            or a single-element list with route(chain_id)
        """
        declared = self._bindings.get(chain_id)
        registry = self._registry.get(chain_id)
        # An explicit NONE declaration opts the chain out of the registry too
        if (
            declared is not None
            and registry is not None
            and declared.kind not in (VerifierKind.NONE, registry.kind)
        ):
            return [declared, registry]
        return [self.route(chain_id)]

    def submit(
        self,
        binding: VerifierBinding,
        result: DeploymentResult,
        artifact: ContractArtifact,
    ) -> VerificationOutcome:
        """
        Submit a deployed contract for source verification.

        Submission is fire-and-forget: no polling for the verification
        result is done. Failures are returned, never raised.

        Args:
            binding: Backend to submit to
            result: Confirmed deployment
            artifact: Compiled artifact of the deployed contract

        Returns:
            VerificationOutcome (SKIPPED, SUBMITTED or FAILED)
        """
        if binding.kind == VerifierKind.NONE:
            return VerificationOutcome(
                status=VerificationStatus.SKIPPED,
                kind=binding.kind,
                chain_id=result.chain_id,
                detail=f"No verifier configured for chain id {result.chain_id}",
            )

        def failed(detail: str) -> VerificationOutcome:
            logger.warning("Verification of %s on %s failed: %s", result.address, binding.kind.value, detail)
            return VerificationOutcome(
                status=VerificationStatus.FAILED,
                kind=binding.kind,
                chain_id=result.chain_id,
                detail=detail,
            )

        submit_url = binding.endpoints.get("submit")
        if not submit_url:
            return failed("Binding has no submit endpoint")
        if artifact.compiler_input is None or artifact.compiler_version is None:
            return failed(f"No compiler input found for {artifact.contract_name}")

        try:
            if binding.kind == VerifierKind.EXPLORER_API:
                response = self._session.post(
                    submit_url,
                    data=self._explorer_payload(binding, result, artifact),
                    timeout=self.timeout,
                )
            else:
                response = self._session.post(
                    submit_url,
                    json=self._registry_payload(result, artifact),
                    timeout=self.timeout,
                )
        except requests.RequestException as e:
            return failed(f"Network error: {e}")

        if not 200 <= response.status_code < 300:
            return failed(f"HTTP {response.status_code}: {response.text[:200]}")

        url = self._browse_url(binding, result)
        logger.info("Verification of %s submitted to %s", result.address, url or submit_url)
        return VerificationOutcome(
            status=VerificationStatus.SUBMITTED,
            kind=binding.kind,
            chain_id=result.chain_id,
            detail=response.text[:200],
            url=url,
        )

    def _explorer_payload(
        self, binding: VerifierBinding, result: DeploymentResult, artifact: ContractArtifact
    ) -> Dict[str, Any]:
        # Etherscan-compatible verifysourcecode action (also served by Blockscout)
        payload = {
            "module": "contract",
            "action": "verifysourcecode",
            "contractaddress": result.address,
            "sourceCode": json.dumps(artifact.compiler_input),
            "codeformat": "solidity-standard-json-input",
            "contractname": artifact.fully_qualified_name,
            "compilerversion": f"v{artifact.compiler_version}",
            # Misspelling is part of the Etherscan API
            "constructorArguements": result.constructor_args,
        }
        api_key = self._secrets.secret(binding.api_key_ref)
        if api_key is not None:
            payload["apikey"] = api_key
        logger.debug("Explorer payload for %s: %s", result.address, sorted(payload))
        return payload

    def _registry_payload(self, result: DeploymentResult, artifact: ContractArtifact) -> Dict[str, Any]:
        return {
            "address": result.address,
            "chain": str(result.chain_id),
            "files": {"SolcJsonInput.json": json.dumps(artifact.compiler_input)},
            "compilerVersion": artifact.compiler_version,
            "contractName": artifact.contract_name,
        }

    @staticmethod
    def _browse_url(binding: VerifierBinding, result: DeploymentResult) -> Optional[str]:
        browse = binding.endpoints.get("browse")
        if not browse:
            return None
        if binding.kind == VerifierKind.EXPLORER_API:
            return f"{browse.rstrip('/')}/address/{result.address}"
        return f"{browse.rstrip('/')}/{result.chain_id}/{result.address}"


def parse_verifier_binding(chain_id: int, data: Mapping[str, Any]) -> VerifierBinding:
    """
    Parse one entry of the "verifiers" config section.

    Args:
        chain_id: Chain id the entry is keyed by
        data: {"kind", "endpoints", "api_key", "network"}

    Returns:
        VerifierBinding object

    Raises:
        ConfigurationError: If kind is unknown or an explorer has no submit URL
    """
    try:
        kind = VerifierKind(data.get("kind", VerifierKind.EXPLORER_API.value))
    except ValueError as e:
        raise ConfigurationError(
            f"Unknown verifier kind {data.get('kind')!r} for chain id {chain_id}"
        ) from e

    endpoints = data.get("endpoints", {})
    if not isinstance(endpoints, Mapping) or not all(
        isinstance(url, str) for url in endpoints.values()
    ):
        raise ConfigurationError(
            f"Verifier endpoints for chain id {chain_id} must map roles to URL strings"
        )
    if kind == VerifierKind.EXPLORER_API and not endpoints.get("submit"):
        raise ConfigurationError(
            f"Explorer verifier for chain id {chain_id} requires endpoints.submit"
        )

    for key in ("api_key", "network"):
        if data.get(key) is not None and not isinstance(data[key], str):
            raise ConfigurationError(
                f"Verifier {key} for chain id {chain_id} must be a string, got {data[key]!r}"
            )

    return VerifierBinding(
        chain_id=chain_id,
        kind=kind,
        endpoints=dict(endpoints),
        api_key_ref=data.get("api_key"),
        network=data.get("network"),
    )
