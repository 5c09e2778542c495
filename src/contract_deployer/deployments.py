"""Main API for contract-deployer library."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from .artifacts import HardhatArtifactStore
from .config import DeployerConfig, load_config
from .credentials import EnvSecretProvider
from .exceptions import DeployerError
from .executor import DeploymentExecutor
from .paths import get_project_paths
from .profiles import ProfileRegistry
from .types import (
    ContractArtifact,
    DeploymentResult,
    DeploymentSpec,
    VerificationOutcome,
    VerificationStatus,
    VerifierBinding,
)
from .verifiers import VerifierRouter

logger = logging.getLogger(__name__)


class DeploymentOrchestrator:
    """Resolves a profile, deploys to it and routes source verification."""

    def __init__(
        self,
        profiles: ProfileRegistry,
        executor: DeploymentExecutor,
        router: VerifierRouter,
        max_verify_workers: int = 4,
    ):
        """
        Initialize the orchestrator.

        Args:
            profiles: Network profile registry
            executor: Deployment executor
            router: Verification router
            max_verify_workers: Threads used for concurrent verification requests
        """
        self.profiles = profiles
        self.executor = executor
        self.router = router
        self.max_verify_workers = max_verify_workers

    def run(self, profile_name: str, spec: DeploymentSpec, verify: bool = True) -> DeploymentResult:
        """
        Deploy a contract to one network and optionally verify it.

        Args:
            profile_name: Name of the network profile
            spec: Contract name and constructor arguments
            verify: Submit source verification after deployment

        Returns:
            DeploymentResult with verification outcomes attached

        Raises:
            DeployerError: Any deployment-path failure. Verification
                failures are reported in the result instead.
        """
        return self.run_many([profile_name], spec, verify=verify)[0]

    def run_many(
        self, profile_names: Iterable[str], spec: DeploymentSpec, verify: bool = True
    ) -> List[DeploymentResult]:
        """
        Deploy a contract to several networks, one after another.

        Each deployment is confirmed before the next starts. Verification
        runs afterwards, concurrently across all deployments.

        Args:
            profile_names: Network profile names, in deployment order
            spec: Contract name and constructor arguments
            verify: Submit source verification after all deployments

        Returns:
            DeploymentResult per profile, in the same order

        Raises:
            DeployerError: The first deployment-path failure. Later
                profiles are not deployed. Deployments confirmed before
                the failure are attached as ``completed_results``.
        """
        # Resolve every profile before the first deployment
        profiles = [self.profiles.resolve(name) for name in profile_names]

        results = []
        for profile in profiles:
            logger.info(
                "Deploying %s to %s (chain id %d)", spec.contract_name, profile.name, profile.chain_id
            )
            try:
                results.append(self.executor.deploy(profile, spec))
            except DeployerError as e:
                for done in results:
                    logger.error(
                        "%s was already deployed to %s on %s (tx %s)",
                        done.contract_name,
                        done.address,
                        done.profile_name,
                        done.tx_hash,
                    )
                e.completed_results = tuple(results)
                raise

        if not verify or not results:
            return results

        artifact = self.executor.artifacts.load(spec.contract_name)
        return self._verify(results, artifact)

    def _submit(
        self, binding: VerifierBinding, result: DeploymentResult, artifact: ContractArtifact
    ) -> VerificationOutcome:
        # The deployment is already confirmed; no verification error may escape run()
        try:
            return self.router.submit(binding, result, artifact)
        except Exception as e:
            logger.exception("Verification of %s on %s raised", result.address, binding.kind.value)
            return VerificationOutcome(
                status=VerificationStatus.FAILED,
                kind=binding.kind,
                chain_id=result.chain_id,
                detail=f"{type(e).__name__}: {e}",
            )

    def _verify(
        self, results: List[DeploymentResult], artifact: ContractArtifact
    ) -> List[DeploymentResult]:
        jobs: List[Tuple[int, VerifierBinding]] = [
            (index, binding)
            for index, result in enumerate(results)
            for binding in self.router.routes(result.chain_id)
        ]

        with ThreadPoolExecutor(max_workers=self.max_verify_workers) as pool:
            outcomes = list(
                pool.map(
                    lambda job: self._submit(job[1], results[job[0]], artifact),
                    jobs,
                )
            )

        verified = []
        for index, result in enumerate(results):
            attached: Tuple[VerificationOutcome, ...] = tuple(
                outcome for (job_index, _), outcome in zip(jobs, outcomes) if job_index == index
            )
            for outcome in attached:
                if outcome.status == VerificationStatus.SKIPPED:
                    logger.info("Verification skipped: %s", outcome.detail)
            verified.append(replace(result, verifications=attached))
        return verified


def build_orchestrator(
    config: Optional[DeployerConfig] = None,
    artifacts_dir: Optional[Union[Path, str]] = None,
    secrets: Optional[EnvSecretProvider] = None,
    **executor_options,
) -> DeploymentOrchestrator:
    """
    Build an orchestrator from static configuration.

    Args:
        config: Deployer configuration (defaults to the built-in networks)
        artifacts_dir: Hardhat artifacts directory (defaults to ./artifacts)
        secrets: Secret provider shared by executor and router
        **executor_options: Overrides for confirmations, timeout, poll_interval

    Returns:
        DeploymentOrchestrator ready to run
    """
    if config is None:
        config = load_config()
    if artifacts_dir is None:
        artifacts_dir = get_project_paths()[1]
    if secrets is None:
        secrets = EnvSecretProvider()

    deployment_options = {
        key: config.deployment[key] for key in ("confirmations", "timeout", "poll_interval")
    }
    deployment_options.update({k: v for k, v in executor_options.items() if v is not None})

    executor = DeploymentExecutor(
        HardhatArtifactStore(artifacts_dir),
        secrets=secrets,
        **deployment_options,
    )
    router = VerifierRouter(
        config.verifiers,
        registry_chain_ids=config.registry_chain_ids,
        registry_server_url=config.sourcify["server_url"],
        registry_repository_url=config.sourcify["repository_url"],
        secrets=secrets,
    )
    return DeploymentOrchestrator(ProfileRegistry(config.networks), executor, router)
