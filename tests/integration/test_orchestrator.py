"""Integration tests for DeploymentOrchestrator end-to-end flows."""

from pathlib import Path

import pytest
import responses

from contract_deployer import (
    ChainIdMismatchError,
    ConfigurationError,
    DeploymentOrchestrator,
    DeploymentSpec,
    NoSigningCredentialError,
    ProfileInvalidError,
    ProfileNotFoundError,
    VerificationStatus,
    VerifierBinding,
    VerifierKind,
    VerifierRouter,
    build_orchestrator,
    load_config,
)
from contract_deployer.config import parse_config

EXPLORER_API = "http://explorer.example.com/api"
SOURCIFY_VERIFY = "http://sourcify.example.com/server/verify/solc-json"


@pytest.fixture
def orchestrator(sample_config_path: Path, artifacts_dir: Path, secrets) -> DeploymentOrchestrator:
    return build_orchestrator(load_config(sample_config_path), artifacts_dir=artifacts_dir, secrets=secrets)


@pytest.fixture
def game_scores(deployer_account) -> DeploymentSpec:
    return DeploymentSpec("GameScores", (deployer_account.address,))


@pytest.fixture
def verifiers_up(mock_http):
    """Explorer and registry both accept submissions."""
    mock_http.add(responses.POST, EXPLORER_API, json={"status": "1", "result": "guid-1"}, status=200)
    mock_http.add(responses.POST, SOURCIFY_VERIFY, json={"result": [{"status": "perfect"}]}, status=200)
    return mock_http


def verification_calls(mock_http):
    return [c for c in mock_http.calls if c.request.url.rstrip("/") in (EXPLORER_API, SOURCIFY_VERIFY)]


class TestTestnetDeployment:
    """Deploying GameScores to the testnet with verification."""

    def test_deploys_and_submits_verification(
        self, orchestrator, game_scores, fake_node, verifiers_up
    ):
        result = orchestrator.run("testnet", game_scores, verify=True)

        assert result.address
        assert result.tx_hash
        assert result.chain_id == 37084624

        by_kind = {o.kind: o for o in result.verifications}
        assert by_kind[VerifierKind.EXPLORER_API].status == VerificationStatus.SUBMITTED
        assert by_kind[VerifierKind.DECENTRALIZED_REGISTRY].status == VerificationStatus.SUBMITTED
        assert by_kind[VerifierKind.EXPLORER_API].url.endswith(result.address)

    def test_explorer_receives_deployed_address(
        self, orchestrator, game_scores, fake_node, verifiers_up
    ):
        result = orchestrator.run("testnet", game_scores)

        explorer_call = next(c for c in verifiers_up.calls if c.request.url.startswith(EXPLORER_API))
        assert f"contractaddress={result.address}" in explorer_call.request.body

    def test_no_verify_makes_no_verification_calls(
        self, orchestrator, game_scores, fake_node, verifiers_up
    ):
        result = orchestrator.run("testnet", game_scores, verify=False)

        assert result.verifications == ()
        assert verification_calls(verifiers_up) == []

    def test_verification_failure_keeps_deployment(
        self, orchestrator, game_scores, fake_node, mock_http
    ):
        mock_http.add(responses.POST, EXPLORER_API, body="Service unavailable", status=503)
        mock_http.add(responses.POST, SOURCIFY_VERIFY, body="Internal error", status=500)

        result = orchestrator.run("testnet", game_scores, verify=True)

        assert result.address
        assert len(fake_node.sent) == 1
        assert {o.status for o in result.verifications} == {VerificationStatus.FAILED}


class TestFailedDeployment:
    """Fatal deployment-path failures."""

    def test_read_only_profile_cannot_deploy(self, orchestrator, game_scores, fake_node, mock_http):
        with pytest.raises(NoSigningCredentialError):
            orchestrator.run("readonly", game_scores)

        assert fake_node.sent == []

    def test_chain_id_mismatch(self, orchestrator, game_scores, fake_node, mock_http):
        fake_node.chain_id = 1

        with pytest.raises(ChainIdMismatchError):
            orchestrator.run("testnet", game_scores)

        assert fake_node.sent == []

    def test_unknown_profile(self, orchestrator, game_scores, mock_http):
        with pytest.raises(ProfileNotFoundError):
            orchestrator.run("mainnet", game_scores)

    def test_invalid_profile(self, orchestrator, game_scores, mock_http):
        with pytest.raises(ProfileInvalidError):
            orchestrator.run("broken", game_scores)


class TestCustomChainRouting:
    """Chains declared by the user with non-default verifier URLs."""

    def test_custom_explorer_binding_is_routed_unmodified(self, sample_config_json, artifacts_dir, secrets):
        sample_config_json["verifiers"]["424242"] = {
            "kind": "explorer-api",
            "network": "private-chain",
            "endpoints": {
                "submit": "https://scan.private.example.net:10031/api",
                "browse": "https://scan.private.example.net",
            },
        }
        config = parse_config(sample_config_json)
        declared = next(b for b in config.verifiers if b.chain_id == 424242)
        orchestrator = build_orchestrator(config, artifacts_dir=artifacts_dir, secrets=secrets)

        assert orchestrator.router.route(424242) is declared
        assert orchestrator.router.route(424242) == VerifierBinding(
            chain_id=424242,
            kind=VerifierKind.EXPLORER_API,
            endpoints={
                "submit": "https://scan.private.example.net:10031/api",
                "browse": "https://scan.private.example.net",
            },
            network="private-chain",
        )

    def test_unbound_chain_verification_is_skipped(
        self, orchestrator, game_scores, private_node, verifiers_up
    ):
        result = orchestrator.run("private-chain", game_scores, verify=True)

        assert result.chain_id == 424242
        assert [o.status for o in result.verifications] == [VerificationStatus.SKIPPED]
        assert verification_calls(verifiers_up) == []


class TestRunMany:
    """Deploying to several networks in one run."""

    def test_deploys_in_order(self, orchestrator, game_scores, fake_node, private_node, verifiers_up):
        results = orchestrator.run_many(["testnet", "private-chain"], game_scores)

        assert [r.profile_name for r in results] == ["testnet", "private-chain"]
        assert len(fake_node.sent) == 1
        assert len(private_node.sent) == 1

        # Second deployment starts only after the first is confirmed
        urls = [c.request.url for c in verifiers_up.calls]
        testnet_calls = [i for i, u in enumerate(urls) if "testnet-rpc" in u]
        private_calls = [i for i, u in enumerate(urls) if "private-rpc" in u]
        assert max(testnet_calls) < min(private_calls)

        assert [o.status for o in results[1].verifications] == [VerificationStatus.SKIPPED]
        assert len(results[0].verifications) == 2

    def test_unknown_profile_deploys_nothing(self, orchestrator, game_scores, fake_node, mock_http):
        with pytest.raises(ProfileNotFoundError):
            orchestrator.run_many(["testnet", "mainnet"], game_scores)

        assert fake_node.calls == []

    def test_failure_aborts_remaining_deployments(
        self, orchestrator, game_scores, fake_node, private_node, mock_http
    ):
        private_node.chain_id = 1

        with pytest.raises(ChainIdMismatchError):
            orchestrator.run_many(["private-chain", "testnet"], game_scores)

        assert fake_node.calls == []

    def test_sequential_nonces_on_same_network(
        self, orchestrator, game_scores, fake_node, deployer_account, mock_http
    ):
        results = orchestrator.run_many(["testnet", "testnet"], game_scores, verify=False)

        assert results[0].address != results[1].address
        assert fake_node.nonces[deployer_account.address] == 2


class TestDefaultConfig:
    """The built-in network configuration."""

    def test_builds_with_defaults(self, artifacts_dir, secrets):
        orchestrator = build_orchestrator(artifacts_dir=artifacts_dir, secrets=secrets)

        assert orchestrator.profiles.names() == ["skale-nebula-testnet"]
        binding = orchestrator.router.route(37084624)
        assert binding.endpoints["submit"] == "https://internal.explorer.testnet.skalenodes.com:10031/api"

    def test_executor_options_override_config(self, sample_config_path, artifacts_dir, secrets):
        orchestrator = build_orchestrator(
            load_config(sample_config_path),
            artifacts_dir=artifacts_dir,
            secrets=secrets,
            confirmations=4,
            timeout=None,
        )

        assert orchestrator.executor.confirmations == 4
        assert orchestrator.executor.timeout == 10


class TestVerificationIsolation:
    """Verification errors never discard a confirmed deployment."""

    def test_bad_api_key_ref_keeps_deployment(
        self, orchestrator, game_scores, fake_node, verifiers_up, secrets
    ):
        binding = VerifierBinding(
            chain_id=37084624,
            kind=VerifierKind.EXPLORER_API,
            endpoints={"submit": EXPLORER_API},
            api_key_ref=12345,  # type: ignore[arg-type]
        )
        orchestrator.router = VerifierRouter([binding], secrets=secrets)

        result = orchestrator.run("testnet", game_scores, verify=True)

        assert result.address
        assert len(fake_node.sent) == 1
        [outcome] = result.verifications
        assert outcome.status == VerificationStatus.FAILED
        assert "AttributeError" in outcome.detail

    def test_bad_api_key_rejected_at_config_time(self, sample_config_json):
        sample_config_json["verifiers"]["37084624"]["api_key"] = 12345

        with pytest.raises(ConfigurationError):
            parse_config(sample_config_json)


class TestPartialRunMany:
    """Multi-network runs that fail part way."""

    def test_completed_results_attached_to_error(
        self, orchestrator, game_scores, fake_node, private_node, mock_http
    ):
        fake_node.chain_id = 1

        with pytest.raises(ChainIdMismatchError) as exc_info:
            orchestrator.run_many(["private-chain", "testnet"], game_scores, verify=False)

        [completed] = exc_info.value.completed_results
        assert completed.profile_name == "private-chain"
        assert completed.chain_id == 424242
        assert len(private_node.sent) == 1
        assert fake_node.sent == []

    def test_first_failure_has_no_completed_results(
        self, orchestrator, game_scores, fake_node, private_node, mock_http
    ):
        private_node.chain_id = 1

        with pytest.raises(ChainIdMismatchError) as exc_info:
            orchestrator.run_many(["private-chain", "testnet"], game_scores)

        assert exc_info.value.completed_results == ()
