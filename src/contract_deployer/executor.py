"""Deployment executor for contract-deployer library."""

import logging
import time
from typing import Any, Callable, Dict, Optional

from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address, to_hex

from .abi import encode_constructor_args, validate_constructor_args
from .artifacts import HardhatArtifactStore
from .chain import JsonRpcClient
from .constants import DEPLOYMENT_CONFIG, DEPLOYER_VARIABLE
from .credentials import EnvSecretProvider
from .exceptions import (
    ChainIdMismatchError,
    ConfigurationError,
    ConfirmationTimeoutError,
    SubmissionFailedError,
)
from .types import DeploymentResult, DeploymentSpec, NetworkProfile

logger = logging.getLogger(__name__)


class DeploymentExecutor:
    """Signs, submits and confirms contract deployment transactions."""

    def __init__(
        self,
        artifacts: HardhatArtifactStore,
        secrets: Optional[EnvSecretProvider] = None,
        client_factory: Callable[[str], JsonRpcClient] = JsonRpcClient,
        confirmations: int = DEPLOYMENT_CONFIG["confirmations"],
        timeout: float = DEPLOYMENT_CONFIG["timeout"],
        poll_interval: float = DEPLOYMENT_CONFIG["poll_interval"],
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the executor.

        Args:
            artifacts: Store used to look up compiled contracts
            secrets: Resolves profile credential references (defaults to environment)
            client_factory: Builds a JSON-RPC client from an RPC URL
            confirmations: Minimum blocks including the transaction (at least 1)
            timeout: Seconds to wait for confirmation
            poll_interval: Seconds between receipt polls
        """
        if confirmations < 1:
            raise ConfigurationError("confirmations must be at least 1")

        self.artifacts = artifacts
        self._secrets = secrets or EnvSecretProvider()
        self._client_factory = client_factory
        self.confirmations = confirmations
        self.timeout = timeout
        self.poll_interval = poll_interval
        self._sleep = sleep
        self._clock = clock

    def deploy(self, profile: NetworkProfile, spec: DeploymentSpec) -> DeploymentResult:
        """
        Deploy a contract to the profile's network.

        Every precondition is checked before any network traffic, and the
        chain id is checked before a transaction is built.

        Args:
            profile: Target network
            spec: Contract name and constructor arguments

        Returns:
            DeploymentResult for the confirmed deployment

        Raises:
            NoSigningCredentialError: If the profile cannot sign
            ArtifactNotFoundError: If the contract was not compiled
            ArgumentMismatchError: If constructor arguments do not match the ABI
            ChainIdMismatchError: If the endpoint serves a different chain
            SubmissionFailedError: If the endpoint fails or rejects the transaction
            ConfirmationTimeoutError: If the transaction is not confirmed in time
        """
        account = self._secrets.account(profile.credential)
        artifact = self.artifacts.load(spec.contract_name)

        args = [account.address if arg == DEPLOYER_VARIABLE else arg for arg in spec.constructor_args]
        validate_constructor_args(artifact.abi, args)
        encoded_args = encode_constructor_args(artifact.abi, args)

        client = self._client_factory(profile.rpc_url)
        live_chain_id = client.chain_id()
        if live_chain_id != profile.chain_id:
            raise ChainIdMismatchError(
                f"RPC endpoint for '{profile.name}' reports chain id {live_chain_id}, "
                f"expected {profile.chain_id}",
                expected=profile.chain_id,
                actual=live_chain_id,
            )

        logger.info("Deploying %s with the account: %s", artifact.contract_name, account.address)

        transaction = self._build_transaction(
            client, account, profile.chain_id, artifact.bytecode + encoded_args
        )
        signed = account.sign_transaction(transaction)
        tx_hash = to_hex(signed.hash)

        returned_hash = client.send_raw_transaction(to_hex(signed.raw_transaction))
        if returned_hash and returned_hash.lower() != tx_hash.lower():
            logger.warning("Node returned tx hash %s, expected %s", returned_hash, tx_hash)
        logger.info("Transaction sent: %s", tx_hash)

        receipt = self._wait_for_confirmation(client, tx_hash)

        if int(receipt.get("status", "0x1"), 16) == 0:
            raise SubmissionFailedError(f"Deployment transaction {tx_hash} reverted")

        contract_address = receipt.get("contractAddress")
        if not contract_address:
            raise SubmissionFailedError(f"Receipt for {tx_hash} has no contract address")

        address = to_checksum_address(contract_address)
        logger.info("%s deployed to: %s", artifact.contract_name, address)

        return DeploymentResult(
            address=address,
            tx_hash=tx_hash,
            profile_name=profile.name,
            chain_id=profile.chain_id,
            contract_name=artifact.contract_name,
            block_number=int(receipt["blockNumber"], 16),
            constructor_args=encoded_args,
        )

    def _build_transaction(
        self, client: JsonRpcClient, account: LocalAccount, chain_id: int, data: str
    ) -> Dict[str, Any]:
        # Contract creation: no "to" field
        gas = client.estimate_gas({"from": account.address, "data": data})
        return {
            "chainId": chain_id,
            "nonce": client.transaction_count(account.address, "pending"),
            "gasPrice": client.gas_price(),
            "gas": gas,
            "value": 0,
            "data": data,
        }

    def _wait_for_confirmation(self, client: JsonRpcClient, tx_hash: str) -> Dict[str, Any]:
        deadline = self._clock() + self.timeout

        while True:
            try:
                receipt = client.transaction_receipt(tx_hash)
                if receipt is not None and receipt.get("blockNumber") is not None:
                    included_at = int(receipt["blockNumber"], 16)
                    if self.confirmations == 1:
                        return receipt
                    depth = client.block_number() - included_at + 1
                    if depth >= self.confirmations:
                        return receipt
                    logger.debug("%s has %d/%d confirmations", tx_hash, depth, self.confirmations)
            except SubmissionFailedError as e:
                # The transaction is already sent; keep polling until the deadline
                logger.warning("Polling receipt for %s failed: %s", tx_hash, e)

            if self._clock() >= deadline:
                raise ConfirmationTimeoutError(
                    f"Transaction {tx_hash} not confirmed within {self.timeout}s. "
                    "It may still be mined; check it before resubmitting.",
                    tx_hash=tx_hash,
                )
            self._sleep(self.poll_interval)
