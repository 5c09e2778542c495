"""Shared pytest fixtures for contract-deployer tests."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import responses
from eth_account import Account
from eth_utils import keccak, to_checksum_address, to_hex

from contract_deployer.artifacts import HardhatArtifactStore
from contract_deployer.credentials import EnvSecretProvider
from contract_deployer.types import NetworkProfile

TESTNET_CHAIN_ID = 37084624
TESTNET_RPC_URL = "http://testnet-rpc.example.com"
PRIVATE_CHAIN_ID = 424242
PRIVATE_RPC_URL = "http://private-rpc.example.com"


class FakeNode:
    """In-memory JSON-RPC node answering the calls a deployment makes."""

    def __init__(self, chain_id: int = TESTNET_CHAIN_ID, block_number: int = 100):
        self.chain_id = chain_id
        self.block_number = block_number
        self.mine = True  # False leaves sent transactions pending forever
        self.receipt_status = "0x1"
        self.reject_with: Optional[str] = None  # RPC error message for sent transactions
        self.nonces: Dict[str, int] = {}
        self.receipts: Dict[str, Dict[str, Any]] = {}
        self.sent: List[str] = []
        self.calls: List[str] = []

    def handle(self, request):
        body = json.loads(request.body)
        self.calls.append(body["method"])
        if body["method"] == "eth_sendRawTransaction" and self.reject_with:
            error = {"code": -32000, "message": self.reject_with}
            return (200, {}, json.dumps({"jsonrpc": "2.0", "id": body["id"], "error": error}))
        handler = getattr(self, "_" + body["method"])
        result = handler(*body["params"])
        return (200, {}, json.dumps({"jsonrpc": "2.0", "id": body["id"], "result": result}))

    def _eth_chainId(self) -> str:
        return hex(self.chain_id)

    def _eth_blockNumber(self) -> str:
        return hex(self.block_number)

    def _eth_gasPrice(self) -> str:
        return hex(100_000)

    def _eth_estimateGas(self, transaction: Dict[str, Any]) -> str:
        return hex(250_000)

    def _eth_getTransactionCount(self, address: str, block: str) -> str:
        return hex(self.nonces.get(address, 0))

    def _eth_sendRawTransaction(self, raw_transaction: str) -> str:
        tx_hash = to_hex(keccak(hexstr=raw_transaction))
        sender = Account.recover_transaction(raw_transaction)
        nonce = self.nonces.get(sender, 0)
        self.nonces[sender] = nonce + 1
        self.sent.append(raw_transaction)

        if self.mine:
            self.block_number += 1
            address = to_checksum_address(keccak(text=f"{sender}:{nonce}")[-20:])
            self.receipts[tx_hash] = {
                "transactionHash": tx_hash,
                "blockNumber": hex(self.block_number),
                "contractAddress": address.lower(),
                "status": self.receipt_status,
            }
        return tx_hash

    def _eth_getTransactionReceipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        return self.receipts.get(tx_hash)


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def artifacts_dir(fixtures_dir: Path) -> Path:
    """Return the path to the sample hardhat artifacts directory."""
    return fixtures_dir / "artifacts"


@pytest.fixture
def artifact_store(artifacts_dir: Path) -> HardhatArtifactStore:
    return HardhatArtifactStore(artifacts_dir)


@pytest.fixture
def sample_config_json(fixtures_dir: Path) -> Dict[str, Any]:
    """Load and return the sample deployer.json fixture."""
    with open(fixtures_dir / "sample_deployer.json") as f:
        return json.load(f)


@pytest.fixture
def sample_config_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "sample_deployer.json"


@pytest.fixture
def deployer_account():
    """Create a throwaway signing account."""
    return Account.create()


@pytest.fixture
def secrets(deployer_account) -> EnvSecretProvider:
    """Secret provider with PRIVATE_KEY and EXPLORER_API_KEY set."""
    return EnvSecretProvider(
        {
            "PRIVATE_KEY": to_hex(deployer_account.key),
            "EXPLORER_API_KEY": "test-api-key",
        }
    )


@pytest.fixture
def testnet_profile() -> NetworkProfile:
    return NetworkProfile(
        name="testnet",
        chain_id=TESTNET_CHAIN_ID,
        rpc_url=TESTNET_RPC_URL,
        credential="env:PRIVATE_KEY",
    )


@pytest.fixture
def mock_http():
    """Activate responses for the duration of a test."""
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def fake_node(mock_http) -> FakeNode:
    """Fake JSON-RPC node serving TESTNET_RPC_URL."""
    node = FakeNode()
    mock_http.add_callback(
        responses.POST,
        TESTNET_RPC_URL,
        callback=node.handle,
        content_type="application/json",
    )
    return node


@pytest.fixture
def private_node(mock_http) -> FakeNode:
    """Fake JSON-RPC node of a private chain with no public verifier."""
    node = FakeNode(chain_id=PRIVATE_CHAIN_ID, block_number=5000)
    mock_http.add_callback(
        responses.POST,
        PRIVATE_RPC_URL,
        callback=node.handle,
        content_type="application/json",
    )
    return node
