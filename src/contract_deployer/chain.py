"""JSON-RPC chain client for contract-deployer library."""

import itertools
import logging
from typing import Any, Dict, List, Optional

import requests

from .exceptions import SubmissionFailedError

logger = logging.getLogger(__name__)


class JsonRpcClient:
    """Minimal Ethereum JSON-RPC client over HTTP."""

    def __init__(self, rpc_url: str, timeout: float = 30, session: Optional[requests.Session] = None):
        self.rpc_url = rpc_url
        self.timeout = timeout
        self._session = session or requests.Session()
        self._ids = itertools.count(1)

    def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            method: RPC method name (e.g., "eth_chainId")
            params: Positional RPC parameters

        Returns:
            The "result" member of the response

        Raises:
            SubmissionFailedError: On network error, HTTP error or RPC error
        """
        request_id = next(self._ids)
        try:
            response = self._session.post(
                self.rpc_url,
                json={
                    "jsonrpc": "2.0",
                    "method": method,
                    "params": params or [],
                    "id": request_id,
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise SubmissionFailedError(f"Network error during {method} call: {e}") from e

        # Check for HTTP errors
        if response.status_code != 200:
            raise SubmissionFailedError(
                f"{method} request failed with status {response.status_code}"
            )

        try:
            result = response.json()
        except ValueError as e:
            raise SubmissionFailedError(f"{method} returned a non-JSON response") from e

        # Check for RPC errors
        if "error" in result:
            error = result["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise SubmissionFailedError(f"RPC error from {method}: {message}")

        return result.get("result")

    def chain_id(self) -> int:
        return int(self.call("eth_chainId"), 16)

    def block_number(self) -> int:
        return int(self.call("eth_blockNumber"), 16)

    def gas_price(self) -> int:
        return int(self.call("eth_gasPrice"), 16)

    def transaction_count(self, address: str, block: str = "pending") -> int:
        return int(self.call("eth_getTransactionCount", [address, block]), 16)

    def estimate_gas(self, transaction: Dict[str, Any]) -> int:
        return int(self.call("eth_estimateGas", [transaction]), 16)

    def send_raw_transaction(self, raw_transaction: str) -> str:
        """Submit a signed transaction and return its hash."""
        return self.call("eth_sendRawTransaction", [raw_transaction])

    def transaction_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        """Get a transaction receipt, or None while the transaction is pending."""
        return self.call("eth_getTransactionReceipt", [tx_hash])
