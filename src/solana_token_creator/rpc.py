from __future__ import annotations

import base64
from typing import Any, Dict, List, Optional

import httpx

from .errors import RpcError
from .project_constants import DEFAULT_COMMITMENT


class RpcClient:
    def __init__(
        self,
        rpc_url: str,
        timeout_s: float = 60.0,
        commitment: str = DEFAULT_COMMITMENT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.commitment = commitment
        self.client = httpx.Client(timeout=timeout_s, transport=transport)
        self._next_id = 1

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "RpcClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def _post(self, method: str, params: List[Any]) -> Dict[str, Any]:
        payload = {
            "jsonrpc": "2.0",
            "id": self._next_id,
            "method": method,
            "params": params,
        }
        self._next_id += 1
        resp = self.client.post(self.rpc_url, json=payload)
        resp.raise_for_status()
        data = resp.json()
        if "error" in data:
            error = data["error"]
            raise RpcError(
                int(error.get("code", 0)),
                str(error.get("message", "")),
                error.get("data"),
            )
        return data

    def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        data = self._post(
            "getMinimumBalanceForRentExemption",
            [size, {"commitment": self.commitment}],
        )
        return int(data["result"])

    def get_latest_blockhash(self) -> str:
        data = self._post("getLatestBlockhash", [{"commitment": self.commitment}])
        return data["result"]["value"]["blockhash"]

    def send_transaction(self, raw_tx: bytes) -> str:
        """Submits a signed wire transaction; preflight runs at our commitment."""
        data = self._post(
            "sendTransaction",
            [
                base64.b64encode(raw_tx).decode("ascii"),
                {"encoding": "base64", "preflightCommitment": self.commitment},
            ],
        )
        return data["result"]

    def get_signature_status(self, signature: str) -> Optional[Dict[str, Any]]:
        """Returns the status object, or None while the cluster hasn't seen it."""
        data = self._post(
            "getSignatureStatuses",
            [[signature], {"searchTransactionHistory": False}],
        )
        statuses = data["result"]["value"]
        return statuses[0] if statuses else None

    def get_account_data(self, address: str) -> Optional[bytes]:
        """Returns raw account data, or None if the account doesn't exist."""
        data = self._post(
            "getAccountInfo",
            [address, {"encoding": "base64", "commitment": self.commitment}],
        )
        value = data["result"]["value"]
        if value is None:
            return None
        # value['data'] is [base64_str, "base64"]
        return base64.b64decode(value["data"][0])
