from __future__ import annotations

import base64
import json
import struct
from typing import Any, Dict, List, Optional, Tuple

import base58
import httpx
import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from solana_token_creator.config import Settings
from solana_token_creator.rpc import RpcClient

BLOCKHASH = "11111111111111111111111111111111"
MINT_RENT = 1461600


@pytest.fixture
def wallet() -> Keypair:
    return Keypair.from_seed(bytes([7] * 32))


@pytest.fixture
def mint_keypair() -> Keypair:
    return Keypair.from_seed(bytes([9] * 32))


@pytest.fixture
def wallet_secret(wallet: Keypair) -> str:
    return base58.b58encode(bytes(wallet)).decode("ascii")


@pytest.fixture
def make_settings(wallet: Keypair):
    def _make(**overrides: Any) -> Settings:
        values: Dict[str, Any] = {
            "network": "devnet",
            "wallet": wallet,
            "rpc_url": "http://rpc.test",
        }
        values.update(overrides)
        return Settings(**values)

    return _make


def _borsh_string(value: str, pad_to: int = 0) -> bytes:
    raw = value.encode("utf-8").ljust(pad_to, b"\x00")
    return struct.pack("<I", len(raw)) + raw


def encode_metadata_account(
    update_authority: Pubkey,
    mint: Pubkey,
    creators: List[tuple],
    name: str = "My token",
    symbol: str = "MT",
    uri: str = "",
    fee: int = 0,
) -> bytes:
    """Metadata account bytes as the program stores them (padded strings)."""
    out = bytes([4]) + bytes(update_authority) + bytes(mint)
    out += _borsh_string(name, 32) + _borsh_string(symbol, 10) + _borsh_string(uri, 200)
    out += struct.pack("<H", fee)
    out += b"\x01" + struct.pack("<I", len(creators))
    for address, verified, share in creators:
        out += bytes(address) + struct.pack("<BB", int(verified), share)
    # primary_sale_happened, is_mutable, and trailing fields
    out += b"\x00\x00" + b"\x00" * 16
    return out


class FakeCluster:
    """Answers the JSON-RPC methods the tool uses; records every call."""

    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.account_data: Optional[bytes] = None
        self.send_errors: Dict[int, Dict[str, Any]] = {}
        self.statuses: List[Optional[Dict[str, Any]]] = []
        self.sent = 0
        # (method, nth call) -> JSON-RPC error object
        self.method_errors: Dict[Tuple[str, int], Dict[str, Any]] = {}
        self._counts: Dict[str, int] = {}

    def methods(self) -> List[str]:
        return [c["method"] for c in self.calls]

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.calls.append(body)
        method = body["method"]
        self._counts[method] = self._counts.get(method, 0) + 1
        error = self.method_errors.get((method, self._counts[method]))
        if error is not None:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "error": error})

        if method == "getMinimumBalanceForRentExemption":
            return self._result(body, MINT_RENT)
        if method == "getLatestBlockhash":
            return self._result(
                body,
                {"context": {"slot": 1}, "value": {"blockhash": BLOCKHASH, "lastValidBlockHeight": 100}},
            )
        if method == "sendTransaction":
            self.sent += 1
            if self.sent in self.send_errors:
                return httpx.Response(
                    200, json={"jsonrpc": "2.0", "id": body["id"], "error": self.send_errors[self.sent]}
                )
            return self._result(body, f"sig{self.sent}")
        if method == "getSignatureStatuses":
            status = (
                self.statuses.pop(0)
                if self.statuses
                else {"slot": 5, "confirmations": 1, "err": None, "confirmationStatus": "confirmed"}
            )
            return self._result(body, {"context": {"slot": 5}, "value": [status]})
        if method == "getAccountInfo":
            if self.account_data is None:
                return self._result(body, {"context": {"slot": 5}, "value": None})
            value = {
                "data": [base64.b64encode(self.account_data).decode("ascii"), "base64"],
                "executable": False,
                "lamports": 5616720,
                "owner": "metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s",
                "rentEpoch": 0,
            }
            return self._result(body, {"context": {"slot": 5}, "value": value})

        return httpx.Response(
            200,
            json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32601, "message": "Method not found"}},
        )

    @staticmethod
    def _result(body: Dict[str, Any], result: Any) -> httpx.Response:
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})


@pytest.fixture
def cluster() -> FakeCluster:
    return FakeCluster()


@pytest.fixture
def rpc(cluster: FakeCluster):
    client = RpcClient("http://rpc.test", transport=httpx.MockTransport(cluster.handler))
    yield client
    client.close()
