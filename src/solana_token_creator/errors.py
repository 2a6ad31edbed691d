from __future__ import annotations

import enum
from typing import Any, List, Optional


class ConfigError(RuntimeError):
    """Invalid or missing configuration, raised before any network call."""


class RpcError(RuntimeError):
    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(f"RPC error {code}: {message}")
        self.code = code
        self.message = message
        self.data = data


class FailureReason(enum.Enum):
    INSUFFICIENT_FUNDS = "insufficient_funds"
    SIMULATION_FAILED = "simulation_failed"
    TRANSACTION_FAILED = "transaction_failed"
    CONFIRMATION_TIMEOUT = "confirmation_timeout"
    RPC_ERROR = "rpc_error"


class SubmissionError(RuntimeError):
    def __init__(
        self,
        reason: FailureReason,
        message: str,
        logs: Optional[List[str]] = None,
        err: Any = None,
        signature: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.logs = list(logs or [])
        self.err = err
        self.signature = signature


class RevocationError(RuntimeError):
    """
    A follow-up authority revocation failed after the token was minted.

    The mint exists on chain; ``mint`` lets the operator find it.
    """

    def __init__(
        self,
        mint: str,
        authority: str,
        cause: SubmissionError,
        explorer_url: Optional[str] = None,
    ) -> None:
        super().__init__(f"Revoking {authority} authority failed: {cause}")
        self.mint = mint
        self.authority = authority
        self.cause = cause
        self.explorer_url = explorer_url
