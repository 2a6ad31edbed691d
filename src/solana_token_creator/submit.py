from __future__ import annotations

import logging
import re
import time
from decimal import Decimal
from typing import Any, Callable, Iterable, List, Optional, Sequence

import httpx
from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.transaction import Transaction

from .errors import FailureReason, RpcError, SubmissionError
from .project_constants import LAMPORTS_PER_SOL
from .rpc import RpcClient

log = logging.getLogger(__name__)

# JSON-RPC "Transaction simulation failed" (preflight)
PREFLIGHT_FAILURE_CODE = -32002

INSUFFICIENT_FUNDS_ERRORS = {
    "InsufficientFundsForFee",
    "InsufficientFundsForRent",
    # Fee payer has never been funded
    "AccountNotFound",
}

INSUFFICIENT_LAMPORTS_MARKER = "insufficient lamports"

RESERVE_CAVEAT = (
    "⚠️  Your current SOL amount may differ here and in your wallet because "
    "part of your SOL is reserved for rent-reserve or other costs"
)

_COMMITMENT_RANK = {"processed": 0, "confirmed": 1, "finalized": 2}


def lamports_to_sol(lamports: int) -> str:
    return f"{Decimal(lamports) / LAMPORTS_PER_SOL:.9f}"


def describe_insufficient_funds(log_line: str) -> str:
    """
    'Transfer: insufficient lamports 5000, need 1461600'
    -> 'Transfer: insufficient 0.000005000 SOL, need 0.001461600 SOL'
    """
    line = re.sub(r"\blamports\s*", "", log_line)
    return re.sub(r"\b\d+\b", lambda m: f"{lamports_to_sol(int(m.group()))} SOL", line)


def _error_name(err: Any) -> Optional[str]:
    # TransactionError is either a bare string or a one-key object.
    if isinstance(err, str):
        return err
    if isinstance(err, dict) and len(err) == 1:
        return next(iter(err))
    return None


def classify_failure(err: Any, logs: Iterable[str]) -> Optional[str]:
    """
    Returns a friendly insufficient-funds message, or None if the failure is
    something else.
    """
    name = _error_name(err)
    if name in INSUFFICIENT_FUNDS_ERRORS:
        return f"Insufficient SOL to cover fees and rent ({name})"

    # System program transfer failures only surface in the logs.
    for line in logs:
        if INSUFFICIENT_LAMPORTS_MARKER in line:
            return describe_insufficient_funds(line.strip())
    return None


def _failure(
    default_reason: FailureReason,
    message: str,
    err: Any,
    logs: List[str],
    signature: Optional[str] = None,
) -> SubmissionError:
    friendly = classify_failure(err, logs)
    if friendly is not None:
        return SubmissionError(
            FailureReason.INSUFFICIENT_FUNDS,
            f"{friendly}\n{RESERVE_CAVEAT}",
            logs=logs,
            err=err,
            signature=signature,
        )
    return SubmissionError(default_reason, message, logs=logs, err=err, signature=signature)


class TransactionSubmitter:
    def __init__(
        self,
        rpc: RpcClient,
        fee_payer: Keypair,
        confirm_timeout_s: float = 90.0,
        poll_interval_s: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.rpc = rpc
        self.fee_payer = fee_payer
        self.confirm_timeout_s = confirm_timeout_s
        self.poll_interval_s = poll_interval_s
        self._sleep = sleep

    def build(self, instructions: Sequence[Instruction], signers: Sequence[Keypair]) -> Transaction:
        blockhash = Hash.from_string(self.rpc.get_latest_blockhash())
        message = Message.new_with_blockhash(
            list(instructions), self.fee_payer.pubkey(), blockhash
        )
        keypairs = [self.fee_payer] + [
            s for s in signers if s.pubkey() != self.fee_payer.pubkey()
        ]
        return Transaction(keypairs, message, blockhash)

    def submit(
        self,
        instructions: Sequence[Instruction],
        signers: Sequence[Keypair] = (),
    ) -> str:
        """Sign, send and wait for confirmation. Returns the signature."""
        try:
            tx = self.build(instructions, signers)
        except (RpcError, httpx.HTTPError) as e:
            raise SubmissionError(
                FailureReason.RPC_ERROR, f"Could not fetch a recent blockhash: {e}"
            ) from e

        try:
            signature = self.rpc.send_transaction(bytes(tx))
        except RpcError as e:
            data = e.data if isinstance(e.data, dict) else {}
            logs = list(data.get("logs") or [])
            reason = (
                FailureReason.SIMULATION_FAILED
                if e.code == PREFLIGHT_FAILURE_CODE
                else FailureReason.RPC_ERROR
            )
            log.debug("sendTransaction failed: %s logs=%s", e, logs)
            raise _failure(reason, e.message or str(e), data.get("err"), logs) from e
        except httpx.HTTPError as e:
            raise SubmissionError(FailureReason.RPC_ERROR, f"sendTransaction failed: {e}") from e

        log.info("Transaction sent: %s", signature)
        try:
            self.confirm(signature)
        except (RpcError, httpx.HTTPError) as e:
            raise SubmissionError(
                FailureReason.RPC_ERROR,
                f"Could not confirm transaction {signature}: {e}",
                signature=signature,
            ) from e
        log.info("Transaction confirmed with signature: %s", signature)
        return signature

    def confirm(self, signature: str) -> None:
        wanted = _COMMITMENT_RANK.get(self.rpc.commitment, 1)
        deadline = time.monotonic() + self.confirm_timeout_s

        while True:
            status = self.rpc.get_signature_status(signature)
            if status is not None:
                if status.get("err") is not None:
                    raise _failure(
                        FailureReason.TRANSACTION_FAILED,
                        f"Transaction {signature} failed: {status['err']}",
                        status["err"],
                        [],
                        signature=signature,
                    )
                reached = _COMMITMENT_RANK.get(status.get("confirmationStatus") or "", -1)
                if reached >= wanted:
                    return

            if time.monotonic() >= deadline:
                raise SubmissionError(
                    FailureReason.CONFIRMATION_TIMEOUT,
                    f"Transaction {signature} not confirmed within "
                    f"{self.confirm_timeout_s:.0f}s; check an explorer before retrying.",
                    signature=signature,
                )
            self._sleep(self.poll_interval_s)
