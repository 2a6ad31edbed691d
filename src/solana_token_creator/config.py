from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

import base58
from dotenv import load_dotenv
from solders.keypair import Keypair

from .errors import ConfigError
from .project_constants import (
    ALLOWED_NETWORKS,
    MAX_NAME_LENGTH,
    MAX_SYMBOL_LENGTH,
    MAX_URI_LENGTH,
    RPC_URL_TEMPLATE,
    U64_MAX,
)

TRUTHY = {"true", "yes", "y", "on", "1"}

DEFAULT_NAME = "My token"
DEFAULT_SYMBOL = "MT"
DEFAULT_DECIMALS = 6
DEFAULT_MINT_AMOUNT = 1_000_000_000


def parse_bool(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() in TRUTHY


def parse_amount(value: str) -> int:
    """Parse an integer written with digit separators, e.g. ``1_000_000``."""
    cleaned = value.replace("_", "").replace(",", "").strip()
    try:
        return int(cleaned)
    except ValueError:
        raise ConfigError(f"Invalid TOKEN_MINT_AMOUNT: {value!r}") from None


def validate_network(network: str) -> str:
    if network not in ALLOWED_NETWORKS:
        raise ConfigError(
            f"Network invalid: {network!r} (expected one of {', '.join(ALLOWED_NETWORKS)})"
        )
    return network


def load_keypair(secret: str) -> Keypair:
    if not secret:
        raise ConfigError("Missing WALLET_PRIVATE_KEY. Put it in .env or export it.")
    try:
        raw = base58.b58decode(secret.strip())
    except ValueError as e:
        raise ConfigError(f"WALLET_PRIVATE_KEY is not valid base58: {e}") from None
    if len(raw) != 64:
        raise ConfigError(
            f"WALLET_PRIVATE_KEY must decode to 64 bytes, got {len(raw)}"
        )
    try:
        return Keypair.from_bytes(raw)
    except ValueError as e:
        raise ConfigError(f"WALLET_PRIVATE_KEY is not a valid keypair: {e}") from None


@dataclass(frozen=True)
class Settings:
    network: str
    wallet: Keypair
    rpc_url: str
    name: str = DEFAULT_NAME
    symbol: str = DEFAULT_SYMBOL
    metadata_uri: str = ""
    decimals: int = DEFAULT_DECIMALS
    mint_amount: int = DEFAULT_MINT_AMOUNT
    fee_percentage: float = 0.0
    revoke_freeze: bool = False
    revoke_mint: bool = False
    revoke_update: bool = False

    def __post_init__(self) -> None:
        validate_network(self.network)
        if not 0 <= self.decimals <= 255:
            raise ConfigError(f"TOKEN_DECIMALS out of range: {self.decimals}")
        if self.mint_amount <= 0:
            raise ConfigError(f"TOKEN_MINT_AMOUNT must be positive: {self.mint_amount}")
        if self.raw_mint_amount > U64_MAX:
            raise ConfigError(
                f"Minted amount {self.mint_amount} with {self.decimals} decimals "
                "does not fit in a u64."
            )
        if not 0 <= self.fee_percentage <= 100:
            raise ConfigError(
                f"TOKEN_FEE_PERCENTAGE must be between 0 and 100: {self.fee_percentage}"
            )
        bps = self.fee_percentage * 100
        if abs(bps - round(bps)) > 1e-9:
            raise ConfigError(
                f"TOKEN_FEE_PERCENTAGE {self.fee_percentage} needs fractional basis points; "
                "use at most two decimal places"
            )
        for label, value, limit in (
            ("TOKEN_NAME", self.name, MAX_NAME_LENGTH),
            ("TOKEN_SYMBOL", self.symbol, MAX_SYMBOL_LENGTH),
            ("TOKEN_METADATA_URI", self.metadata_uri, MAX_URI_LENGTH),
        ):
            if len(value.encode("utf-8")) > limit:
                raise ConfigError(f"{label} longer than {limit} bytes: {value!r}")

    @property
    def raw_mint_amount(self) -> int:
        """Supply in the smallest unit."""
        return self.mint_amount * 10**self.decimals

    @property
    def seller_fee_basis_points(self) -> int:
        return round(self.fee_percentage * 100)

    @staticmethod
    def from_env(
        rpc_url_override: str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> "Settings":
        if environ is None:
            load_dotenv()
            environ = os.environ

        # Network is checked before the key so a typo fails without touching secrets.
        network = validate_network(environ.get("NETWORK", "").strip())
        wallet = load_keypair(environ.get("WALLET_PRIVATE_KEY", ""))

        rpc_url = rpc_url_override or environ.get("RPC_URL", "").strip()
        if not rpc_url:
            rpc_url = RPC_URL_TEMPLATE.format(network=network)

        decimals_raw = environ.get("TOKEN_DECIMALS", "").strip()
        amount_raw = environ.get("TOKEN_MINT_AMOUNT", "").strip()
        fee_raw = environ.get("TOKEN_FEE_PERCENTAGE", "").strip()

        try:
            decimals = int(decimals_raw) if decimals_raw else DEFAULT_DECIMALS
        except ValueError:
            raise ConfigError(f"Invalid TOKEN_DECIMALS: {decimals_raw!r}") from None
        try:
            fee_percentage = float(fee_raw) if fee_raw else 0.0
        except ValueError:
            raise ConfigError(f"Invalid TOKEN_FEE_PERCENTAGE: {fee_raw!r}") from None

        return Settings(
            network=network,
            wallet=wallet,
            rpc_url=rpc_url,
            name=environ.get("TOKEN_NAME") or DEFAULT_NAME,
            symbol=environ.get("TOKEN_SYMBOL") or DEFAULT_SYMBOL,
            metadata_uri=environ.get("TOKEN_METADATA_URI") or "",
            decimals=decimals,
            mint_amount=parse_amount(amount_raw) if amount_raw else DEFAULT_MINT_AMOUNT,
            fee_percentage=fee_percentage,
            revoke_freeze=parse_bool(environ.get("REVOKE_FREEZE")),
            revoke_mint=parse_bool(environ.get("REVOKE_MINT")),
            revoke_update=parse_bool(environ.get("REVOKE_UPDATE")),
        )
