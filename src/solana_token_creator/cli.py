from __future__ import annotations

import argparse
import logging

import httpx
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .config import Settings
from .errors import ConfigError, RevocationError, RpcError, SubmissionError
from .launch import create_token, explorer_url, plan_token
from .project_constants import MINT_LEN
from .rpc import RpcClient
from .verify import check_verified_creators


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def cmd_create(args: argparse.Namespace) -> int:
    settings = Settings.from_env(rpc_url_override=args.rpc_url)
    print(f"🔑 Using Wallet PublicKey: {settings.wallet.pubkey()}")

    rpc = RpcClient(settings.rpc_url, timeout_s=args.timeout)
    try:
        result = create_token(settings, rpc)
    finally:
        rpc.close()

    print("========================================")
    print("✅ Token creation complete, visible in your wallet shortly")
    print("========================================")
    print(f"Mint          : {result.mint}")
    print(f"Token account : {result.token_account}")
    print(f"Metadata      : {result.metadata}")
    print(f"Signature     : {result.signature}")
    if settings.revoke_update:
        print("🔒 Update authority revoked")
    if "freeze" in result.revocations:
        print("❄️  Freeze authority revoked")
    if "mint" in result.revocations:
        print("🛑 Mint authority revoked")
    print("----------------------------------------")
    print(f"🔗 View token at: {result.explorer_url}")
    print(
        "⚠️  Revoking authorities takes some time, refresh the solana.fm page "
        "until the selected authorities are removed"
    )
    return 0


def cmd_plan(args: argparse.Namespace) -> int:
    settings = Settings.from_env(rpc_url_override=args.rpc_url)

    rpc = RpcClient(settings.rpc_url, timeout_s=args.timeout)
    try:
        rent = rpc.get_minimum_balance_for_rent_exemption(MINT_LEN)
    finally:
        rpc.close()

    steps = plan_token(settings, Keypair(), rent)

    print("--- TOKEN PLAN (not submitted) ---")
    print(f"Network       : {settings.network}")
    print(f"Name / Symbol : {settings.name} / {settings.symbol}")
    print(f"Metadata URI  : {settings.metadata_uri or '(none)'}")
    print(f"Decimals      : {settings.decimals}")
    print(f"Raw supply    : {settings.raw_mint_amount}")
    print(f"Seller fee    : {settings.seller_fee_basis_points} bps")
    print(f"Mint rent     : {rent} lamports")
    for i, step in enumerate(steps, start=1):
        print(f"  {i}. {step}")
    if settings.revoke_freeze:
        print("  then: revoke freeze authority (separate transaction)")
    if settings.revoke_mint:
        print("  then: revoke mint authority (separate transaction)")
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    settings = Settings.from_env(rpc_url_override=args.rpc_url)
    try:
        mint = Pubkey.from_string(args.mint)
    except ValueError:
        raise ConfigError(f"Invalid mint address: {args.mint!r}") from None

    rpc = RpcClient(settings.rpc_url, timeout_s=args.timeout)
    try:
        verified = check_verified_creators(rpc, mint)
    finally:
        rpc.close()

    if verified:
        print("✅ Verified Creators Found:")
        for address in verified:
            print(f"  {address}")
    else:
        print("❌ No Verified Creators Found.")
    print(f"🔗 {explorer_url(str(mint), settings.network)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="solana-token-creator",
        description="Create an SPL token with Metaplex metadata from .env settings.",
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    p.add_argument("--rpc-url", default=None, help="Override RPC URL (else use env).")
    p.add_argument("--timeout", type=float, default=60.0, help="RPC timeout seconds.")

    sub = p.add_subparsers(dest="cmd", required=True)

    c = sub.add_parser("create", help="Mint the token, attach metadata, revoke authorities.")
    c.set_defaults(func=cmd_create)

    pl = sub.add_parser("plan", help="Show the instructions that would be sent.")
    pl.set_defaults(func=cmd_plan)

    i = sub.add_parser("inspect", help="Check creator verification of an existing mint.")
    i.add_argument("--mint", required=True, help="Mint address.")
    i.set_defaults(func=cmd_inspect)

    return p


def run(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    try:
        return args.func(args)
    except ConfigError as e:
        print(f"❌ {e}")
    except RevocationError as e:
        print(f"❌ {e}")
        print(f"⚠️  The token was already created: {e.mint}")
        if e.explorer_url:
            print(f"🔗 View token at: {e.explorer_url}")
    except SubmissionError as e:
        print(f"❌ Transaction failed: {e}")
    except (RpcError, httpx.HTTPError) as e:
        print(f"❌ RPC request failed: {e}")
    return 1


def main() -> None:
    raise SystemExit(run())
