from __future__ import annotations

import logging
from typing import List

import httpx
from solders.pubkey import Pubkey

from .errors import RpcError
from .metadata import find_metadata_address, parse_metadata_account
from .rpc import RpcClient

log = logging.getLogger(__name__)


def check_verified_creators(rpc: RpcClient, mint: Pubkey) -> List[str]:
    """
    Reads the mint's metadata account and returns the verified creator
    addresses. Explorers and DEX screeners only trust tokens with at least
    one verified creator, so an empty result is worth a warning, but nothing
    here is fatal.
    """
    metadata_address = find_metadata_address(mint)
    try:
        raw = rpc.get_account_data(str(metadata_address))
    except (RpcError, httpx.HTTPError) as e:
        log.warning("Failed to fetch metadata %s: %s", metadata_address, e)
        return []

    if raw is None:
        log.warning("Metadata account %s not found", metadata_address)
        return []

    try:
        metadata = parse_metadata_account(raw)
    except ValueError as e:
        log.warning("Failed to decode metadata %s: %s", metadata_address, e)
        return []

    verified = [str(c.address) for c in metadata.verified_creators]
    if verified:
        log.info("Verified creators found: %s", ", ".join(verified))
    else:
        log.warning("No verified creators found for mint %s", mint)
    return verified
