from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from solders.keypair import Keypair
from spl.token.instructions import AuthorityType

from .config import Settings
from .errors import RevocationError, SubmissionError
from .instructions import (
    build_revoke_authority_instruction,
    build_token_instructions,
    describe_instruction,
    find_token_account_address,
)
from .metadata import find_metadata_address
from .project_constants import EXPLORER_URL_TEMPLATE, MINT_LEN
from .rpc import RpcClient
from .submit import TransactionSubmitter
from .verify import check_verified_creators

log = logging.getLogger(__name__)

# Order matters: freeze first, then mint.
REVOCATIONS = (
    ("freeze", "revoke_freeze", AuthorityType.FREEZE_ACCOUNT),
    ("mint", "revoke_mint", AuthorityType.MINT_TOKENS),
)


def explorer_url(mint: str, network: str) -> str:
    return EXPLORER_URL_TEMPLATE.format(mint=mint, network=network)


@dataclass
class LaunchResult:
    mint: str
    token_account: str
    metadata: str
    signature: str
    explorer_url: str
    verified_creators: List[str] = field(default_factory=list)
    revocations: Dict[str, str] = field(default_factory=dict)


def plan_token(settings: Settings, mint: Keypair, rent_lamports: int) -> List[str]:
    return [
        describe_instruction(ix)
        for ix in build_token_instructions(settings, mint.pubkey(), rent_lamports)
    ]


def create_token(
    settings: Settings,
    rpc: RpcClient,
    mint_keypair: Optional[Keypair] = None,
    submitter: Optional[TransactionSubmitter] = None,
) -> LaunchResult:
    wallet = settings.wallet
    mint_keypair = mint_keypair or Keypair()
    mint = mint_keypair.pubkey()
    submitter = submitter or TransactionSubmitter(rpc, wallet)

    log.info("Using wallet        : %s", wallet.pubkey())
    log.info("Mint address        : %s", mint)

    rent = rpc.get_minimum_balance_for_rent_exemption(MINT_LEN)
    instructions = build_token_instructions(settings, mint, rent)
    log.info(
        "Bundling %d instructions: %s",
        len(instructions),
        ", ".join(describe_instruction(ix) for ix in instructions),
    )
    if settings.revoke_update:
        log.info("Update authority revocation added to transaction")

    signature = submitter.submit(instructions, [wallet, mint_keypair])

    verified = check_verified_creators(rpc, mint)

    result = LaunchResult(
        mint=str(mint),
        token_account=str(find_token_account_address(wallet.pubkey(), mint)),
        metadata=str(find_metadata_address(mint)),
        signature=signature,
        explorer_url=explorer_url(str(mint), settings.network),
        verified_creators=verified,
    )

    for label, flag, authority_type in REVOCATIONS:
        if not getattr(settings, flag):
            continue
        ix = build_revoke_authority_instruction(mint, wallet.pubkey(), authority_type)
        try:
            result.revocations[label] = submitter.submit([ix], [wallet])
        except SubmissionError as e:
            raise RevocationError(
                str(mint), label, e, explorer_url=result.explorer_url
            ) from e
        log.info("%s authority revoked", label.capitalize())

    return result
