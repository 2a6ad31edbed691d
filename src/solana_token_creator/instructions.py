from __future__ import annotations

from typing import List

from solders.instruction import Instruction
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from solders.system_program import CreateAccountParams, create_account
from spl.token.instructions import (
    AuthorityType,
    InitializeMintParams,
    MintToParams,
    SetAuthorityParams,
    create_associated_token_account,
    get_associated_token_address,
    initialize_mint,
    mint_to,
    set_authority,
)

from .config import Settings
from .metadata import (
    CREATE_METADATA_ACCOUNT_V3,
    UPDATE_METADATA_ACCOUNT_V2,
    Creator,
    create_metadata_account_v3,
    find_metadata_address,
    update_metadata_account_v2,
)
from .project_constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    MINT_LEN,
    REVOKED_AUTHORITY,
    TOKEN_METADATA_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
)

# SPL token instruction tags (first data byte)
_TOKEN_TAGS = {0: "initialize-mint", 6: "set-authority", 7: "mint-to"}
_METADATA_TAGS = {
    CREATE_METADATA_ACCOUNT_V3: "create-metadata",
    UPDATE_METADATA_ACCOUNT_V2: "update-metadata",
}


def find_token_account_address(owner: Pubkey, mint: Pubkey) -> Pubkey:
    return get_associated_token_address(owner, mint)


def build_token_instructions(
    settings: Settings,
    mint: Pubkey,
    rent_lamports: int,
) -> List[Instruction]:
    """
    Everything the bundled creation transaction needs, in on-chain dependency
    order. The wallet pays for and initially controls everything.
    """
    owner = settings.wallet.pubkey()
    token_account = find_token_account_address(owner, mint)
    metadata = find_metadata_address(mint)

    instructions: List[Instruction] = [
        create_account(
            CreateAccountParams(
                from_pubkey=owner,
                to_pubkey=mint,
                lamports=rent_lamports,
                space=MINT_LEN,
                owner=TOKEN_PROGRAM_ID,
            )
        ),
        initialize_mint(
            InitializeMintParams(
                decimals=settings.decimals,
                program_id=TOKEN_PROGRAM_ID,
                mint=mint,
                mint_authority=owner,
                freeze_authority=owner,
            )
        ),
        create_associated_token_account(owner, owner, mint),
        mint_to(
            MintToParams(
                program_id=TOKEN_PROGRAM_ID,
                mint=mint,
                dest=token_account,
                mint_authority=owner,
                amount=settings.raw_mint_amount,
            )
        ),
        create_metadata_account_v3(
            metadata=metadata,
            mint=mint,
            mint_authority=owner,
            payer=owner,
            update_authority=owner,
            name=settings.name,
            symbol=settings.symbol,
            uri=settings.metadata_uri,
            seller_fee_basis_points=settings.seller_fee_basis_points,
            # The creator must be flagged verified here or the metadata
            # program won't ever let it be verified.
            creators=[Creator(address=owner, verified=True, share=100)],
            is_mutable=False,
        ),
    ]

    if settings.revoke_update:
        instructions.append(
            update_metadata_account_v2(
                metadata=metadata,
                update_authority=owner,
                new_update_authority=REVOKED_AUTHORITY,
                is_mutable=False,
            )
        )

    return instructions


def build_revoke_authority_instruction(
    mint: Pubkey,
    current_authority: Pubkey,
    authority_type: AuthorityType,
) -> Instruction:
    return set_authority(
        SetAuthorityParams(
            program_id=TOKEN_PROGRAM_ID,
            account=mint,
            authority=authority_type,
            current_authority=current_authority,
            new_authority=None,
        )
    )


def describe_instruction(ix: Instruction) -> str:
    """Short human label for an instruction built by this module."""
    tag = ix.data[0] if ix.data else None
    if ix.program_id == SYSTEM_PROGRAM_ID:
        return "create-account"
    if ix.program_id == ASSOCIATED_TOKEN_PROGRAM_ID:
        return "create-associated-account"
    if ix.program_id == TOKEN_PROGRAM_ID and tag in _TOKEN_TAGS:
        return _TOKEN_TAGS[tag]
    if ix.program_id == TOKEN_METADATA_PROGRAM_ID and tag in _METADATA_TAGS:
        return _METADATA_TAGS[tag]
    return f"unknown({ix.program_id})"
