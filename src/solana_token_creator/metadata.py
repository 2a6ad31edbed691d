"""
Metaplex token-metadata instructions and account decoding.

Layouts are borsh, declared with borsh_construct. Pubkeys are plain
``U8[32]`` arrays and get converted at the edges.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from borsh_construct import Bool, CStruct, Option, String, U8, U16, U64, Vec
from construct import ConstructError
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID

from .project_constants import TOKEN_METADATA_PROGRAM_ID

CREATE_METADATA_ACCOUNT_V3 = 33
UPDATE_METADATA_ACCOUNT_V2 = 15

# Account key tag for a v1 metadata account
METADATA_V1_KEY = 4

CreatorLayout = CStruct(
    "address" / U8[32],
    "verified" / Bool,
    "share" / U8,
)
CollectionLayout = CStruct(
    "verified" / Bool,
    "key" / U8[32],
)
UsesLayout = CStruct(
    "use_method" / U8,
    "remaining" / U64,
    "total" / U64,
)
CollectionDetailsLayout = CStruct(
    "kind" / U8,
    "size" / U64,
)
DataV2Layout = CStruct(
    "name" / String,
    "symbol" / String,
    "uri" / String,
    "seller_fee_basis_points" / U16,
    "creators" / Option(Vec(CreatorLayout)),
    "collection" / Option(CollectionLayout),
    "uses" / Option(UsesLayout),
)
CreateMetadataAccountV3Layout = CStruct(
    "instruction" / U8,
    "data" / DataV2Layout,
    "is_mutable" / Bool,
    "collection_details" / Option(CollectionDetailsLayout),
)
UpdateMetadataAccountV2Layout = CStruct(
    "instruction" / U8,
    "data" / Option(DataV2Layout),
    "update_authority" / Option(U8[32]),
    "primary_sale_happened" / Option(Bool),
    "is_mutable" / Option(Bool),
)
# Only the prefix of the account we read; later fields are ignored.
MetadataAccountLayout = CStruct(
    "key" / U8,
    "update_authority" / U8[32],
    "mint" / U8[32],
    "name" / String,
    "symbol" / String,
    "uri" / String,
    "seller_fee_basis_points" / U16,
    "creators" / Option(Vec(CreatorLayout)),
)


@dataclass(frozen=True)
class Creator:
    address: Pubkey
    verified: bool
    share: int


@dataclass(frozen=True)
class TokenMetadata:
    update_authority: Pubkey
    mint: Pubkey
    name: str
    symbol: str
    uri: str
    seller_fee_basis_points: int
    creators: List[Creator]

    @property
    def verified_creators(self) -> List[Creator]:
        return [c for c in self.creators if c.verified]


def find_metadata_address(mint: Pubkey) -> Pubkey:
    return Pubkey.find_program_address(
        [b"metadata", bytes(TOKEN_METADATA_PROGRAM_ID), bytes(mint)],
        TOKEN_METADATA_PROGRAM_ID,
    )[0]


def _key(pubkey: Pubkey) -> List[int]:
    return list(bytes(pubkey))


def create_metadata_account_v3(
    metadata: Pubkey,
    mint: Pubkey,
    mint_authority: Pubkey,
    payer: Pubkey,
    update_authority: Pubkey,
    name: str,
    symbol: str,
    uri: str,
    seller_fee_basis_points: int,
    creators: List[Creator],
    is_mutable: bool,
) -> Instruction:
    data = CreateMetadataAccountV3Layout.build(
        {
            "instruction": CREATE_METADATA_ACCOUNT_V3,
            "data": {
                "name": name,
                "symbol": symbol,
                "uri": uri,
                "seller_fee_basis_points": seller_fee_basis_points,
                "creators": [
                    {"address": _key(c.address), "verified": c.verified, "share": c.share}
                    for c in creators
                ],
                "collection": None,
                "uses": None,
            },
            "is_mutable": is_mutable,
            "collection_details": None,
        }
    )

    return Instruction(
        program_id=TOKEN_METADATA_PROGRAM_ID,
        accounts=[
            AccountMeta(metadata, is_signer=False, is_writable=True),
            AccountMeta(mint, is_signer=False, is_writable=False),
            AccountMeta(mint_authority, is_signer=True, is_writable=False),
            AccountMeta(payer, is_signer=True, is_writable=True),
            AccountMeta(update_authority, is_signer=True, is_writable=False),
            AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
        ],
        data=data,
    )


def update_metadata_account_v2(
    metadata: Pubkey,
    update_authority: Pubkey,
    new_update_authority: Optional[Pubkey] = None,
    is_mutable: Optional[bool] = None,
) -> Instruction:
    """Only the authority and mutability fields; data and primary sale stay as they are."""
    data = UpdateMetadataAccountV2Layout.build(
        {
            "instruction": UPDATE_METADATA_ACCOUNT_V2,
            "data": None,
            "update_authority": (
                _key(new_update_authority) if new_update_authority is not None else None
            ),
            "primary_sale_happened": None,
            "is_mutable": is_mutable,
        }
    )

    return Instruction(
        program_id=TOKEN_METADATA_PROGRAM_ID,
        accounts=[
            AccountMeta(metadata, is_signer=False, is_writable=True),
            AccountMeta(update_authority, is_signer=True, is_writable=False),
        ],
        data=data,
    )


def parse_metadata_account(data: bytes) -> TokenMetadata:
    try:
        parsed = MetadataAccountLayout.parse(data)
    except (ConstructError, UnicodeDecodeError) as e:
        raise ValueError(f"Metadata account truncated or malformed: {e}") from None

    if parsed.key != METADATA_V1_KEY:
        raise ValueError(f"Not a metadata account (key={parsed.key})")

    creators = [
        Creator(Pubkey.from_bytes(bytes(c.address)), bool(c.verified), c.share)
        for c in parsed.creators or []
    ]
    # Fixed-size fields are stored right-padded with NULs.
    return TokenMetadata(
        update_authority=Pubkey.from_bytes(bytes(parsed.update_authority)),
        mint=Pubkey.from_bytes(bytes(parsed.mint)),
        name=parsed.name.rstrip("\x00"),
        symbol=parsed.symbol.rstrip("\x00"),
        uri=parsed.uri.rstrip("\x00"),
        seller_fee_basis_points=parsed.seller_fee_basis_points,
        creators=creators,
    )
