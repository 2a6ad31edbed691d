import pytest
from solders.pubkey import Pubkey

from conftest import encode_metadata_account
from solana_token_creator.metadata import (
    CreateMetadataAccountV3Layout,
    Creator,
    create_metadata_account_v3,
    find_metadata_address,
    parse_metadata_account,
)
from solana_token_creator.project_constants import TOKEN_METADATA_PROGRAM_ID


def test_metadata_address_is_program_derived(mint_keypair):
    mint = mint_keypair.pubkey()
    expected, _ = Pubkey.find_program_address(
        [b"metadata", bytes(TOKEN_METADATA_PROGRAM_ID), bytes(mint)],
        TOKEN_METADATA_PROGRAM_ID,
    )
    assert find_metadata_address(mint) == expected
    assert find_metadata_address(mint) == find_metadata_address(mint)


def test_parse_strips_padding_and_reads_creators(wallet, mint_keypair):
    other = Pubkey.from_string("11111111111111111111111111111111")
    raw = encode_metadata_account(
        wallet.pubkey(),
        mint_keypair.pubkey(),
        [(wallet.pubkey(), True, 60), (other, False, 40)],
        name="Cat Coin",
        symbol="CAT",
        uri="https://example.com/cat.json",
        fee=250,
    )
    md = parse_metadata_account(raw)
    assert md.name == "Cat Coin"
    assert md.symbol == "CAT"
    assert md.uri == "https://example.com/cat.json"
    assert md.seller_fee_basis_points == 250
    assert md.update_authority == wallet.pubkey()
    assert md.mint == mint_keypair.pubkey()
    assert [c.share for c in md.creators] == [60, 40]
    assert [c.address for c in md.verified_creators] == [wallet.pubkey()]


def test_parse_without_creators(wallet, mint_keypair):
    raw = bytearray(encode_metadata_account(wallet.pubkey(), mint_keypair.pubkey(), []))
    # Turn Some(vec![]) into None
    creators_at = 1 + 32 + 32 + (4 + 32) + (4 + 10) + (4 + 200) + 2
    raw[creators_at] = 0
    assert parse_metadata_account(bytes(raw)).creators == []


def test_rejects_other_account_kinds(wallet, mint_keypair):
    raw = bytearray(encode_metadata_account(wallet.pubkey(), mint_keypair.pubkey(), []))
    raw[0] = 6
    with pytest.raises(ValueError, match="Not a metadata account"):
        parse_metadata_account(bytes(raw))


def test_truncated_account(wallet, mint_keypair):
    raw = encode_metadata_account(wallet.pubkey(), mint_keypair.pubkey(), [])
    with pytest.raises(ValueError, match="truncated"):
        parse_metadata_account(raw[:80])


def test_create_instruction_decodes_with_layout(wallet, mint_keypair):
    owner = wallet.pubkey()
    ix = create_metadata_account_v3(
        metadata=find_metadata_address(mint_keypair.pubkey()),
        mint=mint_keypair.pubkey(),
        mint_authority=owner,
        payer=owner,
        update_authority=owner,
        name="Cat Coin",
        symbol="CAT",
        uri="https://example.com/cat.json",
        seller_fee_basis_points=250,
        creators=[Creator(owner, True, 100)],
        is_mutable=False,
    )
    args = CreateMetadataAccountV3Layout.parse(ix.data)
    assert args.instruction == 33
    assert args.data.name == "Cat Coin"
    assert args.data.seller_fee_basis_points == 250
    assert bytes(args.data.creators[0].address) == bytes(owner)
    assert args.data.creators[0].verified
    assert args.data.collection is None
    assert not args.is_mutable
