"""
Fixed on-chain parameters for token creation.

Program ids are the public mainnet ids; they are identical on devnet and
testnet.
"""

from solders.pubkey import Pubkey
from spl.token.constants import (  # noqa: F401
    ASSOCIATED_TOKEN_PROGRAM_ID,
    MINT_LEN,
    TOKEN_PROGRAM_ID,
)

# Clusters the public RPC gateway serves as https://api.<network>.solana.com
ALLOWED_NETWORKS = ("devnet", "testnet", "mainnet-beta")

RPC_URL_TEMPLATE = "https://api.{network}.solana.com"
EXPLORER_URL_TEMPLATE = (
    "https://solana.fm/address/{mint}/metadata?cluster={network}-solana"
)

TOKEN_METADATA_PROGRAM_ID = Pubkey.from_string(
    "metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s"
)

# Setting the metadata update authority here makes it unusable.
REVOKED_AUTHORITY = Pubkey.from_string("11111111111111111111111111111111")

LAMPORTS_PER_SOL = 10**9

U64_MAX = 2**64 - 1

DEFAULT_COMMITMENT = "confirmed"

# Metaplex metadata field limits (utf-8 bytes)
MAX_NAME_LENGTH = 32
MAX_SYMBOL_LENGTH = 10
MAX_URI_LENGTH = 200
