"""Calculator client constants."""

CLUSTER_URLS = {
    "localnet": "http://127.0.0.1:8899",
    "devnet": "https://api.devnet.solana.com",
    "mainnet": "https://api.mainnet-beta.solana.com",
}
DEFAULT_RPC_URL = CLUSTER_URLS["devnet"]
COMMITMENT = "confirmed"

DEFAULT_KEYPAIR_PATH = "~/.config/solana/id.json"
DEFAULT_PROGRAM_KEYPAIR_PATH = "dist/program/calculator-keypair.json"
DEFAULT_PROJECT_FILE = "calculator.toml"

DEFAULT_SEED = "test1"
# Ledger limit on create-with-seed seeds.
MAX_SEED_LEN = 32

LAMPORTS_PER_SOL = 1_000_000_000
DEFAULT_FUNDING_LAMPORTS = LAMPORTS_PER_SOL

# Seconds per RPC request.
DEFAULT_TIMEOUT = 30.0

KEYPAIR_LEN = 64
U32_MAX = 2**32 - 1
