"""
Load bench settings from environment.
Never log SOLANA_PRIVATE_KEY or any key material.
"""
import json
import os
from typing import Optional

import base58
from dotenv import load_dotenv
from solders.keypair import Keypair

load_dotenv()


class ConfigError(ValueError):
    """Missing or invalid configuration; fatal before any probing."""


def _get_float(key: str, default: float) -> float:
    try:
        return float(os.environ.get(key, str(default)))
    except (TypeError, ValueError):
        return default


def _get_int(key: str, default: int) -> int:
    try:
        return int(os.environ.get(key, str(default)))
    except (TypeError, ValueError):
        return default


# Endpoints
DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"
# Large well-known wallet used by the getBalance probe
BALANCE_PROBE_ACCOUNT = "4Rf9mGD7FeYknun5JczX5nGLTfQuS1GRjwA3iseBQxP4"
EXPLORER_TX_URL = "https://explorer.solana.com/tx/{signature}?cluster=mainnet"

LAMPORTS_PER_SOL = 1_000_000_000

# Client
RPC_TIMEOUT_SECONDS: float = _get_float("RPC_TIMEOUT_SECONDS", 30.0)
CONFIRM_POLL_SECONDS: float = _get_float("CONFIRM_POLL_SECONDS", 0.5)

# Ping
PING_COUNT: int = _get_int("PING_COUNT", 5)
PING_INTERVAL_MS: int = _get_int("PING_INTERVAL_MS", 200)
PING_STYLE: str = os.environ.get("PING_STYLE", "auto").strip().lower()

# Transaction cycle
TX_TEST_COUNT: int = _get_int("TX_TEST_COUNT", 3)
TX_TEST_LAMPORTS: int = _get_int("TX_TEST_LAMPORTS", 1000)
TX_FEE_MARGIN_LAMPORTS: int = _get_int("TX_FEE_MARGIN_LAMPORTS", 10_000)
TX_PRIORITY_FEE: int = _get_int("TX_PRIORITY_FEE", 5)  # micro-lamports per compute unit


def get_custom_rpc_url() -> Optional[str]:
    return os.environ.get("SOLANA_RPC_URL", "").strip() or None


def get_private_key() -> Optional[str]:
    return os.environ.get("SOLANA_PRIVATE_KEY", "").strip() or None


def keypair_from_secret(secret: str) -> Keypair:
    """
    Build a Keypair from a base58 secret key, or from a JSON byte array
    as written by `solana-keygen`.
    """
    secret = secret.strip()
    if secret.startswith("["):
        try:
            raw = bytes(json.loads(secret))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid SOLANA_PRIVATE_KEY byte array: {e}") from e
    else:
        try:
            raw = base58.b58decode(secret)
        except ValueError as e:
            raise ConfigError(f"Invalid SOLANA_PRIVATE_KEY encoding: {e}") from e
    try:
        return Keypair.from_bytes(raw)
    except ValueError as e:
        raise ConfigError(f"SOLANA_PRIVATE_KEY is not a valid keypair ({len(raw)} bytes)") from e


def load_keypair() -> Keypair:
    key = get_private_key()
    if not key:
        raise ConfigError("Missing required env: SOLANA_PRIVATE_KEY")
    return keypair_from_secret(key)
