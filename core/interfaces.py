from __future__ import annotations

"""
Abstract interfaces for the bench harness:

1) LedgerRpc  – RPC client capability consumed by the RPC and transaction benches
2) PingParser – extraction of a round-trip time from echo tool output
3) Bench      – one measurement mode, producing an EndpointResult per endpoint

These are pure interfaces (no logic) so we can:
- plug in the real JSON-RPC client or an in-memory fake
- pick the ping output format at configuration time
- drive all measurement modes from a single loop and aggregator.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

from solders.hash import Hash
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from .types import Endpoint, EndpointResult


class LedgerRpc(ABC):
    """
    Minimal Solana RPC surface the benches need. Every method raises
    RpcError on transport, HTTP or JSON-RPC failure.
    """

    @abstractmethod
    def get_version(self) -> Dict[str, Any]:
        """Return the node's version info."""

    @abstractmethod
    def get_latest_blockhash(self, commitment: Optional[str] = None) -> Tuple[Hash, int]:
        """Return (blockhash, last_valid_block_height)."""

    @abstractmethod
    def get_slot(self, commitment: Optional[str] = None) -> int:
        """Return the current slot at the given commitment."""

    @abstractmethod
    def get_balance(self, pubkey: Pubkey, commitment: Optional[str] = None) -> int:
        """Return the account balance in lamports."""

    @abstractmethod
    def get_block_height(self, commitment: Optional[str] = None) -> int:
        """Return the current block height."""

    @abstractmethod
    def send_and_confirm_transaction(
        self,
        tx: Transaction,
        commitment: str = "confirmed",
        last_valid_block_height: Optional[int] = None,
    ) -> str:
        """
        Submit a signed transaction and block until it reaches `commitment`.
        Returns the transaction signature.
        """


class PingParser(ABC):
    """
    One echo-tool output format. Selected once at configuration time so the
    sampler itself stays platform independent.
    """

    # Flag that limits ping to a single echo request ("-c" / "-n")
    count_flag: str = "-c"

    @abstractmethod
    def parse(self, output: str) -> Optional[float]:
        """Return the round-trip time in milliseconds, or None if absent."""


class Bench(ABC):
    """
    A measurement mode. Implementations time their own probes and never
    raise for a failed probe; failures become Failure samples.
    """

    name: str = ""
    title: str = ""

    @abstractmethod
    def measure(self, endpoint: Endpoint) -> Optional[EndpointResult]:
        """
        Run every probe of this mode against one endpoint, sequentially.
        Returns None when the endpoint cannot be measured by this mode at all.
        """
