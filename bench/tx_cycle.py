"""
Transaction cycle bench: build, sign, submit and confirm a minimal
self-transfer, timing the whole round trip.
"""
import logging
import time
from typing import Callable, Optional, Tuple

from solders.compute_budget import set_compute_unit_price
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction

from adapters.solana_rpc import RpcError
from bench.rpc_methods import default_client_factory
from config import (
    LAMPORTS_PER_SOL,
    TX_FEE_MARGIN_LAMPORTS,
    TX_PRIORITY_FEE,
    TX_TEST_COUNT,
    TX_TEST_LAMPORTS,
)
from core.interfaces import Bench, LedgerRpc
from core.types import Endpoint, EndpointResult, Failure, Success

logger = logging.getLogger(__name__)

COMMITMENT = "confirmed"


def build_transfer_transaction(
    sender: Keypair,
    recipient: Pubkey,
    lamports: int,
    blockhash: Hash,
    priority_fee: int = TX_PRIORITY_FEE,
) -> Transaction:
    """
    Signed transfer of `lamports` from `sender` to `recipient`, paid by the
    sender. A compute-unit price instruction comes first when priority_fee > 0.
    """
    instructions = []
    if priority_fee > 0:
        instructions.append(set_compute_unit_price(priority_fee))
    instructions.append(
        transfer(TransferParams(from_pubkey=sender.pubkey(), to_pubkey=recipient, lamports=lamports))
    )
    return Transaction.new_signed_with_payer(instructions, sender.pubkey(), [sender], blockhash)


def send_transfer(
    rpc: LedgerRpc,
    sender: Keypair,
    recipient: Pubkey,
    lamports: int,
    priority_fee: int = TX_PRIORITY_FEE,
    clock: Callable[[], float] = time.perf_counter,
) -> Tuple[str, float]:
    """
    Fetch a blockhash, sign and submit the transfer, wait for confirmation.
    Returns (signature, elapsed_ms) where the timer covers the blockhash fetch
    through confirmation. Raises RpcError.
    """
    t0 = clock()
    blockhash, last_valid_block_height = rpc.get_latest_blockhash()
    tx = build_transfer_transaction(sender, recipient, lamports, blockhash, priority_fee)
    signature = rpc.send_and_confirm_transaction(
        tx,
        commitment=COMMITMENT,
        last_valid_block_height=last_valid_block_height,
    )
    return signature, (clock() - t0) * 1000


def run_cycle(
    rpc: LedgerRpc,
    sender: Keypair,
    recipient: Pubkey,
    lamports: int,
    priority_fee: int = TX_PRIORITY_FEE,
    clock: Callable[[], float] = time.perf_counter,
) -> float:
    """One timed sign-submit-confirm cycle; returns elapsed milliseconds."""
    signature, elapsed_ms = send_transfer(rpc, sender, recipient, lamports, priority_fee, clock)
    logger.info("    confirmed: %s", signature)
    return elapsed_ms


class TransactionCycleBench(Bench):
    """
    Sends `attempts` self-transfers of `lamports` per endpoint, one after the
    other. Skips the endpoint when the sender cannot fund every attempt plus
    `fee_margin`; a failed attempt does not stop the remaining ones.
    """

    name = "tx"
    title = "Transaction confirmation time"

    def __init__(
        self,
        sender: Keypair,
        client_factory: Callable[[str], LedgerRpc] = default_client_factory,
        attempts: int = TX_TEST_COUNT,
        lamports: int = TX_TEST_LAMPORTS,
        fee_margin: int = TX_FEE_MARGIN_LAMPORTS,
        priority_fee: int = TX_PRIORITY_FEE,
        recipient: Optional[Pubkey] = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.sender = sender
        self.client_factory = client_factory
        self.attempts = attempts
        self.lamports = lamports
        self.fee_margin = fee_margin
        self.priority_fee = priority_fee
        # Self-transfer keeps the probe repeatable
        self.recipient = recipient or sender.pubkey()
        self._clock = clock

    @property
    def required_balance(self) -> int:
        return self.lamports * self.attempts + self.fee_margin

    def check_funds(self, rpc: LedgerRpc) -> Optional[str]:
        """Reason to skip the endpoint, or None when the run is funded."""
        try:
            balance = rpc.get_balance(self.sender.pubkey())
        except RpcError as e:
            logger.warning("  Balance check failed: %s", e)
            return f"balance check failed: {e}"
        logger.info("  balance: %.9f SOL", balance / LAMPORTS_PER_SOL)
        if balance < self.required_balance:
            logger.warning(
                "  Insufficient balance: %s lamports, need at least %s", balance, self.required_balance
            )
            return f"insufficient funds ({balance} < {self.required_balance} lamports)"
        return None

    def measure(self, endpoint: Endpoint) -> Optional[EndpointResult]:
        rpc = self.client_factory(endpoint.url)
        result = EndpointResult(endpoint=endpoint)
        result.skipped = self.check_funds(rpc)
        if result.skipped:
            return result

        for i in range(1, self.attempts + 1):
            label = f"transaction #{i}"
            logger.info("  %s", label)
            try:
                elapsed_ms = run_cycle(rpc, self.sender, self.recipient, self.lamports, self.priority_fee, self._clock)
            except RpcError as e:
                logger.info("    error: %s", e)
                result.samples.append(Failure(label=label, reason=str(e)))
                continue
            logger.info("    elapsed: %.1f ms", elapsed_ms)
            result.samples.append(Success(label=label, duration_ms=elapsed_ms))
        return result
