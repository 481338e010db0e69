"""
RPC method bench: four read-only calls per endpoint, each timed on its own.
"""
import logging
import time
from typing import Any, Callable, List, Optional, Tuple

from solders.pubkey import Pubkey

from adapters.solana_rpc import RpcError, SolanaRpcClient
from config import BALANCE_PROBE_ACCOUNT, RPC_TIMEOUT_SECONDS
from core.interfaces import Bench, LedgerRpc
from core.types import Endpoint, EndpointResult, Failure, Sample, Success

logger = logging.getLogger(__name__)


def default_client_factory(url: str) -> LedgerRpc:
    return SolanaRpcClient(url, timeout=RPC_TIMEOUT_SECONDS)


def timed_call(
    label: str,
    fn: Callable[[], Any],
    clock: Callable[[], float] = time.perf_counter,
) -> Sample:
    """Time one RPC call. RpcError becomes a Failure; nothing else is caught."""
    t0 = clock()
    try:
        fn()
    except RpcError as e:
        logger.info("  - %s: error %s", label, e)
        return Failure(label=label, reason=str(e))
    elapsed_ms = (clock() - t0) * 1000
    logger.info("  - %s: %.1f ms", label, elapsed_ms)
    return Success(label=label, duration_ms=elapsed_ms)


class RpcMethodBench(Bench):
    """
    Runs, in order: getVersion, getLatestBlockhash, getSlot(confirmed) and
    getBalance of a large well-known wallet. A failed call never stops the
    calls after it.
    """

    name = "rpc"
    title = "RPC API response time"

    def __init__(
        self,
        client_factory: Callable[[str], LedgerRpc] = default_client_factory,
        balance_account: str = BALANCE_PROBE_ACCOUNT,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.client_factory = client_factory
        self.balance_account = Pubkey.from_string(balance_account)
        self._clock = clock

    def calls(self, client: LedgerRpc) -> List[Tuple[str, Callable[[], Any]]]:
        return [
            ("version", client.get_version),
            ("latest blockhash", client.get_latest_blockhash),
            ("current slot", lambda: client.get_slot("confirmed")),
            ("large wallet balance", lambda: client.get_balance(self.balance_account)),
        ]

    def probe_all(self, client: LedgerRpc) -> List[Sample]:
        return [timed_call(label, fn, clock=self._clock) for label, fn in self.calls(client)]

    def measure(self, endpoint: Endpoint) -> Optional[EndpointResult]:
        client = self.client_factory(endpoint.url)
        return EndpointResult(endpoint=endpoint, samples=self.probe_all(client))
