from __future__ import annotations

import base64
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests
from solders.hash import Hash
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from config import CONFIRM_POLL_SECONDS, RPC_TIMEOUT_SECONDS
from core.interfaces import LedgerRpc

logger = logging.getLogger(__name__)

# Commitment levels a status satisfies, by requested level
_SATISFIES = {
    "processed": ("processed", "confirmed", "finalized"),
    "confirmed": ("confirmed", "finalized"),
    "finalized": ("finalized",),
}


class RpcError(RuntimeError):
    """Transport, HTTP, JSON-RPC or on-chain failure of a single RPC operation."""


def _commitment_config(commitment: Optional[str]) -> List[Dict[str, str]]:
    return [{"commitment": commitment}] if commitment else []


class SolanaRpcClient(LedgerRpc):
    """
    Thin JSON-RPC 2.0 client for a Solana node.

    One session per endpoint, fixed per-request timeout, no retries: a failed
    call surfaces as RpcError and counts as one failed probe.
    """

    def __init__(
        self,
        url: str,
        timeout: float = RPC_TIMEOUT_SECONDS,
        poll_interval: float = CONFIRM_POLL_SECONDS,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.session = session or requests.Session()
        self._sleep = sleep
        self._next_id = 0

    # ------------- HTTP helpers -------------

    def _call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        self._next_id += 1
        payload = {"jsonrpc": "2.0", "id": self._next_id, "method": method, "params": params or []}
        try:
            r = self.session.post(self.url, json=payload, timeout=self.timeout)
            r.raise_for_status()
            body = r.json()
        except requests.RequestException as e:
            raise RpcError(f"{method}: {e}") from e
        except ValueError as e:
            raise RpcError(f"{method}: malformed response: {e}") from e

        if not isinstance(body, dict):
            raise RpcError(f"{method}: unexpected payload type {type(body).__name__}")
        if body.get("error"):
            err = body["error"]
            if isinstance(err, dict):
                raise RpcError(f"{method}: {err.get('message', err)} (code {err.get('code')})")
            raise RpcError(f"{method}: {err}")
        if "result" not in body:
            raise RpcError(f"{method}: response has no result")
        return body["result"]

    @staticmethod
    def _value(result: Any, method: str) -> Any:
        # Context-wrapped results: {"context": {...}, "value": ...}
        if not isinstance(result, dict) or "value" not in result:
            raise RpcError(f"{method}: response has no value")
        return result["value"]

    @staticmethod
    def _int(value: Any, method: str) -> int:
        # JSON true/false decode to bool, an int subclass
        if isinstance(value, bool) or not isinstance(value, int):
            raise RpcError(f"{method}: malformed result: expected integer, got {value!r}")
        return value

    # ------------- Reads -------------

    def get_version(self) -> Dict[str, Any]:
        result = self._call("getVersion")
        if not isinstance(result, dict):
            raise RpcError(f"getVersion: malformed result: {result!r}")
        return result

    def get_latest_blockhash(self, commitment: Optional[str] = None) -> Tuple[Hash, int]:
        value = self._value(self._call("getLatestBlockhash", _commitment_config(commitment)), "getLatestBlockhash")
        try:
            return Hash.from_string(value["blockhash"]), int(value["lastValidBlockHeight"])
        except (KeyError, TypeError, ValueError) as e:
            raise RpcError(f"getLatestBlockhash: malformed value: {e}") from e

    def get_slot(self, commitment: Optional[str] = None) -> int:
        return self._int(self._call("getSlot", _commitment_config(commitment)), "getSlot")

    def get_balance(self, pubkey: Pubkey, commitment: Optional[str] = None) -> int:
        result = self._call("getBalance", [str(pubkey)] + _commitment_config(commitment))
        return self._int(self._value(result, "getBalance"), "getBalance")

    def get_block_height(self, commitment: Optional[str] = None) -> int:
        return self._int(self._call("getBlockHeight", _commitment_config(commitment)), "getBlockHeight")

    def get_signature_status(self, signature: str) -> Optional[Dict[str, Any]]:
        result = self._call("getSignatureStatuses", [[signature]])
        statuses = self._value(result, "getSignatureStatuses")
        if not isinstance(statuses, list):
            raise RpcError(f"getSignatureStatuses: malformed value: {statuses!r}")
        status = statuses[0] if statuses else None
        if status is not None and not isinstance(status, dict):
            raise RpcError(f"getSignatureStatuses: malformed status: {status!r}")
        return status

    # ------------- Writes -------------

    def send_transaction(self, tx: Transaction, preflight_commitment: str = "confirmed") -> str:
        encoded = base64.b64encode(bytes(tx)).decode("ascii")
        opts = {"encoding": "base64", "preflightCommitment": preflight_commitment}
        signature = self._call("sendTransaction", [encoded, opts])
        if not isinstance(signature, str):
            raise RpcError(f"sendTransaction: malformed result: {signature!r}")
        return signature

    def send_and_confirm_transaction(
        self,
        tx: Transaction,
        commitment: str = "confirmed",
        last_valid_block_height: Optional[int] = None,
    ) -> str:
        """
        Submit `tx` and poll its status until it reaches `commitment`.

        Stops with RpcError when the transaction reports an error, or when the
        chain has moved past `last_valid_block_height` without confirming it.
        Without a block height bound the wait only ends on confirmation or error.
        """
        accepted = _SATISFIES.get(commitment)
        if accepted is None:
            raise ValueError(f"Unknown commitment level: {commitment}")

        signature = self.send_transaction(tx, preflight_commitment=commitment)
        logger.debug("Submitted %s to %s", signature, self.url)

        while True:
            status = self.get_signature_status(signature)
            if status is not None:
                if status.get("err"):
                    raise RpcError(f"Transaction {signature} failed: {status['err']}")
                if status.get("confirmationStatus") in accepted:
                    return signature
            if last_valid_block_height is not None:
                height = self.get_block_height(commitment)
                if height > last_valid_block_height:
                    raise RpcError(
                        f"Transaction {signature} not confirmed before block height "
                        f"{last_valid_block_height} (now {height})"
                    )
            self._sleep(self.poll_interval)
