"""Unit tests: transfer construction and the transaction cycle bench (fake client)."""
import unittest

from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

from adapters.solana_rpc import RpcError
from bench.stats import summarize
from bench.tx_cycle import TransactionCycleBench, build_transfer_transaction, run_cycle
from core.interfaces import LedgerRpc
from core.types import Endpoint, Failure, Success

COMPUTE_BUDGET_ID = Pubkey.from_string("ComputeBudget111111111111111111111111111111")
SYSTEM_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class FakeRpc(LedgerRpc):
    def __init__(self, balance=10**9, clock=None, fail_sends=()):
        self.balance = balance
        self.clock = clock or FakeClock()
        self.fail_sends = set(fail_sends)
        self.sent = []
        self.blockhash_calls = 0

    def get_version(self):
        return {}

    def get_latest_blockhash(self, commitment=None):
        self.blockhash_calls += 1
        self.clock.now += 0.1
        return Hash.default(), 500

    def get_slot(self, commitment=None):
        return 1

    def get_balance(self, pubkey, commitment=None):
        if isinstance(self.balance, Exception):
            raise self.balance
        return self.balance

    def get_block_height(self, commitment=None):
        return 1

    def send_and_confirm_transaction(self, tx, commitment="confirmed", last_valid_block_height=None):
        self.sent.append((tx, commitment, last_valid_block_height))
        self.clock.now += 0.4
        if len(self.sent) in self.fail_sends:
            raise RpcError("Transaction failed: InsufficientFundsForFee")
        return str(tx.signatures[0])


class TestBuildTransferTransaction(unittest.TestCase):
    def setUp(self):
        self.sender = Keypair()

    def _program_ids(self, tx):
        keys = tx.message.account_keys
        return [keys[ix.program_id_index] for ix in tx.message.instructions]

    def test_priority_fee_then_transfer(self):
        tx = build_transfer_transaction(self.sender, self.sender.pubkey(), 1000, Hash.default(), priority_fee=5)
        self.assertEqual(self._program_ids(tx), [COMPUTE_BUDGET_ID, SYSTEM_PROGRAM_ID])
        self.assertEqual(tx.message.account_keys[0], self.sender.pubkey())
        self.assertEqual(len(tx.signatures), 1)
        self.assertNotEqual(tx.signatures[0], Signature.default())

    def test_no_fee_instruction_when_zero(self):
        tx = build_transfer_transaction(self.sender, Keypair().pubkey(), 1000, Hash.default(), priority_fee=0)
        self.assertEqual(self._program_ids(tx), [SYSTEM_PROGRAM_ID])


class TestRunCycle(unittest.TestCase):
    def test_timer_spans_blockhash_to_confirmation(self):
        clock = FakeClock()
        rpc = FakeRpc(clock=clock)
        sender = Keypair()
        elapsed = run_cycle(rpc, sender, sender.pubkey(), 1000, clock=clock)
        self.assertAlmostEqual(elapsed, 500.0)
        _, commitment, last_valid = rpc.sent[0]
        self.assertEqual(commitment, "confirmed")
        self.assertEqual(last_valid, 500)

    def test_rpc_error_propagates(self):
        rpc = FakeRpc(fail_sends={1})
        sender = Keypair()
        with self.assertRaises(RpcError):
            run_cycle(rpc, sender, sender.pubkey(), 1000)


class TestTransactionCycleBench(unittest.TestCase):
    def setUp(self):
        self.sender = Keypair()
        self.endpoint = Endpoint(index=0, url="https://api.mainnet-beta.solana.com", host="api.mainnet-beta.solana.com")

    def _bench(self, rpc):
        return TransactionCycleBench(
            self.sender,
            client_factory=lambda url: rpc,
            attempts=3,
            lamports=1000,
            fee_margin=10_000,
            clock=rpc.clock,
        )

    def test_required_balance(self):
        self.assertEqual(self._bench(FakeRpc()).required_balance, 13_000)

    def test_three_self_transfers(self):
        rpc = FakeRpc()
        result = self._bench(rpc).measure(self.endpoint)
        self.assertIsNone(result.skipped)
        self.assertEqual(len(rpc.sent), 3)
        self.assertTrue(all(isinstance(s, Success) for s in result.samples))
        for tx, _, _ in rpc.sent:
            self.assertEqual(tx.message.account_keys[0], self.sender.pubkey())

    def test_insufficient_funds_skips_whole_endpoint(self):
        rpc = FakeRpc(balance=12_999)
        result = self._bench(rpc).measure(self.endpoint)
        self.assertIn("insufficient funds", result.skipped)
        self.assertEqual(result.samples, [])
        self.assertEqual(rpc.sent, [])
        self.assertEqual(rpc.blockhash_calls, 0)

        summary = summarize({0: result})
        self.assertEqual(summary.ranked, [])
        self.assertEqual(summary.no_data, [])
        self.assertEqual([r.endpoint for r in summary.skipped], [self.endpoint])

    def test_exact_balance_is_enough(self):
        rpc = FakeRpc(balance=13_000)
        self.assertIsNone(self._bench(rpc).measure(self.endpoint).skipped)

    def test_balance_lookup_error_skips(self):
        rpc = FakeRpc(balance=RpcError("getBalance: timeout"))
        result = self._bench(rpc).measure(self.endpoint)
        self.assertIn("balance check failed", result.skipped)
        self.assertEqual(rpc.sent, [])

    def test_failed_attempt_does_not_abort_rest(self):
        rpc = FakeRpc(fail_sends={2})
        result = self._bench(rpc).measure(self.endpoint)
        self.assertEqual(len(rpc.sent), 3)
        self.assertEqual([type(s) for s in result.samples], [Success, Failure, Success])
        self.assertEqual(result.samples[1].label, "transaction #2")


if __name__ == "__main__":
    unittest.main()
