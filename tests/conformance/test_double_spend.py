"""
Double-Spend Conformance Tests

INVARIANT: Every output is spent at most once.

    ∀ tx: two inputs of tx claim the same UTXO ⟹ tx is invalid
    ∀ batch: at most one accepted transaction claims any given UTXO
"""

from decimal import Decimal
from hypothesis import given, settings
from hypothesis import strategies as st

from utxo_ledger import TxHandler, RejectReason

from tests.fake_verifier import accept_all
from tests.wallets import build_tx, unsigned_tx, fund


class TestWithinTransaction:

    def test_same_utxo_twice_invalid(self, handler, funded, alice, bob):
        _, utxos = funded
        tx = build_tx([(utxos[0], alice), (utxos[0], alice)], [("10", bob)])
        assert not handler.is_valid_tx(tx)

    def test_same_utxo_twice_invalid_even_when_underspending(self, handler, funded, alice, bob):
        """Claiming twice is invalid even if outputs fit within a single claim."""
        _, utxos = funded
        tx = build_tx([(utxos[0], alice), (utxos[0], alice)], [("1", bob)])
        assert handler.check_tx(tx).reason == RejectReason.DOUBLE_SPEND

    def test_same_utxo_twice_invalid_without_signature_checks(self, funded, bob):
        pool, utxos = funded
        handler = TxHandler(pool, verifier=accept_all)
        tx = unsigned_tx([utxos[1], utxos[0], utxos[1]], [("0", bob)])
        assert handler.check_tx(tx).reason == RejectReason.DOUBLE_SPEND

    @given(st.integers(min_value=2, max_value=6), st.data())
    @settings(max_examples=30)
    def test_any_repeated_claim_invalid(self, alice, bob, num_inputs, data):
        """
        PROPERTY: A transaction with any repeated UTXO among its inputs is
        invalid, wherever the repeat sits.
        """
        pool, utxos = fund([(Decimal("10"), alice) for _ in range(num_inputs)])
        handler = TxHandler(pool)
        spends = list(utxos)
        repeat_at = data.draw(st.integers(min_value=0, max_value=num_inputs - 1))
        insert_at = data.draw(st.integers(min_value=0, max_value=num_inputs))
        spends.insert(insert_at, utxos[repeat_at])

        tx = build_tx([(u, alice) for u in spends], [("1", bob)])

        assert not handler.is_valid_tx(tx)


class TestAcrossBatch:

    @given(st.integers(min_value=2, max_value=6))
    @settings(max_examples=20)
    def test_only_one_spender_accepted(self, alice, bob, num_spenders):
        """
        PROPERTY: Of N transactions claiming the same output, exactly the
        first is accepted.
        """
        pool, utxos = fund([(Decimal("10"), alice)])
        handler = TxHandler(pool)
        spenders = [
            build_tx([(utxos[0], alice)], [(str(10 - i), bob)])
            for i in range(num_spenders)
        ]

        accepted = handler.handle_txs(spenders)

        assert accepted == [spenders[0]]
        assert all(r.reason == RejectReason.MISSING_UTXO for _, r in handler.last_rejections)

    def test_spent_output_stays_spent_next_epoch(self, handler, funded, alice, bob, carol):
        _, utxos = funded
        first = build_tx([(utxos[0], alice)], [("10", bob)])
        replay = build_tx([(utxos[0], alice)], [("10", carol)])

        handler.handle_txs([first])

        assert handler.handle_txs([replay]) == []
