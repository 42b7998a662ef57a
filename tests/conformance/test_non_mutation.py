"""
Non-Mutation Conformance Tests

INVARIANT: A handler owns a private copy of its starting pool.

    ∀ pool P, handler H = TxHandler(P):
        changes to P after construction do not affect H
        H.handle_txs(...) never changes P
"""

from decimal import Decimal
from hypothesis import given, settings
from hypothesis import strategies as st

from utxo_ledger import TxHandler, UTXO, Output

from tests.wallets import build_tx, fund, genesis_hash, out_ref


class TestNonMutationExamples:

    def test_caller_removal_does_not_reach_handler(self, funded):
        pool, utxos = funded
        handler = TxHandler(pool)

        pool.remove_utxo(utxos[0])

        assert handler.pool.contains(utxos[0])

    def test_caller_addition_does_not_reach_handler(self, funded, alice):
        pool, _ = funded
        handler = TxHandler(pool)
        extra = UTXO(genesis_hash("late"), 0)

        pool.add_utxo(extra, Output(Decimal("100"), alice.address))

        assert not handler.pool.contains(extra)

    def test_handle_txs_leaves_caller_pool_alone(self, funded, alice, bob):
        pool, utxos = funded
        before = pool.clone()
        handler = TxHandler(pool)
        tx = build_tx([(utxos[0], alice)], [("10", bob)])

        assert handler.handle_txs([tx]) == [tx]

        assert pool == before
        assert pool.contains(utxos[0])
        assert not pool.contains(out_ref(tx))

    def test_two_handlers_are_independent(self, funded, alice, bob):
        pool, utxos = funded
        first = TxHandler(pool)
        second = TxHandler(pool)
        tx = build_tx([(utxos[0], alice)], [("10", bob)])

        first.handle_txs([tx])

        assert second.pool.contains(utxos[0])
        assert second.is_valid_tx(tx)


class TestNonMutationProperties:

    @given(st.lists(st.integers(min_value=0, max_value=9), max_size=10))
    @settings(max_examples=30)
    def test_any_caller_edits_invisible(self, alice, removals):
        """
        PROPERTY: Whatever the caller removes afterwards, the handler's pool
        still equals the pool at construction time.
        """
        pool, _ = fund([(Decimal(i + 1), alice) for i in range(10)])
        snapshot = pool.clone()
        handler = TxHandler(pool)

        for index in removals:
            pool.remove_utxo(UTXO(genesis_hash(), index))

        assert handler.get_utxo_pool() == snapshot
