"""
handler.py - Transaction validation and per-epoch reconciliation.

TxHandler is the only component that mutates a UTXOPool. It owns a private
copy of the pool it was created with, so the caller's pool is never touched.

Key responsibilities:
    - Decides whether a single transaction is valid against the current pool
    - Applies a batch of candidate transactions in caller order, skipping any
      that conflict with transactions accepted earlier in the batch
    - Keeps an audit trail of every accepted transaction
"""

from __future__ import annotations
from typing import Iterable, List, Optional, Set, Tuple

from .core import (
    # Types
    Transaction, UTXO, Rejection, RejectReason, UTXOPoolView, SignatureVerifier,
    # Constants
    ZERO,
    # Arithmetic
    _exact_sum,
)
from .crypto import verify_signature
from .pool import UTXOPool, PoolView


class TxHandler:
    """
    Validates transactions against a UTXO pool and applies accepted ones.

    Design Principles:
        - Validation is a pure predicate. Invalid transactions are an ordinary
          outcome, reported as False (or a Rejection), never as an exception.
        - Batches are processed greedily in the order given. A transaction
          that spends an output created later in the same batch is rejected;
          no reordering or retry pass is attempted.

    Thread Safety:
        Not thread-safe. Do not call handle_txs() concurrently or re-entrantly.

    Example:
        handler = TxHandler(pool)
        accepted = handler.handle_txs([tx1, tx2, tx3])
    """

    def __init__(
        self,
        utxo_pool: UTXOPool,
        verifier: SignatureVerifier = verify_signature,
        verbose: bool = False,
    ):
        """
        Create a handler over a private copy of `utxo_pool`.

        Args:
            utxo_pool: Starting pool. Copied; never aliased or mutated.
            verifier: Signature check (address, message, signature) -> bool
            verbose: Print one line per accepted or rejected transaction
        """
        self._pool: UTXOPool = utxo_pool.clone()
        self._verifier = verifier
        self.verbose = verbose
        self.transaction_log: List[Transaction] = []
        self.last_rejections: List[Tuple[Transaction, Rejection]] = []

    # ========================================================================
    # POOL ACCESS (read-only)
    # ========================================================================

    @property
    def pool(self) -> UTXOPoolView:
        """Live read-only view of the handler's pool."""
        return PoolView(self._pool)

    def get_utxo_pool(self) -> UTXOPool:
        """Return an independent copy of the current pool."""
        return self._pool.clone()

    # ========================================================================
    # VALIDATION
    # ========================================================================

    def is_valid_tx(self, tx: Transaction) -> bool:
        """
        Return True if `tx` is valid against the current pool.

        A transaction is valid when:
        (1) every output it claims is in the current pool,
        (2) every input's signature verifies under the claimed output's address,
        (3) no output is claimed more than once,
        (4) every output value is non-negative, and
        (5) the claimed outputs are worth at least as much as the new outputs.

        The pool is not modified.
        """
        return self.check_tx(tx) is None

    def check_tx(self, tx: Transaction) -> Optional[Rejection]:
        """
        Validate `tx` and report the first condition that fails.

        Returns:
            None if the transaction is valid, otherwise a Rejection naming the
            failed condition.
        """
        output_values = []
        for i, output in enumerate(tx.outputs):
            if output.value < ZERO:
                return Rejection(
                    RejectReason.NEGATIVE_OUTPUT,
                    f"output {i} has negative value {output.value}",
                )
            output_values.append(output.value)

        claimed: Set[UTXO] = set()
        input_values = []
        for i, inp in enumerate(tx.inputs):
            utxo = inp.utxo
            if utxo in claimed:
                return Rejection(
                    RejectReason.DOUBLE_SPEND,
                    f"input {i} claims {utxo!r} more than once",
                )
            if not self._pool.contains(utxo):
                return Rejection(
                    RejectReason.MISSING_UTXO,
                    f"input {i} claims {utxo!r} which is not in the pool",
                )
            claimed_output = self._pool.get_tx_output(utxo)
            if not self._verifier(claimed_output.address, tx.signable_message(i), inp.signature):
                return Rejection(
                    RejectReason.INVALID_SIGNATURE,
                    f"input {i} signature does not verify for {utxo!r}",
                )
            input_values.append(claimed_output.value)
            claimed.add(utxo)

        input_sum = _exact_sum(input_values)
        output_sum = _exact_sum(output_values)
        if input_sum < output_sum:
            return Rejection(
                RejectReason.INSUFFICIENT_INPUT,
                f"inputs total {input_sum} < outputs total {output_sum}",
            )
        return None

    # ========================================================================
    # EPOCH PROCESSING (Mutating)
    # ========================================================================

    def handle_txs(self, possible_txs: Iterable[Transaction]) -> List[Transaction]:
        """
        Process one epoch of candidate transactions.

        Each candidate is validated against the pool as left by the candidates
        accepted before it. Valid candidates are applied immediately: their
        claimed outputs are removed from the pool and their new outputs are
        added under (tx_hash, index). Invalid candidates are skipped.

        Args:
            possible_txs: Candidate transactions, in the order to consider them

        Returns:
            Accepted transactions, in acceptance order
        """
        accepted: List[Transaction] = []
        self.last_rejections = []

        for tx in possible_txs:
            rejection = self.check_tx(tx)
            if rejection is not None:
                self.last_rejections.append((tx, rejection))
                if self.verbose:
                    print(f"✗ REJECTED: {tx!r} {rejection}")
                continue

            self._apply(tx)
            accepted.append(tx)
            self.transaction_log.append(tx)
            if self.verbose:
                print(f"✓ ACCEPTED: {tx!r}")

        return accepted

    def _apply(self, tx: Transaction) -> None:
        """Spend the outputs `tx` claims and add the outputs it creates."""
        for utxo in tx.claimed_utxos():
            self._pool.remove_utxo(utxo)
        for i, output in enumerate(tx.outputs):
            self._pool.add_utxo(UTXO(tx.tx_hash, i), output)
