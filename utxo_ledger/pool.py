"""
pool.py - The set of currently unspent transaction outputs.

UTXOPool is the authoritative balance state that transactions are validated
against. It maps each UTXO to the Output it refers to; a key is present if and
only if that output has not been spent by a transaction applied to the pool.
"""

from __future__ import annotations
from decimal import Decimal
from typing import Dict, Iterator, List, Mapping, Optional, Set, Tuple

from .core import UTXO, Output, UTXONotFound, _exact_sum


class UTXOPool:
    """
    Mutable mapping from UTXO to Output.

    Implements the UTXOPoolView protocol.

    Thread Safety:
        Not thread-safe. A pool is owned by one TxHandler at a time.

    Example:
        pool = UTXOPool()
        pool.add_utxo(UTXO(genesis_hash, 0), Output(Decimal("10"), alice_address))
        assert pool.contains(UTXO(genesis_hash, 0))
    """

    def __init__(self, entries: Optional[Mapping[UTXO, Output]] = None):
        """
        Create a pool, optionally seeded from a mapping of UTXO to Output.

        The mapping is copied; later changes to it do not affect the pool.
        """
        self._outputs: Dict[UTXO, Output] = {}
        if entries:
            for utxo, output in entries.items():
                self.add_utxo(utxo, output)

    # ========================================================================
    # UTXOPoolView PROTOCOL IMPLEMENTATION (read-only methods)
    # ========================================================================

    def contains(self, utxo: UTXO) -> bool:
        return utxo in self._outputs

    def get_tx_output(self, utxo: UTXO) -> Output:
        """
        Return the output referenced by `utxo`.

        Raises:
            UTXONotFound: If `utxo` is not in the pool. Callers are expected
                          to check contains() first.
        """
        try:
            return self._outputs[utxo]
        except KeyError:
            raise UTXONotFound(f"{utxo!r} not in pool") from None

    def all_utxo(self) -> Set[UTXO]:
        """Snapshot of every UTXO in the pool, in no particular order."""
        return set(self._outputs)

    def total_value(self) -> Decimal:
        """
        Sum of all unspent output values.

        Entries are sorted before summation so accumulation order is
        deterministic.
        """
        return _exact_sum(self._outputs[u].value for u in sorted(self._outputs))

    def outputs_for(self, address: bytes) -> Dict[UTXO, Output]:
        """Return every unspent output locked to `address`."""
        return {u: out for u, out in self._outputs.items() if out.address == address}

    def items(self) -> List[Tuple[UTXO, Output]]:
        return sorted(self._outputs.items())

    # ========================================================================
    # MUTATION
    # ========================================================================

    def add_utxo(self, utxo: UTXO, output: Output) -> None:
        """Insert `output` under `utxo`, overwriting any existing entry."""
        if not isinstance(utxo, UTXO):
            raise ValueError(f"pool key must be UTXO, got {type(utxo).__name__}")
        if not isinstance(output, Output):
            raise ValueError(f"pool value must be Output, got {type(output).__name__}")
        self._outputs[utxo] = output

    def remove_utxo(self, utxo: UTXO) -> None:
        """Remove `utxo` from the pool. No-op if absent."""
        self._outputs.pop(utxo, None)

    # ========================================================================
    # COPYING
    # ========================================================================

    def clone(self) -> UTXOPool:
        """
        Create an independent copy of this pool.

        UTXO and Output are immutable, so copying the mapping is a full copy:
        adding or removing entries in either pool never affects the other.
        """
        cloned = UTXOPool.__new__(UTXOPool)
        cloned._outputs = dict(self._outputs)
        return cloned

    # ========================================================================
    # CONTAINER PROTOCOL
    # ========================================================================

    def __contains__(self, utxo: object) -> bool:
        return utxo in self._outputs

    def __len__(self) -> int:
        return len(self._outputs)

    def __iter__(self) -> Iterator[UTXO]:
        return iter(list(self._outputs))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UTXOPool):
            return NotImplemented
        return self._outputs == other._outputs

    def __repr__(self) -> str:
        return f"UTXOPool({len(self._outputs)} unspent, total={self.total_value()})"


class PoolView:
    """
    Read-only window onto a UTXOPool.

    Reflects the live state of the wrapped pool but exposes no mutation
    methods.
    """

    def __init__(self, pool: UTXOPool):
        self._pool = pool

    def contains(self, utxo: UTXO) -> bool:
        return self._pool.contains(utxo)

    def get_tx_output(self, utxo: UTXO) -> Output:
        return self._pool.get_tx_output(utxo)

    def all_utxo(self) -> Set[UTXO]:
        return self._pool.all_utxo()

    def total_value(self) -> Decimal:
        return self._pool.total_value()

    def __contains__(self, utxo: object) -> bool:
        return utxo in self._pool

    def __len__(self) -> int:
        return len(self._pool)
