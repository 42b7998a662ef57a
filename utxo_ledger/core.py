"""
Core types and pure functions for the UTXO ledger.

This module provides the foundational data structures and protocols:
1. Protocols: UTXOPoolView for read-only pool access
2. Immutable data structures: UTXO, Output, Input, Transaction
3. Exceptions: LedgerError and domain-specific error types
4. Rejection records: RejectReason and Rejection (diagnostic side channel)
5. Canonical serialization used for transaction identity and signing

All functions in this module are pure. Nothing here mutates pool state.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from decimal import (
    Decimal, Inexact, MAX_EMAX, MIN_EMIN, ROUND_HALF_EVEN, getcontext, localcontext
)
from enum import Enum
import hashlib
from typing import (
    Callable, Iterable, Iterator, Optional, Protocol, Set, Tuple, runtime_checkable
)


# ============================================================================
# DECIMAL CONTEXT CONFIGURATION
# ============================================================================
#
# Output values are compared with Decimal arithmetic. Sums that decide
# validity go through _exact_sum, which never rounds.
# The global context is configured once at module load time.
#
# PRECONDITION: No other code should modify the global Decimal context.
#
_LEDGER_DECIMAL_CONTEXT = getcontext()
_LEDGER_DECIMAL_CONTEXT.prec = 50
_LEDGER_DECIMAL_CONTEXT.rounding = ROUND_HALF_EVEN


# ============================================================================
# CONSTANTS
# ============================================================================

# SHA-256 digest size of a transaction hash.
TX_HASH_SIZE = 32

# An address is a raw ed25519 public key.
ADDRESS_SIZE = 32

# Raw ed25519 signature size.
SIGNATURE_SIZE = 64

ZERO = Decimal("0")


# ============================================================================
# TYPE ALIASES
# ============================================================================

# (address, message, signature) -> bool. Must return False, never raise,
# for malformed keys or signatures.
SignatureVerifier = Callable[[bytes, bytes, Optional[bytes]], bool]


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class UTXONotFound(LedgerError):
    """Raised when looking up an output for a UTXO that is not in the pool."""
    pass


# ============================================================================
# REJECTIONS
# ============================================================================

class RejectReason(Enum):
    """
    Why a transaction failed validation.

    MISSING_UTXO: An input references an output that is not in the pool.
    INVALID_SIGNATURE: An input's signature does not verify under the owner's address.
    DOUBLE_SPEND: Two inputs of the same transaction claim the same output.
    NEGATIVE_OUTPUT: An output carries a negative value.
    INSUFFICIENT_INPUT: Outputs are worth more than the inputs they spend.
    """
    MISSING_UTXO = "missing_utxo"
    INVALID_SIGNATURE = "invalid_signature"
    DOUBLE_SPEND = "double_spend"
    NEGATIVE_OUTPUT = "negative_output"
    INSUFFICIENT_INPUT = "insufficient_input"


@dataclass(frozen=True, slots=True)
class Rejection:
    """
    Diagnostic record for a rejected transaction.

    Attributes:
        reason: Which validity condition failed first
        detail: Human-readable description of the failure
    """
    reason: RejectReason
    detail: str

    def __str__(self) -> str:
        return f"{self.reason.value}: {self.detail}"


# ============================================================================
# CANONICAL SERIALIZATION
# ============================================================================

# Exponents outside this range serialize in scientific notation so that
# extreme magnitudes stay short.
_PLAIN_EXPONENT_LIMIT = 50


def _normalize_decimal(d: Decimal) -> str:
    """
    Normalize a Decimal to a canonical string representation.

    Decimal("1.0") and Decimal("1.00") both become "1". The conversion works
    on the digit tuple and never rounds, so distinct values always produce
    distinct strings regardless of the context precision.
    """
    sign, digits, exponent = d.as_tuple()
    coefficient = "".join(map(str, digits)).rstrip("0")
    if not coefficient:
        return "0"
    exponent += len(digits) - len(coefficient)
    prefix = "-" if sign else ""

    if not -_PLAIN_EXPONENT_LIMIT <= exponent <= _PLAIN_EXPONENT_LIMIT:
        return f"{prefix}{coefficient}E{exponent:+d}"
    if exponent >= 0:
        return prefix + coefficient + "0" * exponent
    if -exponent < len(coefficient):
        return f"{prefix}{coefficient[:exponent]}.{coefficient[exponent:]}"
    return f"{prefix}0.{'0' * (-exponent - len(coefficient))}{coefficient}"


def _exact_sum(values: Iterable[Decimal]) -> Decimal:
    """
    Sum Decimals without rounding.

    The working precision is widened to hold every digit of every operand
    plus carries. Inexact is trapped, so a total that cannot be represented
    raises instead of silently losing value.
    """
    values = list(values)
    if not values:
        return ZERO
    top = max([0] + [v.adjusted() for v in values])
    bottom = min([0] + [v.as_tuple().exponent for v in values])
    with localcontext() as ctx:
        ctx.prec = top - bottom + 1 + len(str(len(values)))
        ctx.Emax = MAX_EMAX
        ctx.Emin = MIN_EMIN
        ctx.traps[Inexact] = True
        return sum(values, ZERO)


def _hex(data: Optional[bytes]) -> str:
    if data is None:
        return "-"
    return data.hex()


def _short(data: bytes) -> str:
    return data.hex()[:12]


def _require_bytes(name: str, value: object) -> None:
    if not isinstance(value, bytes):
        raise ValueError(f"{name} must be bytes, got {type(value).__name__}")


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True, order=True)
class UTXO:
    """
    Reference to a single output of a prior transaction.

    Equality and hashing are by value of both fields, so a UTXO built from an
    input compares equal to the UTXO the pool was keyed with.

    Attributes:
        tx_hash: Hash of the transaction that created the output.
        index: Position of the output in that transaction's output list.
    """
    tx_hash: bytes
    index: int

    def __post_init__(self):
        _require_bytes("UTXO tx_hash", self.tx_hash)
        if not isinstance(self.index, int) or isinstance(self.index, bool):
            raise ValueError(f"UTXO index must be int, got {type(self.index).__name__}")
        if self.index < 0:
            raise ValueError(f"UTXO index must be non-negative, got {self.index}")

    def __repr__(self) -> str:
        return f"UTXO({_short(self.tx_hash)}:{self.index})"


@dataclass(frozen=True, slots=True)
class Output:
    """
    A value locked to an address.

    Attributes:
        value: Amount carried by the output. Must be a finite Decimal.
               Negative values are representable; validation rejects them.
        address: Owner's raw public key, used to verify spending signatures.
    """
    value: Decimal
    address: bytes

    def __post_init__(self):
        if not isinstance(self.value, Decimal):
            raise ValueError(f"Output value must be Decimal, got {type(self.value)}")
        if self.value.is_infinite() or self.value.is_nan():
            raise ValueError(f"Output value must be finite, got {self.value}")
        _require_bytes("Output address", self.address)

    def __repr__(self) -> str:
        return f"Output({self.value} → {_short(self.address)})"


@dataclass(frozen=True, slots=True)
class Input:
    """
    A claim on a prior output, carrying the owner's authorization.

    Attributes:
        prev_tx_hash: Hash of the transaction whose output is spent.
        output_index: Index of the spent output in that transaction.
        signature: Signature over the transaction's signable message for this
                   input position, or None if not yet signed.
    """
    prev_tx_hash: bytes
    output_index: int
    signature: Optional[bytes] = None

    def __post_init__(self):
        _require_bytes("Input prev_tx_hash", self.prev_tx_hash)
        if self.signature is not None:
            _require_bytes("Input signature", self.signature)
        if not isinstance(self.output_index, int) or isinstance(self.output_index, bool):
            raise ValueError(
                f"Input output_index must be int, got {type(self.output_index).__name__}"
            )
        if self.output_index < 0:
            raise ValueError(f"Input output_index must be non-negative, got {self.output_index}")

    @property
    def utxo(self) -> UTXO:
        """The pool key this input claims."""
        return UTXO(self.prev_tx_hash, self.output_index)

    def __repr__(self) -> str:
        signed = "signed" if self.signature else "unsigned"
        return f"Input({_short(self.prev_tx_hash)}:{self.output_index}, {signed})"


def _serialize_input(inp: Input, include_signature: bool) -> str:
    part = f"in:{_hex(inp.prev_tx_hash)}:{inp.output_index}"
    if include_signature:
        part += f":{_hex(inp.signature)}"
    return part


def _serialize_output(out: Output) -> str:
    return f"out:{_normalize_decimal(out.value)}:{_hex(out.address)}"


def _serialize_tx(inputs: Tuple[Input, ...], outputs: Tuple[Output, ...]) -> bytes:
    parts = [_serialize_input(inp, include_signature=True) for inp in inputs]
    parts.extend(_serialize_output(out) for out in outputs)
    return "|".join(parts).encode()


def _compute_tx_hash(inputs: Tuple[Input, ...], outputs: Tuple[Output, ...]) -> bytes:
    """
    Compute the content hash of a transaction.

    Covers every input (including signatures) and every output, in order.
    Semantically equal values (Decimal("1.0") vs Decimal("1.00")) hash
    identically.
    """
    return hashlib.sha256(_serialize_tx(inputs, outputs)).digest()


@dataclass(frozen=True, slots=True)
class Transaction:
    """
    An immutable spend: ordered inputs, ordered outputs, and a content hash.

    The hash is computed on construction and covers signatures, so attaching a
    signature produces a new Transaction with a new hash. Use with_signature()
    for that.

    Attributes:
        inputs: Tuple of Input claims, in order
        outputs: Tuple of new Outputs, in order
        tx_hash: SHA-256 of raw_tx() (auto-computed)
    """
    inputs: Tuple[Input, ...]
    outputs: Tuple[Output, ...]
    tx_hash: bytes = field(default=b"", compare=False)

    def __post_init__(self):
        # Accept any sequence but store tuples so the record stays immutable
        if not isinstance(self.inputs, tuple):
            object.__setattr__(self, 'inputs', tuple(self.inputs))
        if not isinstance(self.outputs, tuple):
            object.__setattr__(self, 'outputs', tuple(self.outputs))
        object.__setattr__(self, 'tx_hash', _compute_tx_hash(self.inputs, self.outputs))

    def num_inputs(self) -> int:
        return len(self.inputs)

    def num_outputs(self) -> int:
        return len(self.outputs)

    def get_input(self, index: int) -> Input:
        return self.inputs[index]

    def get_output(self, index: int) -> Output:
        return self.outputs[index]

    def signable_message(self, index: int) -> bytes:
        """
        Return the bytes the owner of input `index` must sign.

        The message covers the input's position and the output it claims,
        followed by every output of the transaction. No signature is part of
        any message, so inputs can be signed in any order.

        Raises:
            IndexError: If index is out of range
        """
        if not 0 <= index < len(self.inputs):
            raise IndexError(f"input index {index} out of range for {len(self.inputs)} inputs")
        parts = [f"pos:{index}", _serialize_input(self.inputs[index], include_signature=False)]
        parts.extend(_serialize_output(out) for out in self.outputs)
        return "|".join(parts).encode()

    def raw_tx(self) -> bytes:
        """Canonical serialization of the whole transaction, signatures included."""
        return _serialize_tx(self.inputs, self.outputs)

    def with_signature(self, index: int, signature: bytes) -> Transaction:
        """
        Return a copy of this transaction with input `index` carrying `signature`.

        Raises:
            IndexError: If index is out of range
        """
        if not 0 <= index < len(self.inputs):
            raise IndexError(f"input index {index} out of range for {len(self.inputs)} inputs")
        inputs = list(self.inputs)
        inputs[index] = replace(inputs[index], signature=signature)
        return Transaction(inputs=tuple(inputs), outputs=self.outputs)

    def claimed_utxos(self) -> Iterator[UTXO]:
        """Yield the UTXO claimed by each input, in input order."""
        for inp in self.inputs:
            yield inp.utxo

    def output_total(self) -> Decimal:
        return sum((out.value for out in self.outputs), ZERO)

    def __repr__(self) -> str:
        return (f"Transaction({_short(self.tx_hash)}, "
                f"{len(self.inputs)} in, {len(self.outputs)} out)")


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class UTXOPoolView(Protocol):
    """
    Read-only interface to a pool of unspent outputs.

    Functions accepting a UTXOPoolView declare that they only read pool
    state. UTXOPool implements this protocol and also provides mutation
    methods; TxHandler.pool hands out a view that does not.
    """

    def contains(self, utxo: UTXO) -> bool:
        """Return True if the output referenced by `utxo` is unspent."""
        ...

    def get_tx_output(self, utxo: UTXO) -> Output:
        """
        Return the output referenced by `utxo`.

        Raises UTXONotFound if `utxo` is not in the pool.
        """
        ...

    def all_utxo(self) -> Set[UTXO]:
        """Return a snapshot of every UTXO in the pool."""
        ...

    def total_value(self) -> Decimal:
        """Return the summed value of every unspent output."""
        ...
