"""
utxo_ledger - UTXO Transaction Validation

Validates proposed transactions against a pool of unspent transaction outputs
and applies the mutually consistent subset of each epoch's batch.

Usage:
    from decimal import Decimal
    from utxo_ledger import TxHandler, UTXOPool, UTXO, Output, Input, Transaction

    pool = UTXOPool()
    pool.add_utxo(UTXO(genesis_hash, 0), Output(Decimal("10"), alice_address))

    tx = Transaction(
        inputs=[Input(genesis_hash, 0)],
        outputs=[Output(Decimal("10"), bob_address)],
    )
    tx = tx.with_signature(0, sign_message(tx.signable_message(0), alice_private))

    handler = TxHandler(pool)
    accepted = handler.handle_txs([tx])
"""

# Core types
from .core import (
    UTXO,
    Output,
    Input,
    Transaction,
    UTXOPoolView,
    SignatureVerifier,
    RejectReason,
    Rejection,
    LedgerError,
    UTXONotFound,
    TX_HASH_SIZE,
    ADDRESS_SIZE,
    SIGNATURE_SIZE,
)

# Pool
from .pool import UTXOPool, PoolView

# Signatures
from .crypto import generate_keypair, sign_message, verify_signature

# Validation and epoch processing
from .handler import TxHandler


__all__ = [
    # Core
    'UTXO',
    'Output',
    'Input',
    'Transaction',
    'UTXOPoolView',
    'SignatureVerifier',
    'RejectReason',
    'Rejection',
    'LedgerError',
    'UTXONotFound',
    'TX_HASH_SIZE',
    'ADDRESS_SIZE',
    'SIGNATURE_SIZE',
    # Pool
    'UTXOPool',
    'PoolView',
    # Signatures
    'generate_keypair',
    'sign_message',
    'verify_signature',
    # Handler
    'TxHandler',
]

__version__ = '1.0.0'
