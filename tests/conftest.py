"""
conftest.py - Shared pytest fixtures for UTXO ledger tests

Provides common fixtures used across unit, conformance and functional tests:
- Named wallets (real ed25519 keypairs)
- Funded pools
- Handlers bound to those pools
"""

import pytest
from decimal import Decimal

from utxo_ledger import TxHandler, UTXOPool

from tests.wallets import Wallet, fund


# =============================================================================
# WALLET FIXTURES
# =============================================================================

# Keypairs are session-scoped so hypothesis tests can use them safely.

@pytest.fixture(scope="session")
def alice():
    return Wallet.create("alice")


@pytest.fixture(scope="session")
def bob():
    return Wallet.create("bob")


@pytest.fixture(scope="session")
def carol():
    return Wallet.create("carol")


# =============================================================================
# POOL FIXTURES
# =============================================================================

@pytest.fixture
def empty_pool():
    """Pool with no unspent outputs."""
    return UTXOPool()


@pytest.fixture
def funded(alice, bob):
    """
    Pool where alice holds 10 at utxos[0] and bob holds 5 at utxos[1].

    Returns:
        (pool, utxos)
    """
    return fund([(Decimal("10"), alice), (Decimal("5"), bob)])


@pytest.fixture
def handler(funded):
    """Quiet handler over the funded pool."""
    pool, _ = funded
    return TxHandler(pool, verbose=False)
