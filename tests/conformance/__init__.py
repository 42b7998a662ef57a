"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the UTXO ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. non_mutation.py - The caller's pool is never touched
2. purity.py - Validation never changes state
3. double_spend.py - An output is spent at most once
4. conservation.py - Transactions never create value
5. ordering.py - Batch results are a deterministic function of order
6. rejection.py - Rejected transactions leave no trace
7. canonicalization.py - Content-addressable identity

These tests use hypothesis for property-based testing.
"""
