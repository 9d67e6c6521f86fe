"""
Test support utilities for joinery tests.

Helpers that are not fixtures but are shared across test modules.
"""
