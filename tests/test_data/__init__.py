"""
Data handling tests for lpc_markov.

Tests for:
- Sequence records and JSON files
- Synthetic sequence and window generation
"""
