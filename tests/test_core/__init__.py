"""
Core algorithm tests for lpc_markov.

Tests for:
- Autocorrelation and Levinson-Durbin recursion
- Markov chain training and scoring
- Classification bookkeeping and reporting
"""
