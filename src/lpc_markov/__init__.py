"""
LPC Markov - linear-prediction analysis and Markov-chain sequence classification.

This package provides the analysis kernel and the per-class Markov models used
to classify quantized signal sequences.
"""

__version__ = "0.1.0"
