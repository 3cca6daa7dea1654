"""Sequence data handling.

Key Components
--------------
- sequence: the labelled symbol sequence type and its JSON files
- sequence_generator: synthetic class models, sequences and sample windows
  (import from ``lpc_markov.data.sequence_generator``)
"""

from .sequence import (
    Sequence,
    check_codebook_sizes,
    group_by_class,
    load_sequence,
    load_sequence_dir,
    load_sequences,
    save_sequence
)

__all__ = [
    'Sequence',
    'check_codebook_sizes',
    'group_by_class',
    'load_sequence',
    'load_sequence_dir',
    'load_sequences',
    'save_sequence'
]
