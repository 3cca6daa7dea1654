"""Labelled symbol sequences and their JSON representation.

A sequence file holds one record::

    {"class_name": "yes", "codebook_size": 64, "symbols": [3, 17, 17, 5, ...]}
"""

import json
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Union

import numpy as np


@dataclass
class Sequence:
    """Quantized symbol sequence with its class label.

    Attributes
    ----------
    class_name : str
        Class label of the sequence
    codebook_size : int
        Alphabet cardinality K; symbols lie in [0, K)
    symbols : np.ndarray, shape (T,)
        Symbol indices
    """
    class_name: str
    codebook_size: int
    symbols: np.ndarray

    def __post_init__(self):
        self.codebook_size = int(self.codebook_size)
        if self.codebook_size < 1:
            raise ValueError(f"Codebook size must be positive, got {self.codebook_size}")
        self.symbols = np.asarray(self.symbols, dtype=np.int64)
        if self.symbols.ndim != 1:
            raise ValueError(f"Symbols must be one-dimensional, got shape {self.symbols.shape}")

    def __len__(self) -> int:
        return len(self.symbols)

    def validate(self) -> None:
        """Check the sequence is non-empty and every symbol is in range."""
        if len(self.symbols) == 0:
            raise ValueError(f"Empty sequence for class '{self.class_name}'")
        out_of_range = (self.symbols < 0) | (self.symbols >= self.codebook_size)
        if np.any(out_of_range):
            bad = int(self.symbols[np.argmax(out_of_range)])
            raise ValueError(f"Symbol {bad} out of range [0, {self.codebook_size}) "
                             f"in sequence of class '{self.class_name}'")

    def to_dict(self) -> Dict:
        return {
            'class_name': self.class_name,
            'codebook_size': self.codebook_size,
            'symbols': self.symbols.tolist(),
        }


def load_sequence(path: Union[str, Path]) -> Sequence:
    """Load and validate a sequence JSON file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Sequence file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    missing = {'class_name', 'codebook_size', 'symbols'} - set(data)
    if missing:
        raise ValueError(f"Sequence file {path} missing keys: {sorted(missing)}")

    seq = Sequence(data['class_name'], data['codebook_size'], data['symbols'])
    seq.validate()
    return seq


def save_sequence(seq: Sequence, path: Union[str, Path]) -> None:
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(seq.to_dict(), f)


def load_sequences(paths: Iterable[Union[str, Path]]) -> List[Sequence]:
    return [load_sequence(p) for p in paths]


def load_sequence_dir(directory: Union[str, Path], pattern: str = '*.json') -> List[Sequence]:
    """Load every sequence file under *directory* in sorted path order."""
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Sequence directory not found: {directory}")
    return load_sequences(sorted(directory.rglob(pattern)))


def group_by_class(sequences: Iterable[Sequence]) -> Dict[str, List[Sequence]]:
    """Group sequences by class name, keeping first-appearance order."""
    groups: Dict[str, List[Sequence]] = OrderedDict()
    for seq in sequences:
        groups.setdefault(seq.class_name, []).append(seq)
    return groups


def check_codebook_sizes(sequences: Iterable[Sequence]) -> int:
    """Return the codebook size shared by all sequences.

    Raises
    ------
    ValueError
        If the sequences are empty or use different codebook sizes
    """
    sizes = {seq.codebook_size for seq in sequences}
    if not sizes:
        raise ValueError("No sequences given")
    if len(sizes) > 1:
        raise ValueError(f"Sequences use different codebook sizes: {sorted(sizes)}")
    return sizes.pop()
