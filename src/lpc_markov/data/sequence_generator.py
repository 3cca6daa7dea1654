"""Synthetic data for demos and tests.

Provides biased per-class Markov chains, sequences sampled from them, and
windowed sinusoidal sample frames for the linear-prediction kernel.
"""

from typing import Dict, List, Optional, Sequence as SequenceType, Tuple

import numpy as np

from lpc_markov.core.markov_model import MarkovModel
from lpc_markov.data.sequence import Sequence


def create_class_model(class_name: str,
                       codebook_size: int,
                       favored_symbols: SequenceType[int],
                       strength: float = 0.6) -> MarkovModel:
    """
    Create a chain that prefers staying within a set of symbols.

    From any state, a fraction *strength* of the probability mass goes to the
    favored symbols (spread evenly) and the rest is spread over all symbols.

    Parameters
    ----------
    class_name : str
        Class label
    codebook_size : int
        Alphabet size K
    favored_symbols : Sequence[int]
        Symbols the class tends to emit
    strength : float
        Extra mass on favored symbols, in [0, 1]

    Returns
    -------
    MarkovModel
        Generating model for the class
    """
    if not 0.0 <= strength <= 1.0:
        raise ValueError(f"strength must be in [0, 1], got {strength}")
    favored = np.unique(np.asarray(favored_symbols, dtype=int))
    if favored.size == 0 or favored.min() < 0 or favored.max() >= codebook_size:
        raise ValueError(f"favored_symbols must be non-empty and in [0, {codebook_size})")

    row = np.full(codebook_size, (1.0 - strength) / codebook_size)
    row[favored] += strength / favored.size
    a = np.tile(row, (codebook_size, 1))
    return MarkovModel(class_name=class_name, pi=row.copy(), a=a)


def generate_sequence(model: MarkovModel,
                      length: int,
                      seed: Optional[int] = None) -> Sequence:
    """Sample a sequence of *length* symbols from *model*."""
    if length < 1:
        raise ValueError(f"length must be at least 1, got {length}")
    if seed is not None:
        np.random.seed(seed)

    k = model.codebook_size
    symbols = np.zeros(length, dtype=np.int64)
    symbols[0] = np.random.choice(k, p=model.pi)
    for t in range(1, length):
        symbols[t] = np.random.choice(k, p=model.a[symbols[t - 1]])
    return Sequence(model.class_name, k, symbols)


def generate_class_sequences(models: SequenceType[MarkovModel],
                             n_per_class: int,
                             length_range: Tuple[int, int] = (20, 60),
                             seed: Optional[int] = None) -> List[Sequence]:
    """
    Sample *n_per_class* sequences from each model.

    Lengths are drawn uniformly from *length_range* (inclusive). Output is
    ordered by class, then by draw.
    """
    if seed is not None:
        np.random.seed(seed)
    low, high = length_range
    sequences = []
    for model in models:
        for _ in range(n_per_class):
            length = np.random.randint(low, high + 1)
            sequences.append(generate_sequence(model, length))
    return sequences


def create_class_models(n_classes: int,
                        codebook_size: int,
                        strength: float = 0.6) -> List[MarkovModel]:
    """One generating model per class, each favoring a different slice of the codebook."""
    if n_classes < 1:
        raise ValueError("n_classes must be at least 1")
    slices = np.array_split(np.arange(codebook_size), min(n_classes, codebook_size))
    return [
        create_class_model(f"class_{c}", codebook_size, slices[c % len(slices)], strength)
        for c in range(n_classes)
    ]


def synthetic_window(n: int,
                     frequencies: SequenceType[float] = (500.0, 1500.0),
                     sample_rate: float = 8000.0,
                     noise_level: float = 0.0,
                     seed: Optional[int] = None) -> np.ndarray:
    """Hann-windowed sum of sinusoids, optionally with white noise."""
    if seed is not None:
        np.random.seed(seed)
    t = np.arange(n) / sample_rate
    x = np.zeros(n)
    for freq in frequencies:
        x += np.sin(2 * np.pi * freq * t)
    if noise_level > 0:
        x += noise_level * np.random.randn(n)
    return x * np.hanning(n)


def split_train_test(sequences: SequenceType[Sequence],
                     n_train_per_class: int) -> Dict[str, List[Sequence]]:
    """Split class-ordered sequences into the first n per class and the rest."""
    split: Dict[str, List[Sequence]] = {'train': [], 'test': []}
    seen: Dict[str, int] = {}
    for seq in sequences:
        count = seen.get(seq.class_name, 0)
        split['train' if count < n_train_per_class else 'test'].append(seq)
        seen[seq.class_name] = count + 1
    return split
