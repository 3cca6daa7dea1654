"""First-order discrete Markov chains for sequence classification.

One :class:`MarkovModel` is trained per class from labelled symbol sequences
using add-one (Laplace) smoothing over both the initial distribution and each
row of the transition matrix, so every in-range sequence has a finite
log-likelihood.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence as SequenceType, Union

import numpy as np

from lpc_markov.data.sequence import Sequence, group_by_class

logger = logging.getLogger(__name__)


class ConformityError(ValueError):
    """Training sequences disagree on codebook size or class name."""

    def __init__(self, field: str, expected, actual):
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(f"conformity error: {field}: {expected} != {actual}")


@dataclass
class TransitionCounts:
    """Raw counts collected from one or more sequences.

    Counts are additive, so sequences can be counted independently and
    merged afterwards.

    Attributes
    ----------
    initial : np.ndarray, shape (K,)
        Number of sequences starting with each symbol
    pairs : np.ndarray, shape (K, K)
        Number of observed s_t -> s_{t+1} transitions
    outgoing : np.ndarray, shape (K,)
        Number of transitions leaving each symbol
    n_sequences : int
        Number of sequences counted
    """
    initial: np.ndarray
    pairs: np.ndarray
    outgoing: np.ndarray
    n_sequences: int = 0

    @classmethod
    def empty(cls, codebook_size: int) -> 'TransitionCounts':
        return cls(
            initial=np.zeros(codebook_size, dtype=np.int64),
            pairs=np.zeros((codebook_size, codebook_size), dtype=np.int64),
            outgoing=np.zeros(codebook_size, dtype=np.int64),
        )

    @classmethod
    def from_symbols(cls, symbols: np.ndarray, codebook_size: int) -> 'TransitionCounts':
        counts = cls.empty(codebook_size)
        counts.initial[symbols[0]] += 1
        np.add.at(counts.pairs, (symbols[:-1], symbols[1:]), 1)
        np.add.at(counts.outgoing, symbols[:-1], 1)
        counts.n_sequences = 1
        return counts

    def merge(self, other: 'TransitionCounts') -> 'TransitionCounts':
        return TransitionCounts(
            initial=self.initial + other.initial,
            pairs=self.pairs + other.pairs,
            outgoing=self.outgoing + other.outgoing,
            n_sequences=self.n_sequences + other.n_sequences,
        )


@dataclass
class MarkovModel:
    """Trained first-order Markov chain for one class.

    Attributes
    ----------
    class_name : str
        Class label
    pi : np.ndarray, shape (K,)
        Initial-state probabilities
    a : np.ndarray, shape (K, K)
        Transition probabilities, a[i, j] = P(s_{t+1} = j | s_t = i)
    """
    class_name: str
    pi: np.ndarray
    a: np.ndarray

    def __post_init__(self):
        self.pi = np.array(self.pi, dtype=np.float64)
        self.a = np.array(self.a, dtype=np.float64)
        k = self.pi.shape[0]
        if self.pi.ndim != 1 or self.a.shape != (k, k):
            raise ValueError(f"pi must be (K,) and a (K, K); got {self.pi.shape} and {self.a.shape}")
        self.pi.setflags(write=False)
        self.a.setflags(write=False)

    @property
    def codebook_size(self) -> int:
        return self.pi.shape[0]

    @classmethod
    def train(cls, sequences: SequenceType[Sequence]) -> 'MarkovModel':
        return train_markov_model(sequences)

    def log_prob_sequence(self, seq: Union[Sequence, SequenceType[int], np.ndarray]) -> float:
        """Base-10 log probability of generating the symbol sequence.

        log10(pi[s_0]) + sum_t log10(a[s_t, s_{t+1}]). Symbols must lie in
        [0, codebook_size).
        """
        symbols = seq.symbols if isinstance(seq, Sequence) else np.asarray(seq, dtype=np.int64)
        with np.errstate(divide='ignore'):
            log_p = np.log10(self.pi[symbols[0]])
            log_p += np.sum(np.log10(self.a[symbols[:-1], symbols[1:]]))
        return float(log_p)

    def to_dict(self) -> Dict[str, Any]:
        return {"class_name": self.class_name, "pi": self.pi.tolist(), "a": self.a.tolist()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MarkovModel':
        missing = {"class_name", "pi", "a"} - set(data)
        if missing:
            raise ValueError(f"Model record missing keys: {sorted(missing)}")
        return cls(class_name=data["class_name"], pi=data["pi"], a=data["a"])

    def save(self, path: Union[str, Path]) -> None:
        """Write the model as JSON."""
        with open(path, "w", encoding="utf-8") as fp:
            json.dump(self.to_dict(), fp)

    def show(self) -> str:
        """Text dump of the model parameters."""
        lines = [f"# class_name='{self.class_name}', codebook_size={self.codebook_size}",
                 "pi = " + ", ".join(str(p) for p in self.pi),
                 " A = "]
        for row in self.a:
            lines.append("     " + ", ".join(str(p) for p in row))
        return "\n".join(lines)


def check_conformity(reference: Sequence, seq: Sequence) -> None:
    """Raise ConformityError if *seq* differs from *reference* in size or class."""
    if reference.codebook_size != seq.codebook_size:
        raise ConformityError("codebook size", reference.codebook_size, seq.codebook_size)
    if reference.class_name != seq.class_name:
        raise ConformityError("class name", reference.class_name, seq.class_name)


def train_markov_model(sequences: SequenceType[Sequence]) -> MarkovModel:
    """Train a class model from sequences sharing one class name and codebook.

    The first sequence fixes the expected class name and codebook size.

    Parameters
    ----------
    sequences : Sequence[Sequence]
        Training sequences for a single class

    Returns
    -------
    MarkovModel
        Laplace-smoothed model

    Raises
    ------
    ValueError
        If no sequences are given
    ConformityError
        If any sequence differs from the first in codebook size or class name
    """
    if len(sequences) == 0:
        raise ValueError("At least one training sequence is required")

    reference = sequences[0]
    codebook_size = reference.codebook_size

    counts = TransitionCounts.empty(codebook_size)
    for seq in sequences:
        check_conformity(reference, seq)
        counts = counts.merge(TransitionCounts.from_symbols(seq.symbols, codebook_size))

    logger.debug("Counted %d sequences for class '%s' (%d transitions)",
                 counts.n_sequences, reference.class_name, int(counts.outgoing.sum()))

    pi = (1.0 + counts.initial) / (counts.n_sequences + codebook_size)
    a = (1.0 + counts.pairs) / (counts.outgoing[:, np.newaxis] + codebook_size)

    return MarkovModel(class_name=reference.class_name, pi=pi, a=a)


def score_models(models: Iterable[MarkovModel], seq: Sequence) -> np.ndarray:
    """Log-probability of *seq* under each model, in model order."""
    return np.array([model.log_prob_sequence(seq) for model in models])


def train_class_models(sequences: Iterable[Sequence]) -> List[MarkovModel]:
    """Train one model per class name, in order of first appearance."""
    return [train_markov_model(group) for group in group_by_class(sequences).values()]


def load_model(path: Union[str, Path]) -> MarkovModel:
    """Read a model written by :meth:`MarkovModel.save`."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Model file not found: {path}")
    with open(path, "r", encoding="utf-8") as fp:
        return MarkovModel.from_dict(json.load(fp))
