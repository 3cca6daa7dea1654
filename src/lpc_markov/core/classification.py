"""Classification bookkeeping: ranking, confusion matrix and accuracy report.

The engine turns per-model scores of labelled test cases into a
:class:`ConfusionState`:

- ``result[c][0]`` counts test cases of class c, ``result[c][r]`` counts cases
  whose true class was ranked r-th (r = 1 is a correct classification).
  Row ``num_models`` holds the totals over all classes.
- ``confusion[c][m]`` counts cases of class c whose best model was m.

Console feedback is left to an optional observer so that scoring stays
independent of any output stream.
"""

import json
import logging
import math
import sys
import threading
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence as SequenceType, TextIO, Union

import numpy as np
import pandas as pd

from lpc_markov.core.markov_model import ConformityError, MarkovModel, score_models
from lpc_markov.data.sequence import Sequence

logger = logging.getLogger(__name__)


@dataclass
class ConfusionState:
    """Mutable counters of one classification run.

    Attributes
    ----------
    result : np.ndarray, shape (M+1, M+1)
        Test counts (column 0) and rank histogram (columns 1..M) per class;
        row M holds the totals
    confusion : np.ndarray, shape (M, M)
        True class x predicted class counts
    """
    result: np.ndarray
    confusion: np.ndarray

    @classmethod
    def empty(cls, num_models: int) -> 'ConfusionState':
        return cls(
            result=np.zeros((num_models + 1, num_models + 1), dtype=np.int64),
            confusion=np.zeros((num_models, num_models), dtype=np.int64),
        )

    @property
    def num_models(self) -> int:
        return self.confusion.shape[0]

    @property
    def num_cases(self) -> int:
        return int(self.result[self.num_models, 0])

    def tested_classes(self) -> List[int]:
        return [c for c in range(self.num_models) if self.result[c, 0] > 0]


@dataclass(frozen=True)
class CaseOutcome:
    """What a single add_case call recorded."""
    class_id: int
    scores: tuple
    ranking: tuple
    rank: int
    label: Optional[str] = None

    @property
    def correct(self) -> bool:
        return self.rank == 1

    @property
    def best(self) -> int:
        return self.ranking[0]


@dataclass
class ClassificationSummary:
    """Overall and average per-class accuracy, both in percent."""
    accuracy: float
    avg_accuracy: float

    @property
    def error_rate(self) -> float:
        return 100.0 - self.avg_accuracy


def rank_candidates(scores: SequenceType[float]) -> List[int]:
    """Model ids ordered from highest to lowest score.

    Equal scores keep model order, so the lowest model index wins a tie.
    """
    scores = [float(s) for s in scores]
    if any(math.isnan(s) for s in scores):
        raise ValueError(f"Scores contain NaN: {scores}")
    return sorted(range(len(scores)), key=lambda m: -scores[m])


def write_summary(summary: ClassificationSummary, path: Union[str, Path]) -> Path:
    """Persist the summary as JSON and return the written path."""
    path = Path(path)
    if path.parent != Path('.'):
        path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as fp:
        json.dump(asdict(summary), fp, indent=2)
    return path


class ClassificationEngine:
    """Accumulates ranked classification results for a fixed list of models.

    Parameters
    ----------
    class_names : Sequence[str]
        One class name per model, in model order
    observer : Optional[Callable[[CaseOutcome], None]]
        Called once per classified case
    state : Optional[ConfusionState]
        Existing counters to continue from; a fresh state by default

    Notes
    -----
    ``add_case`` is serialised by an internal lock. Reports should only be
    produced after all cases have been added.
    """

    def __init__(self,
                 class_names: SequenceType[str],
                 observer: Optional[Callable[[CaseOutcome], None]] = None,
                 state: Optional[ConfusionState] = None):
        if len(class_names) == 0:
            raise ValueError("At least one class is required")
        self.class_names = list(class_names)
        self.observer = observer
        if state is None:
            state = ConfusionState.empty(len(self.class_names))
        elif state.num_models != len(self.class_names):
            raise ValueError(f"State has {state.num_models} models, "
                             f"expected {len(self.class_names)}")
        self.state = state
        self._lock = threading.Lock()

    @property
    def num_models(self) -> int:
        return len(self.class_names)

    def reset(self) -> None:
        with self._lock:
            self.state = ConfusionState.empty(self.num_models)

    def add_case(self, class_id: int, scores: SequenceType[float],
                 label: Optional[str] = None) -> CaseOutcome:
        """Record one test case.

        Parameters
        ----------
        class_id : int
            Index of the true class
        scores : Sequence[float]
            Log-probability under each model, in model order
        label : Optional[str]
            Case identifier passed through to the observer

        Returns
        -------
        CaseOutcome
            Ranking and rank of the true class
        """
        n = self.num_models
        if len(scores) != n:
            raise ValueError(f"Expected {n} scores, got {len(scores)}")
        if not 0 <= class_id < n:
            raise ValueError(f"class_id {class_id} out of range [0, {n})")

        ranking = rank_candidates(scores)
        rank = ranking.index(class_id) + 1
        outcome = CaseOutcome(class_id=class_id,
                              scores=tuple(float(s) for s in scores),
                              ranking=tuple(ranking),
                              rank=rank,
                              label=label)

        with self._lock:
            result = self.state.result
            result[n, 0] += 1
            result[class_id, 0] += 1
            self.state.confusion[class_id, outcome.best] += 1
            result[n, rank] += 1
            result[class_id, rank] += 1

        if self.observer is not None:
            self.observer(outcome)
        return outcome

    def classify(self,
                 models: SequenceType[MarkovModel],
                 sequences: Iterable[Sequence],
                 label_fn: Optional[Callable[[Sequence], str]] = None) -> int:
        """Score each sequence against every model and record it.

        Sequences whose class has no model are skipped.

        Returns
        -------
        int
            Number of cases added
        """
        if [m.class_name for m in models] != self.class_names:
            raise ValueError("Models do not match the engine's class names")

        class_ids = {name: idx for idx, name in reversed(list(enumerate(self.class_names)))}
        added = 0
        for seq in sequences:
            class_id = class_ids.get(seq.class_name)
            if class_id is None:
                logger.debug("Skipping sequence of unknown class '%s'", seq.class_name)
                continue
            codebook_size = models[class_id].codebook_size
            if seq.codebook_size != codebook_size:
                raise ConformityError("codebook size", codebook_size, seq.codebook_size)
            label = label_fn(seq) if label_fn is not None else None
            self.add_case(class_id, score_models(models, seq), label=label)
            added += 1
        return added

    def compute_summary(self) -> Optional[ClassificationSummary]:
        """Overall and unweighted per-class accuracy, or None without cases.

        The per-class average only includes classes with at least one test.
        """
        if self.state.num_cases == 0:
            return None
        result = self.state.result
        n = self.num_models
        tested = self.state.tested_classes()
        per_class = [result[c, 1] / result[c, 0] for c in tested]
        return ClassificationSummary(
            accuracy=float(100.0 * result[n, 1] / result[n, 0]),
            avg_accuracy=float(100.0 * np.mean(per_class)),
        )

    def format_report(self, class_names: Optional[SequenceType[str]] = None) -> str:
        """Confusion matrix and per-class accuracy table as text."""
        if self.state.num_cases == 0:
            return ""
        names = list(class_names) if class_names is not None else self.class_names
        result = self.state.result
        confusion = self.state.confusion
        n = self.num_models
        tested = self.state.tested_classes()

        margin = max(len(names[c]) for c in tested) + 2
        pad = f"{'':{margin}} "
        lines = ["", "", pad + "Confusion matrix:"]
        lines.append(pad + "     " + "".join(f"{j:>3} " for j in tested) + "    tests   errors")
        for i in tested:
            errors = sum(int(confusion[i, j]) for j in tested if j != i)
            cells = "".join(f"{int(confusion[i, j]):>3} " for j in tested)
            lines.append("")
            lines.append(f"{names[i]:<{margin}} {i:>3}  {cells}{int(result[i, 0]):>8}{errors:>8}")

        lines.extend(["", "", pad + "class     accuracy    tests      candidate order"])
        for class_id in tested + [n]:
            num_tests = int(result[class_id, 0])
            acc = result[class_id, 1] / num_tests
            if class_id < n:
                prefix = f"{names[class_id]:<{margin}}   {class_id:3}    "
            else:
                lines.append("")
                prefix = pad + "  TOTAL  "
            ranks = "".join(f"{int(result[class_id, r]):3} " for r in range(1, n + 1))
            lines.append(f"{prefix}  {100.0 * acc:6.2f}%   {num_tests:3}        {ranks}")

        summary = self.compute_summary()
        lines.append(f"  avg_accuracy  {summary.avg_accuracy}%")
        lines.append(f"    error_rate  {summary.error_rate}%")
        lines.append("")
        return "\n".join(lines)

    def report_results(self,
                       class_names: Optional[SequenceType[str]] = None,
                       summary_path: Optional[Union[str, Path]] = None,
                       stream: Optional[TextIO] = None) -> Optional[ClassificationSummary]:
        """Print the report and persist the summary.

        Does nothing and returns None if no case has been classified.
        """
        summary = self.compute_summary()
        if summary is None:
            return None

        stream = stream if stream is not None else sys.stdout
        stream.write(self.format_report(class_names) + "\n")
        stream.flush()

        if summary_path is not None:
            path = write_summary(summary, summary_path)
            logger.info("Summary written to %s", path)
        return summary

    def confusion_frame(self, class_names: Optional[SequenceType[str]] = None) -> pd.DataFrame:
        """Confusion matrix labelled by class name (rows true, columns predicted)."""
        names = list(class_names) if class_names is not None else self.class_names
        frame = pd.DataFrame(self.state.confusion.copy(), index=names, columns=names)
        frame.index.name = 'true'
        frame.columns.name = 'predicted'
        return frame


@dataclass
class ConsoleObserver:
    """Writes a progress glyph per case and, optionally, a ranked breakdown.

    Correct cases print ``*`` and wrong ones ``_``. With ``show_ranked`` every
    wrong case is followed by the candidates from best down to the true class.
    """
    class_names: List[str]
    stream: TextIO = field(default_factory=lambda: sys.stdout)
    show_ranked: bool = False

    def __call__(self, outcome: CaseOutcome) -> None:
        self.stream.write("*" if outcome.correct else "_")
        if self.show_ranked and not outcome.correct:
            self.stream.write("\n" + self.format_breakdown(outcome) + "\n")
        self.stream.flush()

    def format_breakdown(self, outcome: CaseOutcome) -> str:
        lines = [outcome.label or f"class_id={outcome.class_id}"]
        for index, model_id in enumerate(outcome.ranking):
            mark = "*" if model_id == outcome.class_id else ""
            lines.append(f"  [{index:>2}] {mark:1} model: <{model_id:>2}>  "
                         f"{outcome.scores[model_id]:e}  : '{self.class_names[model_id]}'  "
                         f"r={index + 1}")
            if model_id == outcome.class_id:
                break
        return "\n".join(lines) + "\n"
