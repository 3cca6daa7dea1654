"""
Classification Result Visualization.

Confusion-matrix heatmap and rank histogram for a finished classification run.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns

from lpc_markov.core.classification import ClassificationEngine


@dataclass
class ConfusionVisualizationConfig:
    """Configuration for classification result figures."""
    figure_size: Tuple[float, float] = (8, 6)
    font_size: int = 10
    color_map: str = 'Blues'
    normalize: bool = False


def create_confusion_heatmap(engine: ClassificationEngine,
                             class_names: Optional[Sequence[str]] = None,
                             config: Optional[ConfusionVisualizationConfig] = None) -> plt.Figure:
    """
    Heatmap of the confusion matrix restricted to classes with test cases.

    Parameters
    ----------
    engine : ClassificationEngine
        Engine after classification
    class_names : Optional[Sequence[str]]
        Labels overriding the engine's class names
    config : Optional[ConfusionVisualizationConfig]
        Visualization configuration

    Returns
    -------
    plt.Figure
        Confusion matrix figure
    """
    if config is None:
        config = ConfusionVisualizationConfig()

    frame = engine.confusion_frame(class_names)
    tested = engine.state.tested_classes()
    if tested:
        frame = frame.iloc[tested, tested]

    fmt = 'd'
    if config.normalize:
        totals = frame.sum(axis=1).replace(0, 1)
        frame = frame.div(totals, axis=0)
        fmt = '.2f'

    fig, ax = plt.subplots(figsize=config.figure_size)
    sns.heatmap(frame, annot=True, fmt=fmt, cmap=config.color_map, cbar=True,
                square=True, ax=ax, annot_kws={'size': config.font_size})
    ax.set_xlabel('Predicted class')
    ax.set_ylabel('True class')

    summary = engine.compute_summary()
    if summary is not None:
        ax.set_title(f'Confusion matrix\naccuracy {summary.accuracy:.2f}%, '
                     f'average {summary.avg_accuracy:.2f}%')
    else:
        ax.set_title('Confusion matrix (no cases)')

    plt.tight_layout()
    return fig


def create_rank_histogram(engine: ClassificationEngine,
                          config: Optional[ConfusionVisualizationConfig] = None) -> plt.Figure:
    """Bar chart of how often the true class was ranked 1st, 2nd, ..."""
    if config is None:
        config = ConfusionVisualizationConfig()

    n = engine.num_models
    counts = engine.state.result[n, 1:n + 1]
    ranks = np.arange(1, n + 1)

    fig, ax = plt.subplots(figsize=config.figure_size)
    ax.bar(ranks, counts, color=sns.color_palette(config.color_map, 3)[-1])
    ax.set_xticks(ranks)
    ax.set_xlabel('Rank of true class')
    ax.set_ylabel('Test cases')
    ax.set_title(f'Candidate order ({engine.state.num_cases} cases)')
    ax.grid(True, axis='y', alpha=0.3)

    plt.tight_layout()
    return fig


def save_figure(fig: plt.Figure,
                path: Union[str, Path],
                formats: Sequence[str] = ('png',),
                dpi: int = 300) -> List[Path]:
    """Save *fig* once per format, using *path* without its suffix as stem."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    saved = []
    for fmt in formats:
        target = path.with_suffix(f'.{fmt}')
        fig.savefig(target, dpi=dpi, bbox_inches='tight')
        saved.append(target)
    return saved
