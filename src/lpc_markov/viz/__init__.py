"""
LPC Markov Visualization Module.

Figures summarising a classification run:
- confusion: confusion-matrix heatmap and rank histogram
"""

from .confusion import (
    ConfusionVisualizationConfig,
    create_confusion_heatmap,
    create_rank_histogram,
    save_figure
)

__all__ = [
    'ConfusionVisualizationConfig',
    'create_confusion_heatmap',
    'create_rank_histogram',
    'save_figure'
]
