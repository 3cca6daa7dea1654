"""Core algorithms for sequence classification.

This module contains the fundamental components:
- Linear prediction (autocorrelation + Levinson-Durbin recursion)
- First-order Markov chain training and scoring
- Classification bookkeeping and reporting
"""

from .lpc import (
    LinearPredictor,
    LpcResult,
    LpcStatus,
    autocorrelation,
    levinson_durbin,
    levinson_durbin_reduce,
    lpc_analyze,
    prediction_residual
)
from .markov_model import (
    ConformityError,
    MarkovModel,
    TransitionCounts,
    load_model,
    score_models,
    train_class_models,
    train_markov_model
)
from .classification import (
    CaseOutcome,
    ClassificationEngine,
    ClassificationSummary,
    ConfusionState,
    ConsoleObserver,
    rank_candidates,
    write_summary
)

__all__ = [
    # Linear prediction
    'LinearPredictor',
    'LpcResult',
    'LpcStatus',
    'autocorrelation',
    'levinson_durbin',
    'levinson_durbin_reduce',
    'lpc_analyze',
    'prediction_residual',

    # Markov models
    'ConformityError',
    'MarkovModel',
    'TransitionCounts',
    'load_model',
    'score_models',
    'train_class_models',
    'train_markov_model',

    # Classification
    'CaseOutcome',
    'ClassificationEngine',
    'ClassificationSummary',
    'ConfusionState',
    'ConsoleObserver',
    'rank_candidates',
    'write_summary'
]
