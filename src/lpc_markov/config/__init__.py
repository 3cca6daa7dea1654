"""Configuration management for LPC Markov.

Provides global configuration and random seed management for reproducible runs.
"""

from .settings import get_config, set_config, Settings
from .random_state import set_global_seed, get_random_state, ensure_reproducibility
from .defaults import ISOLATED_WORDS_CONFIG, SPEAKER_ID_CONFIG, RESEARCH_CONFIGS, DefaultConfig

__all__ = [
    'get_config',
    'set_config',
    'set_global_seed',
    'get_random_state',
    'ensure_reproducibility',
    'Settings',
    'ISOLATED_WORDS_CONFIG',
    'SPEAKER_ID_CONFIG',
    'RESEARCH_CONFIGS',
    'DefaultConfig'
]
