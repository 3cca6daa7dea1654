"""Global random seed management for reproducible synthetic runs."""

import hashlib
import os
import random
from typing import Any, Dict, Optional

import numpy as np

SEED_ENV_VAR = 'LPC_MARKOV_SEED'

# Global random state storage
_GLOBAL_SEED: Optional[int] = None
_RNG_STATE: Optional[Dict[str, Any]] = None


def set_global_seed(seed: int) -> None:
    """Set global random seed for Python's random and NumPy.

    Parameters
    ----------
    seed : int
        Random seed value for reproducibility

    Examples
    --------
    >>> set_global_seed(42)
    >>> # All subsequent random operations will be reproducible
    """
    global _GLOBAL_SEED, _RNG_STATE

    _GLOBAL_SEED = seed
    random.seed(seed)
    np.random.seed(seed)

    _RNG_STATE = {
        'seed': seed,
        'python_state': random.getstate(),
        'numpy_state': np.random.get_state()
    }


def get_global_seed() -> Optional[int]:
    """Current global seed, or None if not set."""
    return _GLOBAL_SEED


def get_random_state() -> Optional[Dict[str, Any]]:
    """RNG states captured by the last set_global_seed() call."""
    return _RNG_STATE


def create_deterministic_seed(base_string: str) -> int:
    """Create a deterministic seed from a string.

    Useful for deriving reproducible seeds from experiment names.

    Examples
    --------
    >>> seed = create_deterministic_seed("isolated_words_v2")
    >>> set_global_seed(seed)
    """
    hash_hex = hashlib.sha256(base_string.encode()).hexdigest()
    seed = int(hash_hex[:8], 16)
    return seed % (2**31 - 1)


def get_environment_seed(default: int = 42) -> int:
    """Seed from the LPC_MARKOV_SEED environment variable.

    Non-integer values are hashed into a seed; unset falls back to *default*.
    """
    env_seed = os.environ.get(SEED_ENV_VAR)

    if env_seed is not None:
        try:
            return int(env_seed)
        except ValueError:
            return create_deterministic_seed(env_seed)

    return default


def ensure_reproducibility() -> int:
    """Set the global seed from the environment unless one is already set."""
    if _GLOBAL_SEED is None:
        seed = get_environment_seed()
        set_global_seed(seed)
        return seed
    return _GLOBAL_SEED
