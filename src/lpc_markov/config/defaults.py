"""Default configuration parameters for different classification scenarios."""

from dataclasses import dataclass
from typing import List, Tuple


@dataclass
class DefaultConfig:
    """Base configuration structure for a classification run."""

    # Data scale parameters
    codebook_size: int
    n_classes: int
    n_train_per_class: int
    n_test_per_class: int
    sequence_length_range: Tuple[int, int]
    class_bias: float

    # Analysis parameters
    prediction_order: int
    window_length: int

    # Visualization parameters
    figure_dpi: int
    export_formats: List[str]


# Isolated word recognition (~64 codewords, 10 words)
ISOLATED_WORDS_CONFIG = DefaultConfig(
    codebook_size=64,
    n_classes=10,
    n_train_per_class=20,
    n_test_per_class=10,
    sequence_length_range=(30, 90),  # frames per utterance
    class_bias=0.5,

    prediction_order=12,  # 8 kHz speech
    window_length=240,  # 30 ms at 8 kHz

    figure_dpi=300,
    export_formats=["pdf", "png"]
)

# Speaker identification (larger codebook, longer utterances)
SPEAKER_ID_CONFIG = DefaultConfig(
    codebook_size=128,
    n_classes=20,
    n_train_per_class=40,
    n_test_per_class=20,
    sequence_length_range=(100, 300),
    class_bias=0.4,

    prediction_order=16,
    window_length=320,

    figure_dpi=300,
    export_formats=["pdf", "png"]
)

# Scenario configurations
RESEARCH_CONFIGS = {
    "isolated_words": ISOLATED_WORDS_CONFIG,
    "speaker_id": SPEAKER_ID_CONFIG,
    "minimal": DefaultConfig(
        codebook_size=4,
        n_classes=3,
        n_train_per_class=10,
        n_test_per_class=5,
        sequence_length_range=(10, 30),
        class_bias=0.7,
        prediction_order=4,
        window_length=64,
        figure_dpi=150,
        export_formats=["png"]
    )
}

LPC_METHODS = ["loop", "reduce"]

# Codebook size constraints
MIN_CODEBOOK_SIZE = 2
RECOMMENDED_MAX_CODEBOOK = 1024  # K x K transition matrix per class

# Prediction order guidelines
MAX_RECOMMENDED_ORDER = 40


def get_model_memory_estimate(n_classes: int, codebook_size: int) -> float:
    """Estimate memory for all class models in MB."""
    per_model = (codebook_size ** 2 + codebook_size) * 8
    return n_classes * per_model / 1024 ** 2


def validate_config(config: DefaultConfig) -> List[str]:
    """Validate configuration parameters and return list of warnings."""
    warnings = []

    if config.codebook_size < MIN_CODEBOOK_SIZE:
        warnings.append(f"Codebook size {config.codebook_size} is below minimum {MIN_CODEBOOK_SIZE}")

    if config.codebook_size > RECOMMENDED_MAX_CODEBOOK:
        warnings.append(f"Codebook size {config.codebook_size} may cause performance issues")

    if config.prediction_order > MAX_RECOMMENDED_ORDER:
        warnings.append(f"Prediction order {config.prediction_order} is very high, "
                        f"residual energy may become non-positive")

    if config.window_length <= config.prediction_order:
        warnings.append(f"Window length {config.window_length} must exceed "
                        f"prediction order {config.prediction_order}")

    low, high = config.sequence_length_range
    if low < 1 or high < low:
        warnings.append(f"Invalid sequence length range {config.sequence_length_range}")

    if not 0.0 <= config.class_bias <= 1.0:
        warnings.append(f"Class bias {config.class_bias} outside [0, 1]")

    if config.n_test_per_class < 1:
        warnings.append("No test sequences per class, nothing will be classified")

    return warnings
