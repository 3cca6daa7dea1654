"""Main configuration settings with TOML loading support."""

import logging
from dataclasses import dataclass, field, asdict
from typing import List, Tuple, Optional, Union
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ImportError:
    try:
        import tomli as tomllib  # Fallback for older Python
    except ImportError:
        tomllib = None

try:
    import tomli_w
except ImportError:
    tomli_w = None

from .defaults import LPC_METHODS, RESEARCH_CONFIGS, DefaultConfig, validate_config

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Main configuration settings for a classification run.

    Can be loaded from TOML files for user customization while providing
    sensible defaults for different scenarios.
    """

    # Data scale parameters
    codebook_size: int = 64
    n_classes: int = 10
    n_train_per_class: int = 20
    n_test_per_class: int = 10
    sequence_length_range: Tuple[int, int] = (30, 90)
    class_bias: float = 0.5

    # Analysis parameters
    prediction_order: int = 12
    lpc_method: str = "loop"
    window_length: int = 240

    # Classification output
    show_ranked: bool = False
    summary_name: str = "mm-classification.json"

    # Visualization parameters
    figure_dpi: int = 300
    export_formats: List[str] = field(default_factory=lambda: ["pdf", "png"])
    output_dir: str = "output"

    # Reproducibility
    random_seed: Optional[int] = None

    verbose: bool = False

    def __post_init__(self):
        """Validate settings after initialization."""
        self.sequence_length_range = tuple(self.sequence_length_range)

        if self.lpc_method not in LPC_METHODS:
            raise ValueError(f"Unknown lpc_method '{self.lpc_method}'. Available: {LPC_METHODS}")

        for warning in validate_config(self.to_default_config()):
            if self.verbose:
                logger.warning("Configuration warning: %s", warning)

    def to_default_config(self) -> DefaultConfig:
        return DefaultConfig(
            codebook_size=self.codebook_size,
            n_classes=self.n_classes,
            n_train_per_class=self.n_train_per_class,
            n_test_per_class=self.n_test_per_class,
            sequence_length_range=self.sequence_length_range,
            class_bias=self.class_bias,
            prediction_order=self.prediction_order,
            window_length=self.window_length,
            figure_dpi=self.figure_dpi,
            export_formats=self.export_formats
        )

    @property
    def output_path(self) -> Path:
        """Output directory, created on first access."""
        path = Path(self.output_dir)
        path.mkdir(parents=True, exist_ok=True)
        return path

    @classmethod
    def from_preset(cls, preset: str) -> 'Settings':
        """Create settings from a preset configuration.

        Parameters
        ----------
        preset : str
            Preset name ('isolated_words', 'speaker_id', 'minimal')

        Returns
        -------
        Settings
            Settings object with preset values
        """
        if preset not in RESEARCH_CONFIGS:
            raise ValueError(f"Unknown preset '{preset}'. Available: {list(RESEARCH_CONFIGS.keys())}")

        config = RESEARCH_CONFIGS[preset]
        return cls(
            codebook_size=config.codebook_size,
            n_classes=config.n_classes,
            n_train_per_class=config.n_train_per_class,
            n_test_per_class=config.n_test_per_class,
            sequence_length_range=config.sequence_length_range,
            class_bias=config.class_bias,
            prediction_order=config.prediction_order,
            window_length=config.window_length,
            figure_dpi=config.figure_dpi,
            export_formats=config.export_formats.copy()
        )

    @classmethod
    def from_toml(cls, toml_path: Union[str, Path]) -> 'Settings':
        """Load settings from TOML file.

        Sections ``[data]``, ``[analysis]``, ``[classification]``,
        ``[visualization]`` and ``[advanced]`` are flattened; top-level keys
        are accepted as well.

        Raises
        ------
        ImportError
            If tomllib is not available
        FileNotFoundError
            If TOML file doesn't exist
        """
        if tomllib is None:
            raise ImportError("tomllib not available. Install tomli for Python < 3.11")

        toml_path = Path(toml_path)
        if not toml_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {toml_path}")

        with open(toml_path, 'rb') as f:
            config_data = tomllib.load(f)

        settings_data = {}
        for section in ('data', 'analysis', 'classification', 'visualization', 'advanced'):
            if section in config_data:
                settings_data.update(config_data[section])

        for key, value in config_data.items():
            if not isinstance(value, dict):
                settings_data[key] = value

        return cls(**settings_data)

    def to_toml(self, toml_path: Union[str, Path]) -> None:
        """Save settings to TOML file.

        Raises
        ------
        ImportError
            If tomli_w is not available
        """
        if tomli_w is None:
            raise ImportError("tomli_w not available. Install tomli-w for TOML writing")

        config_data = {
            'data': {
                'codebook_size': self.codebook_size,
                'n_classes': self.n_classes,
                'n_train_per_class': self.n_train_per_class,
                'n_test_per_class': self.n_test_per_class,
                'sequence_length_range': list(self.sequence_length_range),
                'class_bias': self.class_bias
            },
            'analysis': {
                'prediction_order': self.prediction_order,
                'lpc_method': self.lpc_method,
                'window_length': self.window_length
            },
            'classification': {
                'show_ranked': self.show_ranked,
                'summary_name': self.summary_name
            },
            'visualization': {
                'figure_dpi': self.figure_dpi,
                'export_formats': self.export_formats,
                'output_dir': self.output_dir
            },
            'advanced': {
                'verbose': self.verbose
            }
        }
        # TOML has no null
        if self.random_seed is not None:
            config_data['advanced']['random_seed'] = self.random_seed

        with open(Path(toml_path), 'wb') as f:
            tomli_w.dump(config_data, f)

    def update(self, **kwargs) -> 'Settings':
        """Create new Settings with updated values."""
        current_dict = asdict(self)
        current_dict.update(kwargs)
        return Settings(**current_dict)


# Global configuration instance
_GLOBAL_CONFIG: Optional[Settings] = None


def get_config(config_path: Optional[Union[str, Path]] = None,
               preset: Optional[str] = None,
               reload: bool = False) -> Settings:
    """Get global configuration settings.

    Parameters
    ----------
    config_path : Optional[Union[str, Path]]
        Path to TOML configuration file. If None, looks for default locations.
    preset : Optional[str]
        Preset configuration name. Ignored if config_path is provided.
    reload : bool
        Force reload configuration even if already loaded

    Returns
    -------
    Settings
        Global configuration settings
    """
    global _GLOBAL_CONFIG

    if _GLOBAL_CONFIG is not None and not reload:
        return _GLOBAL_CONFIG

    if config_path is not None:
        _GLOBAL_CONFIG = Settings.from_toml(config_path)
    else:
        default_paths = [
            Path('lpc_markov.toml'),
            Path.home() / '.lpc_markov.toml',
            Path.cwd() / 'config' / 'lpc_markov.toml'
        ]

        config_loaded = False
        for path in default_paths:
            if path.exists():
                try:
                    _GLOBAL_CONFIG = Settings.from_toml(path)
                    config_loaded = True
                    break
                except (OSError, ValueError, TypeError) as e:
                    logger.warning("Could not load config from %s: %s", path, e)

        if not config_loaded:
            _GLOBAL_CONFIG = Settings.from_preset(preset or 'isolated_words')

    if _GLOBAL_CONFIG.random_seed is not None:
        from .random_state import set_global_seed
        set_global_seed(_GLOBAL_CONFIG.random_seed)

    return _GLOBAL_CONFIG


def set_config(settings: Settings) -> None:
    """Set global configuration settings."""
    global _GLOBAL_CONFIG
    _GLOBAL_CONFIG = settings

    if settings.random_seed is not None:
        from .random_state import set_global_seed
        set_global_seed(settings.random_seed)
