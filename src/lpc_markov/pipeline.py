"""High-level orchestration of a complete classification run.

Bundles data preparation, LPC analysis, model training, classification,
reporting and figure export into a single headless entry point so that
``cli.py`` and scripts can trigger a run from one configuration file.

Configuration (YAML or JSON)::

    experiment_id: demo
    output_dir: results
    settings: {preset: minimal, random_seed: 7}   # any Settings field
    data: {train_dir: seqs/train, test_dir: seqs/test}   # optional, synthetic otherwise
    lpc: {n_windows: 20, noise_level: 0.05}            # optional
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import matplotlib.pyplot as plt
from tqdm import tqdm

from lpc_markov.config import Settings, ensure_reproducibility, set_global_seed
from lpc_markov.config.defaults import get_model_memory_estimate
from lpc_markov.core.classification import ClassificationEngine, ClassificationSummary
from lpc_markov.core.lpc import LinearPredictor, LpcStatus
from lpc_markov.core.markov_model import MarkovModel, train_markov_model
from lpc_markov.data.sequence import Sequence, check_codebook_sizes, group_by_class, load_sequence_dir
from lpc_markov.data.sequence_generator import (
    create_class_models,
    generate_class_sequences,
    split_train_test,
    synthetic_window,
)
from lpc_markov.viz.confusion import create_confusion_heatmap, create_rank_histogram, save_figure

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = {".json", ".yml", ".yaml"}
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def load_config(path: Path | str) -> Dict[str, Any]:
    """Read a JSON / YAML pipeline configuration file.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If *path* has an unsupported suffix.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ValueError(f"Unsupported config format: {path.suffix}")

    if suffix == ".json":
        return json.loads(path.read_text())

    import yaml

    return yaml.safe_load(path.read_text()) or {}


def _setup_file_logging(log_path: Path) -> Tuple[logging.Handler, int]:
    """Attach a DEBUG file handler to the root logger.

    Returns the handler and the root level in force before the call, so the
    caller can undo both.
    """
    handler = logging.FileHandler(log_path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    previous_level = root.level
    root.addHandler(handler)
    if root.level > logging.INFO or root.level == logging.NOTSET:
        root.setLevel(logging.INFO)
    return handler, previous_level


def build_settings(cfg: Dict[str, Any]) -> Settings:
    """Settings from the ``settings`` section, optionally on top of a preset."""
    section = dict(cfg.get("settings", {}))
    preset = section.pop("preset", None)
    base = Settings.from_preset(preset) if preset else Settings()
    return base.update(**section) if section else base


def prepare_sequences(settings: Settings,
                      data_cfg: Dict[str, Any]) -> Tuple[List[Sequence], List[Sequence]]:
    """Load train/test sequences from disk, or sample synthetic ones."""
    if "train_dir" in data_cfg:
        train = load_sequence_dir(data_cfg["train_dir"])
        test = load_sequence_dir(data_cfg["test_dir"]) if "test_dir" in data_cfg else []
        return train, test

    generators = create_class_models(settings.n_classes, settings.codebook_size,
                                     settings.class_bias)
    sequences = generate_class_sequences(
        generators,
        settings.n_train_per_class + settings.n_test_per_class,
        settings.sequence_length_range,
        seed=settings.random_seed,
    )
    split = split_train_test(sequences, settings.n_train_per_class)
    return split["train"], split["test"]


def run_lpc_stage(settings: Settings, lpc_cfg: Dict[str, Any]) -> Dict[str, int]:
    """Analyze synthetic windows and tally the recursion outcomes."""
    n_windows = int(lpc_cfg.get("n_windows", 10))
    noise_level = float(lpc_cfg.get("noise_level", 0.05))
    predictor = LinearPredictor(settings.prediction_order, settings.lpc_method)

    tally = {status.name: 0 for status in LpcStatus}
    for idx in range(n_windows):
        freqs = (300.0 + 100.0 * idx, 1200.0 + 150.0 * idx)
        window = synthetic_window(settings.window_length, freqs, noise_level=noise_level)
        result = predictor.analyze(window)
        tally[result.status.name] += 1
        logger.debug("Window %d: status=%s residual=%.6g", idx, result.status.name,
                     result.residual_energy)
    return tally


def train_models(train: List[Sequence]) -> List[MarkovModel]:
    """Train one model per class in order of first appearance."""
    groups = group_by_class(train)
    models = []
    for class_name, group in tqdm(groups.items(), desc="Training", unit="class"):
        models.append(train_markov_model(group))
        logger.debug("Trained '%s' from %d sequences", class_name, len(group))
    return models


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------

def run_pipeline(config: Dict[str, Any] | str | Path) -> bool:  # noqa: D401
    """Run the classification pipeline.

    Stages: data preparation, LPC analysis, model training, classification
    with report and summary, and figure export. Failures in the LPC and
    figure stages are logged and do not stop the run.

    Parameters
    ----------
    config
        Either a path to a YAML/JSON configuration file **or** an already
        parsed dictionary.

    Returns
    -------
    bool
        ``True`` if training and classification completed.

    Examples
    --------
    >>> from lpc_markov.pipeline import run_pipeline
    >>> run_pipeline({'settings': {'preset': 'minimal', 'random_seed': 1}})
    True
    """
    if isinstance(config, (str, Path)):
        try:
            cfg: Dict[str, Any] = load_config(config)
        except (OSError, ValueError) as exc:
            logger.error("Failed to load configuration: %s", exc)
            return False
    else:
        cfg = dict(config)

    try:
        settings = build_settings(cfg)
    except (TypeError, ValueError) as exc:
        logger.error("Invalid settings: %s", exc)
        return False

    experiment_id = cfg.get("experiment_id", "exp")
    base_dir = Path(cfg["output_dir"]) if "output_dir" in cfg else settings.output_path
    run_dir = base_dir / experiment_id
    run_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    handler, previous_level = _setup_file_logging(run_dir / f"pipeline_{ts}.log")

    stage_success = {"data": False, "lpc": False, "train": False, "classify": False, "viz": False}
    try:
        logger.info("Starting pipeline - experiment_id=%s", experiment_id)
        if settings.random_seed is not None:
            set_global_seed(settings.random_seed)
        else:
            logger.info("No random_seed configured, using seed %d", ensure_reproducibility())

        # Stage 1 - data
        try:
            train, test = prepare_sequences(settings, cfg.get("data", {}))
            check_codebook_sizes(train + test)
            stage_success["data"] = True
            logger.info("[1/5] %d training and %d test sequences", len(train), len(test))
        except (OSError, ValueError) as exc:
            logger.exception("Data preparation failed: %s", exc)
            return False

        # Stage 2 - LPC analysis
        try:
            tally = run_lpc_stage(settings, cfg.get("lpc", {}))
            stage_success["lpc"] = True
            logger.info("[2/5] LPC order %d: %s", settings.prediction_order, tally)
        except ValueError as exc:
            logger.exception("LPC analysis failed: %s", exc)

        # Stage 3 - training
        try:
            models = train_models(train)
            models_dir = run_dir / "models"
            models_dir.mkdir(exist_ok=True)
            for idx, model in enumerate(models):
                model.save(models_dir / f"{idx:03d}_{model.class_name}.json")
            stage_success["train"] = True
            logger.info("[3/5] Trained %d class models (~%.3f MB)", len(models),
                        get_model_memory_estimate(len(models), models[0].codebook_size)
                        if models else 0.0)
        except ValueError as exc:
            logger.exception("Training failed: %s", exc)
            return False

        # Stage 4 - classification
        engine = ClassificationEngine([m.class_name for m in models])
        try:
            added = engine.classify(models, test)
            logger.info("[4/5] Classified %d sequences", added)
            with open(run_dir / "report.txt", "w", encoding="utf-8") as fp:
                summary: Optional[ClassificationSummary] = engine.report_results(
                    summary_path=run_dir / settings.summary_name, stream=fp)
            if summary is not None:
                logger.info("Accuracy %.2f%%, average per-class %.2f%%",
                            summary.accuracy, summary.avg_accuracy)
            stage_success["classify"] = True
        except ValueError as exc:
            logger.exception("Classification failed: %s", exc)
            return False

        # Stage 5 - figures
        try:
            if engine.state.num_cases > 0:
                for name, fig in (("confusion_matrix", create_confusion_heatmap(engine)),
                                  ("rank_histogram", create_rank_histogram(engine))):
                    save_figure(fig, run_dir / "figures" / name,
                                settings.export_formats, settings.figure_dpi)
                    plt.close(fig)
            stage_success["viz"] = True
            logger.info("[5/5] Figures written to %s", run_dir / "figures")
        except (OSError, ValueError) as exc:
            logger.exception("Figure export failed: %s", exc)

        logger.info("Pipeline finished - success matrix: %s", stage_success)
        return stage_success["train"] and stage_success["classify"]
    finally:
        root = logging.getLogger()
        root.removeHandler(handler)
        root.setLevel(previous_level)
        handler.close()
