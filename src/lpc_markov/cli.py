from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

import numpy as np

LOG_DIR = Path("logs")


def _setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """Configure root logger to log to stderr and a log file.

    Args:
        verbose: If ``True`` set console log level to ``DEBUG`` else ``INFO``.
        log_file: Optional path to a log file. If ``None`` a timestamped file is
            created under ``logs/``.
    """
    if log_file is None:
        LOG_DIR.mkdir(exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = LOG_DIR / f"cli_{timestamp}.log"

    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    handlers = []

    # Console handler
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(logging.Formatter(log_format))
    handlers.append(console_handler)

    # File handler (always DEBUG for maximum detail)
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(log_format))
    handlers.append(file_handler)

    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)
    logging.debug("Logging initialised. Log file: %s", log_file)


def _load_window(path: Path | str) -> Tuple[np.ndarray, Optional[int]]:
    """Load a sample window from ``.npy`` or JSON.

    JSON may be a plain list of samples or ``{"x": [...], "p": order}``.

    Returns:
        The samples and the order stored in the file, if any.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Sample file not found: {path}")

    if path.suffix.lower() == ".npy":
        return np.load(path).astype(np.float64).ravel(), None
    if path.suffix.lower() == ".json":
        data = json.loads(path.read_text())
        if isinstance(data, dict):
            return np.asarray(data["x"], dtype=np.float64), data.get("p")
        return np.asarray(data, dtype=np.float64), None

    raise ValueError(f"Unsupported sample file type: {path.suffix}")


# -----------------------------------------------------------------------------
# Sub-command implementations
# -----------------------------------------------------------------------------

def _cmd_lpc(args: argparse.Namespace) -> int:
    """Entry point for the ``lpc`` sub-command."""
    from lpc_markov.core.lpc import lpc_analyze

    logger = logging.getLogger(__name__)
    try:
        samples, stored_order = _load_window(args.file)
        order = args.order if args.order is not None else stored_order
        if order is None:
            logger.error("No prediction order given and none stored in %s", args.file)
            return 1
        result = lpc_analyze(samples, int(order), method=args.method)
    except (OSError, KeyError, ValueError) as exc:
        logger.error("LPC analysis failed: %s", exc)
        return 1

    print(f"# status={result.status.name} order_reached={result.order_reached} "
          f"residual_energy={result.residual_energy:e}")
    for name, values in (("r", result.r), ("rc", result.rc), ("a", result.a)):
        print(f"{name:>2} = " + ", ".join(f"{v:e}" for v in values))
    return 0 if result.ok else 2


def _cmd_learn(args: argparse.Namespace) -> int:
    """Entry point for the ``learn`` sub-command."""
    from lpc_markov.core.markov_model import train_markov_model
    from lpc_markov.data.sequence import load_sequences

    logger = logging.getLogger(__name__)
    try:
        sequences = load_sequences(args.sequences)
        model = train_markov_model(sequences)
        Path(args.output).parent.mkdir(parents=True, exist_ok=True)
        model.save(args.output)
    except (OSError, ValueError) as exc:
        logger.error("Training failed: %s", exc)
        return 1

    logger.info("Trained '%s' (K=%d) from %d sequences -> %s",
                model.class_name, model.codebook_size, len(sequences), args.output)
    return 0


def _cmd_classify(args: argparse.Namespace) -> int:
    """Entry point for the ``classify`` sub-command."""
    from lpc_markov.core.classification import ClassificationEngine, ConsoleObserver
    from lpc_markov.core.markov_model import load_model
    from lpc_markov.data.sequence import load_sequence

    logger = logging.getLogger(__name__)
    try:
        models = [load_model(path) for path in args.models]
        names = [m.class_name for m in models]
        engine = ClassificationEngine(
            names, observer=ConsoleObserver(names, show_ranked=args.show_ranked))
        for path in args.sequences:
            engine.classify(models, [load_sequence(path)], label_fn=lambda _s, p=path: str(p))
        sys.stdout.write("\n")
        summary = engine.report_results(summary_path=args.summary)
    except (OSError, ValueError) as exc:
        logger.error("Classification failed: %s", exc)
        return 1

    if summary is None:
        logger.warning("No sequence matched a model class, nothing classified")
        return 2
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    """Entry point for the ``show`` sub-command."""
    from lpc_markov.core.markov_model import load_model

    logger = logging.getLogger(__name__)
    try:
        model = load_model(args.model)
    except (OSError, ValueError) as exc:
        logger.error("Could not load model: %s", exc)
        return 1
    print(model.show())
    return 0


def _cmd_run(args: argparse.Namespace) -> int:
    """Entry point for the ``run`` sub-command."""
    from lpc_markov.pipeline import run_pipeline

    logger = logging.getLogger(__name__)
    logger.info("Starting pipeline run - config: %s", args.config)

    success = run_pipeline(args.config)
    logger.info("Pipeline finished - success=%s", success)
    return 0 if success else 2


def _cmd_env(args: argparse.Namespace) -> int:
    """Entry point for the ``env`` sub-command."""
    from lpc_markov.config.validate import check_environment, format_environment_info

    logger = logging.getLogger(__name__)
    print(format_environment_info())
    try:
        check_environment()
    except RuntimeError as exc:
        logger.error("%s", exc)
        return 1
    return 0


# -----------------------------------------------------------------------------
# Argument parsing
# -----------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lpc-markov",
        description="LPC analysis and Markov-chain sequence classification",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging output.",
    )

    sub_parsers = parser.add_subparsers(dest="command", required=True)

    # lpc ---------------------------------------------------------------------
    lpc_parser = sub_parsers.add_parser("lpc", help="Linear prediction of one sample window")
    lpc_parser.add_argument("file", type=str, help="Samples as .npy or JSON.")
    lpc_parser.add_argument("--order", "-p", type=int, default=None,
                            help="Prediction order (overrides the file's 'p').")
    lpc_parser.add_argument("--method", choices=["loop", "reduce"], default="loop",
                            help="Recursion implementation.")
    lpc_parser.set_defaults(func=_cmd_lpc)

    # learn -------------------------------------------------------------------
    learn_parser = sub_parsers.add_parser("learn", help="Train one class model")
    learn_parser.add_argument("sequences", nargs="+", help="Sequence JSON files of one class.")
    learn_parser.add_argument("--output", "-o", required=True, help="Model JSON destination.")
    learn_parser.set_defaults(func=_cmd_learn)

    # classify ----------------------------------------------------------------
    classify_parser = sub_parsers.add_parser("classify", help="Classify sequences and report")
    classify_parser.add_argument("--models", nargs="+", required=True,
                                 help="Model JSON files, one per class.")
    classify_parser.add_argument("--sequences", nargs="+", required=True,
                                 help="Test sequence JSON files.")
    classify_parser.add_argument("--show-ranked", action="store_true",
                                 help="Print candidate ranking for misclassified cases.")
    classify_parser.add_argument("--summary", type=str, default="mm-classification.json",
                                 help="Summary JSON destination.")
    classify_parser.set_defaults(func=_cmd_classify)

    # show --------------------------------------------------------------------
    show_parser = sub_parsers.add_parser("show", help="Print model parameters")
    show_parser.add_argument("model", type=str, help="Model JSON file.")
    show_parser.set_defaults(func=_cmd_show)

    # run ---------------------------------------------------------------------
    run_parser = sub_parsers.add_parser("run", help="Execute full classification pipeline")
    run_parser.add_argument(
        "--config",
        required=True,
        type=str,
        help="Path to YAML/JSON pipeline configuration file.",
    )
    run_parser.set_defaults(func=_cmd_run)

    # env ---------------------------------------------------------------------
    env_parser = sub_parsers.add_parser("env", help="Check installed dependencies")
    env_parser.set_defaults(func=_cmd_env)

    return parser


# -----------------------------------------------------------------------------
# Main entry point
# -----------------------------------------------------------------------------

def main(argv: Optional[list] = None) -> None:  # noqa: D401
    """CLI entry point. Parse ``argv`` and dispatch to sub-command implementation."""

    parser = _build_parser()
    args = parser.parse_args(argv)

    # Logging must be set up *after* parsing to respect --verbose flag.
    _setup_logging(verbose=args.verbose)

    exit_code = args.func(args)  # type: ignore[attr-defined]
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
