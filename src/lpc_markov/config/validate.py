"""Environment validation for LPC Markov dependencies."""

import sys
import warnings
from importlib import import_module
from typing import Dict, Optional

from packaging import version

# (import name, minimum version)
CORE_DEPENDENCIES = {
    'numpy': '1.24',
    'scipy': '1.10',
    'pandas': '1.5',
}

OPTIONAL_DEPENDENCIES = {
    'matplotlib': '3.5',
    'seaborn': '0.12',
    'yaml': '6.0',
    'tqdm': '4.60',
}


def _installed_version(module_name: str) -> str:
    module = import_module(module_name)
    return getattr(module, '__version__', '0')


def check_environment(min_versions: Optional[Dict[str, str]] = None) -> None:
    """Check that the environment meets minimum dependency requirements.

    Parameters
    ----------
    min_versions : Dict[str, str], optional
        Overrides for the core minimum versions

    Raises
    ------
    RuntimeError
        If a core dependency is missing or too old

    Examples
    --------
    >>> check_environment()
    >>> check_environment({'numpy': '1.25'})
    """
    required = dict(CORE_DEPENDENCIES)
    required.update(min_versions or {})

    errors = []
    if sys.version_info < (3, 9):
        errors.append(f"Python 3.9+ required, found {sys.version_info.major}.{sys.version_info.minor}")

    for name, minimum in required.items():
        try:
            found = _installed_version(name)
        except ImportError:
            errors.append(f"{name} not installed")
            continue
        if version.parse(found) < version.parse(minimum):
            errors.append(f"{name} {minimum}+ required, found {found}")

    optional_warnings = []
    for name, minimum in OPTIONAL_DEPENDENCIES.items():
        try:
            found = _installed_version(name)
        except ImportError:
            optional_warnings.append(f"{name} not found")
            continue
        if version.parse(found) < version.parse(minimum):
            optional_warnings.append(f"{name} {minimum}+ recommended, found {found}")

    if errors:
        error_msg = "Environment validation failed:\n" + "\n".join(f"  - {err}" for err in errors)
        if optional_warnings:
            error_msg += "\n\nWarnings:\n" + "\n".join(f"  - {warn}" for warn in optional_warnings)
        raise RuntimeError(error_msg)

    if optional_warnings:
        warning_msg = "Environment warnings:\n" + "\n".join(f"  - {warn}" for warn in optional_warnings)
        warnings.warn(warning_msg, UserWarning)


def get_dependency_versions() -> Dict[str, str]:
    """Map package names to installed version strings."""
    versions = {
        'python': f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
    }
    for name in list(CORE_DEPENDENCIES) + list(OPTIONAL_DEPENDENCIES) + ['packaging']:
        try:
            versions[name] = _installed_version(name)
        except ImportError:
            versions[name] = 'not installed'
    return versions


def format_environment_info() -> str:
    """Human-readable dependency report."""
    versions = get_dependency_versions()
    lines = ["LPC Markov - Environment Information", "=" * 50]
    for pkg, ver in versions.items():
        lines.append(f"  {pkg:12}: {ver}")
    lines.append(f"  {'platform':12}: {sys.platform}")
    return "\n".join(lines)
