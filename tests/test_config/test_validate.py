"""Tests for environment validation functionality.

Tests the dependency checks and environment report.
"""

import pytest
import sys
import warnings
from unittest.mock import patch

from lpc_markov.config.validate import (
    CORE_DEPENDENCIES,
    OPTIONAL_DEPENDENCIES,
    check_environment,
    format_environment_info,
    get_dependency_versions
)


def _fake_versions(overrides):
    def _version(name):
        if overrides.get(name) is ImportError:
            raise ImportError(name)
        return overrides.get(name, "99.0")
    return _version


class TestEnvironmentChecking:
    """Test suite for check_environment."""

    def test_check_environment_success(self):
        """Test successful validation of the current environment."""
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            check_environment()

    @patch('lpc_markov.config.validate._installed_version')
    def test_old_core_dependency(self, mock_version):
        """Test that an outdated core package fails validation."""
        mock_version.side_effect = _fake_versions({'numpy': '1.20.0'})

        with pytest.raises(RuntimeError) as exc_info:
            check_environment()

        assert "numpy 1.24+ required, found 1.20.0" in str(exc_info.value)

    @patch('lpc_markov.config.validate._installed_version')
    def test_custom_minimum(self, mock_version):
        """Test overriding a minimum version."""
        mock_version.side_effect = _fake_versions({'scipy': '1.11.0'})

        with pytest.raises(RuntimeError, match="scipy 1.12\\+ required"):
            check_environment({'scipy': '1.12'})

    @patch('lpc_markov.config.validate._installed_version')
    def test_missing_core_dependency(self, mock_version):
        """Test that a missing core package fails validation."""
        mock_version.side_effect = _fake_versions({'pandas': ImportError})

        with pytest.raises(RuntimeError, match="pandas not installed"):
            check_environment()

    @patch('lpc_markov.config.validate._installed_version')
    def test_missing_optional_dependency_warns(self, mock_version):
        """Test that optional packages only produce a warning."""
        mock_version.side_effect = _fake_versions({'seaborn': ImportError})

        with pytest.warns(UserWarning, match="seaborn not found"):
            check_environment()


class TestDependencyVersions:
    """Test suite for version reporting."""

    def test_versions_cover_dependencies(self):
        """Test that every tracked package is reported."""
        versions = get_dependency_versions()

        assert versions['python'].startswith(f"{sys.version_info.major}.")
        for name in list(CORE_DEPENDENCIES) + list(OPTIONAL_DEPENDENCIES):
            assert name in versions

    @patch('lpc_markov.config.validate._installed_version')
    def test_missing_reported(self, mock_version):
        """Test that missing packages are labelled."""
        mock_version.side_effect = _fake_versions({'tqdm': ImportError})
        assert get_dependency_versions()['tqdm'] == 'not installed'

    def test_format_environment_info(self):
        """Test the human-readable report."""
        info = format_environment_info()

        assert info.startswith("LPC Markov - Environment Information")
        assert "numpy" in info
        assert "platform" in info
