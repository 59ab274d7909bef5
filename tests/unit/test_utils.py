"""Tests for utility functions."""

import importlib.metadata
from unittest.mock import patch

from dotctl.utils import get_version, setup_logging


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_verbose_mode_runs_without_error(self):
        """Verbose mode runs without error."""
        # basicConfig only works once, so we just verify no exception
        setup_logging(verbose=True)

    def test_non_verbose_mode_runs_without_error(self):
        setup_logging(verbose=False)


class TestGetVersion:
    """Tests for get_version function."""

    def test_returns_string(self):
        version = get_version()

        assert isinstance(version, str)
        assert len(version) > 0

    def test_returns_development_when_not_installed(self):
        """Returns '(development)' when package not found."""
        with patch("dotctl.utils.importlib.metadata.version") as mock:
            mock.side_effect = importlib.metadata.PackageNotFoundError()
            assert get_version() == "(development)"
