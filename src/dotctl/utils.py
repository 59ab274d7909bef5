"""Shared utilities for dotctl."""

import importlib.metadata
import logging
import sys


def setup_logging(verbose: bool = False) -> None:
    """Configure root logging for the CLI.

    Only warnings and errors are logged by default since user-facing
    progress goes through the output helpers.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def get_version() -> str:
    """Return the installed version of dotctl."""
    try:
        return importlib.metadata.version("dotctl")
    except importlib.metadata.PackageNotFoundError:
        return "(development)"
