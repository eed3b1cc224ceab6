"""Packaging regression tests.

Tests that verify the installed package structure and behavior.
"""

from pathlib import Path


def test_source_layout():
    """The package lives under src/ with its kernel and _internal subpackages."""
    here = Path(__file__).resolve().parent
    repo_root = here.parent
    src_pkg = repo_root / "src" / "omodparse"

    assert src_pkg.exists(), "omodparse package should exist in src/"
    assert (src_pkg / "kernel").exists(), "omodparse.kernel should exist in src/"
    assert (src_pkg / "_internal" / "io").exists(), "omodparse._internal.io should exist"


def test_import_boundary():
    import omodparse
    import omodparse.kernel.builder  # noqa: F401
    import omodparse._internal.io.archive  # noqa: F401

    # Check version: in dev mode it's "dev", in installed mode it's "1.0.0"
    assert omodparse.__version__ in ("1.0.0", "dev")


def test_library_logging_is_silent_by_default():
    import logging

    import omodparse

    handlers = logging.getLogger(omodparse.__name__).handlers
    assert any(isinstance(h, logging.NullHandler) for h in handlers)
