"""Pytest configuration and shared fixtures.

No sys.path hacks - tests should import from installed omodparse package.
"""

import os
import zipfile
from pathlib import Path
from typing import Dict, Optional

import pytest


def pytest_addoption(parser):
    """Add gated perf test option."""
    parser.addoption(
        "--run-perf",
        action="store_true",
        default=False,
        help="Run performance sentinel benchmarks (gated)."
    )


def pytest_collection_modifyitems(config, items):
    """Skip perf-marked tests unless --run-perf is set."""
    if config.getoption("--run-perf"):
        return
    skip_perf = pytest.mark.skip(reason="perf tests gated; pass --run-perf")
    for item in items:
        if "perf" in item.keywords:
            item.add_marker(skip_perf)


def pytest_sessionfinish(session, exitstatus):
    """Best-effort cleanup for basetemp on Windows without patching pytest internals."""
    if os.name != "nt":
        return
    basetemp = getattr(session.config.option, "basetemp", None)
    if not basetemp:
        return
    basetemp_path = Path(basetemp)
    if not basetemp_path.exists():
        return
    try:
        import shutil
        shutil.rmtree(basetemp_path)
    except (PermissionError, OSError):
        # If cleanup fails, let it surface as a warning rather than masking errors.
        import warnings
        warnings.warn(f"Could not remove basetemp: {basetemp_path}")


def render_config(
    body: str = "",
    config_version: str = "1.6",
    name: str = "Basic",
    module_id: str = "basicmodule",
    package: str = "org.openmrs.module.basic",
) -> str:
    """Render a minimal config.xml with ``body`` appended inside <module>."""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<module configVersion="{config_version}">\n'
        f"  <id>{module_id}</id>\n"
        f"  <name>{name}</name>\n"
        f"  <package>{package}</package>\n"
        "  <version>1.0.0</version>\n"
        "  <author>OpenMRS</author>\n"
        "  <description>A basic module</description>\n"
        f"{body}"
        "</module>\n"
    )


@pytest.fixture
def config_xml():
    """Factory for config.xml text; see ``render_config``."""
    return render_config


@pytest.fixture
def omod_factory(tmp_path):
    """Factory that writes a module archive under tmp_path.

    ``config`` is written as config.xml unless it is None; ``extra_entries``
    maps archive member names to text content.
    """
    def _make(
        config: Optional[str] = None,
        filename: str = "basic.omod",
        extra_entries: Optional[Dict[str, str]] = None,
    ) -> Path:
        path = tmp_path / filename
        with zipfile.ZipFile(path, "w") as archive:
            if config is not None:
                archive.writestr("config.xml", config)
            for member, content in (extra_entries or {}).items():
                archive.writestr(member, content)
        return path

    return _make
